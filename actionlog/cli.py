"""
Command-line entry point.

    actionlog run scenarios/snapshot_drain.scn --config reducer.yaml -v
    actionlog check scenarios/*.scn
"""

import argparse
import sys
from pathlib import Path

from .config import ConfigError, ReducerConfig, load_config
from .errors import ReducerError
from .log import setup_logging
from .scenario import ScenarioError, ScenarioRunner, parse_file


def cmd_check(args) -> int:
    failures = 0
    for path in args.scenarios:
        try:
            scenario = parse_file(path)
        except (OSError, ScenarioError) as e:
            print(f"{path}: error: {e}")
            failures += 1
            continue
        print(f"{path}: ok ({len(scenario.statements)} statement(s))")
    return 1 if failures else 0


def cmd_run(args) -> int:
    try:
        config = load_config(args.config) if args.config else ReducerConfig()
    except ConfigError as e:
        print(f"{args.config}: error: {e}")
        return 1

    level = "DEBUG" if args.verbose else config.log_level
    setup_logging(level, log_file=args.log_file, json_format=args.json_logs)

    failures = 0
    for path in args.scenarios:
        try:
            scenario = parse_file(path)
            result = ScenarioRunner(config=config).run(scenario)
        except (OSError, ScenarioError, ReducerError, RuntimeError) as e:
            print(f"{path}: FAILED: {e}")
            failures += 1
            continue
        print(f"{path}: passed ({result.steps_run} step(s), "
              f"{result.expectations_checked} expectation(s), "
              f"total_sum={result.final_state['total_sum']})")
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="actionlog",
        description="Run action-log reducer scenarios."
    )
    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="Run scenario files")
    run.add_argument("scenarios", nargs="+", type=Path, help="Scenario files to run")
    run.add_argument("--config", type=Path, help="YAML reducer configuration")
    run.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    run.add_argument("--log-file", help="Also write logs to this file")
    run.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    run.set_defaults(func=cmd_run)

    check = subparsers.add_parser("check", help="Parse scenario files without running them")
    check.add_argument("scenarios", nargs="+", type=Path, help="Scenario files to check")
    check.set_defaults(func=cmd_check)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
