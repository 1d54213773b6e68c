"""
Lark-based parser for scenario files.

Uses the grammar in scenario.lark to produce the AST nodes in ast.py.
"""

from pathlib import Path
from typing import Optional

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from .ast import (
    Dispatch,
    Drain,
    ExpectError,
    ExpectValue,
    Flatten,
    Reduce,
    ReduceKind,
    Scenario,
    Snapshot,
)


GRAMMAR_PATH = Path(__file__).parent / "scenario.lark"


class ScenarioError(Exception):
    """A scenario failed to parse or one of its expectations failed."""

    def __init__(self, message: str, line: int = 0):
        self.line = line
        if line:
            message = f"line {line}: {message}"
        super().__init__(message)


@v_args(inline=True, meta=True)
class ScenarioTransformer(Transformer):
    """Transform the Lark parse tree into scenario AST nodes."""

    def start(self, meta, *statements):
        return Scenario(statements=list(statements))

    def dispatch(self, meta, *values):
        return Dispatch(values=[int(v) for v in values], batch=False, line=meta.line)

    def batch(self, meta, *values):
        return Dispatch(values=[int(v) for v in values], batch=True, line=meta.line)

    def reduce_bounded(self, meta):
        return Reduce(kind=ReduceKind.BOUNDED, line=meta.line)

    def reduce_custom(self, meta):
        return Reduce(kind=ReduceKind.CUSTOM, line=meta.line)

    def reduce_snapshot(self, meta):
        return Reduce(kind=ReduceKind.SNAPSHOT, line=meta.line)

    def snapshot(self, meta):
        return Snapshot(line=meta.line)

    def flatten(self, meta):
        return Flatten(line=meta.line)

    def drain(self, meta):
        return Drain(all=False, line=meta.line)

    def drain_all(self, meta):
        return Drain(all=True, line=meta.line)

    def expect_value(self, meta, name, value):
        if value.type == "INT":
            value = int(value)
        else:
            value = str(value)
        return ExpectValue(name=str(name), value=value, line=meta.line)

    def expect_error(self, meta, error, step):
        return ExpectError(error=str(error), step=step, line=meta.line)


# Create parser instance
_parser = None


def get_parser() -> Lark:
    """Get or create the Lark parser instance."""
    global _parser
    if _parser is None:
        with open(GRAMMAR_PATH) as f:
            grammar = f.read()
        _parser = Lark(
            grammar,
            parser='earley',
            propagate_positions=True,
        )
    return _parser


def parse(source: str, name: str = "") -> Scenario:
    """Parse scenario source into a Scenario."""
    if not source.endswith("\n"):
        source += "\n"
    try:
        tree = get_parser().parse(source)
        scenario = ScenarioTransformer().transform(tree)
    except UnexpectedInput as e:
        raise ScenarioError(f"syntax error at column {e.column}", line=max(e.line, 0)) from e
    except VisitError as e:
        raise ScenarioError(str(e.orig_exc)) from e
    scenario.name = name
    return scenario


def parse_file(path, name: Optional[str] = None) -> Scenario:
    """Parse a scenario file."""
    path = Path(path)
    with open(path) as f:
        return parse(f.read(), name=name or path.stem)
