"""
Scenario language for driving the reducer: grammar, AST, parser and runner.
"""

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
from .parser import ScenarioError, parse, parse_file
from .runner import ERROR_KINDS, ScenarioResult, ScenarioRunner

__all__ = [
    # AST
    "Dispatch",
    "Drain",
    "ExpectError",
    "ExpectValue",
    "Flatten",
    "Reduce",
    "ReduceKind",
    "Scenario",
    "Snapshot",
    # Parsing
    "ScenarioError",
    "parse",
    "parse_file",
    # Running
    "ERROR_KINDS",
    "ScenarioResult",
    "ScenarioRunner",
]
