"""
AST node definitions for reducer scenarios.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Union


class ReduceKind(Enum):
    """Which reducer a ``reduce`` step uses."""
    BOUNDED = auto()    # in-transaction fold
    CUSTOM = auto()     # recursive certificate
    SNAPSHOT = auto()   # snapshot, flatten, drain all


@dataclass
class Dispatch:
    """Submit actions; one transaction each, or one for all when ``batch``."""
    values: List[int]
    batch: bool = False
    line: int = 0


@dataclass
class Reduce:
    kind: ReduceKind
    line: int = 0


@dataclass
class Snapshot:
    line: int = 0


@dataclass
class Flatten:
    line: int = 0


@dataclass
class Drain:
    """Submit one drain batch, or keep draining until idle."""
    all: bool = False
    line: int = 0


Step = Union[Dispatch, Reduce, Snapshot, Flatten, Drain]


@dataclass
class ExpectValue:
    """``expect <name> == <value>``; value is an int or a symbolic name."""
    name: str
    value: Union[int, str]
    line: int = 0


@dataclass
class ExpectError:
    """``expect error <Kind> <step>``: the step must fail with that error kind."""
    error: str
    step: Step
    line: int = 0


Statement = Union[Step, ExpectValue, ExpectError]


@dataclass
class Scenario:
    statements: List[Statement] = field(default_factory=list)
    name: str = ""
