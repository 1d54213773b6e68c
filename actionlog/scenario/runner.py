"""
Runs parsed scenarios against a ReducerSimulation.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .. import errors
from ..config import ReducerConfig
from ..transactions.simulation_harness import ReducerSimulation
from ..transactions.state import Phase
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
    Step,
)
from .parser import ScenarioError


logger = logging.getLogger(__name__)


ERROR_KINDS: Dict[str, type] = {
    cls.__name__: cls
    for cls in vars(errors).values()
    if isinstance(cls, type) and issubclass(cls, errors.ReducerError)
}


@dataclass
class ScenarioResult:
    name: str
    steps_run: int = 0
    expectations_checked: int = 0
    final_state: Dict[str, int] = field(default_factory=dict)


class ScenarioRunner:
    """Executes scenario statements in order; stops at the first failure."""

    def __init__(self, simulation: Optional[ReducerSimulation] = None,
                 config: Optional[ReducerConfig] = None):
        self.simulation = simulation or ReducerSimulation(config)

    # Values readable from ``expect``
    def _observe(self, name: str, line: int):
        sim = self.simulation
        observers: Dict[str, Callable[[], object]] = {
            "total_sum": lambda: int(sim.state.total_sum),
            "snapshot": lambda: int(sim.state.snapshot),
            "flatten_snapshot": lambda: int(sim.state.flatten_snapshot),
            "last_processed_action_state": lambda: int(sim.state.last_processed_action_state),
            "phase": lambda: sim.state.phase.name,
            "drains": lambda: sim.drain_count,
            "batches": lambda: sim.ledger.batch_count,
        }
        if name not in observers:
            raise ScenarioError(f"unknown value {name!r}", line=line)
        return observers[name]()

    def _resolve(self, value, line: int):
        if isinstance(value, int):
            return value
        if value == "head":
            return int(self.simulation.ledger.head)
        if value in Phase.__members__:
            return value
        raise ScenarioError(f"unknown symbol {value!r}", line=line)

    def run_step(self, step: Step):
        sim = self.simulation
        if isinstance(step, Dispatch):
            if step.batch:
                sim.dispatch_batch(step.values)
            else:
                sim.dispatch(step.values)
        elif isinstance(step, Reduce):
            if step.kind is ReduceKind.BOUNDED:
                sim.reduce_bounded()
            elif step.kind is ReduceKind.CUSTOM:
                sim.custom_reduce()
            else:
                sim.reduce_snapshot()
        elif isinstance(step, Snapshot):
            sim.snapshot()
        elif isinstance(step, Flatten):
            sim.flatten()
        elif isinstance(step, Drain):
            if step.all:
                sim.drain_all()
            else:
                sim.drain()
        else:
            raise ScenarioError(f"unsupported step {type(step).__name__}")

    def run(self, scenario: Scenario) -> ScenarioResult:
        result = ScenarioResult(name=scenario.name)
        for statement in scenario.statements:
            if isinstance(statement, ExpectValue):
                actual = self._observe(statement.name, statement.line)
                expected = self._resolve(statement.value, statement.line)
                if actual != expected:
                    raise ScenarioError(
                        f"expected {statement.name} == {statement.value}, got {actual}",
                        line=statement.line,
                    )
                result.expectations_checked += 1
            elif isinstance(statement, ExpectError):
                kind = ERROR_KINDS.get(statement.error)
                if kind is None:
                    raise ScenarioError(f"unknown error kind {statement.error!r}",
                                        line=statement.line)
                try:
                    self.run_step(statement.step)
                except kind as e:
                    logger.debug("line %d: got expected %s: %s", statement.line, statement.error, e)
                except errors.ReducerError as e:
                    raise ScenarioError(f"expected {statement.error}, got {type(e).__name__}: {e}",
                                        line=statement.line) from e
                else:
                    raise ScenarioError(f"expected {statement.error}, step succeeded",
                                        line=statement.line)
                result.steps_run += 1
                result.expectations_checked += 1
            else:
                try:
                    self.run_step(statement)
                except errors.ReducerError as e:
                    raise ScenarioError(f"{type(e).__name__}: {e}", line=statement.line) from e
                result.steps_run += 1

        result.final_state = self.simulation.state.to_dict()
        return result
