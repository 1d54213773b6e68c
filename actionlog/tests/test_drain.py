"""
End-to-end tests for the three reduction paths and the drain protocol.
"""

import pytest

from actionlog.chain import DUMMY_LINK, Field, FlatActionList
from actionlog.config import ReducerConfig
from actionlog.errors import AlreadyInProgress, ReducerError
from actionlog.transactions import (
    Phase,
    ReducerSimulation,
    batches_needed,
    drain_batches,
    next_drain_batch,
)


def make_simulation(**overrides):
    values = {"proof_key": "drain-test-key", "max_actions_per_batch": 8}
    values.update(overrides)
    return ReducerSimulation(ReducerConfig(**values))


# =============================================================================
# Scenarios
# =============================================================================

class TestScenarios:
    """The reference dispatch / reduce scenarios."""

    def test_bounded_scenario(self, simulation):
        """Five dispatches, one bounded fold, then a no-op fold."""
        simulation.dispatch([1, 2, 3, 4, 5])
        assert simulation.state.total_sum == Field(0)
        simulation.reduce_bounded()
        assert simulation.state.total_sum == Field(15)
        simulation.reduce_bounded()
        assert simulation.state.total_sum == Field(15)

    def test_custom_scenario(self, simulation):
        """Ten dispatches folded through one certificate."""
        simulation.dispatch([1, 2, 3, 4, 5])
        simulation.dispatch([1, 2, 3, 4, 5])
        simulation.custom_reduce()
        assert simulation.state.total_sum == Field(30)

    def test_snapshot_scenario(self, simulation):
        """Seven actions drained in two batches of five."""
        simulation.dispatch([1, 2, 3, 4, 5, 6, 7])
        frozen_head = simulation.ledger.head
        simulation.snapshot()
        simulation.flatten()

        assert simulation.drain() is False
        assert simulation.state.total_sum == Field(25)
        assert simulation.drain() is True
        assert simulation.state.total_sum == Field(28)
        assert simulation.state.snapshot == Field(0)
        assert simulation.state.flatten_snapshot == Field(0)
        assert simulation.state.last_processed_action_state == frozen_head

    @pytest.mark.parametrize("reduce", ["reduce_bounded", "custom_reduce", "reduce_snapshot"])
    def test_repeated_rounds(self, simulation, reduce):
        """Each reducer counts every action exactly once across rounds."""
        simulation.dispatch([1, 2, 3, 4, 5])
        getattr(simulation, reduce)()
        assert simulation.state.total_sum == Field(15)

        getattr(simulation, reduce)()
        assert simulation.state.total_sum == Field(15)

        simulation.dispatch([1, 2, 3, 4, 5])
        getattr(simulation, reduce)()
        assert simulation.state.total_sum == Field(30)
        assert simulation.state.last_processed_action_state == simulation.ledger.head


# =============================================================================
# Reducer Equivalence
# =============================================================================

class TestEquivalence:
    """All reducers agree for any batching."""

    @pytest.mark.parametrize("batches", [
        [[1]],
        [[1, 2, 3, 4, 5]],
        [[1], [2, 3], [4, 5, 6]],
        [[9, 9], [1], [1], [7, 3, 2, 8]],
        [[i] for i in range(1, 13)],
    ])
    def test_same_total(self, batches):
        """Bounded, custom and snapshot paths give the same total."""
        totals = []
        for reduce in ("reduce_bounded", "custom_reduce", "reduce_snapshot"):
            simulation = make_simulation()
            for batch in batches:
                simulation.dispatch_batch(batch)
            getattr(simulation, reduce)()
            totals.append(simulation.state.total_sum)
            assert simulation.state.last_processed_action_state == simulation.ledger.head

        assert totals[0] == totals[1] == totals[2] == Field(sum(sum(b) for b in batches))

    def test_mixed_reducers(self):
        """Switching reducers between rounds keeps the total exact."""
        simulation = make_simulation()
        simulation.dispatch([1, 2])
        simulation.reduce_bounded()
        simulation.dispatch_batch([3, 4])
        simulation.custom_reduce()
        simulation.dispatch([5, 6, 7])
        simulation.reduce_snapshot()
        simulation.dispatch([8])
        simulation.reduce_bounded()
        assert simulation.state.total_sum == Field(36)


# =============================================================================
# Drain Completeness
# =============================================================================

class TestDrainCompleteness:
    """ceil(L / B) drain batches consume a list of length L."""

    @pytest.mark.parametrize("batch_size", [1, 2, 5])
    @pytest.mark.parametrize("length", [0, 1, 4, 5, 6, 10, 11])
    def test_drain_count(self, length, batch_size):
        """The cycle finishes after exactly ceil(L / B) batches."""
        simulation = make_simulation(batch_size=batch_size)
        simulation.dispatch(list(range(1, length + 1)))
        frozen_head = simulation.ledger.head

        sent = simulation.reduce_snapshot()

        assert sent == batches_needed(length, batch_size)
        assert simulation.state.phase is Phase.IDLE
        assert simulation.state.snapshot == Field(0)
        assert simulation.state.flatten_snapshot == Field(0)
        assert simulation.state.last_processed_action_state == frozen_head
        assert simulation.state.total_sum == Field(length * (length + 1) // 2)

    def test_batches_needed(self):
        """Ceiling division."""
        assert batches_needed(0, 5) == 0
        assert batches_needed(5, 5) == 1
        assert batches_needed(7, 5) == 2

    def test_drain_batches_helper(self):
        """drain_batches pads the last batch and then stops."""
        flat = FlatActionList()
        for action in range(1, 8):
            flat.push(action)
        batches = list(drain_batches(flat, 5))
        assert len(batches) == 2
        assert [int(link.action) for link in batches[0]] == [7, 6, 5, 4, 3]
        assert batches[1][2:] == [DUMMY_LINK] * 3
        assert list(drain_batches(flat, 5)) == []


# =============================================================================
# Padding and Locks
# =============================================================================

class TestPaddingAndLocks:
    """Dummy padding is neutral and the locks are exclusive."""

    def test_padding_neutral(self):
        """Extra all-dummy batches never change the total."""
        simulation = make_simulation()
        simulation.dispatch([4, 5, 6, 7, 8, 9])
        simulation.snapshot()
        simulation.flatten()
        simulation.drain()
        before = simulation.contract.read_state()
        simulation.contract.snapshot_reduce([DUMMY_LINK] * 5)
        assert simulation.state == before
        simulation.drain()
        assert simulation.state.total_sum == Field(39)

    def test_padding_short_list(self):
        """A list shorter than one batch is drained with padding."""
        flat = FlatActionList()
        flat.push(3)
        batch = next_drain_batch(flat, 5)
        assert batch[0].action == Field(3)
        assert all(link.is_dummy for link in batch[1:])

    def test_snapshot_lock(self, simulation):
        """No new snapshot while one is being drained."""
        simulation.dispatch([1, 2, 3, 4, 5, 6])
        simulation.snapshot()
        with pytest.raises(AlreadyInProgress):
            simulation.snapshot()
        simulation.flatten()
        simulation.drain()
        with pytest.raises(AlreadyInProgress):
            simulation.snapshot()
        simulation.drain_all()
        simulation.snapshot()
        assert simulation.state.phase is Phase.SNAPSHOTTED

    def test_flatten_lock(self, simulation):
        """No second flatten while a flattened list is held."""
        simulation.dispatch([1, 2, 3, 4, 5, 6])
        simulation.snapshot()
        simulation.flatten()
        with pytest.raises(AlreadyInProgress):
            simulation.flatten()

    def test_custom_reduce_blocked_during_drain(self, simulation):
        """Actions inside a drain cycle cannot be counted twice."""
        simulation.dispatch([1, 2, 3, 4, 5, 6])
        simulation.snapshot()
        simulation.flatten()
        with pytest.raises(AlreadyInProgress):
            simulation.custom_reduce()
        simulation.drain_all()
        assert simulation.state.total_sum == Field(21)

    def test_failed_drain_keeps_local_list(self, simulation):
        """A rejected drain batch is not lost on the client side."""
        simulation.dispatch([1, 2, 3, 4, 5, 6])
        simulation.snapshot()
        simulation.flatten()
        remaining = len(simulation.flat_list)

        # Another party drains first, so the local list is behind the contract
        simulation.contract.snapshot_reduce(
            next_drain_batch(simulation.flat_list.copy(), simulation.config.batch_size)
        )
        with pytest.raises(ReducerError):
            simulation.drain()
        assert len(simulation.flat_list) == remaining

    def test_drain_needs_flatten(self, simulation):
        """The harness refuses to drain without a flattened list."""
        simulation.dispatch([1])
        simulation.snapshot()
        with pytest.raises(RuntimeError):
            simulation.drain()
