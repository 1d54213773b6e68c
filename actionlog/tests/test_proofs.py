"""
Unit tests for certificates, the reduce and flatten programs, and builders.
"""

from dataclasses import replace

import pytest

from actionlog.chain import (
    EMPTY_ACTION_LIST_HASH,
    EMPTY_FLAT_LIST_HASH,
    INITIAL_ACTION_STATE,
    Field,
    FlatActionList,
)
from actionlog.errors import CertificateInvalid
from actionlog.proofs import (
    FLAT_PROGRAM,
    REDUCE_PROGRAM,
    Certificate,
    FlatChainBuilder,
    ProofBackend,
    ReduceChainBuilder,
    add,
    build_flat_certificate,
    build_reduce_certificate,
    cut_actions,
    flat_add,
    flat_cut_actions,
    flat_init,
    init,
)


# =============================================================================
# Backend
# =============================================================================

class TestProofBackend:
    """Tests for certificate issuance and verification."""

    def test_issued_certificate_verifies(self, backend):
        """A freshly issued certificate passes verification."""
        certificate = init(backend, 0, INITIAL_ACTION_STATE)
        assert backend.verify(certificate)
        assert certificate.program == REDUCE_PROGRAM

    def test_tampered_claim_fails(self, backend):
        """Changing the claim invalidates the tag."""
        certificate = init(backend, 0, INITIAL_ACTION_STATE)
        forged = replace(certificate, claim=replace(certificate.claim, total=Field(1000)))
        assert not backend.verify(forged)
        with pytest.raises(CertificateInvalid):
            backend.require_valid(forged, REDUCE_PROGRAM)

    def test_other_key_fails(self, backend):
        """A certificate from a different backend key is rejected."""
        other = ProofBackend("another-key")
        certificate = init(other, 0, INITIAL_ACTION_STATE)
        assert not backend.verify(certificate)

    def test_wrong_program_rejected(self, backend):
        """A flat certificate is not accepted where a reduce one is expected."""
        certificate = flat_init(backend, INITIAL_ACTION_STATE)
        with pytest.raises(CertificateInvalid):
            backend.require_valid(certificate, REDUCE_PROGRAM)

    def test_non_certificate_rejected(self, backend):
        """Arbitrary objects are not certificates."""
        with pytest.raises(CertificateInvalid):
            backend.require_valid({"total": 1}, REDUCE_PROGRAM)

    def test_empty_key_rejected(self):
        """The backend needs a key."""
        with pytest.raises(ValueError):
            ProofBackend("")

    def test_to_dict(self, backend):
        """Serialized certificates carry the claim as ints."""
        data = init(backend, 5, INITIAL_ACTION_STATE).to_dict()
        assert data["program"] == REDUCE_PROGRAM
        assert data["claim_type"] == "ReduceClaim"
        assert data["claim"]["total"] == 5


# =============================================================================
# Reduce Program
# =============================================================================

class TestReduceProgram:
    """Tests for init / add / cut_actions."""

    def test_init(self, backend):
        """Init starts with total equal to the starting sum."""
        claim = init(backend, 7, INITIAL_ACTION_STATE).claim
        assert claim.total == Field(7)
        assert claim.initial_sum == Field(7)
        assert claim.initial_action_state == INITIAL_ACTION_STATE
        assert claim.action_list_state == INITIAL_ACTION_STATE
        assert claim.action_sub_list_state == EMPTY_ACTION_LIST_HASH

    def test_add_accumulates(self, backend):
        """Add grows the total and the pending batch only."""
        certificate = init(backend, 0, INITIAL_ACTION_STATE)
        certificate = add(backend, certificate, 3)
        certificate = add(backend, certificate, 4)
        claim = certificate.claim
        assert claim.total == Field(7)
        assert claim.action_list_state == INITIAL_ACTION_STATE
        assert claim.action_sub_list_state != EMPTY_ACTION_LIST_HASH

    def test_add_verifies_previous(self, backend):
        """Add refuses a forged predecessor."""
        certificate = init(backend, 0, INITIAL_ACTION_STATE)
        forged = Certificate(certificate.program, certificate.claim, "0" * 64)
        with pytest.raises(CertificateInvalid):
            add(backend, forged, 1)

    def test_cut_verifies_previous(self, backend):
        """Cut refuses a forged predecessor."""
        certificate = init(backend, 0, INITIAL_ACTION_STATE)
        forged = Certificate(certificate.program, certificate.claim, "0" * 64)
        with pytest.raises(CertificateInvalid):
            cut_actions(backend, forged)

    def test_cut_matches_ledger_head(self, backend, ledger):
        """Replaying the ledger's batches reaches the ledger's head."""
        ledger.append_action_batch([1, 2])
        ledger.append_action_batch([3])

        certificate = init(backend, 0, INITIAL_ACTION_STATE)
        for batch in ([1, 2], [3]):
            for action in batch:
                certificate = add(backend, certificate, action)
            certificate = cut_actions(backend, certificate)

        assert certificate.claim.action_list_state == ledger.head
        assert certificate.claim.action_sub_list_state == EMPTY_ACTION_LIST_HASH
        assert certificate.claim.total == Field(6)

    def test_wrong_boundaries_miss_head(self, backend, ledger):
        """Different batch boundaries do not reach the ledger head."""
        ledger.append_action_batch([1, 2])
        builder = ReduceChainBuilder.start(backend, 0, INITIAL_ACTION_STATE)
        builder.add_batches([[1], [2]])
        assert builder.certificate.claim.action_list_state != ledger.head
        assert builder.certificate.claim.total == Field(3)

    def test_inputs_are_not_mutated(self, backend):
        """Each step returns a new certificate."""
        first = init(backend, 0, INITIAL_ACTION_STATE)
        second = add(backend, first, 5)
        assert first.claim.total == Field(0)
        assert second.claim.total == Field(5)


# =============================================================================
# Flatten Program
# =============================================================================

class TestFlatProgram:
    """Tests for flat_init / flat_add / flat_cut_actions."""

    def test_flat_list_matches_client_list(self, backend):
        """flat_list_state equals a FlatActionList fed the same actions."""
        flat = FlatActionList()
        certificate = flat_init(backend, INITIAL_ACTION_STATE)
        for action in (4, 5, 6):
            certificate = flat_add(backend, certificate, action)
            flat.push(action)
        certificate = flat_cut_actions(backend, certificate)
        assert certificate.claim.flat_list_state == flat.hash
        assert certificate.program == FLAT_PROGRAM

    def test_flat_list_ignores_batch_boundaries(self, backend):
        """The flattened list does not depend on how actions were batched."""
        one = FlatChainBuilder.start(backend, INITIAL_ACTION_STATE)
        one.add_batches([[1, 2, 3]])
        three = FlatChainBuilder.start(backend, INITIAL_ACTION_STATE)
        three.add_batches([[1], [2], [3]])
        assert one.certificate.claim.flat_list_state == three.certificate.claim.flat_list_state
        assert one.certificate.claim.action_list_state != three.certificate.claim.action_list_state

    def test_same_head_as_reduce_program(self, backend):
        """Both programs agree on the action list head."""
        batches = [[1, 2], [3], [4, 5, 6]]
        reduce_builder = ReduceChainBuilder.start(backend, 0, INITIAL_ACTION_STATE)
        reduce_builder.add_batches(batches)
        flat_builder = FlatChainBuilder.start(backend, INITIAL_ACTION_STATE)
        flat_builder.add_batches(batches)
        assert (reduce_builder.certificate.claim.action_list_state
                == flat_builder.certificate.claim.action_list_state)

    def test_flat_add_verifies_previous(self, backend):
        """Flat add refuses a reduce certificate."""
        with pytest.raises(CertificateInvalid):
            flat_add(backend, init(backend, 0, INITIAL_ACTION_STATE), 1)

    def test_empty_flatten(self, backend):
        """No actions leaves the flat list empty."""
        claim = flat_init(backend, INITIAL_ACTION_STATE).claim
        assert claim.flat_list_state == EMPTY_FLAT_LIST_HASH


# =============================================================================
# Builders
# =============================================================================

class TestBuilders:
    """Tests for off-path chain builders."""

    def test_build_reduce_certificate(self, backend, ledger):
        """Builder output covers all pending batches."""
        for value in (1, 2, 3):
            ledger.append_action_batch([value])
        certificate = build_reduce_certificate(ledger, backend, Field(10), INITIAL_ACTION_STATE)
        assert certificate.claim.total == Field(16)
        assert certificate.claim.initial_sum == Field(10)
        assert certificate.claim.action_list_state == ledger.head

    def test_handover_between_workers(self, backend, ledger):
        """A second worker can continue the first worker's chain."""
        ledger.append_action_batch([1])
        ledger.append_action_batch([2])
        first = ReduceChainBuilder.start(backend, 0, INITIAL_ACTION_STATE)
        first.add_batch([1])
        second = ReduceChainBuilder(backend, first.certificate)
        second.add_batch([2])
        assert second.certificate.claim.action_list_state == ledger.head
        assert second.certificate.claim.total == Field(3)

    def test_build_flat_certificate(self, backend, ledger):
        """Flat builder returns the certificate and a matching list."""
        ledger.append_action_batch([1, 2])
        snapshot = ledger.head
        ledger.append_action_batch([3])
        certificate, flat = build_flat_certificate(ledger, backend, INITIAL_ACTION_STATE, snapshot)
        assert certificate.claim.action_list_state == snapshot
        assert certificate.claim.flat_list_state == flat.hash
        assert flat.actions() == (Field(1), Field(2))
