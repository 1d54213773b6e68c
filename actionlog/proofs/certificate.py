"""
Certificates and the simulated proof backend.

A certificate is a claim plus a tag. The backend issues tags with a keyed
hash over the program name and the canonical claim, and verification simply
recomputes the tag, so ``verify`` depends on nothing but the certificate and
the backend key.
"""

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict

from ..errors import CertificateInvalid


logger = logging.getLogger(__name__)


# =============================================================================
# Claims
# =============================================================================

def claim_to_dict(claim) -> Dict[str, Any]:
    """Serialize a claim dataclass to a plain dict of ints."""
    return {f.name: int(getattr(claim, f.name)) for f in fields(claim)}


def canonical_claim(claim) -> str:
    data = {"type": type(claim).__name__, "fields": claim_to_dict(claim)}
    return json.dumps(data, sort_keys=True, separators=(',', ':'))


@dataclass(frozen=True)
class Certificate:
    """A claim about one step of a proof program, with its tag."""
    program: str
    claim: Any
    tag: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "program": self.program,
            "claim_type": type(self.claim).__name__,
            "claim": claim_to_dict(self.claim),
            "tag": self.tag,
        }


# =============================================================================
# Backend
# =============================================================================

class ProofBackend:
    """Issues and verifies certificates for named programs."""

    def __init__(self, key: str):
        if not key:
            raise ValueError("proof backend key must not be empty")
        self._key = key.encode("utf-8")

    def _tag(self, program: str, claim) -> str:
        message = f"{program}|{canonical_claim(claim)}".encode("utf-8")
        return hmac.new(self._key, message, hashlib.sha256).hexdigest()

    def issue(self, program: str, claim) -> Certificate:
        certificate = Certificate(program=program, claim=claim, tag=self._tag(program, claim))
        logger.debug("issued %s certificate %s", program, certificate.tag[:12])
        return certificate

    def verify(self, certificate: Certificate) -> bool:
        expected = self._tag(certificate.program, certificate.claim)
        return hmac.compare_digest(expected, certificate.tag)

    def require_valid(self, certificate: Certificate, program: str) -> Any:
        """Return the certificate's claim, or raise CertificateInvalid."""
        if not isinstance(certificate, Certificate):
            raise CertificateInvalid(f"expected a certificate, got {type(certificate).__name__}")
        if certificate.program != program:
            raise CertificateInvalid(
                f"certificate is for program {certificate.program!r}, expected {program!r}"
            )
        if not self.verify(certificate):
            raise CertificateInvalid(f"{program} certificate failed verification")
        return certificate.claim
