"""
Error kinds raised by contract transitions and certificate checks.

Every error aborts the whole transition; nothing is partially applied.
"""


class ReducerError(Exception):
    """Base class for rejected transitions."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PreconditionMismatch(ReducerError):
    """A persisted field does not hold the value the transition expected."""

    def __init__(self, field: str, expected, actual):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"{field}: expected {expected!r}, found {actual!r}")


class AlreadyInProgress(ReducerError):
    """A snapshot or flatten lock is already held."""


class CertificateInvalid(ReducerError):
    """The proof backend rejected a certificate."""


class DecompositionMismatch(ReducerError):
    """A drain link does not decompose against the current tail."""

    def __init__(self, index: int, message: str = ""):
        self.index = index
        super().__init__(message or f"link {index} does not match the flattened list tail")


class InvalidAction(ReducerError):
    """The dispatched value is the reserved zero sentinel."""


class WorkBudgetExceeded(ReducerError):
    """The unprocessed range is too large for an in-transaction fold."""


class BatchSizeMismatch(ReducerError):
    """A drain batch does not have exactly the configured number of links."""
