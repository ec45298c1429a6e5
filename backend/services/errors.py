"""Error taxonomy for the matching pipeline.

Local scoring errors (InvalidInput, DimensionMismatch) are deterministic
and propagate to the caller. ServiceUnavailable triggers the orchestrator's
fallback path. PersistenceFailure is logged and never discards results.
"""


class MatchingError(Exception):
    """Base class for all matching pipeline errors."""


class InvalidInput(MatchingError):
    """Malformed job or resume data. Not retried."""


class DimensionMismatch(MatchingError, ValueError):
    """Two vectors of different length were compared."""

    def __init__(self, left: int, right: int) -> None:
        super().__init__(f"Vector dimensions differ: {left} != {right}")
        self.left = left
        self.right = right


class ServiceUnavailable(MatchingError):
    """An external collaborator (embedder, vector index, reasoner) failed or timed out."""

    def __init__(self, service: str, message: str = "") -> None:
        super().__init__(f"{service} unavailable: {message}" if message else f"{service} unavailable")
        self.service = service


class PersistenceFailure(MatchingError):
    """A match record could not be written."""
