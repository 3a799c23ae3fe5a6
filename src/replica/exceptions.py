class ReplicaError(Exception):
    """Base exception for the Replica service."""


class InvariantViolation(ReplicaError):
    """Raised when an engine invariant is broken by the caller (programmer error)."""


class VisionError(ReplicaError):
    """Raised when frame analysis cannot produce any usable result."""


class LLMResponseError(ReplicaError):
    """Raised when an LLM response is empty or cannot be parsed."""


class EnrichmentError(ReplicaError):
    """Raised when an enrichment collaborator returns unusable data."""
