"""Centralized exception hierarchy for the scene alignment engine.

Usage:
    from exceptions import ValidationError, CandidateStoreError

    raise ValidationError("No scenes provided for image matching")
    raise CandidateStoreError("Vector search failed")
"""


class AlignmentError(Exception):
    """Base exception for all scene alignment errors."""
    pass


class ValidationError(AlignmentError):
    """Raised when input is rejected at a boundary.

    Examples:
        - Empty scene list
        - required_impact outside 1-10
        - top_k below 1
    """
    pass


class ConfigurationError(AlignmentError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Missing API key
        - Non-integer pool size in .env
    """
    pass


class EmbeddingError(AlignmentError):
    """Raised when the embedding provider cannot produce a vector."""
    pass


class CandidateStoreError(AlignmentError):
    """Raised when the candidate store query fails.

    Examples:
        - Query vector dimension does not match the index
        - Library file cannot be parsed
    """
    pass


class SyncQueueError(AlignmentError):
    """Raised when an auto-resync job cannot be enqueued."""
    pass
