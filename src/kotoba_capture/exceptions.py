"""Custom exceptions for kotoba_capture.

Each exception type represents a category of error.
Catch specific exceptions to handle errors appropriately.
"""


class KotobaError(Exception):
    """Base exception for all kotoba_capture errors."""

    pass


class InputError(KotobaError, ValueError):
    """Raised when a request is rejected before any side effect.

    Covers missing uploads, unauthenticated callers and malformed word lists.
    """

    pass


class NotFoundError(KotobaError, LookupError):
    """Raised when a record does not exist for the requesting owner."""

    pass


class StorageError(KotobaError, RuntimeError):
    """Raised when a blob or database write fails."""

    pass


class BackendUnavailableError(KotobaError):
    """Raised by OCR or generative adapters when the backend cannot answer.

    Services absorb this into placeholder results; it never reaches callers
    of the pipeline.
    """

    pass
