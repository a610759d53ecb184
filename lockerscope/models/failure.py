"""
Failure classification.

Every failure the service knows how to explain is a KnownError subclass
carrying a FailureKind, a user-appropriate message and an HTTP status.
Resolution misses are NOT failures and never raise.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    UNRECOGNIZED_CATEGORY = "unrecognized_category"

    # Resource failures
    NOT_FOUND = "not_found"
    EMPTY_RESULT = "empty_result"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"
    EXTERNAL_API_ERROR = "external_api_error"

    UNKNOWN = "unknown"


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)


class UnrecognizedCategoryError(KnownError):
    """
    Raised when resolution is asked for a category outside the fixed set.

    Non-fatal: callers treat the item as unresolved for that category.
    """

    def __init__(self, category: str):
        self.category = category
        super().__init__(
            kind=FailureKind.UNRECOGNIZED_CATEGORY,
            message=f"Unrecognized category: {category!r}",
            detail="Category must be one of the recognized Athena backend types.",
            status_code=422,
        )


class CatalogDownloadError(KnownError):
    """Raised when the catalog cannot be fetched from the remote source."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message="Failed to download the cosmetics catalog.",
            detail=f"{url}: {reason}",
            suggestion="Check network access and retry the download job.",
            status_code=502,
        )
