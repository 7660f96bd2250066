"""Provider failure taxonomy and HTTP status classification."""

from __future__ import annotations


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SkippableProviderError(ProviderError):
    """Transient failure; the call may be retried."""


class TemporaryBlockError(SkippableProviderError):
    pass


class TooManyRequestsError(SkippableProviderError):
    pass


class ProviderTimeoutError(SkippableProviderError):
    pass


class ForbiddenError(ProviderError):
    pass


class NotOkError(ProviderError):
    pass


_STATUS_ERRORS: dict[int, type[ProviderError]] = {
    430: TemporaryBlockError,
    429: TooManyRequestsError,
    403: ForbiddenError,
    401: ForbiddenError,
    504: ProviderTimeoutError,
    406: ProviderTimeoutError,
}


def classify_status(status_code: int) -> type[ProviderError] | None:
    """Map an HTTP status code to the error class it should raise.

    Returns None for 2xx statuses.
    """
    if 200 <= status_code < 300:
        return None
    return _STATUS_ERRORS.get(status_code, NotOkError)
