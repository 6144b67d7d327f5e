from __future__ import annotations

from typing import Optional


# PUBLIC_INTERFACE
class ProviderError(Exception):
    """
    Base class for every error a data provider can report.

    Attributes:
    - message: human-readable description suitable for display
    - provider: kind of the provider that produced it ('supabase', 'airtable', 'local'), if known
    """

    def __init__(self, message: str, provider: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider

    def __str__(self) -> str:
        return self.message


# PUBLIC_INTERFACE
class ConfigurationError(ProviderError):
    """A backend client was used without its credentials being configured."""


# PUBLIC_INTERFACE
class BackendOperationError(ProviderError):
    """The remote or local I/O call failed (network, auth, rate limit, bad status)."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, provider)
        self.status_code = status_code


# PUBLIC_INTERFACE
class TodoNotFoundError(BackendOperationError):
    """An update or delete addressed an id the backend does not hold."""


# PUBLIC_INTERFACE
class RecordMappingError(ProviderError):
    """A native record did not match the shape expected by the record mapper."""


# PUBLIC_INTERFACE
def as_provider_error(exc: BaseException, fallback: str, provider: Optional[str] = None) -> ProviderError:
    """
    Convert any exception into a ProviderError.

    ProviderErrors pass through (with their provider filled in if missing); anything
    else becomes a BackendOperationError whose message is the exception text, or
    `fallback` when the exception has none. The original exception is kept as __cause__.
    """
    if isinstance(exc, ProviderError):
        if exc.provider is None:
            exc.provider = provider
        return exc
    message = str(exc).strip() or fallback
    err = BackendOperationError(message, provider)
    err.__cause__ = exc
    return err
