"""Custom exception classes for MoneyTransfer."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class MoneyTransferError(Exception):
    """Base exception for all MoneyTransfer errors."""
    pass


class ConfigurationError(MoneyTransferError):
    """Raised when there's a configuration error."""
    pass


class ValidationError(MoneyTransferError):
    """Raised when data validation fails."""
    pass


class InputIssue(Enum):
    """Why a user-entered value cannot be converted."""

    EMPTY = "empty"
    NOT_POSITIVE = "not_positive"
    OVER_LIMIT = "over_limit"
    UNKNOWN_CURRENCY = "unknown_currency"


class InputError(ValidationError):
    """Raised when user input cannot be turned into a conversion request.

    Handled locally by the orchestrator; never reaches a provider.
    """

    def __init__(self, issue: InputIssue, message: str):
        super().__init__(message)
        self.issue = issue


class DataProviderError(MoneyTransferError):
    """Base exception for conversion provider errors."""
    pass


class ProviderErrorKind(Enum):
    INVALID_URL = "invalid_url"
    INVALID_RESPONSE = "invalid_response"
    DECODING_ERROR = "decoding_error"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


_DESCRIPTIONS = {
    ProviderErrorKind.INVALID_URL: "Invalid URL",
    ProviderErrorKind.INVALID_RESPONSE: "Invalid response",
    ProviderErrorKind.DECODING_ERROR: "Decoding error",
    ProviderErrorKind.TIMEOUT: "Request timed out",
    ProviderErrorKind.UNKNOWN: "Unknown error occurred",
}


class ProviderError(DataProviderError):
    """Raised when a conversion provider cannot produce a result.

    The string form is the user-facing banner text.
    """

    def __init__(
        self,
        kind: ProviderErrorKind,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.kind = kind
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.description)

    @property
    def description(self) -> str:
        if self.kind is ProviderErrorKind.SERVER_ERROR:
            return f"Server error with status code: {self.status_code}"
        return _DESCRIPTIONS[self.kind]

    def __repr__(self) -> str:
        return f"ProviderError(kind={self.kind.value}, status_code={self.status_code}, detail={self.detail!r})"
