"""Error taxonomy for provider connection requests."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel


class ErrorCode(StrEnum):
    """Machine-readable error codes returned to RPC callers."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAVAILABLE = "UNAVAILABLE"


class ErrorShape(BaseModel):
    """Error payload carried by a failed RPC response."""

    code: ErrorCode
    message: str
    details: Any | None = None


class ProviderConnectError(Exception):
    """Base exception for failures surfaced to the caller with an error code."""

    code: ErrorCode = ErrorCode.UNAVAILABLE
    status_code: int = 503

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_shape(self) -> ErrorShape:
        return ErrorShape(code=self.code, message=self.message, details=self.details)


class InvalidRequestError(ProviderConnectError):
    """Malformed parameters, unknown provider or method, empty secret."""

    code = ErrorCode.INVALID_REQUEST
    status_code = 400


class UnavailableError(ProviderConnectError):
    """Missing capability or downstream I/O failure."""

    code = ErrorCode.UNAVAILABLE
    status_code = 503


def error_shape(code: ErrorCode, message: str, details: Any | None = None) -> ErrorShape:
    """Build an error payload."""
    return ErrorShape(code=code, message=message, details=details)
