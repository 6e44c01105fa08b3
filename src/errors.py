"""Failure taxonomy for agent invocations."""

from enum import Enum


class ErrorKind(str, Enum):
    UNAVAILABLE = "unavailable"          # network/service failure or deadline expiry
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    MALFORMED = "malformed"              # service answered but the reply is unusable


class GatewayError(Exception):
    """Raised when an agent invocation fails. Always fatal to the current debate."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNAVAILABLE) -> None:
        self.kind = kind
        super().__init__(message)
