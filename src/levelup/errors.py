from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    FETCH_FAILED = "FETCH_FAILED"
    INVALID_RESPONSE = "INVALID_RESPONSE"


class LevelUpError(Exception):
    """Raised by the read API client for all expected failure conditions.

    Caught by ResourceCache and recorded on the affected cache entry as a
    plain message. Never raised past the cache's public methods.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

