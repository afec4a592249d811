# backend/messenger/utils/errors.py
"""
Error kinds and the Result value passed between validation, identity,
assembly and query steps.

Expected failures never raise: each step returns a Result, and the route
turns a failed Result into a ``{"error": ...}`` JSON response.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar
import logging

from fastapi.responses import JSONResponse

from backend.messenger.config.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    AUTHORIZATION = "AUTHORIZATION"
    NOT_FOUND = "NOT_FOUND"
    STORAGE = "STORAGE"


@dataclass(frozen=True)
class ChatError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ChatError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ChatError) -> "Result[T]":
        return cls(error=error)

    def then(self, fn: Callable[[T], "Result[U]"]) -> "Result[U]":
        """Run the next step on the value, or pass the error through."""
        if self.error is not None:
            return Result.failure(self.error)
        return fn(self.value)


def validation_error(message: str) -> Result:
    return Result.failure(ChatError(ErrorKind.VALIDATION, message))


def authorization_error(message: str) -> Result:
    return Result.failure(ChatError(ErrorKind.AUTHORIZATION, message))


def not_found(message: str) -> Result:
    return Result.failure(ChatError(ErrorKind.NOT_FOUND, message))


def storage_error(message: str) -> Result:
    return Result.failure(ChatError(ErrorKind.STORAGE, message))


def status_for(error: ChatError, default_status: int) -> int:
    """
    AUTHORIZATION is always 401. Any error whose text carries the storage
    engine marker is a 500. Everything else gets the endpoint's own default,
    so NOT_FOUND is 404 on user lookups but 400 while sending a message.
    """
    if error.kind is ErrorKind.AUTHORIZATION:
        return 401
    if settings.STORAGE_ERROR_MARKER and settings.STORAGE_ERROR_MARKER in error.message:
        return 500
    return default_status


def error_response(error: ChatError, default_status: int) -> JSONResponse:
    status_code = status_for(error, default_status)
    if status_code >= 500:
        logger.error(f"[Errors] {error.kind.value}: {error.message}")
    else:
        logger.warning(f"[Errors] {error.kind.value}: {error.message}")
    return JSONResponse(status_code=status_code, content={"error": error.message})
