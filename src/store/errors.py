# src/store/errors.py — v1
"""Store error taxonomy and classification.

A single tagged error type, ``StoreError``, with an explicit ``kind``.
Classification inspects the ``code`` / ``message`` / ``name`` shape exposed
by document-store client errors (attributes, or keys for mapping-shaped
errors). Quota exhaustion is never retryable.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

QUOTA_ERROR_MESSAGE = (
    "Document store quota exceeded. Please try again later or upgrade your plan."
)

_QUOTA_CODES = frozenset({"resource-exhausted"})
_QUOTA_MARKERS = ("quota", "resource-exhausted", "daily limit")
_RETRYABLE_CODES = frozenset({"failed-precondition", "unavailable", "deadline-exceeded"})


class ErrorKind(str, Enum):
    INITIALIZATION = "initialization"
    QUOTA_EXCEEDED = "quota_exceeded"
    TRANSIENT = "transient"
    GENERIC = "generic"


class StoreError(Exception):
    """Error raised at the repository boundary.

    Attributes:
        kind: Error category.
        message: Human-readable message (user-facing for quota errors).
        code: Client error code, if the original error carried one.
        original: The wrapped client error, if any.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        code: str | None = None,
        original: BaseException | Mapping[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.code = code
        self.original = original
        super().__init__(message)

    @property
    def is_quota_error(self) -> bool:
        return self.kind is ErrorKind.QUOTA_EXCEEDED

    @property
    def is_retryable(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT

    @classmethod
    def initialization(cls, message: str, original: BaseException | None = None) -> StoreError:
        return cls(ErrorKind.INITIALIZATION, message, original=original)

    @classmethod
    def quota_exceeded(
        cls, original: Any = None, message: str = QUOTA_ERROR_MESSAGE,
    ) -> StoreError:
        return cls(ErrorKind.QUOTA_EXCEEDED, message, code=_error_fields(original)[0], original=original)

    @classmethod
    def transient(cls, message: str, original: Any = None) -> StoreError:
        return cls(ErrorKind.TRANSIENT, message, code=_error_fields(original)[0], original=original)

    @classmethod
    def generic(cls, message: str, original: Any = None) -> StoreError:
        return cls(ErrorKind.GENERIC, message, code=_error_fields(original)[0], original=original)

    def __repr__(self) -> str:
        return f"StoreError(kind={self.kind.value!r}, message={self.message!r}, code={self.code!r})"


def is_quota_error(error: Any) -> bool:
    """True if error signals exhausted daily quota."""
    if isinstance(error, StoreError):
        return error.is_quota_error
    if error is None or isinstance(error, (str, int, float, bool)):
        return False
    code, message, name = _error_fields(error)
    if code in _QUOTA_CODES:
        return True
    message = message.lower()
    if any(marker in message for marker in _QUOTA_MARKERS):
        return True
    name = name.lower()
    return "quota" in name or "resource-exhausted" in name


def is_retryable_error(error: Any) -> bool:
    """True for transient conditions; always False for quota errors."""
    if is_quota_error(error):
        return False
    if isinstance(error, StoreError):
        return error.is_retryable
    if error is None or isinstance(error, (str, int, float, bool)):
        return False
    code, message, _ = _error_fields(error)
    if code in _RETRYABLE_CODES:
        return True
    return "timeout" in message.lower()


def classify_error(error: Any) -> ErrorKind:
    """Map a client error onto an ErrorKind."""
    if isinstance(error, StoreError):
        return error.kind
    if is_quota_error(error):
        return ErrorKind.QUOTA_EXCEEDED
    if is_retryable_error(error):
        return ErrorKind.TRANSIENT
    return ErrorKind.GENERIC


def wrap_error(error: Any) -> StoreError:
    """Wrap a client error in a StoreError of the matching kind."""
    if isinstance(error, StoreError):
        return error
    kind = classify_error(error)
    if kind is ErrorKind.QUOTA_EXCEEDED:
        return StoreError.quota_exceeded(original=error)
    _, message, _ = _error_fields(error)
    message = message or "Unknown store error"
    if kind is ErrorKind.TRANSIENT:
        return StoreError.transient(message, original=error)
    return StoreError.generic(message, original=error)


def get_quota_error_message() -> str:
    """User-facing message for quota errors."""
    return QUOTA_ERROR_MESSAGE


def _error_fields(error: Any) -> tuple[str | None, str, str]:
    """Extract (code, message, name) from an exception or mapping."""
    if error is None:
        return None, "", ""
    if isinstance(error, Mapping):
        code = error.get("code")
        message = error.get("message") or ""
        name = error.get("name") or ""
    else:
        code = getattr(error, "code", None)
        message = getattr(error, "message", None)
        if not isinstance(message, str):
            message = str(error) if isinstance(error, BaseException) else ""
        name = getattr(error, "name", None)
        if not isinstance(name, str):
            name = type(error).__name__
    return (
        str(code) if code is not None else None,
        str(message),
        str(name),
    )
