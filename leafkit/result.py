"""Error identifiers and a value-or-error result type."""

from __future__ import annotations

import itertools
import threading
from typing import Any, Generic, Optional, TypeVar

from leafkit.printing import print_result_value

T = TypeVar("T")

_ID_STEP = 4
_ID_TAG = 1
_TAG_MASK = 3

_id_lock = threading.Lock()
_id_counter = itertools.count(_ID_TAG, _ID_STEP)


class ErrorId:
    """Identifies one failure.

    Valid identifiers are 0, meaning "no error", or numbers whose two low
    bits are ``01``; every call to :func:`new_error_id` yields a fresh one.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("error id must be an int")
        if value != 0 and (value & _TAG_MASK) != _ID_TAG:
            raise ValueError(f"invalid error id value: {value}")
        self._value = value

    @property
    def value(self) -> int:
        """The numeric identifier."""
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorId):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"ErrorId({self._value})"

    def __str__(self) -> str:
        return str(self._value)


def new_error_id() -> ErrorId:
    """Return a new, unique, non-zero error identifier."""
    with _id_lock:
        value = next(_id_counter)
    return ErrorId(value)


class BadResult(Exception):
    """Raised when the value of a failed result is requested."""

    def __init__(self, error_id: ErrorId) -> None:
        super().__init__("bad_result")
        self.error_id = error_id

    def __str__(self) -> str:
        return f"bad_result (error id {self.error_id})"


class Result(Generic[T]):
    """Holds either a value or the identifier of the error that replaced it.

    ``Result(value)`` succeeds; ``Result(error=some_id)`` (or
    :meth:`Result.failure`) fails. A result whose value is ``None`` stands
    for an operation that produces nothing.
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, *, error: Optional[ErrorId] = None) -> None:
        if error is not None:
            if not isinstance(error, ErrorId):
                raise TypeError("error must be an ErrorId")
            if value is not None:
                raise ValueError("a result holds either a value or an error, not both")
        self._value = value
        self._error = error

    @classmethod
    def failure(cls, error: ErrorId) -> "Result[Any]":
        """Return a failed result carrying ``error``."""
        return cls(error=error)

    def has_value(self) -> bool:
        """Return True when the result holds a value."""
        return self._error is None

    def has_error(self) -> bool:
        """Return True when the result holds an error."""
        return self._error is not None

    def __bool__(self) -> bool:
        return self.has_value()

    def value(self) -> T:
        """Return the held value; raise :class:`BadResult` on failure."""
        if self._error is not None:
            raise BadResult(self._error)
        return self._value  # type: ignore[return-value]

    def get(self) -> Optional[T]:
        """Return the held value, or None when the result failed."""
        return self._value if self._error is None else None

    def error(self) -> ErrorId:
        """Return the error identifier; a zero id when the result succeeded."""
        return self._error if self._error is not None else ErrorId(0)

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result(error={self._error!r})"
        return f"Result({self._value!r})"

    def __str__(self) -> str:
        if self._error is not None:
            return f"Error ID {self._error}"
        if self._value is None:
            return "No error"
        return print_result_value(self._value)