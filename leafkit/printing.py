"""Diagnostic rendering of arbitrary error objects."""

from __future__ import annotations

import enum
import inspect
from typing import Any

NOT_PRINTABLE = "{not printable}"

_MISSING = object()
_DEFAULT_OWNERS = (object, BaseException)


def type_name(cls: type) -> str:
    """Return the fully qualified name of ``cls``."""
    module = getattr(cls, "__module__", None)
    qualname = getattr(cls, "__qualname__", None) or getattr(cls, "__name__", repr(cls))
    if module in (None, "builtins"):
        return qualname
    return f"{module}.{qualname}"


def _owner(cls: type, attr: str) -> tuple[type, Any]:
    for klass in cls.__mro__:
        if attr in vars(klass):
            return klass, vars(klass)[attr]
    return object, getattr(object, attr)


def _has_custom_str(cls: type) -> bool:
    owner, func = _owner(cls, "__str__")
    if owner in _DEFAULT_OWNERS:
        return False
    if issubclass(cls, enum.Enum):
        # Only a __str__ written in the enum class itself counts.
        return owner.__module__ != "enum" and inspect.isfunction(func)
    if issubclass(cls, BaseException) and owner.__module__ == "builtins":
        return False
    return True


def _has_builtin_repr(cls: type) -> bool:
    owner, _ = _owner(cls, "__repr__")
    return (
        owner.__module__ == "builtins"
        and owner not in _DEFAULT_OWNERS
        and not issubclass(owner, BaseException)
        and not issubclass(cls, enum.Enum)
    )


def is_printable(obj: Any) -> bool:
    """Return True when ``obj`` has a meaningful text form of its own.

    Built-in values are printable; user classes are printable when they
    define ``__str__``.
    """
    cls = type(obj)
    return _has_custom_str(cls) or _has_builtin_repr(cls)


def has_printable_value(obj: Any) -> bool:
    """Return True when ``obj`` carries a printable ``value`` attribute."""
    value = getattr(obj, "value", _MISSING)
    if value is _MISSING or inspect.ismethod(value) or inspect.isbuiltin(value):
        return False
    return is_printable(value)


def _exception_message(exc: BaseException) -> str:
    what = getattr(exc, "what", None)
    if callable(what):
        return str(what())
    return BaseException.__str__(exc)


def diagnostic(obj: Any) -> str:
    """Render ``obj`` for diagnostic output."""
    name = type_name(type(obj))
    if is_printable(obj):
        return str(obj)
    if has_printable_value(obj):
        return f"{name}: {obj.value}"
    if isinstance(obj, BaseException):
        return f"{name}: what(): {_exception_message(obj)}"
    if isinstance(obj, enum.Enum):
        return f"{name}: {obj.value!r}"
    return f"{name}: {NOT_PRINTABLE}"


def print_result_value(obj: Any) -> str:
    """Render the value held by a successful result."""
    return str(obj) if is_printable(obj) else NOT_PRINTABLE