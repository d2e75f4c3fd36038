"""Marker decorators recognised by the return-value checks.

They return the decorated object unchanged and only matter to static analysis::

    from returncheck.annotations import CanIgnoreReturnValue, CheckReturnValue

    @CheckReturnValue
    class Builder:
        @CanIgnoreReturnValue
        def add(self, item): ...

The called form can name the method a caller probably meant::

    @CheckReturnValue(suggest="with_item")
    def add(self, item): ...

A package opts in as a whole from its ``__init__.py``::

    __package_annotations__ = (CheckReturnValue,)
"""

from __future__ import annotations

from typing import Callable, TypeVar


T = TypeVar("T")


def _marker(obj: T | None) -> T | Callable[[T], T]:
    if obj is None:
        return lambda target: target
    return obj


def CheckReturnValue(obj: T | None = None, *, suggest: str | None = None):
    """Mark ``obj`` as returning a value callers must use.

    ``@CheckReturnValue(suggest="update")`` names the method a caller who drops
    the result probably meant; the checks report it alongside the diagnostic.
    """
    return _marker(obj)


def CanIgnoreReturnValue(obj: T) -> T:
    return obj


def OptionalCheckReturnValue(obj: T | None = None, *, suggest: str | None = None):
    return _marker(obj)
