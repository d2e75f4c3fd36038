"""Which annotation names make a return value mandatory or optional."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import Symbol


CAN_IGNORE_RETURN_VALUE = "CanIgnoreReturnValue"
OPTIONAL_CHECK_RETURN_VALUE = "OptionalCheckReturnValue"

DEFAULT_ANNOTATIONS = (
    "CheckReturnValue",
    "androidx.annotation.CheckResult",
    "com.support.annotation.CheckResult",
    "edu.umd.cs.findbugs.annotations.CheckReturnValue",
    "javax.annotation.CheckReturnValue",
    "io.reactivex.annotations.CheckReturnValue",
    "returncheck.annotations.CheckReturnValue",
)


def has_direct_annotation(symbol: Symbol, name: str) -> bool:
    """Check for an annotation directly on ``symbol``; inheritance is never considered.

    A name without dots matches by simple name (or a qualified name equal to it),
    a dotted name matches the fully-qualified name only.
    """
    is_simple = "." not in name
    for annotation in symbol.annotations:
        if is_simple and annotation.simple_name == name:
            return True
        if annotation.qualified_name == name:
            return True
    return False


def short_name(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _unique(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))


@dataclass(frozen=True)
class AnnotationPolicy:
    check_names: tuple[str, ...]
    ignore_name: str = CAN_IGNORE_RETURN_VALUE

    def __post_init__(self) -> None:
        names = _unique(name for name in self.check_names if name != self.ignore_name)
        object.__setattr__(self, "check_names", names)

    @classmethod
    def from_options(
        cls,
        custom_annotations: Iterable[str] | None = None,
        exclude_annotations: Iterable[str] | None = None,
        defaults: Iterable[str] = DEFAULT_ANNOTATIONS,
    ) -> "AnnotationPolicy":
        # A custom list fully determines membership; exclusions only prune the defaults.
        if custom_annotations is not None:
            return cls(check_names=_unique(custom_annotations))
        excluded = set(exclude_annotations or ())
        return cls(check_names=tuple(name for name in defaults if name not in excluded))

    def is_check_name(self, name: str) -> bool:
        return name in self.check_names

    def matches(self, symbol: Symbol, name: str) -> bool:
        return has_direct_annotation(symbol, name)

    def check_annotation(self, symbol: Symbol) -> str | None:
        """First configured must-check name present directly on ``symbol``."""
        for name in self.check_names:
            if self.matches(symbol, name):
                return name
        return None

    def can_ignore(self, symbol: Symbol) -> bool:
        return self.matches(symbol, self.ignore_name)
