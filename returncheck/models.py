"""Lightweight data models for symbols, call sites and diagnostics."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


KIND_FUNCTION = "function"
KIND_CONSTRUCTOR = "constructor"
KIND_CLASS = "class"
KIND_PACKAGE = "package"

CALLABLE_KINDS = {KIND_FUNCTION, KIND_CONSTRUCTOR}


class Verdict(Enum):
    MUST_CHECK = "MustCheck"
    MAY_IGNORE = "MayIgnore"
    UNSPECIFIED = "Unspecified"


class Finding(Enum):
    IGNORED_MUST_CHECK_VALUE = "IgnoredMustCheckValue"
    CONFLICTING_ANNOTATIONS = "ConflictingAnnotations"
    MISPLACED_ON_VOID = "MisplacedOnVoid"


@dataclass(frozen=True)
class Location:
    line: int
    column: int


@dataclass(frozen=True)
class AnnotationRef:
    """A decorator as seen on a declaration, after import resolution."""

    qualified_name: str

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class Symbol:
    id: str
    kind: str
    name: str
    qualname: str
    module: str | None
    annotations: tuple[AnnotationRef, ...] = ()
    returns: str | None = None
    path: str | None = None
    location: Location | None = None
    package: str | None = None
    bases: tuple[str, ...] = ()
    suggest: str | None = None

    @property
    def fqname(self) -> str:
        if self.kind == KIND_PACKAGE or not self.module:
            return self.qualname
        return f"{self.module}.{self.qualname}"

    @property
    def is_type(self) -> bool:
        return self.kind == KIND_CLASS

    @property
    def is_callable(self) -> bool:
        return self.kind in CALLABLE_KINDS


@dataclass(frozen=True)
class Definition:
    kind: str
    name: str
    qualname: str
    decorators: tuple[str, ...]
    returns: str | None
    location: Location
    bases: tuple[str, ...] = ()
    suggest: str | None = None


@dataclass(frozen=True)
class ImportedName:
    name: str
    alias: str | None = None


@dataclass(frozen=True)
class ImportItem:
    kind: str  # import | from
    module: str | None
    names: tuple[ImportedName, ...]
    location: Location
    level: int = 0


@dataclass(frozen=True)
class CallSite:
    name: str
    scope: tuple[tuple[str, str], ...]
    location: Location
    discarded: bool
    suppressed: bool = False


@dataclass(frozen=True)
class Resolution:
    verdict: Verdict
    scope: Symbol | None = None
    annotation: str | None = None


@dataclass(frozen=True)
class Diagnostic:
    check: str
    finding: Finding
    message: str
    path: str | None
    location: Location
    symbol: str | None = None
    severity: str = "error"
    suggestion: str | None = None

    def to_dict(self) -> dict:
        return {
            "check": self.check,
            "finding": self.finding.value,
            "severity": self.severity,
            "message": self.message,
            "path": self.path,
            "line": self.location.line,
            "column": self.location.column,
            "symbol": self.symbol,
            "suggestion": self.suggestion,
        }


@dataclass
class ExtractedModule:
    path: str | None
    module: str | None
    is_package: bool = False
    functions: list[Definition] = field(default_factory=list)
    classes: list[Definition] = field(default_factory=list)
    imports: list[ImportItem] = field(default_factory=list)
    calls: list[CallSite] = field(default_factory=list)
    package_annotations: list[tuple[str, bool]] = field(default_factory=list)
