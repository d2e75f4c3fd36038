"""Resolve whether a callable's return value must be checked.

The nearest scope that says anything wins: the callable itself, then each
enclosing class from the innermost outwards, then the enclosing package.
Within one scope ``CanIgnoreReturnValue`` is consulted before the must-check
names.
"""

from __future__ import annotations

from typing import Iterator

from .models import Resolution, Symbol, Verdict
from .policy import AnnotationPolicy
from .symbols import SymbolTable


def iter_enclosing_scopes(table: SymbolTable, method: Symbol) -> Iterator[Symbol]:
    """Yield ``method``, its enclosing classes innermost first, then its package."""
    yield method

    current = table.enclosing_type(method)
    while current is not None and current.is_type:
        yield current
        current = table.owner(current)

    package = table.enclosing_package(method)
    if package is not None:
        yield package


class ResolutionEngine:
    def __init__(self, table: SymbolTable, policy: AnnotationPolicy) -> None:
        self.table = table
        self.policy = policy

    def decide(self, symbol: Symbol) -> Resolution | None:
        if self.policy.can_ignore(symbol):
            return Resolution(Verdict.MAY_IGNORE, symbol, self.policy.ignore_name)
        annotation = self.policy.check_annotation(symbol)
        if annotation is not None:
            return Resolution(Verdict.MUST_CHECK, symbol, annotation)
        return None

    def explain(self, method: Symbol) -> Resolution:
        for scope in iter_enclosing_scopes(self.table, method):
            resolution = self.decide(scope)
            if resolution is not None:
                return resolution
        return Resolution(Verdict.UNSPECIFIED)

    def resolve(self, method: Symbol) -> Verdict:
        return self.explain(method).verdict
