"""Decide whether a call site is constrained to use its result."""

from __future__ import annotations

from .models import CallSite, Resolution, Symbol, Verdict
from .resolution import ResolutionEngine


class CallSiteMatcher:
    def __init__(self, engine: ResolutionEngine) -> None:
        self.engine = engine

    def target(self, module: str, call: CallSite) -> Symbol | None:
        """The called function or constructor.

        Calling a class targets its own ``__init__``. A class that does not
        define one is given an implicit constructor owned by the class, so the
        class's marks still apply to the instantiation.
        """
        table = self.engine.table
        symbol = table.resolve_call(module, call)
        if symbol is not None and symbol.is_type:
            symbol = table.constructor(symbol)
        if symbol is None or not symbol.is_callable:
            return None
        return symbol

    def explain(self, module: str, call: CallSite) -> tuple[Symbol, Resolution] | None:
        """The called symbol and the resolution that constrains it, if any."""
        symbol = self.target(module, call)
        if symbol is None:
            return None
        resolution = self.engine.explain(symbol)
        if resolution.verdict is not Verdict.MUST_CHECK:
            return None
        return symbol, resolution

    def match(self, module: str, call: CallSite) -> Symbol | None:
        """The called symbol when its result must be consumed, else None."""
        matched = self.explain(module, call)
        return matched[0] if matched is not None else None

    def must_use_result(self, module: str, call: CallSite) -> bool:
        return self.match(module, call) is not None
