"""The two return-value rules and the pass that runs them over a symbol table."""

from __future__ import annotations

from typing import Iterable

from .config import CheckerFlags, ConfigError
from .matcher import CallSiteMatcher
from .models import (
    KIND_CLASS,
    KIND_FUNCTION,
    CallSite,
    Diagnostic,
    ExtractedModule,
    Finding,
    Location,
    Resolution,
    Symbol,
)
from .policy import OPTIONAL_CHECK_RETURN_VALUE, AnnotationPolicy
from .resolution import ResolutionEngine
from .symbols import SymbolTable
from .validation import DeclarationValidator, is_void_type


class ReturnValueChecker:
    name = "ReturnValueChecker"
    summary = "Ignored return value"

    def __init__(self, policy: AnnotationPolicy) -> None:
        self.policy = policy
        self.validator = DeclarationValidator(policy)

    def engine(self, table: SymbolTable) -> ResolutionEngine:
        return ResolutionEngine(table, self.policy)

    def explain(self, table: SymbolTable, symbol: Symbol) -> Resolution:
        return self.engine(table).explain(symbol)

    def match_call(
        self, table: SymbolTable, module: str, path: str | None, call: CallSite
    ) -> Diagnostic | None:
        if not call.discarded or call.suppressed:
            return None
        matched = CallSiteMatcher(self.engine(table)).explain(module, call)
        if matched is None:
            return None
        target, resolution = matched
        # No value is produced by a call to a void-returning function; constructors still
        # produce the new instance.
        if target.kind == KIND_FUNCTION and is_void_type(target.returns):
            return None
        return Diagnostic(
            check=self.name,
            finding=Finding.IGNORED_MUST_CHECK_VALUE,
            message=self.summary,
            path=path,
            location=call.location,
            symbol=target.fqname,
            suggestion=_suggestion(target, resolution),
        )

    def match_declaration(self, symbol: Symbol) -> Diagnostic | None:
        if symbol.kind == KIND_CLASS:
            result = self.validator.validate_class(symbol)
        elif symbol.is_callable:
            result = self.validator.validate_method(symbol)
        else:
            return None
        if result is None:
            return None
        finding, message = result
        return Diagnostic(
            check=self.name,
            finding=finding,
            message=message,
            path=symbol.path,
            location=symbol.location or Location(line=1, column=1),
            symbol=symbol.fqname,
        )

    def check(self, table: SymbolTable, modules: Iterable[ExtractedModule]) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for symbol in table.symbols():
            diagnostic = self.match_declaration(symbol)
            if diagnostic is not None:
                diagnostics.append(diagnostic)

        for entry in modules:
            if entry.module is None:
                continue
            for call in entry.calls:
                diagnostic = self.match_call(table, entry.module, entry.path, call)
                if diagnostic is not None:
                    diagnostics.append(diagnostic)
        return diagnostics


def _suggestion(target: Symbol, resolution: Resolution) -> str | None:
    if target.suggest:
        return target.suggest
    return resolution.scope.suggest if resolution.scope is not None else None


class ConfigurableCheckReturnValue(ReturnValueChecker):
    name = "ConfigurableCheckReturnValue"
    summary = (
        "Ignored return value of method that is annotated with @CheckReturnValue "
        "or specified alternatives"
    )

    def __init__(self, flags: CheckerFlags | None = None) -> None:
        flags = flags or CheckerFlags()
        super().__init__(
            AnnotationPolicy.from_options(
                custom_annotations=flags.custom_annotations,
                exclude_annotations=flags.exclude_annotations,
            )
        )


class OptionalCheckReturnValue(ReturnValueChecker):
    name = "OptionalCheckReturnValue"
    summary = "Ignored return value of method that is annotated with @OptionalCheckReturnValue"

    def __init__(self, flags: CheckerFlags | None = None) -> None:
        super().__init__(AnnotationPolicy(check_names=(OPTIONAL_CHECK_RETURN_VALUE,)))


CHECKERS = {
    ConfigurableCheckReturnValue.name: ConfigurableCheckReturnValue,
    OptionalCheckReturnValue.name: OptionalCheckReturnValue,
}


def create_checkers(
    names: Iterable[str] | None = None, flags: CheckerFlags | None = None
) -> list[ReturnValueChecker]:
    selected = list(names) if names else list(CHECKERS)
    unknown = [name for name in selected if name not in CHECKERS]
    if unknown:
        raise ConfigError(f"Unknown checks: {', '.join(unknown)}")
    return [CHECKERS[name](flags) for name in selected]
