"""Static checks for ignored return values of functions that must be checked."""

from .checkers import ConfigurableCheckReturnValue, OptionalCheckReturnValue, create_checkers
from .config import CheckerFlags, ConfigError, resolve_flags
from .models import Diagnostic, Finding, Verdict
from .parser import PythonParser
from .pipeline import check_root
from .policy import AnnotationPolicy
from .resolution import ResolutionEngine
from .symbols import SymbolTable, build_symbol_table

__all__ = [
    "AnnotationPolicy",
    "CheckerFlags",
    "ConfigError",
    "ConfigurableCheckReturnValue",
    "Diagnostic",
    "Finding",
    "OptionalCheckReturnValue",
    "PythonParser",
    "ResolutionEngine",
    "SymbolTable",
    "Verdict",
    "build_symbol_table",
    "check_root",
    "create_checkers",
    "resolve_flags",
]
