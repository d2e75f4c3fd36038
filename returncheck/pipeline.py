"""End-to-end pipeline: parse a source tree, build the symbol table, run the checks."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .checkers import CHECKERS, ReturnValueChecker, create_checkers
from .config import CheckerFlags, ConfigError, resolve_flags
from .extract import extract_module
from .file_walker import iter_python_files, module_name_for
from .logging_config import setup_logging
from .models import Diagnostic, ExtractedModule
from .parser import PythonParser
from .storage import save_symbol_table
from .symbols import SymbolTable, build_symbol_table


logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    root: str
    table: SymbolTable
    modules: list[ExtractedModule]
    diagnostics: list[Diagnostic]

    def to_dict(self) -> dict:
        diagnostics = []
        for diagnostic in self.diagnostics:
            data = diagnostic.to_dict()
            data["path"] = self._relative(diagnostic.path)
            diagnostics.append(data)
        return {"root": self.root, "files": len(self.modules), "diagnostics": diagnostics}

    def _relative(self, path: str | None) -> str | None:
        if path is None:
            return None
        try:
            return Path(path).relative_to(self.root).as_posix()
        except ValueError:
            return path


def analyze_root(
    root: str | Path, max_files: int | None = None
) -> tuple[SymbolTable, list[ExtractedModule]]:
    root_path = Path(root)
    files = iter_python_files(root_path)
    if max_files is not None:
        files = files[:max_files]

    parser = PythonParser()
    extracted = []
    for path in files:
        module, is_package = module_name_for(root_path, path)
        parsed = parser.parse_file(path)
        extracted.append(extract_module(parsed, path=path, module=module, is_package=is_package))
        logger.debug("Parsed %s as %s", path, module or "<root>")

    return build_symbol_table(extracted), extracted


def check_root(
    root: str | Path,
    flags: CheckerFlags | None = None,
    checks: Iterable[str] | None = None,
    max_files: int | None = None,
    symbols_output: str | Path | None = None,
) -> CheckResult:
    checkers = create_checkers(checks, flags)
    table, modules = analyze_root(root, max_files=max_files)
    if symbols_output:
        save_symbol_table(table, symbols_output)

    diagnostics = run_checkers(checkers, table, modules)
    return CheckResult(root=str(root), table=table, modules=modules, diagnostics=diagnostics)


def run_checkers(
    checkers: Iterable[ReturnValueChecker],
    table: SymbolTable,
    modules: list[ExtractedModule],
) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for checker in checkers:
        diagnostics.extend(checker.check(table, modules))
    diagnostics.sort(
        key=lambda item: (item.path or "", item.location.line, item.location.column, item.check)
    )
    return diagnostics


def explain_symbol(
    table: SymbolTable,
    fqname: str,
    flags: CheckerFlags | None = None,
    checks: Iterable[str] | None = None,
) -> dict:
    symbol = table.lookup(fqname)
    if symbol is None or not symbol.is_callable:
        return {"symbol": fqname, "found": False, "verdicts": {}}

    verdicts = {}
    for checker in create_checkers(checks, flags):
        resolution = checker.explain(table, symbol)
        verdicts[checker.name] = {
            "verdict": resolution.verdict.value,
            "scope": resolution.scope.fqname if resolution.scope else None,
            "scope_kind": resolution.scope.kind if resolution.scope else None,
            "annotation": resolution.annotation,
        }
    return {"symbol": fqname, "found": True, "verdicts": verdicts}


def format_text(diagnostics: Iterable[Diagnostic]) -> str:
    lines = []
    for item in diagnostics:
        lines.append(
            f"{item.path}:{item.location.line}:{item.location.column}: "
            f"{item.severity}: [{item.check}] {item.message}"
            + (f"; did you mean to call `{item.suggestion}`?" if item.suggestion else "")
        )
    return "\n".join(lines)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Report ignored return values of methods that must be checked"
    )
    parser.add_argument("root", nargs="?", default=".", help="Root directory of the codebase")
    parser.add_argument(
        "--custom-annotations",
        default=None,
        help="Comma separated annotation names replacing the default must-check set",
    )
    parser.add_argument(
        "--exclude-annotations",
        default=None,
        help="Comma separated annotation names removed from the default must-check set",
    )
    parser.add_argument(
        "--checks",
        default=None,
        help=f"Comma separated checks to run (default: {','.join(CHECKERS)})",
    )
    parser.add_argument("--format", choices=("text", "json"), default="text")
    parser.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="Limit number of files parsed (for quick checks)",
    )
    parser.add_argument("--symbols-output", default=None, help="Write the symbol table JSON here")
    parser.add_argument(
        "--explain",
        default=None,
        metavar="FQNAME",
        help="Print the verdict for one function instead of checking",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Errors only")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    root = Path(args.root)
    if not root.is_dir():
        raise SystemExit(f"Root not found: {root}")

    checks = [name.strip() for name in args.checks.split(",")] if args.checks else None
    try:
        flags = resolve_flags(
            root,
            custom_annotations=args.custom_annotations,
            exclude_annotations=args.exclude_annotations,
        )
        if args.explain:
            table, _ = analyze_root(root, max_files=args.max_files)
            print(json.dumps(explain_symbol(table, args.explain, flags, checks), indent=2))
            return 0
        result = check_root(
            root,
            flags=flags,
            checks=checks,
            max_files=args.max_files,
            symbols_output=args.symbols_output,
        )
    except ConfigError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2))
    elif result.diagnostics:
        print(format_text(result.diagnostics))
    return 1 if result.diagnostics else 0


if __name__ == "__main__":
    raise SystemExit(main())
