"""Query helpers behind the MCP tools."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .checkers import CHECKERS
from .config import ConfigError, resolve_flags
from .models import CALLABLE_KINDS
from .pipeline import analyze_root, check_root, explain_symbol
from .symbols import SymbolTable


class CheckService:
    """Runs checks over one source root; the symbol table is built on first use."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._table: SymbolTable | None = None

    @property
    def table(self) -> SymbolTable:
        if self._table is None:
            self._table, _ = analyze_root(self.root)
        return self._table

    def list_checks(self) -> dict:
        return {"root": str(self.root), "checks": list(CHECKERS)}

    def check(
        self,
        custom_annotations: Iterable[str] | None = None,
        exclude_annotations: Iterable[str] | None = None,
        checks: Iterable[str] | None = None,
        max_files: int | None = None,
    ) -> dict:
        try:
            flags = resolve_flags(
                self.root,
                custom_annotations=_as_list(custom_annotations),
                exclude_annotations=_as_list(exclude_annotations),
            )
            result = check_root(self.root, flags=flags, checks=checks, max_files=max_files)
        except ConfigError as exc:
            return {"error": str(exc)}
        return result.to_dict()

    def explain(
        self,
        symbol: str,
        custom_annotations: Iterable[str] | None = None,
        exclude_annotations: Iterable[str] | None = None,
        checks: Iterable[str] | None = None,
    ) -> dict:
        try:
            flags = resolve_flags(
                self.root,
                custom_annotations=_as_list(custom_annotations),
                exclude_annotations=_as_list(exclude_annotations),
            )
            return explain_symbol(self.table, symbol, flags, checks)
        except ConfigError as exc:
            return {"error": str(exc)}

    def search(self, query: str, limit: int = 20) -> dict:
        """Find functions whose qualified name contains ``query`` (case-insensitive)."""
        needle = query.lower()
        matches = []
        for symbol in self.table.symbols():
            if symbol.kind not in CALLABLE_KINDS or needle not in symbol.fqname.lower():
                continue
            matches.append(
                {
                    "symbol": symbol.fqname,
                    "kind": symbol.kind,
                    "annotations": [item.qualified_name for item in symbol.annotations],
                    "path": _relative(self.root, symbol.path),
                    "line": symbol.location.line if symbol.location else None,
                }
            )
        matches.sort(key=lambda item: item["symbol"])
        return {"query": query, "matches": matches[:limit]}

    def refresh(self) -> dict:
        self._table = None
        return {"root": str(self.root), "symbols": len(self.table)}


def _as_list(values: Iterable[str] | None) -> list[str] | None:
    if values is None or isinstance(values, str):
        return values
    return list(values)


def _relative(root: Path, path: str | None) -> str | None:
    if path is None:
        return None
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return path
