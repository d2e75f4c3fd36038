"""File walking and module naming utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable


DEFAULT_EXCLUDES = {".venv", "venv", "__pycache__", ".git", ".hg", ".svn", ".tox"}


def iter_python_files(root: str | Path, excludes: Iterable[str] | None = None) -> list[str]:
    root_path = Path(root)
    exclude_set = set(excludes or DEFAULT_EXCLUDES)
    matches: list[str] = []

    for path in sorted(root_path.rglob("*.py")):
        relative = path.relative_to(root_path)
        if any(part in exclude_set for part in relative.parts):
            continue
        matches.append(str(path))

    return matches


def module_name_for(root: str | Path, path: str | Path) -> tuple[str, bool]:
    """Return the dotted module name for ``path`` and whether it is a package ``__init__``."""
    relative = Path(path).resolve().relative_to(Path(root).resolve())
    parts = list(relative.with_suffix("").parts)
    is_package = bool(parts) and parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    return ".".join(parts), is_package


def package_of(module: str, is_package: bool) -> str:
    if is_package:
        return module
    return module.rpartition(".")[0]
