from __future__ import annotations

import textwrap

import pytest

from returncheck.checkers import create_checkers
from returncheck.extract import extract_module
from returncheck.parser import PythonParser
from returncheck.pipeline import run_checkers
from returncheck.symbols import build_symbol_table


def _module_name(relpath: str) -> tuple[str, bool]:
    parts = relpath.removesuffix(".py").split("/")
    is_package = parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    return ".".join(parts), is_package


@pytest.fixture(scope="session")
def parser() -> PythonParser:
    return PythonParser()


@pytest.fixture
def build_project(parser):
    """Build a symbol table from ``{"pkg/mod.py": source}`` without touching disk."""

    def build(files: dict[str, str]):
        extracted = []
        for relpath, source in files.items():
            module, is_package = _module_name(relpath)
            parsed = parser.parse_text(textwrap.dedent(source), path=relpath)
            extracted.append(
                extract_module(parsed, path=relpath, module=module, is_package=is_package)
            )
        return build_symbol_table(extracted), extracted

    return build


@pytest.fixture
def run_checks(build_project):
    def run(files: dict[str, str], flags=None, checks=None):
        table, modules = build_project(files)
        return run_checkers(create_checkers(checks, flags), table, modules)

    return run
