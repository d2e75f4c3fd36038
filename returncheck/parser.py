"""Tree-sitter based parser for Python sources."""

from __future__ import annotations

from dataclasses import dataclass

from tree_sitter import Language, Parser


def load_python_language() -> Language:
    """Return a Tree-sitter Language object for Python."""
    try:
        import tree_sitter_python as tspython
    except ImportError as exc:  # pragma: no cover - import guard
        raise RuntimeError("tree_sitter_python is not installed") from exc

    # Newer grammars expose `language()` returning a capsule.
    lang = tspython.language
    lang = lang() if callable(lang) else lang
    if isinstance(lang, Language):
        return lang
    return Language(lang)


@dataclass
class ParsedSource:
    tree: object
    source_bytes: bytes
    path: str | None = None


class PythonParser:
    def __init__(self) -> None:
        language = load_python_language()
        try:
            self._parser = Parser(language)
        except TypeError:  # pragma: no cover - legacy API
            self._parser = Parser()
            self._parser.set_language(language)

    def parse_bytes(self, source_bytes: bytes, path: str | None = None) -> ParsedSource:
        tree = self._parser.parse(source_bytes)
        return ParsedSource(tree=tree, source_bytes=source_bytes, path=path)

    def parse_text(self, source_text: str, path: str | None = None) -> ParsedSource:
        return self.parse_bytes(source_text.encode("utf-8"), path=path)

    def parse_file(self, path: str) -> ParsedSource:
        with open(path, "rb") as handle:
            source_bytes = handle.read()
        return self.parse_bytes(source_bytes, path=path)
