"""JSON serialization helpers for symbol tables."""

from __future__ import annotations

import json
from pathlib import Path

from networkx.readwrite import json_graph

from .symbols import SymbolTable


def save_symbol_table(table: SymbolTable, path: str | Path) -> None:
    data = json_graph.node_link_data(table.graph)
    Path(path).write_text(json.dumps(data, indent=2), encoding="utf-8")


def load_symbol_table(path: str | Path) -> SymbolTable:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    graph = json_graph.node_link_graph(data, directed=True)
    return SymbolTable(graph)
