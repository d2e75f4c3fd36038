from __future__ import annotations

from pathlib import Path
from tempfile import TemporaryDirectory

from returncheck.models import Verdict
from returncheck.policy import AnnotationPolicy
from returncheck.resolution import ResolutionEngine
from returncheck.storage import load_symbol_table, save_symbol_table


SAMPLE = """
from returncheck.annotations import CheckReturnValue
from .helpers import make


@CheckReturnValue
class Client:
    def fetch(self) -> int:
        return make()
"""


def test_save_and_load_symbol_table(build_project):
    table, _ = build_project(
        {
            "pkg/__init__.py": '__package_annotations__ = ("CheckReturnValue",)\n',
            "pkg/mod.py": SAMPLE,
        }
    )

    with TemporaryDirectory() as tmpdir:
        out_path = Path(tmpdir) / "symbols.json"
        save_symbol_table(table, out_path)
        loaded = load_symbol_table(out_path)

    assert set(loaded.graph.nodes) == set(table.graph.nodes)
    assert loaded.graph.number_of_edges() == table.graph.number_of_edges()

    fetch = loaded.lookup("pkg.mod.Client.fetch")
    assert fetch.returns == "int"
    assert fetch.location == table.lookup("pkg.mod.Client.fetch").location
    assert loaded.owner(fetch).fqname == "pkg.mod.Client"
    assert [item.qualified_name for item in loaded.enclosing_package(fetch).annotations] == [
        "CheckReturnValue"
    ]
    assert loaded.graph.graph["bindings"]["pkg.mod"]["make"] == "pkg.helpers.make"

    engine = ResolutionEngine(loaded, AnnotationPolicy.from_options())
    assert engine.resolve(fetch) is Verdict.MUST_CHECK
