"""NetworkX symbol table built from extracted modules."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

import networkx as nx

from .file_walker import package_of
from .models import (
    KIND_CLASS,
    KIND_CONSTRUCTOR,
    KIND_PACKAGE,
    AnnotationRef,
    CallSite,
    Definition,
    ExtractedModule,
    ImportItem,
    Location,
    Symbol,
)


logger = logging.getLogger(__name__)

EDGE_OWNS = "OWNS"
RECEIVER_NAMES = {"self", "cls"}
CONSTRUCTOR_NAME = "__init__"


def package_node_id(name: str) -> str:
    return f"package:{name}"


def class_node_id(fqname: str) -> str:
    return f"class:{fqname}"


def function_node_id(fqname: str) -> str:
    return f"func:{fqname}"


def _join(*parts: str | None) -> str:
    return ".".join(part for part in parts if part)


class SymbolTable:
    """Read-only view over declarations: kinds, direct annotations and ownership."""

    def __init__(self, graph: nx.DiGraph | None = None) -> None:
        self.graph = graph if graph is not None else nx.DiGraph()
        self._by_fqname: dict[str, str] = {}
        for node_id, attrs in self.graph.nodes(data=True):
            if attrs.get("kind") != KIND_PACKAGE:
                self._by_fqname[self.symbol(node_id).fqname] = node_id

    # -- construction -------------------------------------------------

    def add_package(self, name: str, annotations: Iterable[str] = ()) -> Symbol:
        node_id = package_node_id(name)
        if node_id not in self.graph:
            self.graph.add_node(
                node_id, kind=KIND_PACKAGE, name=name.rpartition(".")[2], qualname=name, module=None
            )
        if annotations:
            existing = list(self.graph.nodes[node_id].get("annotations", []))
            existing.extend(value for value in annotations if value not in existing)
            self.graph.nodes[node_id]["annotations"] = existing
        return self.symbol(node_id)

    def add_symbol(
        self,
        kind: str,
        module: str,
        qualname: str,
        annotations: Iterable[str] = (),
        returns: str | None = None,
        path: str | None = None,
        location: Location | None = None,
        owner: str | None = None,
        package: str | None = None,
        bases: Iterable[str] = (),
        suggest: str | None = None,
    ) -> Symbol:
        """Add a class or function; ``owner`` is the owning node id (defaults to the package)."""
        fqname = _join(module, qualname)
        if package is None:
            package = package_of(module, False)
        node_id = class_node_id(fqname) if kind == KIND_CLASS else function_node_id(fqname)
        attrs = {
            "kind": kind,
            "name": qualname.rpartition(".")[2],
            "qualname": qualname,
            "module": module,
            "annotations": list(annotations),
            "returns": returns,
            "path": path,
            "package": package,
            "bases": list(bases),
            "suggest": suggest,
        }
        if location is not None:
            attrs["line"] = location.line
            attrs["column"] = location.column
        self.graph.add_node(node_id, **attrs)
        self._by_fqname[fqname] = node_id

        if owner is None:
            owner = self.add_package(package).id
        self.graph.add_edge(owner, node_id, type=EDGE_OWNS)
        return self.symbol(node_id)

    def bind_imports(self, module: str, bindings: dict[str, str]) -> None:
        self.graph.graph.setdefault("bindings", {})[module] = dict(bindings)

    # -- symbol model -------------------------------------------------

    def symbol(self, node_id: str) -> Symbol:
        attrs = self.graph.nodes[node_id]
        location = None
        if "line" in attrs:
            location = Location(line=attrs["line"], column=attrs.get("column", 1))
        return Symbol(
            id=node_id,
            kind=attrs["kind"],
            name=attrs["name"],
            qualname=attrs["qualname"],
            module=attrs.get("module"),
            annotations=tuple(AnnotationRef(name) for name in attrs.get("annotations", [])),
            returns=attrs.get("returns"),
            path=attrs.get("path"),
            location=location,
            package=attrs.get("package"),
            bases=tuple(attrs.get("bases", [])),
            suggest=attrs.get("suggest"),
        )

    def symbols(self, kind: str | None = None) -> Iterator[Symbol]:
        for node_id, attrs in self.graph.nodes(data=True):
            if kind is None or attrs.get("kind") == kind:
                yield self.symbol(node_id)

    def lookup(self, fqname: str) -> Symbol | None:
        node_id = self._by_fqname.get(fqname)
        if node_id is None:
            return None
        return self.symbol(node_id)

    def owner(self, symbol: Symbol) -> Symbol | None:
        if symbol.id not in self.graph:
            # Implicit members belong to the symbol their qualified name is nested in.
            return self.lookup(symbol.fqname.rpartition(".")[0])
        for owner_id in self.graph.predecessors(symbol.id):
            if self.graph.edges[owner_id, symbol.id].get("type") == EDGE_OWNS:
                return self.symbol(owner_id)
        return None

    def enclosing_type(self, symbol: Symbol) -> Symbol | None:
        """Nearest lexically enclosing class, looking through enclosing functions."""
        current = self.owner(symbol)
        while current is not None and current.kind != KIND_PACKAGE:
            if current.is_type:
                return current
            current = self.owner(current)
        return None

    def enclosing_package(self, symbol: Symbol) -> Symbol | None:
        if symbol.kind == KIND_PACKAGE:
            return symbol
        package = symbol.package
        if package is None and symbol.module is not None:
            package = package_of(symbol.module, False)
        if package is None:
            return None
        node_id = package_node_id(package)
        if node_id not in self.graph:
            return None
        return self.symbol(node_id)

    # -- call resolution ----------------------------------------------

    def constructor(self, cls: Symbol) -> Symbol:
        """The class's own ``__init__``, or the implicit constructor it would have."""
        fqname = f"{cls.fqname}.{CONSTRUCTOR_NAME}"
        symbol = self.lookup(fqname)
        if symbol is not None:
            return symbol
        return Symbol(
            id=function_node_id(fqname),
            kind=KIND_CONSTRUCTOR,
            name=CONSTRUCTOR_NAME,
            qualname=f"{cls.qualname}.{CONSTRUCTOR_NAME}",
            module=cls.module,
            path=cls.path,
            location=cls.location,
            package=cls.package,
        )

    def resolve_call(self, module: str, call: CallSite) -> Symbol | None:
        """Resolve the target of ``call`` made from ``module`` without any dataflow."""
        for candidate in self._call_candidates(module, call):
            symbol = self.find(candidate)
            if symbol is not None:
                return symbol
        logger.debug("Unresolved call target %s in %s", call.name, module)
        return None

    def find(self, fqname: str, _seen: set[str] | None = None) -> Symbol | None:
        """Look up ``fqname``, following re-exporting imports and class bases.

        ``pkg.make`` finds ``pkg.core.make`` when ``pkg`` imports it, and
        ``mod.Sub.build`` finds ``mod.Base.build`` when ``Sub`` inherits it.
        """
        seen = _seen if _seen is not None else set()
        if fqname in seen:
            return None
        seen.add(fqname)

        symbol = self.lookup(fqname)
        if symbol is not None:
            return symbol

        owner, _, member = fqname.rpartition(".")
        if not owner:
            return None

        target = self.graph.graph.get("bindings", {}).get(owner, {}).get(member)
        if target:
            return self.find(target, seen)

        owner_symbol = self.find(owner, seen)
        if owner_symbol is None or not owner_symbol.is_type:
            return None
        if owner_symbol.fqname != owner:
            return self.find(f"{owner_symbol.fqname}.{member}", seen)
        for base in owner_symbol.bases:
            symbol = self.find(f"{base}.{member}", seen)
            if symbol is not None:
                return symbol
        return None

    def _call_candidates(self, module: str, call: CallSite) -> Iterator[str]:
        head, _, rest = call.name.partition(".")
        scope = list(call.scope)

        if head in RECEIVER_NAMES and rest:
            class_scope = _current_class(scope)
            if class_scope:
                yield _join(module, class_scope, rest)
            return

        # Enclosing function scopes see their local definitions; class bodies do not.
        for idx in range(len(scope), 0, -1):
            kind, _ = scope[idx - 1]
            if kind == "function":
                names = [value for _, value in scope[:idx]]
                yield _join(module, *names, call.name)
        if scope and scope[-1][0] == "class":
            names = [value for _, value in scope]
            yield _join(module, *names, call.name)

        yield _join(module, call.name)

        target = self.graph.graph.get("bindings", {}).get(module, {}).get(head)
        if target:
            yield _join(target, rest)

    def __len__(self) -> int:
        return self.graph.number_of_nodes()


def _current_class(scope: list[tuple[str, str]]) -> str | None:
    for idx in range(len(scope) - 1, -1, -1):
        kind, _ = scope[idx]
        if kind == "class":
            names = [value for _, value in scope[: idx + 1]]
            return ".".join(names)
    return None


def import_bindings(module: str, is_package: bool, imports: Iterable[ImportItem]) -> dict[str, str]:
    """Map each name bound by ``imports`` in ``module`` to the dotted name it refers to."""
    bindings: dict[str, str] = {}
    base_package = package_of(module, is_package)

    for item in imports:
        if item.kind == "import":
            for imported in item.names:
                if imported.alias:
                    bindings[imported.alias] = imported.name
                else:
                    head = imported.name.split(".", 1)[0]
                    bindings[head] = head
            continue

        source = item.module or ""
        if item.level:
            parts = base_package.split(".") if base_package else []
            keep = len(parts) - (item.level - 1)
            if keep < 0:
                continue
            source = _join(".".join(parts[:keep]), item.module)
        for imported in item.names:
            if imported.name == "*":
                continue
            bindings[imported.alias or imported.name] = _join(source, imported.name)

    return bindings


def resolve_name(
    name: str,
    module: str,
    bindings: dict[str, str],
    local_classes: set[str],
) -> str:
    """Resolve dotted text written in ``module`` (a decorator, a base class) to a qualified name."""
    head, _, rest = name.partition(".")
    target = bindings.get(head)
    if target:
        return _join(target, rest)
    if head in local_classes:
        return _join(module, name)
    return name


def build_symbol_table(extracted: Iterable[ExtractedModule]) -> SymbolTable:
    table = SymbolTable()
    modules = [entry for entry in extracted if entry.module is not None]

    for entry in modules:
        table.add_package(package_of(entry.module, entry.is_package))

    for entry in modules:
        module = entry.module
        package = package_of(module, entry.is_package)
        bindings = import_bindings(module, entry.is_package, entry.imports)
        table.bind_imports(module, bindings)
        local_classes = {
            definition.name for definition in entry.classes if "." not in definition.qualname
        }

        if entry.is_package and entry.package_annotations:
            table.add_package(
                module,
                annotations=[
                    value if literal else resolve_name(value, module, bindings, local_classes)
                    for value, literal in entry.package_annotations
                ],
            )

        definitions: list[Definition] = sorted(
            [*entry.classes, *entry.functions],
            key=lambda definition: definition.qualname.count("."),
        )
        for definition in definitions:
            owner_qualname = definition.qualname.rpartition(".")[0]
            owner = None
            if owner_qualname:
                owner_symbol = table.lookup(_join(module, owner_qualname))
                owner = owner_symbol.id if owner_symbol is not None else None
            table.add_symbol(
                kind=definition.kind,
                module=module,
                qualname=definition.qualname,
                annotations=[
                    resolve_name(name, module, bindings, local_classes)
                    for name in definition.decorators
                ],
                bases=[
                    resolve_name(name, module, bindings, local_classes)
                    for name in definition.bases
                ],
                suggest=definition.suggest,
                returns=definition.returns,
                path=entry.path,
                location=definition.location,
                owner=owner,
                package=package,
            )

    logger.debug(
        "Symbol table built: %d symbols from %d modules", len(table), len(modules)
    )
    return table
