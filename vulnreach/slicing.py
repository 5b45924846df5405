"""Slicing of package import and module requires graphs down to vulnerabilities."""

from __future__ import annotations

import itertools
from typing import Iterable

from vulnreach.model import (
    ImportGraph,
    ModNode,
    Module,
    Package,
    PkgNode,
    RequireGraph,
    Result,
    Vuln,
    is_std_package,
)
from vulnreach.modvulns import ModuleVulnerabilities


def new_result() -> Result:
    """Return an empty result with empty call, import and requires graphs."""
    return Result()


def set_modules(result: Result, mods: Iterable[Module]) -> None:
    """Append ``mods`` to ``result.modules``, sorted by path and without directories."""
    mods = list(mods)
    # Directories are not needed in the result.
    for mod in mods:
        mod.dir = ""
        if mod.replace is not None:
            mod.replace.dir = ""
    result.modules.extend(sorted(mods, key=lambda m: m.path))


def _mod_key(mod: Module) -> tuple[str, str]:
    return (mod.path, mod.version)


class _Slicer:
    """Builds the import and requires slices of one result."""

    def __init__(
        self,
        mod_vulns: ModuleVulnerabilities,
        result: Result,
        stdlib_module: Module | None,
    ) -> None:
        self._mod_vulns = mod_vulns
        self._result = result
        self._stdlib_module = stdlib_module
        self._pkg_ids = itertools.count(len(result.imports.packages) + 1)
        self._mod_ids = itertools.count(len(result.requires.modules) + 1)
        # A package mapped to None was visited and leads to no vulnerability.
        self._analyzed: dict[Package, PkgNode | None] = {}
        self._mod_node_ids: dict[tuple[str, str], int] = {}

    def run(self, pkgs: Iterable[Package]) -> None:
        imports = self._result.imports
        for pkg in pkgs:
            node = self._import_slice(pkg)
            if node is not None:
                imports.entries.append(node.id)
        self._module_slice()

    def _import_slice(self, pkg: Package) -> PkgNode | None:
        if pkg in self._analyzed:
            return self._analyzed[pkg]
        self._analyzed[pkg] = None

        on_slice = [
            node
            for node in (self._import_slice(imp) for imp in pkg.imports)
            if node is not None
        ]
        vulns = self._mod_vulns.vulns_for_package(pkg.pkg_path)
        if not on_slice and not vulns:
            return None

        node_id = next(self._pkg_ids)
        node = PkgNode(id=node_id, name=pkg.name, path=pkg.pkg_path, package=pkg)
        self._analyzed[pkg] = node
        self._result.imports.packages[node_id] = node

        for imp_node in on_slice:
            imp_node.imported_by.append(node_id)

        for entry in vulns:
            for affected in entry.affected:
                for imp in affected.ecosystem_specific.imports:
                    if imp.path != node.path:
                        continue
                    for symbol in imp.symbols or pkg.symbols:
                        self._result.vulns.append(
                            Vuln(
                                osv=entry,
                                symbol=symbol,
                                pkg_path=node.path,
                                import_sink=node_id,
                            )
                        )
        return node

    def _module_node_id(self, pkg_node: PkgNode) -> int:
        mod = pkg_node.package.module if pkg_node.package is not None else None
        if is_std_package(pkg_node.path):
            # Standard library packages have no module of their own.
            mod = self._stdlib_module
        if mod is None:
            return 0

        key = _mod_key(mod)
        if key in self._mod_node_ids:
            return self._mod_node_ids[key]

        modules = self._result.requires.modules
        node_id = next(self._mod_ids)
        node = ModNode(id=node_id, path=mod.path, version=mod.version)
        modules[node_id] = node
        self._mod_node_ids[key] = node_id

        if mod.replace is not None:
            replace_key = _mod_key(mod.replace)
            replace_id = self._mod_node_ids.get(replace_key)
            if replace_id is None:
                replace_id = next(self._mod_ids)
                modules[replace_id] = ModNode(
                    id=replace_id, path=mod.replace.path, version=mod.replace.version
                )
                self._mod_node_ids[replace_key] = replace_id
            node.replace = replace_id
        return node_id

    def _module_slice(self) -> None:
        packages = self._result.imports.packages
        requires = self._result.requires
        preds: dict[int, set[int]] = {}

        for pkg_id in sorted(packages):
            pkg_node = packages[pkg_id]
            mod_id = self._module_node_id(pkg_node)
            pkg_node.module = mod_id
            pred_set = preds.setdefault(mod_id, set())
            for pred_pkg_id in pkg_node.imported_by:
                pred_mod_id = self._module_node_id(packages[pred_pkg_id])
                # Imports within one module would make self-loops.
                if pred_mod_id != mod_id:
                    pred_set.add(pred_mod_id)

        seen_entries: set[int] = set()
        for entry_id in self._result.imports.entries:
            entry_mod_id = self._module_node_id(packages[entry_id])
            if entry_mod_id in seen_entries:
                continue
            seen_entries.add(entry_mod_id)
            requires.entries.append(entry_mod_id)

        for mod_id, pred_ids in preds.items():
            if mod_id == 0:
                continue
            requires.modules[mod_id].required_by = sorted(pred_ids)

        for vuln in self._result.vulns:
            pkg_node = packages[vuln.import_sink]
            vuln.require_sink = pkg_node.module
            mod_node = requires.modules.get(pkg_node.module)
            vuln.mod_path = mod_node.path if mod_node is not None else ""


def vuln_package_module_slice(
    pkgs: Iterable[Package],
    mod_vulns: ModuleVulnerabilities,
    result: Result,
    stdlib_module: Module | None,
) -> None:
    """Fill the import and requires graphs of ``result`` for ``pkgs``.

    Only packages that are vulnerable, or transitively import a vulnerable
    package, enter the import graph; the requires graph is built as an
    overlay of it. Standard library packages are attributed to
    ``stdlib_module``. A :class:`Vuln` is recorded for each affected symbol.
    """
    _Slicer(mod_vulns, result, stdlib_module).run(pkgs)