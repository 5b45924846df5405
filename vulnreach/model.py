"""Packages, modules and the vulnerability reachability graphs."""

from __future__ import annotations

from dataclasses import dataclass, field

from vulnreach.osv import Entry


@dataclass(frozen=True)
class Position:
    """A location in a source file; line and column are 1-based, 0 if unknown."""

    filename: str = ""
    offset: int = 0
    line: int = 0
    column: int = 0


@dataclass
class Module:
    """A module of the analysed code."""

    path: str = ""
    version: str = ""
    dir: str = ""
    replace: Module | None = None


@dataclass(eq=False)
class Package:
    """A package of the analysed code.

    ``symbols`` lists every top-level function and method the package
    defines, methods named ``<Type>.<method>``.
    """

    name: str = ""
    pkg_path: str = ""
    imports: list[Package] = field(default_factory=list)
    module: Module | None = None
    symbols: list[str] = field(default_factory=list)


@dataclass(eq=False)
class Vuln:
    """A detected vulnerability and its place in the result graphs.

    The sink fields hold node IDs in the respective graphs, 0 when absent.
    """

    osv: Entry | None = None
    symbol: str = ""
    pkg_path: str = ""
    mod_path: str = ""
    call_sink: int = 0
    import_sink: int = 0
    require_sink: int = 0


@dataclass
class CallSite:
    """A function call made from the function with ID ``parent``."""

    parent: int = 0
    name: str = ""
    recv_type: str = ""
    pos: Position | None = None
    resolved: bool = False


@dataclass(eq=False)
class FuncNode:
    """A function in the call graph."""

    id: int = 0
    name: str = ""
    recv_type: str = ""
    pkg_path: str = ""
    pos: Position | None = None
    call_sites: list[CallSite] = field(default_factory=list)

    def __str__(self) -> str:
        prefix = self.recv_type or self.pkg_path
        return f"{prefix}.{self.name}"


@dataclass
class CallGraph:
    """Call graph slice directed from vulnerable functions towards entries."""

    functions: dict[int, FuncNode] = field(default_factory=dict)
    entries: list[int] = field(default_factory=list)


@dataclass(eq=False)
class ModNode:
    """A module in the requires graph; ``replace`` is 0 when not replaced."""

    id: int = 0
    path: str = ""
    version: str = ""
    replace: int = 0
    required_by: list[int] = field(default_factory=list)


@dataclass
class RequireGraph:
    """Module requires slice directed from vulnerable modules towards entries."""

    modules: dict[int, ModNode] = field(default_factory=dict)
    entries: list[int] = field(default_factory=list)


@dataclass(eq=False)
class PkgNode:
    """A package in the import graph."""

    id: int = 0
    name: str = ""
    path: str = ""
    module: int = 0
    imported_by: list[int] = field(default_factory=list)
    package: Package | None = field(default=None, repr=False)


@dataclass
class ImportGraph:
    """Package import slice directed from vulnerable packages towards entries."""

    packages: dict[int, PkgNode] = field(default_factory=dict)
    entries: list[int] = field(default_factory=list)


@dataclass
class Result:
    """How known vulnerabilities are reachable in the analysed code."""

    calls: CallGraph = field(default_factory=CallGraph)
    imports: ImportGraph = field(default_factory=ImportGraph)
    requires: RequireGraph = field(default_factory=RequireGraph)
    vulns: list[Vuln] = field(default_factory=list)
    modules: list[Module] = field(default_factory=list)


def is_std_package(path: str) -> bool:
    """Report whether an import path belongs to the standard library."""
    if not path:
        return False
    first = path.split("/", 1)[0]
    return "." not in first