import pytest

from vulnreach.model import (
    CallGraph,
    FuncNode,
    ImportGraph,
    Module,
    Package,
    PkgNode,
    Result,
    Vuln,
    is_std_package,
)


def test_func_node_str_without_receiver():
    node = FuncNode(id=1, name="X", pkg_path="example.org/entry/x")
    assert str(node) == "example.org/entry/x.X"


def test_func_node_str_with_receiver():
    node = FuncNode(
        id=2,
        name="Vuln1",
        pkg_path="example.org/amod/avuln",
        recv_type="example.org/amod/avuln.VulnData",
    )
    assert str(node) == "example.org/amod/avuln.VulnData.Vuln1"


@pytest.mark.parametrize(
    "path,want",
    [
        ("net/http", True),
        ("archive/zip", True),
        ("example.org/amod/avuln", False),
        ("example.mod/a", False),
        ("", False),
    ],
)
def test_is_std_package(path, want):
    assert is_std_package(path) is want


def test_result_defaults_are_empty_and_independent():
    first = Result()
    second = Result()
    assert first.calls.functions == {} and first.calls.entries == []
    assert first.imports.packages == {} and first.requires.modules == {}
    first.vulns.append(Vuln(symbol="V"))
    first.imports.entries.append(1)
    assert second.vulns == []
    assert second.imports.entries == []


def test_vulns_are_distinct_keys():
    a = Vuln(symbol="Vuln", pkg_path="example.org/bmod/bvuln")
    b = Vuln(symbol="Vuln", pkg_path="example.org/bmod/bvuln")
    table = {a: 1, b: 2}
    assert len(table) == 2
    assert table[a] == 1


def test_module_replace_and_equality():
    replaced = Module(path="example.mod/a/b", version="v1.0.0", replace=Module(path="example.mod/b"))
    assert replaced.replace.path == "example.mod/b"
    assert replaced == Module(path="example.mod/a/b", version="v1.0.0", replace=Module(path="example.mod/b"))


def test_package_imports_and_node_link():
    leaf = Package(name="w", pkg_path="example.org/wmod/w")
    root = Package(name="x", pkg_path="example.org/entry/x", imports=[leaf])
    node = PkgNode(id=1, name=root.name, path=root.pkg_path, package=root)
    graph = ImportGraph(packages={1: node}, entries=[1])
    assert graph.packages[1].package.imports[0] is leaf
    assert graph.packages[graph.entries[0]].path == "example.org/entry/x"


def test_call_graph_holds_nodes_by_id():
    node = FuncNode(id=5, name="vuln1")
    graph = CallGraph(functions={5: node}, entries=[5])
    assert graph.functions[graph.entries[0]] is node