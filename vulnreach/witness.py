"""Representative import chains and call stacks leading to vulnerabilities."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from vulnreach.model import (
    CallSite,
    FuncNode,
    PkgNode,
    Position,
    Result,
    Vuln,
    is_std_package,
)

ImportChain = list[PkgNode]


@dataclass
class StackEntry:
    """A frame of a call stack.

    ``call`` is the call site inducing the next frame; None for the last one.
    """

    function: FuncNode
    call: CallSite | None = None


CallStack = list[StackEntry]


def import_chains(result: Result) -> dict[Vuln, list[ImportChain]]:
    """Return representative import chains for each vulnerability in ``result``.

    A breadth-first search runs from the vulnerable package up to the entry
    packages, visiting each package once, so chains come out ordered by
    length. Vulnerabilities of the same package share the same chains.
    """
    per_package: dict[int, list[Vuln]] = {}
    for vuln in result.vulns:
        per_package.setdefault(vuln.import_sink, []).append(vuln)

    chains: dict[Vuln, list[ImportChain]] = {}
    for pkg_id, vulns in per_package.items():
        found = _import_chains(pkg_id, result)
        for vuln in vulns:
            chains[vuln] = found
    return chains


def _import_chains(sink_id: int, result: Result) -> list[ImportChain]:
    if sink_id == 0:
        return []
    packages = result.imports.packages
    entries = set(result.imports.entries)

    chains: list[ImportChain] = []
    seen: set[int] = set()
    queue: deque[ImportChain] = deque([[packages[sink_id]]])
    while queue:
        chain = queue.popleft()
        pkg = chain[0]
        if pkg.id in seen:
            continue
        seen.add(pkg.id)
        for importer_id in pkg.imported_by:
            importer = packages[importer_id]
            extended = [importer, *chain]
            if importer.id in entries:
                chains.append(extended)
            queue.append(extended)
    return chains


def call_stacks(result: Result) -> dict[Vuln, list[CallStack]]:
    """Return representative call stacks for each vulnerability in ``result``.

    A breadth-first search runs from the vulnerable symbol up to the entry
    functions, visiting each function at most once. Stacks are ordered by
    confidence, then length, then the number of unresolved call sites.
    """
    stacks: dict[Vuln, list[CallStack]] = {}
    for vuln in result.vulns:
        found = _call_stacks(vuln.call_sink, result)
        found.sort(key=lambda s: (confidence(s), len(s), weight(s)))
        stacks[vuln] = found
    return stacks


def _call_stacks(sink_id: int, result: Result) -> list[CallStack]:
    if sink_id == 0:
        return []
    functions = result.calls.functions
    entries = set(result.calls.entries)

    stacks: list[CallStack] = []
    seen: set[int] = set()
    queue: deque[CallStack] = deque([[StackEntry(function=functions[sink_id])]])
    while queue:
        stack = queue.popleft()
        func = stack[0].function
        if func.id in seen:
            continue
        seen.add(func.id)
        # One call site per caller suffices since each function is visited once.
        for site in _callsites(func.call_sites, result, seen):
            caller = functions[site.parent]
            extended = [StackEntry(function=caller, call=site), *stack]
            if caller.id in entries:
                stacks.append(extended)
            queue.append(extended)
    return stacks


def _func_sort_key(func: FuncNode) -> tuple:
    pos = func.pos
    if pos is None:
        return (True,)
    return (False, pos.line, pos.column, pos.filename, str(func))


def _callsites(
    sites: list[CallSite], result: Result, visited: set[int]
) -> list[CallSite]:
    """Pick the smallest call site per unvisited caller, ordered by caller."""
    smallest: dict[int, CallSite] = {}
    for site in sites:
        if site.parent in visited:
            continue
        if cs_less(site, smallest.get(site.parent)):
            smallest[site.parent] = site
    callers = sorted(
        (result.calls.functions[parent] for parent in smallest), key=_func_sort_key
    )
    return [smallest[caller.id] for caller in callers]


def weight(stack: CallStack) -> int:
    """Return the number of unresolved call sites in ``stack``."""
    return sum(1 for e in stack if e.call is not None and not e.call.resolved)


def confidence(stack: CallStack) -> int:
    """Return the number of frames of ``stack`` in standard library packages.

    Such stacks often turn out to be false positives.
    """
    return sum(1 for e in stack if is_std_package(e.function.pkg_path))


def stack_less(s1: CallStack, s2: CallStack) -> bool:
    """Order stacks by confidence, length and weight; ties count as less."""
    c1, c2 = confidence(s1), confidence(s2)
    if c1 != c2:
        return c1 < c2
    if len(s1) != len(s2):
        return len(s1) < len(s2)
    w1, w2 = weight(s1), weight(s2)
    if w1 != w2:
        return w1 < w2
    return True


def _cs_text(cs1: CallSite, cs2: CallSite) -> tuple[str, str]:
    return f"{cs1.recv_type}.{cs2.name}", f"{cs2.recv_type}.{cs2.name}"


def cs_less(cs1: CallSite, cs2: CallSite | None) -> bool:
    """Compare two call sites by location, then by their text."""
    if cs2 is None:
        return True
    p1, p2 = cs1.pos, cs2.pos
    if p1 is not None and p2 is not None:
        if pos_less(p1, p2):
            return True
        if pos_less(p2, p1):
            return False
        left, right = _cs_text(cs1, cs2)
        return left < right
    if p2 is None:
        return True
    if p1 is None:
        return False
    left, right = _cs_text(cs1, cs2)
    return left < right


def pos_less(p1: Position, p2: Position) -> bool:
    """Compare positions by line, column and then file name."""
    return (p1.line, p1.column, p1.filename) < (p2.line, p2.column, p2.filename)


def func_less(f1: FuncNode, f2: FuncNode) -> bool:
    """Compare function nodes by location, then by their string form."""
    p1, p2 = f1.pos, f2.pos
    if p1 is not None and p2 is not None:
        if pos_less(p1, p2):
            return True
        if pos_less(p2, p1):
            return False
        return str(f1) < str(f2)
    if p2 is None:
        return True
    if p1 is None:
        return False
    return str(f1) < str(f2)