"""Per-module vulnerability sets and the queries run against them."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Iterable

from vulnreach.model import Module, is_std_package
from vulnreach.osv import (
    AffectsRange,
    EcosystemSpecific,
    EcosystemSpecificImport,
    Entry,
)

STDLIB_MODULE_PATH = "stdlib"

AffectsFunc = Callable[[list[AffectsRange], str], bool]


@dataclass
class ModuleVulns:
    """The vulnerabilities known for one module."""

    mod: Module
    vulns: list[Entry] = field(default_factory=list)


def matches_platform_component(value: str, values: Iterable[str]) -> bool:
    """Report whether a GOOS (or GOARCH) value matches a list of them.

    An empty value or an empty list matches everything.
    """
    values = list(values)
    if not value or not values:
        return True
    return value in values


def matches_platform(goos: str, goarch: str, imp: EcosystemSpecificImport) -> bool:
    """Report whether an affected import applies to the given platform."""
    return matches_platform_component(goos, imp.goos) and matches_platform_component(
        goarch, imp.goarch
    )


def vuln_matches_package(entry: Entry, pkg: str) -> bool:
    """Report whether an entry applies to the package with import path ``pkg``."""
    return any(
        imp.path == pkg
        for affected in entry.affected
        for imp in affected.ecosystem_specific.imports
    )


def _is_withdrawn(entry: Entry) -> bool:
    withdrawn = entry.withdrawn
    if withdrawn is None:
        return False
    if withdrawn.tzinfo is None:
        return withdrawn < datetime.now()
    return withdrawn < datetime.now(timezone.utc)


class ModuleVulnerabilities(list):
    """A list of :class:`ModuleVulns`, queried by package and symbol."""

    def filter(self, goos: str, goarch: str, affects: AffectsFunc) -> ModuleVulnerabilities:
        """Keep only vulnerabilities affecting each module's version and platform.

        ``affects(ranges, version)`` decides whether a version lies within the
        affected ranges. Empty ``goos``/``goarch`` mean any platform. Entries
        are copied; the originals are left untouched.
        """
        filtered = ModuleVulnerabilities()
        for mod_vulns in self:
            module = mod_vulns.mod
            version = module.replace.version if module.replace is not None else module.version
            kept: list[Entry] = []
            for entry in mod_vulns.vulns:
                if _is_withdrawn(entry):
                    continue
                affected_list = []
                for affected in entry.affected:
                    # Entries may mention related but different modules.
                    if affected.package.name != module.path:
                        continue
                    # An unknown version would only produce false alarms.
                    if not version:
                        continue
                    if not affects(affected.ranges, version):
                        continue
                    imports = affected.ecosystem_specific.imports
                    platform_imports = [
                        imp for imp in imports if matches_platform(goos, goarch, imp)
                    ]
                    if imports and not platform_imports:
                        continue
                    affected_list.append(
                        replace(
                            affected,
                            ecosystem_specific=EcosystemSpecific(imports=platform_imports),
                        )
                    )
                if affected_list:
                    kept.append(replace(entry, affected=affected_list))
            filtered.append(ModuleVulns(mod=module, vulns=kept))
        return filtered

    def _most_specific(self, import_path: str) -> ModuleVulns | None:
        is_std = is_std_package(import_path)
        best: ModuleVulns | None = None
        for mod_vulns in self:
            if is_std and mod_vulns.mod.path == STDLIB_MODULE_PATH:
                # Standard library packages belong to the artificial stdlib module.
                best = mod_vulns
            elif import_path.startswith(mod_vulns.mod.path):
                if best is None or len(best.mod.path) < len(mod_vulns.mod.path):
                    best = mod_vulns
        return best

    def vulns_for_package(self, import_path: str) -> list[Entry]:
        """Return the vulnerabilities of ``import_path``.

        They come from the module whose path is the longest prefix of the
        import path; an empty list is returned when there is none.
        """
        best = self._most_specific(import_path)
        if best is None:
            return []
        if best.mod.replace is not None:
            import_path = best.mod.replace.path + import_path[len(best.mod.path):]
        return [entry for entry in best.vulns if vuln_matches_package(entry, import_path)]

    def vulns_for_symbol(self, import_path: str, symbol: str) -> list[Entry]:
        """Return the vulnerabilities of ``import_path`` that affect ``symbol``."""
        result = []
        for entry in self.vulns_for_package(import_path):
            if any(
                imp.path == import_path and (not imp.symbols or symbol in imp.symbols)
                for affected in entry.affected
                for imp in affected.ecosystem_specific.imports
            ):
                result.append(entry)
        return result