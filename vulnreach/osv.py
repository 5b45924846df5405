"""Data types for the OSV shared vulnerability format.

Only the subset of the format used by the Go vulnerability database is
supported (for instance, only SEMVER affected ranges are meaningful).
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any


class AffectsRangeType(str, Enum):
    """Kind of an affected version range."""

    UNSPECIFIED = "UNSPECIFIED"
    GIT = "GIT"
    SEMVER = "SEMVER"


GO_ECOSYSTEM = "Go"


@dataclass
class Package:
    name: str = ""
    ecosystem: str = ""


@dataclass
class RangeEvent:
    introduced: str = ""
    fixed: str = ""


@dataclass
class AffectsRange:
    type: str = ""
    events: list[RangeEvent] = field(default_factory=list)


@dataclass
class Reference:
    type: str = ""
    url: str = ""


@dataclass
class DatabaseSpecific:
    url: str = ""


@dataclass
class EcosystemSpecificImport:
    """Additional information about an affected package.

    An empty ``symbols`` list means every symbol of the package is affected.
    Methods are listed as ``<recv>.<method>``.
    """

    path: str = ""
    goos: list[str] = field(default_factory=list)
    goarch: list[str] = field(default_factory=list)
    symbols: list[str] = field(default_factory=list)


@dataclass
class EcosystemSpecific:
    imports: list[EcosystemSpecificImport] = field(default_factory=list)


@dataclass
class Affected:
    package: Package = field(default_factory=Package)
    ranges: list[AffectsRange] = field(default_factory=list)
    database_specific: DatabaseSpecific = field(default_factory=DatabaseSpecific)
    ecosystem_specific: EcosystemSpecific = field(default_factory=EcosystemSpecific)


@dataclass
class Credit:
    name: str = ""
    contact: list[str] = field(default_factory=list)


_TIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})\Z"
)


def _parse_time(text: str) -> datetime:
    match = _TIME_RE.match(text)
    if match is None:
        raise ValueError(f"invalid RFC 3339 time: {text!r}")
    year, month, day, hour, minute, second, frac, zone = match.groups()
    micro = int((frac or "0")[:6].ljust(6, "0"))
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(sign * offset)
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tz
    )


def _format_time(value: datetime) -> str:
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if not offset:
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    return f"{text}{sign}{total // 3600:02d}:{total % 3600 // 60:02d}"


def _range_type(value: str) -> str:
    try:
        return AffectsRangeType(value)
    except ValueError:
        return value


def _type_text(value: str) -> str:
    return value.value if isinstance(value, AffectsRangeType) else value


def _event_to_dict(event: RangeEvent) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if event.introduced:
        out["introduced"] = event.introduced
    if event.fixed:
        out["fixed"] = event.fixed
    return out


def _import_to_dict(imp: EcosystemSpecificImport) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if imp.path:
        out["path"] = imp.path
    if imp.goos:
        out["goos"] = list(imp.goos)
    if imp.goarch:
        out["goarch"] = list(imp.goarch)
    if imp.symbols:
        out["symbols"] = list(imp.symbols)
    return out


def _affected_to_dict(affected: Affected) -> dict[str, Any]:
    out: dict[str, Any] = {
        "package": {
            "name": affected.package.name,
            "ecosystem": affected.package.ecosystem,
        }
    }
    if affected.ranges:
        out["ranges"] = [
            {
                "type": _type_text(r.type),
                "events": [_event_to_dict(e) for e in r.events],
            }
            for r in affected.ranges
        ]
    out["database_specific"] = {"url": affected.database_specific.url}
    specific: dict[str, Any] = {}
    if affected.ecosystem_specific.imports:
        specific["imports"] = [
            _import_to_dict(i) for i in affected.ecosystem_specific.imports
        ]
    out["ecosystem_specific"] = specific
    return out


def _affected_from_dict(data: dict[str, Any]) -> Affected:
    package = data.get("package") or {}
    specific = data.get("ecosystem_specific") or {}
    database = data.get("database_specific") or {}
    return Affected(
        package=Package(
            name=package.get("name", ""), ecosystem=package.get("ecosystem", "")
        ),
        ranges=[
            AffectsRange(
                type=_range_type(r.get("type", "")),
                events=[
                    RangeEvent(
                        introduced=e.get("introduced", ""), fixed=e.get("fixed", "")
                    )
                    for e in r.get("events") or []
                ],
            )
            for r in data.get("ranges") or []
        ],
        database_specific=DatabaseSpecific(url=database.get("url", "")),
        ecosystem_specific=EcosystemSpecific(
            imports=[
                EcosystemSpecificImport(
                    path=i.get("path", ""),
                    goos=list(i.get("goos") or []),
                    goarch=list(i.get("goarch") or []),
                    symbols=list(i.get("symbols") or []),
                )
                for i in specific.get("imports") or []
            ]
        ),
    )


def _optional_time(value: Any) -> datetime | None:
    return None if value is None else _parse_time(value)


@dataclass
class Entry:
    """An OSV vulnerability database entry."""

    id: str = ""
    published: datetime | None = None
    modified: datetime | None = None
    withdrawn: datetime | None = None
    aliases: list[str] = field(default_factory=list)
    details: str = ""
    affected: list[Affected] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    credits: list[Credit] = field(default_factory=list)
    schema_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object for this entry, omitting empty optional fields."""
        out: dict[str, Any] = {"id": self.id}
        for key in ("published", "modified", "withdrawn"):
            value = getattr(self, key)
            if value is not None:
                out[key] = _format_time(value)
        if self.aliases:
            out["aliases"] = list(self.aliases)
        out["details"] = self.details
        out["affected"] = [_affected_to_dict(a) for a in self.affected]
        if self.references:
            out["references"] = [{"type": r.type, "url": r.url} for r in self.references]
        if self.credits:
            credits = []
            for credit in self.credits:
                item: dict[str, Any] = {}
                if credit.name:
                    item["name"] = credit.name
                if credit.contact:
                    item["contact"] = list(credit.contact)
                credits.append(item)
            out["credits"] = credits
        if self.schema_version:
            out["schema_version"] = self.schema_version
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Entry:
        """Build an entry from a decoded JSON object."""
        if not isinstance(data, dict):
            raise ValueError("OSV entry must be a JSON object")
        return cls(
            id=data.get("id", ""),
            published=_optional_time(data.get("published")),
            modified=_optional_time(data.get("modified")),
            withdrawn=_optional_time(data.get("withdrawn")),
            aliases=list(data.get("aliases") or []),
            details=data.get("details", ""),
            affected=[_affected_from_dict(a) for a in data.get("affected") or []],
            references=[
                Reference(type=r.get("type", ""), url=r.get("url", ""))
                for r in data.get("references") or []
            ],
            credits=[
                Credit(name=c.get("name", ""), contact=list(c.get("contact") or []))
                for c in data.get("credits") or []
            ],
            schema_version=data.get("schema_version", ""),
        )


def loads(text: str | bytes) -> Entry:
    """Decode one OSV entry from JSON text."""
    return Entry.from_dict(json.loads(text))


def dumps(entry: Entry) -> str:
    """Encode one OSV entry as compact JSON text."""
    return json.dumps(entry.to_dict(), separators=(",", ":"), ensure_ascii=False)