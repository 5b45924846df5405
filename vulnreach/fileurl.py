"""Conversion between file-scheme URLs and file system paths."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from urllib.parse import quote, unquote


class FileURLError(ValueError):
    """A file URL or path could not be converted."""


_NOT_ABSOLUTE = "path is not absolute"
_SCHEME_RE = re.compile(r"([A-Za-z][A-Za-z0-9+.\-]*):")


@dataclass
class _URL:
    scheme: str = ""
    opaque: str = ""
    host: str = ""
    path: str = ""


def _parse(raw: str) -> _URL:
    raw, _, _ = raw.partition("#")
    url = _URL()
    match = _SCHEME_RE.match(raw)
    rest = raw
    if match is not None:
        url.scheme = match.group(1).lower()
        rest = raw[match.end():]
    rest, _, _ = rest.partition("?")
    if not rest.startswith("/") and url.scheme:
        url.opaque = rest
        return url
    if rest.startswith("//"):
        authority = rest[2:]
        slash = authority.find("/")
        if slash >= 0:
            authority, rest = authority[:slash], authority[slash:]
        else:
            rest = ""
        url.host = unquote(authority.rpartition("@")[2])
    url.path = unquote(rest)
    return url


def _is_windows(windows: bool | None) -> bool:
    return os.name == "nt" if windows is None else windows


def _is_slash(char: str) -> bool:
    return char in "\\/"


def _volume_name_len(path: str) -> int:
    if len(path) < 2:
        return 0
    first = path[0]
    if path[1] == ":" and first.isascii() and first.isalpha():
        return 2
    size = len(path)
    if (
        size >= 5
        and _is_slash(path[0])
        and _is_slash(path[1])
        and not _is_slash(path[2])
        and path[2] != "."
    ):
        n = 3
        while n < size - 1:
            if _is_slash(path[n]):
                n += 1
                if not _is_slash(path[n]):
                    if path[n] == ".":
                        break
                    while n < size and not _is_slash(path[n]):
                        n += 1
                    return n
                break
            n += 1
    return 0


def _volume_name(path: str, windows: bool) -> str:
    return path[: _volume_name_len(path)] if windows else ""


def _is_abs(path: str, windows: bool) -> bool:
    if not windows:
        return path.startswith("/")
    length = _volume_name_len(path)
    if length == 0:
        return False
    if length > 2:
        return True
    rest = path[length:]
    return bool(rest) and _is_slash(rest[0])


def _from_slash(path: str, windows: bool) -> str:
    return path.replace("/", "\\") if windows else path


def _to_slash(path: str, windows: bool) -> str:
    return path.replace("\\", "/") if windows else path


def _check_abs(path: str, windows: bool) -> str:
    if not _is_abs(path, windows):
        raise FileURLError(_NOT_ABSOLUTE)
    return path


def _format_url(host: str, path: str) -> str:
    return (
        "file://"
        + quote(host, safe="!$&'()*+,;=:[]")
        + quote(path, safe="/$&+,:;=@")
    )


def _convert_posix(host: str, path: str) -> str:
    if host not in ("", "localhost"):
        raise FileURLError("file URL specifies non-local host")
    return path


def _convert_windows(host: str, path: str) -> str:
    if not path or path[0] != "/":
        raise FileURLError(_NOT_ABSOLUTE)
    path = path.replace("/", "\\")
    # A host other than localhost names a UNC volume.
    if host and host != "localhost":
        if _volume_name_len(host):
            raise FileURLError(
                "file URL encodes volume in host field: too few slashes?"
            )
        return "\\\\" + host + path
    volume = path[1:][: _volume_name_len(path[1:])]
    if not volume or volume.startswith("\\\\"):
        raise FileURLError("file URL missing drive letter")
    return path[1:]


def url_to_file_path(url: str, windows: bool | None = None) -> str:
    """Convert a file-scheme URL to an absolute file path.

    ``windows`` selects Windows path rules; by default the host's rules apply.
    """
    windows = _is_windows(windows)
    parsed = _parse(url)
    if parsed.scheme != "file":
        raise FileURLError("non-file URL")
    if not parsed.path:
        if parsed.host or not parsed.opaque:
            raise FileURLError("file URL missing path")
        return _check_abs(_from_slash(parsed.opaque, windows), windows)
    if windows:
        path = _convert_windows(parsed.host, parsed.path)
    else:
        path = _convert_posix(parsed.host, parsed.path)
    return _check_abs(path, windows)


def url_from_file_path(path: str, windows: bool | None = None) -> str:
    """Convert an absolute file path to a file-scheme URL string."""
    windows = _is_windows(windows)
    if not _is_abs(path, windows):
        raise FileURLError(_NOT_ABSOLUTE)
    volume = _volume_name(path, windows)
    if volume:
        if volume.startswith("\\\\"):
            rest = _to_slash(path[2:], windows)
            slash = rest.find("/")
            if slash < 0:
                return _format_url(rest, "/")
            return _format_url(rest[:slash], rest[slash:])
        return _format_url("", "/" + _to_slash(path, windows))
    return _format_url("", _to_slash(path, windows))