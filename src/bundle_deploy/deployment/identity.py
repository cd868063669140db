"""Read a bundle's logical identity from its archive.

The symbolic name lives in the ``Bundle-SymbolicName`` header of the JAR
manifest (``META-INF/MANIFEST.MF``).  Manifest lines are wrapped at 72
bytes; a line starting with a single space continues the previous one.
"""
from __future__ import annotations

import zipfile
from pathlib import Path

from bundle_deploy.errors import IdentityError

MANIFEST_PATH = "META-INF/MANIFEST.MF"
SYMBOLIC_NAME_HEADER = "Bundle-SymbolicName"


def parse_manifest(text: str) -> dict[str, str]:
    """Return the main-section headers of a JAR manifest.

    Parsing stops at the first blank line, which ends the main section.
    """
    headers: dict[str, str] = {}
    last_key: str | None = None
    for line in text.splitlines():
        if not line.strip():
            break
        if line.startswith(" ") and last_key is not None:
            headers[last_key] += line[1:]
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        last_key = key.strip()
        headers[last_key] = value.strip()
    return headers


def read_symbolic_name(path: Path) -> str:
    """Return the ``Bundle-SymbolicName`` of the archive at *path*.

    Directives such as ``;singleton:=true`` are stripped.

    Raises
    ------
    IdentityError
        If the file is not a readable archive, has no manifest, or the
        manifest carries no symbolic name.
    """
    try:
        with zipfile.ZipFile(path) as archive:
            raw = archive.read(MANIFEST_PATH)
    except KeyError as exc:
        raise IdentityError(path, "archive has no manifest") from exc
    except (OSError, zipfile.BadZipFile) as exc:
        raise IdentityError(path, str(exc)) from exc

    headers = parse_manifest(raw.decode("utf-8", errors="replace"))
    value = headers.get(SYMBOLIC_NAME_HEADER, "")
    name = value.split(";", 1)[0].strip()
    if not name:
        raise IdentityError(path, f"manifest has no {SYMBOLIC_NAME_HEADER} header")
    return name


__all__ = ["MANIFEST_PATH", "SYMBOLIC_NAME_HEADER", "parse_manifest", "read_symbolic_name"]
