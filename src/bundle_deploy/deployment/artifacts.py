"""Dependency coordinates and artifact resolution.

Declared dependencies and resolvable artifacts are both plain
``(group, artifact, version)`` coordinates; they match only when all three
fields are equal.  Resolution of coordinates to a local archive is
delegated to an :class:`ArtifactResolver`.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from bundle_deploy.errors import ResolutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactCoordinates:
    """Maven-style artifact coordinates.

    Attributes
    ----------
    group:
        Group id, e.g. ``"com.example"``.
    artifact:
        Artifact id, e.g. ``"billing-api"``.
    version:
        Exact version string, e.g. ``"1.0.2"``.
    """

    group: str
    artifact: str
    version: str

    def __post_init__(self) -> None:
        for field_name in ("group", "artifact", "version"):
            if not getattr(self, field_name):
                raise ValueError(f"{field_name} must not be empty")

    @classmethod
    def parse(cls, text: str) -> "ArtifactCoordinates":
        """Parse ``"group:artifact:version"``."""
        parts = text.strip().split(":")
        if len(parts) != 3:
            raise ValueError(f"Expected 'group:artifact:version', got {text!r}")
        return cls(*(part.strip() for part in parts))

    @classmethod
    def from_value(cls, value: object) -> "ArtifactCoordinates":
        """Build coordinates from a ``"g:a:v"`` string or a mapping."""
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, Mapping):
            try:
                return cls(
                    group=str(value["group"]),
                    artifact=str(value["artifact"]),
                    version=str(value["version"]),
                )
            except KeyError as exc:
                raise ValueError(f"Coordinates mapping is missing {exc.args[0]!r}") from exc
        raise ValueError(f"Cannot read coordinates from {value!r}")

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"


@dataclass(frozen=True)
class ResolvedArtifact:
    """Coordinates together with the local file they resolved to, if any."""

    coordinates: ArtifactCoordinates
    path: Path | None = None


class ArtifactResolver:
    """Protocol-like base for artifact resolvers.

    Subclass this and implement :meth:`resolve` to look artifacts up in a
    package repository.
    """

    def resolve(self, coordinates: ArtifactCoordinates) -> Path | None:
        """Return the local archive for *coordinates*.

        Returns ``None`` when the artifact is known but has no file to
        deploy.

        Raises
        ------
        ResolutionError
            If the artifact cannot be located.
        """
        raise NotImplementedError


class LocalRepositoryResolver(ArtifactResolver):
    """Resolve artifacts from a Maven-layout directory.

    ``com.example:api:1.0`` maps to
    ``<root>/com/example/api/1.0/api-1.0.<extension>``.

    Parameters
    ----------
    root:
        Repository root.  Default: ``~/.m2/repository``.
    extension:
        Archive file extension.  Default: ``"jar"``.
    """

    def __init__(self, root: Path | None = None, extension: str = "jar") -> None:
        self._root = root if root is not None else Path.home() / ".m2" / "repository"
        self._extension = extension

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, coordinates: ArtifactCoordinates) -> Path:
        group_dir = Path(*coordinates.group.split("."))
        file_name = f"{coordinates.artifact}-{coordinates.version}.{self._extension}"
        return self._root / group_dir / coordinates.artifact / coordinates.version / file_name

    def resolve(self, coordinates: ArtifactCoordinates) -> Path | None:
        candidate = self.path_for(coordinates)
        if not candidate.is_file():
            raise ResolutionError(coordinates, f"{candidate} does not exist")
        logger.debug("Resolved %s to %s", coordinates, candidate)
        return candidate


__all__ = [
    "ArtifactCoordinates",
    "ArtifactResolver",
    "LocalRepositoryResolver",
    "ResolvedArtifact",
]
