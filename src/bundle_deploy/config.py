"""Deployment settings loaded from YAML.

A settings file describes the target runtime and, optionally, what to
deploy to it::

    target:
      host: runtime.example.org
      port: 8443
      use_https: true
      username: deployer
      password: s3cret
    activation: lenient            # strict | lenient
    replace_strategy: uninstall_first   # uninstall_first | override
    bundles:
      - target/billing-api-1.0.jar
    repository: ~/.m2/repository
    dependencies:
      declared:
        - com.example:billing-model:1.0
      resolvable:
        - group: com.example
          artifact: billing-model
          version: "1.0"

Relative bundle and repository paths are resolved against the directory
containing the settings file.
"""
from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from bundle_deploy.client.models import DeploymentTarget
from bundle_deploy.deployment.artifacts import ArtifactCoordinates
from bundle_deploy.deployment.orchestrator import ActivationPolicy, ReplaceStrategy
from bundle_deploy.errors import ConfigurationError


@dataclass
class DependencySettings:
    """Declared dependencies and the artifacts they may be resolved from.

    When ``resolvable`` is omitted in the file it defaults to ``declared``.
    """

    declared: list[ArtifactCoordinates] = field(default_factory=list)
    resolvable: list[ArtifactCoordinates] = field(default_factory=list)


@dataclass
class DeploySettings:
    """Everything a deployment run needs besides command-line overrides."""

    target: DeploymentTarget = field(default_factory=DeploymentTarget)
    activation: ActivationPolicy = ActivationPolicy.STRICT
    replace_strategy: ReplaceStrategy = ReplaceStrategy.UNINSTALL_FIRST
    bundles: list[Path] = field(default_factory=list)
    repository: Path | None = None
    dependencies: DependencySettings | None = None


def load_settings(source: Path | str) -> DeploySettings:
    """Load settings from a YAML file path.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or does not have the expected shape.
    """
    path = Path(source)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read settings file {path}: {exc}") from exc
    return parse_settings(content, base_dir=path.parent)


def parse_settings(yaml_text: str, base_dir: Path | None = None) -> DeploySettings:
    """Parse a YAML settings document.

    Parameters
    ----------
    yaml_text:
        The YAML document.
    base_dir:
        Directory that relative paths are resolved against.
    """
    try:
        data = yaml.safe_load(io.StringIO(yaml_text))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Settings are not valid YAML: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Settings YAML must be a mapping.")

    base = base_dir or Path.cwd()
    settings = DeploySettings()

    target_data = data.get("target") or {}
    if not isinstance(target_data, dict):
        raise ConfigurationError("'target' must be a mapping.")
    try:
        settings.target = DeploymentTarget(**target_data)
    except (TypeError, ValidationError) as exc:
        raise ConfigurationError(f"Invalid target settings: {exc}") from exc

    settings.activation = _enum_value(ActivationPolicy, data, "activation", settings.activation)
    settings.replace_strategy = _enum_value(
        ReplaceStrategy, data, "replace_strategy", settings.replace_strategy
    )

    bundles = data.get("bundles") or []
    if not isinstance(bundles, list):
        raise ConfigurationError("'bundles' must be a list of paths.")
    settings.bundles = [_resolve_path(base, str(entry)) for entry in bundles]

    if data.get("repository"):
        settings.repository = _resolve_path(base, str(data["repository"]))

    if "dependencies" in data:
        settings.dependencies = parse_dependencies(data["dependencies"])
    return settings


def parse_dependencies(data: Any) -> DependencySettings:
    """Read a ``{declared: [...], resolvable: [...]}`` mapping."""
    if not isinstance(data, dict) or "declared" not in data:
        raise ConfigurationError("'dependencies' must be a mapping with a 'declared' list.")
    declared = _coordinates_list(data["declared"], "declared")
    if data.get("resolvable") is None:
        resolvable = list(declared)
    else:
        resolvable = _coordinates_list(data["resolvable"], "resolvable")
    return DependencySettings(declared=declared, resolvable=resolvable)


def load_dependencies(source: Path | str) -> DependencySettings:
    """Load a dependency list file.

    The file may hold the ``declared``/``resolvable`` mapping at top level
    or nested under a ``dependencies`` key.
    """
    path = Path(source)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read dependency file {path}: {exc}") from exc
    if isinstance(data, dict) and "dependencies" in data:
        data = data["dependencies"]
    return parse_dependencies(data)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _coordinates_list(entries: Any, key: str) -> list[ArtifactCoordinates]:
    if not isinstance(entries, list):
        raise ConfigurationError(f"'{key}' must be a list of coordinates.")
    try:
        return [ArtifactCoordinates.from_value(entry) for entry in entries]
    except ValueError as exc:
        raise ConfigurationError(f"Invalid entry in '{key}': {exc}") from exc


def _enum_value(enum_cls: Any, data: dict[str, Any], key: str, default: Any) -> Any:
    raw = data.get(key)
    if raw is None:
        return default
    try:
        return enum_cls(str(raw).lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"'{key}' must be one of: {allowed}") from exc


def _resolve_path(base: Path, raw: str) -> Path:
    path = Path(raw).expanduser()
    return path if path.is_absolute() else base / path


__all__ = [
    "DependencySettings",
    "DeploySettings",
    "load_dependencies",
    "load_settings",
    "parse_dependencies",
    "parse_settings",
]
