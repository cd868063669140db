"""Tests for bundle_deploy.config."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from bundle_deploy.config import load_dependencies, load_settings, parse_settings
from bundle_deploy.deployment.artifacts import ArtifactCoordinates
from bundle_deploy.deployment.orchestrator import ActivationPolicy, ReplaceStrategy
from bundle_deploy.errors import ConfigurationError

_FULL_SETTINGS = textwrap.dedent(
    """
    target:
      host: runtime.example.org
      port: 8443
      use_https: true
      username: deployer
      password: s3cret
      proxy_host: proxy.local
      proxy_port: 3128
    activation: Lenient
    replace_strategy: override
    bundles:
      - target/app.jar
      - /abs/other.jar
    repository: repo
    dependencies:
      declared:
        - g:a:1.0
        - group: g
          artifact: b
          version: "2.0"
      resolvable:
        - g:a:1.0
    """
)


class TestParseSettings:
    def test_full_document(self, tmp_path: Path) -> None:
        settings = parse_settings(_FULL_SETTINGS, base_dir=tmp_path)
        assert settings.target.base_url == "https://runtime.example.org:8443"
        assert settings.target.proxy_url == "http://proxy.local:3128"
        assert settings.activation is ActivationPolicy.LENIENT
        assert settings.replace_strategy is ReplaceStrategy.OVERRIDE
        assert settings.bundles == [tmp_path / "target" / "app.jar", Path("/abs/other.jar")]
        assert settings.repository == tmp_path / "repo"
        assert settings.dependencies is not None
        assert settings.dependencies.declared == [
            ArtifactCoordinates("g", "a", "1.0"),
            ArtifactCoordinates("g", "b", "2.0"),
        ]
        assert settings.dependencies.resolvable == [ArtifactCoordinates("g", "a", "1.0")]

    def test_empty_document_gives_defaults(self) -> None:
        settings = parse_settings("")
        assert settings.target.base_url == "http://localhost:8080"
        assert settings.activation is ActivationPolicy.STRICT
        assert settings.replace_strategy is ReplaceStrategy.UNINSTALL_FIRST
        assert settings.bundles == []
        assert settings.dependencies is None

    def test_resolvable_defaults_to_declared(self) -> None:
        settings = parse_settings("dependencies:\n  declared: ['g:a:1']\n")
        assert settings.dependencies is not None
        assert settings.dependencies.resolvable == settings.dependencies.declared

    @pytest.mark.parametrize(
        "document",
        [
            "- just\n- a list\n",
            "target: [1, 2]\n",
            "target:\n  port: 99999\n",
            "target:\n  colour: blue\n  port: 0\n",
            "activation: sometimes\n",
            "bundles: app.jar\n",
            "dependencies:\n  resolvable: []\n",
            "dependencies:\n  declared: ['g:a']\n",
            "target: {host: [unclosed\n",
        ],
    )
    def test_invalid_documents(self, document: str) -> None:
        with pytest.raises(ConfigurationError):
            parse_settings(document)


class TestLoadFiles:
    def test_load_settings_resolves_relative_to_file(self, tmp_path: Path) -> None:
        config = tmp_path / "conf" / "deploy.yaml"
        config.parent.mkdir()
        config.write_text("bundles: [app.jar]\n", encoding="utf-8")
        assert load_settings(config).bundles == [config.parent / "app.jar"]

    def test_missing_settings_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_settings(tmp_path / "absent.yaml")

    def test_load_dependencies_top_level(self, tmp_path: Path) -> None:
        path = tmp_path / "deps.yaml"
        path.write_text("declared: ['g:a:1.0']\n", encoding="utf-8")
        assert load_dependencies(path).declared == [ArtifactCoordinates("g", "a", "1.0")]

    def test_load_dependencies_nested(self, tmp_path: Path) -> None:
        path = tmp_path / "deps.yaml"
        path.write_text("dependencies:\n  declared: ['g:a:1.0']\n  resolvable: []\n", encoding="utf-8")
        dependencies = load_dependencies(path)
        assert dependencies.resolvable == []
