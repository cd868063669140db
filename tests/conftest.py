"""Shared fakes for bundle-deploy tests.

``FakeRuntime`` stands in for a ``requests.Session`` and emulates the
runtime's REST surface in memory, so tests exercise the real transport,
client and orchestrator code without a network.
"""
from __future__ import annotations

import io
import json
import re
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import pytest
import requests

from bundle_deploy.client.builder import ClientBuilder
from bundle_deploy.client.management import ManagementClient, OVERRIDE_HEADER
from bundle_deploy.deployment.identity import MANIFEST_PATH, parse_manifest

_BUNDLE_PATH = re.compile(r"^/framework/bundle/(\d+)$")
_STATE_PATH = re.compile(r"^/framework/bundle/(\d+)/state$")

STATE_INSTALLED = 2


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", reason: str = "OK") -> None:
        self.status_code = status_code
        self.text = text
        self.reason = reason


class FakeRuntime:
    """Requests-like session backed by an in-memory bundle registry."""

    def __init__(self) -> None:
        self.bundles: dict[int, dict[str, Any]] = {}
        self.next_id = 1
        self.requests: list[dict[str, Any]] = []
        self.failures: dict[str, FakeResponse] = {}
        self.errors: dict[str, Exception] = {}
        self.list_body: str | None = None
        self.install_body: str | None = None
        self.close_count = 0
        # attributes set by TransportSession
        self.auth: Any = None
        self.verify: Any = True
        self.proxies: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def preinstall(self, symbolic_name: str, state: int = 32) -> int:
        bundle_id = self.next_id
        self.next_id += 1
        self.bundles[bundle_id] = {
            "id": bundle_id,
            "symbolicName": symbolic_name,
            "version": "1.0.0",
            "state": state,
        }
        return bundle_id

    def names(self) -> list[str]:
        return [b["symbolicName"] for b in self.bundles.values()]

    def calls(self) -> list[tuple[str, str]]:
        return [(r["method"], r["path"]) for r in self.requests]

    def fail(self, operation: str, status_code: int = 500, reason: str = "Server Error") -> None:
        self.failures[operation] = FakeResponse(status_code, "", reason)

    # ------------------------------------------------------------------
    # Session surface
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        url: str,
        data: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> FakeResponse:
        path = urlsplit(url).path
        headers = headers or {}
        self.requests.append(
            {"method": method, "url": url, "path": path, "data": data, "headers": headers, "timeout": timeout}
        )
        operation = self._operation(method, path)
        if operation in self.errors:
            raise self.errors[operation]
        if operation in self.failures:
            return self.failures[operation]
        handler: Callable[..., FakeResponse] = getattr(self, f"_{operation}")
        return handler(path, data, headers)

    def close(self) -> None:
        self.close_count += 1

    # ------------------------------------------------------------------
    # Emulated endpoints
    # ------------------------------------------------------------------

    @staticmethod
    def _operation(method: str, path: str) -> str:
        if method == "POST" and path == "/framework/bundles":
            return "install"
        if method == "GET" and path == "/framework/bundles/representations":
            return "list"
        if method == "DELETE" and _BUNDLE_PATH.match(path):
            return "uninstall"
        if method == "PUT" and _STATE_PATH.match(path):
            return "activate"
        return "unknown"

    def _install(self, path: str, data: bytes, headers: dict[str, str]) -> FakeResponse:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            manifest = parse_manifest(archive.read(MANIFEST_PATH).decode("utf-8"))
        name = manifest["Bundle-SymbolicName"].split(";")[0]
        if headers.get(OVERRIDE_HEADER) == "true":
            for bundle_id in [i for i, b in self.bundles.items() if b["symbolicName"] == name]:
                del self.bundles[bundle_id]
        bundle_id = self.preinstall(name, state=STATE_INSTALLED)
        self.bundles[bundle_id]["version"] = manifest.get("Bundle-Version", "0.0.0")
        body = self.install_body if self.install_body is not None else f"/framework/bundle/{bundle_id}\n"
        return FakeResponse(200, body)

    def _uninstall(self, path: str, data: Any, headers: dict[str, str]) -> FakeResponse:
        bundle_id = int(_BUNDLE_PATH.match(path).group(1))  # type: ignore[union-attr]
        if self.bundles.pop(bundle_id, None) is None:
            return FakeResponse(404, "", "Not Found")
        return FakeResponse(200, "")

    def _activate(self, path: str, data: str, headers: dict[str, str]) -> FakeResponse:
        bundle_id = int(_STATE_PATH.match(path).group(1))  # type: ignore[union-attr]
        if bundle_id not in self.bundles:
            return FakeResponse(404, "", "Not Found")
        self.bundles[bundle_id]["state"] = json.loads(data)["state"]
        return FakeResponse(200, "")

    def _list(self, path: str, data: Any, headers: dict[str, str]) -> FakeResponse:
        if self.list_body is not None:
            return FakeResponse(200, self.list_body)
        return FakeResponse(200, json.dumps(list(self.bundles.values())))

    def _unknown(self, path: str, data: Any, headers: dict[str, str]) -> FakeResponse:
        return FakeResponse(404, "", "Not Found")


def write_bundle(path: Path, symbolic_name: str | None, version: str = "1.0.0") -> Path:
    """Write a minimal bundle JAR whose manifest names *symbolic_name*."""
    lines = ["Manifest-Version: 1.0", "Bundle-ManifestVersion: 2"]
    if symbolic_name is not None:
        lines.append(f"Bundle-SymbolicName: {symbolic_name}")
    lines.append(f"Bundle-Version: {version}")
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(MANIFEST_PATH, "\r\n".join(lines) + "\r\n\r\n")
        archive.writestr("com/example/Activator.class", b"\xca\xfe\xba\xbe")
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture()
def client(runtime: FakeRuntime) -> ManagementClient:
    return ClientBuilder.new_target("runtime.test").create(session=runtime)  # type: ignore[arg-type]


@pytest.fixture()
def make_bundle(tmp_path: Path) -> Callable[..., Path]:
    def _make(symbolic_name: str | None, file_name: str | None = None, version: str = "1.0.0") -> Path:
        name = file_name or f"{symbolic_name or 'anonymous'}-{version}.jar"
        return write_bundle(tmp_path / name, symbolic_name, version)

    return _make


@pytest.fixture()
def connection_error() -> Exception:
    return requests.ConnectionError("connection refused")
