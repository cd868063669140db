"""Fluent factory for :class:`~bundle_deploy.client.management.ManagementClient`.

If no properties are set the client targets ``http://localhost:8080`` with
credentials ``admin:admin123``.
"""
from __future__ import annotations

from typing import Any

import requests

from bundle_deploy.client.management import ManagementClient
from bundle_deploy.client.models import DeploymentTarget
from bundle_deploy.client.transport import TransportSession


class ClientBuilder:
    """Collects destination settings and creates a management client.

    Example
    -------
    ::

        client = (
            ClientBuilder.new_target("runtime.example.org")
            .with_port(8443)
            .with_credentials("deployer", "s3cret")
            .enable_https()
            .create()
        )
    """

    def __init__(self, host: str = "localhost") -> None:
        self._settings: dict[str, Any] = {"host": host}

    @classmethod
    def new_target(cls, host: str) -> "ClientBuilder":
        return cls(host)

    @classmethod
    def from_target(cls, target: DeploymentTarget) -> "ClientBuilder":
        """Start from an existing target, e.g. one loaded from a settings file."""
        builder = cls(target.host)
        builder._settings.update(target.model_dump())
        return builder

    def with_port(self, port: int) -> "ClientBuilder":
        self._settings["port"] = port
        return self

    def with_credentials(self, username: str, password: str) -> "ClientBuilder":
        self._settings["username"] = username
        self._settings["password"] = password
        return self

    def enable_https(self) -> "ClientBuilder":
        self._settings["use_https"] = True
        return self

    def enable_trust_all_https(self) -> "ClientBuilder":
        """Use HTTPS and accept any certificate, e.g. a self-signed one."""
        self._settings["use_https"] = True
        self._settings["trust_all_certificates"] = True
        return self

    def with_proxy(self, host: str, port: int) -> "ClientBuilder":
        self._settings["proxy_host"] = host
        self._settings["proxy_port"] = port
        return self

    def with_timeout(self, seconds: float) -> "ClientBuilder":
        self._settings["timeout"] = seconds
        return self

    def build_target(self) -> DeploymentTarget:
        """Validate the collected settings.

        Raises
        ------
        pydantic.ValidationError
            If a setting is out of range or inconsistent.
        """
        return DeploymentTarget(**self._settings)

    def create(self, session: requests.Session | None = None) -> ManagementClient:
        """Create a client owning a fresh transport session."""
        return ManagementClient(TransportSession(self.build_target(), session=session))


__all__ = ["ClientBuilder"]
