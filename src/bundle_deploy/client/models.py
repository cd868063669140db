"""Wire and configuration models for the management client.

Classes
-------
- BundleRecord         One installed bundle as reported by the runtime.
- BundleStatusRequest  Write-only state-change command sent on activation.
- DeploymentTarget     Destination coordinates of a runtime (immutable).
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

#: OSGi ``Bundle.ACTIVE`` state code.
STATE_ACTIVE: int = 32


# ---------------------------------------------------------------------------
# Bundle representations
# ---------------------------------------------------------------------------


class BundleRecord(BaseModel):
    """An installed bundle as listed by ``/framework/bundles/representations``.

    The numeric ``id`` is reassigned by the runtime on every install, so it
    is only meaningful until the bundle is uninstalled.  ``symbolic_name``
    is the stable logical identity used to find "the same module" across
    reinstalls.

    Attributes
    ----------
    id:
        Runtime-assigned bundle id.
    symbolic_name:
        ``Bundle-SymbolicName`` of the bundle (wire key ``symbolicName``).
    version:
        Bundle version, when the runtime reports it.
    state:
        Numeric OSGi state, when the runtime reports it.
    location:
        Install location, when the runtime reports it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: int
    symbolic_name: str = Field(alias="symbolicName")
    version: str | None = None
    state: int | None = None
    location: str | None = None


class BundleStatusRequest(BaseModel):
    """State transition command for ``PUT {location}/state``.

    Never read back from the runtime; only serialised.
    """

    model_config = ConfigDict(frozen=True)

    state: int
    options: int = 0

    def to_json(self) -> str:
        """Return the JSON body ``{"state": ..., "options": ...}``."""
        return self.model_dump_json()


#: The fixed request used to start a bundle.
ACTIVATE_REQUEST = BundleStatusRequest(state=STATE_ACTIVE, options=0)


# ---------------------------------------------------------------------------
# Destination
# ---------------------------------------------------------------------------


class DeploymentTarget(BaseModel):
    """Destination coordinates of a runtime.

    Frozen: a :class:`~bundle_deploy.client.management.ManagementClient`
    built from a target never sees it change.

    Attributes
    ----------
    host:
        Hostname of the runtime.  Default: ``localhost``.
    port:
        HTTP(S) port.  Default: ``8080``.
    use_https:
        Talk HTTPS instead of HTTP.
    trust_all_certificates:
        Accept any server certificate and host name.  Implies HTTPS.
    username / password:
        Basic credentials.  Default: ``admin`` / ``admin123``.
    proxy_host / proxy_port:
        Optional HTTP forward proxy applied to every call.
    timeout:
        Per-exchange timeout in seconds.
    """

    model_config = ConfigDict(frozen=True)

    host: str = "localhost"
    port: int = Field(default=8080, ge=1, le=65535)
    use_https: bool = False
    trust_all_certificates: bool = False
    username: str = "admin"
    password: str = Field(default="admin123", repr=False)
    proxy_host: str | None = None
    proxy_port: int | None = Field(default=None, ge=1, le=65535)
    timeout: float = Field(default=30.0, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _trust_all_implies_https(cls, data: object) -> object:
        if isinstance(data, dict) and data.get("trust_all_certificates"):
            data = {**data, "use_https": True}
        return data

    @model_validator(mode="after")
    def _check_consistency(self) -> "DeploymentTarget":
        if not self.host:
            raise ValueError("host must not be empty")
        if self.proxy_host and self.proxy_port is None:
            raise ValueError("proxy_port is required when proxy_host is set")
        return self

    @property
    def scheme(self) -> str:
        return "https" if self.use_https else "http"

    @property
    def base_url(self) -> str:
        """Return ``scheme://host:port`` without a trailing slash."""
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def proxy_url(self) -> str | None:
        if not self.proxy_host:
            return None
        return f"http://{self.proxy_host}:{self.proxy_port}"


__all__ = [
    "ACTIVATE_REQUEST",
    "STATE_ACTIVE",
    "BundleRecord",
    "BundleStatusRequest",
    "DeploymentTarget",
]
