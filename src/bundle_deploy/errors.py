"""Exception taxonomy for bundle-deploy.

Every failure raised by the management client or the deployment
orchestrator derives from :class:`BundleDeployError`, so callers that only
need "did the run abort?" can catch one type.

Classes
-------
- BundleDeployError    Common base.
- TransportError       The HTTP exchange could not complete.
- RemoteCallError      The runtime answered with an unexpected status code.
- EncodingError        A request payload could not be serialised.
- DecodingError        A response payload could not be parsed.
- ResolutionError      A dependency artifact could not be located.
- IdentityError        An archive carries no readable symbolic name.
- ConfigurationError   A settings document is malformed.
"""
from __future__ import annotations

from pathlib import Path


class BundleDeployError(Exception):
    """Base class for all bundle-deploy failures."""


class TransportError(BundleDeployError):
    """Raised when a request cannot be exchanged (connection, TLS, proxy, timeout)."""


class RemoteCallError(BundleDeployError):
    """Raised when the runtime answers with a status other than the expected one.

    Attributes
    ----------
    status_code:
        The HTTP status code actually observed.
    reason:
        The reason phrase sent with the status line.
    """

    def __init__(self, status_code: int, reason: str, operation: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.operation = operation
        prefix = f"{operation} failed" if operation else "Remote call failed"
        super().__init__(f"{prefix}: {status_code} : {reason}")


class EncodingError(BundleDeployError):
    """Raised when a command object cannot be serialised for the wire."""


class DecodingError(BundleDeployError):
    """Raised when a response body does not have the expected shape."""


class ResolutionError(BundleDeployError):
    """Raised when a dependency artifact cannot be resolved to a local file."""

    def __init__(self, coordinates: object, message: str) -> None:
        self.coordinates = coordinates
        super().__init__(f"Could not resolve {coordinates}: {message}")


class IdentityError(BundleDeployError):
    """Raised when the symbolic name cannot be read from an archive."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"Could not obtain Bundle-SymbolicName from {path}: {message}")


class ConfigurationError(BundleDeployError):
    """Raised when a deployment settings document is invalid."""


__all__ = [
    "BundleDeployError",
    "ConfigurationError",
    "DecodingError",
    "EncodingError",
    "IdentityError",
    "RemoteCallError",
    "ResolutionError",
    "TransportError",
]
