"""bundle-deploy: deploy OSGi bundles to a remote runtime over its REST management API.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import bundle_deploy
>>> bundle_deploy.__version__
'0.1.0'

Client
------
>>> from bundle_deploy import ClientBuilder
>>> client = ClientBuilder.new_target("runtime.local").with_port(8181).create()
>>> client.configured_target
'http://runtime.local:8181'
>>> client.close()

Deployment
----------
>>> from bundle_deploy import DeploymentOrchestrator, ActivationPolicy
>>> # orchestrator = DeploymentOrchestrator(client)
>>> # orchestrator.install_and_start(Path("app.jar"), policy=ActivationPolicy.LENIENT)
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from bundle_deploy.errors import (
    BundleDeployError,
    ConfigurationError,
    DecodingError,
    EncodingError,
    IdentityError,
    RemoteCallError,
    ResolutionError,
    TransportError,
)

# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------
from bundle_deploy.client.builder import ClientBuilder
from bundle_deploy.client.management import ManagementClient
from bundle_deploy.client.models import BundleRecord, BundleStatusRequest, DeploymentTarget
from bundle_deploy.client.transport import TransportSession

# ---------------------------------------------------------------------------
# Deployment
# ---------------------------------------------------------------------------
from bundle_deploy.deployment.artifacts import (
    ArtifactCoordinates,
    ArtifactResolver,
    LocalRepositoryResolver,
    ResolvedArtifact,
)
from bundle_deploy.deployment.identity import read_symbolic_name
from bundle_deploy.deployment.orchestrator import (
    ActivationPolicy,
    DeploymentOrchestrator,
    DeploymentResult,
    ReplaceStrategy,
    SkippedDependency,
    SweepReport,
)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
from bundle_deploy.config import DependencySettings, DeploySettings, load_dependencies, load_settings

__all__ = [
    # Version
    "__version__",
    # Errors
    "BundleDeployError",
    "ConfigurationError",
    "DecodingError",
    "EncodingError",
    "IdentityError",
    "RemoteCallError",
    "ResolutionError",
    "TransportError",
    # Client
    "BundleRecord",
    "BundleStatusRequest",
    "ClientBuilder",
    "DeploymentTarget",
    "ManagementClient",
    "TransportSession",
    # Deployment: artifacts
    "ArtifactCoordinates",
    "ArtifactResolver",
    "LocalRepositoryResolver",
    "ResolvedArtifact",
    # Deployment: identity
    "read_symbolic_name",
    # Deployment: orchestrator
    "ActivationPolicy",
    "DeploymentOrchestrator",
    "DeploymentResult",
    "ReplaceStrategy",
    "SkippedDependency",
    "SweepReport",
    # Configuration
    "DependencySettings",
    "DeploySettings",
    "load_dependencies",
    "load_settings",
]
