"""HTTP management client subpackage."""
from __future__ import annotations

from bundle_deploy.client.builder import ClientBuilder
from bundle_deploy.client.management import ManagementClient
from bundle_deploy.client.models import (
    ACTIVATE_REQUEST,
    BundleRecord,
    BundleStatusRequest,
    DeploymentTarget,
)
from bundle_deploy.client.transport import TransportSession

__all__ = [
    "ACTIVATE_REQUEST",
    "BundleRecord",
    "BundleStatusRequest",
    "ClientBuilder",
    "DeploymentTarget",
    "ManagementClient",
    "TransportSession",
]
