"""Deployment orchestration subpackage."""
from __future__ import annotations

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

__all__ = [
    "ActivationPolicy",
    "ArtifactCoordinates",
    "ArtifactResolver",
    "DeploymentOrchestrator",
    "DeploymentResult",
    "LocalRepositoryResolver",
    "ReplaceStrategy",
    "ResolvedArtifact",
    "SkippedDependency",
    "SweepReport",
    "read_symbolic_name",
]
