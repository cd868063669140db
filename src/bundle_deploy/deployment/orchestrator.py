"""Deployment orchestrator: force install, install-and-start and dependency sweeps.

The runtime's REST API knows bundles only by numeric ids that change on
every install.  The orchestrator layers "one logical module per symbolic
name" on top of it: before installing an archive it looks up the id that
currently carries the archive's symbolic name and uninstalls that bundle
first.

Replace strategies
------------------
UNINSTALL_FIRST : List installed bundles, uninstall the same-named one, then
                  upload (default).
OVERRIDE        : Skip the lookup and send the override signal with the
                  upload, leaving replacement to the runtime.

Activation policies
-------------------
STRICT  : Any failure, activation included, aborts the operation.
LENIENT : An activation failure is logged as a warning; the bundle stays
          installed but inactive and the operation succeeds.

All work is sequential; every remote call completes before the next starts.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from bundle_deploy.client.management import ManagementClient
from bundle_deploy.deployment.artifacts import ArtifactCoordinates, ArtifactResolver, ResolvedArtifact
from bundle_deploy.deployment.identity import read_symbolic_name
from bundle_deploy.errors import BundleDeployError, ResolutionError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ActivationPolicy(str, Enum):
    """How an activation failure after a successful install is treated."""

    STRICT = "strict"
    LENIENT = "lenient"


class ReplaceStrategy(str, Enum):
    """How an already-installed bundle with the same symbolic name is replaced."""

    UNINSTALL_FIRST = "uninstall_first"
    OVERRIDE = "override"


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class DeploymentResult:
    """Outcome of deploying one archive.

    Attributes
    ----------
    path:
        The archive that was deployed.
    symbolic_name:
        Its ``Bundle-SymbolicName``.
    location:
        Location returned by the install call.
    activated:
        Whether the bundle was started.
    replaced_bundle_id:
        Id of the previously installed bundle that was uninstalled, if any.
    warnings:
        Non-fatal problems, e.g. a lenient activation failure.
    """

    path: Path
    symbolic_name: str
    location: str
    activated: bool = False
    replaced_bundle_id: int | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class SkippedDependency:
    """A declared dependency the sweep did not deploy, and why."""

    coordinates: ArtifactCoordinates
    reason: str


@dataclass
class SweepReport:
    """Outcome of :meth:`DeploymentOrchestrator.deploy_dependencies`.

    Attributes
    ----------
    deployed:
        One result per dependency that was installed.
    skipped:
        Dependencies with no matching artifact or no file to deploy.
    failures:
        Resolution failures, one per dependency that could not be located.
    """

    deployed: list[DeploymentResult] = field(default_factory=list)
    skipped: list[SkippedDependency] = field(default_factory=list)
    failures: list[ResolutionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no dependency failed to resolve."""
        return not self.failures

    @property
    def warnings(self) -> list[str]:
        messages = [str(failure) for failure in self.failures]
        for result in self.deployed:
            messages.extend(result.warnings)
        return messages


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class DeploymentOrchestrator:
    """Sequences multi-step deployments on top of a :class:`ManagementClient`.

    Parameters
    ----------
    client:
        The management client to issue calls through.  The orchestrator
        does not close it.
    identity_reader:
        Returns the symbolic name of an archive.  Default:
        :func:`~bundle_deploy.deployment.identity.read_symbolic_name`.
    resolver:
        Resolves dependency coordinates to local archives.  Required only
        for :meth:`deploy_dependencies`.
    replace_strategy:
        How a same-named installed bundle is replaced.

    Example
    -------
    ::

        orchestrator = DeploymentOrchestrator(client)
        result = orchestrator.install_and_start(
            Path("target/app.jar"), policy=ActivationPolicy.LENIENT
        )
    """

    def __init__(
        self,
        client: ManagementClient,
        *,
        identity_reader: Callable[[Path], str] = read_symbolic_name,
        resolver: ArtifactResolver | None = None,
        replace_strategy: ReplaceStrategy = ReplaceStrategy.UNINSTALL_FIRST,
    ) -> None:
        self._client = client
        self._identity_reader = identity_reader
        self._resolver = resolver
        self._replace_strategy = replace_strategy

    @property
    def replace_strategy(self) -> ReplaceStrategy:
        return self._replace_strategy

    # ------------------------------------------------------------------
    # Single archive
    # ------------------------------------------------------------------

    def force_install(self, path: Path) -> str:
        """Install *path*, replacing any bundle with the same symbolic name.

        Returns
        -------
        str
            The location of the newly installed bundle.  The bundle is not
            started.
        """
        return self._force_install(path).location

    def install_and_start(
        self,
        path: Path,
        *,
        policy: ActivationPolicy = ActivationPolicy.STRICT,
    ) -> DeploymentResult:
        """Force-install *path* and then start it.

        Parameters
        ----------
        path:
            Archive to deploy.
        policy:
            With ``LENIENT`` an activation failure is recorded as a warning
            on the result instead of being raised.

        Raises
        ------
        BundleDeployError
            Any failure before activation, or an activation failure under
            ``STRICT``.
        """
        result = self._force_install(path)
        try:
            self._client.activate(result.location)
        except BundleDeployError as exc:
            if policy is ActivationPolicy.STRICT:
                raise
            message = f"{result.symbolic_name} installed at {result.location} but not started: {exc}"
            logger.warning("%s", message)
            result.warnings.append(message)
            return result
        result.activated = True
        return result

    def deploy(
        self,
        paths: Sequence[Path],
        *,
        policy: ActivationPolicy = ActivationPolicy.STRICT,
    ) -> list[DeploymentResult]:
        """Install and start each archive in order, stopping at the first abort."""
        return [self.install_and_start(path, policy=policy) for path in paths]

    # ------------------------------------------------------------------
    # Dependency sweep
    # ------------------------------------------------------------------

    def deploy_dependencies(
        self,
        declared: Iterable[ArtifactCoordinates],
        resolvable: Iterable[ArtifactCoordinates],
    ) -> SweepReport:
        """Redeploy every declared dependency found among *resolvable*.

        Dependencies are processed one at a time.  A dependency whose
        resolution fails is recorded and skipped; the sweep continues.
        Matching artifacts are deployed with ``LENIENT`` activation.  Any
        other failure aborts the sweep.

        Raises
        ------
        ValueError
            If no resolver was configured.
        """
        if self._resolver is None:
            raise ValueError("A resolver is required to deploy dependencies")

        candidates = list(resolvable)
        report = SweepReport()
        for dependency in declared:
            match = next((c for c in candidates if c == dependency), None)
            if match is None:
                logger.info("No resolvable artifact matches %s; skipping", dependency)
                report.skipped.append(SkippedDependency(dependency, "no matching artifact"))
                continue

            try:
                resolved = ResolvedArtifact(match, self._resolver.resolve(match))
            except ResolutionError as exc:
                logger.warning("Could not resolve %s: %s", match, exc)
                report.failures.append(exc)
                continue

            if resolved.path is None:
                logger.info("%s has no local file to deploy; skipping", match)
                report.skipped.append(SkippedDependency(match, "no local file"))
                continue

            logger.info("Deploying dependency %s from %s", match, resolved.path)
            report.deployed.append(
                self.install_and_start(resolved.path, policy=ActivationPolicy.LENIENT)
            )
        return report

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _force_install(self, path: Path) -> DeploymentResult:
        symbolic_name = self._identity_reader(path)
        logger.info(
            "Installing %s (%s) to %s", path, symbolic_name, self._client.configured_target
        )

        if self._replace_strategy is ReplaceStrategy.OVERRIDE:
            location = self._client.install_file(path, override=True)
            return DeploymentResult(path=path, symbolic_name=symbolic_name, location=location)

        replaced_id: int | None = None
        existing = self._client.find_by_symbolic_name(symbolic_name)
        if existing is not None:
            logger.info("Uninstalling bundle %d (%s) before reinstall", existing.id, symbolic_name)
            self._client.uninstall(existing.id)
            replaced_id = existing.id

        location = self._client.install_file(path)
        return DeploymentResult(
            path=path,
            symbolic_name=symbolic_name,
            location=location,
            replaced_bundle_id=replaced_id,
        )


__all__ = [
    "ActivationPolicy",
    "DeploymentOrchestrator",
    "DeploymentResult",
    "ReplaceStrategy",
    "SkippedDependency",
    "SweepReport",
]
