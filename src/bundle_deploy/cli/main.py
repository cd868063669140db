"""CLI entry point for bundle-deploy.

Invoked as::

    bundle-deploy [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m bundle_deploy.cli.main

Commands
--------
- ``version``    Show version information.
- ``list``       List the bundles installed on a runtime.
- ``install``    Upload a bundle archive, optionally replacing a same-named one.
- ``uninstall``  Uninstall a bundle by id.
- ``start``      Start a bundle given its location.
- ``deploy``     Force-install and start archives, optionally sweeping dependencies.

Every command that talks to a runtime accepts the target options
(``--host``, ``--port``, ``--https`` ...) and ``--config`` to read them
from a YAML settings file; command-line values win.
"""
from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from bundle_deploy.client.builder import ClientBuilder
from bundle_deploy.client.management import ManagementClient
from bundle_deploy.client.models import DeploymentTarget
from bundle_deploy.config import DeploySettings, load_dependencies, load_settings
from bundle_deploy.deployment.artifacts import LocalRepositoryResolver
from bundle_deploy.deployment.orchestrator import (
    ActivationPolicy,
    DeploymentOrchestrator,
    DeploymentResult,
    ReplaceStrategy,
)
from bundle_deploy.errors import BundleDeployError, ConfigurationError

console = Console()


@click.group()
@click.version_option(package_name="bundle-deploy")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every HTTP exchange.")
def cli(verbose: bool) -> None:
    """Deploy OSGi bundles to a remote runtime over its REST management API"""
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# Shared options and helpers
# ---------------------------------------------------------------------------


_TARGET_OPTIONS = [
    click.option(
        "--config",
        "-c",
        "config_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="YAML settings file with a 'target' section.",
    ),
    click.option("--host", "-H", default=None, help="Runtime hostname. Default: localhost."),
    click.option("--port", "-p", type=click.IntRange(1, 65535), default=None, help="Runtime port. Default: 8080."),
    click.option("--username", "-u", default=None, help="Admin user name."),
    click.option(
        "--password",
        envvar="BUNDLE_DEPLOY_PASSWORD",
        default=None,
        help="Admin password. Also read from BUNDLE_DEPLOY_PASSWORD.",
    ),
    click.option("--https/--http", "use_https", default=None, help="Use HTTPS."),
    click.option(
        "--trust-all-certs",
        is_flag=True,
        default=False,
        help="Use HTTPS and accept any certificate (e.g. self-signed).",
    ),
    click.option("--proxy-host", default=None, help="HTTP forward proxy host."),
    click.option("--proxy-port", type=click.IntRange(1, 65535), default=None, help="HTTP forward proxy port."),
    click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None, help="Per-request timeout in seconds."),
]


def target_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared target options to a command."""
    for option in reversed(_TARGET_OPTIONS):
        func = option(func)
    return func


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # urllib3 connection chatter is noise even in verbose mode
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _load_settings(options: dict[str, Any]) -> DeploySettings:
    """Merge the settings file (if any) with command-line overrides."""
    config_path: Path | None = options.get("config_path")
    settings = load_settings(config_path) if config_path is not None else DeploySettings()

    overrides = {
        key: options.get(key)
        for key in ("host", "port", "username", "password", "use_https", "proxy_host", "proxy_port", "timeout")
        if options.get(key) is not None
    }
    if options.get("trust_all_certs"):
        overrides["trust_all_certificates"] = True
    if overrides:
        merged = {**settings.target.model_dump(), **overrides}
        try:
            settings.target = DeploymentTarget(**merged)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid target settings: {exc}") from exc
    return settings


def _build_client(target: DeploymentTarget) -> ManagementClient:
    return ClientBuilder.from_target(target).create()


def _fail(message: str, exc: Exception) -> None:
    console.print(f"[red]{message}:[/red] {exc}")
    sys.exit(1)


def _print_result(result: DeploymentResult) -> None:
    state = "[green]started[/green]" if result.activated else "[yellow]installed, not started[/yellow]"
    line = f"  {result.symbolic_name} -> {result.location} ({state})"
    if result.replaced_bundle_id is not None:
        line += f" [dim]replaced bundle {result.replaced_bundle_id}[/dim]"
    console.print(line)


def _print_warnings(warnings: list[str]) -> None:
    if not warnings:
        return
    console.print("\n[bold yellow]Warnings:[/bold yellow]")
    for warning in warnings:
        console.print(f"  [yellow]![/yellow] {warning}")


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from bundle_deploy import __version__

    console.print(f"[bold]bundle-deploy[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@cli.command(name="list")
@target_options
@click.option("--json-output", is_flag=True, default=False, help="Output results as JSON.")
def list_command(json_output: bool, **options: Any) -> None:
    """List the bundles installed on the runtime."""
    try:
        settings = _load_settings(options)
        with _build_client(settings.target) as client:
            records = client.list_installed()
    except BundleDeployError as exc:
        _fail("Could not list bundles", exc)
        return

    if json_output:
        output = [record.model_dump(by_alias=True, exclude_none=True) for record in records]
        console.print_json(json.dumps(output))
        return

    table = Table(title=f"Installed bundles ({settings.target.base_url})", show_header=True)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Symbolic Name", style="bold")
    table.add_column("Version")
    table.add_column("State", style="yellow")
    for record in records:
        table.add_row(
            str(record.id),
            record.symbolic_name,
            record.version or "",
            "" if record.state is None else str(record.state),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# install
# ---------------------------------------------------------------------------


@cli.command(name="install")
@click.argument("bundle_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@target_options
@click.option(
    "--force/--no-force",
    default=False,
    help="Uninstall a bundle with the same symbolic name first.",
)
@click.option(
    "--override",
    is_flag=True,
    default=False,
    help="Ask the runtime to replace a same-named bundle as part of the upload.",
)
def install_command(bundle_file: Path, force: bool, override: bool, **options: Any) -> None:
    """Upload BUNDLE_FILE and print its location. The bundle is not started.

    Examples:

    \b
        bundle-deploy install target/app.jar
        bundle-deploy install target/app.jar --force --host runtime.local
    """
    try:
        settings = _load_settings(options)
        with _build_client(settings.target) as client:
            if force:
                orchestrator = DeploymentOrchestrator(
                    client,
                    replace_strategy=ReplaceStrategy.OVERRIDE if override else settings.replace_strategy,
                )
                location = orchestrator.force_install(bundle_file)
            else:
                location = client.install_file(bundle_file, override=override)
    except BundleDeployError as exc:
        _fail("Could not install bundle", exc)
        return
    console.print(location)


# ---------------------------------------------------------------------------
# uninstall
# ---------------------------------------------------------------------------


@cli.command(name="uninstall")
@click.argument("bundle_id", type=int)
@target_options
def uninstall_command(bundle_id: int, **options: Any) -> None:
    """Uninstall the bundle with runtime id BUNDLE_ID."""
    try:
        settings = _load_settings(options)
        with _build_client(settings.target) as client:
            client.uninstall(bundle_id)
    except BundleDeployError as exc:
        _fail("Could not uninstall bundle", exc)
        return
    console.print(f"Uninstalled bundle {bundle_id}")


# ---------------------------------------------------------------------------
# start
# ---------------------------------------------------------------------------


@cli.command(name="start")
@click.argument("location")
@target_options
def start_command(location: str, **options: Any) -> None:
    """Start the bundle at LOCATION (as printed by ``install``)."""
    try:
        settings = _load_settings(options)
        with _build_client(settings.target) as client:
            client.activate(location)
    except BundleDeployError as exc:
        _fail("Could not start bundle", exc)
        return
    console.print(f"Started {location}")


# ---------------------------------------------------------------------------
# deploy
# ---------------------------------------------------------------------------


@cli.command(name="deploy")
@click.argument("bundle_files", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@target_options
@click.option(
    "--strict/--lenient",
    "strict",
    default=None,
    help="Fail the run when a bundle cannot be started (strict, default) or only warn (lenient).",
)
@click.option(
    "--override",
    is_flag=True,
    default=False,
    help="Replace same-named bundles with the upload override signal instead of uninstalling first.",
)
@click.option(
    "--dependencies",
    "-d",
    "dependencies_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file listing declared (and resolvable) dependencies to redeploy.",
)
@click.option(
    "--repository",
    "-r",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Local Maven-layout repository to resolve dependencies from.",
)
def deploy_command(
    bundle_files: tuple[Path, ...],
    strict: bool | None,
    override: bool,
    dependencies_file: Path | None,
    repository: Path | None,
    **options: Any,
) -> None:
    """Force-install and start BUNDLE_FILES, then redeploy declared dependencies.

    Examples:

    \b
        bundle-deploy deploy target/app.jar --host runtime.local --https
        bundle-deploy deploy target/app.jar --lenient -d deps.yaml -r ~/.m2/repository
        bundle-deploy deploy --config deploy.yaml
    """
    try:
        settings = _load_settings(options)
        dependencies = (
            load_dependencies(dependencies_file)
            if dependencies_file is not None
            else settings.dependencies
        )
    except BundleDeployError as exc:
        _fail("Invalid settings", exc)
        return

    paths = list(bundle_files) or settings.bundles
    if not paths and dependencies is None:
        console.print("[red]Nothing to deploy:[/red] pass bundle files, --dependencies or a config with bundles.")
        sys.exit(1)

    if strict is None:
        policy = settings.activation
    else:
        policy = ActivationPolicy.STRICT if strict else ActivationPolicy.LENIENT
    strategy = ReplaceStrategy.OVERRIDE if override else settings.replace_strategy
    resolver = LocalRepositoryResolver(repository or settings.repository)

    warnings: list[str] = []
    try:
        with _build_client(settings.target) as client:
            orchestrator = DeploymentOrchestrator(client, resolver=resolver, replace_strategy=strategy)
            if paths:
                console.print(f"[bold]Deploying to {client.configured_target}[/bold]")
            for path in paths:
                result = orchestrator.install_and_start(path, policy=policy)
                _print_result(result)
                warnings.extend(result.warnings)

            if dependencies is not None:
                console.print("[bold]Deploying dependencies[/bold]")
                report = orchestrator.deploy_dependencies(dependencies.declared, dependencies.resolvable)
                for result in report.deployed:
                    _print_result(result)
                for skipped in report.skipped:
                    console.print(f"  [dim]skipped {skipped.coordinates}: {skipped.reason}[/dim]")
                warnings.extend(report.warnings)
    except BundleDeployError as exc:
        _fail("Could not deploy bundle", exc)
        return

    _print_warnings(warnings)
    console.print("\n[bold green]Deployment finished.[/bold green]")


if __name__ == "__main__":
    cli()
