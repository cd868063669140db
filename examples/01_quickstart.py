#!/usr/bin/env python3
"""Example: Quickstart for bundle-deploy

List the bundles on a runtime, then force-install and start one archive.

Usage:
    python examples/01_quickstart.py path/to/bundle.jar [host] [port]

Requirements:
    pip install bundle-deploy
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import bundle_deploy
from bundle_deploy import (
    ActivationPolicy,
    BundleDeployError,
    ClientBuilder,
    DeploymentOrchestrator,
)


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    if len(sys.argv) < 2:
        print(__doc__)
        return 2

    bundle = Path(sys.argv[1])
    host = sys.argv[2] if len(sys.argv) > 2 else "localhost"
    port = int(sys.argv[3]) if len(sys.argv) > 3 else 8080
    print(f"bundle-deploy version: {bundle_deploy.__version__}")

    with ClientBuilder.new_target(host).with_port(port).create() as client:
        try:
            # Step 1: What is installed right now?
            for record in client.list_installed():
                print(f"  [{record.id:>3}] {record.symbolic_name} {record.version or ''}")

            # Step 2: Replace the same-named bundle and start the new one
            orchestrator = DeploymentOrchestrator(client)
            result = orchestrator.install_and_start(bundle, policy=ActivationPolicy.LENIENT)
        except BundleDeployError as exc:
            print(f"Deployment failed: {exc}")
            return 1

    print(f"\n{result.symbolic_name} installed at {result.location}")
    print(f"  Started: {result.activated}")
    for warning in result.warnings:
        print(f"  Warning: {warning}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
