"""Test that the quickstart API works for bundle-deploy."""
from __future__ import annotations


def test_quickstart_import() -> None:
    import bundle_deploy

    assert bundle_deploy.__version__ == "0.1.0"


def test_quickstart_builder_defaults() -> None:
    from bundle_deploy import ClientBuilder

    client = ClientBuilder.new_target("localhost").create()
    try:
        assert client.configured_target == "http://localhost:8080"
    finally:
        client.close()


def test_quickstart_install_and_start(runtime, make_bundle) -> None:
    from bundle_deploy import ActivationPolicy, ClientBuilder, DeploymentOrchestrator

    with ClientBuilder.new_target("localhost").create(session=runtime) as client:
        result = DeploymentOrchestrator(client).install_and_start(
            make_bundle("com.example.quickstart"), policy=ActivationPolicy.LENIENT
        )
    assert result.activated is True


def test_public_errors_share_a_base() -> None:
    from bundle_deploy import (
        BundleDeployError,
        DecodingError,
        EncodingError,
        IdentityError,
        RemoteCallError,
        ResolutionError,
        TransportError,
    )

    for error_type in (DecodingError, EncodingError, IdentityError, RemoteCallError, ResolutionError, TransportError):
        assert issubclass(error_type, BundleDeployError)
