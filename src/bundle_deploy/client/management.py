"""Bundle management client for an RFC-182 style REST runtime.

Translates bundle-level operations into single HTTP exchanges over a
:class:`~bundle_deploy.client.transport.TransportSession`:

=================  ===============================================  ========
Operation          Request                                          Expects
=================  ===============================================  ========
install            ``POST /framework/bundles``                      200
uninstall          ``DELETE /framework/bundle/{id}``                200
activate           ``PUT {location}/state``                         200
list_installed     ``GET /framework/bundles/representations``       200
=================  ===============================================  ========

Every call compares the observed status with the single expected code for
that call.  Any other code, 2xx included, raises
:class:`~bundle_deploy.errors.RemoteCallError`.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from urllib.parse import quote

from pydantic import TypeAdapter, ValidationError

from bundle_deploy.client.models import ACTIVATE_REQUEST, BundleRecord, BundleStatusRequest
from bundle_deploy.client.transport import TransportSession
from bundle_deploy.errors import DecodingError, EncodingError, RemoteCallError

logger = logging.getLogger(__name__)

FRAMEWORK_BUNDLES = "/framework/bundles"
FRAMEWORK_BUNDLES_REPRESENTATIONS = "/framework/bundles/representations"
FRAMEWORK_BUNDLE = "/framework/bundle/"

BUNDLE_CONTENT_TYPE = "application/vnd.osgi.bundle"
OVERRIDE_HEADER = "X-Bundle-Override"

_RECORD_LIST = TypeAdapter(list[BundleRecord])


class ManagementClient:
    """Client for installing, starting, stopping and listing remote bundles.

    The client owns its transport session; use it as a context manager (or
    call :meth:`close`) so the session is released on every exit path.

    Parameters
    ----------
    transport:
        The session to issue requests through.

    Example
    -------
    ::

        with ClientBuilder.new_target("runtime.local").create() as client:
            location = client.install_file(Path("target/app.jar"))
            client.activate(location)
    """

    def __init__(self, transport: TransportSession) -> None:
        self._transport = transport

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the transport session."""
        self._transport.close()

    def __enter__(self) -> "ManagementClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def configured_target(self) -> str:
        """The ``scheme://host:port`` this client talks to."""
        return self._transport.target.base_url

    # ------------------------------------------------------------------
    # Bundle operations
    # ------------------------------------------------------------------

    def install(self, file_bytes: bytes, file_name: str, *, override: bool = False) -> str:
        """Upload a bundle archive and return its location.

        Parameters
        ----------
        file_bytes:
            Raw archive content.
        file_name:
            Sent percent-encoded as the ``Content-Location`` hint.
        override:
            Ask the runtime to replace an installed bundle with the same
            symbolic name as part of the upload.

        Returns
        -------
        str
            The location of the installed bundle, usable as the prefix of
            :meth:`activate`'s URL.

        Raises
        ------
        RemoteCallError
            If the runtime does not answer 200.
        DecodingError
            If the runtime answers 200 with an empty location.
        TransportError
            If the exchange cannot complete.
        """
        headers = {
            "Content-Type": BUNDLE_CONTENT_TYPE,
            "Content-Location": quote(file_name),
        }
        if override:
            headers[OVERRIDE_HEADER] = "true"
        body = self._call("POST", FRAMEWORK_BUNDLES, 200, "Install", data=file_bytes, headers=headers)
        location = body.strip()
        if not location:
            raise DecodingError(f"Install of {file_name} returned an empty location")
        logger.info("Installed %s at %s", file_name, location)
        return location

    def install_file(self, path: Path, *, override: bool = False) -> str:
        """Read *path* and :meth:`install` it under its file name."""
        return self.install(path.read_bytes(), path.name, override=override)

    def uninstall(self, bundle_id: int) -> None:
        """Uninstall the bundle with runtime id *bundle_id*."""
        self._call("DELETE", f"{FRAMEWORK_BUNDLE}{bundle_id}", 200, "Uninstall")
        logger.info("Uninstalled bundle %d", bundle_id)

    def activate(self, location: str, request: BundleStatusRequest = ACTIVATE_REQUEST) -> None:
        """Start the bundle installed at *location*.

        Raises
        ------
        EncodingError
            If the state-change command cannot be serialised.
        RemoteCallError
            If the runtime does not answer 200.
        """
        try:
            payload = request.to_json()
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"Could not add activation command: {exc}") from exc
        path = f"{location.rstrip('/')}/state"
        self._call(
            "PUT",
            path,
            200,
            "Activate",
            data=payload,
            headers={"Content-Type": "application/json"},
        )
        logger.info("Activated bundle at %s", location)

    def list_installed(self) -> list[BundleRecord]:
        """Return the bundles currently installed on the runtime.

        Always fetched fresh; the runtime may be changed by other actors.

        Raises
        ------
        DecodingError
            If the payload is not a JSON array of bundle representations.
        """
        body = self._call("GET", FRAMEWORK_BUNDLES_REPRESENTATIONS, 200, "Listing bundles")
        try:
            return _RECORD_LIST.validate_python(json.loads(body))
        except (ValueError, ValidationError) as exc:
            logger.error("Could not parse response: %s", exc)
            raise DecodingError(f"Error while reading the list of bundles: {exc}") from exc

    def find_by_symbolic_name(self, symbolic_name: str) -> BundleRecord | None:
        """Return the first installed bundle named *symbolic_name*, if any."""
        for record in self.list_installed():
            if record.symbolic_name == symbolic_name:
                return record
        return None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _call(
        self,
        method: str,
        path: str,
        expected_status: int,
        operation: str,
        *,
        data: bytes | str | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        response = self._transport.execute(method, path, data=data, headers=headers)
        if response.status_code != expected_status:
            raise RemoteCallError(response.status_code, response.reason or "", operation)
        return response.text

    def __repr__(self) -> str:
        return f"ManagementClient(target={self.configured_target!r})"


__all__ = [
    "BUNDLE_CONTENT_TYPE",
    "FRAMEWORK_BUNDLE",
    "FRAMEWORK_BUNDLES",
    "FRAMEWORK_BUNDLES_REPRESENTATIONS",
    "OVERRIDE_HEADER",
    "ManagementClient",
]
