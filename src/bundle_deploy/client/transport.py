"""HTTP transport session bound to one deployment target.

Wraps a :class:`requests.Session` configured once from a
:class:`~bundle_deploy.client.models.DeploymentTarget`: TLS verification follows the
target's trust mode and an optional forward proxy is applied to all calls.
Basic credentials are only sent to the target's own scheme, host and port.
"""
from __future__ import annotations

import logging
import warnings
from urllib.parse import urlsplit

import requests
import urllib3
from requests.auth import AuthBase, HTTPBasicAuth

from bundle_deploy.client.models import DeploymentTarget
from bundle_deploy.errors import TransportError

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _origin(url: str) -> tuple[str, str, int | None]:
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    return scheme, (parts.hostname or "").lower(), parts.port or _DEFAULT_PORTS.get(scheme)


class TargetBasicAuth(AuthBase):
    """Preemptive basic auth limited to the origin of one base URL.

    Requests to any other scheme, host or port go out without an
    ``Authorization`` header.
    """

    def __init__(self, base_url: str, username: str, password: str) -> None:
        self.origin = _origin(base_url)
        self._basic = HTTPBasicAuth(username, password)

    def matches(self, url: str) -> bool:
        try:
            return _origin(url) == self.origin
        except ValueError:
            return False

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        if self.matches(request.url or ""):
            return self._basic(request)
        logger.debug("Not sending credentials to %s", request.url)
        return request


class TransportSession:
    """Owns the HTTP session used by a single management client.

    Parameters
    ----------
    target:
        Destination coordinates and credentials.
    session:
        Optional pre-built session, mainly for tests.  Its auth, TLS and
        proxy settings are overwritten from *target*.
    """

    def __init__(
        self,
        target: DeploymentTarget,
        session: requests.Session | None = None,
    ) -> None:
        self._target = target
        self._session = session if session is not None else requests.Session()
        self._closed = False
        self._configure()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def target(self) -> DeploymentTarget:
        return self._target

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Exchange
    # ------------------------------------------------------------------

    def url_for(self, path: str) -> str:
        """Return the absolute URL for *path*.

        Absolute ``http(s)://`` URLs, such as locations returned by an
        install call, are used verbatim.
        """
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return self._target.base_url + path

    def execute(
        self,
        method: str,
        path: str,
        *,
        data: bytes | str | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """Perform exactly one HTTP exchange.

        Raises
        ------
        TransportError
            If the session is closed or the exchange fails before a
            response is received (connection, TLS, proxy, timeout), or
            if the request cannot be encoded for the wire.
        """
        if self._closed:
            raise TransportError("Transport session is closed")
        url = self.url_for(path)
        logger.debug("%s %s", method, url)
        try:
            with warnings.catch_warnings():
                if self._target.trust_all_certificates:
                    warnings.simplefilter("ignore", urllib3.exceptions.InsecureRequestWarning)
                response = self._session.request(
                    method,
                    url,
                    data=data,
                    headers=headers,
                    timeout=self._target.timeout,
                )
        except requests.RequestException as exc:
            raise TransportError(f"Could not obtain response: {exc}") from exc
        except UnicodeError as exc:
            raise TransportError(f"Could not encode request to {url}: {exc}") from exc
        logger.debug("%s %s -> %d %s", method, url, response.status_code, response.reason)
        return response

    def close(self) -> None:
        """Release the underlying session.  Further calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self._session.close()
        logger.debug("Closed transport session to %s", self._target.base_url)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _configure(self) -> None:
        target = self._target
        self._session.auth = TargetBasicAuth(target.base_url, target.username, target.password)

        if target.trust_all_certificates:
            self._session.verify = False
            logger.warning(
                "TLS certificate validation is disabled for %s; any certificate will be trusted",
                target.base_url,
            )

        proxy_url = target.proxy_url
        if proxy_url is not None:
            self._session.proxies = {"http": proxy_url, "https": proxy_url}
            logger.info("Using proxy %s for HTTP connections", proxy_url)

    def __repr__(self) -> str:
        return f"TransportSession(target={self._target.base_url!r}, closed={self._closed})"


__all__ = ["TargetBasicAuth", "TransportSession"]
