"""HTTP access to the FortiOS REST API with token authentication."""

from __future__ import annotations

import json
import ssl
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import requests
from requests.adapters import HTTPAdapter

from fortigate_exporter.config import FortiExporterConfig


class FortiHTTPError(Exception):
    """Raised when the API cannot be reached or answers unexpectedly."""


class FortiTokenClient:
    """Issues authenticated GET requests against one FortiGate."""

    def __init__(self, target: str, session: Any, token: str, timeout: Any = None) -> None:
        parts = urlsplit(target)
        self._target = target
        self._scheme = parts.scheme
        self._netloc = parts.netloc
        self._session = session
        self._token = token
        self._timeout = timeout

    def _url(self, path: str, query: str) -> str:
        return urlunsplit((self._scheme, self._netloc, "/" + path.lstrip("/"), query, ""))

    def get(self, path: str, query: str = "") -> Any:
        """GET ``path`` with the raw ``query`` and return the decoded JSON body."""
        url = self._url(path, query)
        headers = {"Authorization": f"Bearer {self._token}"}
        try:
            response = self._session.get(url, headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:
            raise FortiHTTPError(str(exc)) from exc
        if response.status_code != 200:
            raise FortiHTTPError(
                f'Response code was {response.status_code}, expected 200 (path: "{path}")'
            )
        try:
            return json.loads(response.content)
        except ValueError as exc:
            raise FortiHTTPError(f'invalid JSON response (path: "{path}"): {exc}') from exc

    def __str__(self) -> str:
        return self._target


def new_forti_client(target: str, session: Any, config: FortiExporterConfig) -> FortiTokenClient:
    """Return a client for ``target`` using the auth data registered for it."""
    auth = config.auth_keys.get(target)
    if auth is None:
        raise FortiHTTPError(f'no API authentication registered for "{target}"')
    if auth.token:
        if urlsplit(target).scheme != "https":
            raise FortiHTTPError("FortiOS only supports token for HTTPS connections")
        return FortiTokenClient(
            target, session, auth.token, timeout=(config.tls_timeout, config.scrape_timeout)
        )
    raise FortiHTTPError(f'invalid authentication data for "{target}"')


class _TLSAdapter(HTTPAdapter):
    def __init__(self, context: ssl.SSLContext) -> None:
        self._context = context
        super().__init__()

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        kwargs["ssl_context"] = self._context
        super().init_poolmanager(*args, **kwargs)


def configure(config: FortiExporterConfig) -> requests.Session:
    """Return a session trusting the system CAs plus any extra CAs configured."""
    context = ssl.create_default_context()
    for cert in config.tls_extra_cas:
        try:
            context.load_verify_locations(cadata=cert.content.decode("latin-1"))
        except (ssl.SSLError, ValueError) as exc:
            raise FortiHTTPError(f'failed to append certs from PEM "{cert.path}": {exc}') from exc

    session = requests.Session()
    if config.tls_insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        session.verify = False
    session.mount("https://", _TLSAdapter(context))
    return session