"""
odata_client.core.session - OData HTTP client and authentication
=================================================================

Low-level request execution for OData REST services with:
- OAuth2 client-credentials, static bearer and basic authentication
- ``x-api-key`` header injection
- Optional retry through urllib3 (disabled by default)
- Error extraction from OData error payloads
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union
import logging
import time

import requests
from requests import PreparedRequest, Response, Session
from requests.adapters import HTTPAdapter
from requests.auth import AuthBase, HTTPBasicAuth
from urllib3.util.retry import Retry

from odata_client.core.exceptions import (
    AuthenticationError,
    HttpRequestError,
    ODataUpstreamError,
)
from odata_client.odata.response import ODataResponseParser


DEFAULT_TOKEN_URL = "https://realtyfeed-sso.auth.us-east-1.amazoncognito.com/oauth2/token"
DEFAULT_SCOPE = "api/read"

logger = logging.getLogger("odata_client.http")


@dataclass
class ODataAuth:
    """
    Authentication configuration for an OData service.

    Parameters
    ----------
    kind : str
        One of "client_credentials", "bearer" or "basic"
    value : tuple or str
        For client_credentials: (client_id, client_secret) tuple
        For bearer: access token string
        For basic: (username, password) tuple

    Examples
    --------
    >>> auth = ODataAuth("client_credentials", ("my-client", "my-secret"))
    >>> auth = ODataAuth("bearer", "eyJ...")
    """
    kind: str  # "client_credentials" | "bearer" | "basic"
    value: Union[Tuple[str, str], str]


@dataclass
class ODataConfig:
    """
    Connection configuration for an OData REST API.

    Parameters
    ----------
    base_url : str
        Base URL of the API, e.g. "https://api.example.com/reso/odata/"
    api_key : str
        Value sent in the ``x-api-key`` header
    auth : ODataAuth
        Authentication configuration
    token_url : str
        OAuth2 token endpoint used by client_credentials auth
    scope : str
        OAuth2 scope requested with the token (default: "api/read")
    timeout : float
        Request timeout in seconds (default: 60.0)
    retries : int
        Number of retry attempts (default: 0)
    backoff : float
        Backoff factor for retries (default: 0.5)
    verify : bool or str
        SSL verification (True, False, or path to CA bundle)
    user_agent : str
        User-Agent header value
    """
    base_url: str
    api_key: str
    auth: ODataAuth
    token_url: str = DEFAULT_TOKEN_URL
    scope: str = DEFAULT_SCOPE
    timeout: float = 60.0
    retries: int = 0
    backoff: float = 0.5
    verify: Union[bool, str] = True
    user_agent: str = "odata-client/0.1"


class Authenticator(AuthBase):
    """
    Base class for request authenticators.

    Authenticators are ``requests`` auth objects: the HTTP client passes one
    as ``auth=`` and requests calls it on every prepared request, so
    implementations that talk to a token endpoint fetch a fresh token each
    time.
    """

    def close(self) -> None:
        """Release resources held by the authenticator."""


class BearerTokenAuthenticator(Authenticator):
    """Sends a fixed, externally obtained access token."""

    def __init__(self, token: str) -> None:
        self.token = token

    def __call__(self, r: PreparedRequest) -> PreparedRequest:
        r.headers["Authorization"] = f"Bearer {self.token}"
        return r


class BasicAuthenticator(HTTPBasicAuth, Authenticator):
    """HTTP basic authentication."""


class ClientCredentialsAuthenticator(Authenticator):
    """
    OAuth2 client-credentials flow.

    Exchanges a client id and secret for an access token at ``token_url``.
    The token request goes through its own session, so headers of the API
    session (``x-api-key`` in particular) never reach the token endpoint.

    Parameters
    ----------
    client_id : str
        OAuth2 client id
    client_secret : str
        OAuth2 client secret
    token_url : str
        Token endpoint
    scope : str
        Requested scope
    timeout : float
        Timeout for the token request in seconds
    verify : bool or str
        SSL verification for the token request
    session : requests.Session, optional
        Session used for the token request
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        token_url: str = DEFAULT_TOKEN_URL,
        scope: str = DEFAULT_SCOPE,
        timeout: float = 60.0,
        verify: Union[bool, str] = True,
        session: Optional[Session] = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.scope = scope
        self.timeout = timeout
        self.verify = verify
        self.session = session if session is not None else requests.Session()

    def close(self) -> None:
        self.session.close()

    def fetch_token(self) -> str:
        """
        Request a new access token.

        Raises
        ------
        AuthenticationError
            If the endpoint is unreachable, answers non-2xx, or returns a
            body without an ``access_token``.
        """
        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": self.scope,
        }
        t0 = time.perf_counter()
        try:
            r = self.session.post(
                self.token_url,
                data=data,
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"OAuth 2.0 authentication failed: {e}") from e

        if not 200 <= r.status_code < 300:
            raise AuthenticationError(
                f"OAuth 2.0 authentication failed: token endpoint returned {r.status_code}"
            )

        try:
            payload = r.json()
        except ValueError as e:
            raise AuthenticationError(f"Error parsing token response: {e}") from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token or not isinstance(token, str):
            raise AuthenticationError("Token response does not contain an access_token")

        dt = (time.perf_counter() - t0) * 1000.0
        logger.debug("token fetched from %s %sms", self.token_url, round(dt, 1))
        return token

    def __call__(self, r: PreparedRequest) -> PreparedRequest:
        r.headers["Authorization"] = f"Bearer {self.fetch_token()}"
        return r


def build_authenticator(cfg: ODataConfig) -> Authenticator:
    """Map an ``ODataAuth`` configuration onto an authenticator."""
    kind = cfg.auth.kind
    if kind == "client_credentials":
        client_id, client_secret = cfg.auth.value  # type: ignore[misc]
        return ClientCredentialsAuthenticator(
            client_id,
            client_secret,
            token_url=cfg.token_url,
            scope=cfg.scope,
            timeout=cfg.timeout,
            verify=cfg.verify,
        )
    if kind == "bearer":
        return BearerTokenAuthenticator(cfg.auth.value)  # type: ignore[arg-type]
    if kind == "basic":
        user, password = cfg.auth.value  # type: ignore[misc]
        return BasicAuthenticator(user, password)
    raise ValueError("auth.kind must be 'client_credentials', 'bearer' or 'basic'")


class ODataHttpClient:
    """
    Low-level HTTP client for OData REST APIs.

    Performs one blocking GET per call. The authenticator is passed as
    ``auth=`` and the ``x-api-key`` header is attached per request, so it
    is never part of the session defaults. Use as a context manager for
    automatic cleanup.

    Parameters
    ----------
    cfg : ODataConfig
        Connection configuration
    authenticator : Authenticator, optional
        Overrides the authenticator derived from ``cfg.auth``
    parser : ODataResponseParser, optional
        Decoder used by ``get_json``

    Examples
    --------
    >>> cfg = ODataConfig(...)
    >>> with ODataHttpClient(cfg) as client:
    ...     raw = client.get("Property?$top=1")
    """

    def __init__(
        self,
        cfg: ODataConfig,
        authenticator: Optional[Authenticator] = None,
        parser: Optional[ODataResponseParser] = None,
    ) -> None:
        self.cfg = cfg
        self.base = cfg.base_url.rstrip("/") + "/"
        self.timeout = float(cfg.timeout)
        self.verify = cfg.verify
        self.authenticator = authenticator or build_authenticator(cfg)
        self.parser = parser or ODataResponseParser()

        self.session = self._build_session()

    def close(self) -> None:
        """Close the HTTP session and the authenticator."""
        self.session.close()
        self.authenticator.close()

    def __enter__(self) -> "ODataHttpClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- session ----------------

    def _build_session(self) -> Session:
        sess = requests.Session()
        sess.headers.update({
            "Accept": "application/json",
            "User-Agent": self.cfg.user_agent,
        })

        retry = Retry(
            total=self.cfg.retries,
            backoff_factor=self.cfg.backoff,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET", "HEAD", "OPTIONS"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=20)
        sess.mount("https://", adapter)
        sess.mount("http://", adapter)
        return sess

    # ---------------- helpers ----------------

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base}{endpoint.lstrip('/')}"

    def _extract_error(self, r: Response) -> str:
        try:
            data = r.json()
        except ValueError:
            return r.text
        if not isinstance(data, dict):
            return r.text
        err = data.get("error")
        if not isinstance(err, dict):
            return r.text

        code = err.get("code")
        message = None
        if isinstance(err.get("message"), dict):
            message = err["message"].get("value")
        elif isinstance(err.get("message"), str):
            message = err.get("message")

        target = err.get("target")

        parts = []
        if code:
            parts.append(f"code={code}")
        if message:
            parts.append(f"message={message}")
        if target:
            parts.append(f"target={target}")
        return " | ".join(parts) or r.text

    def _raise_for_error(self, r: Response, url: str) -> None:
        if r.status_code >= 400:
            body = self._extract_error(r)
            raise ODataUpstreamError(r.status_code, body, url, dict(r.headers))

    # ---------------- public ops ----------------

    def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        *,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> bytes:
        """
        Execute an authenticated GET and return the raw body.

        Parameters
        ----------
        endpoint : str
            Path relative to the base URL (query string included), or an
            absolute URL such as a next link
        params : dict, optional
            Additional query parameters
        extra_headers : dict, optional
            Additional HTTP headers

        Returns
        -------
        bytes
            Raw response body

        Raises
        ------
        AuthenticationError
            If no access token could be obtained
        HttpRequestError
            If the request fails or the service answers with an error status
        """
        headers = {"x-api-key": self.cfg.api_key}
        if extra_headers:
            headers.update(extra_headers)

        url = self._url(endpoint)
        t0 = time.perf_counter()
        try:
            r = self.session.get(
                url,
                params=params,
                headers=headers,
                auth=self.authenticator,
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.RequestException as e:
            raise HttpRequestError(f"HTTP request failed: {e}") from e

        self._raise_for_error(r, url)
        dt = (time.perf_counter() - t0) * 1000.0
        logger.debug("GET %s %sms", url, round(dt, 1))
        return r.content

    def get_json(
        self,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        *,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Execute ``get`` and decode the body into a mapping."""
        raw = self.get(endpoint, params, extra_headers=extra_headers)
        return self.parser.parse_response(raw)
