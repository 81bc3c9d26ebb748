"""
odata_client.core.connection - High-level connection management
=================================================================

Provides a ConnectionContext that resolves its settings from arguments or
``ODATA_*`` environment variables.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Optional

from odata_client.core.session import (
    DEFAULT_SCOPE,
    DEFAULT_TOKEN_URL,
    ODataAuth,
    ODataConfig,
    ODataHttpClient,
)

if TYPE_CHECKING:
    from odata_client.odata.service import ODataService


class ConnectionContext:
    """
    High-level connection manager for OData REST APIs.

    Supports environment variable configuration and context manager usage.

    Parameters
    ----------
    base_url : str, optional
        API base URL. Falls back to ODATA_BASE_URL env var.
    api_key : str, optional
        Value for the ``x-api-key`` header. Falls back to ODATA_API_KEY.
    client_id : str, optional
        OAuth2 client id. Falls back to ODATA_CLIENT_ID.
    client_secret : str, optional
        OAuth2 client secret. Falls back to ODATA_CLIENT_SECRET.
    bearer_token : str, optional
        Pre-issued access token. Falls back to ODATA_BEARER_TOKEN.
        Takes precedence over client credentials.
    token_url : str, optional
        OAuth2 token endpoint. Falls back to ODATA_TOKEN_URL.
    scope : str, optional
        OAuth2 scope. Falls back to ODATA_SCOPE.
    verify : bool, optional
        SSL verification. Falls back to ODATA_VERIFY_TLS env var.
    timeout : float
        Request timeout in seconds.

    Examples
    --------
    >>> with ConnectionContext() as conn:  # reads ODATA_* env vars
    ...     service = conn.get_service()
    ...     q = service.query("Property").top(10)
    ...     rows = service.read(q)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        bearer_token: Optional[str] = None,
        token_url: Optional[str] = None,
        scope: Optional[str] = None,
        verify: Optional[bool] = None,
        timeout: float = 60.0,
    ) -> None:
        self._base_url = (base_url or os.environ.get("ODATA_BASE_URL", "")).rstrip("/") + "/"
        self._api_key = api_key or os.environ.get("ODATA_API_KEY", "")
        self._client_id = client_id or os.environ.get("ODATA_CLIENT_ID", "")
        self._client_secret = client_secret or os.environ.get("ODATA_CLIENT_SECRET", "")
        self._bearer_token = bearer_token or os.environ.get("ODATA_BEARER_TOKEN", "")
        self._token_url = token_url or os.environ.get("ODATA_TOKEN_URL", DEFAULT_TOKEN_URL)
        self._scope = scope or os.environ.get("ODATA_SCOPE", DEFAULT_SCOPE)

        if verify is not None:
            self._verify = verify
        else:
            self._verify = os.environ.get("ODATA_VERIFY_TLS", "true").lower() != "false"

        self._timeout = timeout

        if not self._base_url or self._base_url == "/":
            raise ValueError(
                "Missing base_url. Set ODATA_BASE_URL environment variable "
                "or pass base_url parameter."
            )

        if not self._bearer_token and not (self._client_id and self._client_secret):
            raise ValueError(
                "Missing credentials. Set ODATA_CLIENT_ID/ODATA_CLIENT_SECRET or "
                "ODATA_BEARER_TOKEN environment variables, or pass client_id/client_secret "
                "or bearer_token parameters."
            )

        self._client: Optional[ODataHttpClient] = None

    @property
    def client(self) -> ODataHttpClient:
        """Get or create the underlying HTTP client."""
        if self._client is None:
            self._client = ODataHttpClient(self.config)
        return self._client

    @property
    def config(self) -> ODataConfig:
        """The resolved connection configuration."""
        if self._bearer_token:
            auth = ODataAuth("bearer", self._bearer_token)
        else:
            auth = ODataAuth("client_credentials", (self._client_id, self._client_secret))

        return ODataConfig(
            base_url=self._base_url,
            api_key=self._api_key,
            auth=auth,
            token_url=self._token_url,
            scope=self._scope,
            verify=self._verify,
            timeout=self._timeout,
        )

    def close(self) -> None:
        """Close the connection."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ConnectionContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_service(self) -> "ODataService":
        """Get an ODataService bound to this connection."""
        # Import here to avoid circular imports
        from odata_client.odata.service import ODataService
        return ODataService(self.client)

    @property
    def base_url(self) -> str:
        """The configured base URL."""
        return self._base_url
