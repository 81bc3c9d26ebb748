"""
odata_client.core.exceptions - Error hierarchy
===============================================

Every error raised by the HTTP and decoding layers derives from
``ODataError``. The query and filter builders never raise.
"""

from __future__ import annotations

from typing import Dict, Optional


class ODataError(RuntimeError):
    """Base class for all odata_client errors."""


class HttpClientError(ODataError):
    """Raised when the HTTP request executor cannot produce a response."""


class AuthenticationError(HttpClientError):
    """
    Raised when an access token cannot be obtained.

    Covers an unreachable token endpoint, a non-2xx answer from it, and a
    body without a usable ``access_token``.
    """


class HttpRequestError(HttpClientError):
    """Raised when the GET against the service fails at transport level."""


class ODataUpstreamError(HttpRequestError):
    """
    Exception raised when the OData service answers with an error status.

    Attributes
    ----------
    status : int
        HTTP status code from the service
    body : str
        Response body (truncated for display)
    url : str
        The URL that was called
    headers : dict
        Response headers
    """

    def __init__(
        self,
        status: int,
        body: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        snippet = (body or "")[:1200]
        super().__init__(f"OData upstream error {status} for {url}: {snippet}")
        self.status = status
        self.body = body or ""
        self.url = url
        self.headers = headers or {}


class ResponseParseError(ODataError):
    """Raised when a response body is not a valid JSON object."""
