"""
odata_client.core - Core connectivity and authentication
=========================================================

- ODataAuth / ODataConfig: connection configuration
- Authenticator and its client-credentials, bearer and basic variants
- ODataHttpClient: authenticated GET returning raw bytes
- ConnectionContext: environment-driven connection manager
- Error hierarchy rooted at ODataError

"""

from odata_client.core.exceptions import (
    ODataError,
    HttpClientError,
    AuthenticationError,
    HttpRequestError,
    ODataUpstreamError,
    ResponseParseError,
)

from odata_client.core.session import (
    ODataAuth,
    ODataConfig,
    Authenticator,
    BasicAuthenticator,
    BearerTokenAuthenticator,
    ClientCredentialsAuthenticator,
    ODataHttpClient,
    build_authenticator,
)

from odata_client.core.connection import ConnectionContext

__all__ = [
    "ODataError",
    "HttpClientError",
    "AuthenticationError",
    "HttpRequestError",
    "ODataUpstreamError",
    "ResponseParseError",
    "ODataAuth",
    "ODataConfig",
    "Authenticator",
    "BasicAuthenticator",
    "BearerTokenAuthenticator",
    "ClientCredentialsAuthenticator",
    "ODataHttpClient",
    "build_authenticator",
    "ConnectionContext",
]
