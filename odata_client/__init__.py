"""
OData query client (odata_client)
=================================

Fluent construction of OData ``$filter``/``$select``/``$expand``/``$orderby``/
``$top``/``$skip`` queries and authenticated execution against an OData REST
API.

Usage
-----
>>> from odata_client import ConnectionContext
>>>
>>> with ConnectionContext() as conn:
...     service = conn.get_service()
...     q = service.query("Property").select(["ListingKey", "City"]).top(10)
...     q.filter_builder.where("City", "eq", "Austin").length("PostalCode", 5)
...     rows = service.read(q)

Subpackages
-----------
- odata_client.core: HTTP client, authentication, configuration and errors
- odata_client.odata: Filter builder, query builder, response decoding
- odata_client.api: Optional FastAPI REST gateway

"""

__version__ = "0.1.0"

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
    ODataHttpClient,
)

from odata_client.core.connection import ConnectionContext

from odata_client.odata import (
    ODataFilterBuilder,
    ODataQueryBuilder,
    ODataQueryOptions,
    ODataResponseParser,
    ODataService,
    escape_value,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "ODataError",
    "HttpClientError",
    "AuthenticationError",
    "HttpRequestError",
    "ODataUpstreamError",
    "ResponseParseError",
    # Core
    "ODataAuth",
    "ODataConfig",
    "ODataHttpClient",
    "ConnectionContext",
    # OData
    "ODataFilterBuilder",
    "ODataQueryBuilder",
    "ODataQueryOptions",
    "ODataResponseParser",
    "ODataService",
    "escape_value",
]
