"""
odata_client.odata - OData query construction
==============================================

- ODataFilterBuilder: fluent $filter expression builder
- ODataQueryOptions / ODataQueryBuilder: query options and URL assembly
- ODataResponseParser: JSON response decoding
- ODataService: query execution with paging

"""

from odata_client.odata.filters import Condition, ODataFilterBuilder, escape_value
from odata_client.odata.query import ODataQueryBuilder, ODataQueryOptions
from odata_client.odata.response import ODataResponseParser
from odata_client.odata.service import ODataService

__all__ = [
    "Condition",
    "ODataFilterBuilder",
    "escape_value",
    "ODataQueryBuilder",
    "ODataQueryOptions",
    "ODataResponseParser",
    "ODataService",
]
