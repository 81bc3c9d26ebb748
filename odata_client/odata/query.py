"""
odata_client.odata.query - Query options and URL assembly
==========================================================

``ODataQueryOptions`` holds ``$select``, ``$expand``, ``$orderby``, ``$top``
and ``$skip``; ``ODataQueryBuilder`` combines them with an
``ODataFilterBuilder`` into a request URL.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from odata_client.odata.filters import ODataFilterBuilder


OrderByItem = Union[str, Sequence[str], Mapping[str, str]]


def _join_csv(items: Sequence[str]) -> str:
    """Join items as comma-separated values, stripping whitespace."""
    return ",".join([s.strip() for s in items if s and s.strip()])


def _order_term(item: OrderByItem) -> str:
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, Mapping):
        field = item["field"]
        direction = item.get("direction")
    else:
        field, direction = (list(item) + [None])[:2]
    return f"{field} {direction}" if direction else str(field)


class ODataQueryOptions:
    """
    Container for the non-filter OData query options.

    Each setter replaces the previous value for its option.

    Examples
    --------
    >>> opts = ODataQueryOptions()
    >>> opts.select(["ListingKey", "City"]).order_by([("ListPrice", "desc")]).top(10)
    >>> opts.build_query()
    '$select=ListingKey,City&$orderby=ListPrice desc&$top=10'
    """

    def __init__(self) -> None:
        self._select: List[str] = []
        self._expand: List[str] = []
        self._order_by: List[OrderByItem] = []
        self._top: Optional[int] = None
        self._skip: Optional[int] = None

    def select(self, fields: Sequence[str]) -> "ODataQueryOptions":
        self._select = list(fields)
        return self

    def expand(self, fields: Sequence[str]) -> "ODataQueryOptions":
        self._expand = list(fields)
        return self

    def order_by(self, fields: Sequence[OrderByItem]) -> "ODataQueryOptions":
        """
        Set ``$orderby``.

        Parameters
        ----------
        fields : list
            ``(field, direction)`` pairs, ``{"field": ..., "direction": ...}``
            mappings, or bare field names
        """
        self._order_by = list(fields)
        return self

    def top(self, count: int) -> "ODataQueryOptions":
        self._top = int(count)
        return self

    def skip(self, count: int) -> "ODataQueryOptions":
        self._skip = int(count)
        return self

    @property
    def options(self) -> List[Tuple[str, str]]:
        """Present options as ``(name, value)`` pairs in emission order."""
        out: List[Tuple[str, str]] = []
        select = _join_csv(self._select)
        if select:
            out.append(("$select", select))
        expand = _join_csv(self._expand)
        if expand:
            out.append(("$expand", expand))
        orderby = _join_csv([_order_term(i) for i in self._order_by])
        if orderby:
            out.append(("$orderby", orderby))
        if self._top is not None:
            out.append(("$top", str(self._top)))
        if self._skip is not None:
            out.append(("$skip", str(self._skip)))
        return out

    def build_query(self) -> str:
        """Serialize the present options, joined by ``&``."""
        return "&".join(f"{k}={v}" for k, v in self.options)


class ODataQueryBuilder:
    """
    Assembles a complete OData request URL for one resource.

    Parameters
    ----------
    base_uri : str
        Resource URI (absolute, or relative to the client's base URL)

    Examples
    --------
    >>> q = ODataQueryBuilder("Property/")
    >>> q.select(["ListingKey"]).add_filter("City", "eq", "Austin")
    >>> q.build_query_url()
    "Property?$select=ListingKey&$filter=City eq 'Austin'"
    """

    def __init__(self, base_uri: str) -> None:
        self.base_uri = base_uri
        self._filter_builder = ODataFilterBuilder()
        self._query_options = ODataQueryOptions()

    @property
    def filter_builder(self) -> ODataFilterBuilder:
        """The filter builder whose expression becomes ``$filter``."""
        return self._filter_builder

    def add_filter(
        self,
        field: Any,
        operator: Optional[str],
        value: Any,
        logical: str = "and",
        function: Optional[str] = None,
    ) -> "ODataQueryBuilder":
        """
        Add a filter condition through the filter builder.

        Parameters
        ----------
        field : str or list
            Field to filter on, or a list of nested conditions
        operator : str
            Comparison operator; for ``length`` the comparison applied to
            the length
        value : Any
            Value to compare against; for ``in`` the list of values
        logical : str
            Operator joining this condition to the previous one
        function : str, optional
            One of "contains", "startswith", "endswith", "substringof",
            "length", "in", or None for a plain comparison

        Returns
        -------
        ODataQueryBuilder
            self
        """
        fb = self._filter_builder
        if function == "contains":
            fb.contains(field, value, logical)
        elif function == "startswith":
            fb.startswith(field, value, logical)
        elif function == "endswith":
            fb.endswith(field, value, logical)
        elif function == "substringof":
            fb.substringof(value, field, logical)
        elif function == "length":
            fb.length(field, value, operator or "eq", logical)
        elif function == "in":
            fb.where_in(field, value, logical)
        else:
            fb.where(field, operator, value, logical)
        return self

    def select(self, fields: Sequence[str]) -> "ODataQueryBuilder":
        self._query_options.select(fields)
        return self

    def expand(self, fields: Sequence[str]) -> "ODataQueryBuilder":
        self._query_options.expand(fields)
        return self

    def order_by(self, fields: Sequence[OrderByItem]) -> "ODataQueryBuilder":
        self._query_options.order_by(fields)
        return self

    def top(self, count: int) -> "ODataQueryBuilder":
        self._query_options.top(count)
        return self

    def skip(self, count: int) -> "ODataQueryBuilder":
        self._query_options.skip(count)
        return self

    def get_query_options(self) -> ODataQueryOptions:
        return self._query_options

    def build_query_url(self) -> str:
        """
        Build the complete query URL.

        The trailing slash of the base URI is dropped, the query options
        follow ``?`` and the filter comes last. Nothing is percent-encoded.

        When no other option is set the filter follows ``?`` directly
        (``Property?$filter=...``). Builders that always emit ``&$filter=``
        produce ``Property&$filter=...`` here; with any option present both
        forms are identical.
        """
        url = self.base_uri.rstrip("/")
        query = self._query_options.build_query()
        expression = self._filter_builder.get_filter_expression()

        if query:
            url += "?" + query
        if expression:
            url += ("&" if query else "?") + "$filter=" + expression
        return url
