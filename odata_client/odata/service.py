"""
odata_client.odata.service - OData Service Client
===================================================

Executes queries built with ``ODataQueryBuilder`` through an
``ODataHttpClient``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Generator, List, Optional

from odata_client.odata.query import ODataQueryBuilder
from odata_client.odata.response import ODataResponseParser

if TYPE_CHECKING:
    from odata_client.core.session import ODataHttpClient


logger = logging.getLogger("odata_client.service")


class ODataService:
    """
    Query client for one OData API.

    Parameters
    ----------
    client : ODataHttpClient
        Authenticated HTTP client
    parser : ODataResponseParser, optional
        Response decoder

    Examples
    --------
    >>> with ODataHttpClient(cfg) as client:
    ...     api = ODataService(client)
    ...     q = api.query("Property").select(["ListingKey", "City"]).top(50)
    ...     q.filter_builder.where("City", "eq", "Austin")
    ...     rows = api.read_all(q, max_pages=5)
    """

    def __init__(
        self,
        client: "ODataHttpClient",
        parser: Optional[ODataResponseParser] = None,
    ) -> None:
        self.client = client
        self.parser = parser or ODataResponseParser()

    def query(self, resource: str) -> ODataQueryBuilder:
        """Start a new query against ``resource``."""
        return ODataQueryBuilder(resource)

    # ---------------- core reads ----------------

    def execute(self, builder: ODataQueryBuilder) -> Dict[str, Any]:
        """
        Run a query and return the decoded response.

        Raises
        ------
        AuthenticationError, HttpRequestError, ResponseParseError
            Propagated from the client and the parser
        """
        url = builder.build_query_url()
        logger.debug("executing %s", url)
        return self.parser.parse_response(self.client.get(url))

    def read(self, builder: ODataQueryBuilder) -> List[Dict[str, Any]]:
        """Read a single page of entity records."""
        return self.parser.extract_results(self.execute(builder))

    def entities(self, builder: ODataQueryBuilder, entity_type: str) -> List[Dict[str, Any]]:
        """Read a single page and keep the records of ``entity_type``."""
        return self.parser.extract_entities(self.execute(builder), entity_type)

    def property(self, builder: ODataQueryBuilder, name: str) -> Any:
        """Read a single page and return one top-level property, e.g. ``@odata.count``."""
        return self.parser.extract_property(self.execute(builder), name)

    def iterate(
        self,
        builder: ODataQueryBuilder,
        *,
        max_pages: Optional[int] = None,
    ) -> Generator[List[Dict[str, Any]], None, None]:
        """
        Iterate through pages of results.

        Yields each page as a list of records, following next links.

        Parameters
        ----------
        builder : ODataQueryBuilder
            Query for the first page
        max_pages : int, optional
            Maximum number of pages to fetch

        Yields
        ------
        list of dict
            Each page of entity records
        """
        p = self.execute(builder)

        yielded = 0
        first = self.parser.extract_results(p)
        if first:
            yield first
            yielded += 1
            if max_pages is not None and yielded >= int(max_pages):
                return

        next_link = self.parser.next_link(p)
        seen = set()

        while next_link:
            if next_link in seen:
                return
            seen.add(next_link)

            p = self.parser.parse_response(self.client.get(next_link))

            chunk = self.parser.extract_results(p)
            if chunk:
                yield chunk
                yielded += 1
                if max_pages is not None and yielded >= int(max_pages):
                    return

            next_link = self.parser.next_link(p)

    def read_all(
        self,
        builder: ODataQueryBuilder,
        *,
        max_pages: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Read all pages of results into a single list."""
        out: List[Dict[str, Any]] = []
        for page in self.iterate(builder, max_pages=max_pages):
            out.extend(page)
        return out
