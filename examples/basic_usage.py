"""
Example: Basic usage of odata_client
====================================

This example shows how to build filters and run queries.
"""

from odata_client import ODataAuth, ODataConfig, ODataHttpClient
from odata_client.odata import ODataFilterBuilder, ODataQueryBuilder, ODataService


def example_filter_only():
    """Build a $filter expression without any I/O."""
    f = ODataFilterBuilder()
    f.where("StandardStatus", "eq", "Active")
    f.start_group("or")
    f.contains("City", "Austin").startswith("PostalCode", "787")
    f.end_group()
    f.distance("Coordinates", "le", {"lat": 30.27, "long": -97.74, "radius": 10})
    print(f.get_filter_expression())


def example_query_url():
    """Compose query options and a filter into one URL."""
    q = ODataQueryBuilder("https://api.example.com/reso/odata/Property/")
    q.select(["ListingKey", "ListPrice"]).order_by([("ListPrice", "desc")]).top(50)
    q.add_filter("ListPrice", "le", 750000)
    q.add_filter("City", None, "Aus", function="contains")
    print(q.build_query_url())


def example_execute():
    """Authenticate with client credentials and read two pages."""
    cfg = ODataConfig(
        base_url="https://api.example.com/reso/odata/",
        api_key="YOUR_API_KEY",
        auth=ODataAuth("client_credentials", ("CLIENT_ID", "CLIENT_SECRET")),
    )

    with ODataHttpClient(cfg) as client:
        api = ODataService(client)
        q = api.query("Property").select(["ListingKey", "City"]).top(100)
        q.filter_builder.where_in("City", ["Austin", "Round Rock"])

        items = api.read_all(q, max_pages=2)
        print(f"Found {len(items)} listings")
        print("First 2:", items[:2])


if __name__ == "__main__":
    example_filter_only()
    example_query_url()
    # example_execute()
