"""
Tests for odata_client.api gateway.
"""

import pytest
from unittest.mock import MagicMock, Mock

from fastapi.testclient import TestClient

from odata_client.api.gateway import ODataGateway, build_query, create_app
from odata_client.api.models import FilterClause, QueryRequest, apply_filters
from odata_client.core.exceptions import AuthenticationError, ODataUpstreamError
from odata_client.odata.filters import ODataFilterBuilder


HEADERS = {"x-api-key": "gw-key"}


@pytest.fixture
def gateway():
    return ODataGateway(
        base_url="https://api.example.com/odata/",
        api_key="upstream-key",
        bearer_token="tok",
        gateway_key="gw-key",
        max_top=100,
        max_pages=2,
    )


@pytest.fixture
def api(gateway):
    return TestClient(create_app(gateway))


def _connected(gateway, service):
    conn = MagicMock()
    conn.__enter__.return_value = conn
    conn.__exit__.return_value = False
    conn.get_service.return_value = service
    gateway.connect = Mock(return_value=conn)


class TestApplyFilters:
    """Tests for replaying filter clauses."""

    def test_replays_calls_in_order(self):
        clauses = [
            FilterClause(op="where", field="City", operator="eq", value="Austin"),
            FilterClause(op="start_group", relation="or"),
            FilterClause(op="length", field="PostalCode", length=5),
            FilterClause(op="where_in", field="id", values=[1, 2]),
            FilterClause(op="end_group"),
            FilterClause(op="substringof", field="City", value="us"),
        ]
        f = apply_filters(ODataFilterBuilder(), clauses)
        assert f.get_filter_expression() == (
            "City eq 'Austin' AND (length(PostalCode) eq 5 or id in (1, 2)) or substringof('us', City)"
        )

    def test_where_group_and_distance(self):
        clauses = [
            FilterClause(
                op="where_group",
                logical="or",
                conditions=[
                    {"field": "a", "operator": "eq", "value": 1},
                    {"field": "b", "operator": "eq", "value": 2},
                ],
            ),
            FilterClause(op="distance", field="loc", operator="le", point={"lat": 1, "long": 2, "radius": 3}),
            FilterClause(op="distance", field="loc", point={}),
        ]
        f = apply_filters(ODataFilterBuilder(), clauses)
        assert f.get_filter_expression() == "(a eq 1 or b eq 2) and geo.distance(loc, POINT(2 1)) le 3"


class TestBuildQuery:

    def test_caps_top(self):
        req = QueryRequest(resource="Property", top=1000)
        assert build_query(req, max_top=100).build_query_url() == "Property?$top=100"

    def test_defaults_top_to_cap(self):
        assert build_query(QueryRequest(resource="Property"), max_top=50).build_query_url() == "Property?$top=50"

    def test_full_request(self):
        req = QueryRequest(
            resource="Property",
            select=["ListingKey"],
            expand=["Media"],
            orderby=[{"field": "ListPrice", "direction": "desc"}],
            skip=10,
            filters=[{"op": "contains", "field": "City", "value": "Aus"}],
        )
        assert build_query(req).build_query_url() == (
            "Property?$select=ListingKey&$expand=Media&$orderby=ListPrice desc&$skip=10"
            "&$filter=contains(City, 'Aus')"
        )


class TestGatewayEndpoints:
    """Tests for the FastAPI endpoints."""

    def test_health(self, api):
        r = api.get("/health")
        assert r.status_code == 200
        assert r.json()["ok"] is True

    def test_compile_requires_api_key(self, api):
        r = api.post("/compile", json={"resource": "Property"}, headers={"x-api-key": "wrong"})
        assert r.status_code == 401

    def test_compile(self, api):
        r = api.post(
            "/compile",
            json={
                "resource": "Property/",
                "select": ["ListingKey"],
                "filters": [{"op": "where", "field": "City", "operator": "eq", "value": "Austin"}],
            },
            headers=HEADERS,
        )
        assert r.status_code == 200
        assert r.json() == {
            "url": "Property?$select=ListingKey&$filter=City eq 'Austin'",
            "filter": "City eq 'Austin'",
        }

    def test_query(self, api, gateway):
        service = Mock()
        service.read_all.return_value = [{"ListingKey": "L-001"}]
        _connected(gateway, service)

        r = api.post("/query", json={"resource": "Property", "max_pages": 5}, headers=HEADERS)

        assert r.status_code == 200
        body = r.json()
        assert body["count"] == 1
        assert body["url"] == "Property?$top=100"
        assert service.read_all.call_args.kwargs["max_pages"] == 2

    def test_query_entity_type(self, api, gateway):
        service = Mock()
        service.entities.return_value = [{"@odata.type": "#Member"}]
        _connected(gateway, service)

        r = api.post("/query", json={"resource": "Member", "entity_type": "Member"}, headers=HEADERS)

        assert r.status_code == 200
        assert service.entities.call_args.args[1] == "Member"

    def test_query_upstream_error(self, api, gateway):
        service = Mock()
        service.read_all.side_effect = ODataUpstreamError(400, "bad filter", "https://x")
        _connected(gateway, service)

        r = api.post("/query", json={"resource": "Property"}, headers=HEADERS)

        assert r.status_code == 502
        assert r.json()["detail"]["upstream_status"] == 400

    def test_query_auth_error(self, api, gateway):
        service = Mock()
        service.read_all.side_effect = AuthenticationError("token endpoint returned 401")
        _connected(gateway, service)

        r = api.post("/query", json={"resource": "Property"}, headers=HEADERS)

        assert r.status_code == 502
        assert "401" in r.json()["detail"]["message"]
