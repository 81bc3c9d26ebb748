"""
Pytest configuration and shared fixtures.
"""

import json

import pytest
from unittest.mock import Mock

from odata_client.core.session import ODataAuth, ODataConfig


@pytest.fixture
def config():
    """Client-credentials configuration pointing at a fake API."""
    return ODataConfig(
        base_url="https://api.example.com/reso/odata",
        api_key="key-123",
        auth=ODataAuth("client_credentials", ("client-id", "client-secret")),
        token_url="https://auth.example.com/oauth2/token",
    )


@pytest.fixture
def mock_client():
    """Create a mock ODataHttpClient."""
    client = Mock()
    client.base = "https://api.example.com/reso/odata/"
    client.timeout = 60.0
    client.verify = True
    return client


@pytest.fixture
def sample_odata_response():
    """Sample OData v4 response."""
    return {
        "@odata.context": "https://api.example.com/reso/odata/$metadata#Property",
        "@odata.count": 3,
        "value": [
            {"@odata.type": "#Property", "ListingKey": "L-001", "City": "Austin"},
            {"@odata.type": "#Property", "ListingKey": "L-002", "City": "Dallas"},
            {"@odata.type": "#Member", "MemberKey": "M-001"},
        ],
    }


@pytest.fixture
def sample_odata_bytes(sample_odata_response):
    return json.dumps(sample_odata_response).encode("utf-8")


def make_response(status_code=200, payload=None, content=None, headers=None):
    """Build a mock requests.Response."""
    r = Mock()
    r.status_code = status_code
    r.headers = headers or {"Content-Type": "application/json"}
    if content is None:
        content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    r.content = content
    r.text = content.decode("utf-8", errors="replace")
    if payload is not None:
        r.json.return_value = payload
    else:
        r.json.side_effect = ValueError("No JSON object could be decoded")
    return r


@pytest.fixture
def response_factory():
    return make_response
