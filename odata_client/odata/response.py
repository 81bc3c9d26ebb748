"""
odata_client.odata.response - Response decoding
================================================

Turns raw OData JSON bodies into mappings and pulls out properties and
entity collections.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

from odata_client.core.exceptions import ResponseParseError


class ODataResponseParser:
    """
    Decoder for OData JSON responses.

    Handles both the v4 layout (``value`` / ``@odata.nextLink``) and the v2
    layout (``d.results`` / ``d.__next``).

    Examples
    --------
    >>> parser = ODataResponseParser()
    >>> data = parser.parse_response(b'{"value": [{"@odata.type": "#Property"}]}')
    >>> parser.extract_entities(data, "Property")
    [{'@odata.type': '#Property'}]
    """

    def parse_response(self, raw: Union[bytes, str]) -> Dict[str, Any]:
        """
        Decode a response body.

        Parameters
        ----------
        raw : bytes or str
            Response body

        Returns
        -------
        dict
            Decoded JSON object

        Raises
        ------
        ResponseParseError
            If the body is not valid JSON or not a JSON object
        """
        try:
            data = json.loads(raw)
        except (ValueError, TypeError) as e:
            raise ResponseParseError(f"Error parsing JSON response: {e}") from e

        if not isinstance(data, dict):
            raise ResponseParseError(
                f"Error parsing JSON response: expected an object, got {type(data).__name__}"
            )
        return data

    def extract_property(self, parsed: Optional[Dict[str, Any]], name: str) -> Any:
        """Return a top-level property, or None when absent."""
        if isinstance(parsed, dict):
            return parsed.get(name)
        return None

    def extract_entities(self, parsed: Optional[Dict[str, Any]], entity_type: str) -> List[Dict[str, Any]]:
        """
        Return the entries of ``value`` declared as ``entity_type``.

        An entry matches when its ``@odata.type`` equals ``#<entity_type>``.
        """
        if not isinstance(parsed, dict):
            return []
        wanted = entity_type if entity_type.startswith("#") else "#" + entity_type
        return [
            e for e in parsed.get("value") or []
            if isinstance(e, dict) and e.get("@odata.type") == wanted
        ]

    def extract_results(self, parsed: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Return the entity collection of a v4 or v2 payload."""
        if not isinstance(parsed, dict):
            return []
        d = parsed.get("d")
        if isinstance(d, dict):
            return d.get("results") or []
        return parsed.get("value") or []

    def next_link(self, parsed: Optional[Dict[str, Any]]) -> Optional[str]:
        if not isinstance(parsed, dict):
            return None
        d = parsed.get("d")
        if isinstance(d, dict) and d.get("__next"):
            return d["__next"]
        return parsed.get("@odata.nextLink")
