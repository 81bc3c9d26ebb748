"""
Tests for odata_client.odata.query.
"""

import pytest

from odata_client.odata.query import ODataQueryBuilder, ODataQueryOptions, _join_csv


class TestHelperFunctions:

    def test_join_csv(self):
        assert _join_csv(["a", "b", "c"]) == "a,b,c"
        assert _join_csv(["  a  ", "b", "  c"]) == "a,b,c"
        assert _join_csv(["a", "", "c"]) == "a,c"
        assert _join_csv([]) == ""


class TestODataQueryOptions:
    """Tests for option serialization."""

    def test_empty(self):
        assert ODataQueryOptions().build_query() == ""

    def test_all_options_in_fixed_order(self):
        opts = ODataQueryOptions()
        opts.skip(20).top(10).order_by([("f1", "asc"), ("f2", "desc")]).expand(["c"]).select(["a", "b"])
        assert opts.build_query() == "$select=a,b&$expand=c&$orderby=f1 asc,f2 desc&$top=10&$skip=20"

    def test_last_write_wins(self):
        opts = ODataQueryOptions().select(["a"]).select(["b", "c"]).top(5).top(7)
        assert opts.build_query() == "$select=b,c&$top=7"

    def test_empty_lists_are_omitted(self):
        opts = ODataQueryOptions().select([]).expand([]).top(3)
        assert opts.build_query() == "$top=3"

    def test_zero_top_and_skip_are_emitted(self):
        assert ODataQueryOptions().top(0).skip(0).build_query() == "$top=0&$skip=0"

    def test_order_by_forms(self):
        opts = ODataQueryOptions().order_by([
            "ListingKey",
            {"field": "ListPrice", "direction": "desc"},
            ("City",),
        ])
        assert opts.build_query() == "$orderby=ListingKey,ListPrice desc,City"


class TestODataQueryBuilder:
    """Tests for URL assembly."""

    def test_select_and_filter(self):
        q = ODataQueryBuilder("http://x/").select(["a"]).add_filter("a", "eq", 1)
        assert q.build_query_url() == "http://x?$select=a&$filter=a eq 1"

    def test_base_only(self):
        assert ODataQueryBuilder("http://x//").build_query_url() == "http://x"

    def test_filter_without_options(self):
        q = ODataQueryBuilder("Property").add_filter("City", "eq", "Austin")
        assert q.build_query_url() == "Property?$filter=City eq 'Austin'"

    def test_filter_builder_is_shared(self):
        q = ODataQueryBuilder("Property").top(5)
        q.filter_builder.start_group("or").where("a", "eq", 1).where("b", "eq", 2).end_group()
        assert q.build_query_url() == "Property?$top=5&$filter=(a eq 1 or b eq 2)"

    def test_get_query_options(self):
        q = ODataQueryBuilder("Property").select(["a"]).expand(["Media"]).order_by([("a", "asc")]).skip(2)
        assert q.get_query_options().build_query() == "$select=a&$expand=Media&$orderby=a asc&$skip=2"

    @pytest.mark.parametrize("function,field,operator,value,expected", [
        ("contains", "City", None, "Aus", "contains(City, 'Aus')"),
        ("startswith", "City", None, "Au", "startswith(City, 'Au')"),
        ("endswith", "City", None, "in", "endswith(City, 'in')"),
        ("substringof", "City", None, "us", "substringof('us', City)"),
        ("length", "PostalCode", "gt", 4, "length(PostalCode) gt 4"),
        ("in", "id", None, [1, 2], "id in (1, 2)"),
        (None, "ListPrice", "le", 500000, "ListPrice le 500000"),
    ])
    def test_add_filter_dispatch(self, function, field, operator, value, expected):
        q = ODataQueryBuilder("P").add_filter(field, operator, value, function=function)
        assert q.filter_builder.get_filter_expression() == expected

    def test_add_filter_nested_list(self):
        q = ODataQueryBuilder("P").add_filter(
            [
                {"field": "a", "operator": "eq", "value": 1},
                {"field": "b", "operator": "eq", "value": 2},
            ],
            None,
            None,
            "or",
        )
        assert q.build_query_url() == "P?$filter=(a eq 1 or b eq 2)"

    def test_add_filter_logical(self):
        q = ODataQueryBuilder("P").add_filter("a", "eq", 1).add_filter("b", None, "x", "or", "contains")
        assert q.filter_builder.get_filter_expression() == "a eq 1 or contains(b, 'x')"
