"""
odata_client.api.models - Pydantic models for API requests/responses
=====================================================================
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from odata_client.odata.filters import ODataFilterBuilder


EXAMPLE_RESOURCE = "Property"
EXAMPLE_SELECT = ["ListingKey", "City", "ListPrice"]


class ConditionModel(BaseModel):
    """One entry of a nested condition list."""

    field: str
    operator: str
    value: Any = None


class FilterClause(BaseModel):
    """
    One filter builder call.

    ``op`` names the call; the remaining fields are its arguments and are
    ignored when the call does not take them.
    """

    op: Literal[
        "where",
        "where_group",
        "where_in",
        "contains",
        "startswith",
        "endswith",
        "substringof",
        "length",
        "distance",
        "start_group",
        "end_group",
    ]
    field: Optional[str] = None
    operator: Optional[str] = Field(default=None, json_schema_extra={"example": "eq"})
    value: Any = None
    values: Optional[List[Any]] = None
    conditions: Optional[List[ConditionModel]] = None
    logical: str = "and"
    relation: str = "AND"
    comparison: str = "eq"
    length: Optional[int] = None
    point: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Keys lat, long and radius for distance",
        json_schema_extra={"example": {"lat": "30.27", "long": "-97.74", "radius": "10"}},
    )


class OrderByItem(BaseModel):
    field: str
    direction: Optional[Literal["asc", "desc"]] = None


class QueryRequest(BaseModel):
    """Request model for compiling or executing a query."""

    resource: str = Field(
        default=EXAMPLE_RESOURCE,
        description="Resource path relative to the API base URL",
        json_schema_extra={"example": EXAMPLE_RESOURCE},
    )
    select: Optional[List[str]] = Field(
        default=None,
        description="Fields for $select",
        json_schema_extra={"example": EXAMPLE_SELECT},
    )
    expand: Optional[List[str]] = Field(default=None, description="Navigation properties for $expand")
    orderby: Optional[List[OrderByItem]] = Field(default=None, description="Terms for $orderby")
    top: Optional[int] = Field(default=None, description="$top", ge=0)
    skip: Optional[int] = Field(default=None, description="$skip", ge=0)
    filters: List[FilterClause] = Field(default_factory=list, description="Filter builder calls, in order")
    entity_type: Optional[str] = Field(
        default=None,
        description="Keep only entities whose @odata.type matches",
    )
    max_pages: int = Field(default=1, description="Max pages to follow (paging)", ge=1)


class CompileResponse(BaseModel):
    url: str
    filter: str


class QueryResponse(BaseModel):
    """Response model for executed queries."""

    url: str
    count: int
    items: List[Dict[str, Any]]


def apply_filters(builder: ODataFilterBuilder, clauses: List[FilterClause]) -> ODataFilterBuilder:
    """Replay ``clauses`` onto ``builder`` in order."""
    for c in clauses:
        if c.op == "where":
            builder.where(c.field or "", c.operator, c.value, c.logical)
        elif c.op == "where_group":
            builder.where_group([cond.model_dump() for cond in c.conditions or []], c.logical)
        elif c.op == "where_in":
            builder.where_in(c.field or "", c.values or [], c.logical)
        elif c.op == "contains":
            builder.contains(c.field or "", c.value, c.logical)
        elif c.op == "startswith":
            builder.startswith(c.field or "", c.value, c.logical)
        elif c.op == "endswith":
            builder.endswith(c.field or "", c.value, c.logical)
        elif c.op == "substringof":
            builder.substringof(c.value, c.field or "", c.logical)
        elif c.op == "length":
            builder.length(c.field or "", c.length or 0, c.comparison, c.logical)
        elif c.op == "distance":
            builder.distance(c.field or "", c.operator or "le", c.point or {}, c.logical)
        elif c.op == "start_group":
            builder.start_group(c.relation)
        elif c.op == "end_group":
            builder.end_group()
    return builder
