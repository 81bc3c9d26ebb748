"""
odata_client.odata.filters - $filter expression builder
========================================================

Builds a textual OData boolean expression from a sequence of fluent calls.

The builder compiles calls straight into a string; it does not check field
names, operators or group balance. Malformed call sequences produce a
malformed expression rather than an exception.

Examples
--------
>>> f = ODataFilterBuilder()
>>> f.where("City", "eq", "Austin").start_group("or")
>>> f.where("ListPrice", "lt", 500000).where("BedroomsTotal", "ge", 3).end_group()
>>> f.get_filter_expression()
"City eq 'Austin' AND (ListPrice lt 500000 or BedroomsTotal ge 3)"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union


_LOGICAL_OPERATORS = ("and", "or")


def _addslashes(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace('"', '\\"')
        .replace("\0", "\\0")
    )


def escape_value(value: Any) -> str:
    """
    Render a Python value as an OData literal.

    Parameters
    ----------
    value : Any
        String, list/tuple of scalars, number, bool or None

    Returns
    -------
    str
        The literal text

    Examples
    --------
    >>> escape_value("O'Brien")
    "'O\\\\'Brien'"
    >>> escape_value(["a", "b"])
    "'a,b'"
    >>> escape_value(42)
    '42'
    """
    if isinstance(value, str):
        return f"'{_addslashes(value)}'"
    if isinstance(value, (list, tuple)):
        joined = ",".join(str(v) for v in value)
        return f"'{_addslashes(joined)}'"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class Condition:
    """
    A single ``<field> <operator> <value>`` comparison.

    Attributes
    ----------
    field : str
        Property name or path
    operator : str
        Comparison operator (eq, ne, lt, le, gt, ge)
    value : Any
        Right-hand side, escaped with ``escape_value``
    """
    field: str
    operator: str
    value: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Condition":
        return cls(data.get("field", ""), data.get("operator", ""), data.get("value"))

    def render(self) -> str:
        return f"{self.field} {self.operator} {escape_value(self.value)}"


ConditionLike = Union[Condition, Mapping[str, Any]]


class ODataFilterBuilder:
    """
    Stateful accumulator for a ``$filter`` expression.

    Every public operation appends to the expression and returns the builder
    so calls can be chained.

    Two pieces of state carry across calls:

    - the join operator set by the most recent ``start_group``. Once set it
      is used for every later top-level append, including those after the
      group is closed. Before any group it is the call's ``logical``
      argument.
    - whether a group was just opened, in which case the next append gets no
      join prefix.
    """

    def __init__(self) -> None:
        self._expression = ""
        self._join_operator: Optional[str] = None
        self._group_just_opened = False

    def __str__(self) -> str:
        return self._expression

    def __bool__(self) -> bool:
        return bool(self._expression)

    def __repr__(self) -> str:
        return f"ODataFilterBuilder({self._expression!r})"

    # ---------------- state transitions ----------------

    def _append(self, fragment: str, logical: str) -> "ODataFilterBuilder":
        if self._expression and not self._group_just_opened:
            join = self._join_operator if self._join_operator is not None else logical
            self._expression += f" {join} "
        self._expression += fragment
        self._group_just_opened = False
        return self

    # ---------------- conditions ----------------

    def where(
        self,
        field: Union[str, Sequence[ConditionLike]],
        operator: Optional[str] = None,
        value: Any = None,
        logical: str = "and",
    ) -> "ODataFilterBuilder":
        """
        Add a comparison, or a parenthesized list of comparisons.

        Parameters
        ----------
        field : str or list
            Field name, or a list of ``{"field", "operator", "value"}``
            mappings / ``Condition`` objects
        operator : str, optional
            Comparison operator. With a condition list, ``"and"``/``"or"``
            here selects the operator joining the list.
        value : Any, optional
            Value to compare against
        logical : str
            Operator joining a comparison to the previous content. For a
            condition list it is the operator joining the list, unless the
            ``operator`` slot already names one; the list itself is then
            joined to the previous content with ``logical``.

        Returns
        -------
        ODataFilterBuilder
            self
        """
        if isinstance(field, str):
            return self.where_condition(field, operator or "", value, logical)

        if operator is not None and operator.lower() in _LOGICAL_OPERATORS:
            return self.where_group(field, operator, join=logical)
        return self.where_group(field, logical)

    def where_condition(
        self,
        field: str,
        operator: str,
        value: Any,
        logical: str = "and",
    ) -> "ODataFilterBuilder":
        """Append ``<field> <operator> <value>``."""
        return self._append(Condition(field, operator, value).render(), logical)

    def where_group(
        self,
        conditions: Sequence[ConditionLike],
        logical: str = "and",
        join: str = "and",
    ) -> "ODataFilterBuilder":
        """
        Append ``(c1 <logical> c2 ...)``.

        ``logical`` only applies inside the parentheses. The group is joined
        to the previous content with ``join``, or with the relation of the
        most recent ``start_group``.
        """
        rendered: List[str] = []
        for c in conditions:
            if not isinstance(c, Condition):
                c = Condition.from_mapping(c)
            rendered.append(c.render())
        return self._append("(" + f" {logical} ".join(rendered) + ")", join)

    def where_in(
        self,
        field: str,
        values: Sequence[Any],
        logical: str = "and",
    ) -> "ODataFilterBuilder":
        """Append ``<field> in (<v1>, <v2>, ...)``."""
        items = ", ".join(escape_value(v) for v in values)
        return self._append(f"{field} in ({items})", logical)

    # ---------------- functions ----------------

    def contains(self, field: str, value: Any, logical: str = "and") -> "ODataFilterBuilder":
        return self._append(f"contains({field}, {escape_value(value)})", logical)

    def substringof(self, substring: Any, field: str, logical: str = "and") -> "ODataFilterBuilder":
        """Append ``substringof(<substring>, <field>)``; note the argument order."""
        return self._append(f"substringof({escape_value(substring)}, {field})", logical)

    def startswith(self, field: str, substring: Any, logical: str = "and") -> "ODataFilterBuilder":
        return self._append(f"startswith({field}, {escape_value(substring)})", logical)

    def endswith(self, field: str, substring: Any, logical: str = "and") -> "ODataFilterBuilder":
        return self._append(f"endswith({field}, {escape_value(substring)})", logical)

    def length(
        self,
        field: str,
        length: int,
        comparison: str = "eq",
        logical: str = "and",
    ) -> "ODataFilterBuilder":
        """Append ``length(<field>) <comparison> <length>``."""
        return self._append(f"length({field}) {comparison} {int(length)}", logical)

    def distance(
        self,
        field: str,
        operator: str,
        point: Mapping[str, Any],
        logical: str = "and",
    ) -> "ODataFilterBuilder":
        """
        Append a ``geo.distance`` comparison.

        Parameters
        ----------
        field : str
            Geography property
        operator : str
            Comparison operator applied to the distance
        point : mapping
            Optional keys ``lat``, ``long`` and ``radius``. When none of them
            is present the call does nothing.
        logical : str
            Operator joining this condition to the previous one

        Returns
        -------
        ODataFilterBuilder
            self
        """
        if not any(k in point for k in ("lat", "long", "radius")):
            return self

        lat = escape_value(point.get("lat"))
        lon = escape_value(point.get("long"))
        radius = escape_value(point.get("radius"))
        return self._append(
            f"geo.distance({field}, POINT({lon} {lat})) {operator} {radius}",
            logical,
        )

    # ---------------- groups ----------------

    def start_group(self, relation: str = "AND") -> "ODataFilterBuilder":
        """
        Open a parenthesized group whose members are joined by ``relation``.

        The group is always attached to preceding content with a literal
        ``AND``. ``relation`` stays in effect after ``end_group``.
        """
        self._join_operator = relation
        if self._expression and not self._group_just_opened:
            self._expression += " AND ("
        else:
            self._expression += "("
        self._group_just_opened = True
        return self

    def end_group(self) -> "ODataFilterBuilder":
        self._expression += ")"
        self._group_just_opened = False
        return self

    # ---------------- output ----------------

    def get_filter_expression(self) -> str:
        """Return the expression built so far."""
        return self._expression
