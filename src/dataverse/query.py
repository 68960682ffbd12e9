"""
Small OData query builder for the Dataverse Web API.

Filters are built from expressions instead of string concatenation so that
field names are checked and literal values are always escaped::

    ODataQuery("new_sagyouin_mastas")
        .select("new_sagyouin_id", "_owningbusinessunit_value")
        .where(Eq("new_mail", "jdoe@example.com"))
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple
from urllib.parse import quote

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
# left unescaped in query values
_SAFE_CHARS = "'()"


def check_identifier(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid OData identifier: {name!r}")
    return name


def format_literal(value: Any) -> str:
    """Render a Python value as an OData literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    raise TypeError(f"Unsupported OData literal type: {type(value).__name__}")


class FilterExpression:
    def serialize(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(FilterExpression):
    field: str
    value: Any

    def serialize(self) -> str:
        return f"{check_identifier(self.field)} eq {format_literal(self.value)}"


class And(FilterExpression):
    def __init__(self, *clauses: FilterExpression):
        if not clauses:
            raise ValueError("And() needs at least one clause")
        self.clauses = clauses

    def serialize(self) -> str:
        if len(self.clauses) == 1:
            return self.clauses[0].serialize()
        return " and ".join(f"({c.serialize()})" for c in self.clauses)


class ODataQuery:
    """Builder for a single entity-set GET."""

    def __init__(self, entity_set: str):
        self.entity_set = check_identifier(entity_set)
        self._select: List[str] = []
        self._filter: Optional[FilterExpression] = None
        self._order_by: List[Tuple[str, bool]] = []
        self._top: Optional[int] = None

    def select(self, *fields: str) -> "ODataQuery":
        self._select.extend(check_identifier(f) for f in fields)
        return self

    def where(self, expression: FilterExpression) -> "ODataQuery":
        self._filter = expression
        return self

    def order_by(self, field: str, descending: bool = False) -> "ODataQuery":
        self._order_by.append((check_identifier(field), descending))
        return self

    def top(self, count: int) -> "ODataQuery":
        if count < 1:
            raise ValueError("$top must be positive")
        self._top = count
        return self

    def params(self) -> List[Tuple[str, str]]:
        params = []
        if self._filter is not None:
            params.append(("$filter", self._filter.serialize()))
        if self._select:
            params.append(("$select", ",".join(self._select)))
        if self._order_by:
            order = ",".join(
                f"{field} desc" if desc else field for field, desc in self._order_by
            )
            params.append(("$orderby", order))
        if self._top is not None:
            params.append(("$top", str(self._top)))
        return params

    def query_string(self) -> str:
        return "&".join(
            f"{name}={quote(value, safe=_SAFE_CHARS)}" for name, value in self.params()
        )

    def url(self, api_base: str) -> str:
        """Full request URL against ``<org>/api/data/<version>``."""
        qs = self.query_string()
        base = f"{api_base.rstrip('/')}/{self.entity_set}"
        return f"{base}?{qs}" if qs else base
