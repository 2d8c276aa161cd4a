"""
Query Builder

Assembles Cosmos DB SQL queries for listing and counting records of one
type. Every query starts from the predicate `<c>.type = @type`; each filter
that is present appends one AND clause. Filter values are always bound as
named parameters, never interpolated into the query text.

Typical usage:

    from dlx_db.data_query_operations import QueryBuilder, QueryFilters

    query = QueryBuilder.select(
        ContainerName.DATA,
        RecordType.LEXEME,
        QueryFilters(language="lang-1", project="proj-1")
    )
    query.text        # "SELECT * FROM data WHERE data.type = @type AND ..."
    query.parameters  # [{"name": "@type", "value": "Lexeme"}, ...]
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from ..collection_operations.containers import ContainerName, RecordType, resolve_container


class QueryFilters(BaseModel):
    """
    Optional filters for list and count queries.

    `language` and `project` only constrain the query when they are truthy.
    `user` is different: passing the key at all, even with an empty value,
    changes the result from "all projects" to "public projects only", so its
    presence is read from the set of explicitly provided fields.
    """
    language: Optional[str] = None
    project: Optional[str] = None
    user: Optional[str] = None

    @property
    def has_user(self) -> bool:
        return "user" in self.model_fields_set


@dataclass(frozen=True)
class Query:
    """A query text with its named parameters in Cosmos DB format."""
    text: str
    parameters: List[Dict[str, Any]] = field(default_factory=list)

    def parameter(self, name: str) -> Any:
        """Return the value bound to `name` (e.g. "@type")."""
        for p in self.parameters:
            if p["name"] == name:
                return p["value"]
        raise KeyError(name)


class _QueryParts:
    """Accumulates AND clauses and their parameters."""

    def __init__(self, alias: str, record_type: RecordType):
        self.alias = alias
        self.clauses: List[str] = [f"{alias}.type = @type"]
        self.parameters: List[Dict[str, Any]] = [{"name": "@type", "value": record_type.value}]

    def add(self, clause: str, **params: Any) -> None:
        self.clauses.append(clause)
        for name, value in params.items():
            self.parameters.append({"name": f"@{name}", "value": value})


def _language_clause(parts: _QueryParts, filters: QueryFilters) -> None:
    if filters.language:
        parts.add(f"{parts.alias}.language.id = @language", language=filters.language)


def _project_clause(parts: _QueryParts, filters: QueryFilters) -> None:
    if filters.project:
        parts.add(
            f"EXISTS(SELECT VALUE project FROM project IN {parts.alias}.projects "
            f"WHERE project.id = @project)",
            project=filters.project
        )


def _user_clause(parts: _QueryParts, filters: QueryFilters) -> None:
    if not filters.has_user:
        return
    public = f"{parts.alias}.permissions.public = true"
    if not filters.user:
        parts.add(public)
        return
    roles = " OR ".join(
        f"ARRAY_CONTAINS({parts.alias}.permissions.{role}, @user)"
        for role in ("owners", "editors", "viewers")
    )
    parts.add(f"({public} OR {roles})", user=filters.user)


# Applied in order; each contributes at most one clause.
_FILTER_CLAUSES: List[Callable[[_QueryParts, QueryFilters], None]] = [
    _language_clause,
    _project_clause,
    _user_clause,
]


class QueryBuilder:
    """Builds parameterized list and count queries."""

    @classmethod
    def _build(
        cls,
        projection: str,
        container: Any,
        record_type: Any,
        filters: Optional[QueryFilters]
    ) -> Query:
        alias = resolve_container(container).value
        parts = _QueryParts(alias, RecordType(record_type))
        for apply_clause in _FILTER_CLAUSES:
            apply_clause(parts, filters or QueryFilters())
        where = " AND ".join(parts.clauses)
        return Query(
            text=f"SELECT {projection} FROM {alias} WHERE {where}",
            parameters=parts.parameters
        )

    @classmethod
    def select(
        cls,
        container: Any,
        record_type: Any,
        filters: Optional[QueryFilters] = None
    ) -> Query:
        """Query returning every record of `record_type` matching `filters`."""
        return cls._build("*", container, record_type, filters)

    @classmethod
    def count(
        cls,
        container: Any,
        record_type: Any,
        filters: Optional[QueryFilters] = None
    ) -> Query:
        """Query returning the number of matching records as a single scalar."""
        return cls._build("VALUE COUNT(1)", container, record_type, filters)
