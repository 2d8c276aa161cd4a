"""
Response Normalizer

Collapses the different shapes of store results (single items, errors,
per-chunk batch outcomes, read-many outcomes, query results) into
DatabaseResponse objects so that every public operation has the same
return contract.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..data_ops_exceptions import ConflictError, DataOperationError
from ..models.entities import (
    BatchOutcome,
    DatabaseResponse,
    OperationOutcome,
    PARTIAL_FAILURE_STATUS
)

logger = logging.getLogger(__name__)

CONFLICT_STATUS = 409
CREATED_STATUS = 201


class ResponseNormalizer:
    """Builds DatabaseResponse objects from store results."""

    @classmethod
    def item(cls, outcome: OperationOutcome) -> DatabaseResponse:
        """Single-item success."""
        return DatabaseResponse(data=outcome.resource_body, status=outcome.status_code)

    @classmethod
    def error(cls, error: DataOperationError, item_id: Optional[Any] = None) -> DatabaseResponse:
        """
        Single-item failure.

        A uniqueness conflict is rewritten into a readable message naming the
        id; any other error keeps its own message and status.
        """
        if error.status_code == CONFLICT_STATUS and item_id is not None:
            error = ConflictError(item_id)
        return DatabaseResponse(message=error.message, status=error.status_code)

    @classmethod
    def partial(cls, outcome: BatchOutcome, message: Optional[str] = None) -> DatabaseResponse:
        """Per-operation outcomes of the chunk that reported partial failure."""
        return DatabaseResponse(
            data=[r.as_entry() for r in outcome.results],
            message=message,
            status=PARTIAL_FAILURE_STATUS
        )

    @classmethod
    def batch_success(cls, outcomes: Iterable[BatchOutcome]) -> DatabaseResponse:
        """Result bodies of every chunk, concatenated in dispatch order."""
        data = [r.resource_body for outcome in outcomes for r in outcome.results]
        return DatabaseResponse(data=data, status=CREATED_STATUS)

    @classmethod
    def read_many(cls, outcomes: Iterable[OperationOutcome]) -> DatabaseResponse:
        """
        One entry per requested id, each with its own status.

        Always 207: some ids being absent is the normal case, so callers are
        expected to inspect every entry.
        """
        return DatabaseResponse(
            data=[o.as_entry() for o in outcomes],
            status=PARTIAL_FAILURE_STATUS
        )

    @classmethod
    def listing(cls, records: List[Dict[str, Any]]) -> DatabaseResponse:
        return DatabaseResponse(data=records)

    @classmethod
    def count(cls, rows: List[Any]) -> DatabaseResponse:
        """
        Scalar count from a COUNT aggregate query.

        The store may return no row at all for an empty container; that is
        reported as a count of 0.
        """
        count = rows[0] if rows else 0
        if isinstance(count, dict):
            # Non-VALUE projections come back as {"$1": n}
            count = next(iter(count.values()), 0)
        return DatabaseResponse(data={"count": count})
