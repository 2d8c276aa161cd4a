"""
Data Entities

Defines Pydantic models for the units of work sent to the store and for the
results that come back: operations, per-operation outcomes, per-chunk batch
outcomes and the uniform DatabaseResponse returned by every public
operation.

Typical usage:

    from dlx_db.data_management_operations import DatabaseResponse

    response = await db.add_many(ContainerName.DATA, "lang-1", lexemes)
    if response.is_partial:
        for entry in response.data:
            print(entry["id"], entry["status"])
"""

from typing import Any, Dict, List, Optional
from enum import Enum

from pydantic import BaseModel, Field

from ..data_ops_exceptions import BatchPartialFailureError, ProviderError

PARTIAL_FAILURE_STATUS = 207


class OperationType(str, Enum):
    """Kinds of operations accepted by bulk and batch requests."""
    CREATE = "Create"
    READ = "Read"
    DELETE = "Delete"


class Operation(BaseModel):
    """
    A single unit of work in a bulk or batch request.

    Create operations carry a resource body; Read and Delete operations carry
    an id and, in bulk mode, their own partition key value.
    """
    operation_type: OperationType
    id: Optional[str] = None
    partition_key: Optional[Any] = None
    resource_body: Optional[Dict[str, Any]] = None

    @classmethod
    def create(cls, resource_body: Dict[str, Any]) -> "Operation":
        return cls(
            operation_type=OperationType.CREATE,
            id=resource_body.get("id"),
            resource_body=resource_body
        )

    @classmethod
    def read(cls, item_id: str, partition_key: Any = None) -> "Operation":
        return cls(operation_type=OperationType.READ, id=item_id, partition_key=partition_key)

    @classmethod
    def delete(cls, item_id: str, partition_key: Any = None) -> "Operation":
        return cls(operation_type=OperationType.DELETE, id=item_id, partition_key=partition_key)


class OperationOutcome(BaseModel):
    """Result of one operation as reported by the store."""
    status_code: int
    id: Optional[str] = None
    resource_body: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return 200 <= self.status_code < 300

    def as_entry(self) -> Dict[str, Any]:
        """Per-item entry as exposed in multi-item responses."""
        entry: Dict[str, Any] = {
            "id": self.id,
            "data": self.resource_body,
            "status": self.status_code,
        }
        if self.error is not None:
            entry["error"] = self.error
        return entry


class BatchOutcome(BaseModel):
    """
    Outcomes of all operations in one dispatched chunk.

    status_code is the aggregate status of the chunk; 207 signals that at
    least one operation did not succeed.
    """
    status_code: int
    results: List[OperationOutcome] = Field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return self.status_code == PARTIAL_FAILURE_STATUS

    @classmethod
    def from_results(cls, results: List[OperationOutcome], success_status: int = 200) -> "BatchOutcome":
        """Derive the aggregate status from per-operation outcomes."""
        failed = any(not r.succeeded for r in results)
        return cls(
            status_code=PARTIAL_FAILURE_STATUS if failed else success_status,
            results=results
        )


class DatabaseResponse(BaseModel):
    """
    Uniform result of every public database operation.

    `status` is always present. `data` holds the payload on success (and the
    per-item entries for 207 responses); `message` is only set on failure or
    to explain a partial state.
    """
    data: Optional[Any] = None
    message: Optional[str] = None
    status: int = 200

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_partial(self) -> bool:
        return self.status == PARTIAL_FAILURE_STATUS

    def raise_for_status(self) -> "DatabaseResponse":
        """
        Raise the matching exception if this response is not a plain success.

        Read-many responses are always 207, so callers should inspect their
        entries rather than call this method.

        Raises:
            BatchPartialFailureError: For 207 responses
            ProviderError: For any non-2xx response
        """
        if self.is_partial:
            raise BatchPartialFailureError(
                self.message or "Some operations in the request did not succeed.",
                outcomes=self.data if isinstance(self.data, list) else None
            )
        if not self.ok:
            raise ProviderError(self.message or f"Request failed with status {self.status}", self.status)
        return self
