"""
Data Management Operations Exceptions

Granular exception hierarchy for data operations. Every exception carries
the HTTP-style status code that the same failure has inside a
DatabaseResponse, so responses and exceptions can be converted into one
another.

Public Database operations return DatabaseResponse objects rather than
raising; these exceptions are raised by the storage provider and validator
collaborators, and by DatabaseResponse.raise_for_status() for callers that
prefer exceptions.
"""

from typing import Any, Dict, List, Optional

from ..dlx_ops_exceptions import DlxOpsError


class DataOperationError(DlxOpsError):
    """
    Base exception for all data operation errors.

    Attributes:
        message: Human-readable error message
        status_code: Status code reported for this failure
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ProviderError(DataOperationError):
    """
    Raised when the storage provider reports a failure.

    The provider's own status code and message are preserved so they can be
    passed through to the caller unchanged.
    """
    pass


class ConflictError(DataOperationError):
    """Raised when an item with the same ID already exists in its partition."""

    status_code = 409

    def __init__(self, item_id: Any):
        super().__init__(f"Item with ID {item_id} already exists.")
        self.item_id = item_id


class RecordValidationError(DataOperationError):
    """
    Raised when a record does not have a valid shape.

    Attributes:
        validation_errors: List of human-readable problems found in the record
    """

    status_code = 400

    def __init__(self, message: str, validation_errors: Optional[List[str]] = None):
        super().__init__(message)
        self.validation_errors = validation_errors or []


class PartitionKeyMismatchError(DataOperationError):
    """Raised when a batch contains items outside the batch's partition."""

    status_code = 400

    def __init__(self, partition_key: Any, mismatched: List[Any]):
        super().__init__(
            f"All items in a batch must belong to the partition '{partition_key}'. "
            f"Mismatched partition keys: {mismatched}"
        )
        self.partition_key = partition_key
        self.mismatched = mismatched


class LimitExceededError(DataOperationError):
    """Raised when a caller requests more items than one bulk request allows."""

    status_code = 400

    def __init__(self, limit: int):
        super().__init__(f"You can only retrieve {limit} items at a time.")
        self.limit = limit


class BatchPartialFailureError(DataOperationError):
    """
    Raised when a bulk or batch operation partially succeeds.

    Partial failure is an ordinary result variant (status 207) of the
    multi-item operations; this exception exists for callers that convert
    responses with DatabaseResponse.raise_for_status().

    Attributes:
        outcomes: Per-operation outcomes of the chunk that reported the failure
    """

    status_code = 207

    def __init__(self, message: str, outcomes: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.outcomes = outcomes or []

    @property
    def failed_count(self) -> int:
        """Number of operations whose own status is not a success."""
        return sum(1 for o in self.outcomes if not 200 <= o.get("status", 0) < 300)
