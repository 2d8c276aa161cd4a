"""
Data Management Operations Module

Multi-item operations against the document store:
- Chunking of item lists to the provider's bulk limit
- Atomic batch dispatch within one partition
- Best-effort bulk dispatch across partitions
- Fail-fast handling of partial failures (status 207)
- Uniform DatabaseResponse results
- Record validation before writes

Typical usage from external projects:

    from dlx_db.data_management_operations import (
        BulkOrchestrator,
        DataOperationConfig,
        Operation,
    )

    orchestrator = BulkOrchestrator(DataOperationConfig(bulk_limit=100))
    response = await orchestrator.dispatch_batch(
        container,
        "lang-1",
        [Operation.create(lexeme) for lexeme in lexemes]
    )
    if response.is_partial:
        for entry in response.data:
            print(entry["id"], entry["status"])
"""

from .data_ops_config import DataOperationConfig

from .models.entities import (
    Operation,
    OperationType,
    OperationOutcome,
    BatchOutcome,
    DatabaseResponse
)

from .core.normalizer import ResponseNormalizer
from .core.orchestrator import BulkOrchestrator
from .core.validator import RecordValidator

from .data_ops_exceptions import (
    DataOperationError,
    ProviderError,
    ConflictError,
    RecordValidationError,
    PartitionKeyMismatchError,
    LimitExceededError,
    BatchPartialFailureError
)

__all__ = [
    'DataOperationConfig',
    'Operation',
    'OperationType',
    'OperationOutcome',
    'BatchOutcome',
    'DatabaseResponse',
    'ResponseNormalizer',
    'BulkOrchestrator',
    'RecordValidator',
    'DataOperationError',
    'ProviderError',
    'ConflictError',
    'RecordValidationError',
    'PartitionKeyMismatchError',
    'LimitExceededError',
    'BatchPartialFailureError'
]
