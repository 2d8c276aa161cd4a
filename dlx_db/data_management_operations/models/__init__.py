"""
Data Models

Contains Pydantic models for operations, outcomes and responses.
"""

from .entities import (
    Operation,
    OperationType,
    OperationOutcome,
    BatchOutcome,
    DatabaseResponse,
    PARTIAL_FAILURE_STATUS
)

__all__ = [
    'Operation',
    'OperationType',
    'OperationOutcome',
    'BatchOutcome',
    'DatabaseResponse',
    'PARTIAL_FAILURE_STATUS'
]
