"""
DLx_DB - Data-access layer for the Digital Linguistics document store

Typed CRUD and query operations for languages, lexemes, projects and
bibliographic references stored in two partitioned Cosmos DB containers
(`data` and `metadata`). Multi-item writes and reads are chunked to the
provider's bulk limit and every operation returns a uniform
DatabaseResponse.
"""

__version__ = "0.1.0"
__author__ = "Digital Linguistics"

from .client import Database
from .collection_operations import ContainerName, RecordType, TypeMap
from .data_management_operations import DatabaseResponse, DataOperationConfig
from .config import DlxSettings, load_settings

__all__ = [
    'Database',
    'ContainerName',
    'RecordType',
    'TypeMap',
    'DatabaseResponse',
    'DataOperationConfig',
    'DlxSettings',
    'load_settings',
]
