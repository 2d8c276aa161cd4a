"""
Collection Operations Module

Container bindings and administrative container operations:
- The closed set of containers and their partition key paths
- The record type to container mapping (TypeMap)
- Database setup, clearing, seeding and guarded deletion
"""

from .containers import (
    ContainerName,
    RecordType,
    ContainerBinding,
    CONTAINER_BINDINGS,
    TypeMap,
    resolve_container
)
from .manager import CollectionManager

__all__ = [
    'ContainerName',
    'RecordType',
    'ContainerBinding',
    'CONTAINER_BINDINGS',
    'TypeMap',
    'resolve_container',
    'CollectionManager'
]
