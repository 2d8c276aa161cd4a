"""
Connection Management Module

Storage provider interface and its Cosmos DB implementation. The rest of the
package talks to the store only through DatabaseProvider and
ContainerProvider, so the store can be replaced in tests.
"""

from .provider import ContainerProvider, DatabaseProvider
from .cosmos_provider import CosmosContainerProvider, CosmosDatabaseProvider

__all__ = [
    'ContainerProvider',
    'DatabaseProvider',
    'CosmosContainerProvider',
    'CosmosDatabaseProvider',
]
