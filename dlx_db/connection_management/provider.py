"""
Storage Provider Interface

Abstract interface of the document store as seen by the data-access layer.
The Cosmos DB adapter in cosmos_provider implements it for production; tests
use an in-memory implementation.

Failures are reported by raising ProviderError with the store's status code
and message, except inside bulk and batch requests, where failures are part
of the returned outcomes.
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List

from ..collection_operations.containers import ContainerName
from ..data_management_operations.models.entities import BatchOutcome, Operation, OperationOutcome
from ..data_query_operations.query_builder import Query


class ContainerProvider(ABC):
    """Operations on a single container."""

    @abstractmethod
    async def create_item(self, body: Dict[str, Any]) -> OperationOutcome:
        """
        Create one item. The partition key is taken from the body.

        Raises:
            ProviderError: With status 409 if the id is already used in the
                partition, or the store's status for any other failure.
        """

    @abstractmethod
    async def read_item(self, item_id: str, partition_key: Any) -> OperationOutcome:
        """
        Point-read one item.

        Raises:
            ProviderError: With status 404 if the item does not exist.
        """

    @abstractmethod
    async def execute_bulk(
        self,
        operations: List[Operation],
        continue_on_error: bool = True
    ) -> List[OperationOutcome]:
        """
        Execute operations that may span partitions, each with its own
        partition key. Returns one outcome per operation, in order. With
        continue_on_error the remaining operations still run after a failure.
        """

    @abstractmethod
    async def execute_batch(self, operations: List[Operation], partition_key: Any) -> BatchOutcome:
        """
        Execute operations atomically within one partition. Either all
        operations succeed or the outcome reports status 207 and nothing is
        committed.
        """

    @abstractmethod
    def query_pages(self, query: Query) -> AsyncIterator[List[Any]]:
        """
        Run a query and yield result pages until the store is exhausted.

        Rows are yielded as the store returns them: records for SELECT *
        queries, scalars for SELECT VALUE projections such as COUNT(1).
        """

    @abstractmethod
    def read_all_pages(self) -> AsyncIterator[List[Dict[str, Any]]]:
        """Yield every item of the container, page by page."""


class DatabaseProvider(ABC):
    """Database-level operations and access to containers."""

    @property
    @abstractmethod
    def database_name(self) -> str:
        """Name of the database this provider operates on."""

    @abstractmethod
    def container(self, name: ContainerName) -> ContainerProvider:
        """Return the provider for one container."""

    @abstractmethod
    async def create_if_not_exists(self) -> None:
        """Create the database if it does not exist yet."""

    @abstractmethod
    async def create_container_if_not_exists(self, name: ContainerName, partition_key_path: str) -> None:
        """Create a container with the given partition key path if missing."""

    @abstractmethod
    async def delete(self) -> None:
        """Delete the whole database."""

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
