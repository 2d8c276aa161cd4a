"""
Cosmos DB Provider

Implements the storage provider interface on top of the asyncio client of
the azure-cosmos SDK. SDK and transport exceptions are converted into
ProviderError at this boundary so the rest of the package never depends on
azure types.

Typical usage:

    from dlx_db.config import load_settings
    from dlx_db.connection_management import CosmosDatabaseProvider

    provider = CosmosDatabaseProvider.from_settings(load_settings().cosmos)
    container = provider.container(ContainerName.METADATA)
    outcome = await container.read_item("lang-1", "Language")
    await provider.close()
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from azure.cosmos import PartitionKey
from azure.cosmos import exceptions as cosmos_exceptions
from azure.cosmos.aio import CosmosClient
from azure.core.exceptions import AzureError, HttpResponseError

from ..collection_operations.containers import ContainerName
from ..config import CosmosSettings
from ..data_management_operations.data_ops_exceptions import ProviderError
from ..data_management_operations.models.entities import (
    BatchOutcome,
    Operation,
    OperationOutcome,
    OperationType,
    PARTIAL_FAILURE_STATUS
)
from ..data_query_operations.query_builder import Query
from .provider import ContainerProvider, DatabaseProvider

logger = logging.getLogger(__name__)

# Status Cosmos DB reports for operations skipped after an earlier failure
FAILED_DEPENDENCY_STATUS = 424

# Status reported for transport failures that never reached the service
SERVICE_UNAVAILABLE_STATUS = 503

_SUCCESS_STATUS = {
    OperationType.CREATE: 201,
    OperationType.READ: 200,
    OperationType.DELETE: 204,
}


def _provider_error(e: AzureError) -> ProviderError:
    """Convert any azure-core error into a ProviderError."""
    if isinstance(e, HttpResponseError) and e.status_code:
        return ProviderError(e.message or str(e), e.status_code)
    logger.error(f"Cosmos DB request failed without a service response: {e}")
    return ProviderError(e.message or str(e), SERVICE_UNAVAILABLE_STATUS)


def _batch_operation(operation: Operation) -> Tuple[str, Tuple[Any, ...]]:
    """Convert an Operation into the SDK's transactional batch tuple format."""
    if operation.operation_type is OperationType.CREATE:
        return ("create", (operation.resource_body,))
    if operation.operation_type is OperationType.READ:
        return ("read", (operation.id,))
    return ("delete", (operation.id,))


def _batch_result(operation: Operation, response: Dict[str, Any]) -> OperationOutcome:
    body = response.get("resourceBody")
    return OperationOutcome(
        status_code=response.get("statusCode", 500),
        id=(body or {}).get("id", operation.id),
        resource_body=body,
        error=response.get("message")
    )


class CosmosContainerProvider(ContainerProvider):
    """Container operations backed by an azure.cosmos.aio ContainerProxy."""

    def __init__(self, container_client: Any):
        self._container = container_client

    async def create_item(self, body: Dict[str, Any]) -> OperationOutcome:
        try:
            resource = await self._container.create_item(body=body)
        except AzureError as e:
            raise _provider_error(e)
        return OperationOutcome(status_code=201, id=resource.get("id"), resource_body=dict(resource))

    async def read_item(self, item_id: str, partition_key: Any) -> OperationOutcome:
        try:
            resource = await self._container.read_item(item=item_id, partition_key=partition_key)
        except AzureError as e:
            raise _provider_error(e)
        return OperationOutcome(status_code=200, id=item_id, resource_body=dict(resource))

    async def _execute_one(self, operation: Operation) -> OperationOutcome:
        op_type = operation.operation_type
        if op_type is OperationType.CREATE:
            resource = await self._container.create_item(body=operation.resource_body)
            return OperationOutcome(status_code=_SUCCESS_STATUS[op_type], id=resource.get("id"),
                                    resource_body=dict(resource))
        if op_type is OperationType.READ:
            resource = await self._container.read_item(item=operation.id, partition_key=operation.partition_key)
            return OperationOutcome(status_code=_SUCCESS_STATUS[op_type], id=operation.id,
                                    resource_body=dict(resource))
        await self._container.delete_item(item=operation.id, partition_key=operation.partition_key)
        return OperationOutcome(status_code=_SUCCESS_STATUS[op_type], id=operation.id)

    async def execute_bulk(
        self,
        operations: List[Operation],
        continue_on_error: bool = True
    ) -> List[OperationOutcome]:
        outcomes: List[OperationOutcome] = []
        failed = False
        for operation in operations:
            if failed and not continue_on_error:
                outcomes.append(OperationOutcome(
                    status_code=FAILED_DEPENDENCY_STATUS,
                    id=operation.id,
                    error="Operation skipped after an earlier failure"
                ))
                continue
            try:
                outcomes.append(await self._execute_one(operation))
            except AzureError as e:
                failed = True
                error = _provider_error(e)
                outcomes.append(OperationOutcome(
                    status_code=error.status_code,
                    id=operation.id,
                    error=error.message
                ))
        return outcomes

    async def execute_batch(self, operations: List[Operation], partition_key: Any) -> BatchOutcome:
        try:
            responses = await self._container.execute_item_batch(
                batch_operations=[_batch_operation(op) for op in operations],
                partition_key=partition_key
            )
        except cosmos_exceptions.CosmosBatchOperationError as e:
            logger.debug(
                f"Batch in partition '{partition_key}' failed at operation {e.error_index}: {e.message}"
            )
            return BatchOutcome(
                status_code=PARTIAL_FAILURE_STATUS,
                results=[_batch_result(op, r) for op, r in zip(operations, e.operation_responses)]
            )
        except AzureError as e:
            raise _provider_error(e)
        return BatchOutcome.from_results(
            [_batch_result(op, r) for op, r in zip(operations, responses)]
        )

    async def _pages(self, item_paged: Any) -> AsyncIterator[List[Any]]:
        try:
            async for page in item_paged.by_page():
                yield [item async for item in page]
        except AzureError as e:
            raise _provider_error(e)

    def query_pages(self, query: Query) -> AsyncIterator[List[Any]]:
        return self._pages(self._container.query_items(query=query.text, parameters=query.parameters))

    def read_all_pages(self) -> AsyncIterator[List[Dict[str, Any]]]:
        return self._pages(self._container.read_all_items())


class CosmosDatabaseProvider(DatabaseProvider):
    """
    Database provider backed by an azure.cosmos.aio CosmosClient.

    Container proxies are created once at construction and are read-only
    afterwards, so one provider can be shared by concurrent tasks.
    """

    def __init__(self, client: CosmosClient, database_name: str):
        self._client = client
        self._database_name = database_name
        self._database = client.get_database_client(database_name)
        self._containers: Dict[ContainerName, CosmosContainerProvider] = {
            name: CosmosContainerProvider(self._database.get_container_client(name.value))
            for name in ContainerName
        }
        logger.debug(f"CosmosDatabaseProvider initialized for database '{database_name}'")

    @classmethod
    def from_settings(cls, settings: Optional[CosmosSettings] = None) -> "CosmosDatabaseProvider":
        settings = settings or CosmosSettings()
        client = CosmosClient(settings.endpoint, credential=settings.key)
        return cls(client, settings.database_name)

    @property
    def database_name(self) -> str:
        return self._database_name

    def container(self, name: ContainerName) -> ContainerProvider:
        return self._containers[ContainerName(name)]

    async def create_if_not_exists(self) -> None:
        try:
            await self._client.create_database_if_not_exists(id=self._database_name)
        except AzureError as e:
            raise _provider_error(e)

    async def create_container_if_not_exists(self, name: ContainerName, partition_key_path: str) -> None:
        try:
            await self._database.create_container_if_not_exists(
                id=ContainerName(name).value,
                partition_key=PartitionKey(path=partition_key_path)
            )
        except AzureError as e:
            raise _provider_error(e)

    async def delete(self) -> None:
        try:
            await self._client.delete_database(self._database_name)
        except AzureError as e:
            raise _provider_error(e)

    async def close(self) -> None:
        await self._client.close()
