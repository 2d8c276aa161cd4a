"""
Pytest configuration and shared fixtures.

The in-memory provider mimics the parts of Cosmos DB the data-access layer
relies on: per-partition id uniqueness, atomic batches that report 207,
bulk requests that continue past failures, and paged query results. It
records every request so tests can assert on what was dispatched.
"""

from typing import Any, AsyncIterator, Dict, List, Optional, Set, Tuple

import pytest

from dlx_db import Database
from dlx_db.collection_operations import CONTAINER_BINDINGS, ContainerBinding, ContainerName
from dlx_db.config import CosmosSettings, DlxSettings
from dlx_db.connection_management import ContainerProvider, DatabaseProvider
from dlx_db.data_management_operations import (
    BatchOutcome,
    DataOperationConfig,
    Operation,
    OperationOutcome,
    OperationType,
    ProviderError
)
from dlx_db.data_query_operations import Query


class InMemoryContainer(ContainerProvider):
    """Container provider storing items in a dict keyed by (partition, id)."""

    def __init__(self, binding: ContainerBinding, page_size: int = 2):
        self.binding = binding
        self.page_size = page_size
        self.items: Dict[Tuple[Any, str], Dict[str, Any]] = {}

        self.batch_calls: List[Tuple[List[Operation], Any]] = []
        self.bulk_calls: List[List[Operation]] = []
        self.queries: List[Query] = []
        self.pages_pulled = 0

        # Canned query result pages; when None, queries are evaluated over the stored items
        self.query_results: Optional[List[List[Any]]] = None
        # 1-based batch call numbers that report partial failure
        self.partial_batch_calls: Set[int] = set()
        # 1-based batch call numbers that raise a provider error
        self.failing_batch_calls: Dict[int, ProviderError] = {}

    def put(self, record: Dict[str, Any]) -> None:
        self.items[(self.binding.partition_key_for(record), record["id"])] = dict(record)

    def _create(self, body: Dict[str, Any]) -> OperationOutcome:
        key = (self.binding.partition_key_for(body), body["id"])
        if key in self.items:
            raise ProviderError("Entity with the specified id already exists in the system.", 409)
        self.items[key] = dict(body)
        return OperationOutcome(status_code=201, id=body["id"], resource_body=dict(body))

    def _read(self, item_id: str, partition_key: Any) -> OperationOutcome:
        if (partition_key, item_id) not in self.items:
            raise ProviderError("Entity with the specified id does not exist in the system.", 404)
        return OperationOutcome(status_code=200, id=item_id,
                                resource_body=dict(self.items[(partition_key, item_id)]))

    async def create_item(self, body: Dict[str, Any]) -> OperationOutcome:
        return self._create(body)

    async def read_item(self, item_id: str, partition_key: Any) -> OperationOutcome:
        return self._read(item_id, partition_key)

    async def execute_bulk(self, operations: List[Operation], continue_on_error: bool = True) -> List[OperationOutcome]:
        self.bulk_calls.append(list(operations))
        outcomes = []
        for op in operations:
            try:
                if op.operation_type is OperationType.CREATE:
                    outcomes.append(self._create(op.resource_body))
                elif op.operation_type is OperationType.READ:
                    outcomes.append(self._read(op.id, op.partition_key))
                else:
                    self._read(op.id, op.partition_key)
                    del self.items[(op.partition_key, op.id)]
                    outcomes.append(OperationOutcome(status_code=204, id=op.id))
            except ProviderError as e:
                outcomes.append(OperationOutcome(status_code=e.status_code, id=op.id, error=e.message))
        return outcomes

    async def execute_batch(self, operations: List[Operation], partition_key: Any) -> BatchOutcome:
        self.batch_calls.append((list(operations), partition_key))
        call_number = len(self.batch_calls)

        if call_number in self.failing_batch_calls:
            raise self.failing_batch_calls[call_number]

        conflicts = [
            op for op in operations
            if (partition_key, op.resource_body["id"]) in self.items
        ]
        if call_number in self.partial_batch_calls or conflicts:
            failed_id = conflicts[0].id if conflicts else operations[0].id
            return BatchOutcome(
                status_code=207,
                results=[
                    OperationOutcome(status_code=409 if op.id == failed_id else 424, id=op.id)
                    for op in operations
                ]
            )

        results = []
        for op in operations:
            self.items[(partition_key, op.resource_body["id"])] = dict(op.resource_body)
            results.append(OperationOutcome(status_code=201, id=op.id, resource_body=dict(op.resource_body)))
        return BatchOutcome.from_results(results)

    async def _iterate(self, pages: List[List[Any]]) -> AsyncIterator[List[Any]]:
        for page in pages:
            self.pages_pulled += 1
            yield list(page)

    def _matches(self, item: Dict[str, Any], query: Query) -> bool:
        params = {p["name"]: p["value"] for p in query.parameters}

        if item.get("type") != params["@type"]:
            return False
        if "@language" in params and item.get("language", {}).get("id") != params["@language"]:
            return False
        if "@project" in params and params["@project"] not in [p.get("id") for p in item.get("projects", [])]:
            return False

        permissions = item.get("permissions", {})
        if "@user" in params:
            roles = ("owners", "editors", "viewers")
            return permissions.get("public") is True or any(
                params["@user"] in permissions.get(role, []) for role in roles
            )
        if "permissions.public = true" in query.text:
            return permissions.get("public") is True
        return True

    def query_pages(self, query: Query) -> AsyncIterator[List[Any]]:
        self.queries.append(query)
        if self.query_results is not None:
            return self._iterate(self.query_results)

        matches = [dict(item) for item in self.items.values() if self._matches(item, query)]
        if "COUNT(1)" in query.text:
            return self._iterate([[len(matches)]])
        pages = [matches[i:i + self.page_size] for i in range(0, len(matches), self.page_size)]
        return self._iterate(pages)

    def read_all_pages(self) -> AsyncIterator[List[Dict[str, Any]]]:
        items = list(self.items.values())
        pages = [items[i:i + self.page_size] for i in range(0, len(items), self.page_size)]
        return self._iterate(pages)


class InMemoryDatabase(DatabaseProvider):
    """Database provider holding one InMemoryContainer per container."""

    def __init__(self, database_name: str = "test"):
        self._database_name = database_name
        self.containers = {
            name: InMemoryContainer(binding) for name, binding in CONTAINER_BINDINGS.items()
        }
        self.created = False
        self.created_containers: Dict[ContainerName, str] = {}
        self.deleted = False
        self.closed = False

    @property
    def database_name(self) -> str:
        return self._database_name

    def container(self, name: ContainerName) -> ContainerProvider:
        return self.containers[ContainerName(name)]

    async def create_if_not_exists(self) -> None:
        self.created = True

    async def create_container_if_not_exists(self, name: ContainerName, partition_key_path: str) -> None:
        self.created_containers[name] = partition_key_path

    async def delete(self) -> None:
        self.deleted = True

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> DlxSettings:
    return DlxSettings(cosmos=CosmosSettings(endpoint="https://localhost:8081", key="", database_name="test"))


@pytest.fixture
def provider() -> InMemoryDatabase:
    return InMemoryDatabase("test")


@pytest.fixture
def data_container(provider: InMemoryDatabase) -> InMemoryContainer:
    return provider.containers[ContainerName.DATA]


@pytest.fixture
def metadata_container(provider: InMemoryDatabase) -> InMemoryContainer:
    return provider.containers[ContainerName.METADATA]


@pytest.fixture
def db(settings: DlxSettings, provider: InMemoryDatabase) -> Database:
    return Database(settings=settings, provider=provider, config=DataOperationConfig(bulk_limit=100))


def make_lexeme(language: str = "lang-1", item_id: Optional[str] = None, **fields: Any) -> Dict[str, Any]:
    lexeme: Dict[str, Any] = {"type": "Lexeme", "language": {"id": language}}
    if item_id is not None:
        lexeme["id"] = item_id
    lexeme.update(fields)
    return lexeme
