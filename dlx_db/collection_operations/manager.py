"""
Collection Manager

Administrative operations for development and test databases: creating the
database and its two containers, clearing containers, seeding records and
deleting the whole database.

These operations are destructive and are not meant for production use.
Deleting the production database is refused outright with
ProductionDatabaseGuardError.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..dlx_ops_exceptions import ProductionDatabaseGuardError
from ..data_management_operations.core.normalizer import ResponseNormalizer
from ..data_management_operations.core.orchestrator import BulkOrchestrator
from ..data_management_operations.core.validator import RecordValidator, Validator
from ..data_management_operations.data_ops_exceptions import DataOperationError
from ..data_management_operations.models.entities import DatabaseResponse, Operation
from ..utils.records import with_id, without_id
from .containers import CONTAINER_BINDINGS, ContainerName, resolve_container

if TYPE_CHECKING:
    from ..connection_management.provider import DatabaseProvider

logger = logging.getLogger(__name__)

DEFAULT_PRODUCTION_DATABASE = "digitallinguistics"


class CollectionManager:
    """
    Database and container administration.

    Example:
        ```python
        manager = CollectionManager(provider, BulkOrchestrator())
        await manager.setup()
        await manager.seed_many(ContainerName.METADATA, 250, {"type": "Language"})
        await manager.clear()
        ```
    """

    def __init__(
        self,
        provider: "DatabaseProvider",
        orchestrator: BulkOrchestrator,
        validator: Optional[Validator] = None,
        production_database_name: str = DEFAULT_PRODUCTION_DATABASE
    ):
        self._provider = provider
        self._orchestrator = orchestrator
        self._validator = validator or RecordValidator()
        self._production_database_name = production_database_name

    @property
    def database_name(self) -> str:
        return self._provider.database_name

    async def setup(self) -> None:
        """Create the database and both containers if they don't exist yet."""
        logger.info(f'Setting up the "{self.database_name}" database.')

        await self._provider.create_if_not_exists()
        for binding in CONTAINER_BINDINGS.values():
            await self._provider.create_container_if_not_exists(binding.name, binding.partition_key_path)

        logger.info(f'Setup complete for the "{self.database_name}" database.')

    async def clear_container(self, container: Any) -> DatabaseResponse:
        """
        Delete every item from a single container.

        Items are deleted in bulk chunks, each item in its own partition.
        Dispatch stops at the first chunk with a failed delete.
        """
        name = resolve_container(container)
        binding = CONTAINER_BINDINGS[name]
        container_provider = self._provider.container(name)

        try:
            items = await self._orchestrator.collect(container_provider.read_all_pages())
        except DataOperationError as e:
            logger.error(f"Failed to read items from container '{name.value}': {e}")
            return ResponseNormalizer.error(e)

        logger.debug(f"Deleting {len(items)} items from container '{name.value}'")
        return await self._orchestrator.delete_all(container_provider, items, binding.partition_key_for)

    async def clear(self, silent: bool = True) -> Dict[ContainerName, DatabaseResponse]:
        """Delete all the items from both containers."""
        if not silent:
            logger.info(f'Clearing the "{self.database_name}" database.')

        names = list(ContainerName)
        responses = await asyncio.gather(*(self.clear_container(name) for name in names))
        results = dict(zip(names, responses))

        for name, response in results.items():
            if not response.ok:
                logger.warning(
                    f"Clearing container '{name.value}' ended with status {response.status}"
                )

        if not silent:
            logger.info(f'The "{self.database_name}" database has been cleared.')

        return results

    async def delete(self) -> None:
        """
        Delete the entire database.

        Raises:
            ProductionDatabaseGuardError: If this is the production database.
        """
        if self.database_name == self._production_database_name:
            raise ProductionDatabaseGuardError(self.database_name)

        logger.info(f'Deleting the "{self.database_name}" database.')
        await self._provider.delete()
        logger.info(f'Database "{self.database_name}" successfully deleted.')

    async def seed_one(self, container: Any, record: Dict[str, Any]) -> DatabaseResponse:
        """Validate and add a single record to a container."""
        name = resolve_container(container)
        prepared = with_id(record)

        try:
            self._validator.validate(prepared)
            outcome = await self._provider.container(name).create_item(prepared)
        except DataOperationError as e:
            return ResponseNormalizer.error(e, item_id=prepared["id"])

        return ResponseNormalizer.item(outcome)

    async def seed_many(self, container: Any, count: int, record: Optional[Dict[str, Any]] = None) -> DatabaseResponse:
        """
        Add `count` copies of a record to a container.

        The record's id is dropped and each copy receives a fresh one. All
        copies share the record's partition key, so they are written with
        atomic batches.
        """
        name = resolve_container(container)
        template = without_id(record or {})

        try:
            self._validator.validate(template)
        except DataOperationError as e:
            return ResponseNormalizer.error(e)

        partition_key = CONTAINER_BINDINGS[name].partition_key_for(template)
        operations = [Operation.create(with_id(template)) for _ in range(count)]

        logger.debug(f"Seeding {count} items into container '{name.value}'")
        return await self._orchestrator.dispatch_batch(
            self._provider.container(name),
            partition_key,
            operations
        )
