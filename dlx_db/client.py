"""
DLx Database Client

This module provides the Database facade: the single entry point for
reading and writing languages, lexemes, projects and bibliographic
references. It binds record types to their containers and composes the
query builder, the bulk/batch orchestrator and the response normalizer.

Every public operation returns a DatabaseResponse instead of raising. The
only exception is Database.delete(), which refuses to drop the production
database by raising ProductionDatabaseGuardError.

Typical usage:

    from dlx_db import Database, ContainerName

    async with Database() as db:
        await db.add_one(ContainerName.METADATA, {"type": "Language", "name": {"eng": "Chitimacha"}})
        response = await db.get_lexemes(language="lang-1")
        for lexeme in response.data:
            ...
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from .collection_operations import (
    CollectionManager,
    ContainerName,
    RecordType,
    TypeMap,
    CONTAINER_BINDINGS,
    resolve_container
)
from .config import DlxSettings, load_settings
from .connection_management import ContainerProvider, CosmosDatabaseProvider, DatabaseProvider
from .dlx_ops_exceptions import ConfigurationError
from .data_management_operations import (
    BulkOrchestrator,
    DatabaseResponse,
    DataOperationConfig,
    DataOperationError,
    Operation,
    PartitionKeyMismatchError,
    RecordValidator,
    ResponseNormalizer
)
from .data_management_operations.core.validator import Validator
from .data_query_operations import QueryBuilder, QueryFilters
from .utils.records import with_id

logger = logging.getLogger(__name__)

# Distinguishes "filter not given" from "filter given with an empty value"
_UNSET: Any = object()


class Database:
    """
    Typed CRUD and query operations over the `data` and `metadata` containers.

    Collaborators are injected so that tests can replace the store and the
    validator; by default the Cosmos DB provider is built from settings.
    """

    def __init__(
        self,
        settings: Optional[Union[DlxSettings, str, Path]] = None,
        provider: Optional[DatabaseProvider] = None,
        validator: Optional[Validator] = None,
        type_map: Optional[TypeMap] = None,
        config: Optional[DataOperationConfig] = None
    ):
        """
        Initialize the database client.

        Args:
            settings: Connection and operation settings, or the path of a
                      YAML settings file. Loaded from the environment if None.
            provider: Storage provider. A CosmosDatabaseProvider built from
                      settings.cosmos if None.
            validator: Record validator. RecordValidator if None.
            type_map: Record type to container mapping. TypeMap.default() if None.
            config: Operation configuration. Derived from settings.operations if None.
        """
        if settings is None:
            self.settings = load_settings()
        elif isinstance(settings, (str, Path)):
            self.settings = load_settings(str(settings))
        elif isinstance(settings, DlxSettings):
            self.settings = settings
        else:
            raise ConfigurationError(
                "Invalid settings type. Expected DlxSettings, str, Path, or None."
            )
        self._provider = provider or CosmosDatabaseProvider.from_settings(self.settings.cosmos)
        self._validator = validator or RecordValidator()
        self.types = type_map or TypeMap.default()
        self._config = config or DataOperationConfig.from_settings(self.settings)
        self._orchestrator = BulkOrchestrator(self._config)
        self._collections = CollectionManager(
            self._provider,
            self._orchestrator,
            validator=self._validator,
            production_database_name=self.settings.cosmos.production_database_name
        )

        logger.debug(
            f"Database initialized for '{self._provider.database_name}' "
            f"with bulk_limit={self._config.bulk_limit}"
        )

    @property
    def database_name(self) -> str:
        return self._provider.database_name

    @property
    def bulk_limit(self) -> int:
        """The provider's limit on operations per bulk or batch request."""
        return self._config.bulk_limit

    def _container(self, container: Any) -> ContainerProvider:
        return self._provider.container(resolve_container(container))

    async def close(self) -> None:
        """Close the connection to the store."""
        await self._provider.close()

    async def __aenter__(self) -> "Database":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # DEV METHODS

    async def setup(self) -> None:
        """Create the database and both containers if they don't exist yet."""
        await self._collections.setup()

    async def clear(self, silent: bool = True) -> Dict[ContainerName, DatabaseResponse]:
        """Delete all the items from all the containers in the database."""
        return await self._collections.clear(silent=silent)

    async def clear_container(self, container: Any) -> DatabaseResponse:
        """Delete all the items from a single container."""
        return await self._collections.clear_container(container)

    async def delete(self) -> None:
        """
        Delete the entire database.

        Raises:
            ProductionDatabaseGuardError: If this is the production database.
        """
        await self._collections.delete()

    async def seed_one(self, container: Any, record: Dict[str, Any]) -> DatabaseResponse:
        """Add a single record to a container."""
        return await self._collections.seed_one(container, record)

    async def seed_many(self, container: Any, count: int, record: Optional[Dict[str, Any]] = None) -> DatabaseResponse:
        """Add `count` copies of a record to a container."""
        return await self._collections.seed_many(container, count, record)

    # GENERIC METHODS

    async def add_one(self, container: Any, record: Dict[str, Any]) -> DatabaseResponse:
        """
        Add a single record.

        The record is validated before anything is sent to the store. If it
        has no id, one is generated; the caller's dict is left untouched and
        the stored record, including its id, is returned in `data`.

        Returns:
            201 with the stored record, 400 if validation fails, 409 with
            "Item with ID <id> already exists." on a duplicate id, or the
            store's status and message for other failures.
        """
        prepared = with_id(record)

        try:
            self._validator.validate(prepared)
            outcome = await self._container(container).create_item(prepared)
        except DataOperationError as e:
            logger.debug(f"[add_one] Failed to add item '{prepared['id']}': {e}")
            return ResponseNormalizer.error(e, item_id=prepared["id"])

        return ResponseNormalizer.item(outcome)

    async def add_many(self, container: Any, partition_key: Any, records: Sequence[Dict[str, Any]] = ()) -> DatabaseResponse:
        """
        Add multiple records that all belong to one partition.

        Records are written with atomic batches of at most `bulk_limit`
        records. There is no atomicity across batches: if a batch fails, the
        batches before it stay written and the ones after it are not sent.

        Args:
            container: Container to write to
            partition_key: The partition key value every record must have
                           (`language.id` for data, `type` for metadata)
            records: Records to add

        Returns:
            201 with all stored records in order, 207 with the per-item
            outcomes of the failing batch, or 400 if a record is invalid or
            belongs to another partition.
        """
        name = resolve_container(container)
        binding = CONTAINER_BINDINGS[name]
        prepared = [with_id(record) for record in records]

        try:
            for record in prepared:
                self._validator.validate(record)
            mismatched = [
                binding.partition_key_for(record) for record in prepared
                if binding.partition_key_for(record) != partition_key
            ]
            if mismatched:
                raise PartitionKeyMismatchError(partition_key, mismatched)
        except DataOperationError as e:
            logger.warning(f"[add_many] Rejected {len(prepared)} items for container '{name.value}': {e}")
            return ResponseNormalizer.error(e)

        operations = [Operation.create(record) for record in prepared]
        return await self._orchestrator.dispatch_batch(self._container(name), partition_key, operations)

    async def count(self, record_type: Any, language: Optional[str] = None, project: Optional[str] = None) -> DatabaseResponse:
        """
        Count the records of one type.

        The `language` filter is efficient on the data container, the
        `project` filter on the metadata container.

        Returns:
            A response whose data is `{"count": n}`.
        """
        container = self.types[record_type]
        query = QueryBuilder.count(container, record_type, QueryFilters(language=language, project=project))

        try:
            rows = await self._orchestrator.collect(self._container(container).query_pages(query))
        except DataOperationError as e:
            logger.error(f"[count] Query for {RecordType(record_type).value} failed: {e}")
            return ResponseNormalizer.error(e)

        return ResponseNormalizer.count(rows)

    async def get_one(self, container: Any, partition: Any, item_id: str) -> DatabaseResponse:
        """
        Get a single item by partition key and id.

        Returns:
            200 with the item, or the store's status (404 if absent).
        """
        try:
            outcome = await self._container(container).read_item(item_id, partition)
        except DataOperationError as e:
            return ResponseNormalizer.error(e)

        return ResponseNormalizer.item(outcome)

    async def get_many(self, container: Any, partition_key: Any, ids: Sequence[str] = ()) -> DatabaseResponse:
        """
        Get multiple items of one partition by id.

        Returns:
            207 with one `{id, data, status}` entry per id, or 400 if more
            than `bulk_limit` ids are requested.
        """
        return await self._orchestrator.read_many(self._container(container), partition_key, list(ids))

    async def _list(self, record_type: RecordType, filters: QueryFilters) -> DatabaseResponse:
        container = self.types[record_type]
        query = QueryBuilder.select(container, record_type, filters)

        try:
            records = await self._orchestrator.collect(self._container(container).query_pages(query))
        except DataOperationError as e:
            logger.error(f"[list] Query for {record_type.value} failed: {e}")
            return ResponseNormalizer.error(e)

        return ResponseNormalizer.listing(records)

    # TYPE-SPECIFIC METHODS

    async def get_language(self, item_id: str) -> DatabaseResponse:
        """Retrieve a single language."""
        return await self.get_one(self.types[RecordType.LANGUAGE], RecordType.LANGUAGE.value, item_id)

    async def get_languages(self, project: Optional[str] = None) -> DatabaseResponse:
        """Get all languages, optionally only those of one project."""
        return await self._list(RecordType.LANGUAGE, QueryFilters(project=project))

    async def get_lexeme(self, language: str, item_id: str) -> DatabaseResponse:
        """Retrieve a single lexeme of a language."""
        return await self.get_one(self.types[RecordType.LEXEME], language, item_id)

    async def get_lexemes(self, language: Optional[str] = None, project: Optional[str] = None) -> DatabaseResponse:
        """Get lexemes, optionally filtered by language and/or project."""
        return await self._list(RecordType.LEXEME, QueryFilters(language=language, project=project))

    async def get_project(self, item_id: str) -> DatabaseResponse:
        """Retrieve a single project."""
        return await self.get_one(self.types[RecordType.PROJECT], RecordType.PROJECT.value, item_id)

    async def get_projects(self, user: Any = _UNSET) -> DatabaseResponse:
        """
        Get projects.

        Without `user`, all projects are returned. With a user id, only
        public projects and projects the user owns, edits or views. With an
        empty `user` (e.g. an anonymous caller), only public projects.
        """
        filters = QueryFilters() if user is _UNSET else QueryFilters(user=user or None)
        return await self._list(RecordType.PROJECT, filters)

    async def get_reference(self, item_id: str) -> DatabaseResponse:
        """Retrieve a single bibliographic reference."""
        return await self.get_one(
            self.types[RecordType.BIBLIOGRAPHIC_REFERENCE],
            RecordType.BIBLIOGRAPHIC_REFERENCE.value,
            item_id
        )

    async def get_references(self) -> DatabaseResponse:
        """Get all bibliographic references."""
        return await self._list(RecordType.BIBLIOGRAPHIC_REFERENCE, QueryFilters())
