"""
Bulk/Batch Orchestrator

Turns item lists of any length into requests the store accepts and merges
the per-request results into one DatabaseResponse.

Two execution models are supported:

- batch: every operation of a request shares one partition key and the
  request is atomic. Used for creating many items at once.
- bulk: operations carry their own partition keys and the store continues
  past individual failures. Used for read-many and for clearing containers.

Requests are dispatched one chunk at a time, in input order. As soon as a
chunk reports partial failure (207) no further chunk is dispatched, and a
provider error aborts the remaining chunks the same way. Failed operations
are never retried here.

Typical usage:

    orchestrator = BulkOrchestrator(DataOperationConfig(bulk_limit=100))
    operations = [Operation.create(record) for record in records]
    response = await orchestrator.dispatch_batch(container, "lang-1", operations)
"""

import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence, TYPE_CHECKING

from ...utils.chunking import chunk
from ..data_ops_config import DataOperationConfig
from ..data_ops_exceptions import DataOperationError, LimitExceededError
from ..models.entities import BatchOutcome, DatabaseResponse, Operation, OperationOutcome
from .normalizer import ResponseNormalizer

if TYPE_CHECKING:
    from ...connection_management.provider import ContainerProvider

logger = logging.getLogger(__name__)


class BulkOrchestrator:
    """
    Chunks, dispatches and merges multi-item operations.

    The orchestrator holds no state between invocations apart from its
    configuration, so one instance can serve concurrent callers.
    """

    def __init__(self, config: Optional[DataOperationConfig] = None):
        self._config = config or DataOperationConfig()

    @property
    def bulk_limit(self) -> int:
        return self._config.bulk_limit

    async def dispatch_batch(
        self,
        container: "ContainerProvider",
        partition_key: Any,
        operations: Sequence[Operation]
    ) -> DatabaseResponse:
        """
        Execute operations as atomic batches within one partition.

        Each chunk either commits completely or reports 207. There is no
        atomicity across chunks: chunks dispatched before a failing chunk
        stay committed.

        Args:
            container: Container to execute against
            partition_key: Partition key value shared by every operation
            operations: Operations in the order they should be executed

        Returns:
            201 with the result bodies of all operations in order, 207 with
            the per-operation outcomes of the first failing chunk, or the
            status and message of a provider error.
        """
        chunks = chunk(operations, self._config.bulk_limit)
        outcomes: List[BatchOutcome] = []

        for i, operation_chunk in enumerate(chunks):
            logger.debug(
                f"[batch] Dispatching chunk {i + 1}/{len(chunks)} "
                f"({len(operation_chunk)} operations) to partition '{partition_key}'"
            )
            try:
                outcome = await container.execute_batch(operation_chunk, partition_key)
            except DataOperationError as e:
                logger.error(
                    f"[batch] Chunk {i + 1}/{len(chunks)} in partition '{partition_key}' failed: {e}"
                )
                return ResponseNormalizer.error(e)

            if outcome.is_partial:
                logger.warning(
                    f"[batch] Chunk {i + 1}/{len(chunks)} in partition '{partition_key}' reported "
                    f"partial failure; {len(chunks) - i - 1} remaining chunks were not dispatched"
                )
                return ResponseNormalizer.partial(outcome)

            outcomes.append(outcome)

        logger.info(f"[batch] Executed {len(operations)} operations in partition '{partition_key}'")
        return ResponseNormalizer.batch_success(outcomes)

    async def _run_bulk(
        self,
        container: "ContainerProvider",
        operations: Sequence[Operation],
        fail_fast: bool
    ) -> List[BatchOutcome]:
        """
        Dispatch bulk chunks in order.

        With fail_fast, dispatch stops after the first chunk containing a
        failed operation; that chunk is the last element of the result.
        """
        chunks = chunk(operations, self._config.bulk_limit)
        outcomes: List[BatchOutcome] = []

        for i, operation_chunk in enumerate(chunks):
            logger.debug(
                f"[bulk] Dispatching chunk {i + 1}/{len(chunks)} ({len(operation_chunk)} operations)"
            )
            results = await container.execute_bulk(
                operation_chunk,
                continue_on_error=self._config.continue_on_error
            )
            outcome = BatchOutcome.from_results(results)
            outcomes.append(outcome)

            if outcome.is_partial and fail_fast:
                logger.warning(
                    f"[bulk] Chunk {i + 1}/{len(chunks)} reported partial failure; "
                    f"{len(chunks) - i - 1} remaining chunks were not dispatched"
                )
                break

        return outcomes

    async def dispatch_bulk(
        self,
        container: "ContainerProvider",
        operations: Sequence[Operation]
    ) -> DatabaseResponse:
        """
        Execute operations that may span partitions.

        Returns:
            200 with one entry per operation when everything succeeded, 207
            with the entries of the first chunk containing a failure, or the
            status and message of a provider error.
        """
        try:
            outcomes = await self._run_bulk(container, operations, fail_fast=True)
        except DataOperationError as e:
            logger.error(f"[bulk] Dispatch failed: {e}")
            return ResponseNormalizer.error(e)

        if outcomes and outcomes[-1].is_partial:
            return ResponseNormalizer.partial(outcomes[-1])

        return DatabaseResponse(data=[r.as_entry() for o in outcomes for r in o.results])

    async def read_many(
        self,
        container: "ContainerProvider",
        partition_key: Any,
        ids: Sequence[str]
    ) -> DatabaseResponse:
        """
        Read several items of one partition by id.

        Requests for more ids than the bulk limit are rejected with 400
        before anything is sent to the store.

        Returns:
            207 with one entry ({id, data, status}) per requested id, in the
            requested order.
        """
        if len(ids) > self._config.bulk_limit:
            logger.warning(
                f"[read_many] Rejected request for {len(ids)} ids (limit {self._config.bulk_limit})"
            )
            return ResponseNormalizer.error(LimitExceededError(self._config.bulk_limit))

        operations = [Operation.read(item_id, partition_key) for item_id in ids]

        try:
            outcomes = await self._run_bulk(container, operations, fail_fast=False)
        except DataOperationError as e:
            logger.error(f"[read_many] Dispatch failed: {e}")
            return ResponseNormalizer.error(e)

        results: List[OperationOutcome] = [r for o in outcomes for r in o.results]
        return ResponseNormalizer.read_many(results)

    async def delete_all(
        self,
        container: "ContainerProvider",
        items: Sequence[Dict[str, Any]],
        partition_key_for: Callable[[Dict[str, Any]], Any]
    ) -> DatabaseResponse:
        """Delete the given items, deriving each item's partition key."""
        operations = [Operation.delete(item["id"], partition_key_for(item)) for item in items]
        return await self.dispatch_bulk(container, operations)

    @staticmethod
    async def collect(pages: AsyncIterator[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        """
        Pull every page of a query, one at a time, into a single list.

        Pages are requested only after the previous one has been consumed.
        """
        records: List[Dict[str, Any]] = []
        async for page in pages:
            records.extend(page)
        return records
