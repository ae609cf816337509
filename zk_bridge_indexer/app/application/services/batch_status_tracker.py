from __future__ import annotations

import logging
from typing import Iterable

from zk_bridge_indexer.app.application.services.retrying_caller import RetryingCaller
from zk_bridge_indexer.app.domain.models.batches import (
    AdvanceOutcome,
    BatchesImported,
    BatchStage,
    MarkerNotObserved,
    NothingToDo,
    RecoveryRequired,
)
from zk_bridge_indexer.app.domain.models.bridge import RawLog
from zk_bridge_indexer.app.domain.ports.out import (
    BatchesRepository,
    BatchMarkerLocator,
    TransactionReceiptFetcher,
)

logger = logging.getLogger(__name__)

EXPECTED_BATCH_MISSING = "expected_batch_missing"
UNKNOWN_BATCHES = "unknown_batches"


def _topic_as_int(topic: str) -> int:
    return int(topic, 16)


def extract_batch_numbers(logs: Iterable[RawLog], stage: BatchStage) -> list[int]:
    """
    Batch numbers announced by the stage's marker event in a receipt, sorted.

    BlockCommit / BlockExecution carry one batch at topics[1].
    BlocksVerification carries (previousLastVerified, currentLastVerified) at
    topics[1..2] and covers every batch in between.
    """
    topic0 = stage.marker_topic
    numbers: set[int] = set()

    for log in logs:
        if log.first_topic is None or log.first_topic.lower() != topic0:
            continue

        if stage is BatchStage.PROVE:
            if len(log.topics) < 3:
                continue
            previous, current = _topic_as_int(log.topics[1]), _topic_as_int(log.topics[2])
            numbers.update(range(previous + 1, current + 1))
        else:
            if len(log.topics) < 2:
                continue
            numbers.add(_topic_as_int(log.topics[1]))

    return sorted(numbers)


class BatchStatusTracker:
    """
    Moves rollup batches through sealed -> committed -> proven -> executed.

    One advance() call looks only at the earliest batch still pending the
    stage. If its marker transaction is known, every batch announced by that
    transaction is moved forward together. When the receipt does not line up
    with local state, nothing is written and RecoveryRequired is returned.
    """

    def __init__(
        self,
        *,
        repository: BatchesRepository,
        marker_locator: BatchMarkerLocator,
        receipt_fetcher: TransactionReceiptFetcher,
        retrying_caller: RetryingCaller,
    ) -> None:
        self._repository = repository
        self._marker_locator = marker_locator
        self._receipt_fetcher = receipt_fetcher
        self._caller = retrying_caller

    async def advance(self, stage: BatchStage) -> AdvanceOutcome:
        expected = await self._repository.earliest_pending_batch_number(stage)
        if expected is None:
            return NothingToDo(stage=stage)

        logger.info("Checking if the batch %s reached stage %s", expected, stage.value)

        tx_hash = await self._caller.call(
            lambda: self._marker_locator.marker_transaction_hash(batch_number=expected, stage=stage),
            error_context=f"Cannot fetch details of the batch {expected}",
        )
        if not tx_hash:
            return MarkerNotObserved(stage=stage, batch_number=expected)

        logger.info("The batch %s looks like %s in tx %s", expected, stage.target_status.name.lower(), tx_hash)

        receipt_logs = await self._caller.call(
            lambda: self._receipt_fetcher.fetch_receipt_logs(transaction_hash=tx_hash),
            error_context=f"Cannot fetch receipt of the transaction {tx_hash}",
        )
        batch_numbers = extract_batch_numbers(receipt_logs, stage)
        logger.info(
            "Discovered %s batch(es) in the %s tx %s",
            len(batch_numbers),
            stage.value,
            tx_hash,
        )

        recovery = await self._check_consistency(stage, expected, batch_numbers)
        if recovery is not None:
            logger.warning(
                "Batch state must be recovered before stage %s can advance: %s (%s)",
                stage.value,
                list(recovery.batch_numbers),
                recovery.reason,
            )
            return recovery

        l1_transaction = await self._repository.import_stage_transition(
            stage,
            batch_numbers=batch_numbers,
            l1_transaction_hash=tx_hash,
        )
        return BatchesImported(
            stage=stage,
            batch_numbers=tuple(batch_numbers),
            l1_transaction=l1_transaction,
        )

    async def _check_consistency(
        self,
        stage: BatchStage,
        expected: int,
        batch_numbers: list[int],
    ) -> RecoveryRequired | None:
        if expected not in batch_numbers:
            # an earlier marker tx was missed; rebuild from the expected batch up
            pending = await self._repository.pending_batch_numbers(stage, from_number=expected)
            numbers = sorted(set(pending) | {expected})
            return RecoveryRequired(stage=stage, batch_numbers=tuple(numbers), reason=EXPECTED_BATCH_MISSING)

        known = set(await self._repository.known_batch_numbers(batch_numbers))
        unknown = [n for n in batch_numbers if n not in known]
        if unknown:
            return RecoveryRequired(stage=stage, batch_numbers=tuple(unknown), reason=UNKNOWN_BATCHES)

        return None
