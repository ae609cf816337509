from __future__ import annotations

import logging

from zk_bridge_indexer.app.domain.models.batches import (
    BatchesImported,
    BatchStage,
    MarkerNotObserved,
    NothingToDo,
    RecoveryRequired,
)
from zk_bridge_indexer.app.infrastructure.db.engine import create_app_async_engine
from zk_bridge_indexer.app.infrastructure.factories.domain.zksync_batch_status_tracker_factory import (
    zksync_batch_status_tracker_factory,
)

logger = logging.getLogger(__name__)


async def zksync_batch_status_task(
    *,
    stage: str,
    backend: str = "sqlalchemy",
) -> None:
    """
    Task: advance the earliest batch pending a lifecycle stage (commit, prove, execute).

    A RecoveryRequired outcome is only reported; rebuilding the listed
    batches is left to the operator or the batches fetcher.
    """
    try:
        resolved_stage = BatchStage(stage.strip().lower())
    except ValueError:
        raise ValueError(f"Unsupported stage: {stage!r} (expected commit, prove or execute)")

    engine = create_app_async_engine()
    try:
        tracker = zksync_batch_status_tracker_factory(backend=backend, engine=engine)
        outcome = await tracker.advance(resolved_stage)
    finally:
        await engine.dispose()

    if isinstance(outcome, NothingToDo):
        logger.info("No batches pending stage %s", resolved_stage.value)
    elif isinstance(outcome, MarkerNotObserved):
        logger.info(
            "Batch %s has no %s transaction yet, will try later",
            outcome.batch_number,
            resolved_stage.value,
        )
    elif isinstance(outcome, BatchesImported):
        logger.info(
            "Batches %s moved to stage %s (L1 tx %s)",
            list(outcome.batch_numbers),
            resolved_stage.value,
            outcome.l1_transaction.hash,
        )
    elif isinstance(outcome, RecoveryRequired):
        logger.warning(
            "Recovery required for batches %s at stage %s (%s)",
            list(outcome.batch_numbers),
            resolved_stage.value,
            outcome.reason,
        )
