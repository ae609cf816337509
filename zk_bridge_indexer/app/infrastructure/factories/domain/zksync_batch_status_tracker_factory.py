from __future__ import annotations

from typing import Callable, Dict

from sqlalchemy.ext.asyncio import AsyncEngine

from zk_bridge_indexer.app.application.services.batch_status_tracker import BatchStatusTracker
from zk_bridge_indexer.app.domain.models.bridge import Layer
from zk_bridge_indexer.app.infrastructure.adapters.domain.zksync_batches_repository import (
    SqlAlchemyBatchesRepository,
)
from zk_bridge_indexer.app.infrastructure.factories.web3_factory import (
    make_async_web3,
    make_rpc_retrying_caller,
)
from zk_bridge_indexer.app.infrastructure.fetchers.zksync_fetchers import (
    Web3TransactionReceiptFetcher,
    ZkSyncBatchMarkerLocator,
)

BatchStatusTrackerFactory = Callable[[AsyncEngine], BatchStatusTracker]

_BATCH_STATUS_TRACKER_REGISTRY: Dict[str, BatchStatusTrackerFactory] = {}


def _make_sqlalchemy_tracker(engine: AsyncEngine) -> BatchStatusTracker:
    """
    Wire dependencies for SQLAlchemy backend:
    - L2 AsyncWeb3 for zks_getL1BatchDetails (marker tx hashes)
    - L1 AsyncWeb3 for marker tx receipts
    - SQLAlchemy adapter for domain.zksync_batches / domain.zksync_l1_transactions
    """
    return BatchStatusTracker(
        repository=SqlAlchemyBatchesRepository(engine),
        marker_locator=ZkSyncBatchMarkerLocator(w3=make_async_web3(Layer.L2)),
        receipt_fetcher=Web3TransactionReceiptFetcher(w3=make_async_web3(Layer.L1)),
        retrying_caller=make_rpc_retrying_caller(),
    )


# Register backends
_BATCH_STATUS_TRACKER_REGISTRY["sqlalchemy"] = _make_sqlalchemy_tracker


def zksync_batch_status_tracker_factory(
    *,
    backend: str,
    engine: AsyncEngine,
) -> BatchStatusTracker:
    try:
        factory = _BATCH_STATUS_TRACKER_REGISTRY[backend]
    except KeyError:
        raise ValueError(f"Unsupported batch status tracker backend: {backend!r}")

    return factory(engine)
