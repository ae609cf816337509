from __future__ import annotations

from typing import Any

from web3 import AsyncWeb3
from web3.types import RPCEndpoint

from zk_bridge_indexer.app.domain.models.batches import BatchStage
from zk_bridge_indexer.app.domain.models.bridge import RawLog
from zk_bridge_indexer.app.domain.ports.out import (
    BatchMarkerLocator,
    TransactionReceiptFetcher,
)
from zk_bridge_indexer.app.infrastructure.fetchers._web3_logs import raw_log_from_web3, to_hex

_ZKS_GET_L1_BATCH_DETAILS = RPCEndpoint("zks_getL1BatchDetails")

# reported by some nodes instead of a missing field
ZERO_HASH = "0x" + "00" * 32


class Web3TransactionReceiptFetcher(TransactionReceiptFetcher):
    """eth_getTransactionReceipt on L1; only the logs are kept."""

    def __init__(self, *, w3: AsyncWeb3) -> None:
        self._w3 = w3

    async def fetch_receipt_logs(self, *, transaction_hash: str) -> list[RawLog]:
        receipt = await self._w3.eth.get_transaction_receipt(transaction_hash)
        return [raw_log_from_web3(log) for log in receipt["logs"]]


class ZkSyncBatchMarkerLocator(BatchMarkerLocator):
    """
    Finds the L1 marker transaction of a batch through the L2 node
    (zks_getL1BatchDetails -> commitTxHash / proveTxHash / executeTxHash).
    """

    def __init__(self, *, w3: AsyncWeb3) -> None:
        self._w3 = w3

    async def marker_transaction_hash(
        self,
        *,
        batch_number: int,
        stage: BatchStage,
    ) -> str | None:
        response: Any = await self._w3.provider.make_request(
            _ZKS_GET_L1_BATCH_DETAILS,
            [batch_number],
        )

        error = response.get("error")
        if error:
            raise RuntimeError(f"zks_getL1BatchDetails({batch_number}) failed: {error}")

        details = response.get("result")
        if not details:
            return None

        tx_hash = details.get(stage.batch_details_field)
        if not tx_hash:
            return None

        tx_hash = to_hex(tx_hash)
        return None if tx_hash == ZERO_HASH else tx_hash
