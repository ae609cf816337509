from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from zk_bridge_indexer.app.domain.models.bridge import Operation
from zk_bridge_indexer.app.domain.ports.out import BridgeOperationsRepository
from zk_bridge_indexer.app.infrastructure.db.hex_codec import hex_to_bytes

logger = logging.getLogger(__name__)

_HEX_FIELDS = ("l1_transaction_hash", "l2_transaction_hash", "l2_token_address")

_COLUMNS = (
    "type",
    "index",
    "l1_transaction_hash",
    "l2_transaction_hash",
    "l1_token_id",
    "l2_token_address",
    "amount",
    "block_number",
    "block_timestamp",
)


def _chunks(seq: Sequence[Any], size: int) -> Iterable[Sequence[Any]]:
    for i in range(0, len(seq), size):
        yield seq[i : i + size]


def _to_params(operation: Operation) -> dict[str, Any]:
    """
    Sparse operation record -> full parameter set; missing columns become
    NULL and are resolved by COALESCE in the upsert.
    """
    record = operation.as_record()
    params = {column: record.get(column) for column in _COLUMNS}
    for field in _HEX_FIELDS:
        if params[field] is not None:
            params[field] = hex_to_bytes(params[field])
    return params


class SqlAlchemyBridgeOperationsRepository(BridgeOperationsRepository):
    """
    domain.zkevm_bridge_operations adapter.

    Upsert by (type, index). The L1 fetcher and the L2 fetcher see the same
    operation from different sides, so an update never clears a column the
    other side has already filled.
    """

    def __init__(self, engine: AsyncEngine, *, batch_size: int = 1_000) -> None:
        self._engine = engine
        self._batch_size = batch_size

    async def import_operations(self, operations: Sequence[Operation]) -> None:
        if not operations:
            return

        upsert_sql = text(
            """
            INSERT INTO domain.zkevm_bridge_operations (
                type,
                index,
                l1_transaction_hash,
                l2_transaction_hash,
                l1_token_id,
                l2_token_address,
                amount,
                block_number,
                block_timestamp,
                updated_at
            )
            VALUES (
                :type,
                :index,
                :l1_transaction_hash,
                :l2_transaction_hash,
                :l1_token_id,
                :l2_token_address,
                :amount,
                :block_number,
                :block_timestamp,
                now()
            )
            ON CONFLICT (type, index) DO UPDATE SET
                l1_transaction_hash = COALESCE(EXCLUDED.l1_transaction_hash, domain.zkevm_bridge_operations.l1_transaction_hash),
                l2_transaction_hash = COALESCE(EXCLUDED.l2_transaction_hash, domain.zkevm_bridge_operations.l2_transaction_hash),
                l1_token_id = COALESCE(EXCLUDED.l1_token_id, domain.zkevm_bridge_operations.l1_token_id),
                l2_token_address = COALESCE(EXCLUDED.l2_token_address, domain.zkevm_bridge_operations.l2_token_address),
                amount = EXCLUDED.amount,
                block_number = COALESCE(EXCLUDED.block_number, domain.zkevm_bridge_operations.block_number),
                block_timestamp = COALESCE(EXCLUDED.block_timestamp, domain.zkevm_bridge_operations.block_timestamp),
                updated_at = EXCLUDED.updated_at
            """
        )

        payload = [_to_params(op) for op in operations]

        async with self._engine.begin() as conn:
            for chunk in _chunks(payload, self._batch_size):
                await conn.execute(upsert_sql, list(chunk))

        logger.info(
            "Upserted %s operation(s) into domain.zkevm_bridge_operations",
            len(payload),
        )
