from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncEngine

from zk_bridge_indexer.app.domain.models.batches import BatchStage, L1Transaction
from zk_bridge_indexer.app.domain.ports.out import BatchesRepository
from zk_bridge_indexer.app.infrastructure.db.hex_codec import hex_to_bytes

logger = logging.getLogger(__name__)


class SqlAlchemyBatchesRepository(BatchesRepository):
    """
    domain.zksync_batches / domain.zksync_l1_transactions adapter.

    A batch is pending a stage while its <stage>_id column is NULL.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def earliest_pending_batch_number(self, stage: BatchStage) -> int | None:
        select_sql = text(
            f"""
            SELECT MIN(number) AS number
            FROM domain.zksync_batches
            WHERE {stage.transaction_column} IS NULL
            """
        )

        async with self._engine.connect() as conn:
            result = await conn.execute(select_sql)
            row = result.one_or_none()

        if row is None or row.number is None:
            return None
        return int(row.number)

    async def pending_batch_numbers(self, stage: BatchStage, *, from_number: int) -> list[int]:
        select_sql = text(
            f"""
            SELECT number
            FROM domain.zksync_batches
            WHERE {stage.transaction_column} IS NULL
              AND number >= :from_number
            ORDER BY number
            """
        )

        async with self._engine.connect() as conn:
            result = await conn.execute(select_sql, {"from_number": from_number})
            return [int(n) for n in result.scalars().all()]

    async def known_batch_numbers(self, numbers: Sequence[int]) -> list[int]:
        if not numbers:
            return []

        select_sql = text(
            """
            SELECT number
            FROM domain.zksync_batches
            WHERE number IN :numbers
            ORDER BY number
            """
        ).bindparams(bindparam("numbers", expanding=True))

        async with self._engine.connect() as conn:
            result = await conn.execute(select_sql, {"numbers": list(numbers)})
            return [int(n) for n in result.scalars().all()]

    async def import_stage_transition(
        self,
        stage: BatchStage,
        *,
        batch_numbers: Sequence[int],
        l1_transaction_hash: str,
    ) -> L1Transaction:
        # DO UPDATE (not DO NOTHING) so RETURNING yields the id of an existing row
        upsert_tx_sql = text(
            """
            INSERT INTO domain.zksync_l1_transactions (hash)
            VALUES (:hash)
            ON CONFLICT (hash) DO UPDATE SET hash = EXCLUDED.hash
            RETURNING id
            """
        )

        # status never moves backwards
        update_batches_sql = text(
            f"""
            UPDATE domain.zksync_batches
            SET {stage.transaction_column} = :tx_id,
                status = GREATEST(status, :status)
            WHERE number IN :numbers
            """
        ).bindparams(bindparam("numbers", expanding=True))

        async with self._engine.begin() as conn:
            result = await conn.execute(upsert_tx_sql, {"hash": hex_to_bytes(l1_transaction_hash)})
            tx_id = int(result.scalar_one())

            updated = await conn.execute(
                update_batches_sql,
                {
                    "tx_id": tx_id,
                    "status": int(stage.target_status),
                    "numbers": list(batch_numbers),
                },
            )

        logger.info(
            "Moved %s batch(es) to %s with L1 tx %s (id=%s)",
            updated.rowcount,
            stage.target_status.name.lower(),
            l1_transaction_hash,
            tx_id,
        )
        return L1Transaction(hash=l1_transaction_hash, id=tx_id)
