from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy import bindparam, text
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncEngine

from zk_bridge_indexer.app.domain.models.bridge import L1Token
from zk_bridge_indexer.app.domain.ports.out import L1TokensRepository
from zk_bridge_indexer.app.infrastructure.db.hex_codec import bytes_to_hex, hex_to_bytes
from zk_bridge_indexer.app.infrastructure.db.models.domain.zkevm_bridge_l1_tokens import (
    ZkEvmBridgeL1TokensDB,
)

logger = logging.getLogger(__name__)


def _row_to_token(row: Any) -> L1Token:
    return L1Token(
        address=bytes_to_hex(row["address"]),
        symbol=row["symbol"],
        decimals=row["decimals"],
        id=row["id"],
    )


class SqlAlchemyL1TokensRepository(L1TokensRepository):
    """
    domain.zkevm_bridge_l1_tokens adapter.

    Inserts use ON CONFLICT (address) DO NOTHING ... RETURNING, so rows that a
    concurrent writer got in first are simply absent from the result; the
    token resolver re-reads them.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def find_by_addresses(self, addresses: Sequence[str]) -> list[L1Token]:
        if not addresses:
            return []

        select_sql = text(
            """
            SELECT id, address, symbol, decimals
            FROM domain.zkevm_bridge_l1_tokens
            WHERE address IN :addresses
            ORDER BY id
            """
        ).bindparams(bindparam("addresses", expanding=True))

        async with self._engine.connect() as conn:
            result = await conn.execute(
                select_sql,
                {"addresses": [hex_to_bytes(a) for a in addresses]},
            )
            rows = result.mappings().all()

        return [_row_to_token(r) for r in rows]

    async def insert_tokens(self, tokens: Sequence[L1Token]) -> list[L1Token]:
        if not tokens:
            return []

        payload = [
            {
                "address": hex_to_bytes(t.address),
                "symbol": t.symbol,
                "decimals": t.decimals,
            }
            for t in tokens
        ]

        stmt = (
            insert(ZkEvmBridgeL1TokensDB)
            .values(payload)
            .on_conflict_do_nothing(index_elements=[ZkEvmBridgeL1TokensDB.address])
            .returning(
                ZkEvmBridgeL1TokensDB.id,
                ZkEvmBridgeL1TokensDB.address,
                ZkEvmBridgeL1TokensDB.symbol,
                ZkEvmBridgeL1TokensDB.decimals,
            )
        )

        async with self._engine.begin() as conn:
            result = await conn.execute(stmt)
            rows = result.mappings().all()

        logger.info(
            "Inserted %s of %s L1 token(s) into domain.zkevm_bridge_l1_tokens",
            len(rows),
            len(payload),
        )
        return [_row_to_token(r) for r in rows]
