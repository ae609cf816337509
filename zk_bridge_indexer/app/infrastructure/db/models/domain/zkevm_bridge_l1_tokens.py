from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, SmallInteger, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import BYTEA
from sqlalchemy.orm import Mapped, mapped_column

from zk_bridge_indexer.app.infrastructure.db.db_base import BaseDB


class ZkEvmBridgeL1TokensDB(BaseDB):
    """
    Registry of L1 tokens seen in zkEVM bridge deposits.

    One row = one L1 token address; id is referenced by bridge operations.
    Rows are created on first sighting and never rewritten.
    """

    __tablename__ = "zkevm_bridge_l1_tokens"
    __table_args__ = (
        UniqueConstraint("address", name="uq_zkevm_bridge_l1_tokens_address"),
        {"schema": "domain"},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    address: Mapped[bytes] = mapped_column(BYTEA, nullable=False)  # 20 bytes

    # Either may stay NULL when the RPC read failed
    symbol: Mapped[str | None] = mapped_column(Text, nullable=True)
    decimals: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    inserted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
