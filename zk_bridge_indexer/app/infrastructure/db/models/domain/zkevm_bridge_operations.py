from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    PrimaryKeyConstraint,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import BYTEA
from sqlalchemy.orm import Mapped, mapped_column

from zk_bridge_indexer.app.infrastructure.db.db_base import BaseDB


class ZkEvmBridgeOperationsDB(BaseDB):
    """
    Normalized zkEVM bridge operations.

    One row = one deposit or withdrawal, keyed by (type, index). The L1 and L2
    sides are written by different fetchers, each filling only its own columns.
    """

    __tablename__ = "zkevm_bridge_operations"
    __table_args__ = (
        PrimaryKeyConstraint("type", "index"),
        Index("ix_zkevm_bridge_operations_l1_tx", "l1_transaction_hash"),
        Index("ix_zkevm_bridge_operations_l2_tx", "l2_transaction_hash"),
        {"schema": "domain"},
    )

    # Identity
    type: Mapped[str] = mapped_column(Text, nullable=False)  # deposit | withdrawal
    index: Mapped[int] = mapped_column(BigInteger, nullable=False)

    l1_transaction_hash: Mapped[bytes | None] = mapped_column(BYTEA, nullable=True)
    l2_transaction_hash: Mapped[bytes | None] = mapped_column(BYTEA, nullable=True)

    # Token
    l1_token_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("domain.zkevm_bridge_l1_tokens.id"),
        nullable=True,
    )
    l2_token_address: Mapped[bytes | None] = mapped_column(BYTEA, nullable=True)

    amount: Mapped[int] = mapped_column(Numeric(78, 0), nullable=False)  # uint256

    # Only known for the side that emitted the BridgeEvent
    block_number: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    block_timestamp: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
