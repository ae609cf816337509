from __future__ import annotations

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, SmallInteger, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import BYTEA
from sqlalchemy.orm import Mapped, mapped_column

from zk_bridge_indexer.app.infrastructure.db.db_base import BaseDB


class ZkSyncL1TransactionsDB(BaseDB):
    """
    L1 transactions that commit, prove or execute rollup batches.
    """

    __tablename__ = "zksync_l1_transactions"
    __table_args__ = (
        UniqueConstraint("hash", name="uq_zksync_l1_transactions_hash"),
        {"schema": "domain"},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hash: Mapped[bytes] = mapped_column(BYTEA, nullable=False)  # 32 bytes


class ZkSyncBatchesDB(BaseDB):
    """
    Rollup batches and their lifecycle.

    status: 0 sealed, 1 committed, 2 proven, 3 executed (never decreases).
    A NULL <stage>_id means the batch is still pending that stage.
    """

    __tablename__ = "zksync_batches"
    __table_args__ = (
        Index("ix_zksync_batches_commit_pending", "number", postgresql_where=text("commit_id IS NULL")),
        Index("ix_zksync_batches_prove_pending", "number", postgresql_where=text("prove_id IS NULL")),
        Index("ix_zksync_batches_execute_pending", "number", postgresql_where=text("execute_id IS NULL")),
        {"schema": "domain"},
    )

    number: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    status: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)

    commit_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("domain.zksync_l1_transactions.id"), nullable=True
    )
    prove_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("domain.zksync_l1_transactions.id"), nullable=True
    )
    execute_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("domain.zksync_l1_transactions.id"), nullable=True
    )
