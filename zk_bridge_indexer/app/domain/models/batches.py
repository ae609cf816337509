from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Union

from zk_bridge_indexer.app.domain.signatures import (
    BLOCK_COMMIT_TOPIC,
    BLOCK_EXECUTION_TOPIC,
    BLOCKS_VERIFICATION_TOPIC,
)


class BatchStatus(IntEnum):
    SEALED = 0
    COMMITTED = 1
    PROVEN = 2
    EXECUTED = 3


class BatchStage(str, Enum):
    """
    Lifecycle transition anchored by an L1 marker transaction.
    """

    COMMIT = "commit"
    PROVE = "prove"
    EXECUTE = "execute"

    @property
    def target_status(self) -> BatchStatus:
        return _TARGET_STATUS[self]

    @property
    def transaction_column(self) -> str:
        # column of domain.zksync_batches referencing domain.zksync_l1_transactions
        return f"{self.value}_id"

    @property
    def marker_topic(self) -> str:
        return _MARKER_TOPIC[self]

    @property
    def batch_details_field(self) -> str:
        # key of zks_getL1BatchDetails holding the L1 tx hash for this stage
        return f"{self.value}TxHash"


_TARGET_STATUS = {
    BatchStage.COMMIT: BatchStatus.COMMITTED,
    BatchStage.PROVE: BatchStatus.PROVEN,
    BatchStage.EXECUTE: BatchStatus.EXECUTED,
}

_MARKER_TOPIC = {
    BatchStage.COMMIT: BLOCK_COMMIT_TOPIC,
    BatchStage.PROVE: BLOCKS_VERIFICATION_TOPIC,
    BatchStage.EXECUTE: BLOCK_EXECUTION_TOPIC,
}


@dataclass(frozen=True)
class L1Transaction:
    hash: str
    id: int


@dataclass(frozen=True)
class Batch:
    number: int
    status: BatchStatus = BatchStatus.SEALED
    commit_id: int | None = None
    prove_id: int | None = None
    execute_id: int | None = None


# -----------------------------------------------------------------------------
# Outcomes of BatchStatusTracker.advance()
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class NothingToDo:
    stage: BatchStage


@dataclass(frozen=True)
class MarkerNotObserved:
    stage: BatchStage
    batch_number: int


@dataclass(frozen=True)
class BatchesImported:
    stage: BatchStage
    batch_numbers: tuple[int, ...]
    l1_transaction: L1Transaction


@dataclass(frozen=True)
class RecoveryRequired:
    """
    Local batch state disagrees with the marker transaction; the listed
    batches must be re-derived before the stage can advance.
    """

    stage: BatchStage
    batch_numbers: tuple[int, ...]
    reason: str


AdvanceOutcome = Union[NothingToDo, MarkerNotObserved, BatchesImported, RecoveryRequired]
