from __future__ import annotations

from typing import Any, Protocol, Sequence

from zk_bridge_indexer.app.domain.models.batches import BatchStage, L1Transaction
from zk_bridge_indexer.app.domain.models.bridge import (
    DecodedBridgeLog,
    L1Token,
    Operation,
    RawLog,
)

BlockSelector = int | str


class BridgeLogDecoder(Protocol):
    def decode(self, log: RawLog) -> DecodedBridgeLog:
        """
        Decode a bridge log (topics + data) into a typed deposit or claim event.

        Raises on malformed payloads or unknown topic0; the error concerns
        this log only.
        """
        ...


class BridgeLogsFetcher(Protocol):
    """
    Port for reading bridge contract logs from a node (eth_getLogs).

    Implementations return logs in node order; retries are the caller's concern.
    """

    async def fetch_logs(
        self,
        *,
        from_block: BlockSelector,
        to_block: BlockSelector,
        address: str,
        topics: Sequence[str],
    ) -> list[RawLog]:
        ...


class BlocksFetcher(Protocol):
    """
    Port for a single multiplexed block header request.

    Returns one mapping per requested block with at least "number" and
    "timestamp" (ints), or raises if the batch request fails.
    """

    async def fetch_blocks(self, *, block_numbers: Sequence[int]) -> list[dict[str, Any]]:
        ...


class Erc20TokenMetadataFetcher(Protocol):
    """
    Low-level dependency used by the token resolver.

    symbol() and decimals() of every token go out in one batched RPC request.
    A getter that reverts or returns garbage leaves its field None; a failure
    of the request itself raises so the caller can retry the whole batch.
    Returned tokens have no id yet. token_addresses are 0x hex strings.
    """

    async def fetch_metadata(self, *, token_addresses: Sequence[str]) -> dict[str, L1Token]:
        ...


class TransactionReceiptFetcher(Protocol):
    async def fetch_receipt_logs(self, *, transaction_hash: str) -> list[RawLog]:
        ...


class BatchMarkerLocator(Protocol):
    """
    Port answering whether a batch already has an L1 marker transaction for
    a given stage, and which one.
    """

    async def marker_transaction_hash(
        self,
        *,
        batch_number: int,
        stage: BatchStage,
    ) -> str | None:
        ...


class BridgeOperationsRepository(Protocol):
    """
    Port for persisting normalized bridge operations.

    Records are upserted by (type, index); fields missing from a record keep
    whatever value is already stored.
    """

    async def import_operations(self, operations: Sequence[Operation]) -> None:
        ...


class L1TokensRepository(Protocol):
    """
    Port for the shared L1 token registry.

    insert_tokens must tolerate rows inserted concurrently by another writer
    and return only the rows it actually inserted, with ids assigned.
    """

    async def find_by_addresses(self, addresses: Sequence[str]) -> list[L1Token]:
        ...

    async def insert_tokens(self, tokens: Sequence[L1Token]) -> list[L1Token]:
        ...


class BatchesRepository(Protocol):
    """
    Port for the rollup batch registry used by the status tracker.
    """

    async def earliest_pending_batch_number(self, stage: BatchStage) -> int | None:
        ...

    async def pending_batch_numbers(self, stage: BatchStage, *, from_number: int) -> list[int]:
        ...

    async def known_batch_numbers(self, numbers: Sequence[int]) -> list[int]:
        ...

    async def import_stage_transition(
        self,
        stage: BatchStage,
        *,
        batch_numbers: Sequence[int],
        l1_transaction_hash: str,
    ) -> L1Transaction:
        ...
