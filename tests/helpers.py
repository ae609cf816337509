from __future__ import annotations

from typing import Any, Sequence

from eth_abi import encode as abi_encode

from zk_bridge_indexer.app.domain.models.batches import BatchStage, BatchStatus, L1Transaction
from zk_bridge_indexer.app.domain.models.bridge import L1Token, Operation, RawLog
from zk_bridge_indexer.app.domain.signatures import BRIDGE_EVENT_TOPIC, CLAIM_EVENT_TOPIC
from zk_bridge_indexer.app.infrastructure.decoders.zkevm_bridge.bridge_events_decoder import (
    BRIDGE_EVENT_TYPES,
    CLAIM_EVENT_TYPES,
)

BRIDGE_CONTRACT = "0x2a3dd3eb832af982ec71669e178424b10dca2ede"
TOKEN_A = "0x" + "aa" * 20
TOKEN_B = "0x" + "bb" * 20
DESTINATION = "0x" + "cc" * 20


def tx_hash(n: int) -> str:
    return "0x" + f"{n:064x}"


def deposit_log(
    *,
    leaf_type: int = 0,
    origin_network: int = 0,
    origin_address: str = TOKEN_A,
    destination_network: int = 1,
    destination_address: str = DESTINATION,
    amount: int = 10**18,
    metadata: bytes = b"",
    deposit_count: int = 1,
    block_number: int | None = 100,
    transaction_hash: str = tx_hash(1),
    address: str = BRIDGE_CONTRACT,
) -> RawLog:
    data = abi_encode(
        BRIDGE_EVENT_TYPES,
        [
            leaf_type,
            origin_network,
            origin_address,
            destination_network,
            destination_address,
            amount,
            metadata,
            deposit_count,
        ],
    )
    return RawLog(
        address=address,
        topics=(BRIDGE_EVENT_TOPIC,),
        data=data,
        transaction_hash=transaction_hash,
        block_number=block_number,
    )


def claim_log(
    *,
    index: int = 7,
    origin_network: int = 0,
    origin_address: str = TOKEN_A,
    destination_address: str = DESTINATION,
    amount: int = 5,
    block_number: int | None = 200,
    transaction_hash: str = tx_hash(2),
    address: str = BRIDGE_CONTRACT,
) -> RawLog:
    data = abi_encode(
        CLAIM_EVENT_TYPES,
        [index, origin_network, origin_address, destination_address, amount],
    )
    return RawLog(
        address=address,
        topics=(CLAIM_EVENT_TOPIC,),
        data=data,
        transaction_hash=transaction_hash,
        block_number=block_number,
    )


async def no_sleep(_: float) -> None:
    return None


# -----------------------------------------------------------------------------
# In-memory port implementations
# -----------------------------------------------------------------------------


class InMemoryL1TokensRepository:
    """
    Token registry with id assignment. `preinserted_by_other` simulates a
    concurrent writer that inserts rows between find_by_addresses and insert_tokens.
    """

    def __init__(self, tokens: Sequence[L1Token] = ()) -> None:
        self.rows: dict[str, L1Token] = {t.address: t for t in tokens}
        self.next_id = max((t.id or 0 for t in tokens), default=0) + 1
        self.preinserted_by_other: list[L1Token] = []
        self.find_calls: list[list[str]] = []
        self.insert_calls: list[list[L1Token]] = []

    def _insert(self, token: L1Token) -> L1Token:
        row = L1Token(address=token.address, symbol=token.symbol, decimals=token.decimals, id=self.next_id)
        self.next_id += 1
        self.rows[row.address] = row
        return row

    async def find_by_addresses(self, addresses: Sequence[str]) -> list[L1Token]:
        self.find_calls.append(list(addresses))
        return [self.rows[a] for a in addresses if a in self.rows]

    async def insert_tokens(self, tokens: Sequence[L1Token]) -> list[L1Token]:
        self.insert_calls.append(list(tokens))
        for token in self.preinserted_by_other:
            if token.address not in self.rows:
                self._insert(token)
        self.preinserted_by_other = []

        inserted = []
        for token in tokens:
            if token.address in self.rows:
                continue
            inserted.append(self._insert(token))
        return inserted


class FakeMetadataFetcher:
    def __init__(
        self,
        *,
        symbols: dict[str, str] | None = None,
        decimals: dict[str, int] | None = None,
        failures: Sequence[Exception] = (),
    ) -> None:
        # each batch call first raises the next pending failure, if any
        self.symbols = symbols or {}
        self.decimals = decimals or {}
        self.failures = list(failures)
        self.calls: list[list[str]] = []

    async def fetch_metadata(self, *, token_addresses: Sequence[str]) -> dict[str, L1Token]:
        self.calls.append(list(token_addresses))
        if self.failures:
            raise self.failures.pop(0)
        return {
            a: L1Token(address=a, symbol=self.symbols.get(a), decimals=self.decimals.get(a))
            for a in token_addresses
        }


class FakeBlocksFetcher:
    def __init__(self, timestamps: dict[int, int], *, failures: int = 0) -> None:
        self.timestamps = timestamps
        self.failures = failures
        self.requests: list[list[int]] = []

    async def fetch_blocks(self, *, block_numbers: Sequence[int]) -> list[dict[str, Any]]:
        self.requests.append(list(block_numbers))
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("node unavailable")
        return [
            {"number": n, "timestamp": self.timestamps[n]}
            for n in block_numbers
            if n in self.timestamps
        ]


class FakeLogsFetcher:
    def __init__(self, logs: Sequence[RawLog]) -> None:
        self.logs = list(logs)
        self.requests: list[dict[str, Any]] = []

    async def fetch_logs(self, *, from_block, to_block, address, topics) -> list[RawLog]:
        self.requests.append(
            {"from_block": from_block, "to_block": to_block, "address": address, "topics": list(topics)}
        )
        return list(self.logs)


class InMemoryOperationsRepository:
    def __init__(self) -> None:
        self.imported: list[Operation] = []
        self.calls = 0

    async def import_operations(self, operations: Sequence[Operation]) -> None:
        self.calls += 1
        self.imported.extend(operations)


class InMemoryBatchesRepository:
    def __init__(self, batch_numbers: Sequence[int]) -> None:
        self.status: dict[int, BatchStatus] = {n: BatchStatus.SEALED for n in batch_numbers}
        self.tx_ids: dict[int, dict[BatchStage, int]] = {n: {} for n in batch_numbers}
        self.transactions: dict[str, int] = {}
        self.imports: list[tuple[BatchStage, list[int], str]] = []

    async def earliest_pending_batch_number(self, stage: BatchStage) -> int | None:
        pending = [n for n, ids in self.tx_ids.items() if stage not in ids]
        return min(pending) if pending else None

    async def pending_batch_numbers(self, stage: BatchStage, *, from_number: int) -> list[int]:
        return sorted(n for n, ids in self.tx_ids.items() if stage not in ids and n >= from_number)

    async def known_batch_numbers(self, numbers: Sequence[int]) -> list[int]:
        return sorted(n for n in numbers if n in self.status)

    async def import_stage_transition(
        self,
        stage: BatchStage,
        *,
        batch_numbers: Sequence[int],
        l1_transaction_hash: str,
    ) -> L1Transaction:
        self.imports.append((stage, list(batch_numbers), l1_transaction_hash))
        tx_id = self.transactions.setdefault(l1_transaction_hash, len(self.transactions) + 1)
        for n in batch_numbers:
            self.tx_ids[n][stage] = tx_id
            self.status[n] = max(self.status[n], stage.target_status)
        return L1Transaction(hash=l1_transaction_hash, id=tx_id)


class FakeMarkerLocator:
    def __init__(self, markers: dict[tuple[int, BatchStage], str]) -> None:
        self.markers = markers

    async def marker_transaction_hash(self, *, batch_number: int, stage: BatchStage) -> str | None:
        return self.markers.get((batch_number, stage))


class FakeReceiptFetcher:
    def __init__(self, receipts: dict[str, list[RawLog]]) -> None:
        self.receipts = receipts
        self.requested: list[str] = []

    async def fetch_receipt_logs(self, *, transaction_hash: str) -> list[RawLog]:
        self.requested.append(transaction_hash)
        return self.receipts[transaction_hash]
