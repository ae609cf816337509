from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Union

BURN_ADDRESS = "0x" + "00" * 20

# leaf_type of a bridged message (not an asset transfer)
MESSAGE_LEAF_TYPE = 1


class Layer(str, Enum):
    L1 = "l1"
    L2 = "l2"


class OperationType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    CLAIM = "claim"


@dataclass(frozen=True)
class RawLog:
    """
    Event log as returned by eth_getLogs / a transaction receipt.

    address, topics and transaction_hash are lower-case 0x-prefixed hex strings.
    """

    address: str
    topics: tuple[str, ...]
    data: bytes
    transaction_hash: str
    block_number: int | None

    @property
    def first_topic(self) -> str | None:
        return self.topics[0] if self.topics else None


@dataclass(frozen=True)
class DepositEvent:
    leaf_type: int
    origin_network: int
    origin_address: str
    destination_network: int
    destination_address: str
    amount: int
    metadata: bytes
    deposit_count: int


@dataclass(frozen=True)
class ClaimEvent:
    index: int
    origin_network: int
    origin_address: str
    destination_address: str
    amount: int


BridgeEvent = Union[DepositEvent, ClaimEvent]


@dataclass(frozen=True)
class DecodedBridgeLog:
    log: RawLog
    event: BridgeEvent

    @property
    def is_deposit(self) -> bool:
        return isinstance(self.event, DepositEvent)


@dataclass(frozen=True)
class TokenRef:
    """
    Token identity derived from a deposit: an L1 address, an L2 address, or neither.
    """

    l1_address: str | None = None
    l2_address: str | None = None

    def __post_init__(self) -> None:
        if self.l1_address is not None and self.l2_address is not None:
            raise ValueError("TokenRef cannot reference both an L1 and an L2 token")


def token_ref_from_deposit(event: DepositEvent) -> TokenRef:
    """
    Classify the origin token of a deposit.

    origin_network 0 is the base chain, 1 is the rollup. Message leaves,
    other networks and the burn address carry no token.
    """
    if event.leaf_type == MESSAGE_LEAF_TYPE or event.origin_network > 1:
        return TokenRef()

    token_address = event.origin_address.lower()
    if token_address == BURN_ADDRESS:
        return TokenRef()

    if event.origin_network == 0:
        return TokenRef(l1_address=token_address)
    return TokenRef(l2_address=token_address)


@dataclass(frozen=True)
class L1Token:
    address: str
    symbol: str | None = None
    decimals: int | None = None
    id: int | None = None


@dataclass(frozen=True)
class Operation:
    type: OperationType
    index: int
    amount: int
    layer: Layer
    transaction_hash: str
    l1_token_id: int | None = None
    l2_token_address: str | None = None
    block_number: int | None = None
    block_timestamp: datetime | None = None

    def as_record(self) -> dict[str, Any]:
        """
        Sparse record for the import step: absent optional fields are left out
        and the hash is keyed by the layer that produced the event.
        """
        hash_field = "l1_transaction_hash" if self.layer is Layer.L1 else "l2_transaction_hash"
        record: dict[str, Any] = {
            "type": self.type.value,
            "index": self.index,
            "amount": self.amount,
            hash_field: self.transaction_hash,
        }
        optional = {
            "l1_token_id": self.l1_token_id,
            "l2_token_address": self.l2_token_address,
            "block_number": self.block_number,
            "block_timestamp": self.block_timestamp,
        }
        record.update({k: v for k, v in optional.items() if v is not None})
        return record
