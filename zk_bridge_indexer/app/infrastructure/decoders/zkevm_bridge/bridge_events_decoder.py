from __future__ import annotations

from typing import Any

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError

from zk_bridge_indexer.app.domain.models.bridge import (
    BridgeEvent,
    ClaimEvent,
    DecodedBridgeLog,
    DepositEvent,
    RawLog,
)
from zk_bridge_indexer.app.domain.ports.out import BridgeLogDecoder
from zk_bridge_indexer.app.domain.signatures import BRIDGE_EVENT_TOPIC, CLAIM_EVENT_TOPIC

# BridgeEvent(uint8 leafType, uint32 originNetwork, address originAddress,
#             uint32 destinationNetwork, address destinationAddress,
#             uint256 amount, bytes metadata, uint32 depositCount)
BRIDGE_EVENT_TYPES = ["uint8", "uint32", "address", "uint32", "address", "uint256", "bytes", "uint32"]

# ClaimEvent(uint32 index, uint32 originNetwork, address originAddress,
#            address destinationAddress, uint256 amount)
CLAIM_EVENT_TYPES = ["uint32", "uint32", "address", "address", "uint256"]


class BridgeEventDecodeError(ValueError):
    """Malformed payload of a single bridge log."""

    def __init__(self, log: RawLog, reason: str) -> None:
        super().__init__(
            f"Cannot decode bridge log topic0={log.first_topic} tx={log.transaction_hash}: {reason}"
        )
        self.log = log


class UnsupportedBridgeEventError(ValueError):
    """topic0 is neither BridgeEvent nor ClaimEvent."""


class ZkEvmBridgeEventDecoder(BridgeLogDecoder):
    """
    Decoder for the two zkEVM bridge events.

    All fields of both events are non-indexed, so the whole payload lives in
    `data`. Dispatch is done on topic0 only:
      - BridgeEvent -> DepositEvent
      - ClaimEvent  -> ClaimEvent
    """

    def decode(self, log: RawLog) -> DecodedBridgeLog:
        topic0 = (log.first_topic or "").lower()

        if topic0 == BRIDGE_EVENT_TOPIC:
            event: BridgeEvent = self._decode_deposit(log)
        elif topic0 == CLAIM_EVENT_TOPIC:
            event = self._decode_claim(log)
        else:
            raise UnsupportedBridgeEventError(f"Unsupported bridge event topic0={log.first_topic!r}")

        return DecodedBridgeLog(log=log, event=event)

    def _decode_deposit(self, log: RawLog) -> DepositEvent:
        (
            leaf_type,
            origin_network,
            origin_address,
            destination_network,
            destination_address,
            amount,
            metadata,
            deposit_count,
        ) = self._decode_data(log, BRIDGE_EVENT_TYPES)

        return DepositEvent(
            leaf_type=leaf_type,
            origin_network=origin_network,
            origin_address=self._normalize_address(origin_address),
            destination_network=destination_network,
            destination_address=self._normalize_address(destination_address),
            amount=amount,
            metadata=bytes(metadata),
            deposit_count=deposit_count,
        )

    def _decode_claim(self, log: RawLog) -> ClaimEvent:
        index, origin_network, origin_address, destination_address, amount = self._decode_data(
            log, CLAIM_EVENT_TYPES
        )

        return ClaimEvent(
            index=index,
            origin_network=origin_network,
            origin_address=self._normalize_address(origin_address),
            destination_address=self._normalize_address(destination_address),
            amount=amount,
        )

    @staticmethod
    def _decode_data(log: RawLog, types: list[str]) -> tuple[Any, ...]:
        try:
            return tuple(abi_decode(types, bytes(log.data)))
        except (DecodingError, OverflowError, ValueError) as exc:
            raise BridgeEventDecodeError(log, str(exc)) from exc

    @staticmethod
    def _normalize_address(val: Any) -> str:
        # eth_abi returns checksummed "0x..." strings for address
        if isinstance(val, (bytes, bytearray)):
            return "0x" + bytes(val).hex()
        return str(val).lower()
