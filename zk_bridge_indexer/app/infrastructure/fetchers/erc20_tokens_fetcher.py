from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from web3 import AsyncWeb3
from web3.types import RPCEndpoint

from zk_bridge_indexer.app.domain.models.bridge import L1Token
from zk_bridge_indexer.app.domain.ports.out import Erc20TokenMetadataFetcher
from zk_bridge_indexer.app.domain.signatures import DECIMALS_SELECTOR, SYMBOL_SELECTOR

_ETH_CALL = RPCEndpoint("eth_call")


class Erc20BatchRequestError(RuntimeError):
    """The batched request failed as a whole (transport or node error)."""


def decode_symbol(raw: bytes) -> str | None:
    """symbol() return data: string ABI with a bytes32 fallback (MKR-style tokens)."""
    if not raw:
        return None

    # 1) Try standard
    try:
        (value,) = abi_decode(["string"], raw)
        return _normalize_symbol(value)
    except (DecodingError, OverflowError, ValueError):
        pass

    # 2) Fallback to legacy bytes32
    try:
        (value,) = abi_decode(["bytes32"], raw)
    except (DecodingError, OverflowError, ValueError):
        return None
    return _normalize_symbol(value)


def decode_decimals(raw: bytes) -> int | None:
    if not raw:
        return None

    # legacy tokens return uint256; accept anything that fits uint8
    try:
        (value,) = abi_decode(["uint256"], raw[:32])
    except (DecodingError, OverflowError, ValueError):
        return None

    d = int(value)
    return d if 0 <= d <= 255 else None


def _normalize_symbol(val: Any) -> str | None:
    if val is None:
        return None

    if isinstance(val, str):
        return val.replace("\x00", "").strip() or None

    if isinstance(val, (bytes, bytearray, memoryview)):
        try:
            return bytes(val).rstrip(b"\x00").decode("utf-8").strip() or None
        except UnicodeDecodeError:
            return None

    return None


def _result_bytes(response: Any) -> bytes:
    # a reverting getter comes back as a per-item error
    if not isinstance(response, dict) or response.get("error"):
        return b""
    result = response.get("result")
    if not result:
        return b""
    if isinstance(result, (bytes, bytearray)):
        return bytes(result)
    s = str(result)
    try:
        return bytes.fromhex(s[2:] if s.startswith(("0x", "0X")) else s)
    except ValueError:
        return b""


class Web3Erc20TokenMetadataFetcher(Erc20TokenMetadataFetcher):
    """
    ERC-20 metadata fetcher using one JSON-RPC batch of raw eth_calls.

    For each token:
      - symbol()   (0x95d89b41) -> str | None, string ABI with bytes32 fallback
      - decimals() (0x313ce567) -> int | None, must fit uint8

    Per-call reverts or empty responses leave the field None.
    A failed batch raises Erc20BatchRequestError so the caller can retry it.
    """

    def __init__(self, *, w3: AsyncWeb3) -> None:
        self._w3 = w3

    async def fetch_metadata(self, *, token_addresses: Sequence[str]) -> dict[str, L1Token]:
        if not token_addresses:
            return {}

        requests = []
        for address in token_addresses:
            to = self._w3.to_checksum_address(address)
            requests.append((_ETH_CALL, [{"to": to, "data": SYMBOL_SELECTOR}, "latest"]))
            requests.append((_ETH_CALL, [{"to": to, "data": DECIMALS_SELECTOR}, "latest"]))

        responses = await self._w3.provider.make_batch_request(requests)

        # a failed batch is answered with a single error object
        if not isinstance(responses, list):
            raise Erc20BatchRequestError(f"Batched eth_call failed: {responses!r}")
        if len(responses) != len(requests):
            raise Erc20BatchRequestError(
                f"Batched eth_call returned {len(responses)} of {len(requests)} responses"
            )

        responses = sorted(responses, key=lambda r: r.get("id") or 0)

        tokens: dict[str, L1Token] = {}
        for i, address in enumerate(token_addresses):
            tokens[address] = L1Token(
                address=address,
                symbol=decode_symbol(_result_bytes(responses[2 * i])),
                decimals=decode_decimals(_result_bytes(responses[2 * i + 1])),
            )
        return tokens
