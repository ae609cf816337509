from __future__ import annotations

import pytest
from eth_abi import encode
from hexbytes import HexBytes
from web3.datastructures import AttributeDict

from zk_bridge_indexer.app.domain.models.batches import BatchStage
from zk_bridge_indexer.app.domain.models.bridge import L1Token
from zk_bridge_indexer.app.domain.signatures import DECIMALS_SELECTOR, SYMBOL_SELECTOR
from zk_bridge_indexer.app.infrastructure.fetchers._web3_logs import raw_log_from_web3
from zk_bridge_indexer.app.infrastructure.fetchers.erc20_tokens_fetcher import (
    Erc20BatchRequestError,
    Web3Erc20TokenMetadataFetcher,
    decode_decimals,
    decode_symbol,
)
from zk_bridge_indexer.app.infrastructure.fetchers.zksync_fetchers import ZkSyncBatchMarkerLocator

TOKEN = "0x" + "ab" * 20
OTHER_TOKEN = "0x" + "cd" * 20


class _FakeW3:
    def __init__(self, provider):
        self.provider = provider

    @staticmethod
    def to_checksum_address(address):
        return address


class _FakeProvider:
    """
    Answers single requests with a fixed response and batches via `answer`,
    a callable (method, params) -> JSON-RPC response body.
    """

    def __init__(self, response=None, *, answer=None):
        self.response = response
        self.answer = answer
        self.requests = []
        self.batches = []

    async def make_request(self, method, params):
        self.requests.append((method, params))
        return self.response

    async def make_batch_request(self, requests):
        self.batches.append(list(requests))
        if self.answer is None:
            return self.response
        return [{"jsonrpc": "2.0", "id": i, **self.answer(m, p)} for i, (m, p) in enumerate(requests)]


def _contracts(returns):
    """returns: {(token, selector): bytes | "revert"}"""

    def answer(method, params):
        call = params[0]
        value = returns.get((call["to"], call["data"]), b"")
        if value == "revert":
            return {"error": {"code": 3, "message": "execution reverted"}}
        return {"result": "0x" + value.hex()}

    return answer


def test_symbol_decoding():
    assert decode_symbol(encode(["string"], ["USDC"])) == "USDC"
    assert decode_symbol(b"MKR".ljust(32, b"\x00")) == "MKR"
    assert decode_symbol(b"") is None


def test_decimals_decoding():
    assert decode_decimals(encode(["uint256"], [18])) == 18
    assert decode_decimals(encode(["uint256"], [256])) is None
    assert decode_decimals(b"") is None


async def test_metadata_of_all_tokens_in_one_batch():
    provider = _FakeProvider(
        answer=_contracts(
            {
                (TOKEN, SYMBOL_SELECTOR): encode(["string"], ["USDC"]),
                (TOKEN, DECIMALS_SELECTOR): encode(["uint256"], [6]),
                (OTHER_TOKEN, SYMBOL_SELECTOR): b"MKR".ljust(32, b"\x00"),
                (OTHER_TOKEN, DECIMALS_SELECTOR): encode(["uint256"], [18]),
            }
        )
    )
    fetcher = Web3Erc20TokenMetadataFetcher(w3=_FakeW3(provider))

    result = await fetcher.fetch_metadata(token_addresses=[TOKEN, OTHER_TOKEN])

    assert result == {
        TOKEN: L1Token(address=TOKEN, symbol="USDC", decimals=6),
        OTHER_TOKEN: L1Token(address=OTHER_TOKEN, symbol="MKR", decimals=18),
    }
    assert len(provider.batches) == 1
    assert len(provider.batches[0]) == 4
    assert provider.requests == []


async def test_reverting_getter_leaves_field_empty():
    provider = _FakeProvider(
        answer=_contracts(
            {
                (TOKEN, SYMBOL_SELECTOR): "revert",
                (TOKEN, DECIMALS_SELECTOR): encode(["uint256"], [18]),
            }
        )
    )
    fetcher = Web3Erc20TokenMetadataFetcher(w3=_FakeW3(provider))

    result = await fetcher.fetch_metadata(token_addresses=[TOKEN])

    assert result[TOKEN] == L1Token(address=TOKEN, symbol=None, decimals=18)


async def test_failed_batch_raises():
    provider = _FakeProvider({"jsonrpc": "2.0", "id": None, "error": {"code": -32005, "message": "rate limited"}})
    fetcher = Web3Erc20TokenMetadataFetcher(w3=_FakeW3(provider))

    with pytest.raises(Erc20BatchRequestError):
        await fetcher.fetch_metadata(token_addresses=[TOKEN])


async def test_no_tokens_sends_nothing():
    provider = _FakeProvider(answer=_contracts({}))
    fetcher = Web3Erc20TokenMetadataFetcher(w3=_FakeW3(provider))

    assert await fetcher.fetch_metadata(token_addresses=[]) == {}
    assert provider.batches == []


def test_raw_log_from_web3_normalizes_hex():
    log = AttributeDict(
        {
            "address": "0x2a3DD3EB832aF982ec71669E178424b10Dca2EDe",
            "topics": [HexBytes("0x" + "AB" * 32)],
            "data": HexBytes("0x0102"),
            "transactionHash": HexBytes("0x" + "01" * 32),
            "blockNumber": 7,
        }
    )

    raw = raw_log_from_web3(log)

    assert raw.address == "0x2a3dd3eb832af982ec71669e178424b10dca2ede"
    assert raw.topics == ("0x" + "ab" * 32,)
    assert raw.data == b"\x01\x02"
    assert raw.transaction_hash == "0x" + "01" * 32
    assert raw.block_number == 7


async def test_marker_locator_reads_stage_field():
    provider = _FakeProvider(
        {"jsonrpc": "2.0", "id": 1, "result": {"commitTxHash": "0x" + "CC" * 32, "proveTxHash": None}}
    )
    locator = ZkSyncBatchMarkerLocator(w3=_FakeW3(provider))

    assert await locator.marker_transaction_hash(batch_number=5, stage=BatchStage.COMMIT) == "0x" + "cc" * 32
    assert await locator.marker_transaction_hash(batch_number=5, stage=BatchStage.PROVE) is None
    assert provider.requests[0] == ("zks_getL1BatchDetails", [5])


async def test_marker_locator_unknown_batch():
    locator = ZkSyncBatchMarkerLocator(w3=_FakeW3(_FakeProvider({"result": None})))

    assert await locator.marker_transaction_hash(batch_number=99, stage=BatchStage.EXECUTE) is None


async def test_marker_locator_rpc_error_raises():
    locator = ZkSyncBatchMarkerLocator(
        w3=_FakeW3(provider=_FakeProvider({"error": {"code": -32000, "message": "boom"}}))
    )

    with pytest.raises(RuntimeError, match="zks_getL1BatchDetails"):
        await locator.marker_transaction_hash(batch_number=1, stage=BatchStage.COMMIT)


async def test_marker_locator_treats_zero_hash_as_not_observed():
    provider = _FakeProvider({"jsonrpc": "2.0", "id": 1, "result": {"executeTxHash": "0x" + "00" * 32}})
    locator = ZkSyncBatchMarkerLocator(w3=_FakeW3(provider))

    assert await locator.marker_transaction_hash(batch_number=5, stage=BatchStage.EXECUTE) is None
