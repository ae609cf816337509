from __future__ import annotations

from datetime import datetime, timezone

from tests.helpers import FakeBlocksFetcher, claim_log, deposit_log, no_sleep
from zk_bridge_indexer.app.application.services.block_timestamps import BlockTimestampResolver
from zk_bridge_indexer.app.application.services.retrying_caller import RetryingCaller
from zk_bridge_indexer.app.infrastructure.decoders.zkevm_bridge.bridge_events_decoder import (
    ZkEvmBridgeEventDecoder,
)

decoder = ZkEvmBridgeEventDecoder()


async def test_one_request_for_distinct_deposit_blocks(unbounded_caller):
    fetcher = FakeBlocksFetcher({100: 1_700_000_000, 101: 1_700_000_012})
    decoded = [
        decoder.decode(deposit_log(block_number=101)),
        decoder.decode(deposit_log(block_number=100)),
        decoder.decode(deposit_log(block_number=101)),
        decoder.decode(claim_log(block_number=555)),  # claims need no timestamp
    ]

    result = await BlockTimestampResolver(fetcher=fetcher, retrying_caller=unbounded_caller).resolve(decoded)

    assert fetcher.requests == [[101, 100]]
    assert result == {
        100: datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc),
        101: datetime(2023, 11, 14, 22, 13, 32, tzinfo=timezone.utc),
    }


async def test_no_deposits_means_no_request(unbounded_caller):
    fetcher = FakeBlocksFetcher({})

    result = await BlockTimestampResolver(fetcher=fetcher, retrying_caller=unbounded_caller).resolve(
        [decoder.decode(claim_log())]
    )

    assert result == {}
    assert fetcher.requests == []


async def test_transient_failures_are_retried(unbounded_caller):
    fetcher = FakeBlocksFetcher({100: 0}, failures=4)

    result = await BlockTimestampResolver(fetcher=fetcher, retrying_caller=unbounded_caller).resolve(
        [decoder.decode(deposit_log(block_number=100))]
    )

    assert len(fetcher.requests) == 5
    assert result == {100: datetime(1970, 1, 1, tzinfo=timezone.utc)}


async def test_exhausted_retries_give_empty_mapping():
    fetcher = FakeBlocksFetcher({100: 0}, failures=10)
    caller = RetryingCaller(max_attempts=2, pause_seconds=0, sleep=no_sleep)

    result = await BlockTimestampResolver(fetcher=fetcher, retrying_caller=caller).resolve(
        [decoder.decode(deposit_log(block_number=100))]
    )

    assert result == {}


async def test_partial_batch_response_is_discarded(unbounded_caller):
    fetcher = FakeBlocksFetcher({100: 1})  # block 101 missing from the response

    result = await BlockTimestampResolver(fetcher=fetcher, retrying_caller=unbounded_caller).resolve(
        [
            decoder.decode(deposit_log(block_number=100)),
            decoder.decode(deposit_log(block_number=101)),
        ]
    )

    assert result == {}
