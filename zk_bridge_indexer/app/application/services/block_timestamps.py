from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from zk_bridge_indexer.app.application.services.retrying_caller import (
    RetryAttemptsExhausted,
    RetryCancelled,
    RetryingCaller,
)
from zk_bridge_indexer.app.domain.models.bridge import DecodedBridgeLog
from zk_bridge_indexer.app.domain.ports.out import BlocksFetcher

logger = logging.getLogger(__name__)


class BlockTimestampResolver:
    """
    Maps block numbers of decoded deposits to block timestamps (UTC) using
    one batched block request.

    Any failure gives an empty mapping, never a partial one: callers treat a
    missing timestamp as unknown.
    """

    def __init__(self, *, fetcher: BlocksFetcher, retrying_caller: RetryingCaller) -> None:
        self._fetcher = fetcher
        self._caller = retrying_caller

    async def resolve(self, decoded: Iterable[DecodedBridgeLog]) -> dict[int, datetime]:
        block_numbers = list(
            dict.fromkeys(
                d.log.block_number
                for d in decoded
                if d.is_deposit and d.log.block_number is not None
            )
        )
        if not block_numbers:
            return {}

        try:
            blocks = await self._caller.call(
                lambda: self._fetcher.fetch_blocks(block_numbers=block_numbers),
                error_context=f"Cannot fetch blocks with batch request. Blocks: {block_numbers}",
            )
        except (RetryAttemptsExhausted, RetryCancelled) as exc:
            logger.warning("Block timestamps unavailable: %s", exc)
            return {}

        out: dict[int, datetime] = {}
        for block in blocks:
            if not block or block.get("number") is None or block.get("timestamp") is None:
                continue
            out[int(block["number"])] = datetime.fromtimestamp(int(block["timestamp"]), timezone.utc)

        missing = [n for n in block_numbers if n not in out]
        if missing:
            logger.warning(
                "Batch block request returned no data for blocks %s, ignoring the whole response",
                missing,
            )
            return {}

        return out
