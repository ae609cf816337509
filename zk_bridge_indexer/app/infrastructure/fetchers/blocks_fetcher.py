from __future__ import annotations

from typing import Any, Sequence

from web3 import AsyncWeb3

from zk_bridge_indexer.app.domain.ports.out import BlocksFetcher


class Web3BlocksFetcher(BlocksFetcher):
    """
    Batched eth_getBlockByNumber(n, false): one HTTP round trip for all blocks.
    """

    def __init__(self, *, w3: AsyncWeb3) -> None:
        self._w3 = w3

    async def fetch_blocks(self, *, block_numbers: Sequence[int]) -> list[dict[str, Any]]:
        if not block_numbers:
            return []

        async with self._w3.batch_requests() as batch:
            for number in block_numbers:
                batch.add(self._w3.eth.get_block(number, full_transactions=False))
            responses = await batch.async_execute()

        return [
            {"number": block["number"], "timestamp": block["timestamp"]}
            for block in responses
            if block is not None
        ]
