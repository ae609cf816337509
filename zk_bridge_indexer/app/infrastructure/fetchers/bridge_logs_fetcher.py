from __future__ import annotations

from typing import Any, Sequence

from web3 import AsyncWeb3

from zk_bridge_indexer.app.domain.models.bridge import RawLog
from zk_bridge_indexer.app.domain.ports.out import BlockSelector, BridgeLogsFetcher
from zk_bridge_indexer.app.infrastructure.fetchers._web3_logs import raw_log_from_web3


class Web3BridgeLogsFetcher(BridgeLogsFetcher):
    """
    eth_getLogs for a single contract; the given topics are OR-matched at
    position 0 ({"topics": [[sig1, sig2]]}).
    """

    def __init__(self, *, w3: AsyncWeb3) -> None:
        self._w3 = w3

    async def fetch_logs(
        self,
        *,
        from_block: BlockSelector,
        to_block: BlockSelector,
        address: str,
        topics: Sequence[str],
    ) -> list[RawLog]:
        filter_params: dict[str, Any] = {
            "fromBlock": from_block,
            "toBlock": to_block,
            # web3 expects checksum hex string
            "address": self._w3.to_checksum_address(address),
            "topics": [list(topics)],
        }
        logs = await self._w3.eth.get_logs(filter_params)
        return [raw_log_from_web3(log) for log in logs]
