from __future__ import annotations

import logging

from zk_bridge_indexer.app.application.services.block_bounds import BlockRange
from zk_bridge_indexer.app.application.services.block_timestamps import BlockTimestampResolver
from zk_bridge_indexer.app.application.services.log_filter import filter_bridge_logs
from zk_bridge_indexer.app.application.services.operation_builder import build_operations
from zk_bridge_indexer.app.application.services.retrying_caller import RetryingCaller
from zk_bridge_indexer.app.application.services.token_resolver import TokenResolver
from zk_bridge_indexer.app.domain.models.bridge import (
    DecodedBridgeLog,
    DepositEvent,
    Layer,
    Operation,
    RawLog,
)
from zk_bridge_indexer.app.domain.ports.out import (
    BridgeLogDecoder,
    BridgeLogsFetcher,
    BridgeOperationsRepository,
)
from zk_bridge_indexer.app.domain.signatures import BRIDGE_TOPICS

logger = logging.getLogger(__name__)


class BridgeOperationsReconciler:
    """
    Use case: bridge logs of one chain for a block range -> operation records.

    Pipeline:
      eth_getLogs -> filter -> decode -> (token ids, block timestamps) -> build -> import

    `layer` says which chain the logs come from and drives the operation type.
    `import_enabled` gates every write: with False neither new L1 tokens nor
    operations are stored, and the operations are only returned.
    """

    def __init__(
        self,
        *,
        layer: Layer,
        bridge_contract: str,
        logs_fetcher: BridgeLogsFetcher,
        decoder: BridgeLogDecoder,
        token_resolver: TokenResolver,
        timestamp_resolver: BlockTimestampResolver,
        repository: BridgeOperationsRepository,
        retrying_caller: RetryingCaller,
        import_enabled: bool = True,
    ) -> None:
        self._layer = layer
        self._bridge_contract = bridge_contract.lower()
        self._logs_fetcher = logs_fetcher
        self._decoder = decoder
        self._token_resolver = token_resolver
        self._timestamp_resolver = timestamp_resolver
        self._repository = repository
        self._caller = retrying_caller
        self._import_enabled = import_enabled

    async def reconcile_block_range(self, block_range: BlockRange) -> list[Operation]:
        block_range.validate()

        logs = await self._caller.call(
            lambda: self._logs_fetcher.fetch_logs(
                from_block=block_range.from_block,
                to_block=block_range.to_block,
                address=self._bridge_contract,
                topics=BRIDGE_TOPICS,
            ),
            error_context=(
                f"Cannot fetch logs for the block range "
                f"{block_range.from_block}..{block_range.to_block}"
            ),
        )

        operations = await self.prepare_operations(logs)

        if operations and self._import_enabled:
            await self._repository.import_operations(operations)

        logger.info(
            "Reconciled %s bridge operation(s) on %s for blocks %s..%s",
            len(operations),
            self._layer.value.upper(),
            block_range.from_block,
            block_range.to_block,
        )
        return operations

    async def prepare_operations(self, logs: list[RawLog]) -> list[Operation]:
        decoded = self._decode_all(
            filter_bridge_logs(logs, bridge_contract=self._bridge_contract)
        )
        if not decoded:
            return []

        deposits = [d.event for d in decoded if isinstance(d.event, DepositEvent)]

        timestamps = await self._timestamp_resolver.resolve(decoded)
        tokens = await self._token_resolver.resolve(deposits, insert_missing=self._import_enabled)

        return build_operations(
            decoded,
            layer=self._layer,
            tokens=tokens,
            timestamps=timestamps,
        )

    def _decode_all(self, logs: list[RawLog]) -> list[DecodedBridgeLog]:
        decoded: list[DecodedBridgeLog] = []
        for log in logs:
            try:
                decoded.append(self._decoder.decode(log))
            except ValueError:
                logger.exception(
                    "Skipping undecodable bridge log",
                    extra={"transaction_hash": log.transaction_hash, "layer": self._layer.value},
                )
        return decoded
