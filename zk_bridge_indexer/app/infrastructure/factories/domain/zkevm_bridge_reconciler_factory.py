from __future__ import annotations

from typing import Callable, Dict

from sqlalchemy.ext.asyncio import AsyncEngine

from zk_bridge_indexer.app.application.services.block_timestamps import BlockTimestampResolver
from zk_bridge_indexer.app.application.services.reconcile_bridge_operations import (
    BridgeOperationsReconciler,
)
from zk_bridge_indexer.app.application.services.token_resolver import TokenResolver
from zk_bridge_indexer.app.config import settings
from zk_bridge_indexer.app.domain.models.bridge import Layer
from zk_bridge_indexer.app.infrastructure.adapters.domain.zkevm_bridge_l1_tokens_repository import (
    SqlAlchemyL1TokensRepository,
)
from zk_bridge_indexer.app.infrastructure.adapters.domain.zkevm_bridge_operations_repository import (
    SqlAlchemyBridgeOperationsRepository,
)
from zk_bridge_indexer.app.infrastructure.decoders.zkevm_bridge.bridge_events_decoder import (
    ZkEvmBridgeEventDecoder,
)
from zk_bridge_indexer.app.infrastructure.factories.web3_factory import (
    make_async_web3,
    make_contract_read_retrying_caller,
    make_rpc_retrying_caller,
)
from zk_bridge_indexer.app.infrastructure.fetchers.blocks_fetcher import Web3BlocksFetcher
from zk_bridge_indexer.app.infrastructure.fetchers.bridge_logs_fetcher import Web3BridgeLogsFetcher
from zk_bridge_indexer.app.infrastructure.fetchers.erc20_tokens_fetcher import (
    Web3Erc20TokenMetadataFetcher,
)

BridgeReconcilerFactory = Callable[[AsyncEngine, Layer], BridgeOperationsReconciler]

_BRIDGE_RECONCILER_REGISTRY: Dict[str, BridgeReconcilerFactory] = {}


def _make_sqlalchemy_reconciler(engine: AsyncEngine, layer: Layer) -> BridgeOperationsReconciler:
    """
    Wire dependencies for SQLAlchemy backend:
    - AsyncWeb3 of the layer whose bridge logs are read (logs, block timestamps)
    - AsyncWeb3 of L1 for token metadata (L1 tokens live on L1 whatever the layer)
    - SQLAlchemy adapters for domain.zkevm_bridge_l1_tokens / domain.zkevm_bridge_operations
    """
    w3 = make_async_web3(layer)
    w3_l1 = w3 if layer is Layer.L1 else make_async_web3(Layer.L1)
    rpc_caller = make_rpc_retrying_caller()

    token_resolver = TokenResolver(
        repository=SqlAlchemyL1TokensRepository(engine),
        metadata_fetcher=Web3Erc20TokenMetadataFetcher(w3=w3_l1),
        retrying_caller=make_contract_read_retrying_caller(),
    )

    return BridgeOperationsReconciler(
        layer=layer,
        bridge_contract=settings.bridge_contract(layer),
        logs_fetcher=Web3BridgeLogsFetcher(w3=w3),
        decoder=ZkEvmBridgeEventDecoder(),
        token_resolver=token_resolver,
        timestamp_resolver=BlockTimestampResolver(
            fetcher=Web3BlocksFetcher(w3=w3),
            retrying_caller=rpc_caller,
        ),
        repository=SqlAlchemyBridgeOperationsRepository(engine),
        retrying_caller=rpc_caller,
        import_enabled=settings.bridge_import_enabled,
    )


# Register backends
_BRIDGE_RECONCILER_REGISTRY["sqlalchemy"] = _make_sqlalchemy_reconciler


def zkevm_bridge_reconciler_factory(
    *,
    backend: str,
    engine: AsyncEngine,
    layer: Layer,
) -> BridgeOperationsReconciler:
    """
    Create a bridge operations reconciler for the given backend and layer.
    """
    try:
        factory = _BRIDGE_RECONCILER_REGISTRY[backend]
    except KeyError:
        raise ValueError(f"Unsupported bridge reconciler backend: {backend!r}")

    return factory(engine, layer)
