from __future__ import annotations

from zk_bridge_indexer.app.application.services.block_bounds import (
    BlockRange,
    parse_block_selector,
)
from zk_bridge_indexer.app.domain.models.bridge import Layer
from zk_bridge_indexer.app.infrastructure.db.engine import create_app_async_engine
from zk_bridge_indexer.app.infrastructure.factories.domain.zkevm_bridge_reconciler_factory import (
    zkevm_bridge_reconciler_factory,
)


async def zkevm_bridge_operations_task(
    *,
    layer: str,
    from_block: int | str,
    to_block: int | str,
    backend: str = "sqlalchemy",
) -> None:
    """
    Task: reconcile zkEVM bridge operations of one chain for a block range.

    - reads BridgeEvent / ClaimEvent logs of the layer's bridge contract,
    - resolves L1 tokens (domain.zkevm_bridge_l1_tokens) and block timestamps,
    - upserts into domain.zkevm_bridge_operations.

    from_block / to_block can be ints, numeric strings or block tags
    ("earliest", "latest", "safe", "finalized", "pending").
    """
    try:
        resolved_layer = Layer(layer.strip().lower())
    except ValueError:
        raise ValueError(f"Unsupported layer: {layer!r} (expected 'l1' or 'l2')")

    block_range = BlockRange(
        from_block=parse_block_selector(from_block),
        to_block=parse_block_selector(to_block),
    )
    block_range.validate()

    engine = create_app_async_engine()
    try:
        reconciler = zkevm_bridge_reconciler_factory(
            backend=backend,
            engine=engine,
            layer=resolved_layer,
        )
        await reconciler.reconcile_block_range(block_range)
    finally:
        await engine.dispose()
