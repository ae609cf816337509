from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from zk_bridge_indexer.app.config import settings


def create_app_async_engine(*, echo: bool = False, pool_size: int = 5) -> AsyncEngine:
    """
    AsyncEngine over domain.zkevm_bridge_* and domain.zksync_* tables.

    A bridge or batch task run creates one engine, runs a single reconcile
    or advance step through it and disposes it, so the pool stays small.
    """
    return create_async_engine(
        settings.database_url,  # postgresql+asyncpg://...
        echo=echo,
        pool_size=pool_size,
        pool_pre_ping=True,
    )
