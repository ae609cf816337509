from __future__ import annotations

from web3 import AsyncHTTPProvider, AsyncWeb3

from zk_bridge_indexer.app.application.services.retrying_caller import RetryingCaller
from zk_bridge_indexer.app.config import settings
from zk_bridge_indexer.app.domain.models.bridge import Layer


def make_async_web3(layer: Layer) -> AsyncWeb3:
    """AsyncWeb3 over HTTP for the given layer's RPC URL."""
    return AsyncWeb3(
        AsyncHTTPProvider(
            settings.rpc_url(layer),
            request_kwargs={"timeout": settings.rpc_timeout_seconds},
        )
    )


def make_rpc_retrying_caller() -> RetryingCaller:
    """Log, block and receipt fetches: keep trying unless RPC_MAX_ATTEMPTS is set."""
    return RetryingCaller(
        max_attempts=settings.rpc_max_attempts,
        pause_seconds=settings.retry_pause_seconds,
    )


def make_contract_read_retrying_caller() -> RetryingCaller:
    """Token metadata reads: partial data is acceptable, give up early."""
    return RetryingCaller(
        max_attempts=settings.contract_read_max_attempts,
        pause_seconds=settings.retry_pause_seconds,
    )
