from __future__ import annotations

import logging
from typing import Iterable

from zk_bridge_indexer.app.application.services.retrying_caller import (
    RetryAttemptsExhausted,
    RetryCancelled,
    RetryingCaller,
)
from zk_bridge_indexer.app.domain.models.bridge import (
    DepositEvent,
    L1Token,
    token_ref_from_deposit,
)
from zk_bridge_indexer.app.domain.ports.out import (
    Erc20TokenMetadataFetcher,
    L1TokensRepository,
)

logger = logging.getLogger(__name__)


def l1_token_candidates(events: Iterable[DepositEvent]) -> list[str]:
    """Distinct L1 token addresses referenced by the deposits, in first-seen order."""
    candidates: dict[str, None] = {}
    for event in events:
        ref = token_ref_from_deposit(event)
        if ref.l1_address is not None:
            candidates.setdefault(ref.l1_address, None)
    return list(candidates)


class TokenResolver:
    """
    Resolves L1 token addresses of deposit events into registry rows with ids.

    Strategy:
    - read existing rows from the registry,
    - read symbol()/decimals() of all unknown addresses in one batched RPC call
      (bounded retries of the whole batch; a failed read leaves the field empty),
    - insert all new rows with a single call,
    - re-query the rows the insert did not return: another fetcher
      inserted them between our read and our insert.

    Only L1 tokens are resolved; the metadata fetcher must point at L1.
    """

    def __init__(
        self,
        *,
        repository: L1TokensRepository,
        metadata_fetcher: Erc20TokenMetadataFetcher,
        retrying_caller: RetryingCaller,
    ) -> None:
        self._repository = repository
        self._fetcher = metadata_fetcher
        self._caller = retrying_caller

    async def resolve(
        self,
        events: Iterable[DepositEvent],
        *,
        insert_missing: bool = True,
    ) -> dict[str, L1Token]:
        """
        Map L1 token address -> registry row.

        With insert_missing=False the registry is only read: unknown tokens are
        neither fetched over RPC nor inserted, and are absent from the result.
        """
        addresses = l1_token_candidates(events)
        if not addresses:
            return {}

        known = {t.address: t for t in await self._repository.find_by_addresses(addresses)}
        unknown = [a for a in addresses if a not in known]
        if not unknown:
            return known

        if not insert_missing:
            logger.info("Import disabled, leaving %s unknown L1 token(s) unresolved", len(unknown))
            return known

        logger.info("Reading metadata of %s new L1 token(s)", len(unknown))
        metadata = await self._read_metadata(unknown)
        candidates = [metadata.get(address) or L1Token(address=address) for address in unknown]

        inserted = {t.address: t for t in await self._repository.insert_tokens(candidates)}

        gap = [c.address for c in candidates if c.address not in inserted]
        recovered: dict[str, L1Token] = {}
        if gap:
            logger.info(
                "%s L1 token(s) were inserted concurrently, re-reading them",
                len(gap),
            )
            recovered = {t.address: t for t in await self._repository.find_by_addresses(gap)}

        return {**known, **inserted, **recovered}

    async def _read_metadata(self, addresses: list[str]) -> dict[str, L1Token]:
        error_context = f"Cannot read symbol()/decimals() of {len(addresses)} ERC-20 token(s)"
        try:
            return await self._caller.call(
                lambda: self._fetcher.fetch_metadata(token_addresses=addresses),
                error_context=error_context,
            )
        except (RetryAttemptsExhausted, RetryCancelled) as exc:
            logger.warning("%s, storing the tokens without it (%s)", error_context, exc.__cause__ or exc)
            return {}
