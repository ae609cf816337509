from __future__ import annotations

from typing import Iterable, Sequence

from zk_bridge_indexer.app.domain.models.bridge import RawLog
from zk_bridge_indexer.app.domain.signatures import BRIDGE_TOPICS


def filter_bridge_logs(
    logs: Iterable[RawLog],
    *,
    bridge_contract: str,
    signatures: Sequence[str] = BRIDGE_TOPICS,
) -> list[RawLog]:
    """
    Keep logs emitted by the bridge contract whose topic0 is a known bridge event.

    Addresses and topics are compared case-insensitively; order is preserved.
    """
    contract = bridge_contract.lower()
    accepted = {s.lower() for s in signatures}

    return [
        log
        for log in logs
        if log.address.lower() == contract
        and log.first_topic is not None
        and log.first_topic.lower() in accepted
    ]
