from __future__ import annotations

from datetime import datetime
from typing import Iterable, Mapping

from zk_bridge_indexer.app.domain.models.bridge import (
    ClaimEvent,
    DecodedBridgeLog,
    DepositEvent,
    L1Token,
    Layer,
    Operation,
    OperationType,
    token_ref_from_deposit,
)


def build_operations(
    decoded: Iterable[DecodedBridgeLog],
    *,
    layer: Layer,
    tokens: Mapping[str, L1Token],
    timestamps: Mapping[int, datetime],
) -> list[Operation]:
    """
    Turn decoded bridge logs of one chain into operation records.

    A BridgeEvent on L1 starts a deposit, on L2 a withdrawal.
    A ClaimEvent on L1 finishes a withdrawal, on L2 a deposit.
    """
    is_l1 = layer is Layer.L1
    operations: list[Operation] = []

    for item in decoded:
        event = item.event

        if isinstance(event, DepositEvent):
            ref = token_ref_from_deposit(event)
            token = tokens.get(ref.l1_address) if ref.l1_address is not None else None
            block_number = item.log.block_number

            operations.append(
                Operation(
                    type=OperationType.DEPOSIT if is_l1 else OperationType.WITHDRAWAL,
                    index=event.deposit_count,
                    amount=event.amount,
                    layer=layer,
                    transaction_hash=item.log.transaction_hash,
                    l1_token_id=token.id if token is not None else None,
                    l2_token_address=ref.l2_address,
                    block_number=block_number,
                    block_timestamp=timestamps.get(block_number) if block_number is not None else None,
                )
            )
        elif isinstance(event, ClaimEvent):
            # claims carry no token or block enrichment
            operations.append(
                Operation(
                    type=OperationType.WITHDRAWAL if is_l1 else OperationType.DEPOSIT,
                    index=event.index,
                    amount=event.amount,
                    layer=layer,
                    transaction_hash=item.log.transaction_hash,
                )
            )
        else:
            raise TypeError(f"Unexpected bridge event type: {type(event).__name__}")

    return operations
