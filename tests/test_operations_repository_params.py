from datetime import datetime, timezone

from zk_bridge_indexer.app.domain.models.bridge import Layer, Operation, OperationType
from zk_bridge_indexer.app.infrastructure.adapters.domain.zkevm_bridge_operations_repository import (
    _to_params,
)
from zk_bridge_indexer.app.infrastructure.db.hex_codec import bytes_to_hex, hex_to_bytes


def test_sparse_params_leave_enrichment_null():
    op = Operation(
        type=OperationType.DEPOSIT,
        index=3,
        amount=10,
        layer=Layer.L2,
        transaction_hash="0x" + "0f" * 32,
    )

    params = _to_params(op)

    assert params["type"] == "deposit"
    assert params["l2_transaction_hash"] == bytes.fromhex("0f" * 32)
    assert params["l1_transaction_hash"] is None
    assert params["l1_token_id"] is None
    assert params["block_timestamp"] is None


def test_deposit_params_keep_enrichment():
    ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
    op = Operation(
        type=OperationType.DEPOSIT,
        index=1,
        amount=5,
        layer=Layer.L1,
        transaction_hash="0x" + "01" * 32,
        l1_token_id=7,
        block_number=100,
        block_timestamp=ts,
    )

    params = _to_params(op)

    assert params["l1_transaction_hash"] == bytes.fromhex("01" * 32)
    assert params["l1_token_id"] == 7
    assert params["block_number"] == 100
    assert params["block_timestamp"] == ts


def test_hex_codec():
    assert hex_to_bytes("0xAbCd") == b"\xab\xcd"
    assert bytes_to_hex(memoryview(b"\xab\xcd")) == "0xabcd"
