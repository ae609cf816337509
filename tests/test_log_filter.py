from __future__ import annotations

from dataclasses import replace

from tests.helpers import BRIDGE_CONTRACT, claim_log, deposit_log, tx_hash
from zk_bridge_indexer.app.application.services.log_filter import filter_bridge_logs


def test_keeps_bridge_and_claim_logs_in_original_order():
    logs = [
        claim_log(transaction_hash=tx_hash(1)),
        deposit_log(transaction_hash=tx_hash(2)),
        claim_log(transaction_hash=tx_hash(3)),
    ]

    result = filter_bridge_logs(logs, bridge_contract=BRIDGE_CONTRACT)

    assert [log.transaction_hash for log in result] == [tx_hash(1), tx_hash(2), tx_hash(3)]


def test_address_comparison_is_case_insensitive():
    log = deposit_log(address=BRIDGE_CONTRACT.upper().replace("0X", "0x"))

    assert filter_bridge_logs([log], bridge_contract=BRIDGE_CONTRACT) == [log]
    assert filter_bridge_logs([deposit_log()], bridge_contract=BRIDGE_CONTRACT.upper()) != []


def test_drops_logs_from_other_contracts():
    foreign = deposit_log(address="0x" + "11" * 20, transaction_hash=tx_hash(9))
    ours = deposit_log(transaction_hash=tx_hash(10))

    result = filter_bridge_logs([foreign, ours], bridge_contract=BRIDGE_CONTRACT)

    assert result == [ours]


def test_drops_unknown_topics_and_logs_without_topics():
    transfer = replace(
        deposit_log(),
        topics=("0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef",),
    )
    anonymous = replace(deposit_log(), topics=())

    assert filter_bridge_logs([transfer, anonymous], bridge_contract=BRIDGE_CONTRACT) == []


def test_custom_signature_list_restricts_selection():
    deposit, claim = deposit_log(), claim_log()

    result = filter_bridge_logs(
        [deposit, claim],
        bridge_contract=BRIDGE_CONTRACT,
        signatures=[claim.topics[0]],
    )

    assert result == [claim]
