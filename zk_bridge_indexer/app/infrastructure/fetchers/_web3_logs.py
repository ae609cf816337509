from __future__ import annotations

from typing import Any, Mapping

from zk_bridge_indexer.app.domain.models.bridge import RawLog


def to_hex(value: Any) -> str:
    """HexBytes / bytes / str -> lower-case 0x hex string."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    s = str(value).lower()
    return s if s.startswith("0x") else "0x" + s


def to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    s = str(value)
    if s.startswith(("0x", "0X")):
        s = s[2:]
    return bytes.fromhex(s)


def raw_log_from_web3(log: Mapping[str, Any]) -> RawLog:
    """
    Convert a web3 log (AttributeDict with HexBytes fields) into a RawLog.
    """
    block_number = log.get("blockNumber")
    return RawLog(
        address=to_hex(log["address"]),
        topics=tuple(to_hex(t) for t in log.get("topics", [])),
        data=to_bytes(log.get("data", b"")),
        transaction_hash=to_hex(log["transactionHash"]),
        block_number=int(block_number) if block_number is not None else None,
    )
