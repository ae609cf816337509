from __future__ import annotations

from typing import Any


def hex_to_bytes(value: str) -> bytes:
    """0x-prefixed hex string -> raw bytes for BYTEA columns."""
    s = value[2:] if value.startswith(("0x", "0X")) else value
    return bytes.fromhex(s)


def bytes_to_hex(value: Any) -> str:
    """BYTEA value -> lower-case 0x hex string."""
    # asyncpg might return memoryview; normalize to bytes
    if isinstance(value, memoryview):
        value = value.tobytes()
    return "0x" + bytes(value).hex()
