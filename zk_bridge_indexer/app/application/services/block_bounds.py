from __future__ import annotations

from dataclasses import dataclass

from zk_bridge_indexer.app.domain.ports.out import BlockSelector

BLOCK_TAGS = frozenset({"earliest", "latest", "safe", "finalized", "pending"})


def parse_block_selector(value: BlockSelector) -> BlockSelector:
    """
    Normalize a block selector coming from the CLI or a scheduler.

    - ints are returned as-is,
    - numeric strings ("123", "0x7b") become ints,
    - "" means "latest",
    - tags are lower-cased and must be one of BLOCK_TAGS.
    """
    if isinstance(value, int):
        return value

    s = value.strip().lower()
    if s == "":
        return "latest"
    if s in BLOCK_TAGS:
        return s
    if s.startswith("0x"):
        return int(s, 16)
    if s.isdigit():
        return int(s)

    raise ValueError(f"Unsupported block selector: {value!r}")


@dataclass(frozen=True)
class BlockRange:
    from_block: BlockSelector
    to_block: BlockSelector

    def validate(self) -> None:
        # tags are resolved by the node; only concrete numbers can be checked here
        if isinstance(self.from_block, int) and self.from_block < 0:
            raise ValueError("Block numbers must be non-negative")
        if isinstance(self.to_block, int) and self.to_block < 0:
            raise ValueError("Block numbers must be non-negative")
        if (
            isinstance(self.from_block, int)
            and isinstance(self.to_block, int)
            and self.from_block > self.to_block
        ):
            raise ValueError("from_block must be <= to_block")
