from __future__ import annotations

from eth_utils import keccak


def event_topic0(signature: str) -> str:
    """keccak("Name(type1,type2,...)") as a lower-case 0x hex string."""
    return "0x" + keccak(text=signature).hex()


# zkEVM bridge (PolygonZkEVMBridge)
BRIDGE_EVENT_SIGNATURE = "BridgeEvent(uint8,uint32,address,uint32,address,uint256,bytes,uint32)"
BRIDGE_EVENT_TOPIC = "0x501781209a1f8899323b96b4ef08b168df93e0a90c673d1e4cce39366cb62f9b"

CLAIM_EVENT_SIGNATURE = "ClaimEvent(uint32,uint32,address,address,uint256)"
CLAIM_EVENT_TOPIC = "0x25308c93ceeed162da955b3f7ce3e3f93606579e40fb92029faa9efe27545983"

BRIDGE_TOPICS: tuple[str, str] = (BRIDGE_EVENT_TOPIC, CLAIM_EVENT_TOPIC)

# zkSync diamond proxy on L1
BLOCK_COMMIT_SIGNATURE = "BlockCommit(uint256,bytes32,bytes32)"
BLOCK_COMMIT_TOPIC = event_topic0(BLOCK_COMMIT_SIGNATURE)

BLOCKS_VERIFICATION_SIGNATURE = "BlocksVerification(uint256,uint256)"
BLOCKS_VERIFICATION_TOPIC = event_topic0(BLOCKS_VERIFICATION_SIGNATURE)

BLOCK_EXECUTION_SIGNATURE = "BlockExecution(uint256,bytes32,bytes32)"
BLOCK_EXECUTION_TOPIC = event_topic0(BLOCK_EXECUTION_SIGNATURE)

# ERC-20 getters
SYMBOL_SELECTOR = "0x95d89b41"
DECIMALS_SELECTOR = "0x313ce567"
