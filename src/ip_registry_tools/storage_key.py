"""Namespaced storage slots (EIP-7201)."""

from web3 import Web3

_ALIGN_MASK = ~0xFF


def namespaced_storage_key(namespace: str, aligned: bool = False) -> str:
    """Storage slot for a namespace id, e.g. ``example.main``.

    ``keccak256(abi.encode(uint256(keccak256(namespace)) - 1))``. With
    ``aligned``, the last byte is cleared as EIP-7201 prescribes, so the
    slot is aligned to 256 slots.
    """
    slot = int.from_bytes(Web3.keccak(text=namespace), "big") - 1
    key = int.from_bytes(Web3.keccak(slot.to_bytes(32, "big")), "big")
    if aligned:
        key &= _ALIGN_MASK
    return "0x" + key.to_bytes(32, "big").hex()
