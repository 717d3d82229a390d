from typing import Union

from eth_utils import is_address, is_bytes, to_canonical_address, to_checksum_address

ADDRESS_LENGTH = 20


def to_address_bytes(value: Union[str, bytes]) -> bytes:
    """Convert a hex or 20-byte address into its canonical 20-byte form"""
    if is_bytes(value):
        if len(value) != ADDRESS_LENGTH:
            raise ValueError(f"Invalid address length: {len(value)}")
        return bytes(value)
    if not isinstance(value, str) or not is_address(value.lower()):
        raise ValueError(f"Invalid address: {value!r}")
    return to_canonical_address(value.lower())


def address_to_hex(address: bytes) -> str:
    """Format a 20-byte address as checksummed hex"""
    return to_checksum_address(address)
