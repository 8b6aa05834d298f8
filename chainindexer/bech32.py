"""Decoding and checking of bech32 addresses."""

from __future__ import annotations

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
MAX_LENGTH = 1023
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


def _polymod(values: list[int]) -> int:
    checksum = 1
    for value in values:
        top = checksum >> 25
        checksum = ((checksum & 0x1FFFFFF) << 5) ^ value
        for bit, generator in enumerate(_GENERATOR):
            if (top >> bit) & 1:
                checksum ^= generator
    return checksum


def _expand_hrp(hrp: str) -> list[int]:
    return [ord(char) >> 5 for char in hrp] + [0] + [ord(char) & 31 for char in hrp]


def _convert_bits(data: list[int], from_bits: int, to_bits: int) -> bytes:
    accumulator = 0
    bits = 0
    result = bytearray()
    mask = (1 << to_bits) - 1
    for value in data:
        accumulator = (accumulator << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((accumulator >> bits) & mask)
    if bits >= from_bits or (accumulator << (to_bits - bits)) & mask:
        raise ValueError("invalid padding in bech32 data")
    return bytes(result)


def decode(address: str) -> tuple[str, bytes]:
    """Split a bech32 string into its prefix and its 8-bit data."""
    if not address:
        raise ValueError("empty address string is not allowed")
    if len(address) > MAX_LENGTH:
        raise ValueError(f"bech32 string too long: {len(address)}")
    if any(ord(char) < 33 or ord(char) > 126 for char in address):
        raise ValueError("invalid character in bech32 string")
    if address.lower() != address and address.upper() != address:
        raise ValueError("bech32 string has mixed case")
    address = address.lower()
    separator = address.rfind("1")
    if separator < 1 or separator + 7 > len(address):
        raise ValueError("invalid bech32 separator position")
    hrp, data_part = address[:separator], address[separator + 1:]
    try:
        data = [CHARSET.index(char) for char in data_part]
    except ValueError as exc:
        raise ValueError("invalid character in bech32 data") from exc
    if _polymod(_expand_hrp(hrp) + data) != 1:
        raise ValueError(f"invalid bech32 checksum for {address}")
    return hrp, _convert_bits(data[:-6], 5, 8)


def validate_address(address: str, prefix: str) -> str:
    """Check that the address is valid bech32 with the given prefix."""
    hrp, data = decode(address)
    if hrp != prefix:
        raise ValueError(f"invalid Bech32 prefix; expected {prefix}, got {hrp}")
    if not data:
        raise ValueError("addresses cannot be empty")
    if len(data) > 255:
        raise ValueError(f"address max length is 255, got {len(data)}")
    return address