"""Additive 8-bit checksum used by the RPC wire format."""


def calculate_checksum(data: bytes) -> int:
    """Return the sum of all bytes in ``data`` modulo 256."""
    return sum(data) & 0xFF