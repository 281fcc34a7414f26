"""Look up the hardware address of a network interface."""

from __future__ import annotations

import argparse
import fcntl
import socket
import struct
import sys

SIOCGIFHWADDR = 0x8927
IFNAMSIZ = 16
_IFREQ_SIZE = 40
_HWADDR_OFFSET = 18
MAC_LEN = 6


def format_mac(hwaddr: bytes) -> str:
    """Format the first six bytes as colon-separated unpadded hex."""
    return ":".join(f"{byte:x}" for byte in bytes(hwaddr)[:MAC_LEN])


def get_mac_address(interface: str) -> bytes:
    """Return the six-byte hardware address of ``interface``."""
    name = interface.encode()
    if len(name) >= IFNAMSIZ:
        raise ValueError(f"interface name too long: {interface!r}")
    request = struct.pack(f"{_IFREQ_SIZE}s", name)
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        result = fcntl.ioctl(sock.fileno(), SIOCGIFHWADDR, request)
    return bytes(result[_HWADDR_OFFSET : _HWADDR_OFFSET + MAC_LEN])


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print an interface's MAC address.")
    parser.add_argument("interface", help="network interface")
    args = parser.parse_args(argv)
    try:
        hwaddr = get_mac_address(args.interface)
    except (OSError, ValueError) as exc:
        print(f"ioctl: {exc}", file=sys.stderr)
        return 1
    print(f"NET Interface: {args.interface}")
    print(f"MAC Address  : {format_mac(hwaddr)}")
    return 0