"""Listen for kernel uevents (hotplug) on a netlink socket."""

from __future__ import annotations

import argparse
import os
import socket
import sys
from typing import TextIO

NETLINK_KOBJECT_UEVENT = 15
ALL_GROUPS = 0xFFFFFFFF
BUF_SIZE = 512


def split_uevent(data: bytes) -> list[str]:
    """Split a uevent message into its NUL-terminated strings."""
    data = bytes(data)
    if not data:
        return []
    parts = data.split(b"\x00")
    if data.endswith(b"\x00"):
        parts.pop()
    return [part.decode("utf-8", errors="replace") for part in parts]


def open_uevent_socket() -> socket.socket:
    """Open and bind a netlink socket subscribed to all uevent groups."""
    sock = socket.socket(socket.AF_NETLINK, socket.SOCK_DGRAM, NETLINK_KOBJECT_UEVENT)
    try:
        sock.bind((os.getpid(), ALL_GROUPS))
    except OSError:
        sock.close()
        raise
    return sock


def listen(sock: socket.socket, out: TextIO | None = None) -> int:
    """Print every string of every message until the socket is closed.

    Returns the number of strings printed.
    """
    out = sys.stdout if out is None else out
    printed = 0
    while True:
        data = sock.recv(BUF_SIZE)
        if not data:
            return printed
        for line in split_uevent(data):
            out.write(line + "\n")
            printed += 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print kernel uevents.")
    parser.parse_args(argv)
    try:
        sock = open_uevent_socket()
    except OSError as exc:
        print(f"netlink: {exc}", file=sys.stderr)
        return 1
    with sock:
        try:
            listen(sock)
        except KeyboardInterrupt:
            pass
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            return 1
    return 0