"""Raw packet sockets: a receiver, a sender and a send-then-receive loop."""

from __future__ import annotations

import argparse
import fcntl
import socket
import struct
import sys
from collections.abc import Iterable
from typing import TextIO

IF_NAME = "lo"
ETH_P_ALL = 0x0003

SIOCGIFFLAGS = 0x8913
SIOCSIFFLAGS = 0x8914
IFF_PROMISC = 0x100

SERVER_BUF_SIZE = 64
CLIENT_BUF_SIZE = 16

CLIENT_PAYLOAD = bytes(range(11)) + bytes(CLIENT_BUF_SIZE - 11)
SEND_RECV_PAYLOAD = bytes(range(CLIENT_BUF_SIZE))

_IFREQ = struct.Struct("16sH22x")


def hex_dump(data: bytes) -> str:
    """Format bytes as ``0xNN `` groups, eight to a line."""
    parts = []
    for count, byte in enumerate(data, 1):
        parts.append(f"0x{byte:02x} ")
        if count % 8 == 0:
            parts.append("\n")
    return "".join(parts)


def next_payload(payload: bytes) -> bytes:
    """Return the payload with every byte incremented, wrapping at 256."""
    return bytes((byte + 1) & 0xFF for byte in payload)


def _set_promiscuous(sock: socket.socket, if_name: str) -> None:
    name = if_name.encode()[:15]
    result = fcntl.ioctl(sock.fileno(), SIOCGIFFLAGS, _IFREQ.pack(name, 0))
    _, flags = _IFREQ.unpack(result)
    fcntl.ioctl(sock.fileno(), SIOCSIFFLAGS, _IFREQ.pack(name, flags | IFF_PROMISC))


def open_raw_socket(if_name: str = IF_NAME, promisc: bool = False) -> socket.socket:
    """Open a raw packet socket for all protocols bound to ``if_name``."""
    sock = socket.socket(socket.AF_PACKET, socket.SOCK_RAW, socket.htons(ETH_P_ALL))
    try:
        if promisc:
            _set_promiscuous(sock, if_name)
        sock.bind((if_name, ETH_P_ALL))
    except OSError:
        sock.close()
        raise
    return sock


def _out(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def run_server(
    sock: socket.socket, out: TextIO | None = None, max_packets: int | None = None
) -> int:
    """Print every received packet; return how many were printed."""
    out = _out(out)
    received = 0
    while max_packets is None or received < max_packets:
        try:
            data = sock.recv(SERVER_BUF_SIZE)
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            continue
        if not data:
            print("recv: no data", file=sys.stderr)
            continue
        out.write(f"\n>>> Packet Received ret={len(data)}\n{hex_dump(data)}")
        received += 1
    return received


def run_client(
    sock: socket.socket,
    triggers: Iterable[object],
    payload: bytes = CLIENT_PAYLOAD,
    out: TextIO | None = None,
) -> list[bytes]:
    """Send one packet per trigger, changing the payload after each send.

    Returns the payloads that were sent.
    """
    out = _out(out)
    sent_payloads = []
    for _ in triggers:
        try:
            sent = sock.send(payload)
        except OSError as exc:
            print(f"send: {exc}", file=sys.stderr)
            continue
        if sent <= 0:
            print("send: nothing sent", file=sys.stderr)
            continue
        out.write(f"\n<<< Packet Send ret={sent}\n{hex_dump(payload[:sent])}")
        sent_payloads.append(payload)
        payload = next_payload(payload)
    return sent_payloads


def run_send_recv(
    sock: socket.socket,
    triggers: Iterable[object],
    payload: bytes = SEND_RECV_PAYLOAD,
    out: TextIO | None = None,
) -> list[bytes]:
    """Send a packet and read one back per trigger.

    The packet received becomes the next one sent, zero-filled to the
    buffer size. Returns the packets received.
    """
    out = _out(out)
    received = []
    for _ in triggers:
        try:
            sent = sock.send(payload)
        except OSError as exc:
            print(f"send: {exc}", file=sys.stderr)
            continue
        if sent <= 0:
            print("send: nothing sent", file=sys.stderr)
            continue
        out.write(f"\n<<< Packet Send ret={sent}\n{hex_dump(payload[:sent])}")

        payload = bytes(CLIENT_BUF_SIZE)
        try:
            data = sock.recv(CLIENT_BUF_SIZE)
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            continue
        if not data:
            print("recv: no data", file=sys.stderr)
            continue
        out.write(f"\n>>> Packet Received ret={len(data)}\n{hex_dump(data)}")
        received.append(data)
        payload = data.ljust(CLIENT_BUF_SIZE, b"\x00")
    return received


def _stdin_triggers() -> Iterable[str]:
    return iter(lambda: sys.stdin.read(1), "")


def _report_mode(sock: socket.socket, suffix: str = "") -> None:
    print(("BLOCK" if sock.getblocking() else "NONBLOCK") + suffix)


def _parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--interface", default=IF_NAME)
    return parser


def server_main(argv: list[str] | None = None) -> int:
    parser = _parser("Print raw packets received on an interface.")
    parser.add_argument("--count", type=int, default=None)
    args = parser.parse_args(argv)
    with open_raw_socket(args.interface) as sock:
        _report_mode(sock, " Mode")
        try:
            run_server(sock, max_packets=args.count)
        except KeyboardInterrupt:
            pass
    return 0


def client_main(argv: list[str] | None = None) -> int:
    args = _parser("Send a raw packet for every character read.").parse_args(argv)
    with open_raw_socket(args.interface) as sock:
        _report_mode(sock)
        try:
            run_client(sock, _stdin_triggers())
        except KeyboardInterrupt:
            pass
    return 0


def send_recv_main(argv: list[str] | None = None) -> int:
    args = _parser("Send and receive raw packets in promiscuous mode.").parse_args(argv)
    with open_raw_socket(args.interface, promisc=True) as sock:
        _report_mode(sock)
        try:
            run_send_recv(sock, _stdin_triggers())
        except KeyboardInterrupt:
            pass
    return 0