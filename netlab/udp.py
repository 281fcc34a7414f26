"""UDP echo server and client, and a one-byte broadcast sender."""

from __future__ import annotations

import argparse
import socket
import sys
from collections.abc import Iterable, Iterator
from typing import TextIO

from netlab.defaults import IP_ANY, IP_BROADCAST, IP_LOOPBACK, PORT

SERVER_BUF_SIZE = 1024
CLIENT_BUF_SIZE = 64

Address = tuple[str, int]

_QUIT_WORDS = (b"quit", b"exit")


def is_quit(data: bytes) -> bool:
    """Return True if ``data`` starts with ``quit`` or ``exit``."""
    return bytes(data[:4]) in _QUIT_WORDS


def is_quit_all(data: bytes) -> bool:
    """Return True if ``data`` asks the server to stop.

    Only the first four bytes of ``quitall`` and ``exitall`` are compared,
    so any message a client quits on also stops the server.
    """
    return bytes(data[:4]) in (b"quitall"[:4], b"exitall"[:4])


def _out(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def _until_nul(data: bytes) -> bytes:
    return data.split(b"\x00", 1)[0]


def _text(data: bytes) -> str:
    return _until_nul(data).decode("utf-8", errors="replace")


def _line_chunks(lines: Iterable[str | bytes], size: int) -> Iterator[bytes]:
    for line in lines:
        data = line.encode() if isinstance(line, str) else bytes(line)
        while data:
            yield data[:size]
            data = data[size:]


def open_server(host: str = IP_ANY, port: int = PORT) -> socket.socket:
    """Open a UDP socket bound to ``host``:``port`` with address reuse."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    print(f"Now UDP server listen at host:{host} port:{sock.getsockname()[1]}")
    return sock


def serve_echo(sock: socket.socket, out: TextIO | None = None) -> int:
    """Echo datagrams back to their senders until told to stop.

    Each reply holds the datagram up to its first NUL byte. Returns the
    number of replies sent.
    """
    out = _out(out)
    echoed = 0
    while True:
        try:
            data, client = sock.recvfrom(SERVER_BUF_SIZE)
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            continue
        host, port = client[0], client[1]
        out.write(f"<<<[{host}:{port}] {len(data)} bytes received: {_text(data)}\n")
        if is_quit_all(data):
            break
        try:
            sent = sock.sendto(_until_nul(data), client)
        except OSError as exc:
            print(f"send: {exc}", file=sys.stderr)
            break
        out.write(f">>>[{host}:{port}] {sent} bytes sent back.\n")
        echoed += 1
    return echoed


def run_client(
    sock: socket.socket,
    server: Address,
    lines: Iterable[str | bytes],
    out: TextIO | None = None,
) -> list[bytes]:
    """Send each line to ``server`` and wait for a reply after each one.

    Stops after sending a quit message. Returns the replies received.
    """
    out = _out(out)
    replies: list[bytes] = []
    for chunk in _line_chunks(lines, CLIENT_BUF_SIZE - 1):
        try:
            sent = sock.sendto(chunk, server)
        except OSError as exc:
            print(f"send: {exc}", file=sys.stderr)
            break
        out.write(f">>>[{server[0]}:{server[1]}] {sent} bytes sent to server.\n")
        if is_quit(chunk):
            break
        try:
            reply, remote = sock.recvfrom(CLIENT_BUF_SIZE)
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            break
        out.write(
            f"<<<[{remote[0]}:{remote[1]}] {len(reply)} bytes received: {_text(reply)}\n"
        )
        replies.append(reply)
    return replies


def run_broadcast(
    sock: socket.socket, keys: Iterable[str], out: TextIO | None = None
) -> list[int]:
    """Send a one-byte counter for every key until ``q`` is read.

    The counter starts at zero and wraps at 256. Returns the values sent.
    """
    out = _out(out)
    values: list[int] = []
    value = 0
    for key in keys:
        if key == "q":
            break
        try:
            sent = sock.send(bytes([value]))
        except OSError as exc:
            print(f"send: {exc}", file=sys.stderr)
            sent = -1
        out.write(f"Send {sent} bytes, data: 0x{value:x}.\n")
        values.append(value)
        value = (value + 1) & 0xFF
    return values


def _stdin_keys() -> Iterator[str]:
    return iter(lambda: sys.stdin.read(1), "")


def _parser(description: str, host: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--host", default=host)
    parser.add_argument("--port", type=int, default=PORT)
    return parser


def server_main(argv: list[str] | None = None) -> int:
    args = _parser("UDP echo server.", IP_ANY).parse_args(argv)
    try:
        sock = open_server(args.host, args.port)
    except OSError as exc:
        print(f"bind: {exc}", file=sys.stderr)
        return 1
    with sock:
        try:
            serve_echo(sock)
        except KeyboardInterrupt:
            pass
    return 0


def client_main(argv: list[str] | None = None) -> int:
    args = _parser("UDP echo client reading lines from stdin.", IP_LOOPBACK).parse_args(
        argv
    )
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            run_client(sock, (args.host, args.port), sys.stdin)
        except KeyboardInterrupt:
            pass
    return 0


def broadcast_main(argv: list[str] | None = None) -> int:
    args = _parser("Broadcast a counter byte per key pressed.", IP_BROADCAST).parse_args(
        argv
    )
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.connect((args.host, args.port))
        except OSError as exc:
            print(f"connect: {exc}", file=sys.stderr)
            return 1
        try:
            run_broadcast(sock, _stdin_keys())
        except KeyboardInterrupt:
            pass
    return 0