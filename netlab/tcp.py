"""TCP echo server and client, plus a datagram printing server."""

from __future__ import annotations

import argparse
import socket
import sys
from collections.abc import Iterable, Iterator
from typing import TextIO

from netlab.defaults import IP_ANY, IP_LOOPBACK, PORT

SERVER_BUF_SIZE = 1024
CLIENT_BUF_SIZE = 64
LISTEN_BACKLOG = 1024

Address = tuple[str, int]

_QUIT_WORDS = (b"quit", b"exit")


def is_quit(data: bytes) -> bool:
    """Return True if ``data`` starts with ``quit`` or ``exit``."""
    return bytes(data[:4]) in _QUIT_WORDS


def _out(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def _text(data: bytes) -> str:
    return data.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


def _line_chunks(lines: Iterable[str | bytes], size: int) -> Iterator[bytes]:
    """Yield each line in pieces of at most ``size`` bytes, as a line reader would."""
    for line in lines:
        data = line.encode() if isinstance(line, str) else bytes(line)
        while data:
            yield data[:size]
            data = data[size:]


def open_listener(host: str = IP_ANY, port: int = PORT) -> socket.socket:
    """Open a TCP socket listening on ``host``:``port`` with address reuse."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        print(f"[INFO] Now TCP server listen at host:{host} port:{sock.getsockname()[1]}")
        sock.listen(LISTEN_BACKLOG)
    except OSError:
        sock.close()
        raise
    return sock


def handle_connection(
    conn: socket.socket, peer: Address, out: TextIO | None = None
) -> int:
    """Echo every message from one client until it quits or disconnects.

    Returns the number of messages echoed back.
    """
    out = _out(out)
    host, port = peer[0], peer[1]
    echoed = 0
    while True:
        try:
            data = conn.recv(SERVER_BUF_SIZE)
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            break
        if not data:
            print("recv: connection closed", file=sys.stderr)
            break
        out.write(f"<<<[{host}:{port}] {len(data)} bytes received: {_text(data)}\n")
        if is_quit(data):
            break
        try:
            sent = conn.send(data)
        except OSError as exc:
            print(f"send: {exc}", file=sys.stderr)
            break
        if sent <= 0:
            print("send: nothing sent", file=sys.stderr)
            break
        out.write(f">>>[{host}:{port}] {sent} bytes sent back.\n")
        echoed += 1
    return echoed


def serve_blocking(
    sock: socket.socket,
    out: TextIO | None = None,
    max_connections: int | None = None,
) -> int:
    """Serve clients one at a time; return the number of connections handled."""
    out = _out(out)
    handled = 0
    while max_connections is None or handled < max_connections:
        out.write("[INFO] Waiting for new connection ...\n")
        try:
            conn, peer = sock.accept()
        except OSError as exc:
            print(f"accept: {exc}", file=sys.stderr)
            continue
        host, port = peer[0], peer[1]
        out.write(f"<<< Accept a new TCP connection from host:{host} port:{port}\n")
        with conn:
            handle_connection(conn, peer, out)
        out.write(f"\nConnection terminated from host:{host} port:{port}\n\n")
        handled += 1
    return handled


def open_datagram_listener(host: str = IP_ANY, port: int = PORT) -> socket.socket:
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


def serve_datagrams(
    sock: socket.socket,
    out: TextIO | None = None,
    max_datagrams: int | None = None,
) -> list[bytes]:
    """Print each received datagram under a cycle banner; return them."""
    out = _out(out)
    received: list[bytes] = []
    while max_datagrams is None or len(received) < max_datagrams:
        try:
            data = sock.recv(SERVER_BUF_SIZE)
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            continue
        out.write(f"------------------cycle={len(received)}------------------\n")
        out.write(data.decode("utf-8", errors="replace") + "\n")
        received.append(data)
    return received


def run_client(
    sock: socket.socket, lines: Iterable[str | bytes], out: TextIO | None = None
) -> list[bytes]:
    """Send each line to a connected server and read its reply.

    Stops after sending a quit message or when the server closes.
    Returns the replies received.
    """
    out = _out(out)
    replies: list[bytes] = []
    for chunk in _line_chunks(lines, CLIENT_BUF_SIZE - 1):
        try:
            sent = sock.send(chunk)
        except OSError as exc:
            print(f"send: {exc}", file=sys.stderr)
            break
        out.write(f">>>[{sent}] bytes sent.\n")
        if is_quit(chunk):
            break
        try:
            reply = sock.recv(CLIENT_BUF_SIZE)
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            break
        out.write(f"<<<[{len(reply)}] bytes received: {_text(reply)}\n")
        if not reply:
            break
        replies.append(reply)
    return replies


def _parser(description: str, host: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--host", default=host)
    parser.add_argument("--port", type=int, default=PORT)
    return parser


def server_blocked_main(argv: list[str] | None = None) -> int:
    args = _parser("TCP echo server, one client at a time.", IP_ANY).parse_args(argv)
    try:
        sock = open_listener(args.host, args.port)
    except OSError as exc:
        print(f"listen: {exc}", file=sys.stderr)
        return 1
    with sock:
        try:
            serve_blocking(sock)
        except KeyboardInterrupt:
            pass
    return 0


def _datagram_main(argv: list[str] | None, description: str) -> int:
    args = _parser(description, IP_ANY).parse_args(argv)
    try:
        sock = open_datagram_listener(args.host, args.port)
    except OSError as exc:
        print(f"bind: {exc}", file=sys.stderr)
        return 1
    with sock:
        try:
            serve_datagrams(sock)
        except KeyboardInterrupt:
            pass
    return 0


def server_select_main(argv: list[str] | None = None) -> int:
    return _datagram_main(argv, "Print every datagram received.")


def server_epoll_main(argv: list[str] | None = None) -> int:
    return _datagram_main(argv, "Print every datagram received.")


def client_main(argv: list[str] | None = None) -> int:
    args = _parser("TCP echo client reading lines from stdin.", IP_LOOPBACK).parse_args(
        argv
    )
    try:
        sock = socket.create_connection((args.host, args.port))
    except OSError as exc:
        print(f"connect: {exc}", file=sys.stderr)
        return 1
    with sock:
        try:
            run_client(sock, sys.stdin)
        except KeyboardInterrupt:
            pass
    return 0