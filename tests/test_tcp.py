import io
import socket
import threading

import pytest

from netlab.defaults import IP_LOOPBACK
from netlab.tcp import (
    handle_connection,
    is_quit,
    open_datagram_listener,
    open_listener,
    run_client,
    serve_blocking,
    serve_datagrams,
)


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"quit\n", True),
        (b"exit", True),
        (b"exiting now", True),
        (b"qui", False),
        (b"hello", False),
        (b"", False),
    ],
)
def test_is_quit(data, expected):
    assert is_quit(data) is expected


def test_handle_connection_echoes_until_close():
    conn, peer = socket.socketpair()
    with conn, peer:
        peer.sendall(b"hello")
        peer.shutdown(socket.SHUT_WR)
        out = io.StringIO()
        assert handle_connection(conn, ("127.0.0.1", 1234), out) == 1
        peer.settimeout(2)
        assert peer.recv(64) == b"hello"
        assert "5 bytes received: hello" in out.getvalue()


def test_handle_connection_stops_on_quit():
    conn, peer = socket.socketpair()
    with conn, peer:
        peer.sendall(b"quit")
        out = io.StringIO()
        assert handle_connection(conn, ("127.0.0.1", 1234), out) == 0
        assert "quit" in out.getvalue()
        assert "sent back" not in out.getvalue()


def test_serve_blocking_with_client():
    listener = open_listener(IP_LOOPBACK, 0)
    address = listener.getsockname()
    results = []
    server_out = io.StringIO()
    thread = threading.Thread(
        target=lambda: results.append(serve_blocking(listener, server_out, 1))
    )
    thread.start()
    try:
        with socket.create_connection(address, timeout=5) as client:
            replies = run_client(client, ["hello\n", "quit\n"], io.StringIO())
        thread.join(5)
    finally:
        listener.close()
    assert replies == [b"hello\n"]
    assert results == [1]
    assert "Connection terminated" in server_out.getvalue()


def test_run_client_stops_on_quit_without_reading():
    client, peer = socket.socketpair()
    with client, peer:
        out = io.StringIO()
        assert run_client(client, ["quit\n", "never\n"], out) == []
        peer.settimeout(2)
        assert peer.recv(64) == b"quit\n"
        assert ">>>[5] bytes sent." in out.getvalue()


def test_run_client_collects_replies():
    client, peer = socket.socketpair()
    with client, peer:
        peer.sendall(b"pong")
        replies = run_client(client, ["ping\n", "exit\n"], io.StringIO())
        assert replies == [b"pong"]
        peer.settimeout(2)
        received = b""
        while len(received) < len(b"ping\nexit\n"):
            received += peer.recv(64)
        assert received == b"ping\nexit\n"


def test_run_client_stops_when_server_closes():
    client, peer = socket.socketpair()
    with client:
        peer.close()
        client_out = io.StringIO()
        replies = run_client(client, ["hello\n", "again\n"], client_out)
    assert replies == []


def test_serve_datagrams_prints_cycles():
    server = open_datagram_listener(IP_LOOPBACK, 0)
    with server, socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sender:
        address = server.getsockname()
        sender.sendto(b"abc", address)
        sender.sendto(b"de", address)
        out = io.StringIO()
        received = serve_datagrams(server, out, 2)
    assert received == [b"abc", b"de"]
    text = out.getvalue()
    assert "cycle=0" in text and "cycle=1" in text
    assert text.index("abc") < text.index("de")