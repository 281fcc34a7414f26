import io
import socket

import pytest

from netlab.defaults import IP_LOOPBACK
from netlab.udp import (
    is_quit,
    is_quit_all,
    open_server,
    run_broadcast,
    run_client,
    serve_echo,
)


def _udp_socket():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind((IP_LOOPBACK, 0))
    sock.settimeout(5)
    return sock


@pytest.mark.parametrize(
    "data, expected",
    [(b"quit\n", True), (b"exit", True), (b"quiet", False), (b"hello", False)],
)
def test_is_quit(data, expected):
    assert is_quit(data) is expected


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"quitall", True),
        (b"exitall\n", True),
        (b"quit", True),
        (b"hello", False),
        (b"qu", False),
    ],
)
def test_is_quit_all(data, expected):
    assert is_quit_all(data) is expected


def test_serve_echo_replies_then_stops():
    server = open_server(IP_LOOPBACK, 0)
    with server, _udp_socket() as client:
        address = server.getsockname()
        client.sendto(b"hello", address)
        client.sendto(b"quitall", address)
        out = io.StringIO()
        assert serve_echo(server, out) == 1
        assert client.recv(64) == b"hello"
    assert "5 bytes received: hello" in out.getvalue()


def test_serve_echo_reply_stops_at_nul():
    server = open_server(IP_LOOPBACK, 0)
    with server, _udp_socket() as client:
        address = server.getsockname()
        client.sendto(b"ab\x00cd", address)
        client.sendto(b"exit", address)
        assert serve_echo(server, io.StringIO()) == 1
        assert client.recv(64) == b"ab"


def test_run_client_splits_long_lines():
    with _udp_socket() as server, _udp_socket() as client:
        server.sendto(b"r1", client.getsockname())
        server.sendto(b"r2", client.getsockname())
        line = "a" * 100 + "\n"
        replies = run_client(client, server.getsockname(), [line], io.StringIO())
        assert replies == [b"r1", b"r2"]
        first = server.recv(128)
        second = server.recv(128)
        assert first + second == line.encode()
        assert len(first) == 63


def test_run_client_quit_sends_without_waiting():
    with _udp_socket() as server, _udp_socket() as client:
        out = io.StringIO()
        replies = run_client(client, server.getsockname(), ["quit\n", "more\n"], out)
        assert replies == []
        assert server.recv(64) == b"quit\n"
        assert "5 bytes sent to server." in out.getvalue()


def test_run_client_round_trip_with_server():
    with _udp_socket() as server, _udp_socket() as client:
        server.sendto(b"pong", client.getsockname())
        replies = run_client(client, server.getsockname(), [b"ping\n"], io.StringIO())
        assert replies == [b"pong"]
        assert server.recv(64) == b"ping\n"


def test_run_broadcast_sends_counter_until_q():
    with _udp_socket() as receiver, _udp_socket() as sender:
        sender.connect(receiver.getsockname())
        out = io.StringIO()
        values = run_broadcast(sender, "ab\nqzz", out)
        assert values == [0, 1, 2]
        assert [receiver.recv(8) for _ in values] == [b"\x00", b"\x01", b"\x02"]
        assert "Send 1 bytes, data: 0x2." in out.getvalue()


def test_run_broadcast_counter_wraps():
    with _udp_socket() as receiver, _udp_socket() as sender:
        sender.connect(receiver.getsockname())
        values = run_broadcast(sender, "x" * 257, io.StringIO())
        assert len(values) == 257
        assert values[255] == 255
        assert values[-1] == 0