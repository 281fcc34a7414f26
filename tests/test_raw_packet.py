import io
import socket

import pytest

from netlab.raw_packet import (
    CLIENT_BUF_SIZE,
    CLIENT_PAYLOAD,
    SEND_RECV_PAYLOAD,
    hex_dump,
    next_payload,
    run_client,
    run_send_recv,
    run_server,
)


@pytest.fixture
def pair():
    a, b = socket.socketpair(socket.AF_UNIX, socket.SOCK_DGRAM)
    a.settimeout(2)
    b.settimeout(2)
    yield a, b
    a.close()
    b.close()


def test_hex_dump_eight_per_line():
    assert hex_dump(bytes(range(8))) == "0x00 0x01 0x02 0x03 0x04 0x05 0x06 0x07 \n"


def test_hex_dump_partial_line_has_no_newline():
    assert hex_dump(b"\xab\x01") == "0xab 0x01 "


def test_hex_dump_line_count():
    dump = hex_dump(bytes(16))
    assert dump.count("\n") == 2
    assert dump.count("0x00") == 16
    assert hex_dump(b"") == ""


def test_next_payload_wraps():
    assert next_payload(b"\x00\xff") == b"\x01\x00"
    assert len(next_payload(CLIENT_PAYLOAD)) == len(CLIENT_PAYLOAD)


def test_default_payloads_follow_buffer_size():
    assert len(CLIENT_PAYLOAD) == CLIENT_BUF_SIZE
    assert CLIENT_PAYLOAD[:11] == bytes(range(11))
    assert SEND_RECV_PAYLOAD == bytes(range(CLIENT_BUF_SIZE))
    assert hex_dump(CLIENT_PAYLOAD).startswith(
        "0x00 0x01 0x02 0x03 0x04 0x05 0x06 0x07 \n"
    )
    assert next_payload(SEND_RECV_PAYLOAD) == bytes(range(1, CLIENT_BUF_SIZE + 1))


def test_run_server_prints_packets(pair):
    a, b = pair
    b.send(b"\x01\x02\x03")
    b.send(bytes(range(10)))
    out = io.StringIO()
    assert run_server(a, out, max_packets=2) == 2
    text = out.getvalue()
    assert "\n>>> Packet Received ret=3\n" in text
    assert "\n>>> Packet Received ret=10\n" in text
    assert hex_dump(bytes(range(10))) in text


def test_run_server_skips_empty_packets(pair):
    a, b = pair
    b.send(b"")
    b.send(b"\x07")
    out = io.StringIO()
    assert run_server(a, out, max_packets=1) == 1
    assert out.getvalue().count("Packet Received") == 1


def test_run_client_sends_changing_payloads(pair):
    a, b = pair
    out = io.StringIO()
    sent = run_client(a, range(3), out=out)
    assert sent[0] == CLIENT_PAYLOAD
    assert sent[1] == next_payload(sent[0])
    assert sent[2] == next_payload(sent[1])
    assert [b.recv(64) for _ in range(3)] == sent
    assert out.getvalue().count(f"<<< Packet Send ret={CLIENT_BUF_SIZE}") == 3


def test_run_client_without_triggers_sends_nothing(pair):
    a, _ = pair
    assert run_client(a, [], out=io.StringIO()) == []


def test_run_send_recv_resends_received_data(pair):
    a, b = pair
    first = b"\xaa" * CLIENT_BUF_SIZE
    second = b"\x05\x06"
    third = b"\x09" * 4
    for reply in (first, second, third):
        b.send(reply)
    out = io.StringIO()
    received = run_send_recv(a, range(3), out=out)
    assert received == [first, second, third]
    sent = [b.recv(64) for _ in range(3)]
    assert sent[0] == SEND_RECV_PAYLOAD
    assert sent[1] == first
    assert sent[2] == second.ljust(CLIENT_BUF_SIZE, b"\x00")
    assert out.getvalue().count("Packet Received") == 3