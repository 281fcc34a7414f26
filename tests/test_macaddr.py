from unittest import mock

import pytest

from netlab.macaddr import format_mac, get_mac_address, main

FAKE_MAC = bytes([0x02, 0x00, 0x5E, 0x0A, 0x0B, 0x0C])


def _fake_ioctl(fd, request, arg):
    return bytes(arg[:18]) + FAKE_MAC + bytes(len(arg) - 24)


def test_format_mac_is_unpadded_hex():
    assert format_mac(bytes([0x02, 0x00, 0x5E, 0x0A, 0x0B, 0x0C])) == "2:0:5e:a:b:c"


def test_format_mac_uses_six_bytes():
    assert format_mac(bytes(range(10))).count(":") == 5


def test_name_too_long():
    with pytest.raises(ValueError):
        get_mac_address("x" * 16)


def test_missing_interface_raises():
    with pytest.raises(OSError):
        get_mac_address("nosuchif9")


@mock.patch("fcntl.ioctl", side_effect=_fake_ioctl)
def test_get_mac_address_reads_hwaddr(ioctl):
    assert get_mac_address("eth0") == FAKE_MAC
    assert ioctl.call_args.args[1] == 0x8927


@mock.patch("fcntl.ioctl", side_effect=_fake_ioctl)
def test_main_prints(ioctl, capsys):
    assert main(["eth0"]) == 0
    out = capsys.readouterr().out
    assert "NET Interface: eth0" in out
    assert f"MAC Address  : {format_mac(FAKE_MAC)}" in out


@mock.patch("fcntl.ioctl", side_effect=OSError(19, "No such device"))
def test_main_reports_failure(ioctl):
    assert main(["eth0"]) == 1