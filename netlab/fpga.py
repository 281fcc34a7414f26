"""Raw Ethernet link to an FPGA, with RAM writes split into MTU-sized frames.

Link layer format::

    | dst mac (6) | src mac (6) | data type (2) | payload | checksum (4) |

FPGA payload format::

    | R/W (1) | address (4, LE) | length (4, LE) | data |
"""

from __future__ import annotations

import argparse
import socket
import struct
import sys

from netlab.raw_packet import open_raw_socket

MTU_MAX = 2000
MTU_MIN = 64

DST_MAC_POS = 0
SRC_MAC_POS = 6
LINK_DATA_TYPE_POS = 12
PAYLOAD_POS = 14

CMD_POS = 14
ADDR_POS = 15
DATA_LEN_POS = 19
DATA_POS = 23

MAC_LEN = SRC_MAC_POS - DST_MAC_POS
LINK_HEADER_LEN = CMD_POS - DST_MAC_POS
LINK_TRAILER_LEN = 4
DATA_HEADER_LEN = DATA_POS - DST_MAC_POS
DATA_LEN_MAX = MTU_MAX - DATA_HEADER_LEN - LINK_TRAILER_LEN
DATA_LEN_MIN = MTU_MIN - DATA_HEADER_LEN - LINK_TRAILER_LEN

FPGA_MAC = bytes([0xEB, 0x90, 0xEB, 0x90, 0xEB, 0x90])

READ_BUF_SIZE = 4096

_U32 = struct.Struct("<I")


class FpgaFrameError(ValueError):
    """Raised when a frame or buffer size breaks the link format."""


def checksum32(data: bytes) -> int:
    """Return the 32-bit additive checksum of ``data``."""
    return sum(data) & 0xFFFFFFFF


def chunk_ram_write(frame: bytes) -> list[bytes]:
    """Split an FPGA RAM write frame into frames that fit the link MTU.

    Each chunk carries the original link header and command, its own
    address and length, the data (zero-padded up to the minimum frame
    size) and a trailing checksum over everything before it.
    """
    frame = bytes(frame)
    if len(frame) < DATA_HEADER_LEN + LINK_TRAILER_LEN:
        raise FpgaFrameError(f"frame too short: {len(frame)} bytes")

    (addr,) = _U32.unpack_from(frame, ADDR_POS)
    (datalen,) = _U32.unpack_from(frame, DATA_LEN_POS)
    if len(frame) != datalen + DATA_HEADER_LEN + LINK_TRAILER_LEN:
        raise FpgaFrameError(
            f"data format error: frame of {len(frame)} bytes declares "
            f"{datalen} data bytes"
        )

    prefix = frame[: CMD_POS + 1]
    chunks = []
    offset = 0
    while offset < datalen:
        remaining = datalen - offset
        wlen = min(remaining, DATA_LEN_MAX)
        padlen = DATA_LEN_MIN - remaining if remaining <= DATA_LEN_MIN else 0
        start = DATA_POS + offset
        body = (
            prefix
            + _U32.pack((addr + offset) & 0xFFFFFFFF)
            + _U32.pack(wlen)
            + frame[start : start + wlen]
            + bytes(padlen)
        )
        chunks.append(body + _U32.pack(checksum32(body)))
        offset += wlen
    return chunks


class FpgaSocket:
    """A raw packet socket bound to one interface in promiscuous mode."""

    def __init__(self, if_name: str) -> None:
        if not if_name:
            raise ValueError("an interface name is required")
        self._sock = open_raw_socket(if_name, promisc=True)

    @classmethod
    def _from_socket(cls, sock: socket.socket) -> FpgaSocket:
        instance = cls.__new__(cls)
        instance._sock = sock
        return instance

    def write(self, frame: bytes) -> int:
        """Send a link-layer frame; return the number of bytes sent.

        Frames addressed to the FPGA are split into RAM write chunks;
        any other frame must be between MTU_MIN and MTU_MAX bytes.
        """
        frame = bytes(frame)
        if frame[DST_MAC_POS : DST_MAC_POS + MAC_LEN] == FPGA_MAC:
            return sum(self._sock.send(chunk) for chunk in chunk_ram_write(frame))
        if not MTU_MIN <= len(frame) <= MTU_MAX:
            raise FpgaFrameError(
                f"write length ({len(frame)}) should be between {MTU_MIN} and {MTU_MAX}"
            )
        return self._sock.send(frame)

    def read(self, size: int = MTU_MAX) -> bytes:
        """Receive one frame into a buffer of ``size`` bytes."""
        if size < MTU_MAX:
            raise FpgaFrameError(
                f"read buffer length ({size}) should not be lower than {MTU_MAX}"
            )
        return self._sock.recv(size)

    def close(self) -> None:
        self._sock.close()

    @property
    def closed(self) -> bool:
        return self._sock.fileno() == -1

    def __enter__(self) -> FpgaSocket:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Echo frames back over an FPGA link.")
    parser.add_argument("--interface", default="eth0")
    parser.add_argument("--count", type=int, default=None)
    args = parser.parse_args(argv)

    with FpgaSocket(args.interface) as fpga:
        handled = 0
        try:
            while args.count is None or handled < args.count:
                print("Waiting for read:")
                data = fpga.read(READ_BUF_SIZE)
                print(f"fpga_read() ret={len(data)}")
                if data:
                    try:
                        sent = fpga.write(data)
                    except FpgaFrameError as exc:
                        print(f"fpga_write(): {exc}", file=sys.stderr)
                        sent = -1
                    print(f"fpga_write() ret={sent}")
                handled += 1
        except KeyboardInterrupt:
            pass
    return 0