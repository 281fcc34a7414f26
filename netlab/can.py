"""SocketCAN frame receiver and sender."""

from __future__ import annotations

import argparse
import socket
import struct
import sys
import time
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

CAN_EFF_FLAG = 0x80000000
CAN_RTR_FLAG = 0x40000000
CAN_ERR_FLAG = 0x20000000
CAN_ERR_MASK = 0x1FFFFFFF

CAN_MAX_DLEN = 8
SOL_CAN_RAW = 101
CAN_RAW_FILTER = 1

_FRAME = struct.Struct("=IB3x8s")
_FILTER = struct.Struct("=II")

FRAME_SIZE = _FRAME.size


class FrameType(Enum):
    STANDARD = "Standard Frame"
    EXTENDED = "Extend Frame"
    REMOTE = "Remote Frame"
    ERROR = "Error Frame"


@dataclass(frozen=True)
class CanFrame:
    """A classic CAN frame: identifier with flag bits, length code and data."""

    can_id: int
    data: bytes = b""
    dlc: int | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.can_id <= 0xFFFFFFFF:
            raise ValueError(f"CAN id out of range: {self.can_id:#x}")
        data = bytes(self.data)
        if len(data) > CAN_MAX_DLEN:
            raise ValueError(f"CAN data holds at most {CAN_MAX_DLEN} bytes")
        object.__setattr__(self, "data", data)
        dlc = len(data) if self.dlc is None else self.dlc
        if not 0 <= dlc <= CAN_MAX_DLEN:
            raise ValueError(f"DLC out of range: {dlc}")
        object.__setattr__(self, "dlc", dlc)

    def pack(self) -> bytes:
        """Return the frame in the kernel's ``struct can_frame`` layout."""
        return _FRAME.pack(self.can_id, self.dlc, self.data)

    @classmethod
    def unpack(cls, data: bytes) -> CanFrame:
        """Parse a ``struct can_frame`` buffer."""
        if len(data) != FRAME_SIZE:
            raise ValueError(f"CAN frame must be {FRAME_SIZE} bytes, not {len(data)}")
        can_id, dlc, payload = _FRAME.unpack(data)
        dlc = min(dlc, CAN_MAX_DLEN)
        return cls(can_id, payload[:dlc], dlc)

    def frame_type(self) -> FrameType:
        if self.can_id & CAN_EFF_FLAG:
            return FrameType.EXTENDED
        if self.can_id & CAN_RTR_FLAG:
            return FrameType.REMOTE
        if self.can_id & CAN_ERR_FLAG:
            return FrameType.ERROR
        return FrameType.STANDARD


def parse_can_id(text: str) -> int:
    """Parse a hexadecimal CAN id, with or without a ``0x`` prefix."""
    try:
        return int(text.strip(), 16)
    except ValueError as exc:
        raise ValueError(f"invalid CAN id: {text!r}") from exc


def demo_frames() -> list[CanFrame]:
    """Return the standard, extended and remote frames the sender emits."""
    return [
        CanFrame(0x12, bytes([0x01, 0xAB])),
        CanFrame(CAN_EFF_FLAG | 0x12, bytes([0x02, 0xCD])),
        CanFrame(CAN_RTR_FLAG | 0x12),
    ]


def _out(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def open_can_socket(interface: str, can_id: int | None = None) -> socket.socket:
    """Open a raw CAN socket on ``interface``, filtered to ``can_id`` if given."""
    sock = socket.socket(socket.AF_CAN, socket.SOCK_RAW, socket.CAN_RAW)
    try:
        sock.bind((interface,))
        if can_id is not None:
            sock.setsockopt(
                SOL_CAN_RAW, CAN_RAW_FILTER, _FILTER.pack(can_id, CAN_ERR_MASK)
            )
            print(f"Add CAN frame filter: can_id=0x{can_id:x}")
    except OSError:
        sock.close()
        raise
    return sock


def receive_loop(
    sock: socket.socket,
    out: TextIO | None = None,
    max_frames: int | None = None,
    delay: float = 1.0,
) -> list[CanFrame]:
    """Print every frame received and its type; return the frames."""
    out = _out(out)
    frames: list[CanFrame] = []
    while max_frames is None or len(frames) < max_frames:
        try:
            data = sock.recv(FRAME_SIZE)
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            continue
        if not data:
            print("recv: no data", file=sys.stderr)
            continue
        try:
            frame = CanFrame.unpack(data)
        except ValueError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            continue
        padded = frame.data.ljust(CAN_MAX_DLEN, b"\x00")
        out.write(
            f"[cycle={len(frames)}] ID=0x{frame.can_id:x} DLC=0x{frame.dlc:x} "
            f"data[0]=0x{padded[0]:x} data[1]=0x{padded[1]:x}\n"
        )
        out.write(f"- {frame.frame_type().value}\n")
        frames.append(frame)
        time.sleep(delay)
    return frames


def send_frames(
    sock: socket.socket,
    frames: Iterable[CanFrame],
    out: TextIO | None = None,
    delay: float = 1.0,
) -> int:
    """Send frames one at a time, stopping at the first failure.

    Returns the number of frames sent.
    """
    out = _out(out)
    sent_count = 0
    for index, frame in enumerate(frames):
        try:
            sent = sock.send(frame.pack())
        except OSError as exc:
            print(f"send frame: {exc}", file=sys.stderr)
            break
        if sent <= 0:
            print("send frame: nothing sent", file=sys.stderr)
            break
        out.write(
            f"[cycle=1] send Frame {index} ({frame.frame_type().value}) success.\n"
        )
        sent_count += 1
        time.sleep(delay)
    return sent_count


def receive_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print CAN frames received.")
    parser.add_argument("interface", help="CAN port, such as can0")
    parser.add_argument("can_id", nargs="?", type=parse_can_id, default=None)
    parser.add_argument("--count", type=int, default=None)
    args = parser.parse_args(argv)
    try:
        sock = open_can_socket(args.interface, args.can_id)
    except OSError as exc:
        print(f"socket: {exc}", file=sys.stderr)
        return 1
    with sock:
        try:
            receive_loop(sock, max_frames=args.count)
        except KeyboardInterrupt:
            pass
    return 0


def send_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send demonstration CAN frames.")
    parser.add_argument("interface", help="CAN port, such as can0")
    args = parser.parse_args(argv)
    try:
        sock = open_can_socket(args.interface)
        # The sender reads nothing back, so drop every incoming frame.
        sock.setsockopt(SOL_CAN_RAW, CAN_RAW_FILTER, b"")
    except OSError as exc:
        print(f"socket: {exc}", file=sys.stderr)
        return 1
    with sock:
        send_frames(sock, demo_frames())
    return 0