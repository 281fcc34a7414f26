"""RPC message definitions and their wire encoding."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from netlab.checksum import calculate_checksum

RPC_BUFFER_SIZE = 512
HEADER_SIZE = 3
TRAILER_SIZE = 1


class Command(IntEnum):
    LOGIN = 0x00
    EXIT = 0x01
    GET_SERVER_NUM = 0x02
    GET_SERVER_INFO = 0x03
    ATTACH_SERVER = 0x04
    DETACH_SERVER = 0x05
    SWITCH_RIGHTS = 0x06
    SOL_DATA = 0x0F


class RqRs(IntEnum):
    REQUEST = 0
    RESPONSE = 1


class CompletionCode(IntEnum):
    OK = 0x00
    INVALID_SESSION_NO = 0x01


class ServerState(IntEnum):
    OK = 0x00
    NOT_SUPPORT_SOL = 0x01
    RMCPP_SESSION_ERR = 0x02


class ChecksumError(ValueError):
    """Raised when a received message fails its checksum."""


@dataclass(frozen=True)
class RpcMessage:
    """One RPC message: a 7-bit command, a request/response bit and a payload."""

    cmd: int
    rqrs: int = RqRs.REQUEST
    data: bytes = b""

    def __post_init__(self) -> None:
        if not 0 <= self.cmd <= 0x7F:
            raise ValueError(f"command {self.cmd} does not fit in 7 bits")
        if self.rqrs not in (0, 1):
            raise ValueError(f"rqrs must be 0 or 1, not {self.rqrs}")
        object.__setattr__(self, "data", bytes(self.data))

    @property
    def data_len(self) -> int:
        return len(self.data)

    def encode(self) -> bytes:
        """Serialize to header, payload and a trailing checksum byte."""
        size = HEADER_SIZE + self.data_len + TRAILER_SIZE
        if size > RPC_BUFFER_SIZE:
            raise ValueError(f"message of {size} bytes exceeds {RPC_BUFFER_SIZE}")
        body = bytes(
            [
                (self.cmd << 1) | self.rqrs,
                self.data_len & 0xFF,
                (self.data_len >> 8) & 0xFF,
            ]
        ) + self.data
        return body + bytes([(-calculate_checksum(body)) & 0xFF])

    @classmethod
    def decode(cls, data: bytes) -> RpcMessage:
        """Parse a received buffer, checking its checksum first."""
        data = bytes(data)
        if len(data) < HEADER_SIZE + TRAILER_SIZE:
            raise ValueError(f"message too short: {len(data)} bytes")
        if calculate_checksum(data) != 0:
            raise ChecksumError("message checksum mismatch")
        data_len = data[2] << 8 | data[1]
        payload = data[HEADER_SIZE:HEADER_SIZE + data_len]
        if len(payload) < data_len:
            raise ValueError(
                f"message declares {data_len} data bytes but holds {len(payload)}"
            )
        return cls(cmd=data[0] >> 1, rqrs=data[0] & 0x01, data=payload)


def format_message(message: RpcMessage) -> str:
    """Return a short human-readable summary of a message."""
    return (
        f"> cmd     : 0x{message.cmd:02x}\n"
        f"> rqrs    : 0x{message.rqrs:02x}\n"
        f"> data len: {message.data_len}"
    )