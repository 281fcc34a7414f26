"""UDP transport for RPC messages."""

from __future__ import annotations

import socket
import struct
from enum import IntEnum

from netlab.rpc_msg import RPC_BUFFER_SIZE, RpcMessage, format_message

RPC_SERVER_HOST = "127.0.0.1"
RPC_SERVER_PORT = 8088

Address = tuple[str, int]


class RpcError(OSError):
    """Raised when the RPC transport fails to send or receive."""


class OpenFlag(IntEnum):
    CLIENT = 0
    SERVER = 1


def sock_htoa(host: int) -> str:
    """Convert a host-order IPv4 integer to dotted notation."""
    return socket.inet_ntoa(struct.pack("!I", host & 0xFFFFFFFF))


def sock_atoh(host_name: str) -> int:
    """Convert a dotted IPv4 address to a host-order integer."""
    try:
        packed = socket.inet_aton(host_name)
    except OSError as exc:
        raise ValueError(f"invalid IPv4 address: {host_name!r}") from exc
    return struct.unpack("!I", packed)[0]


def pack_address(host: int, port: int) -> Address:
    """Build a socket address from a host-order IPv4 integer and a port."""
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range: {port}")
    return sock_htoa(host), port


def unpack_address(address: Address) -> tuple[int, int]:
    """Split a socket address into a host-order IPv4 integer and a port."""
    host, port = address[0], address[1]
    return sock_atoh(host), port


class RpcInterface:
    """A UDP endpoint that exchanges RPC messages.

    A server binds to ``address`` and replies to whoever sent a message;
    a client connects to ``address`` and talks only to that server.
    """

    def __init__(self, oflag: OpenFlag, address: Address) -> None:
        self.oflag = OpenFlag(oflag)
        try:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as exc:
            raise RpcError(f"socket: {exc}") from exc
        try:
            if self.oflag is OpenFlag.SERVER:
                self._sock.bind(address)
            else:
                self._sock.connect(address)
        except OSError as exc:
            self._sock.close()
            raise RpcError(f"cannot open {address}: {exc}") from exc

    @property
    def local_address(self) -> Address:
        return self._sock.getsockname()

    @property
    def closed(self) -> bool:
        return self._sock.fileno() == -1

    def send(self, message: RpcMessage, destination: Address | None = None) -> int:
        """Send one message; a server must name the destination."""
        payload = message.encode()
        try:
            if self.oflag is OpenFlag.SERVER:
                if destination is None:
                    raise ValueError("a server must give a destination")
                sent = self._sock.sendto(payload, destination)
            else:
                sent = self._sock.send(payload)
        except OSError as exc:
            raise RpcError(f"send: {exc}") from exc
        print("\nsend msg: ")
        print(format_message(message))
        return sent

    def receive(self) -> tuple[RpcMessage, Address]:
        """Receive one message and return it with the sender's address."""
        try:
            data, source = self._sock.recvfrom(RPC_BUFFER_SIZE)
        except OSError as exc:
            raise RpcError(f"recv: {exc}") from exc
        message = RpcMessage.decode(data)
        print("\nrecv msg: ")
        print(format_message(message))
        return message, source

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> RpcInterface:
        return self

    def __exit__(self, *args) -> None:
        self.close()