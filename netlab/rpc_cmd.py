"""Dispatch of RPC requests to their command handlers."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable

from netlab.rpc_msg import Command, RpcMessage

Handler = Callable[[RpcMessage, RpcMessage], None]


class UnknownCommandError(LookupError):
    """Raised when a request names a command with no handler."""

    def __init__(self, cmd: int) -> None:
        super().__init__(f"unknown command 0x{cmd:02x}")
        self.cmd = cmd


def _announce(request: RpcMessage, response: RpcMessage) -> None:
    print(Command(request.cmd).name.lower())


_HANDLERS: dict[int, Handler] = {command: _announce for command in Command}


def run_command(request: RpcMessage) -> RpcMessage:
    """Run the handler for ``request`` and return the response message.

    The response starts as a copy of the request.
    """
    handler = _HANDLERS.get(request.cmd)
    if handler is None:
        raise UnknownCommandError(request.cmd)
    response = replace(request)
    handler(request, response)
    return response