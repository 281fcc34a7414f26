"""RPC client: sends a request for every command number and reads replies."""

from __future__ import annotations

import argparse
import time

from netlab.rpc_intf import (
    RPC_SERVER_HOST,
    RPC_SERVER_PORT,
    OpenFlag,
    RpcInterface,
    pack_address,
    sock_atoh,
)
from netlab.rpc_msg import RpcMessage, RqRs

LAST_COMMAND = 0x0F


def run_client(interface: RpcInterface, delay: float = 1.0) -> list[RpcMessage]:
    """Send requests for commands 0 to 0x0F, one at a time; return the replies."""
    replies = []
    for cmd in range(LAST_COMMAND + 1):
        interface.send(RpcMessage(cmd, RqRs.REQUEST))
        reply, _ = interface.receive()
        replies.append(reply)
        time.sleep(delay)
    return replies


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Exercise an RPC server.")
    parser.add_argument("--host", default=RPC_SERVER_HOST)
    parser.add_argument("--port", type=int, default=RPC_SERVER_PORT)
    parser.add_argument("--delay", type=float, default=1.0)
    args = parser.parse_args(argv)

    address = pack_address(sock_atoh(args.host), args.port)
    with RpcInterface(OpenFlag.CLIENT, address) as intf:
        run_client(intf, args.delay)
    return 0