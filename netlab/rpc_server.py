"""RPC server: answers every request it receives."""

from __future__ import annotations

import argparse
from dataclasses import replace

from netlab.rpc_cmd import UnknownCommandError, run_command
from netlab.rpc_intf import (
    RPC_SERVER_PORT,
    OpenFlag,
    RpcInterface,
    pack_address,
    sock_htoa,
    unpack_address,
)
from netlab.rpc_msg import RpcMessage, RqRs

INADDR_ANY = 0


def handle_request(request: RpcMessage) -> RpcMessage:
    """Run the request's command and return the response to send back.

    Requests for unknown commands are echoed back as responses unchanged.
    """
    try:
        response = run_command(request)
    except UnknownCommandError:
        response = request
    return replace(response, rqrs=RqRs.RESPONSE)


def serve(interface: RpcInterface, max_requests: int | None = None) -> int:
    """Answer requests until ``max_requests`` have been handled.

    Malformed datagrams are skipped. Returns the number of requests answered.
    """
    handled = 0
    while max_requests is None or handled < max_requests:
        try:
            request, client = interface.receive()
        except ValueError:
            continue
        host, port = unpack_address(client)
        print(f"Receive message from {sock_htoa(host)}:{port}")
        interface.send(handle_request(request), client)
        handled += 1
    return handled


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the RPC server.")
    parser.add_argument("--port", type=int, default=RPC_SERVER_PORT)
    parser.add_argument("--max-requests", type=int, default=None)
    args = parser.parse_args(argv)

    with RpcInterface(OpenFlag.SERVER, pack_address(INADDR_ANY, args.port)) as intf:
        try:
            serve(intf, args.max_requests)
        except KeyboardInterrupt:
            pass
    return 0