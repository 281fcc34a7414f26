# netlab

Small Linux networking tools and the pieces they are built from:

- a UDP request/response link with a one-byte checksum (`netlab.rpc_msg`,
  `netlab.rpc_intf`, `netlab.rpc_cmd`), with a server (`netlab.rpc_server`)
  and a client (`netlab.rpc_client`);
- a TCP echo server and client, and a datagram printer (`netlab.tcp`);
- a UDP echo server and client, and a broadcast sender (`netlab.udp`);
- raw Ethernet (`AF_PACKET`) senders and receivers (`netlab.raw_packet`);
- an FPGA RAM-write framing layer over raw Ethernet (`netlab.fpga`);
- SocketCAN send and receive (`netlab.can`);
- a MAC address lookup (`netlab.macaddr`);
- a kernel uevent listener over netlink (`netlab.netlink`);
- a supervisor that restarts a program whenever it exits
  (`netlab.service_monitor`).

Only the standard library is used. Raw, CAN and netlink sockets need Linux
and usually root privileges.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Commands

| Command | What it does | Options |
| --- | --- | --- |
| `netlab-rpc-server` | Answers RPC requests on UDP port 8088 | `--port`, `--max-requests` |
| `netlab-rpc-client` | Sends one request for each command 0x00–0x0F to 127.0.0.1:8088, waiting for each reply | `--host`, `--port`, `--delay` |
| `netlab-tcp-server-blocked` | TCP echo server on 0.0.0.0:8888, one client at a time | `--host`, `--port` |
| `netlab-tcp-server-select` | Prints every UDP datagram received on 0.0.0.0:8888 | `--host`, `--port` |
| `netlab-tcp-server-epoll` | Same as `netlab-tcp-server-select` | `--host`, `--port` |
| `netlab-tcp-client` | Sends lines from standard input to 127.0.0.1:8888 over TCP and prints the echo | `--host`, `--port` |
| `netlab-udp-server` | UDP echo server on 0.0.0.0:8888 | `--host`, `--port` |
| `netlab-udp-client` | Sends lines from standard input to 127.0.0.1:8888 over UDP and prints the echo | `--host`, `--port` |
| `netlab-udp-broadcast` | Sends a counter byte to 192.168.1.255:8888 for each character read; `q` stops | `--host`, `--port` |
| `netlab-raw-server` | Prints every frame seen on `lo` as hex | `--interface`, `--count` |
| `netlab-raw-client` | Sends a 16-byte frame on `lo` for each character read, incrementing every byte after each send | `--interface` |
| `netlab-raw-send-recv` | Puts the interface in promiscuous mode, sends a frame and prints the next frame received, for each character read | `--interface` |
| `netlab-fpga` | Reads frames on `eth0` and writes them back through the FPGA framing layer | `--interface`, `--count` |
| `netlab-canrecv` | Prints CAN frames from a CAN port, optionally filtered by a hex id | `interface`, `[can_id]`, `--count` |
| `netlab-cansend` | Sends a standard, an extended and a remote frame on a CAN port | `interface` |
| `netlab-mac-address` | Prints the MAC address of a network interface | `interface` |
| `netlab-netlink` | Prints kernel hotplug events as they arrive | |
| `netlab-service-monitor` | Runs a program and starts it again each time it exits | `command...`, `--delay`, `--max-restarts` |

Examples:

```
netlab-mac-address eth0
netlab-canrecv can0 12
netlab-cansend can0
netlab-service-monitor --delay 3 -- /usr/bin/sleep 10
```

In the TCP and UDP clients, a line starting with `quit` or `exit` is sent and
then ends the session. The TCP server closes that connection and waits for the
next client. The UDP server compares only the first four bytes of `quitall`
and `exitall`, so any datagram starting with `quit` or `exit` stops it. The
UDP server's reply holds the datagram up to its first NUL byte.

`netlab-service-monitor` logs each start and exit, counts down `--delay`
seconds between runs, and ignores SIGINT, SIGTERM and SIGQUIT (logging each
one), so it has to be stopped with another signal. A program that cannot be
started is counted as exiting with code 21.

## Library use

The RPC wire format is one byte holding the command (upper seven bits) and
the request/response flag (lowest bit), a two-byte little-endian length, the
payload, and a final byte chosen so that all bytes of the message add up to
zero modulo 256. `netlab.checksum.calculate_checksum` computes that byte sum,
and `RpcMessage.encode` / `RpcMessage.decode` convert between messages and
bytes; decoding a message whose bytes do not sum to zero raises
`ChecksumError`, and a message that is too short or shorter than its declared
length raises `ValueError`.

```python
from netlab.checksum import calculate_checksum
from netlab.rpc_msg import Command, RpcMessage

def roundtrip(message: RpcMessage) -> RpcMessage:
    wire = message.encode()
    assert calculate_checksum(wire) == 0
    return RpcMessage.decode(wire)

roundtrip(RpcMessage(Command.LOGIN, data=b"\x01\x02"))
```

`RpcInterface` wraps the UDP socket and works as a context manager; it is
opened either as a server (bound to the address) or as a client (connected to
it), chosen with `OpenFlag`, and raises `RpcError` when the socket fails.
`pack_address`, `unpack_address`, `sock_htoa` and `sock_atoh` convert between
host-order integers and dotted addresses.

`netlab.rpc_cmd.run_command` dispatches a request to its handler and raises
`UnknownCommandError` for a command that has none.
`netlab.rpc_server.handle_request` turns a request into the response the
server sends, echoing unknown commands back unchanged, and
`netlab.rpc_server.serve` runs the receive-and-reply loop on an
`RpcInterface`.

`netlab.can.CanFrame` packs and unpacks SocketCAN frames, and
`CanFrame.frame_type` tells standard, extended, remote and error frames
apart. `netlab.fpga.chunk_ram_write` splits an FPGA RAM-write frame into
pieces that fit the link MTU, zero-padding short pieces and appending a
32-bit byte-sum checksum to each. `netlab.raw_packet.hex_dump` formats bytes
eight to a line, and `netlab.netlink.split_uevent` splits a uevent message
into its strings.

## What it does not do

- The RPC command handlers only print the name of the command; the server
  replies with the request turned into a response and carries out no login,
  session or server management.
- `netlab-tcp-server-select` and `netlab-tcp-server-epoll` print UDP
  datagrams; there is no TCP server that serves several clients at once.