"""Linux socket tools: UDP RPC, TCP/UDP echo, raw Ethernet and FPGA framing, CAN, netlink and a service monitor."""

__version__ = "0.1.0"