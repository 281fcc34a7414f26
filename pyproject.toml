[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netlab"
version = "0.1.0"
description = "Small Linux socket tools: a checksummed UDP RPC link, TCP/UDP echo servers, raw Ethernet, FPGA framing, CAN, netlink uevents and a service monitor"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "socket",
    "udp",
    "tcp",
    "rpc",
    "raw-socket",
    "socketcan",
    "netlink",
    "networking",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
netlab-rpc-server = "netlab.rpc_server:main"
netlab-rpc-client = "netlab.rpc_client:main"
netlab-fpga = "netlab.fpga:main"
netlab-raw-server = "netlab.raw_packet:server_main"
netlab-raw-client = "netlab.raw_packet:client_main"
netlab-raw-send-recv = "netlab.raw_packet:send_recv_main"
netlab-tcp-server-blocked = "netlab.tcp:server_blocked_main"
netlab-tcp-server-select = "netlab.tcp:server_select_main"
netlab-tcp-server-epoll = "netlab.tcp:server_epoll_main"
netlab-tcp-client = "netlab.tcp:client_main"
netlab-udp-server = "netlab.udp:server_main"
netlab-udp-client = "netlab.udp:client_main"
netlab-udp-broadcast = "netlab.udp:broadcast_main"
netlab-canrecv = "netlab.can:receive_main"
netlab-cansend = "netlab.can:send_main"
netlab-mac-address = "netlab.macaddr:main"
netlab-netlink = "netlab.netlink:main"
netlab-service-monitor = "netlab.service_monitor:main"

[tool.hatch.build.targets.wheel]
packages = ["netlab"]

[tool.hatch.build.targets.sdist]
include = ["netlab", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
