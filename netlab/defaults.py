"""Default addresses and port shared by the TCP and UDP examples."""

PORT = 8888

IP_ANY = "0.0.0.0"
IP_LOOPBACK = "127.0.0.1"
IP_BROADCAST = "192.168.1.255"