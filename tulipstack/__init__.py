"""Building blocks for a user-space Ethernet/IPv4/ARP/ICMP stack and TCP connection state."""

__version__ = "0.1.0"