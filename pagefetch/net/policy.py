"""
Outbound address policy.

Decides whether an IP address may be dialed when the destination comes from
untrusted input. Consulted for literal-IP URLs and again for every address a
hostname resolves to, right before connecting.
"""

import ipaddress
from typing import Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_PRIVATE_NETWORKS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("fc00::/7"),
)

_SHARED_NAT = ipaddress.ip_network("100.64.0.0/10")

def parse_ip(value: Union[str, IPAddress, None]) -> Optional[IPAddress]:
    """Parse a literal IP (brackets allowed); return None for anything else."""
    if value is None:
        return None
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    try:
        return ipaddress.ip_address(str(value).strip().strip("[]"))
    except ValueError:
        return None

class BlockPolicy:
    """Stateless classifier for forbidden outbound addresses."""

    def is_blocked(self, ip: Union[str, IPAddress, None]) -> bool:
        addr = parse_ip(ip)
        if addr is None:
            return True

        if addr.version == 6 and addr.ipv4_mapped is not None:
            addr = addr.ipv4_mapped

        if (
            addr.is_loopback
            or addr.is_unspecified
            or addr.is_multicast
            or addr.is_link_local
        ):
            return True
        if any(addr in net for net in _PRIVATE_NETWORKS if net.version == addr.version):
            return True

        if addr.version == 4:
            first_octet = addr.packed[0]
            # "this network" and everything from class D upward
            if first_octet == 0 or first_octet >= 224:
                return True
            if addr in _SHARED_NAT:
                return True

        return False

DEFAULT_POLICY = BlockPolicy()