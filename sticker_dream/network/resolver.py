"""Local network address discovery."""

import logging
import re
import socket
from typing import Callable, Iterable, Mapping, Optional

import psutil

from ..models.network import NetworkIdentity, ServerURLs


logger = logging.getLogger(__name__)

_IPV4_PATTERN = re.compile(r"(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})", re.ASCII)

InterfaceSource = Callable[[], Mapping[str, Iterable]]


def is_valid_ipv4(address: str) -> bool:
    """
    Strict dotted-quad check.

    Args:
        address: Candidate address

    Returns:
        True if address is four decimal octets in 0..255
    """
    if not isinstance(address, str):
        return False
    match = _IPV4_PATTERN.fullmatch(address)
    if not match:
        return False
    return all(0 <= int(octet) <= 255 for octet in match.groups())


def is_loopback(address: str) -> bool:
    """Check whether a valid IPv4 address is in 127.0.0.0/8."""
    return address.split(".", 1)[0] == "127"


class NetworkIdentityResolver:
    """
    Finds the address other devices on the LAN can use to reach this host.

    Resolution is repeated on every call; the address can change between
    calls (e.g. a new DHCP lease) and that is accepted.
    """

    def __init__(self, interface_source: Optional[InterfaceSource] = None):
        """
        Initialize resolver.

        Args:
            interface_source: Function returning {interface: [addresses]} in
                platform order; defaults to psutil.net_if_addrs
        """
        self.interface_source = interface_source or psutil.net_if_addrs

    def resolve(self) -> NetworkIdentity:
        """
        Resolve the first non-loopback IPv4 address.

        Returns:
            NetworkIdentity, falling back to loopback when nothing qualifies
        """
        interfaces = self.interface_source()

        for name, addresses in interfaces.items():
            for addr in addresses:
                if addr.family != socket.AF_INET:
                    continue

                if not is_valid_ipv4(addr.address):
                    logger.debug(f"Ignoring malformed address on {name}: {addr.address!r}")
                    continue

                if is_loopback(addr.address):
                    continue

                logger.debug(f"Resolved local address {addr.address} on {name}")
                return NetworkIdentity.resolved(addr.address)

        reason = "no non-loopback IPv4 interface found"
        logger.warning(
            f"{reason}; using 127.0.0.1. Other devices will not be able to connect."
        )
        return NetworkIdentity.fallback(reason)

    def resolve_address(self) -> str:
        """Resolve and return only the address string."""
        return self.resolve().address

    def server_urls(self, port: int) -> ServerURLs:
        """
        Build local and network URLs for the HTTPS service.

        Args:
            port: Listening port

        Returns:
            ServerURLs from a fresh resolution
        """
        address = self.resolve_address()
        return ServerURLs(
            local=f"https://localhost:{port}",
            network=f"https://{address}:{port}",
        )
