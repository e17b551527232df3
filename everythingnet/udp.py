"""UDP transport: broadcast (and optionally multicast) sockets for the mesh."""

from __future__ import annotations

import ipaddress
import logging
import socket
from typing import Iterable, Optional, Union

from everythingnet.net import BCAST_MAGIC, MAX_PACKET
from everythingnet.node import MESSAGE_HEADER_SIZE

__all__ = [
    "DEFAULT_PORT",
    "DEFAULT_MCAST_GROUP",
    "DEFAULT_MCAST_PORT",
    "DEFAULT_MAX_INTERFACES",
    "broadcast_address",
    "prefix_length",
    "validate_packet",
    "UdpTransport",
]

DEFAULT_PORT = 24510
DEFAULT_MCAST_GROUP = "239.255.24.51"
DEFAULT_MCAST_PORT = 24511
DEFAULT_MAX_INTERFACES = 8
_LIMITED_BROADCAST = "255.255.255.255"
_U32 = 0xFFFFFFFF

_log = logging.getLogger(__name__)

Address = Union[str, int, ipaddress.IPv4Address]


def _ipv4(value: Address) -> int:
    return int(ipaddress.IPv4Address(value))


def broadcast_address(address: Address, netmask: Address) -> str:
    """The broadcast address of the network ``address`` lives on."""
    host_bits = ~_ipv4(netmask) & _U32
    return str(ipaddress.IPv4Address(_ipv4(address) | host_bits))


def prefix_length(netmask: Address) -> int:
    """Number of leading one bits of ``netmask`` (24 for 255.255.255.0)."""
    host_bits = ~_ipv4(netmask) & _U32
    return 32 - host_bits.bit_length()


def validate_packet(data: bytes) -> bool:
    """True if ``data`` carries our magic and its reported length matches."""
    if len(data) < MESSAGE_HEADER_SIZE + 8:
        return False
    if int.from_bytes(data[:4], "big") != BCAST_MAGIC:
        return False
    reported = (
        int.from_bytes(data[MESSAGE_HEADER_SIZE + 4: MESSAGE_HEADER_SIZE + 8], "big")
        + MESSAGE_HEADER_SIZE
    )
    if reported != len(data):
        _log.warning(
            "Malformed (or malicious?) packet received, reported length (%d) != "
            "received (%d). Ignoring.",
            reported,
            len(data),
        )
        return False
    return True


class UdpTransport:
    """Non-blocking UDP sockets that send to each interface's broadcast address.

    ``interfaces`` holds ``(address, netmask)`` pairs; with ``None`` the
    limited broadcast address is used.  Packets are sent to every
    broadcast address on the bound port, and to the multicast group as
    well when ``multicast`` is set.
    """

    def __init__(
        self,
        interfaces: Optional[Iterable[tuple[Address, Address]]] = None,
        *,
        port: int = DEFAULT_PORT,
        multicast_group: str = DEFAULT_MCAST_GROUP,
        multicast_port: int = DEFAULT_MCAST_PORT,
        multicast: bool = False,
        max_packet: int = MAX_PACKET,
        max_interfaces: int = DEFAULT_MAX_INTERFACES,
    ) -> None:
        self.max_packet = max_packet
        self.multicast = multicast
        self.multicast_address = (multicast_group, multicast_port)
        self.addresses = self._collect(interfaces, max_interfaces)

        self._bcast = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        self._mcast: Optional[socket.socket] = None
        try:
            self._bcast.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._bcast.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            self._bcast.bind(("", port))
            self._bcast.setblocking(False)
            self.port = self._bcast.getsockname()[1]

            self._mcast = socket.socket(
                socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP
            )
            self._mcast.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._mcast.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, 0)
            self._mcast.setblocking(False)
        except OSError:
            self.close()
            raise

    @staticmethod
    def _collect(
        interfaces: Optional[Iterable[tuple[Address, Address]]], limit: int
    ) -> list[str]:
        if interfaces is None:
            return [_LIMITED_BROADCAST]
        addresses: list[str] = []
        for address, netmask in interfaces:
            if len(addresses) >= limit:
                _log.error(
                    "Exceeded maximum number of broadcast interfaces (%d)! "
                    "Use a larger limit, or fewer interfaces.",
                    limit,
                )
                break
            bcast = broadcast_address(address, netmask)
            _log.info(
                "adding iface %d with ip %s/%d", len(addresses), bcast, prefix_length(netmask)
            )
            addresses.append(bcast)
        return addresses

    @property
    def closed(self) -> bool:
        return self._bcast.fileno() == -1

    def _sockets(self) -> list[socket.socket]:
        return [s for s in (self._bcast, self._mcast) if s is not None]

    def receive(self) -> Optional[bytes]:
        """Return the next valid waiting packet, or ``None``."""
        for sock in self._sockets():
            while True:
                try:
                    data = sock.recv(self.max_packet)
                except (BlockingIOError, InterruptedError):
                    break
                except OSError as exc:
                    _log.error("recvfrom: %s", exc)
                    return None
                if validate_packet(data):
                    return data
        return None

    def send(self, data: bytes) -> None:
        """Send ``data`` to every broadcast address (and the multicast group)."""
        for address in self.addresses:
            try:
                self._bcast.sendto(data, (address, self.port))
            except OSError as exc:
                _log.error("sendto: %s", exc)
                return
        if self.multicast and self._mcast is not None:
            try:
                self._mcast.sendto(data, self.multicast_address)
            except OSError as exc:
                _log.error("sendto: %s", exc)

    def close(self) -> None:
        """Close both sockets."""
        for sock in self._sockets():
            sock.close()

    def __enter__(self) -> "UdpTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()