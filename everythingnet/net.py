"""The networking core: reading broadcasts from other nodes and sending ours.

Broadcast message layout (big-endian)::

    magic     u32
    crc       u32  (currently always 0)
    uuid      2 * u64  the sender
    node list (see :mod:`everythingnet.node`)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from everythingnet.node import MESSAGE_HEADER_SIZE, DiscoverySource, NodeList

__all__ = [
    "BCAST_MAGIC",
    "MAX_PACKET",
    "BROADCAST_EVERY",
    "BroadcastMessage",
    "Transport",
    "NetCore",
]

BCAST_MAGIC = 0x45564E54
MAX_PACKET = 32 * 1024
BROADCAST_EVERY = 15
"""Our own list is sent on every this many calls of the loop."""

_HEADER = struct.Struct(">IIQQ")
assert _HEADER.size == MESSAGE_HEADER_SIZE


@dataclass
class BroadcastMessage:
    """One broadcast packet: the sender's UUID and its node list."""

    uuid: tuple[int, int]
    node_list: NodeList
    crc: int = 0

    def to_bytes(self) -> bytes:
        return (
            _HEADER.pack(BCAST_MAGIC, self.crc, self.uuid[0], self.uuid[1])
            + self.node_list.to_bytes()
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "BroadcastMessage":
        """Decode a packet; wrong magic or a length mismatch raise ValueError."""
        data = bytes(data)
        if len(data) < _HEADER.size + 8:
            raise ValueError("truncated broadcast message")
        magic, crc, uuid0, uuid1 = _HEADER.unpack_from(data)
        if magic != BCAST_MAGIC:
            raise ValueError(f"bad magic: 0x{magic:08X}")
        reported = int.from_bytes(data[_HEADER.size + 4: _HEADER.size + 8], "big")
        if reported + _HEADER.size != len(data):
            raise ValueError(
                f"reported length ({reported + _HEADER.size}) != received ({len(data)})"
            )
        node_list = NodeList.from_bytes(data[_HEADER.size:])
        return cls(uuid=(uuid0, uuid1), node_list=node_list, crc=crc)


@runtime_checkable
class Transport(Protocol):
    """Moves raw packets between this node and the network."""

    def receive(self) -> Optional[bytes]:
        """Return the next waiting packet, or ``None`` if there is none."""
        ...

    def send(self, data: bytes) -> None:
        """Send a packet to every reachable node."""
        ...


class NetCore:
    """Drains incoming broadcasts and periodically broadcasts our node list."""

    def __init__(
        self,
        transport: Transport,
        node_list: NodeList,
        local_uuid: tuple[int, int],
        *,
        max_packet: int = MAX_PACKET,
        broadcast_every: int = BROADCAST_EVERY,
    ) -> None:
        if broadcast_every < 1:
            raise ValueError(f"broadcast_every must be positive: {broadcast_every}")
        self.transport = transport
        self.node_list = node_list
        self.local_uuid = (local_uuid[0], local_uuid[1])
        self.max_packet = max_packet
        self.broadcast_every = broadcast_every
        self.counter = 0

    def handle_broadcast(self) -> list[str]:
        """Run one networking step; return announcements of new nodes.

        Reading stops at the first packet we sent ourselves.
        """
        announcements: list[str] = []
        while (data := self.transport.receive()) is not None:
            try:
                msg = BroadcastMessage.from_bytes(data)
            except ValueError:
                continue
            if msg.uuid == self.local_uuid:
                break
            announcements.extend(
                self.node_list.merge(msg.node_list, DiscoverySource.BROADCAST)
            )

        try:
            if self.counter % self.broadcast_every == 0:
                self.node_list.check_size(self.max_packet)
                packet = BroadcastMessage(uuid=self.local_uuid, node_list=self.node_list)
                self.transport.send(packet.to_bytes())
        finally:
            self.counter += 1
        return announcements