"""Node entries and the list of known nodes that travels in every broadcast.

Wire layout (all integers big-endian):

Node list::

    version  u32
    length   u32   total size of the list, this header included
    entries  ...

Node entry::

    size      u16  total size of the entry
    num_ip    u8
    distance  u8   hops from the node that sent the list (0 = itself)
    ips       num_ip * u32
    uuid      2 * u64
    cap       u32
    mem_kb    u32
    name, version, device name, os, arch, cpu, gpu
              each a UTF-8 string ended by a NUL byte
"""

from __future__ import annotations

import enum
import ipaddress
import struct
from dataclasses import dataclass, field
from typing import Optional

from everythingnet.cap import Capability, cap_to_str
from everythingnet.platinfo import PlatformInfo

__all__ = [
    "NODELIST_V1",
    "LOCAL_VERSION",
    "MESSAGE_HEADER_SIZE",
    "DiscoverySource",
    "NodeListTooLarge",
    "NodeEntry",
    "NodeList",
]

NODELIST_V1 = 1
LOCAL_VERSION = "somever"
MESSAGE_HEADER_SIZE = 24
"""Bytes of a broadcast message in front of its node list."""

_LIST_HEADER = struct.Struct(">II")
_ENTRY_HEAD = struct.Struct(">HBB")
_ENTRY_TAIL = struct.Struct(">QQII")
_STRING_COUNT = 7
_MIN_ENTRY_SIZE = _ENTRY_HEAD.size + _ENTRY_TAIL.size + _STRING_COUNT
_U32 = 0xFFFFFFFF
_U64 = 0xFFFFFFFFFFFFFFFF


class DiscoverySource(enum.Enum):
    """How a node came to be known."""

    BROADCAST = "Broadcast"
    MULTICAST = "Multicast"
    OTHER_NODE = "Other Node"

    @property
    def label(self) -> str:
        return self.value


class NodeListTooLarge(Exception):
    """The node list no longer fits into one packet."""

    def __init__(self, length: int, budget: int, max_packet: int) -> None:
        self.length = length
        self.budget = budget
        self.max_packet = max_packet
        super().__init__(
            f"Out of space to fit node list in packet! "
            f"(overbudget by {length - budget} bytes)\n"
            "Possible solutions:\n"
            "  - Consider connecting less devices into the mesh\n"
            "  - Consider reducing the length of device names\n"
            f"  - Use a larger maximum packet size on every device "
            f"(currently {max_packet // 1024}KB)"
        )


def _encode_string(text: str) -> bytes:
    raw = text.encode("utf-8")
    if b"\0" in raw:
        raise ValueError(f"string must not contain NUL: {text!r}")
    return raw + b"\0"


def _check_range(label: str, value: int, maximum: int) -> int:
    value = int(value)
    if not 0 <= value <= maximum:
        raise ValueError(f"{label} out of range: {value}")
    return value


@dataclass
class NodeEntry:
    """One node of the mesh as it is described on the wire."""

    name: str
    uuid: tuple[int, int]
    version: str = LOCAL_VERSION
    cap: int = Capability.NONE
    mem_kb: int = 0
    device_name: str = ""
    os: str = ""
    arch: str = ""
    cpu: str = ""
    gpu: str = ""
    ips: tuple[str, ...] = ()
    distance: int = 0

    def _strings(self) -> tuple[str, ...]:
        return (
            self.name,
            self.version,
            self.device_name,
            self.os,
            self.arch,
            self.cpu,
            self.gpu,
        )

    @property
    def size(self) -> int:
        """Size of the encoded entry in bytes."""
        return len(self.to_bytes())

    def to_bytes(self) -> bytes:
        """Encode the entry in its wire form."""
        if len(self.ips) > 0xFF:
            raise ValueError(f"too many IP addresses: {len(self.ips)}")
        distance = _check_range("distance", self.distance, 0xFF)
        uuid0 = _check_range("uuid", self.uuid[0], _U64)
        uuid1 = _check_range("uuid", self.uuid[1], _U64)
        cap = _check_range("cap", self.cap, _U32)
        mem_kb = _check_range("mem_kb", self.mem_kb, _U32)

        ips = b"".join(ipaddress.IPv4Address(ip).packed for ip in self.ips)
        strings = b"".join(_encode_string(s) for s in self._strings())
        size = _ENTRY_HEAD.size + len(ips) + _ENTRY_TAIL.size + len(strings)
        if size > 0xFFFF:
            raise ValueError(f"entry too large: {size} bytes")
        return (
            _ENTRY_HEAD.pack(size, len(self.ips), distance)
            + ips
            + _ENTRY_TAIL.pack(uuid0, uuid1, cap, mem_kb)
            + strings
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "NodeEntry":
        """Decode the entry at the start of ``data``; trailing bytes are ignored."""
        data = bytes(data)
        if len(data) < _ENTRY_HEAD.size:
            raise ValueError("truncated node entry")
        size, num_ip, distance = _ENTRY_HEAD.unpack_from(data)
        if size < _MIN_ENTRY_SIZE + 4 * num_ip:
            raise ValueError(f"node entry size too small: {size}")
        if size > len(data):
            raise ValueError(f"node entry size {size} exceeds available {len(data)}")
        body = data[:size]

        pos = _ENTRY_HEAD.size
        ips = tuple(
            str(ipaddress.IPv4Address(body[pos + 4 * i: pos + 4 * i + 4]))
            for i in range(num_ip)
        )
        pos += 4 * num_ip
        uuid0, uuid1, cap, mem_kb = _ENTRY_TAIL.unpack_from(body, pos)
        pos += _ENTRY_TAIL.size

        parts = body[pos:].split(b"\0")
        if len(parts) != _STRING_COUNT + 1 or parts[-1]:
            raise ValueError("malformed strings in node entry")
        name, version, device_name, os_name, arch, cpu, gpu = (
            part.decode("utf-8", "replace") for part in parts[:-1]
        )
        return cls(
            name=name,
            uuid=(uuid0, uuid1),
            version=version,
            cap=Capability(cap),
            mem_kb=mem_kb,
            device_name=device_name,
            os=os_name,
            arch=arch,
            cpu=cpu,
            gpu=gpu,
            ips=ips,
            distance=distance,
        )

    def describe(
        self, source: DiscoverySource, discovered_by: Optional["NodeEntry"] = None
    ) -> str:
        """A multi-line human-readable dump of the entry."""
        origin = f"Node discovery source: {source.label}"
        if source is DiscoverySource.OTHER_NODE and discovered_by is not None:
            origin += f" [discovered by node: {discovered_by.name}]"
        cap = int(self.cap)
        lines = [
            "==== Node dump ====",
            origin,
            f"size value: {self.size}",
            f"num IPs: {len(self.ips)}",
            f"distance from sender: {self.distance} "
            f"({'Local' if self.distance == 0 else 'Remote'})",
            f"node name: {self.name}",
            f"UUID 0: 0x{self.uuid[0]:16X}",
            f"UUID 1: 0x{self.uuid[1]:16X}",
            f"everythingnet version: {self.version}",
            f"cap: 0x{cap:08X}, {cap_to_str(cap)}",
            f"memsz: {self.mem_kb}KB",
            f"devname: {self.device_name}",
            f"os: {self.os}",
            f"arch: {self.arch}",
            f"cpu: {self.cpu}",
            f"gpu: {self.gpu}",
        ]
        return "\n".join(lines)


@dataclass
class NodeList:
    """Every node known to this machine, itself first."""

    entries: list[NodeEntry] = field(default_factory=list)
    version: int = NODELIST_V1

    @property
    def length(self) -> int:
        """Encoded size of the list, header included."""
        return _LIST_HEADER.size + sum(entry.size for entry in self.entries)

    @classmethod
    def local(
        cls, name: str, uuid: tuple[int, int], info: PlatformInfo
    ) -> "NodeList":
        """A list holding only the entry that describes this machine."""
        entry = NodeEntry(
            name=name,
            uuid=(uuid[0], uuid[1]),
            version=LOCAL_VERSION,
            cap=info.cap,
            mem_kb=info.mem_kb,
            device_name=info.name or "",
            os=info.os or "",
            arch=info.arch or "",
            cpu=info.cpu or "",
            gpu=info.gpu or "",
            distance=0,
        )
        return cls(entries=[entry])

    def to_bytes(self) -> bytes:
        """Encode the list in its wire form."""
        body = b"".join(entry.to_bytes() for entry in self.entries)
        version = _check_range("version", self.version, _U32)
        return _LIST_HEADER.pack(version, _LIST_HEADER.size + len(body)) + body

    @classmethod
    def from_bytes(cls, data: bytes) -> "NodeList":
        """Decode a list; its length field must fit inside ``data``."""
        data = bytes(data)
        if len(data) < _LIST_HEADER.size:
            raise ValueError("truncated node list")
        version, length = _LIST_HEADER.unpack_from(data)
        if length < _LIST_HEADER.size or length > len(data):
            raise ValueError(f"invalid node list length: {length}")

        entries: list[NodeEntry] = []
        pos = _LIST_HEADER.size
        while pos < length:
            if length - pos < _ENTRY_HEAD.size:
                raise ValueError("truncated node entry")
            (size,) = struct.unpack_from(">H", data, pos)
            entries.append(NodeEntry.from_bytes(data[pos:length]))
            pos += size
        return cls(entries=entries, version=version)

    def maybe_add(
        self,
        entry: NodeEntry,
        source: DiscoverySource,
        discovered_by: Optional[NodeEntry] = None,
    ) -> Optional[str]:
        """Add ``entry`` unless its UUID is known.

        Returns the announcement for a new node, or ``None`` if it was known.
        """
        if any(known.uuid == entry.uuid for known in self.entries):
            return None
        self.entries.append(entry)
        text = f"Found new node: {entry.name} [discovery source: {source.label}"
        if source is DiscoverySource.OTHER_NODE and discovered_by is not None:
            text += f", discovered by node: {discovered_by.name}"
        return text + "]"

    def merge(self, other: "NodeList", source: DiscoverySource) -> list[str]:
        """Add every unknown node of a received list; return the announcements.

        The sender itself is credited to ``source``; every later entry is
        credited to the sender as another node.
        """
        announcements: list[str] = []
        discovered_by: Optional[NodeEntry] = None
        for entry in other.entries:
            text = self.maybe_add(entry, source, discovered_by)
            if text is not None:
                announcements.append(text)
            source = DiscoverySource.OTHER_NODE
            discovered_by = other.entries[0]
        return announcements

    def check_size(self, max_packet: int) -> None:
        """Raise :class:`NodeListTooLarge` if the list cannot fit a packet."""
        budget = max_packet - MESSAGE_HEADER_SIZE
        length = self.length
        if length > budget:
            raise NodeListTooLarge(length, budget, max_packet)