import ipaddress
import socket
import time

import pytest

from everythingnet.net import BroadcastMessage
from everythingnet.node import NodeList
from everythingnet.platinfo import platform_info
from everythingnet.udp import (
    UdpTransport,
    broadcast_address,
    prefix_length,
    validate_packet,
)


def _packet(uuid=(1, 2)):
    node_list = NodeList.local("tester", uuid, platform_info("dos"))
    return BroadcastMessage(uuid=uuid, node_list=node_list).to_bytes()


def _receive_within(transport, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        data = transport.receive()
        if data is not None:
            return data
        time.sleep(0.01)
    return None


def test_broadcast_address_pinned():
    assert broadcast_address("192.168.1.10", "255.255.255.0") == "192.168.1.255"


@pytest.mark.parametrize("prefix", [0, 8, 16, 20, 24, 30, 32])
def test_broadcast_address_matches_network(prefix):
    net = ipaddress.IPv4Network(f"10.20.30.40/{prefix}", strict=False)
    assert broadcast_address("10.20.30.40", str(net.netmask)) == str(net.broadcast_address)


@pytest.mark.parametrize("prefix", range(33))
def test_prefix_length_round_trip(prefix):
    netmask = ipaddress.IPv4Network(f"0.0.0.0/{prefix}").netmask
    assert prefix_length(str(netmask)) == prefix


def test_validate_packet_accepts_valid():
    assert validate_packet(_packet()) is True


def test_validate_packet_rejects_bad_magic():
    packet = _packet()
    assert validate_packet(b"\x00\x00\x00\x00" + packet[4:]) is False


def test_validate_packet_rejects_length_mismatch():
    packet = _packet()
    assert validate_packet(packet[:-1]) is False
    assert validate_packet(packet + b"\x00") is False


def test_validate_packet_rejects_short_data():
    assert validate_packet(b"") is False
    assert validate_packet(_packet()[:20]) is False


def test_default_uses_limited_broadcast():
    with UdpTransport(port=0) as transport:
        assert transport.addresses == ["255.255.255.255"]


def test_interfaces_become_broadcast_addresses():
    interfaces = [("10.0.0.5", "255.0.0.0"), ("172.16.3.4", "255.255.0.0")]
    with UdpTransport(interfaces, port=0) as transport:
        assert transport.addresses == [
            broadcast_address(a, m) for a, m in interfaces
        ]


def test_interface_limit():
    interfaces = [(f"10.0.{i}.1", "255.255.255.0") for i in range(3)]
    with UdpTransport(interfaces, port=0, max_interfaces=2) as transport:
        assert len(transport.addresses) == 2


def test_send_and_receive_over_loopback():
    packet = _packet()
    with UdpTransport([("127.0.0.1", "255.255.255.255")], port=0) as transport:
        transport.send(packet)
        assert _receive_within(transport) == packet


def test_invalid_packets_are_skipped():
    packet = _packet((7, 8))
    with UdpTransport([("127.0.0.1", "255.255.255.255")], port=0) as transport:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sender:
            sender.sendto(b"junk data", ("127.0.0.1", transport.port))
            sender.sendto(packet, ("127.0.0.1", transport.port))
        assert _receive_within(transport) == packet


def test_context_manager_closes():
    with UdpTransport(port=0) as transport:
        assert transport.closed is False
    assert transport.closed is True