"""Start-up and main loop of an EverythingNet node."""

from __future__ import annotations

import argparse
import ipaddress
import platform
import sys
from typing import NoReturn, Optional, Sequence

from everythingnet.cap import Capability, cap_to_str
from everythingnet.device import gather_info
from everythingnet.net import NetCore
from everythingnet.node import NodeList, NodeListTooLarge
from everythingnet.platinfo import PlatformInfo
from everythingnet.state import AppState
from everythingnet.timer import LoopTimer
from everythingnet.udp import DEFAULT_PORT, UdpTransport

__all__ = ["LOOP_USEC", "format_memory", "startup_banner", "main"]

LOOP_USEC = 500 * 1000
_SUFFIXES = ("KB", "MB", "GB")


def format_memory(kb: int) -> str:
    """Memory size in KB, scaled to MB or GB once it reaches 10240 units."""
    size = int(kb)
    suffix = 0
    for _ in range(2):
        if size >= 10240:
            size //= 1024
            suffix += 1
    return f"{size}{_SUFFIXES[suffix]}"


def _text(value: Optional[str]) -> str:
    return "(null)" if value is None else value


def startup_banner(info: PlatformInfo) -> str:
    """The lines printed when the node starts."""
    return "\n".join(
        [
            "EverythingNet starting up on...",
            f"Machine: {_text(info.name)}",
            f"OS: {_text(info.os)}",
            f"CPU: {_text(info.cpu)}",
            f"CPU Architecture: {_text(info.arch)}",
            f"Memory Size: {format_memory(info.mem_kb)}",
            f"GPU: {_text(info.gpu)}",
            f"Capabilities: {cap_to_str(info.cap)}",
        ]
    )


def _go_headless(info: PlatformInfo) -> None:
    print("GFX: ERROR: All graphics backends failed.  Dropping to headless mode.")
    dropped = Capability.GFX_ACCEL | Capability.HOST | Capability.DISP
    info.cap = Capability(int(info.cap) & ~int(dropped))
    info.gpu = "None (headless)"


def _interface(text: str) -> tuple[str, str]:
    try:
        iface = ipaddress.IPv4Interface(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None
    return str(iface.ip), str(iface.netmask)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="everythingnet")
    parser.add_argument("--root", default="/", help="file system root to inspect")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument(
        "--interface",
        action="append",
        type=_interface,
        metavar="ADDRESS/NETMASK",
        help="interface to broadcast on (repeatable)",
    )
    parser.add_argument("--multicast", action="store_true")
    parser.add_argument(
        "--count", type=int, default=0, help="loop iterations, 0 for no limit"
    )
    parser.add_argument("--interval-ms", type=int, default=LOOP_USEC // 1000)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Run the node; exits through the registered exit callback."""
    args = _build_parser().parse_args(argv)
    state = AppState()
    state.exit_callbacks.exit = sys.exit

    arch = platform.machine() or "unknown"
    try:
        info, local_name, uuid = gather_info(arch, args.root)
    except (OSError, ValueError, LookupError) as exc:
        print(f"FATAL: gathering platform info failed: {exc}", file=sys.stderr)
        state.cleanup_and_exit(1)

    _go_headless(info)

    try:
        transport = UdpTransport(
            args.interface, port=args.port, multicast=args.multicast
        )
    except OSError as exc:
        print(f"socket: {exc}", file=sys.stderr)
        state.cleanup_and_exit(1)
    state.exit_callbacks.plat = transport.close

    print(startup_banner(info))
    sys.stdout.flush()

    core = NetCore(transport, NodeList.local(local_name, uuid, info), uuid)
    timer = LoopTimer()
    interval = args.interval_ms * 1000
    iteration = 0
    while args.count == 0 or iteration < args.count:
        timer.start()
        try:
            for line in core.handle_broadcast():
                print(line)
        except NodeListTooLarge as exc:
            print(exc, file=sys.stderr)
            state.cleanup_and_exit(1)
        sys.stdout.flush()

        remaining = interval - timer.elapsed_usec()
        if remaining > 0:
            timer.sleep_usec(remaining)
        iteration += 1

    state.cleanup_and_exit(0)


if __name__ == "__main__":
    main()