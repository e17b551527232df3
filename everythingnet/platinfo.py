"""Static descriptions of the platforms whose details are known up front."""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Callable, Optional

from everythingnet.cap import Capability

__all__ = ["PlatformInfo", "platform_info"]

_ARCH_X86 = "x86"
_ARCH_PPC32 = "ppc32"


@dataclass
class PlatformInfo:
    """What this machine is; ``mem_kb`` is the memory size in kilobytes."""

    name: Optional[str] = None
    os: Optional[str] = None
    arch: Optional[str] = None
    cpu: Optional[str] = None
    gpu: Optional[str] = None
    mem_kb: int = 0
    cap: Capability = Capability.NONE


def _dos() -> PlatformInfo:
    return PlatformInfo(
        name="IBM PC or Compatible",
        os="MS-DOS or Compatible",
        cpu="Intel 80386 or Compatible",
        mem_kb=640,
        arch=_ARCH_X86,
        gpu="CGA or better (720x480 text mode)",
        cap=Capability.DISP
        | Capability.SND
        | Capability.INPUT
        | Capability.INPUT_ABS
        | Capability.INPUT_REL,
    )


def _gcn() -> PlatformInfo:
    return PlatformInfo(
        name="Nintendo GameCube",
        os="libogc",
        arch=_ARCH_PPC32,
        cpu="IBM Gekko (1 core) @ 486MHz",
        mem_kb=24 * 1024,
        gpu='ArtX "GX" (inside Flipper chipset) @ 162MHz',
        cap=Capability.DISP | Capability.SND | Capability.INPUT | Capability.INPUT_REL,
    )


def _wii() -> PlatformInfo:
    return PlatformInfo(
        name="Nintendo Wii",
        os="Nintendo/BroadOn IOS (Starlet), libogc (Broadway)",
        arch=_ARCH_PPC32,
        cpu="IBM Broadway (1 core) @ 729MHz",
        mem_kb=88 * 1024,
        gpu='ArtX "GX" (inside Hollywood chipset) @ 243MHz',
        cap=Capability.DISP
        | Capability.SND
        | Capability.INPUT
        | Capability.INPUT_REL
        | Capability.INPUT_ABS,
    )


def _windows() -> PlatformInfo:
    return PlatformInfo(
        arch=platform.machine() or "unknown",
        os="Microsoft Windows",
    )


_PRESETS: dict[str, Callable[[], PlatformInfo]] = {
    "dos": _dos,
    "gcn": _gcn,
    "wii": _wii,
    "windows": _windows,
}


def platform_info(name: str) -> PlatformInfo:
    """Return a fresh description of the named platform.

    Known names are ``dos``, ``gcn``, ``wii`` and ``windows``.
    """
    try:
        factory = _PRESETS[name]
    except KeyError:
        raise KeyError(f"unknown platform: {name!r}") from None
    return factory()