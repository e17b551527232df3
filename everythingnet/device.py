"""Gathering the device name, identity and details of a Linux machine."""

from __future__ import annotations

import os
import platform
import re
from pathlib import Path
from typing import Optional, Union

from everythingnet.cap import Capability
from everythingnet.cpuinfo import _arch_family, gather_cpu_name
from everythingnet.platinfo import PlatformInfo

__all__ = ["is_garbage_name", "gather_device_name", "parse_machine_id", "gather_info"]

PathLike = Union[str, "os.PathLike[str]"]

_NAME_LIMIT = 128
_OS_LIMIT = 128
_LOCAL_NAME_LIMIT = 64
_DMI_MODEL_FILES = ("product_version", "product_name", "product_family")
_GARBAGE_NAMES = frozenset(
    {
        "To be filled by OEM",
        "To be filled by O.E.M.",
        "To be filled by O.E.M",
        "System Product Name",
        "Default string",
        "Default String",
        "",
        " ",
    }
)
_LINUX_CAPS = (
    Capability.HOST
    | Capability.DISP
    | Capability.GFX_ACCEL
    | Capability.SND
    | Capability.INPUT
    | Capability.INPUT_REL
    | Capability.INPUT_ABS
)
_HEX_FIELD = re.compile(r"\s*([0-9a-fA-F]{1,16})")


def is_garbage_name(name: str) -> bool:
    """True for the placeholder strings firmware vendors leave in DMI."""
    return name in _GARBAGE_NAMES


def _read(path: Path, limit: Optional[int] = None) -> Optional[str]:
    try:
        data = path.read_bytes()
    except OSError:
        return None
    if limit is not None:
        data = data[:limit]
    return data.decode("utf-8", "replace")


def _strip_newline(text: str) -> str:
    if text and text[-1] in "\r\n":
        return text[:-1]
    return text


def gather_device_name(
    arch: str, dmi_dir: PathLike, devicetree_model: Optional[str]
) -> Optional[str]:
    """Return a name for this device, or ``None`` on PowerPC.

    On x86 the DMI vendor and the first useful model string are used;
    on ARM the devicetree model.  PowerPC names come from cpuinfo instead.
    """
    family = _arch_family(arch)
    if family == "x86":
        dmi = Path(dmi_dir)
        prefix = ""
        vendor = _read(dmi / "sys_vendor", _NAME_LIMIT)
        if vendor is not None:
            prefix = _strip_newline(vendor) + " "
        budget = max(_NAME_LIMIT - len(prefix), 0)
        for filename in _DMI_MODEL_FILES:
            model = _read(dmi / filename, budget)
            if model is None:
                continue
            model = _strip_newline(model)
            if not is_garbage_name(model):
                break
        else:
            model = "Unknown Model"
        return prefix + model
    if family == "ppc":
        return None
    if family == "arm":
        if devicetree_model is None:
            return "Unknown"
        return devicetree_model.split("\0", 1)[0]
    return "Unknown"


def parse_machine_id(text: str) -> tuple[int, int]:
    """Read the two 64-bit halves of a machine id written in hexadecimal."""
    values: list[int] = []
    pos = 0
    for _ in range(2):
        match = _HEX_FIELD.match(text, pos)
        if match is None:
            raise ValueError("malformed machine id")
        values.append(int(match.group(1), 16))
        pos = match.end()
    return values[0], values[1]


def _memory_kb() -> int:
    sysconf = getattr(os, "sysconf", None)
    if sysconf is None:
        return 0
    try:
        return sysconf("SC_PHYS_PAGES") * (sysconf("SC_PAGE_SIZE") // 1024)
    except (ValueError, OSError):
        return 0


def gather_info(
    arch: str, root: PathLike = "/"
) -> tuple[PlatformInfo, str, tuple[int, int]]:
    """Describe the running Linux machine.

    Files are looked up below ``root``.  Returns the platform info, the
    local node name and the node UUID taken from ``etc/machine-id``.
    A missing machine id raises :class:`FileNotFoundError`.
    """
    base = Path(root)
    info = PlatformInfo(arch=arch, cap=_LINUX_CAPS)
    info.name = gather_device_name(
        arch,
        base / "sys/devices/virtual/dmi/id",
        _read(base / "sys/firmware/devicetree/base/model"),
    )
    info.mem_kb = _memory_kb()

    uname = platform.uname()
    info.os = ("Linux " + uname.release)[: _OS_LIMIT - 1]
    local_name = uname.node[:_LOCAL_NAME_LIMIT]

    uuid = parse_machine_id((base / "etc/machine-id").read_text())

    cpuinfo = (base / "proc/cpuinfo").read_text(errors="replace")
    if not cpuinfo:
        raise ValueError("cpuinfo is empty")
    compatible = _read(base / "sys/firmware/devicetree/base/cpus/cpu@0/compatible")
    cpu, machine = gather_cpu_name(arch, cpuinfo, compatible)
    info.cpu = cpu
    if machine is not None:
        info.name = machine

    return info, local_name, uuid