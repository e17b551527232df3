"""Working out the CPU name (and on PowerPC the machine name) on Linux."""

from __future__ import annotations

from typing import Optional

__all__ = ["find_line", "arm_cpu_name", "clean_cpu_name", "gather_cpu_name"]

_ARM_CPU_NAMES: tuple[tuple[str, str], ...] = (
    ("arm,cortex-a53", "ARM Cortex A53"),
    ("arm,cortex-a57", "ARM Cortex A57"),
    ("arm,cortex-a78", "ARM Cortex A78"),
)

_PPC_MACHINE_KEYS = ("machine", "model", "platform", "motherboard", "detected as")
_RADEON_SUFFIX = " with Radeon Graphics"


def _arch_family(arch: str) -> Optional[str]:
    """Map a machine name such as ``x86_64`` to ``x86``, ``ppc`` or ``arm``."""
    name = arch.lower()
    if name in ("x86", "x86_64", "amd64", "i386", "i486", "i586", "i686"):
        return "x86"
    if name.startswith(("ppc", "powerpc")):
        return "ppc"
    if name.startswith(("arm", "aarch64")):
        return "arm"
    return None


def find_line(cpuinfo: str, key: str) -> Optional[str]:
    """Return the value of the first line starting with ``key``, or ``None``.

    The value is what follows the colon and the single space after it.
    Only lines ended by a newline are considered.
    """
    for line in cpuinfo.split("\n")[:-1]:
        if line.endswith("\r"):
            line = line[:-1]
        if not line.startswith(key):
            continue
        colon = line.find(":")
        if colon < 0:
            continue
        return line[colon + 2:]
    return None


def arm_cpu_name(compatible: str) -> str:
    """Turn a devicetree ``compatible`` string into a readable CPU name.

    Only the first NUL-separated entry is used; an unknown entry is
    returned unchanged.
    """
    first = compatible.split("\0", 1)[0]
    for key, pretty in _ARM_CPU_NAMES:
        length = min(len(first), len(key))
        if first[:length] == key[:length]:
            return pretty
    return first


def clean_cpu_name(name: str) -> str:
    """Drop marketing suffixes and the ``@ clock`` part of a CPU name."""
    if len(name) > len(_RADEON_SUFFIX):
        cut = name.find(_RADEON_SUFFIX)
        if cut >= 0:
            name = name[:cut]
    at = name.find("@")
    if at >= 0:
        name = name[: max(at - 1, 0)]
    return name


def gather_cpu_name(
    arch: str, cpuinfo: str, devicetree_compatible: Optional[str]
) -> tuple[str, Optional[str]]:
    """Return ``(cpu_name, machine_name)`` for ``arch``.

    ``machine_name`` is only found on PowerPC, where ``/proc/cpuinfo``
    describes the machine; elsewhere it is ``None``.  On x86 a missing
    ``model name`` line raises :class:`LookupError`.
    """
    family = _arch_family(arch)
    machine: Optional[str] = None

    if family == "x86":
        found = find_line(cpuinfo, "model name")
        if found is None:
            raise LookupError("no 'model name' line in cpuinfo")
        cpu = found
    elif family == "ppc":
        cpu = find_line(cpuinfo, "cpu") or "Unknown"
        if find_line(cpuinfo, "cpu") is not None:
            cpu = find_line(cpuinfo, "cpu")
        machine = next(
            (
                value
                for value in (find_line(cpuinfo, key) for key in _PPC_MACHINE_KEYS)
                if value is not None
            ),
            "Unknown",
        )
    elif family == "arm":
        if devicetree_compatible is not None:
            cpu = arm_cpu_name(devicetree_compatible)
        else:
            found = find_line(cpuinfo, "model name")
            cpu = found if found is not None else "Unknown"
    else:
        cpu = f"Unknown ({arch})"

    return clean_cpu_name(cpu), machine