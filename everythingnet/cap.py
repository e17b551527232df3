"""Platform capability flags and their human-readable description."""

from __future__ import annotations

import enum

__all__ = ["Capability", "cap_to_str"]


class Capability(enum.IntFlag):
    """What a platform is able to do."""

    NONE = 0
    HOST = 1 << 0
    DISP = 1 << 1
    GFX_ACCEL = 1 << 2
    SND = 1 << 3
    INPUT = 1 << 4
    INPUT_REL = 1 << 5
    INPUT_ABS = 1 << 6


_LABELS: tuple[tuple[Capability, str], ...] = (
    (Capability.HOST, "Application Host"),
    (Capability.DISP, "Display Other Apps"),
    (Capability.GFX_ACCEL, "Graphics Acceleration"),
    (Capability.SND, "Sound Output"),
    (Capability.INPUT, "Input"),
    (Capability.INPUT_REL, "Relative Input (Mouse, Joystick, etc)"),
    (Capability.INPUT_ABS, "Absolute Input (Touchscreen, Tablet, etc)"),
)


def cap_to_str(cap: int) -> str:
    """Describe the set capability bits, joined by `` | ``, or ``"None"``."""
    bits = int(cap)
    parts = [label for flag, label in _LABELS if bits & flag]
    return " | ".join(parts) if parts else "None"