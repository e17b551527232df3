import pytest

from everythingnet.cap import Capability, cap_to_str


def test_no_capabilities_is_none():
    assert cap_to_str(0) == "None"
    assert cap_to_str(Capability.NONE) == "None"


def test_single_capability():
    assert cap_to_str(Capability.HOST) == "Application Host"
    assert cap_to_str(Capability.SND) == "Sound Output"


def test_two_capabilities_joined():
    assert cap_to_str(Capability.HOST | Capability.SND) == "Application Host | Sound Output"


def test_order_is_fixed_regardless_of_combination_order():
    a = cap_to_str(Capability.INPUT_ABS | Capability.DISP)
    b = cap_to_str(Capability.DISP | Capability.INPUT_ABS)
    assert a == b
    assert a.index("Display Other Apps") < a.index("Absolute Input")


def test_all_capabilities_in_order():
    everything = 0
    for flag in Capability:
        everything |= flag
    assert cap_to_str(everything).split(" | ") == [
        "Application Host",
        "Display Other Apps",
        "Graphics Acceleration",
        "Sound Output",
        "Input",
        "Relative Input (Mouse, Joystick, etc)",
        "Absolute Input (Touchscreen, Tablet, etc)",
    ]


@pytest.mark.parametrize(
    "cap",
    [
        Capability.DISP | Capability.SND | Capability.INPUT,
        Capability.GFX_ACCEL,
        Capability.INPUT_REL | Capability.INPUT_ABS | Capability.HOST,
    ],
)
def test_part_count_matches_bit_count(cap):
    assert len(cap_to_str(cap).split(" | ")) == bin(int(cap)).count("1")


def test_unknown_bits_are_ignored():
    assert cap_to_str(1 << 20) == "None"
    assert cap_to_str((1 << 20) | Capability.INPUT) == "Input"