import pytest

from everythingnet.cpuinfo import (
    arm_cpu_name,
    clean_cpu_name,
    find_line,
    gather_cpu_name,
)

X86_CPUINFO = (
    "processor\t: 0\n"
    "vendor_id\t: AuthenticAMD\n"
    "model name\t: AMD Ryzen 7 5700U with Radeon Graphics\n"
    "flags\t\t: fpu vme\n"
)

WII_CPUINFO = (
    "processor\t: 0\n"
    "cpu\t\t: Broadway\n"
    "platform\t: wii\n"
    "model\t\t: nintendo,wii\n"
    "vendor\t\t: IBM\n"
    "machine\t\t: Nintendo Wii\n"
)


def test_find_line_returns_value():
    assert find_line(X86_CPUINFO, "vendor_id") == "AuthenticAMD"


def test_find_line_missing_key():
    assert find_line(X86_CPUINFO, "bogomips") is None


def test_find_line_ignores_unterminated_last_line():
    assert find_line("processor\t: 0\nmodel name\t: Last", "model name") is None


def test_find_line_strips_carriage_return():
    assert find_line("cpu\t: Broadway\r\n", "cpu") == "Broadway"


def test_find_line_skips_lines_without_colon():
    text = "model name without colon\nmodel name\t: Real\n"
    assert find_line(text, "model name") == "Real"


def test_arm_cpu_name_known():
    assert arm_cpu_name("arm,cortex-a57") == "ARM Cortex A57"
    assert arm_cpu_name("arm,cortex-a78\0arm,armv8\0") == "ARM Cortex A78"


def test_arm_cpu_name_unknown_is_unchanged():
    assert arm_cpu_name("vendor,custom-core\0") == "vendor,custom-core"


def test_clean_cpu_name_radeon_suffix():
    assert clean_cpu_name("AMD Ryzen 7 5700U with Radeon Graphics") == "AMD Ryzen 7 5700U"


def test_clean_cpu_name_clock():
    assert (
        clean_cpu_name("Intel(R) Core(TM) i7-9700K CPU @ 3.60GHz")
        == "Intel(R) Core(TM) i7-9700K CPU"
    )


def test_clean_cpu_name_plain_is_unchanged():
    assert clean_cpu_name("IBM Broadway") == "IBM Broadway"


def test_gather_x86():
    cpu, machine = gather_cpu_name("x86_64", X86_CPUINFO, None)
    assert cpu == clean_cpu_name("AMD Ryzen 7 5700U with Radeon Graphics")
    assert machine is None


def test_gather_x86_without_model_raises():
    with pytest.raises(LookupError):
        gather_cpu_name("x86_64", "processor\t: 0\n", None)


def test_gather_ppc_prefers_machine():
    cpu, machine = gather_cpu_name("ppc", WII_CPUINFO, None)
    assert cpu == "Broadway"
    assert machine == "Nintendo Wii"


def test_gather_ppc_without_anything():
    cpu, machine = gather_cpu_name("ppc64", "processor\t: 0\n", None)
    assert cpu == "Unknown"
    assert machine == "Unknown"


def test_gather_arm_uses_devicetree():
    cpu, machine = gather_cpu_name("aarch64", "model name\t: ARMv8\n", "arm,cortex-a53\0")
    assert cpu == "ARM Cortex A53"
    assert machine is None


def test_gather_arm_falls_back_to_cpuinfo():
    cpu, _ = gather_cpu_name("aarch64", "model name\t: ARMv8 Processor rev 1 (v8l)\n", None)
    assert cpu == "ARMv8 Processor rev 1 (v8l)"
    assert gather_cpu_name("armv7l", "", None)[0] == "Unknown"


def test_gather_other_arch():
    cpu, _ = gather_cpu_name("riscv64", "", None)
    assert cpu.startswith("Unknown (")
    assert "riscv64" in cpu