import pytest

from everythingnet.cap import Capability
from everythingnet.device import (
    gather_device_name,
    gather_info,
    is_garbage_name,
    parse_machine_id,
)

MACHINE_ID = "0123456789abcdef0011223344556677\n"


@pytest.mark.parametrize(
    "name",
    [
        "To be filled by OEM",
        "To be filled by O.E.M.",
        "To be filled by O.E.M",
        "System Product Name",
        "Default string",
        "Default String",
        "",
        " ",
    ],
)
def test_garbage_names(name):
    assert is_garbage_name(name) is True


def test_real_name_is_not_garbage():
    assert is_garbage_name("ThinkPad X1") is False


def _dmi(tmp_path, **files):
    dmi = tmp_path / "dmi"
    dmi.mkdir()
    for name, content in files.items():
        (dmi / name).write_text(content)
    return dmi


def test_x86_vendor_and_first_useful_model(tmp_path):
    dmi = _dmi(
        tmp_path,
        sys_vendor="LENOVO\n",
        product_version="To be filled by OEM\n",
        product_name="ThinkPad X1\n",
    )
    assert gather_device_name("x86_64", dmi, None) == "LENOVO" + " " + "ThinkPad X1"


def test_x86_without_vendor(tmp_path):
    dmi = _dmi(tmp_path, product_version="Desktop 42\n")
    assert gather_device_name("i686", dmi, None) == "Desktop 42"


def test_x86_all_models_garbage(tmp_path):
    dmi = _dmi(
        tmp_path,
        sys_vendor="Acme\n",
        product_version="Default string\n",
        product_name="System Product Name\n",
    )
    name = gather_device_name("x86_64", dmi, None)
    assert name.startswith("Acme ")
    assert name.endswith("Unknown Model")


def test_arm_uses_devicetree_model(tmp_path):
    assert gather_device_name("aarch64", tmp_path, "Example Board Rev 2\0") == "Example Board Rev 2"
    assert gather_device_name("aarch64", tmp_path, None) == "Unknown"


def test_ppc_and_other_arches(tmp_path):
    assert gather_device_name("ppc", tmp_path, None) is None
    assert gather_device_name("riscv64", tmp_path, None) == "Unknown"


def test_parse_machine_id():
    assert parse_machine_id(MACHINE_ID) == (0x0123456789ABCDEF, 0x0011223344556677)


@pytest.mark.parametrize("text", ["", "not hex at all", "0123456789abcdef"])
def test_parse_machine_id_malformed(text):
    with pytest.raises(ValueError):
        parse_machine_id(text)


def _root(tmp_path, with_machine_id=True):
    (tmp_path / "etc").mkdir()
    if with_machine_id:
        (tmp_path / "etc/machine-id").write_text(MACHINE_ID)
    (tmp_path / "proc").mkdir()
    (tmp_path / "proc/cpuinfo").write_text(
        "processor\t: 0\nmodel name\t: Example CPU 3000 @ 2.00GHz\n"
    )
    dmi = tmp_path / "sys/devices/virtual/dmi/id"
    dmi.mkdir(parents=True)
    (dmi / "sys_vendor").write_text("Acme\n")
    (dmi / "product_name").write_text("Box\n")
    return tmp_path


def test_gather_info(tmp_path):
    root = _root(tmp_path)
    info, local_name, uuid = gather_info("x86_64", root)
    assert uuid == parse_machine_id(MACHINE_ID)
    assert info.name == "Acme Box"
    assert info.cpu == "Example CPU 3000"
    assert info.os.startswith("Linux ")
    assert info.arch == "x86_64"
    assert info.cap & Capability.HOST
    assert len(local_name) <= 64


def test_gather_info_missing_machine_id(tmp_path):
    root = _root(tmp_path, with_machine_id=False)
    with pytest.raises(FileNotFoundError):
        gather_info("x86_64", root)


def test_gather_info_ppc_takes_machine_from_cpuinfo(tmp_path):
    root = _root(tmp_path)
    (root / "proc/cpuinfo").write_text("cpu\t\t: Broadway\nmachine\t\t: Nintendo Wii\n")
    info, _, _ = gather_info("ppc", root)
    assert info.name == "Nintendo Wii"
    assert info.cpu == "Broadway"


def test_gather_info_empty_cpuinfo(tmp_path):
    root = _root(tmp_path)
    (root / "proc/cpuinfo").write_text("")
    with pytest.raises(ValueError):
        gather_info("x86_64", root)