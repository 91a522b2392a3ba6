import pytest

from bcodegen.targets import Target, name_of_target, target_by_name, target_names


def test_target_names_in_order():
    assert target_names() == ["fasm-x86_64-linux", "gas-aarch64-linux", "uxn", "ir"]


def test_name_of_target_pins():
    assert name_of_target(Target.FASM_X86_64_LINUX) == "fasm-x86_64-linux"
    assert name_of_target(Target.UXN) == "uxn"


@pytest.mark.parametrize("target", list(Target))
def test_round_trip(target):
    assert target_by_name(name_of_target(target)) is target


def test_unknown_name():
    assert target_by_name("list") is None
    assert target_by_name("") is None


def test_names_are_unique():
    names = target_names()
    assert len(names) == len(set(names)) == len(Target)