"""Compilation targets and their command-line names."""

from __future__ import annotations

import enum
from typing import Optional


class Target(enum.Enum):
    """A code generation target, valued by its command-line name."""

    FASM_X86_64_LINUX = "fasm-x86_64-linux"
    GAS_AARCH64_LINUX = "gas-aarch64-linux"
    UXN = "uxn"
    IR = "ir"


def name_of_target(target: Target) -> str:
    """Return the command-line name of ``target``."""
    return target.value


def target_by_name(name: str) -> Optional[Target]:
    """Return the target called ``name``, or None if there is none."""
    try:
        return Target(name)
    except ValueError:
        return None


def target_names() -> list[str]:
    """Return every target name in declaration order."""
    return [target.value for target in Target]