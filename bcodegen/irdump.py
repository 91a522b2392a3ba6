"""Human-readable text dump of a compiled program's intermediate representation."""

from __future__ import annotations

from typing import Iterable

from bcodegen.ir import (
    Arg,
    AutoAssign,
    AutoVar,
    Binop,
    BinopOp,
    DataOffset,
    Deref,
    External,
    ExternalAssign,
    Funcall,
    Function,
    Jmp,
    JmpIfNot,
    Literal,
    Negate,
    Program,
    RefAutoVar,
    RefExternal,
    Return,
    Store,
    UnaryNot,
)

_ROW_SIZE = 12
_ASCII_WHITESPACE = frozenset(b" \t\n\x0c\r")

# LESS_EQUAL is printed with the same symbol as LESS.
_BINOP_SYMBOLS = {**{binop: binop.value for binop in Binop}, Binop.LESS_EQUAL: "<"}


def _signed64(value: int) -> int:
    value &= (1 << 64) - 1
    return value - (1 << 64) if value >= 1 << 63 else value


def dump_arg(arg: Arg) -> str:
    """Render one operand."""
    if isinstance(arg, External):
        return arg.name
    if isinstance(arg, Deref):
        return f"deref[{arg.index}]"
    if isinstance(arg, RefAutoVar):
        return f"ref auto[{arg.index}]"
    if isinstance(arg, RefExternal):
        return f"ref {arg.name}"
    if isinstance(arg, Literal):
        return str(_signed64(arg.value))
    if isinstance(arg, AutoVar):
        return f"auto[{arg.index}]"
    if isinstance(arg, DataOffset):
        return f"data[{arg.offset}]"
    raise TypeError(f"unknown operand: {arg!r}")


def _dump_op(op) -> str:
    if isinstance(op, Return):
        return "    return " + (dump_arg(op.arg) if op.arg is not None else "")
    if isinstance(op, Store):
        return f"    store deref[{op.index}], {dump_arg(op.arg)}"
    if isinstance(op, ExternalAssign):
        return f"    {op.name} = {dump_arg(op.arg)}"
    if isinstance(op, AutoAssign):
        return f"    auto[{op.index}] = {dump_arg(op.arg)}"
    if isinstance(op, Negate):
        return f"    auto[{op.result}] = -{dump_arg(op.arg)}"
    if isinstance(op, UnaryNot):
        return f"    auto[{op.result}] = !{dump_arg(op.arg)}"
    if isinstance(op, BinopOp):
        symbol = _BINOP_SYMBOLS[op.binop]
        return f"    auto[{op.index}] = {dump_arg(op.lhs)} {symbol} {dump_arg(op.rhs)}"
    if isinstance(op, Funcall):
        args = "".join(f", {dump_arg(arg)}" for arg in op.args)
        return f'    auto[{op.result}] = call("{op.name}"{args})'
    if isinstance(op, JmpIfNot):
        return f"    jmp_if_not {op.addr}:, {dump_arg(op.arg)}"
    if isinstance(op, Jmp):
        return f"    jmp {op.addr}:"
    raise TypeError(f"unknown operation: {op!r}")


def generate_function(func: Function) -> str:
    """Render one function: a header line and one numbered line per operation."""
    lines = [f"{func.name}({func.params_count}, {func.auto_vars_count}):\n"]
    lines.extend(
        f"{addr:8d}:{_dump_op(instruction.opcode)}\n"
        for addr, instruction in enumerate(func.body)
    )
    return "".join(lines)


def _generate_funcs(funcs: Iterable[Function]) -> str:
    return "-- Functions --\n\n" + "".join(generate_function(func) for func in funcs)


def generate_extrns(extrns: Iterable[str]) -> str:
    """Render the list of external symbols."""
    return "\n-- External Symbols --\n\n" + "".join(f"    {name}\n" for name in extrns)


def generate_globals(globals_: Iterable[str]) -> str:
    """Render the list of global variables."""
    return "\n-- Global Variables --\n\n" + "".join(f"    {name}\n" for name in globals_)


def _printable(byte: int) -> str:
    if byte in _ASCII_WHITESPACE:
        return " "
    if 0x21 <= byte <= 0x7E:
        return chr(byte)
    return "."


def generate_data_section(data: bytes) -> str:
    """Render the data section as a hex dump; empty data renders as nothing."""
    if not data:
        return ""
    lines = ["\n-- Data Section --\n\n"]
    for start in range(0, len(data), _ROW_SIZE):
        row = data[start:start + _ROW_SIZE]
        hex_part = "".join(f" {byte:02X}" for byte in row)
        hex_part += "   " * (_ROW_SIZE - len(row))
        text_part = "".join(_printable(byte) for byte in row)
        lines.append(f"{start:04X}:{hex_part} | {text_part}\n")
    return "".join(lines)


def generate_program(program: Program) -> str:
    """Render a whole program."""
    return (
        _generate_funcs(program.funcs)
        + generate_extrns(program.extrns)
        + generate_globals(program.globals)
        + generate_data_section(bytes(program.data))
    )