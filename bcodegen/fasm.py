"""Code generator emitting flat assembler source for x86_64 Linux."""

from __future__ import annotations

from typing import Iterable, Sequence

from bcodegen.ir import (
    Arg,
    AutoAssign,
    AutoVar,
    Binop,
    BinopOp,
    CodegenError,
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
    align_bytes,
)

REGISTERS: tuple[str, ...] = ("rdi", "rsi", "rdx", "rcx", "r8", "r9")

_SIMPLE_BINOPS = {
    Binop.BIT_OR: "or",
    Binop.BIT_AND: "and",
    Binop.PLUS: "add",
    Binop.MINUS: "sub",
}
_SHIFT_BINOPS = {Binop.BIT_SHL: "shl", Binop.BIT_SHR: "shr"}
_COMPARE_BINOPS = {
    Binop.LESS: "setl",
    Binop.GREATER: "setg",
    Binop.EQUAL: "sete",
    Binop.NOT_EQUAL: "setne",
    Binop.GREATER_EQUAL: "setge",
    Binop.LESS_EQUAL: "setle",
}


def _signed64(value: int) -> int:
    value &= (1 << 64) - 1
    return value - (1 << 64) if value >= 1 << 63 else value


def load_arg_to_reg(arg: Arg, reg: str) -> str:
    """Return the instructions that load ``arg`` into register ``reg``."""
    if isinstance(arg, Deref):
        return f"    mov {reg}, [rbp-{arg.index * 8}]\n    mov {reg}, [{reg}]\n"
    if isinstance(arg, RefAutoVar):
        return f"    lea {reg}, [rbp-{arg.index * 8}]\n"
    if isinstance(arg, RefExternal):
        return f"    lea {reg}, [_{arg.name}]\n"
    if isinstance(arg, External):
        return f"    mov {reg}, [_{arg.name}]\n"
    if isinstance(arg, AutoVar):
        return f"    mov {reg}, [rbp-{arg.index * 8}]\n"
    if isinstance(arg, Literal):
        return f"    mov {reg}, {_signed64(arg.value)}\n"
    if isinstance(arg, DataOffset):
        return f"    mov {reg}, dat+{arg.offset}\n"
    raise TypeError(f"unknown operand: {arg!r}")


def _binop(op: BinopOp) -> list[str]:
    slot = f"[rbp-{op.index * 8}]"
    out = [load_arg_to_reg(op.lhs, "rax")]
    binop = op.binop
    if binop in _SIMPLE_BINOPS:
        out += [load_arg_to_reg(op.rhs, "rbx"), f"    {_SIMPLE_BINOPS[binop]} rax, rbx\n", f"    mov {slot}, rax\n"]
    elif binop in _SHIFT_BINOPS:
        out += [load_arg_to_reg(op.rhs, "rcx"), f"    {_SHIFT_BINOPS[binop]} rax, cl\n", f"    mov {slot}, rax\n"]
    elif binop in (Binop.MOD, Binop.DIV):
        result = "rdx" if binop is Binop.MOD else "rax"
        out += [load_arg_to_reg(op.rhs, "rbx"), "    cqo\n", "    idiv rbx\n", f"    mov {slot}, {result}\n"]
    elif binop is Binop.MULT:
        out += [load_arg_to_reg(op.rhs, "rbx"), "    xor rdx, rdx\n", "    imul rbx\n", f"    mov {slot}, rax\n"]
    else:
        out += [
            load_arg_to_reg(op.rhs, "rbx"),
            "    xor rdx, rdx\n",
            "    cmp rax, rbx\n",
            f"    {_COMPARE_BINOPS[binop]} dl\n",
            f"    mov {slot}, rdx\n",
        ]
    return out


_EPILOGUE = ["    mov rsp, rbp\n", "    pop rbp\n", "    ret\n"]


def generate_function(func: Function) -> str:
    """Return the assembly of one function."""
    name = func.name
    stack_size = align_bytes(func.auto_vars_count * 8, 16)
    out = [f"public _{name} as '{name}'\n", f"_{name}:\n", "    push rbp\n", "    mov rbp, rsp\n"]
    if stack_size > 0:
        out.append(f"    sub rsp, {stack_size}\n")
    if func.auto_vars_count < func.params_count:
        raise ValueError(
            f"function `{name}` has fewer auto variables ({func.auto_vars_count}) "
            f"than parameters ({func.params_count})"
        )
    if func.params_count > len(REGISTERS):
        raise CodegenError(
            func.name_loc,
            f"Too many parameters in function definition. We support only {len(REGISTERS)} "
            f"but {func.params_count} were provided",
        )
    out.extend(f"    mov QWORD [rbp-{(i + 1) * 8}], {reg}\n" for i, reg in zip(range(func.params_count), REGISTERS))

    for addr, instruction in enumerate(func.body):
        out.append(f".op_{addr}:\n")
        op = instruction.opcode
        if isinstance(op, Return):
            if op.arg is not None:
                out.append(load_arg_to_reg(op.arg, "rax"))
            out += _EPILOGUE
        elif isinstance(op, Store):
            out += [f"    mov rax, [rbp-{op.index * 8}]\n", load_arg_to_reg(op.arg, "rbx"), "    mov [rax], rbx\n"]
        elif isinstance(op, ExternalAssign):
            out += [load_arg_to_reg(op.arg, "rax"), f"    mov [_{op.name}], rax\n"]
        elif isinstance(op, AutoAssign):
            out += [load_arg_to_reg(op.arg, "rax"), f"    mov QWORD [rbp-{op.index * 8}], rax\n"]
        elif isinstance(op, Negate):
            out += [load_arg_to_reg(op.arg, "rax"), "    neg rax\n", f"    mov [rbp-{op.result * 8}], rax\n"]
        elif isinstance(op, UnaryNot):
            out += [
                "    xor rbx, rbx\n",
                load_arg_to_reg(op.arg, "rax"),
                "    test rax, rax\n",
                "    setz bl\n",
                f"    mov [rbp-{op.result * 8}], rbx\n",
            ]
        elif isinstance(op, BinopOp):
            out += _binop(op)
        elif isinstance(op, Funcall):
            if len(op.args) > len(REGISTERS):
                raise CodegenError(
                    instruction.loc,
                    f"Too many function call arguments. We support only {len(REGISTERS)} "
                    f"but {len(op.args)} were provided",
                )
            out.extend(load_arg_to_reg(arg, reg) for arg, reg in zip(op.args, REGISTERS))
            # The ABI passes the number of vector registers used in al.
            out += ["    mov al, 0\n", f"    call _{op.name}\n", f"    mov [rbp-{op.result * 8}], rax\n"]
        elif isinstance(op, JmpIfNot):
            out += [load_arg_to_reg(op.arg, "rax"), "    test rax, rax\n", f"    jz .op_{op.addr}\n"]
        elif isinstance(op, Jmp):
            out.append(f"    jmp .op_{op.addr}\n")
        else:
            raise TypeError(f"unknown operation: {op!r}")

    out += [f".op_{len(func.body)}:\n", "    mov rax, 0\n"] + _EPILOGUE
    return "".join(out)


def _generate_funcs(funcs: Iterable[Function]) -> str:
    return 'section ".text" executable\n' + "".join(generate_function(func) for func in funcs)


def generate_extrns(extrns: Iterable[str], funcs: Sequence[Function], globals_: Sequence[str]) -> str:
    """Declare every external symbol that is neither a defined function nor a global."""
    defined = {func.name for func in funcs} | set(globals_)
    return "".join(f"extrn '{name}' as _{name}\n" for name in extrns if name not in defined)


def generate_globals(globals_: Iterable[str]) -> str:
    """Reserve and export one quad word per global variable."""
    return "".join(f"public _{name} as '{name}'\n_{name}: rq 1\n" for name in globals_)


def generate_data_section(data: bytes) -> str:
    """Emit the data section; empty data emits nothing."""
    if not data:
        return ""
    return 'section ".data"\ndat: db ' + ",".join(f"0x{byte:02X}" for byte in data) + "\n"


def generate_program(program: Program) -> str:
    """Return the assembly of a whole program."""
    return (
        "format ELF64\n"
        + _generate_funcs(program.funcs)
        + generate_extrns(program.extrns, program.funcs, program.globals)
        + generate_data_section(bytes(program.data))
        + generate_globals(program.globals)
    )