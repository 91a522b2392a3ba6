import pytest

from bcodegen.ir import (
    AutoAssign,
    AutoVar,
    Binop,
    BinopOp,
    DataOffset,
    Deref,
    External,
    Funcall,
    Function,
    Instruction,
    Jmp,
    JmpIfNot,
    Literal,
    Loc,
    Program,
    RefAutoVar,
    RefExternal,
    Return,
)
from bcodegen.irdump import (
    dump_arg,
    generate_data_section,
    generate_extrns,
    generate_function,
    generate_globals,
    generate_program,
)

LOC = Loc("t.b", 1, 1)


def _func(body, name="main", params=0, autos=0):
    return Function(name, LOC, [Instruction(op, LOC) for op in body], params, autos)


def test_external_is_its_name():
    assert dump_arg(External("counter")) == "counter"


def test_ref_external_mentions_name():
    out = dump_arg(RefExternal("counter"))
    assert out.startswith("ref ")
    assert out.endswith("counter")


def test_literal_positive():
    assert dump_arg(Literal(42)) == str(42)


def test_literal_is_printed_signed():
    assert dump_arg(Literal(2**64 - 1)) == "-1"


def test_index_variants_are_distinct():
    rendered = {dump_arg(AutoVar(3)), dump_arg(Deref(3)), dump_arg(RefAutoVar(3)), dump_arg(DataOffset(3))}
    assert len(rendered) == 4
    assert all("3" in text for text in rendered)


def test_function_header():
    out = generate_function(_func([], params=0, autos=2))
    assert out == "main(0, 2):\n"


def test_function_one_line_per_op():
    body = [
        AutoAssign(1, Literal(1)),
        BinopOp(Binop.PLUS, 2, AutoVar(1), Literal(2)),
        Return(AutoVar(2)),
    ]
    lines = generate_function(_func(body, autos=2)).splitlines()
    assert len(lines) == len(body) + 1
    for addr, line in enumerate(lines[1:]):
        assert line.split(":")[0].strip() == str(addr)


def test_return_without_arg():
    line = generate_function(_func([Return()])).splitlines()[1]
    assert line.rstrip().endswith("return")


def test_funcall_lists_args_in_order():
    body = [Funcall(1, "printf", (DataOffset(0), AutoVar(2)))]
    line = generate_function(_func(body, autos=2)).splitlines()[1]
    assert 'call("printf"' in line
    assert line.index(dump_arg(DataOffset(0))) < line.index(dump_arg(AutoVar(2)))
    assert line.endswith(")")


def test_jumps_mention_target():
    body = [JmpIfNot(1, AutoVar(1)), Jmp(0)]
    lines = generate_function(_func(body, autos=1)).splitlines()
    assert "jmp_if_not 1:" in lines[1]
    assert lines[2].rstrip().endswith("jmp 0:")


def test_binop_symbol_between_operands():
    line = generate_function(_func([BinopOp(Binop.MULT, 1, External("a"), External("b"))], autos=1)).splitlines()[1]
    assert line.endswith(" = a * b")


def test_extrns_and_globals_list_names():
    extrns = generate_extrns(["putchar", "printf"])
    assert "-- External Symbols --" in extrns
    assert "    putchar\n" in extrns and "    printf\n" in extrns
    globals_ = generate_globals(["x"])
    assert "-- Global Variables --" in globals_
    assert globals_.endswith("    x\n")


def test_empty_data_section_is_empty():
    assert generate_data_section(b"") == ""


def test_data_rows():
    data = bytes(range(25))
    rows = generate_data_section(data).strip("\n").splitlines()[2:]
    assert len(rows) == 3
    bars = {row.index(" | ") for row in rows}
    assert len(bars) == 1


def test_data_printable_column():
    row = generate_data_section(b"Hi\n\x00").strip("\n").splitlines()[-1]
    assert row.split(" | ")[1] == "Hi ."


@pytest.mark.parametrize("with_data", [False, True])
def test_program_section_order(with_data):
    program = Program()
    program.funcs.append(_func([Return()]))
    program.add_extrn("putchar")
    program.add_global("g")
    if with_data:
        program.add_string("hi")
    out = generate_program(program)
    positions = [out.index("-- Functions --"), out.index("-- External Symbols --"), out.index("-- Global Variables --")]
    assert positions == sorted(positions)
    assert ("-- Data Section --" in out) is with_data