import pytest

from bcodegen.ir import (
    MAX_PRECEDENCE,
    AutoVar,
    Binop,
    CodegenError,
    Function,
    Instruction,
    Literal,
    Loc,
    Program,
    Return,
    align_bytes,
)


def test_multiplicative_binds_tighter_than_additive():
    assert Binop.MULT.precedence() > Binop.PLUS.precedence()
    assert Binop.DIV.precedence() == Binop.MOD.precedence() == Binop.MULT.precedence()


def test_bit_or_is_loosest_and_all_levels_in_range():
    levels = {op.precedence() for op in Binop}
    assert Binop.BIT_OR.precedence() == min(levels)
    assert levels == set(range(MAX_PRECEDENCE))


def test_comparison_looser_than_shift_is_false():
    assert Binop.BIT_SHL.precedence() < Binop.EQUAL.precedence()
    assert Binop.EQUAL.precedence() < Binop.LESS.precedence()


@pytest.mark.parametrize("op", list(Binop))
def test_from_symbol_round_trip(op):
    assert Binop.from_symbol(op.value) is op


def test_from_symbol_unknown():
    assert Binop.from_symbol("?") is None
    assert Binop.from_symbol("=") is None


def test_from_assign_symbol_plain_and_compound():
    assert Binop.from_assign_symbol("=") is None
    assert Binop.from_assign_symbol("+=") is Binop.PLUS
    assert Binop.from_assign_symbol("<<=") is Binop.BIT_SHL
    assert Binop.from_assign_symbol("|=") is Binop.BIT_OR


def test_from_assign_symbol_rejects_non_assignment():
    with pytest.raises(ValueError):
        Binop.from_assign_symbol("+")


@pytest.mark.parametrize("size", [0, 1, 7, 8, 15, 16, 17, 100])
@pytest.mark.parametrize("alignment", [8, 16])
def test_align_bytes_invariants(size, alignment):
    aligned = align_bytes(size, alignment)
    assert aligned % alignment == 0
    assert size <= aligned < size + alignment


def test_align_bytes_keeps_multiples():
    assert align_bytes(32, 16) == 32
    assert align_bytes(0, 16) == 0


def test_add_extrn_deduplicates_preserving_order():
    p = Program()
    for name in ["printf", "putchar", "printf"]:
        p.add_extrn(name)
    assert p.extrns == ["printf", "putchar"]


def test_add_global_deduplicates():
    p = Program()
    p.add_global("x")
    p.add_global("x")
    assert p.globals == ["x"]


def test_add_string_offsets_and_terminator():
    p = Program()
    first = p.add_string("hi")
    second = p.add_string(b"yo")
    assert first == 0
    assert bytes(p.data[first:second]) == b"hi\x00"
    assert bytes(p.data[second:]) == b"yo\x00"


def test_codegen_error_message_includes_loc():
    loc = Loc("main.b", 3, 5)
    err = CodegenError(loc, "too many args")
    assert str(loc) in str(err)
    assert "too many args" in str(err)
    assert err.loc is loc


def test_function_holds_instructions():
    loc = Loc("a.b", 1, 1)
    instr = Instruction(Return(AutoVar(1)), loc)
    func = Function("main", loc, [instr], params_count=0, auto_vars_count=1)
    assert func.body[0].opcode.arg == AutoVar(1)
    assert Return().arg is None
    assert Literal(5) == Literal(5)