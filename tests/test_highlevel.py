# =============================================================================
# test_highlevel.py - Pseudocode Parser and IR Tests
# =============================================================================
# Tests for the pseudocode front end up to the IR.
#
# Test coverage includes:
#   - Every statement form
#   - Address syntax for loads and stores, including negative offsets
#   - Rejected statements (literal assignment, unknown operators)
#   - Missing operands
#   - Source locations on IR and errors
#   - The IR dump format
# =============================================================================

import pytest

from a64asm.errors import ErrorKind, SourceLocation
from a64asm.highlevel import (
    BinaryOp,
    Branch,
    Call,
    CompareBranch,
    Data8,
    IROp,
    Label,
    Load,
    MissingOperandError,
    Move,
    PseudocodeSyntaxError,
    Return,
    Store,
    format_ir,
    parse_pseudocode,
)


def parse_one(line: str):
    instructions = parse_pseudocode(line)
    assert len(instructions) == 1
    return instructions[0]


# =============================================================================
# Statement Forms
# =============================================================================

class TestStatements:
    """Each pseudocode statement and the IR it produces."""

    @pytest.mark.parametrize("operator,op", [
        ("+", IROp.ADD),
        ("-", IROp.SUB),
        ("*", IROp.MUL),
        ("/", IROp.DIV),
        ("%", IROp.MOD),
    ])
    def test_binary(self, operator, op):
        assert parse_one(f"x0 = x1 {operator} x2") == BinaryOp(op, "x0", "x1", "x2")

    def test_move(self):
        inst = parse_one("x3 = x4")
        assert inst == Move("x3", "x4")
        assert inst.op == IROp.MOV

    def test_zero_register_as_second_operand(self):
        assert parse_one("x3 = x4 + xzr") == BinaryOp(IROp.ADD, "x3", "x4", "xzr")
        assert parse_one("if x0 == xzr goto done") == CompareBranch("x0", "==", "xzr", "done")

    def test_label(self):
        assert parse_one("label loop") == Label("loop")

    def test_goto(self):
        assert parse_one("goto done") == Branch("done")

    def test_call(self):
        assert parse_one("call x5") == Call("x5")

    def test_ret(self):
        inst = parse_one("ret")
        assert inst == Return()
        assert inst.op == IROp.RET

    def test_data(self):
        assert parse_one(".8byte 0x10") == Data8("0x10")

    @pytest.mark.parametrize("cmp", ["==", "!=", "<", "<=", ">", ">="])
    def test_if(self, cmp):
        assert parse_one(f"if x0 {cmp} x1 goto done") == CompareBranch("x0", cmp, "x1", "done")

    def test_comments_and_blank_lines(self):
        source = """
        # compute a remainder
        x0 = x1 % x2

        ret
        """
        assert parse_pseudocode(source) == [BinaryOp(IROp.MOD, "x0", "x1", "x2"), Return()]


class TestAddresses:
    """Loads and stores."""

    def test_load_no_offset(self):
        assert parse_one("x0 = *x1") == Load("x0", "x1", "0")

    def test_load_offset(self):
        assert parse_one("x0 = *(x1 + 8)") == Load("x0", "x1", "8")

    def test_load_negative_offset(self):
        assert parse_one("x0 = *(x1 - 8)") == Load("x0", "x1", "-8")

    def test_load_compact(self):
        assert parse_one("x0 = *(x1+16)") == Load("x0", "x1", "16")

    def test_load_hex_offset(self):
        assert parse_one("x0 = *(sp + 0x10)") == Load("x0", "sp", "0x10")

    def test_load_negative_hex_offset(self):
        assert parse_one("x0 = *(x1 - 0x8)") == Load("x0", "x1", "-0x8")

    def test_double_negative(self):
        assert parse_one("x0 = *(x1 - -8)") == Load("x0", "x1", "8")

    def test_store_no_offset(self):
        assert parse_one("*x1 = x0") == Store("x1", "x0", "0")

    def test_store_offset(self):
        assert parse_one("*(x1 + 16) = x2") == Store("x1", "x2", "16")

    def test_store_negative_offset(self):
        assert parse_one("*(x1 - 24) = x2") == Store("x1", "x2", "-24")


# =============================================================================
# Errors
# =============================================================================

class TestParseErrors:
    """Malformed statements."""

    def test_literal_assignment(self):
        """There is no literal assignment."""
        with pytest.raises(PseudocodeSyntaxError) as exc_info:
            parse_pseudocode("x0 = 5")
        assert exc_info.value.kind == ErrorKind.SYNTAX_ERROR
        assert ".8byte" in str(exc_info.value)

    def test_immediate_operand(self):
        with pytest.raises(PseudocodeSyntaxError):
            parse_pseudocode("x0 = x1 + 5")

    def test_unknown_operator(self):
        with pytest.raises(PseudocodeSyntaxError, match="unknown operator"):
            parse_pseudocode("x0 = x1 ^ x2")

    def test_unknown_statement(self):
        with pytest.raises(PseudocodeSyntaxError, match="unrecognized statement"):
            parse_pseudocode("frobnicate x0")

    def test_if_without_goto(self):
        with pytest.raises(PseudocodeSyntaxError, match="expected 'goto'"):
            parse_pseudocode("if x0 < x1 jump done")

    def test_trailing_words(self):
        with pytest.raises(PseudocodeSyntaxError):
            parse_pseudocode("ret x0")
        with pytest.raises(PseudocodeSyntaxError):
            parse_pseudocode("goto a b")
        with pytest.raises(PseudocodeSyntaxError):
            parse_pseudocode("*x1 = x0 x2")

    def test_bad_address(self):
        with pytest.raises(PseudocodeSyntaxError, match="bad address"):
            parse_pseudocode("x0 = *(x1 + 8")

    def test_assignment_shape(self):
        with pytest.raises(PseudocodeSyntaxError):
            parse_pseudocode("x0 x1 = x2")

    @pytest.mark.parametrize("line", [
        "label",
        "goto",
        "call",
        ".8byte",
        "if x0 < x1 goto",
        "if x0 <",
        "x0 =",
        "*x1 =",
        "x0 = *",
    ])
    def test_missing_operand(self, line):
        with pytest.raises(MissingOperandError) as exc_info:
            parse_pseudocode(line)
        assert exc_info.value.kind == ErrorKind.MISSING_OPERAND

    def test_error_location(self):
        with pytest.raises(PseudocodeSyntaxError) as exc_info:
            parse_pseudocode("ret\n\nx0 = 5\n", "prog.hl")
        error = exc_info.value
        assert error.location == SourceLocation("prog.hl", 3)
        assert str(error).startswith("prog.hl:3: error:")
        assert "    x0 = 5" in str(error)

    @pytest.mark.parametrize("line", [
        "x3 = xzr",
        "xzr = x3",
        "x0 = xzr + x1",
        "xzr = x1 + x2",
        "x0 = *(xzr + 8)",
        "*xzr = x0",
        "*x1 = xzr",
        "call xzr",
        "if xzr < x1 goto done",
    ])
    def test_zero_register_rejected(self, line):
        """Register 31 means sp in these positions."""
        with pytest.raises(PseudocodeSyntaxError, match="xzr cannot be used") as exc_info:
            parse_pseudocode(f"ret\n{line}", "prog.hl")
        assert exc_info.value.location == SourceLocation("prog.hl", 2)
        assert str(exc_info.value).startswith("prog.hl:2: error:")

    def test_registers_not_checked_when_parsing(self):
        """Register names are validated when lowering."""
        assert parse_one("x99 = x1 + x2").dst == "x99"


# =============================================================================
# IR Instructions
# =============================================================================

class TestIR:
    """IR dataclasses and the dump format."""

    def test_location_recorded(self):
        instructions = parse_pseudocode("ret\n# skip\nret", "f.hl")
        assert instructions[1].location == SourceLocation("f.hl", 3)

    def test_location_ignored_in_equality(self):
        assert Return(location=SourceLocation("a", 1)) == Return(location=SourceLocation("b", 2))

    def test_binary_op_rejects_non_arithmetic(self):
        with pytest.raises(ValueError):
            BinaryOp(IROp.MOV, "x0", "x1", "x2")

    def test_op_fixed_per_class(self):
        assert Load("x0", "x1").op == IROp.LOAD
        assert Store("x1", "x0").op == IROp.STORE
        assert CompareBranch("x0", "<", "x1", "l").op == IROp.CMP_BRANCH
        assert Data8("1").op == IROp.DATA8

    def test_format_ir(self):
        source = """
        label loop
        x0 = x0 - x1
        x2 = *(x3 + 8)
        *(x3 - 8) = x2
        x4 = x5
        if x0 != xzr goto loop
        goto done
        call x6
        .8byte 42
        ret
        """
        assert format_ir(parse_pseudocode(source)) == (
            "loop:\n"
            "  SUB x0, x0, x1\n"
            "  LOAD x2, [x3 + 8]\n"
            "  STORE [x3 + -8], x2\n"
            "  MOV x4, x5\n"
            "  CMP_BRANCH x0 != xzr, loop\n"
            "  BRANCH done\n"
            "  CALL x6\n"
            "  DATA8 42\n"
            "  RET\n"
        )
