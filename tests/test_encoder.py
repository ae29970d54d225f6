# =============================================================================
# test_encoder.py - Instruction Encoder Tests
# =============================================================================
# Tests for the bit-exact ARM64 instruction encoder.
#
# Test coverage includes:
#   - Fixed expected words for every mnemonic
#   - Register, immediate and condition-code validation
#   - Immediate field boundaries (one past either end fails)
#   - Validation order (range before alignment)
#   - Register and immediate parsing
#   - Little-endian byte output
# =============================================================================

import pytest

from a64asm.assembler.encoder import (
    emit32le,
    emit64le,
    encode,
    parse_immediate,
    parse_register,
)
from a64asm.errors import (
    AssemblySyntaxError,
    ErrorKind,
    ImmediateOutOfRangeError,
    InvalidConditionCodeError,
    InvalidRegisterError,
    MisalignedOffsetError,
    UnknownMnemonicError,
)


# =============================================================================
# Expected Words
# =============================================================================

class TestEncodedWords:
    """Hard-coded words for each mnemonic."""

    @pytest.mark.parametrize("mnemonic,a,b,c,expected", [
        ("add", 0, 1, 2, 0x8B226020),
        ("sub", 3, 4, 5, 0xCB256083),
        ("mul", 0, 1, 2, 0x9B027C20),
        ("smulh", 1, 2, 3, 0x9B437C41),
        ("umulh", 1, 2, 3, 0x9BC37C41),
        ("sdiv", 0, 1, 2, 0x9AC20C20),
        ("udiv", 0, 1, 2, 0x9AC20820),
    ])
    def test_three_register(self, mnemonic, a, b, c, expected):
        """Three-register arithmetic packs rd | rn<<5 | rm<<16."""
        assert encode(mnemonic, a, b, c) == expected

    def test_add_with_zero_register(self):
        """Register 31 fills all five bits of its field."""
        assert encode("add", 0, 1, 31) == 0x8B3F6020

    def test_cmp(self):
        """cmp x1, x2."""
        assert encode("cmp", 1, 2) == 0xEB22603F

    def test_br(self):
        """br x30."""
        assert encode("br", 30) == 0xD61F03C0

    def test_blr(self):
        """blr x5."""
        assert encode("blr", 5) == 0xD63F00A0

    def test_ldur_positive_offset(self):
        """ldur x1, [x2, 8]."""
        assert encode("ldur", 1, 2, 8) == 0xF8408041

    def test_ldur_negative_offset(self):
        """ldur x1, [x2, -8] stores imm9 in two's complement."""
        assert encode("ldur", 1, 2, -8) == 0xF85F8041

    def test_stur(self):
        """stur x1, [x2, 0]."""
        assert encode("stur", 1, 2, 0) == 0xF8000041

    def test_ldr_literal(self):
        """ldr x1, 8 uses offset/4 in bits 5..23."""
        assert encode("ldr", 1, 8) == 0x58000041

    def test_b_forward(self):
        """b 8."""
        assert encode("b", 8) == 0x14000002

    def test_b_backward(self):
        """b -4 is all ones in the imm26 field."""
        assert encode("b", -4) == 0x17FFFFFF

    def test_b_cond_eq(self):
        """b.eq 8."""
        assert encode("b.cond", 0, 8) == 0x54000040

    def test_b_cond_lt_backward(self):
        """b.lt -4."""
        assert encode("b.cond", 11, -4) == 0x54FFFFEB

    def test_unused_slots_default_to_zero(self):
        """Single-operand forms ignore the remaining slots."""
        assert encode("br", 30) == encode("br", 30, 0, 0)


# =============================================================================
# Validation
# =============================================================================

class TestValidation:
    """Operand validation and error kinds."""

    def test_unknown_mnemonic(self):
        """Mnemonics outside the table are rejected."""
        with pytest.raises(UnknownMnemonicError) as exc_info:
            encode("mov", 0, 1)
        assert exc_info.value.kind == ErrorKind.UNKNOWN_MNEMONIC

    @pytest.mark.parametrize("reg", [-1, 32, 100])
    def test_register_out_of_range(self, reg):
        """Register indices must be 0..31."""
        with pytest.raises(InvalidRegisterError):
            encode("add", reg, 1, 2)

    def test_register_checked_for_memory(self):
        """The base register of ldur is validated."""
        with pytest.raises(InvalidRegisterError):
            encode("ldur", 0, 32, 0)

    def test_condition_code_out_of_range(self):
        """b.cond codes above 13 are rejected."""
        with pytest.raises(InvalidConditionCodeError) as exc_info:
            encode("b.cond", 14, 0)
        assert exc_info.value.kind == ErrorKind.INVALID_CONDITION_CODE

    def test_negative_condition_code(self):
        with pytest.raises(InvalidConditionCodeError):
            encode("b.cond", -1, 0)

    def test_condition_checked_before_offset(self):
        """A bad condition wins over a bad offset."""
        with pytest.raises(InvalidConditionCodeError):
            encode("b.cond", 20, 6)

    def test_register_checked_before_immediate(self):
        """A bad register wins over a bad immediate."""
        with pytest.raises(InvalidRegisterError):
            encode("ldur", 40, 0, 1000)


class TestImmediateBounds:
    """Signed field boundaries for every immediate form."""

    @pytest.mark.parametrize("imm", [-256, 255, 0])
    def test_imm9_in_range(self, imm):
        encode("ldur", 0, 1, imm)
        encode("stur", 0, 1, imm)

    @pytest.mark.parametrize("imm", [-257, 256])
    def test_imm9_out_of_range(self, imm):
        with pytest.raises(ImmediateOutOfRangeError) as exc_info:
            encode("ldur", 0, 1, imm)
        assert exc_info.value.kind == ErrorKind.IMMEDIATE_OUT_OF_RANGE

    def test_imm19_bounds(self):
        """ldr and b.cond take -2**18..2**18-1 words."""
        low, high = -(1 << 18) * 4, ((1 << 18) - 1) * 4
        encode("ldr", 0, low)
        encode("ldr", 0, high)
        encode("b.cond", 0, low)
        encode("b.cond", 0, high)

        with pytest.raises(ImmediateOutOfRangeError):
            encode("ldr", 0, low - 4)
        with pytest.raises(ImmediateOutOfRangeError):
            encode("b.cond", 0, high + 4)

    def test_imm26_bounds(self):
        """b takes -2**25..2**25-1 words."""
        low, high = -(1 << 25) * 4, ((1 << 25) - 1) * 4
        assert encode("b", low) == 0x14000000 | (1 << 25)
        assert encode("b", high) == 0x14000000 | ((1 << 25) - 1)

        with pytest.raises(ImmediateOutOfRangeError):
            encode("b", low - 4)
        with pytest.raises(ImmediateOutOfRangeError):
            encode("b", high + 4)


class TestAlignment:
    """Scaled offsets must be multiples of 4."""

    @pytest.mark.parametrize("mnemonic,args", [
        ("b", (6,)),
        ("b", (-2,)),
        ("ldr", (0, 2)),
        ("b.cond", (0, 10)),
    ])
    def test_misaligned(self, mnemonic, args):
        with pytest.raises(MisalignedOffsetError) as exc_info:
            encode(mnemonic, *args)
        assert exc_info.value.kind == ErrorKind.MISALIGNED_OFFSET

    def test_range_checked_before_alignment(self):
        """A misaligned offset that is also too far is out of range."""
        too_far = (1 << 25) * 4 + 2
        with pytest.raises(ImmediateOutOfRangeError):
            encode("b", too_far)

    def test_truncation_toward_zero(self):
        """-(2**27) - 2 scales to -(2**25), in range, so alignment fails."""
        with pytest.raises(MisalignedOffsetError):
            encode("b", -(1 << 27) - 2)


# =============================================================================
# Operand Parsing
# =============================================================================

class TestParseRegister:
    """Register name resolution."""

    @pytest.mark.parametrize("number", range(31))
    def test_general_registers(self, number):
        assert parse_register(f"x{number}") == number

    def test_zero_register(self):
        assert parse_register("xzr") == 31

    def test_stack_pointer(self):
        assert parse_register("sp") == 31

    @pytest.mark.parametrize("name", ["x31", "x-1", "w0", "r1", "x", "", "X0", "xzr1"])
    def test_invalid_names(self, name):
        with pytest.raises(InvalidRegisterError) as exc_info:
            parse_register(name)
        assert exc_info.value.kind == ErrorKind.INVALID_REGISTER


class TestParseImmediate:
    """Numeric literal parsing."""

    @pytest.mark.parametrize("text,value", [
        ("0", 0),
        ("42", 42),
        ("-8", -8),
        ("+7", 7),
        ("0x10", 16),
        ("0XfF", 255),
        ("-0x10", -16),
    ])
    def test_valid(self, text, value):
        assert parse_immediate(text) == value

    @pytest.mark.parametrize("text", [
        "", "-", "0x", "12ab", "0xZZ", "loop",
        "1_6",         # digit grouping
        "\u0668",      # non-ASCII digit
        "0x-1",        # sign inside the hex digits
        "0x_10",
        "- 8",
    ])
    def test_invalid(self, text):
        with pytest.raises(AssemblySyntaxError):
            parse_immediate(text)


# =============================================================================
# Byte Output
# =============================================================================

class TestByteOutput:
    """Little-endian serialization."""

    def test_emit32le(self):
        assert emit32le(0x8B226020) == bytes([0x20, 0x60, 0x22, 0x8B])

    def test_emit64le(self):
        assert emit64le(0x1122334455667788) == bytes(
            [0x88, 0x77, 0x66, 0x55, 0x44, 0x33, 0x22, 0x11]
        )

    def test_emit64le_small(self):
        assert emit64le(12) == bytes([12, 0, 0, 0, 0, 0, 0, 0])

    def test_emit64le_negative_wraps(self):
        assert emit64le(-1) == b"\xff" * 8

    def test_emit64le_bounds(self):
        assert emit64le(2 ** 64 - 1) == b"\xff" * 8
        assert emit64le(-(2 ** 63)) == bytes(7) + b"\x80"

        with pytest.raises(ImmediateOutOfRangeError):
            emit64le(2 ** 64)
        with pytest.raises(ImmediateOutOfRangeError):
            emit64le(-(2 ** 63) - 1)
