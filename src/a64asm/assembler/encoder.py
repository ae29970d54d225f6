"""
Instruction Encoder
===================

Turns a mnemonic and up to three integer operands into a 32-bit ARM64
instruction word, and serializes words and data values to little-endian
bytes.

The encoder knows nothing about tokens or labels. By the time it is
called, registers are indices and label references are already resolved
to byte offsets relative to the instruction being encoded.

Operand Slots
-------------
    mnemonic          a        b        c
    add..udiv         rd       rn       rm
    cmp               rn       rm       -
    br, blr           rn       -        -
    ldur, stur        rt       rn       imm9
    ldr               rd       offset   -
    b                 offset   -        -
    b.cond            cond     offset   -

Validation Order
----------------
1. Register operands must be 0..31, the condition code 0..13.
2. The immediate must fit its signed field. Pc-relative offsets are first
   divided by 4, truncating toward zero, so the range applies to offset/4.
3. Pc-relative offsets must be divisible by 4.

The first failing check determines the error raised.
"""

import re
import struct

from a64asm.cpu import (
    InstructionFormat,
    InstructionInfo,
    MAX_CONDITION_CODE,
    MAX_GENERAL_REGISTER,
    REGISTER_ALIASES,
    CONDITION_NAMES,
    get_instruction_info,
    immediate_range,
)
from a64asm.errors import (
    AssemblySyntaxError,
    ImmediateOutOfRangeError,
    InvalidConditionCodeError,
    InvalidRegisterError,
    MisalignedOffsetError,
    UnknownMnemonicError,
)


MASK32 = 0xFFFFFFFF
MASK64 = 0xFFFFFFFFFFFFFFFF

# Signed ASCII decimal or 0x/0X hexadecimal
NUMERAL_PATTERN = re.compile(r"([+-]?)(?:0[xX]([0-9A-Fa-f]+)|([0-9]+))")

# Accepted range of .8byte values before narrowing to 64 bits
DATA_MIN = -(1 << 63)
DATA_MAX = MASK64


# =============================================================================
# Instruction Encoding
# =============================================================================

def encode(mnemonic: str, a: int = 0, b: int = 0, c: int = 0) -> int:
    """
    Encode one instruction.

    Args:
        mnemonic: A mnemonic from the opcode table, including "b.cond"
        a: First operand slot (see module docstring)
        b: Second operand slot
        c: Third operand slot

    Returns:
        The 32-bit instruction word

    Raises:
        UnknownMnemonicError: If the mnemonic is not modeled
        InvalidRegisterError: If a register index is outside 0..31
        InvalidConditionCodeError: If a b.cond code is outside 0..13
        ImmediateOutOfRangeError: If an immediate does not fit its field
        MisalignedOffsetError: If a pc-relative offset is not a multiple of 4
    """
    info = get_instruction_info(mnemonic)
    if info is None:
        raise UnknownMnemonicError(f"unknown instruction '{mnemonic}'")

    fmt = info.format

    if fmt == InstructionFormat.REG3:
        _require_registers(mnemonic, a, b, c)
        return info.base | a | (b << 5) | (c << 16)

    if fmt == InstructionFormat.COMPARE:
        _require_registers(mnemonic, a, b)
        return info.base | (a << 5) | (b << 16)

    if fmt == InstructionFormat.BRANCH_REG:
        _require_registers(mnemonic, a)
        return info.base | (a << 5)

    if fmt == InstructionFormat.MEMORY:
        _require_registers(mnemonic, a, b)
        imm = _require_immediate(mnemonic, info, c)
        return info.base | a | (b << 5) | (_field(imm, info) << 12)

    if fmt == InstructionFormat.LITERAL:
        _require_registers(mnemonic, a)
        imm = _scaled_offset(mnemonic, info, b)
        return info.base | a | (_field(imm, info) << 5)

    if fmt == InstructionFormat.BRANCH:
        imm = _scaled_offset(mnemonic, info, a)
        return info.base | _field(imm, info)

    # COND_BRANCH
    _require_condition(a)
    imm = _scaled_offset(mnemonic, info, b)
    return info.base | (_field(imm, info) << 5) | (a & 0x1F)


def _require_registers(mnemonic: str, *registers: int) -> None:
    for reg in registers:
        if not 0 <= reg <= 31:
            raise InvalidRegisterError(
                f"invalid register number {reg} for {mnemonic}",
                hint="registers are x0..x30, with 31 meaning xzr or sp",
            )


def _require_condition(code: int) -> None:
    if not 0 <= code <= MAX_CONDITION_CODE:
        raise InvalidConditionCodeError(
            f"invalid condition code {code}",
            hint="valid suffixes: " + ", ".join(f".{n}" for n in CONDITION_NAMES.values()),
        )


def _require_immediate(mnemonic: str, info: InstructionInfo, value: int) -> int:
    lo, hi = immediate_range(info)
    if not lo <= value <= hi:
        raise ImmediateOutOfRangeError(
            f"immediate {value} out of range for {mnemonic} ({lo}..{hi})",
            hint=f"{mnemonic} takes a signed {info.imm_bits}-bit byte offset",
        )
    return value


def _scaled_offset(mnemonic: str, info: InstructionInfo, offset: int) -> int:
    """
    Divide a pc-relative byte offset by 4 and check it.

    Division truncates toward zero, so -6 scales to -1 for the range check
    and is then rejected as misaligned.
    """
    scaled = abs(offset) // 4
    if offset < 0:
        scaled = -scaled

    lo, hi = immediate_range(info)
    if not lo <= scaled <= hi:
        raise ImmediateOutOfRangeError(
            f"offset {offset} out of range for {mnemonic} ({lo * 4}..{hi * 4} bytes)",
            hint=f"{mnemonic} takes a signed {info.imm_bits}-bit word offset",
        )

    if offset % 4 != 0:
        raise MisalignedOffsetError(
            f"offset {offset} for {mnemonic} is not a multiple of 4",
        )

    return scaled


def _field(value: int, info: InstructionInfo) -> int:
    """Two's-complement truncation of a signed value to its field width."""
    return value & ((1 << info.imm_bits) - 1)


# =============================================================================
# Operand Parsing
# =============================================================================

def parse_register(name: str) -> int:
    """
    Convert a register name to its index.

    ``x0``..``x30`` map to 0..30; ``xzr`` and ``sp`` both map to 31.

    Raises:
        InvalidRegisterError: For any other name, including ``x31``
    """
    if name in REGISTER_ALIASES:
        return REGISTER_ALIASES[name]

    digits = name[1:]
    if name[:1] == "x" and digits.isascii() and digits.isdigit():
        number = int(digits)
        if number <= MAX_GENERAL_REGISTER:
            return number

    raise InvalidRegisterError(
        f"invalid register '{name}'",
        hint="registers are x0..x30, xzr and sp",
    )


def parse_immediate(text: str) -> int:
    """
    Convert a numeric lexeme to an integer.

    Accepts signed decimal (``-8``) and ``0x``/``0X`` hexadecimal
    (``0x1F``), optionally signed.

    Raises:
        AssemblySyntaxError: If the text is not a valid numeral
    """
    match = NUMERAL_PATTERN.fullmatch(text)
    if match is None:
        raise AssemblySyntaxError(f"invalid numeric literal '{text}'")

    sign, hex_digits, dec_digits = match.groups()
    value = int(hex_digits, 16) if hex_digits else int(dec_digits, 10)
    return -value if sign == "-" else value


# =============================================================================
# Byte Output
# =============================================================================

def emit32le(word: int) -> bytes:
    """Serialize an instruction word as 4 little-endian bytes."""
    return struct.pack("<I", word & MASK32)


def emit64le(value: int) -> bytes:
    """
    Serialize a data value as 8 little-endian bytes.

    Negative values wrap to their two's-complement form.

    Raises:
        ImmediateOutOfRangeError: If the value is outside -2**63 .. 2**64-1
    """
    if not DATA_MIN <= value <= DATA_MAX:
        raise ImmediateOutOfRangeError(
            f"value {value} does not fit in 64 bits",
        )
    return struct.pack("<Q", value & MASK64)
