"""
ARM64 Instruction Subset Definition
===================================

This module defines the small slice of the AArch64 instruction set the
assembler understands: fourteen real instructions, the synthetic
``b.cond`` form, and the sizes of the two kinds of statement that occupy
memory (instructions and ``.8byte`` data).

All instructions are 32 bits wide and emitted little-endian.

Instruction Formats
-------------------
1. **REG3**: ``op rd, rn, rm``
   - word = base | rd | rn << 5 | rm << 16
   - add, sub, mul, smulh, umulh, sdiv, udiv

2. **COMPARE**: ``cmp rn, rm``
   - word = base | rn << 5 | rm << 16 (rd field fixed to xzr in the base)

3. **BRANCH_REG**: ``br rn`` / ``blr rn``
   - word = base | rn << 5

4. **MEMORY**: ``ldur rt, [rn, imm9]`` / ``stur rt, [rn, imm9]``
   - word = base | rt | rn << 5 | (imm9 & 0x1FF) << 12
   - imm9 is a signed byte offset, -256..255

5. **LITERAL**: ``ldr rd, label``
   - word = base | rd | ((offset / 4) & 0x7FFFF) << 5
   - offset is pc-relative, signed 19-bit after scaling

6. **BRANCH**: ``b label``
   - word = base | ((offset / 4) & 0x3FFFFFF)
   - signed 26-bit after scaling

7. **COND_BRANCH**: ``b.cond label``
   - word = base | ((offset / 4) & 0x7FFFF) << 5 | cond
   - signed 19-bit after scaling, cond 0..13

Operand Patterns
----------------
Each real mnemonic has a pattern string, one letter per operand element:

    r  general register (REG) or the name "sp"
    z  general register or the zero register (REG or ZREG)
    c  comma
    l  left bracket
    t  right bracket
    i  integer literal (INT or HEXINT)
    j  integer literal or label reference (pc-relative)

Reference
---------
- Arm Architecture Reference Manual for A-profile, section C6
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Instruction Formats
# =============================================================================

class InstructionFormat(Enum):
    """How an instruction's operands are packed into its 32-bit word."""
    REG3 = auto()         # rd, rn, rm
    COMPARE = auto()      # rn, rm
    BRANCH_REG = auto()   # rn
    MEMORY = auto()       # rt, [rn, imm9]
    LITERAL = auto()      # rd, pc-relative imm19
    BRANCH = auto()       # pc-relative imm26
    COND_BRANCH = auto()  # cond, pc-relative imm19


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Encoding information for one mnemonic.

    Attributes:
        base: Fixed bits of the instruction word
        format: How operands are placed into the word
        pattern: Operand pattern string (see module docstring)
        imm_bits: Width of the signed immediate field (0 if none)
        scaled: True when the immediate is a byte offset divided by 4
    """
    base: int
    format: InstructionFormat
    pattern: str
    imm_bits: int = 0
    scaled: bool = False

    def __repr__(self) -> str:
        return f"InstructionInfo(base=0x{self.base:08X}, format={self.format.name})"


# =============================================================================
# Opcode Table
# =============================================================================
# Key: mnemonic (lower case, matched case-sensitively)
# Value: InstructionInfo(base, format, pattern, imm_bits, scaled)
#
# "b.cond" is not written in source as such: the parser turns "b" followed
# by a condition suffix into it, with the condition as first operand.
# =============================================================================

OPCODE_TABLE: dict[str, InstructionInfo] = {
    # Three-register arithmetic
    "add": InstructionInfo(0x8B206000, InstructionFormat.REG3, "rcrcz"),
    "sub": InstructionInfo(0xCB206000, InstructionFormat.REG3, "rcrcz"),
    "mul": InstructionInfo(0x9B007C00, InstructionFormat.REG3, "rcrcz"),
    "smulh": InstructionInfo(0x9B407C00, InstructionFormat.REG3, "rcrcz"),
    "umulh": InstructionInfo(0x9BC07C00, InstructionFormat.REG3, "rcrcz"),
    "sdiv": InstructionInfo(0x9AC00C00, InstructionFormat.REG3, "rcrcz"),
    "udiv": InstructionInfo(0x9AC00800, InstructionFormat.REG3, "rcrcz"),

    # Compare (subs xzr, rn, rm)
    "cmp": InstructionInfo(0xEB20601F, InstructionFormat.COMPARE, "rcz"),

    # Register branches
    "br": InstructionInfo(0xD61F0000, InstructionFormat.BRANCH_REG, "r"),
    "blr": InstructionInfo(0xD63F0000, InstructionFormat.BRANCH_REG, "r"),

    # Unscaled loads and stores
    "ldur": InstructionInfo(0xF8400000, InstructionFormat.MEMORY, "rclrcit", 9),
    "stur": InstructionInfo(0xF8000000, InstructionFormat.MEMORY, "rclrcit", 9),

    # Pc-relative literal load
    "ldr": InstructionInfo(0x58000000, InstructionFormat.LITERAL, "rcj", 19, True),

    # Pc-relative branches
    "b": InstructionInfo(0x14000000, InstructionFormat.BRANCH, "j", 26, True),
    "b.cond": InstructionInfo(0x54000000, InstructionFormat.COND_BRANCH, "j", 19, True),
}

# Mnemonics accepted in source text (b.cond is synthesized by the parser)
MNEMONICS: frozenset[str] = frozenset(m for m in OPCODE_TABLE if m != "b.cond")

# Operand pattern per source mnemonic
OPERAND_PATTERNS: dict[str, str] = {
    mnemonic: OPCODE_TABLE[mnemonic].pattern for mnemonic in sorted(MNEMONICS)
}


# =============================================================================
# Condition Codes
# =============================================================================

CONDITION_CODES: dict[str, int] = {
    "eq": 0,    # equal
    "ne": 1,    # not equal
    "hs": 2,    # unsigned higher or same
    "lo": 3,    # unsigned lower
    "hi": 8,    # unsigned higher
    "ls": 9,    # unsigned lower or same
    "ge": 10,   # signed greater or equal
    "lt": 11,   # signed less than
    "gt": 12,   # signed greater than
    "le": 13,   # signed less or equal
}

CONDITION_NAMES: dict[int, str] = {code: name for name, code in CONDITION_CODES.items()}

MAX_CONDITION_CODE = 13


# =============================================================================
# Registers and Sizes
# =============================================================================

ZERO_REGISTER = 31      # xzr
STACK_POINTER = 31      # sp, shares encoding 31 with xzr
LINK_REGISTER = 30      # x30, return address for blr
MAX_GENERAL_REGISTER = 30

# Register names with a fixed index
REGISTER_ALIASES: dict[str, int] = {
    "xzr": ZERO_REGISTER,
    "sp": STACK_POINTER,
}

DATA_DIRECTIVE = ".8byte"

INSTRUCTION_SIZE = 4
DATA_SIZE = 8


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(mnemonic: str) -> Optional[InstructionInfo]:
    """
    Look up encoding information by mnemonic.

    Args:
        mnemonic: The instruction mnemonic (e.g., "add", "b.cond")

    Returns:
        InstructionInfo if found, None if the mnemonic is not modeled
    """
    return OPCODE_TABLE.get(mnemonic)


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic may appear at the start of a source statement."""
    return mnemonic in MNEMONICS


def get_condition_code(suffix: str) -> Optional[int]:
    """
    Map a condition suffix to its 4-bit code.

    Accepts the suffix with or without the leading dot (".eq" or "eq").
    """
    return CONDITION_CODES.get(suffix.lstrip("."))


def immediate_range(info: InstructionInfo) -> tuple[int, int]:
    """
    Get the inclusive signed range of an instruction's immediate field.

    For scaled fields this is the range of offset/4, not of the byte offset.
    """
    if info.imm_bits == 0:
        return (0, 0)
    half = 1 << (info.imm_bits - 1)
    return (-half, half - 1)
