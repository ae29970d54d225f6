"""
a64asm CPU Package
==================

Architecture definitions shared by the assembler and the pseudocode
lowering: the modeled ARM64 mnemonics, their base encodings and operand
patterns, condition codes and register constants.

Modules:
    arm64: Instruction table, formats and lookup helpers.

Usage:
    from a64asm.cpu import (
        InstructionInfo,
        OPCODE_TABLE,
        get_instruction_info,
    )
"""

# =============================================================================
# Public API Exports
# =============================================================================

from a64asm.cpu.arm64 import (
    # Core types
    InstructionFormat,
    InstructionInfo,
    # Master instruction database
    OPCODE_TABLE,
    MNEMONICS,
    OPERAND_PATTERNS,
    # Condition codes
    CONDITION_CODES,
    CONDITION_NAMES,
    MAX_CONDITION_CODE,
    # Registers and sizes
    ZERO_REGISTER,
    STACK_POINTER,
    LINK_REGISTER,
    MAX_GENERAL_REGISTER,
    REGISTER_ALIASES,
    DATA_DIRECTIVE,
    INSTRUCTION_SIZE,
    DATA_SIZE,
    # Lookup functions
    get_instruction_info,
    is_valid_instruction,
    get_condition_code,
    immediate_range,
)

__all__ = [
    "InstructionFormat",
    "InstructionInfo",
    "OPCODE_TABLE",
    "MNEMONICS",
    "OPERAND_PATTERNS",
    "CONDITION_CODES",
    "CONDITION_NAMES",
    "MAX_CONDITION_CODE",
    "ZERO_REGISTER",
    "STACK_POINTER",
    "LINK_REGISTER",
    "MAX_GENERAL_REGISTER",
    "REGISTER_ALIASES",
    "DATA_DIRECTIVE",
    "INSTRUCTION_SIZE",
    "DATA_SIZE",
    "get_instruction_info",
    "is_valid_instruction",
    "get_condition_code",
    "immediate_range",
]
