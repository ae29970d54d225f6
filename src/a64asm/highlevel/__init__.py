"""
Pseudocode Front End
====================

Reads a small register-level pseudocode and lowers it to the assembler's
token stream through a target-independent IR.

Pipeline
--------
1. **PseudocodeParser**: text to IR instructions
2. **lower**: IR instructions to ARM64 tokens

Example Usage
-------------
>>> from a64asm.highlevel import parse_pseudocode, lower, format_ir
>>> ir = parse_pseudocode("x0 = x1 % x2")
>>> print(format_ir(ir), end="")
  MOD x0, x1, x2
>>> len([t for t in lower(ir) if t.type.name == "NEWLINE"])
3
"""

from a64asm.highlevel.errors import (
    LoweringError,
    MissingOperandError,
    PseudocodeError,
    PseudocodeSyntaxError,
)
from a64asm.highlevel.ir import (
    BinaryOp,
    Branch,
    Call,
    CompareBranch,
    Data8,
    IROp,
    IRInstruction,
    Label,
    Load,
    Move,
    Return,
    Store,
    format_ir,
)
from a64asm.highlevel.parser import PseudocodeParser, parse_pseudocode
from a64asm.highlevel.lowering import lower, lower_instruction, lower_to_tokenized

__all__ = [
    # Errors
    "PseudocodeError",
    "PseudocodeSyntaxError",
    "MissingOperandError",
    "LoweringError",
    # IR
    "IROp",
    "IRInstruction",
    "BinaryOp",
    "Move",
    "Load",
    "Store",
    "CompareBranch",
    "Branch",
    "Call",
    "Return",
    "Label",
    "Data8",
    "format_ir",
    # Parsing and lowering
    "PseudocodeParser",
    "parse_pseudocode",
    "lower",
    "lower_instruction",
    "lower_to_tokenized",
]
