"""
a64asm - Assembler Toolchain for a Small ARM64 Subset
=====================================================

This package assembles a restricted subset of AArch64 into raw
little-endian machine code. Input can be given in three forms:

- **pre-tokenized text**: ``TOKEN_TYPE lexeme`` pairs, one per line
- **raw assembly**: ``add x0, x1, x2``, ``b.ne loop``, ``.8byte 42``
- **pseudocode**: ``x0 = x1 + x2``, ``if x0 < x1 goto loop``, lowered
  through an intermediate representation

Main Components
---------------
- **assembler**: token front ends, encoder, two-pass code generator
- **highlevel**: pseudocode parser, IR and lowering
- **cpu**: instruction table, condition codes and register constants
- **cli**: the ``a64asm`` command

Quick Start
-----------
    >>> from a64asm import Assembler, InputMode
    >>> asm = Assembler(InputMode.HIGH)
    >>> code = asm.assemble_string("x0 = x1 + x2")
    >>> code.hex()
    '2060228b'

Or from the command line:
    $ a64asm --raw prog.s -o prog.bin
    $ a64asm --high prog.hl > prog.bin 2> prog.sym
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================
# The assembler package is imported before highlevel: the Assembler facade
# pulls in the pseudocode front end, which in turn uses assembler tokens.
# =============================================================================

from a64asm.assembler import (
    Assembler,
    AssemblyResult,
    InputMode,
    assemble,
    assemble_file,
)
from a64asm.highlevel import lower, parse_pseudocode
from a64asm.errors import (
    A64Error,
    ErrorKind,
    SourceLocation,
    AssemblerError,
    AssemblySyntaxError,
    TooFewOperandsError,
    ExtraTokensError,
    DuplicateLabelError,
    UndefinedLabelError,
    EncodeError,
    InvalidRegisterError,
    ImmediateOutOfRangeError,
    MisalignedOffsetError,
    InvalidConditionCodeError,
    UnknownMnemonicError,
)
from a64asm.highlevel.errors import (
    PseudocodeError,
    PseudocodeSyntaxError,
    MissingOperandError,
    LoweringError,
)

__all__ = [
    "__version__",
    # Assembler
    "Assembler",
    "AssemblyResult",
    "InputMode",
    "assemble",
    "assemble_file",
    # Pseudocode
    "lower",
    "parse_pseudocode",
    # Exception hierarchy
    "A64Error",
    "ErrorKind",
    "SourceLocation",
    "AssemblerError",
    "AssemblySyntaxError",
    "TooFewOperandsError",
    "ExtraTokensError",
    "DuplicateLabelError",
    "UndefinedLabelError",
    "EncodeError",
    "InvalidRegisterError",
    "ImmediateOutOfRangeError",
    "MisalignedOffsetError",
    "InvalidConditionCodeError",
    "UnknownMnemonicError",
    "PseudocodeError",
    "PseudocodeSyntaxError",
    "MissingOperandError",
    "LoweringError",
]
