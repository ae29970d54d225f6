"""
a64asm Error Hierarchy
======================

This module defines the exception hierarchy for the assembler core.
All exceptions inherit from A64Error, allowing callers to catch every
toolchain failure with a single except clause.

Exception Hierarchy
-------------------
A64Error (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - token stream does not match the grammar
    │   ├── TooFewOperandsError - statement ends before its pattern does
    │   └── ExtraTokensError - tokens left over after the pattern
    ├── DuplicateLabelError - label defined more than once
    ├── UndefinedLabelError - reference to a label that was never defined
    └── EncodeError (operand value errors raised by the encoder)
        ├── InvalidRegisterError - register outside x0..x30/xzr/sp
        ├── ImmediateOutOfRangeError - immediate does not fit its field
        ├── MisalignedOffsetError - scaled offset not divisible by 4
        ├── InvalidConditionCodeError - unknown b.cond suffix or code
        └── UnknownMnemonicError - mnemonic not in the instruction table

The pseudocode front end adds its own branch under A64Error, see
a64asm.highlevel.errors.

Error Kinds
-----------
Every exception class carries a stable ``kind`` attribute (an ErrorKind
member). Callers that prefer to treat failures as values can inspect
``error.kind`` instead of matching on exception classes; the Assembler's
``try_assemble`` method returns it inside an AssemblyResult.

Message Format
--------------
Tokens carry no source positions, so errors point at the statement
instead of a column:

    error: immediate 1024 out of range for ldur (-256..255)
        ldur x0, [x1, 1024]
    hint: ldur takes a signed 9-bit byte offset
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Error Kinds
# =============================================================================

class ErrorKind(Enum):
    """Stable identifiers for every failure the toolchain reports."""
    DUPLICATE_LABEL = auto()
    UNDEFINED_LABEL = auto()
    INVALID_REGISTER = auto()
    IMMEDIATE_OUT_OF_RANGE = auto()
    MISALIGNED_OFFSET = auto()
    INVALID_CONDITION_CODE = auto()
    UNKNOWN_MNEMONIC = auto()
    SYNTAX_ERROR = auto()
    TOO_FEW_OPERANDS = auto()
    EXTRA_TOKENS = auto()
    MISSING_OPERAND = auto()


# =============================================================================
# Base Exception Class
# =============================================================================

class A64Error(Exception):
    """
    Base exception for all a64asm errors.

        try:
            assembler.assemble_file("program.s")
        except A64Error as e:
            print(f"Error: {e}")
    """
    kind: ErrorKind = ErrorKind.SYNTAX_ERROR


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in a text input, used by the front ends that read text.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(A64Error):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        statement: Rendered text of the offending statement (optional)
        hint: A suggestion for fixing the error (optional)
        location: Where in a text input the error occurred (optional)
    """

    def __init__(
        self,
        message: str,
        statement: Optional[str] = None,
        hint: Optional[str] = None,
        location: Optional[SourceLocation] = None,
    ):
        self.message = message
        self.statement = statement
        self.hint = hint
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.statement:
            parts.append(f"    {self.statement}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def with_statement(self, statement: str) -> "AssemblerError":
        """
        Attach statement context to an error raised without it.

        The encoder works on plain integers and has no idea which line it
        is encoding; the code generator calls this before re-raising.
        """
        if self.statement is None:
            self.statement = statement
            self.args = (self._format_message(),)
        return self


class AssemblySyntaxError(AssemblerError):
    """
    A statement's tokens do not match the expected shape.

    Examples:
        - Wrong token kind where an operand pattern expects another
        - A line that does not begin with a mnemonic, directive or label
        - An unknown token type name in pre-tokenized input
    """
    kind = ErrorKind.SYNTAX_ERROR


class TooFewOperandsError(AssemblySyntaxError):
    """The statement ended before the operand pattern was satisfied."""
    kind = ErrorKind.TOO_FEW_OPERANDS


class ExtraTokensError(AssemblySyntaxError):
    """Tokens remain after the operand pattern was fully matched."""
    kind = ErrorKind.EXTRA_TOKENS


class UndefinedLabelError(AssemblerError):
    """
    Reference to a label that pass 1 never defined.

    Raised during the second pass. Similar names from the symbol table
    are offered as a hint to catch typos.
    """
    kind = ErrorKind.UNDEFINED_LABEL

    def __init__(
        self,
        label: str,
        statement: Optional[str] = None,
        hint: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        if not hint and self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(f"undefined label '{label}'", statement, hint)


class DuplicateLabelError(AssemblerError):
    """
    A label name was defined a second time.

    Attributes:
        label: The label name
        first_index: Statement index of the first definition
    """
    kind = ErrorKind.DUPLICATE_LABEL

    def __init__(
        self,
        label: str,
        statement: Optional[str] = None,
        first_index: Optional[int] = None,
    ):
        self.label = label
        self.first_index = first_index

        hint = None
        if first_index is not None:
            hint = f"first defined at statement {first_index}"

        super().__init__(f"duplicate label '{label}'", statement, hint)


# =============================================================================
# Encoder Exceptions
# =============================================================================

class EncodeError(AssemblerError):
    """Base class for operand values the encoder cannot place in a word."""


class InvalidRegisterError(EncodeError):
    """A register name or index outside x0..x30, xzr and sp."""
    kind = ErrorKind.INVALID_REGISTER


class ImmediateOutOfRangeError(EncodeError):
    """An immediate or offset that does not fit its signed field."""
    kind = ErrorKind.IMMEDIATE_OUT_OF_RANGE


class MisalignedOffsetError(EncodeError):
    """A pc-relative offset that is not a multiple of 4."""
    kind = ErrorKind.MISALIGNED_OFFSET


class InvalidConditionCodeError(EncodeError):
    """An unknown condition suffix, comparison, or out-of-range code."""
    kind = ErrorKind.INVALID_CONDITION_CODE


class UnknownMnemonicError(EncodeError):
    """A mnemonic with no entry in the instruction table."""
    kind = ErrorKind.UNKNOWN_MNEMONIC
