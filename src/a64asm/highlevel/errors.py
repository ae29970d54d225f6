"""
Pseudocode Front-End Error Hierarchy
====================================

Exceptions raised while reading pseudocode and lowering its IR. They
inherit from A64Error so a single except clause covers the whole
toolchain.

Exception Hierarchy
-------------------
PseudocodeError (base for all pseudocode errors)
├── PseudocodeSyntaxError - a line matches no statement form
├── MissingOperandError - a statement or IR field lacks a required value
└── LoweringError - an IR value cannot be turned into tokens

Register and comparison problems found during lowering are reported with
the assembler's own InvalidRegisterError and InvalidConditionCodeError,
so a bad register has the same kind whichever front end it came from.

Error Message Format
--------------------
    loop.hl:3: error: expected 'register = ...'
        x0 = 5
    hint: assignments take a register, a load, or a register expression
"""

from typing import Optional

from a64asm.errors import A64Error, ErrorKind, SourceLocation


class PseudocodeError(A64Error):
    """
    Base exception for pseudocode front-end errors.

    Attributes:
        message: The error description
        location: File and line of the statement (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The statement text (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None:
            parts.append(f"    {self.source_line}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class PseudocodeSyntaxError(PseudocodeError):
    """
    A pseudocode line does not match any statement form.

    Examples:
        - ``x0 = 5`` (there is no literal assignment)
        - ``x0 = x1 ^ x2`` (unknown operator)
        - ``if x0 < x1 jump done`` (missing ``goto``)
    """
    kind = ErrorKind.SYNTAX_ERROR


class MissingOperandError(PseudocodeError):
    """A statement or IR instruction lacks a required field."""
    kind = ErrorKind.MISSING_OPERAND


class LoweringError(PseudocodeError):
    """An IR field holds a value that has no token form (e.g. a label as an offset)."""
    kind = ErrorKind.SYNTAX_ERROR
