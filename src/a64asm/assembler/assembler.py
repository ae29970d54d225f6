"""
a64asm Assembler - Main Interface
=================================

This module provides the Assembler class, the primary interface for
turning any of the three input forms into machine code. It picks a front
end for the input, hands the resulting tokens to the code generator, and
keeps the results for output.

Input Modes
-----------
- **TOKENIZED**: ``TOKEN_TYPE lexeme`` pairs, ``NEWLINE`` alone
- **RAW**: plain ARM64 assembly text
- **HIGH**: pseudocode, parsed to IR and lowered to tokens

Example Usage
-------------
>>> from a64asm.assembler import Assembler, InputMode
>>>
>>> asm = Assembler()
>>> code = asm.assemble_string('''
... loop:
...     sub x0, x0, x1
...     cmp x0, xzr
...     b.ne loop
... ''', mode=InputMode.RAW)
>>> len(code)
12
>>> print(asm.get_symbol_listing(), end="")
loop 0

Callers that prefer failures as values use ``try_assemble``, which
returns an AssemblyResult instead of raising.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from a64asm.assembler.codegen import CodeGenerator
from a64asm.assembler.lexer import RawLexer, Token, read_tokenized
from a64asm.errors import A64Error, ErrorKind
from a64asm.highlevel.lowering import lower
from a64asm.highlevel.parser import parse_pseudocode

logger = logging.getLogger(__name__)


class InputMode(Enum):
    """Which front end reads the input text."""
    TOKENIZED = "tokenized"
    RAW = "raw"
    HIGH = "high"


@dataclass
class AssemblyResult:
    """
    Outcome of ``Assembler.try_assemble``.

    Attributes:
        success: True if machine code was produced
        code: The machine code (empty on failure)
        symbols: Label addresses in definition order (empty on failure)
        error: The error that stopped assembly, if any
    """
    success: bool
    code: bytes = b""
    symbols: dict[str, int] = field(default_factory=dict)
    error: Optional[A64Error] = None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        """Kind of the failure, or None on success."""
        return self.error.kind if self.error is not None else None


class Assembler:
    """
    Main assembler class.

    Attributes:
        mode: Default input mode for assemble_string and assemble_file
    """

    def __init__(self, mode: InputMode = InputMode.TOKENIZED):
        """
        Initialize the assembler.

        Args:
            mode: Default input mode (TOKENIZED unless told otherwise)
        """
        self.mode = mode
        self._codegen = CodeGenerator()

    # =========================================================================
    # Front Ends
    # =========================================================================

    def tokenize(
        self,
        source: str,
        mode: Optional[InputMode] = None,
        filename: str = "<input>",
    ) -> list[Token]:
        """
        Convert input text to tokens with the front end for ``mode``.

        Args:
            source: Input text
            mode: Input mode (defaults to the assembler's mode)
            filename: Name used in pseudocode error locations

        Returns:
            Token stream with NEWLINE terminators
        """
        mode = mode or self.mode

        if mode == InputMode.TOKENIZED:
            return read_tokenized(source)
        if mode == InputMode.RAW:
            return list(RawLexer(source).tokenize())
        return lower(parse_pseudocode(source, filename))

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_tokens(self, tokens: Iterable[Token]) -> bytes:
        """
        Assemble a token stream.

        Returns:
            Machine code as bytes

        Raises:
            AssemblerError: If assembly fails
        """
        code = self._codegen.generate(tokens)
        logger.debug(f"Generated {len(code)} bytes, {len(self.get_symbols())} labels")
        return code

    def assemble_string(
        self,
        source: str,
        mode: Optional[InputMode] = None,
        filename: str = "<input>",
    ) -> bytes:
        """
        Assemble input text.

        Args:
            source: Input text
            mode: Input mode (defaults to the assembler's mode)
            filename: Virtual filename for error messages

        Returns:
            Machine code as bytes

        Raises:
            A64Error: If any front end or the code generator fails
        """
        mode = mode or self.mode
        logger.debug(f"Assembling {filename} ({mode.value})")
        return self.assemble_tokens(self.tokenize(source, mode, filename))

    def assemble_file(self, filepath: str | Path, mode: Optional[InputMode] = None) -> bytes:
        """
        Assemble input from a file.

        Raises:
            A64Error: If assembly fails
            FileNotFoundError: If the file does not exist
        """
        filepath = Path(filepath)
        source = filepath.read_text()
        return self.assemble_string(source, mode, str(filepath))

    def try_assemble(
        self,
        source: str,
        mode: Optional[InputMode] = None,
        filename: str = "<input>",
    ) -> AssemblyResult:
        """
        Assemble input text, reporting failure as a value.

        Returns:
            AssemblyResult; ``result.error_kind`` identifies any failure
        """
        try:
            code = self.assemble_string(source, mode, filename)
        except A64Error as e:
            logger.debug(f"Assembly failed: {e.kind.name}")
            return AssemblyResult(success=False, error=e)
        return AssemblyResult(success=True, code=code, symbols=self.get_symbols())

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_code(self) -> bytes:
        """Machine code from the last successful assembly."""
        return self._codegen.get_code()

    def get_symbols(self) -> dict[str, int]:
        """Label addresses in definition order."""
        return self._codegen.get_symbols()

    def get_symbol_listing(self) -> str:
        """The ``<name> <decimal address>`` symbol listing."""
        return self._codegen.get_symbol_listing()

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            Listing with addresses, code bytes, statements and symbols
        """
        return self._codegen.get_listing()

    def write_binary(self, filepath: str | Path) -> None:
        """Write the machine code, with no header or padding."""
        code = self.get_code()
        Path(filepath).write_bytes(code)
        logger.debug(f"Wrote {len(code)} bytes to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """Write the symbol listing."""
        Path(filepath).write_text(self.get_symbol_listing())
        logger.debug(f"Wrote symbols to {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        """Write the assembly listing."""
        Path(filepath).write_text(self.get_listing())
        logger.debug(f"Wrote listing to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, mode: InputMode = InputMode.RAW, filename: str = "<input>") -> bytes:
    """
    Convenience function to assemble input text.

    Args:
        source: Input text
        mode: Input mode (default RAW)
        filename: Virtual filename for errors

    Returns:
        Machine code

    Raises:
        A64Error: If assembly fails
    """
    return Assembler(mode).assemble_string(source, filename=filename)


def assemble_file(filepath: str | Path, mode: InputMode = InputMode.RAW) -> bytes:
    """
    Convenience function to assemble a file.

    Raises:
        A64Error: If assembly fails
    """
    return Assembler(mode).assemble_file(filepath)
