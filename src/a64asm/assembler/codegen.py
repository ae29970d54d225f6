"""
Two-Pass Code Generator
=======================

This module turns grouped token lines into machine code.

Pass 1 (Address Assignment)
---------------------------
- Walk the lines with a program counter starting at 0
- Record every label definition at the current pc
- Advance the pc by the statement's size

Pass 2 (Encoding)
-----------------
- Walk the same lines with a fresh pc starting at 0
- Resolve label operands to ``target - pc``, where pc is the address of
  the instruction being encoded
- Encode instructions and ``.8byte`` data, appending little-endian bytes
- Advance the pc by the same size function as pass 1

Both passes size statements with ``statement_size``, so a label's address
always equals the number of bytes emitted before the statement after it.

Statement Sizes
---------------
| Statement                 | Size |
|---------------------------|------|
| lone label definition     | 0    |
| ``.8byte`` directive      | 8    |
| anything else             | 4    |
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from a64asm.assembler.encoder import emit32le, emit64le, encode
from a64asm.assembler.lexer import Token, group_lines, render_line
from a64asm.assembler.parser import (
    StatementKind,
    classify_statement,
    label_name,
    parse_data_value,
    parse_instruction,
)
from a64asm.assembler.symbols import SymbolTable
from a64asm.cpu import DATA_SIZE, INSTRUCTION_SIZE
from a64asm.errors import AssemblerError

logger = logging.getLogger(__name__)


# =============================================================================
# Listing Entries
# =============================================================================

@dataclass
class ListingEntry:
    """
    One line of the assembly listing.

    Attributes:
        address: pc of the statement
        data: Bytes emitted for it (empty for labels)
        text: Rendered statement text
    """
    address: int
    data: bytes
    text: str

    def format(self) -> str:
        code = " ".join(f"{b:02X}" for b in self.data)
        if not self.data:
            return f"{'':10s}{'':26s}{self.text}"
        return f"{self.address:08X}  {code:24s}  {self.text}"


# =============================================================================
# Pass Functions
# =============================================================================

def statement_size(line: list[Token]) -> int:
    """
    Number of bytes a statement occupies.

    Used by both passes. Lines that pass 2 will reject still count 4 so
    that pass 1 never fails on them first.
    """
    kind = classify_statement(line)
    if kind == StatementKind.LABEL:
        return 0
    if kind == StatementKind.DATA:
        return DATA_SIZE
    return INSTRUCTION_SIZE


def assign_addresses(lines: list[list[Token]]) -> SymbolTable:
    """
    Pass 1: build the symbol table.

    Args:
        lines: Grouped statements

    Returns:
        A frozen SymbolTable

    Raises:
        DuplicateLabelError: If a label is defined twice
    """
    symbols = SymbolTable()
    pc = 0

    for index, line in enumerate(lines):
        if classify_statement(line) == StatementKind.LABEL:
            symbols.define(label_name(line[0]), pc, index)
        pc += statement_size(line)

    symbols.freeze()
    logger.debug(f"Pass 1: {len(symbols)} labels, {pc} bytes")
    return symbols


def encode_all(
    lines: list[list[Token]],
    symbols: SymbolTable,
    listing: Optional[list[ListingEntry]] = None,
) -> bytes:
    """
    Pass 2: encode every statement.

    Args:
        lines: The same grouped statements given to pass 1
        symbols: The symbol table from pass 1
        listing: If given, receives one ListingEntry per statement

    Returns:
        The machine code

    Raises:
        AssemblerError: The first error found; all errors are fatal
    """
    code = bytearray()
    pc = 0

    for line in lines:
        kind = classify_statement(line)
        text = render_line(line)

        try:
            if kind == StatementKind.LABEL:
                data = b""
            elif kind == StatementKind.DATA:
                data = emit64le(parse_data_value(line, symbols.lookup))
            else:
                here = pc
                parsed = parse_instruction(line, lambda name: symbols.lookup(name) - here)
                data = emit32le(encode(parsed.mnemonic, *parsed.slots()))
        except AssemblerError as e:
            raise e.with_statement(text)

        if listing is not None:
            listing.append(ListingEntry(pc, data, text))

        code.extend(data)
        pc += statement_size(line)

    logger.debug(f"Pass 2: emitted {len(code)} bytes")
    return bytes(code)


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Runs both passes over a token stream and keeps the results.

    Usage:
        gen = CodeGenerator()
        code = gen.generate(tokens)
        print(gen.get_symbol_listing(), file=sys.stderr)
    """

    def __init__(self) -> None:
        self._code = b""
        self._symbols = SymbolTable()
        self._listing: list[ListingEntry] = []

    def generate(self, tokens: Iterable[Token]) -> bytes:
        """
        Assemble a token stream.

        Args:
            tokens: Tokens with NEWLINE statement terminators

        Returns:
            The machine code

        Raises:
            AssemblerError: On the first error in either pass
        """
        self._code = b""
        self._symbols = SymbolTable()
        self._listing = []

        lines = group_lines(tokens)
        logger.debug(f"Assembling {len(lines)} statements")

        listing: list[ListingEntry] = []
        symbols = assign_addresses(lines)
        code = encode_all(lines, symbols, listing)

        self._symbols = symbols
        self._code = code
        self._listing = listing
        return code

    def get_code(self) -> bytes:
        """Machine code from the last successful run."""
        return self._code

    def get_symbol_table(self) -> SymbolTable:
        """Symbol table from the last successful run."""
        return self._symbols

    def get_symbols(self) -> dict[str, int]:
        """Label addresses in definition order."""
        return self._symbols.as_dict()

    def get_symbol_listing(self) -> str:
        """``<name> <decimal address>`` lines in definition order."""
        return self._symbols.format_listing()

    def get_listing_entries(self) -> list[ListingEntry]:
        return list(self._listing)

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            Addresses, emitted bytes and statement text, followed by the
            symbol table.
        """
        lines = []
        lines.append("a64asm listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append(f"{'Addr':10s}{'Code':26s}Source")
        lines.append("-" * 60)
        lines.extend(entry.format() for entry in self._listing)
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for symbol in self._symbols:
            lines.append(f"{symbol.name:20s} = 0x{symbol.address:08X}")
        return "\n".join(lines) + "\n"
