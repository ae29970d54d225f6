"""
Symbol Table
============

Maps label names to byte addresses within the assembled program.

The table is filled during pass 1 only. Once pass 1 is done the code
generator freezes it, and pass 2 and the symbol listing only read from
it. Names are case-sensitive and remembered in definition order, which
is the order of the symbol listing:

    main 0
    loop 8
    done 20
"""

import difflib
from dataclasses import dataclass
from typing import Iterator, Optional

from a64asm.errors import AssemblerError, DuplicateLabelError, UndefinedLabelError


@dataclass(frozen=True)
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Label name without the trailing ':'
        address: Byte offset from the start of the program
        index: Statement index of the defining label line
    """
    name: str
    address: int
    index: int = 0


class SymbolTable:
    """
    Ordered, write-once mapping from label names to addresses.

    Usage:
        table = SymbolTable()
        table.define("loop", 8)
        table.freeze()
        table.lookup("loop")      # 8
    """

    def __init__(self) -> None:
        self._symbols: dict[str, Symbol] = {}
        self._frozen = False

    def define(self, name: str, address: int, index: int = 0) -> Symbol:
        """
        Define a label.

        Args:
            name: Label name
            address: Byte address of the label
            index: Statement index, used in diagnostics

        Raises:
            DuplicateLabelError: If the name is already defined
            AssemblerError: If the table has been frozen
        """
        if self._frozen:
            raise AssemblerError(f"cannot define '{name}': symbol table is frozen")

        existing = self._symbols.get(name)
        if existing is not None:
            raise DuplicateLabelError(name, statement=f"{name}:", first_index=existing.index)

        symbol = Symbol(name, address, index)
        self._symbols[name] = symbol
        return symbol

    def lookup(self, name: str) -> int:
        """
        Get the address of a label.

        Raises:
            UndefinedLabelError: If the name was never defined
        """
        symbol = self._symbols.get(name)
        if symbol is None:
            raise UndefinedLabelError(name, similar_labels=self.similar(name))
        return symbol.address

    def get(self, name: str) -> Optional[Symbol]:
        """Get the full entry for a label, or None."""
        return self._symbols.get(name)

    def similar(self, name: str, limit: int = 3) -> list[str]:
        """Find defined names close to ``name`` (for typo hints)."""
        return difflib.get_close_matches(name, list(self._symbols), n=limit, cutoff=0.6)

    def freeze(self) -> None:
        """Make the table read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def __len__(self) -> int:
        return len(self._symbols)

    def as_dict(self) -> dict[str, int]:
        """Name to address, in definition order."""
        return {symbol.name: symbol.address for symbol in self._symbols.values()}

    def format_listing(self) -> str:
        """
        Render the symbol listing.

        One ``<name> <decimal address>`` line per label, in definition
        order, each terminated by a newline. Empty for a table with no
        labels.
        """
        return "".join(f"{symbol.name} {symbol.address}\n" for symbol in self._symbols.values())
