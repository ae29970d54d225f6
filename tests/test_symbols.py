# =============================================================================
# test_symbols.py - Symbol Table Tests
# =============================================================================
# Tests for label definition, lookup, freezing and the symbol listing.
# =============================================================================

import pytest

from a64asm.assembler.symbols import Symbol, SymbolTable
from a64asm.errors import (
    AssemblerError,
    DuplicateLabelError,
    ErrorKind,
    UndefinedLabelError,
)


class TestSymbolTable:
    """Definition and lookup."""

    def test_define_and_lookup(self):
        table = SymbolTable()
        symbol = table.define("loop", 8, index=2)
        assert symbol == Symbol("loop", 8, 2)
        assert table.lookup("loop") == 8
        assert "loop" in table
        assert len(table) == 1

    def test_case_sensitive(self):
        table = SymbolTable()
        table.define("Loop", 0)
        table.define("loop", 4)
        assert table.lookup("Loop") == 0
        assert table.lookup("loop") == 4

    def test_duplicate(self):
        """A second definition is rejected and names the first."""
        table = SymbolTable()
        table.define("loop", 0, index=0)

        with pytest.raises(DuplicateLabelError) as exc_info:
            table.define("loop", 12, index=4)

        error = exc_info.value
        assert error.kind == ErrorKind.DUPLICATE_LABEL
        assert error.label == "loop"
        assert error.first_index == 0
        assert "duplicate label 'loop'" in str(error)
        assert "first defined at statement 0" in str(error)
        assert table.lookup("loop") == 0

    def test_undefined(self):
        table = SymbolTable()
        with pytest.raises(UndefinedLabelError) as exc_info:
            table.lookup("missing")
        assert exc_info.value.kind == ErrorKind.UNDEFINED_LABEL
        assert exc_info.value.label == "missing"

    def test_undefined_suggests_similar(self):
        """Typos get a 'did you mean' hint."""
        table = SymbolTable()
        table.define("loop", 0)
        table.define("done", 8)

        with pytest.raises(UndefinedLabelError) as exc_info:
            table.lookup("lop")
        assert exc_info.value.similar_labels == ["loop"]
        assert "did you mean 'loop'?" in str(exc_info.value)

    def test_get(self):
        table = SymbolTable()
        table.define("a", 4)
        assert table.get("a").address == 4
        assert table.get("b") is None

    def test_freeze(self):
        table = SymbolTable()
        table.define("a", 0)
        table.freeze()
        assert table.frozen

        with pytest.raises(AssemblerError, match="frozen"):
            table.define("b", 4)
        assert table.lookup("a") == 0


class TestSymbolListing:
    """Listing output in definition order."""

    def test_definition_order(self):
        table = SymbolTable()
        table.define("main", 0)
        table.define("loop", 8)
        table.define("done", 20)
        assert table.format_listing() == "main 0\nloop 8\ndone 20\n"
        assert list(table.as_dict()) == ["main", "loop", "done"]
        assert [s.name for s in table] == ["main", "loop", "done"]

    def test_empty(self):
        assert SymbolTable().format_listing() == ""
