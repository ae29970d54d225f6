"""
ARM64 Subset Assembler
======================

This package assembles a small subset of AArch64 into raw little-endian
machine code.

Main Components
---------------
- **Assembler**: Facade that picks a front end and runs the code generator
- **RawLexer / read_tokenized**: Front ends producing tokens
- **OperandMatcher**: Matches instruction lines against operand patterns
- **encode**: Packs a mnemonic and integer operands into a 32-bit word
- **SymbolTable**: Label addresses from pass 1
- **CodeGenerator**: Runs pass 1 and pass 2 and keeps the results

Assembly Process
----------------
1. **Front end**: input text becomes a token stream
2. **Grouping**: the stream is split into statements at NEWLINE tokens
3. **Pass 1**: labels get addresses (label 0 bytes, ``.8byte`` 8, rest 4)
4. **Pass 2**: every statement is encoded with labels resolved

Example Usage
-------------
>>> from a64asm.assembler import assemble
>>> assemble("add x0, x1, x2").hex()
'2060228b'
"""

from a64asm.assembler.lexer import (
    NEWLINE,
    RawLexer,
    Token,
    TokenType,
    group_lines,
    read_tokenized,
    render_line,
    write_tokenized,
)
from a64asm.assembler.encoder import emit32le, emit64le, encode, parse_immediate, parse_register
from a64asm.assembler.symbols import Symbol, SymbolTable
from a64asm.assembler.parser import OperandMatcher, ParsedInstruction, parse_instruction
from a64asm.assembler.codegen import (
    CodeGenerator,
    ListingEntry,
    assign_addresses,
    encode_all,
    statement_size,
)
from a64asm.assembler.assembler import (
    Assembler,
    AssemblyResult,
    InputMode,
    assemble,
    assemble_file,
)

__all__ = [
    # Main interface
    "Assembler",
    "AssemblyResult",
    "InputMode",
    "assemble",
    "assemble_file",
    # Tokens and front ends
    "NEWLINE",
    "RawLexer",
    "Token",
    "TokenType",
    "group_lines",
    "read_tokenized",
    "render_line",
    "write_tokenized",
    # Encoder
    "encode",
    "emit32le",
    "emit64le",
    "parse_immediate",
    "parse_register",
    # Symbols
    "Symbol",
    "SymbolTable",
    # Parsing and code generation
    "OperandMatcher",
    "ParsedInstruction",
    "parse_instruction",
    "CodeGenerator",
    "ListingEntry",
    "assign_addresses",
    "encode_all",
    "statement_size",
]
