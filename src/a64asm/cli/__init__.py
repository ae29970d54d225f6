"""
a64asm Command-Line Interface
=============================

- **a64asm**: assemble tokenized, raw or pseudocode input to machine code

The tool is a Click-based CLI application with help text and uniform
error reporting (see a64asm.cli.errors).
"""

__all__ = ["a64asm"]
