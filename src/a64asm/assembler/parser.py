"""
Statement Classification and Operand Pattern Matching
=====================================================

This module interprets one grouped line of tokens at a time.

Statement Kinds
---------------
1. **Label definition**: a line consisting of a single LABEL token
   ```asm
   loop:
   ```

2. **Data directive**: a line whose first token is the ``.8byte`` DOTID
   ```asm
   .8byte 0x1122334455667788
   .8byte table
   ```

3. **Instruction**: a line whose first token is an ID mnemonic
   ```asm
   add x0, x1, x2
   b.ne loop
   ```

Anything else is a syntax error.

Operand Patterns
----------------
Each mnemonic's operand pattern (see a64asm.cpu.arm64) is matched letter
by letter against the tokens after the mnemonic. Values collected along
the way fill the encoder's operand slots in order:

| Letter | Accepts              | Value                          |
|--------|----------------------|--------------------------------|
| r      | REG, ID "sp"         | register index                 |
| z      | REG, ZREG            | register index                 |
| c      | COMMA                | -                              |
| l      | LBRACK               | -                              |
| t      | RBRACK               | -                              |
| i      | INT, HEXINT          | literal value                  |
| j      | INT, HEXINT, ID      | literal, or label - pc         |

``b`` followed by a condition suffix DOTID becomes ``b.cond`` with the
condition code as first operand, and the rest is matched as ``b``.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from a64asm.assembler.encoder import parse_immediate, parse_register
from a64asm.assembler.lexer import Token, TokenType, render_line
from a64asm.cpu import (
    DATA_DIRECTIVE,
    OPERAND_PATTERNS,
    get_condition_code,
    is_valid_instruction,
)
from a64asm.errors import (
    AssemblySyntaxError,
    ExtraTokensError,
    InvalidConditionCodeError,
    TooFewOperandsError,
    UnknownMnemonicError,
)

logger = logging.getLogger(__name__)

# Resolves a label name to the value a 'j' operand should take
LabelResolver = Callable[[str], int]


# =============================================================================
# Statement Classification
# =============================================================================

class StatementKind(Enum):
    """What a grouped line represents."""
    LABEL = auto()        # loop:
    DATA = auto()         # .8byte value
    INSTRUCTION = auto()  # anything else; validated when parsed


def classify_statement(line: list[Token]) -> StatementKind:
    """
    Decide how a line is sized and encoded.

    Classification is purely structural so that pass 1 and pass 2 agree
    even on lines pass 2 will later reject.
    """
    if len(line) == 1 and line[0].type == TokenType.LABEL:
        return StatementKind.LABEL
    if line[0].type == TokenType.DOTID and line[0].lexeme == DATA_DIRECTIVE:
        return StatementKind.DATA
    return StatementKind.INSTRUCTION


def label_name(token: Token) -> str:
    """Strip the trailing ':' from a LABEL lexeme."""
    return token.lexeme[:-1] if token.lexeme.endswith(":") else token.lexeme


# =============================================================================
# Parsed Instruction
# =============================================================================

@dataclass(frozen=True)
class ParsedInstruction:
    """
    An instruction ready for the encoder.

    Attributes:
        mnemonic: Encoder mnemonic ("b.cond" for conditional branches)
        operands: Up to three integer operand slots, in encoder order
    """
    mnemonic: str
    operands: tuple[int, ...] = ()

    def slots(self) -> tuple[int, int, int]:
        """Operands padded with zeros to the encoder's three slots."""
        padded = self.operands + (0,) * (3 - len(self.operands))
        return padded[0], padded[1], padded[2]


# =============================================================================
# Operand Matcher
# =============================================================================

class OperandMatcher:
    """
    Matches the tokens of one instruction line against its pattern.

    Usage:
        matcher = OperandMatcher(line, resolve=lambda name: target - pc)
        parsed = matcher.parse()
    """

    # Element names used in "expected ..." messages
    EXPECTED = {
        "r": "register or sp",
        "z": "register or xzr",
        "c": "','",
        "l": "'['",
        "t": "']'",
        "i": "immediate",
        "j": "immediate or label",
    }

    def __init__(self, line: list[Token], resolve: LabelResolver):
        self._tokens = line
        self._resolve = resolve
        self._pos = 0
        self._text = render_line(line)

    # =========================================================================
    # Token Access
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._current()
        self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return not self._at_end() and self._current().type in types

    def _error(self, message: str, error_class: type = AssemblySyntaxError):
        return error_class(message, statement=self._text)

    # =========================================================================
    # Parsing
    # =========================================================================

    def parse(self) -> ParsedInstruction:
        """
        Parse the whole line.

        Raises:
            AssemblySyntaxError: If the line does not start with a mnemonic
                or an operand has the wrong token kind
            UnknownMnemonicError: If the mnemonic has no pattern
            InvalidConditionCodeError: For an unknown b.cond suffix
            TooFewOperandsError: If the line ends before the pattern
            ExtraTokensError: If tokens remain after the pattern
        """
        if not self._check(TokenType.ID):
            raise self._error(f"expected instruction, got '{self._current().lexeme}'")

        mnemonic = self._advance().lexeme
        if not is_valid_instruction(mnemonic):
            raise self._error(f"unknown instruction '{mnemonic}'", UnknownMnemonicError)
        pattern = OPERAND_PATTERNS[mnemonic]

        operands: list[int] = []

        if mnemonic == "b" and self._check(TokenType.DOTID):
            suffix = self._advance().lexeme
            code = get_condition_code(suffix)
            if code is None:
                raise self._error(f"invalid condition '{suffix}'", InvalidConditionCodeError)
            operands.append(code)
            mnemonic = "b.cond"

        for element in pattern:
            value = self._match_element(element, mnemonic)
            if value is not None:
                operands.append(value)

        if not self._at_end():
            raise self._error(
                f"extra tokens after {mnemonic}: '{self._current().lexeme}'",
                ExtraTokensError,
            )

        logger.debug(f"Parsed {mnemonic} {operands}")
        return ParsedInstruction(mnemonic, tuple(operands))

    def _match_element(self, element: str, mnemonic: str) -> Optional[int]:
        """Consume one pattern element, returning its value if it has one."""
        if self._at_end():
            raise self._error(f"too few operands for {mnemonic}", TooFewOperandsError)

        token = self._current()

        if element == "r":
            if token.type == TokenType.REG or (token.type == TokenType.ID and token.lexeme == "sp"):
                return parse_register(self._advance().lexeme)
        elif element == "z":
            if token.type in (TokenType.REG, TokenType.ZREG):
                return parse_register(self._advance().lexeme)
        elif element == "c":
            if token.type == TokenType.COMMA:
                self._advance()
                return None
        elif element == "l":
            if token.type == TokenType.LBRACK:
                self._advance()
                return None
        elif element == "t":
            if token.type == TokenType.RBRACK:
                self._advance()
                return None
        elif element == "i":
            if token.type in (TokenType.INT, TokenType.HEXINT):
                return parse_immediate(self._advance().lexeme)
        elif element == "j":
            if token.type in (TokenType.INT, TokenType.HEXINT):
                return parse_immediate(self._advance().lexeme)
            if token.type == TokenType.ID:
                return self._resolve(self._advance().lexeme)

        raise self._error(
            f"expected {self.EXPECTED[element]} in {mnemonic}, got '{token.lexeme}'"
        )


def parse_instruction(line: list[Token], resolve: LabelResolver) -> ParsedInstruction:
    """
    Parse one instruction line.

    Args:
        line: Tokens of the line, mnemonic first
        resolve: Maps a label operand to its pc-relative offset

    Returns:
        ParsedInstruction for the encoder
    """
    return OperandMatcher(line, resolve).parse()


# =============================================================================
# Data Directive
# =============================================================================

def parse_data_value(line: list[Token], lookup: LabelResolver) -> int:
    """
    Evaluate the operand of a ``.8byte`` line.

    A label operand evaluates to the label's absolute address.

    Raises:
        TooFewOperandsError: If the directive has no operand
        ExtraTokensError: If more than one operand follows
        AssemblySyntaxError: If the operand is not a literal or label
    """
    text = render_line(line)

    if len(line) < 2:
        raise TooFewOperandsError(f"missing operand for {DATA_DIRECTIVE}", statement=text)
    if len(line) > 2:
        raise ExtraTokensError(
            f"extra tokens after {DATA_DIRECTIVE}: '{line[2].lexeme}'", statement=text
        )

    operand = line[1]
    if operand.type == TokenType.ID:
        return lookup(operand.lexeme)
    if operand.type in (TokenType.INT, TokenType.HEXINT):
        return parse_immediate(operand.lexeme)

    raise AssemblySyntaxError(
        f"expected immediate or label after {DATA_DIRECTIVE}, got '{operand.lexeme}'",
        statement=text,
    )
