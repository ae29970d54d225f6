"""
Tokens and Front-End Lexers
===========================

This module defines the token vocabulary shared by every front end and
the two text readers that produce it.

Token Types
-----------
- **DOTID**: a word starting with '.' (``.8byte`` or a condition suffix
  such as ``.eq``)
- **LABEL**: a label definition, lexeme includes the trailing ':'
- **ID**: a mnemonic, a label reference, or ``sp``
- **HEXINT**: ``0x``-prefixed hexadecimal literal
- **INT**: signed decimal literal
- **REG**: general register ``x0``..``x30``
- **ZREG**: the zero register ``xzr``
- **COMMA**, **LBRACK**, **RBRACK**: punctuation
- **NEWLINE**: statement terminator

Tokens carry no position information. Statements are identified by their
index among the grouped lines.

Readers
-------
- **read_tokenized / write_tokenized**: the pre-tokenized wire format,
  ``TOKEN_TYPE lexeme`` pairs with ``NEWLINE`` standing alone.
- **RawLexer**: plain ARM64 assembly text.

Raw Assembly Syntax
-------------------
    ; comment                  // comment
    loop:                      label definition
    add x0, x1, x2
    ldur x0, [x1, -8]
    b.ne loop                  split into "b" and ".ne"
    .8byte 0x1234
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator

from a64asm.cpu import CONDITION_CODES
from a64asm.errors import AssemblySyntaxError


# =============================================================================
# Token Types
# =============================================================================

class TokenType(Enum):
    """
    Classification of a lexical token.

    Member names double as the type names of the pre-tokenized format.
    """
    DOTID = auto()    # .8byte, .eq
    LABEL = auto()    # loop:
    ID = auto()       # add, loop, sp
    HEXINT = auto()   # 0x10
    REG = auto()      # x0..x30
    ZREG = auto()     # xzr
    INT = auto()      # 42, -8
    COMMA = auto()    # ,
    LBRACK = auto()   # [
    RBRACK = auto()   # ]
    NEWLINE = auto()  # end of statement


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical token.

    Attributes:
        type: The TokenType classification
        lexeme: The token text ("" for NEWLINE)
    """
    type: TokenType
    lexeme: str = ""

    def __repr__(self) -> str:
        if self.lexeme:
            return f"Token({self.type.name}, {self.lexeme!r})"
        return f"Token({self.type.name})"

    def __str__(self) -> str:
        if self.type == TokenType.NEWLINE:
            return self.type.name
        return f"{self.type.name} {self.lexeme}"


NEWLINE = Token(TokenType.NEWLINE)


# =============================================================================
# Line Grouping and Rendering
# =============================================================================

def group_lines(tokens: Iterable[Token]) -> list[list[Token]]:
    """
    Split a token stream into statements.

    A statement is a maximal run of non-NEWLINE tokens. Empty runs are
    dropped and a trailing run without a final NEWLINE is kept.

    Args:
        tokens: The token stream

    Returns:
        List of non-empty token lists
    """
    lines: list[list[Token]] = []
    current: list[Token] = []

    for token in tokens:
        if token.type == TokenType.NEWLINE:
            if current:
                lines.append(current)
                current = []
        else:
            current.append(token)

    if current:
        lines.append(current)

    return lines


def render_line(line: list[Token]) -> str:
    """
    Render one statement back to assembly text.

    Used for diagnostics and listings. The output is accepted by RawLexer:

        >>> render_line(RawLexer("ldur x0, [x1, 8]").tokenize_lines()[0])
        'ldur x0, [x1, 8]'
    """
    parts: list[str] = []

    for index, token in enumerate(line):
        if index == 0:
            parts.append(token.lexeme)
        elif token.type in (TokenType.COMMA, TokenType.RBRACK):
            parts.append(token.lexeme)
        elif line[index - 1].type == TokenType.LBRACK:
            parts.append(token.lexeme)
        elif index == 1 and token.type == TokenType.DOTID and line[0].lexeme == "b":
            # Condition suffix attaches to the branch: b.eq
            parts.append(token.lexeme)
        else:
            parts.append(" " + token.lexeme)

    return "".join(parts)


# =============================================================================
# Pre-tokenized Format
# =============================================================================

def read_tokenized(text: str) -> list[Token]:
    """
    Parse the pre-tokenized format.

    The input is a whitespace-separated stream of ``TYPE lexeme`` pairs;
    ``NEWLINE`` takes no lexeme. Conventionally each pair sits on its own
    line, but only the word order matters.

    Raises:
        AssemblySyntaxError: On an unknown type name or a missing lexeme
    """
    tokens: list[Token] = []
    words = iter(text.split())

    for type_name in words:
        try:
            token_type = TokenType[type_name]
        except KeyError:
            raise AssemblySyntaxError(
                f"unknown token type '{type_name}'",
                hint="expected one of " + ", ".join(t.name for t in TokenType),
            ) from None

        if token_type == TokenType.NEWLINE:
            tokens.append(NEWLINE)
            continue

        lexeme = next(words, None)
        if lexeme is None:
            raise AssemblySyntaxError(f"missing lexeme after token type {type_name}")
        tokens.append(Token(token_type, lexeme))

    return tokens


def write_tokenized(tokens: Iterable[Token]) -> str:
    """Serialize tokens in the pre-tokenized format, one token per line."""
    return "".join(f"{token}\n" for token in tokens)


# =============================================================================
# Raw Assembly Lexer
# =============================================================================

class RawLexer:
    """
    Tokenizes raw ARM64 assembly text.

    Each source line yields its tokens followed by a NEWLINE. A label
    definition that shares a line with an instruction is given its own
    statement, so ``loop: add x0, x0, x1`` assembles like the two-line form.

    Usage:
        lexer = RawLexer(source_text)
        tokens = list(lexer.tokenize())
    """

    # Single-character tokens
    PUNCTUATION = {
        ",": TokenType.COMMA,
        "[": TokenType.LBRACK,
        "]": TokenType.RBRACK,
    }

    COMMENT_MARKERS = (";", "//")

    def __init__(self, source: str):
        self.source = source

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source text.

        Yields:
            Token objects, a NEWLINE after every source line
        """
        for raw_line in self.source.splitlines():
            line_tokens = list(self._scan_line(self._strip_comment(raw_line)))

            if len(line_tokens) > 1 and line_tokens[0].type == TokenType.LABEL:
                yield line_tokens[0]
                yield NEWLINE
                line_tokens = line_tokens[1:]

            yield from line_tokens
            yield NEWLINE

    def tokenize_lines(self) -> list[list[Token]]:
        """Tokenize and group into statements in one step."""
        return group_lines(self.tokenize())

    def _strip_comment(self, line: str) -> str:
        cut = len(line)
        for marker in self.COMMENT_MARKERS:
            pos = line.find(marker)
            if pos != -1:
                cut = min(cut, pos)
        return line[:cut]

    def _scan_line(self, line: str) -> Iterator[Token]:
        pos = 0
        while pos < len(line):
            char = line[pos]

            if char.isspace():
                pos += 1
                continue

            if char in self.PUNCTUATION:
                yield Token(self.PUNCTUATION[char], char)
                pos += 1
                continue

            start = pos
            while pos < len(line) and not line[pos].isspace() and line[pos] not in self.PUNCTUATION:
                pos += 1
            yield from self._classify_word(line[start:pos])

    def _classify_word(self, word: str) -> Iterator[Token]:
        """
        Classify one word, splitting ``b.<cond>`` into two tokens.
        """
        if word.startswith("b.") and word[2:] in CONDITION_CODES:
            yield Token(TokenType.ID, "b")
            yield Token(TokenType.DOTID, word[1:])
            return

        yield Token(classify_word(word), word)


def classify_word(word: str) -> TokenType:
    """
    Determine the token type of a single whitespace-free word.

    Order matters: a trailing ':' wins over everything, then a leading '.',
    then numeric literals, then registers; anything else is an ID.
    """
    if word.endswith(":"):
        return TokenType.LABEL
    if word.startswith("."):
        return TokenType.DOTID
    if len(word) > 2 and word[:2] in ("0x", "0X"):
        return TokenType.HEXINT
    if _is_decimal(word):
        return TokenType.INT
    if word == "xzr":
        return TokenType.ZREG
    if len(word) >= 2 and word[0] == "x" and word[1].isdigit():
        return TokenType.REG
    return TokenType.ID


def _is_decimal(word: str) -> bool:
    digits = word[1:] if word[:1] in ("-", "+") else word
    return digits.isascii() and digits.isdigit()
