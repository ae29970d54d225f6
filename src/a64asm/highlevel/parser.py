"""
Pseudocode Parser
=================

Parses the high-level pseudocode into IR instructions.

Syntax
------
One statement per line; words are separated by whitespace. Blank lines
and lines starting with ``#`` are skipped.

```
label <name>                        LABEL
<xd> = <xn> + <xm>                  ADD   (also - * / %)
<xd> = <xn>                         MOV
<xd> = *<xn>                        LOAD  offset 0
<xd> = *(<xn> + <imm>)              LOAD  (also - <imm>)
*<xn> = <xd>                        STORE offset 0
*(<xn> + <imm>) = <xd>              STORE (also - <imm>)
if <xn> <cmp> <xm> goto <label>     CMP_BRANCH  (== != < <= > >=)
goto <label>                        BRANCH
call <xn>                           CALL
ret                                 RET
.8byte <value>                      DATA8
```

There is no literal assignment: ``x0 = 5`` is a syntax error. The
parser checks statement shape only; register names, comparison operators
and numerals are validated when the IR is lowered.
"""

import logging
import re
from typing import Optional

from a64asm.errors import SourceLocation
from a64asm.highlevel.errors import MissingOperandError, PseudocodeSyntaxError
from a64asm.highlevel.ir import (
    BINARY_OPERATORS,
    BinaryOp,
    Branch,
    Call,
    CompareBranch,
    Data8,
    IRInstruction,
    Label,
    Load,
    Move,
    Return,
    Store,
)

logger = logging.getLogger(__name__)


# "(x1 + 8)", "(x1 - 8)", "(x1)" once the words after '*' are rejoined
_ADDRESS_PATTERN = re.compile(
    r"^\(\s*(?P<base>[^\s()+-]+)\s*(?:(?P<sign>[+-])\s*(?P<offset>[^\s()]+)\s*)?\)$"
)


def _looks_like_register(word: str) -> bool:
    if word in ("xzr", "sp"):
        return True
    return len(word) >= 2 and word[0] == "x" and word[1].isdigit()


def _negate(numeral: str) -> str:
    if numeral.startswith("-"):
        return numeral[1:]
    if numeral.startswith("+"):
        return "-" + numeral[1:]
    return "-" + numeral


class PseudocodeParser:
    """
    Parses pseudocode text into a list of IR instructions.

    Usage:
        parser = PseudocodeParser(source, "prog.hl")
        ir = parser.parse()
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self._line_number = 0
        self._line_text = ""

    def parse(self) -> list[IRInstruction]:
        """
        Parse the whole source.

        Raises:
            PseudocodeSyntaxError: If a line matches no statement form
            MissingOperandError: If a statement lacks a required word
        """
        instructions: list[IRInstruction] = []

        for number, raw_line in enumerate(self.source.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            self._line_number = number
            self._line_text = line
            instructions.append(self._parse_line(line.split()))

        logger.debug(f"Parsed {len(instructions)} IR instructions from {self.filename}")
        return instructions

    # =========================================================================
    # Error Helpers
    # =========================================================================

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self._line_number)

    def _syntax_error(self, message: str, hint: Optional[str] = None) -> PseudocodeSyntaxError:
        return PseudocodeSyntaxError(message, self._location(), hint, self._line_text)

    def _missing(self, message: str) -> MissingOperandError:
        return MissingOperandError(message, self._location(), source_line=self._line_text)

    def _require_words(self, words: list[str], count: int, what: str) -> None:
        if len(words) < count:
            raise self._missing(f"'{words[0]}' requires {what}")
        if len(words) > count:
            raise self._syntax_error(f"unexpected '{words[count]}' after {words[0]}")

    def _no_zero_register(self, word: str, role: str) -> str:
        # Register 31 in these slots encodes sp, so xzr cannot be written there
        if word == "xzr":
            raise self._syntax_error(
                f"xzr cannot be used as the {role}",
                hint="xzr is only allowed as the second operand of an operation or comparison",
            )
        return word

    # =========================================================================
    # Statement Dispatch
    # =========================================================================

    def _parse_line(self, words: list[str]) -> IRInstruction:
        keyword = words[0]
        loc = self._location()

        if keyword == "label":
            self._require_words(words, 2, "a name")
            return Label(words[1], location=loc)

        if keyword == "goto":
            self._require_words(words, 2, "a label")
            return Branch(words[1], location=loc)

        if keyword == "call":
            self._require_words(words, 2, "a register")
            return Call(self._no_zero_register(words[1], "call target"), location=loc)

        if keyword == "ret":
            self._require_words(words, 1, "nothing")
            return Return(location=loc)

        if keyword == ".8byte":
            self._require_words(words, 2, "a value")
            return Data8(words[1], location=loc)

        if keyword == "if":
            return self._parse_if(words)

        if "=" not in words:
            raise self._syntax_error(
                f"unrecognized statement '{keyword}'",
                hint="expected label, goto, call, ret, if, .8byte or an assignment",
            )

        if keyword.startswith("*"):
            return self._parse_store(words)

        return self._parse_assignment(words)

    def _parse_if(self, words: list[str]) -> IRInstruction:
        # if <xn> <cmp> <xm> goto <label>
        if len(words) >= 5 and words[4] != "goto":
            raise self._syntax_error(
                f"expected 'goto', got '{words[4]}'",
                hint="syntax: if <reg> <op> <reg> goto <label>",
            )
        if len(words) < 6:
            raise self._missing("'if' requires <reg> <op> <reg> goto <label>")
        if len(words) > 6:
            raise self._syntax_error(f"unexpected '{words[6]}' after goto target")

        lhs = self._no_zero_register(words[1], "left side of a comparison")
        return CompareBranch(lhs, words[2], words[3], words[5], location=self._location())

    def _parse_assignment(self, words: list[str]) -> IRInstruction:
        if words[1] != "=":
            raise self._syntax_error(
                "expected 'register = ...'",
                hint="assignments take a register, a load, or a register expression",
            )

        dst = self._no_zero_register(words[0], "destination")
        rhs = words[2:]
        loc = self._location()

        if not rhs:
            raise self._missing(f"missing value in assignment to {dst}")

        # xd = *xn  /  xd = *(xn + imm)
        if rhs[0].startswith("*"):
            base, offset = self._parse_address(rhs)
            return Load(dst, self._no_zero_register(base, "base register"), offset, location=loc)

        # xd = xn op xm
        if len(rhs) == 3 and _looks_like_register(rhs[0]) and _looks_like_register(rhs[2]):
            op = BINARY_OPERATORS.get(rhs[1])
            if op is None:
                raise self._syntax_error(
                    f"unknown operator '{rhs[1]}'",
                    hint="operators are + - * / %",
                )
            src1 = self._no_zero_register(rhs[0], "first source")
            return BinaryOp(op, dst, src1, rhs[2], location=loc)

        # xd = xn
        if len(rhs) == 1 and _looks_like_register(rhs[0]):
            return Move(dst, self._no_zero_register(rhs[0], "source of a move"), location=loc)

        raise self._syntax_error(
            f"unrecognized assignment to {dst}",
            hint="there is no literal assignment; load constants with .8byte data",
        )

    def _parse_store(self, words: list[str]) -> IRInstruction:
        eq_index = words.index("=")
        target = words[:eq_index]
        value = words[eq_index + 1:]

        if not value:
            raise self._missing("missing value in store")
        if len(value) > 1:
            raise self._syntax_error(f"unexpected '{value[1]}' after stored register")

        base, offset = self._parse_address(target)
        base = self._no_zero_register(base, "base register")
        stored = self._no_zero_register(value[0], "stored register")
        return Store(base, stored, offset, location=self._location())

    def _parse_address(self, words: list[str]) -> tuple[str, str]:
        """
        Parse ``*xn`` or ``*(xn +/- imm)`` spread over one or more words.

        Returns:
            (base register name, offset numeral)
        """
        text = " ".join(words)[1:].strip()

        if not text:
            raise self._missing("missing address after '*'")

        if not text.startswith("("):
            if len(words) != 1:
                raise self._syntax_error(
                    "bad address syntax",
                    hint="use *xn or *(xn + imm)",
                )
            return text, "0"

        match = _ADDRESS_PATTERN.match(text)
        if match is None:
            raise self._syntax_error(
                "bad address syntax",
                hint="use *xn or *(xn + imm)",
            )

        offset = match.group("offset")
        if offset is None:
            return match.group("base"), "0"
        if match.group("sign") == "-":
            offset = _negate(offset)
        return match.group("base"), offset


def parse_pseudocode(source: str, filename: str = "<input>") -> list[IRInstruction]:
    """
    Convenience function to parse pseudocode.

    Args:
        source: Pseudocode text
        filename: Name used in error locations

    Returns:
        List of IR instructions
    """
    return PseudocodeParser(source, filename).parse()
