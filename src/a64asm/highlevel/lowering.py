"""
IR Lowering
===========

Instruction selection for the pseudocode front end: each IR instruction
becomes one or more ARM64 statements, emitted as tokens with a NEWLINE
after every statement.

| IR          | Statements                                        |
|-------------|---------------------------------------------------|
| ADD/SUB/MUL | add/sub/mul dst, src1, src2                       |
| DIV         | sdiv dst, src1, src2                              |
| MOD         | sdiv dst, src1, src2                              |
|             | mul  dst, dst, src2                               |
|             | sub  dst, src1, dst                               |
| MOV         | add dst, src, xzr                                 |
| LOAD        | ldur dst, [base, offset]                          |
| STORE       | stur src, [base, offset]                          |
| CMP_BRANCH  | cmp src1, src2                                    |
|             | b.<cond> target                                   |
| BRANCH      | b target                                          |
| CALL        | blr target                                        |
| RET         | br x30                                            |
| LABEL       | name:                                             |
| DATA8       | .8byte value                                      |

The MOD sequence uses ``dst`` as its temporary and relies on running in
exactly this order: ``src1`` and ``src2`` are read again after ``dst`` is
first written, so ``dst`` must name a register distinct from both
sources. ``x0 = x0 % x1`` lowers to the same three statements but does
not compute a remainder.
"""

import logging
from typing import Iterable

from a64asm.assembler.encoder import parse_register
from a64asm.assembler.lexer import NEWLINE, Token, TokenType, classify_word, write_tokenized
from a64asm.cpu import DATA_DIRECTIVE, LINK_REGISTER
from a64asm.errors import InvalidConditionCodeError
from a64asm.highlevel.errors import LoweringError, MissingOperandError
from a64asm.highlevel.ir import (
    BinaryOp,
    Branch,
    Call,
    CompareBranch,
    Data8,
    IROp,
    IRInstruction,
    Label,
    Load,
    Move,
    Return,
    Store,
)

logger = logging.getLogger(__name__)


# Comparison operator to b.cond suffix
COMPARISON_SUFFIXES: dict[str, str] = {
    "==": ".eq",
    "!=": ".ne",
    "<": ".lt",
    "<=": ".le",
    ">": ".gt",
    ">=": ".ge",
}

# Arithmetic IR operations with a single instruction
DIRECT_MNEMONICS: dict[IROp, str] = {
    IROp.ADD: "add",
    IROp.SUB: "sub",
    IROp.MUL: "mul",
    IROp.DIV: "sdiv",
}

COMMA = Token(TokenType.COMMA, ",")
LBRACK = Token(TokenType.LBRACK, "[")
RBRACK = Token(TokenType.RBRACK, "]")


# =============================================================================
# Token Helpers
# =============================================================================

def _require(inst: IRInstruction, value: str, what: str) -> str:
    if not value:
        raise MissingOperandError(
            f"{inst.op.name} is missing its {what}",
            location=inst.location,
        )
    return value


def register_token(name: str) -> Token:
    """
    Token for a register operand.

    ``xzr`` becomes ZREG and ``sp`` an ID, as the raw lexer would
    produce them.

    Raises:
        InvalidRegisterError: If the name is not x0..x30, xzr or sp
    """
    parse_register(name)
    if name == "xzr":
        return Token(TokenType.ZREG, name)
    if name == "sp":
        return Token(TokenType.ID, name)
    return Token(TokenType.REG, name)


def value_token(text: str) -> Token:
    """
    Token for a numeral-or-label operand.

    ``0x``-prefixed text is HEXINT, optionally signed as produced for
    ``*(xn - 0x8)``. Signed digits are INT, anything else is a label
    reference (ID).
    """
    unsigned = text[1:] if text[:1] in ("-", "+") else text
    if classify_word(unsigned) == TokenType.HEXINT:
        return Token(TokenType.HEXINT, text)
    token_type = classify_word(text)
    if token_type in (TokenType.HEXINT, TokenType.INT):
        return Token(token_type, text)
    return Token(TokenType.ID, text)


def _offset_token(inst: IRInstruction, text: str) -> Token:
    token = value_token(text)
    if token.type == TokenType.ID:
        raise LoweringError(
            f"offset '{text}' of {inst.op.name} is not a number",
            location=inst.location,
        )
    return token


def _three_registers(mnemonic: str, a: str, b: str, c: str) -> list[Token]:
    return [
        Token(TokenType.ID, mnemonic),
        register_token(a), COMMA,
        register_token(b), COMMA,
        register_token(c),
        NEWLINE,
    ]


def _memory(mnemonic: str, reg: str, base: str, offset: Token) -> list[Token]:
    return [
        Token(TokenType.ID, mnemonic),
        register_token(reg), COMMA,
        LBRACK, register_token(base), COMMA, offset, RBRACK,
        NEWLINE,
    ]


# =============================================================================
# Lowering
# =============================================================================

def lower_instruction(inst: IRInstruction) -> list[Token]:
    """
    Lower one IR instruction.

    Returns:
        Tokens of one or more statements, each ending in NEWLINE

    Raises:
        MissingOperandError: If a required field is empty
        InvalidRegisterError: If a register field is not a register
        InvalidConditionCodeError: If a comparison operator is unknown
        LoweringError: If a load/store offset is not a numeral
    """
    if isinstance(inst, BinaryOp):
        dst = _require(inst, inst.dst, "destination")
        src1 = _require(inst, inst.src1, "first source")
        src2 = _require(inst, inst.src2, "second source")

        if inst.op == IROp.MOD:
            return (
                _three_registers("sdiv", dst, src1, src2)
                + _three_registers("mul", dst, dst, src2)
                + _three_registers("sub", dst, src1, dst)
            )
        return _three_registers(DIRECT_MNEMONICS[inst.op], dst, src1, src2)

    if isinstance(inst, Move):
        dst = _require(inst, inst.dst, "destination")
        src = _require(inst, inst.src, "source")
        return _three_registers("add", dst, src, "xzr")

    if isinstance(inst, Load):
        dst = _require(inst, inst.dst, "destination")
        base = _require(inst, inst.base, "base register")
        offset = _offset_token(inst, _require(inst, inst.offset, "offset"))
        return _memory("ldur", dst, base, offset)

    if isinstance(inst, Store):
        src = _require(inst, inst.src, "source")
        base = _require(inst, inst.base, "base register")
        offset = _offset_token(inst, _require(inst, inst.offset, "offset"))
        return _memory("stur", src, base, offset)

    if isinstance(inst, CompareBranch):
        src1 = _require(inst, inst.src1, "first operand")
        src2 = _require(inst, inst.src2, "second operand")
        condition = _require(inst, inst.condition, "comparison")
        target = _require(inst, inst.target, "target")

        suffix = COMPARISON_SUFFIXES.get(condition)
        if suffix is None:
            raise InvalidConditionCodeError(
                f"unknown comparison '{condition}'",
                hint="comparisons are " + " ".join(COMPARISON_SUFFIXES),
            )

        return [
            Token(TokenType.ID, "cmp"), register_token(src1), COMMA, register_token(src2),
            NEWLINE,
            Token(TokenType.ID, "b"), Token(TokenType.DOTID, suffix), value_token(target),
            NEWLINE,
        ]

    if isinstance(inst, Branch):
        target = _require(inst, inst.target, "target")
        return [Token(TokenType.ID, "b"), value_token(target), NEWLINE]

    if isinstance(inst, Call):
        target = _require(inst, inst.target, "register")
        return [Token(TokenType.ID, "blr"), register_token(target), NEWLINE]

    if isinstance(inst, Return):
        return [Token(TokenType.ID, "br"), Token(TokenType.REG, f"x{LINK_REGISTER}"), NEWLINE]

    if isinstance(inst, Label):
        name = _require(inst, inst.name, "name")
        return [Token(TokenType.LABEL, f"{name}:"), NEWLINE]

    if isinstance(inst, Data8):
        value = _require(inst, inst.value, "value")
        return [Token(TokenType.DOTID, DATA_DIRECTIVE), value_token(value), NEWLINE]

    raise TypeError(f"not an IR instruction: {inst!r}")


def lower(instructions: Iterable[IRInstruction]) -> list[Token]:
    """
    Lower a sequence of IR instructions to a token stream.

    Statement order follows IR order; multi-statement lowerings are
    emitted contiguously in place of their IR instruction.
    """
    tokens: list[Token] = []
    count = 0
    for inst in instructions:
        tokens.extend(lower_instruction(inst))
        count += 1

    logger.debug(f"Lowered {count} IR instructions to {len(tokens)} tokens")
    return tokens


def lower_to_tokenized(instructions: Iterable[IRInstruction]) -> str:
    """Lower IR and serialize the result in the pre-tokenized format."""
    return write_tokenized(lower(instructions))
