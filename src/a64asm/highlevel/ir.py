"""
Intermediate Representation
===========================

Target-independent statements produced by the pseudocode parser and
consumed by the lowering pass. Each IR operation has its own frozen
dataclass; every instance exposes its operation as ``.op``.

Registers are stored by name (``x0``..``x30``, ``xzr``, ``sp``). Offsets,
branch targets and data values are stored as the strings the user wrote,
so that numerals and label names are told apart once, at lowering time,
by the same rule the raw lexer uses.

| IROp       | Class          | Meaning                       |
|------------|----------------|-------------------------------|
| ADD..MOD   | BinaryOp       | dst = src1 <op> src2          |
| MOV        | Move           | dst = src                     |
| LOAD       | Load           | dst = *(base + offset)        |
| STORE      | Store          | *(base + offset) = src        |
| CMP_BRANCH | CompareBranch  | if src1 <cond> src2 goto tgt  |
| BRANCH     | Branch         | goto target                   |
| CALL       | Call           | call target register          |
| RET        | Return         | return through x30            |
| LABEL      | Label          | label definition              |
| DATA8      | Data8          | 8-byte data value             |
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, Optional

from a64asm.errors import SourceLocation


class IROp(Enum):
    """IR operation codes."""
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()
    MOV = auto()
    LOAD = auto()
    STORE = auto()
    CMP_BRANCH = auto()
    BRANCH = auto()
    CALL = auto()
    RET = auto()
    LABEL = auto()
    DATA8 = auto()


# Arithmetic operators of the pseudocode and their IR operations
BINARY_OPERATORS: dict[str, IROp] = {
    "+": IROp.ADD,
    "-": IROp.SUB,
    "*": IROp.MUL,
    "/": IROp.DIV,
    "%": IROp.MOD,
}

BINARY_OPS = frozenset(BINARY_OPERATORS.values())


# =============================================================================
# IR Instructions
# =============================================================================

@dataclass(frozen=True)
class IRInstruction:
    """
    Base class for IR instructions.

    ``location`` records where the statement came from and is ignored
    when comparing instructions.
    """
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False, kw_only=True)

    op: IROp = field(init=False)


@dataclass(frozen=True)
class BinaryOp(IRInstruction):
    op: IROp
    dst: str
    src1: str
    src2: str

    def __post_init__(self) -> None:
        if self.op not in BINARY_OPS:
            raise ValueError(f"{self.op.name} is not an arithmetic operation")


@dataclass(frozen=True)
class Move(IRInstruction):
    dst: str
    src: str
    op: IROp = field(default=IROp.MOV, init=False)


@dataclass(frozen=True)
class Load(IRInstruction):
    dst: str
    base: str
    offset: str = "0"
    op: IROp = field(default=IROp.LOAD, init=False)


@dataclass(frozen=True)
class Store(IRInstruction):
    base: str
    src: str
    offset: str = "0"
    op: IROp = field(default=IROp.STORE, init=False)


@dataclass(frozen=True)
class CompareBranch(IRInstruction):
    src1: str
    condition: str
    src2: str
    target: str
    op: IROp = field(default=IROp.CMP_BRANCH, init=False)


@dataclass(frozen=True)
class Branch(IRInstruction):
    target: str
    op: IROp = field(default=IROp.BRANCH, init=False)


@dataclass(frozen=True)
class Call(IRInstruction):
    target: str
    op: IROp = field(default=IROp.CALL, init=False)


@dataclass(frozen=True)
class Return(IRInstruction):
    op: IROp = field(default=IROp.RET, init=False)


@dataclass(frozen=True)
class Label(IRInstruction):
    name: str
    op: IROp = field(default=IROp.LABEL, init=False)


@dataclass(frozen=True)
class Data8(IRInstruction):
    value: str
    op: IROp = field(default=IROp.DATA8, init=False)


# =============================================================================
# IR Dump
# =============================================================================

def format_instruction(inst: IRInstruction) -> str:
    """Render one IR instruction in the dump format."""
    if isinstance(inst, Label):
        return f"{inst.name}:"
    if isinstance(inst, BinaryOp):
        return f"  {inst.op.name} {inst.dst}, {inst.src1}, {inst.src2}"
    if isinstance(inst, Move):
        return f"  MOV {inst.dst}, {inst.src}"
    if isinstance(inst, Load):
        return f"  LOAD {inst.dst}, [{inst.base} + {inst.offset}]"
    if isinstance(inst, Store):
        return f"  STORE [{inst.base} + {inst.offset}], {inst.src}"
    if isinstance(inst, CompareBranch):
        return f"  CMP_BRANCH {inst.src1} {inst.condition} {inst.src2}, {inst.target}"
    if isinstance(inst, Branch):
        return f"  BRANCH {inst.target}"
    if isinstance(inst, Call):
        return f"  CALL {inst.target}"
    if isinstance(inst, Return):
        return "  RET"
    if isinstance(inst, Data8):
        return f"  DATA8 {inst.value}"
    raise TypeError(f"not an IR instruction: {inst!r}")


def format_ir(instructions: Iterable[IRInstruction]) -> str:
    """
    Render a human-readable IR dump, one instruction per line.

    Example:
        loop:
          SUB x0, x0, x1
          CMP_BRANCH x0 != xzr, loop
          RET
    """
    return "".join(format_instruction(inst) + "\n" for inst in instructions)
