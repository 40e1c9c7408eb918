from dataclasses import dataclass
from enum import IntEnum
from typing import TypeAlias


class Op(IntEnum):
    # Basic
    MOVE_POINTER = 0x01      # P + A -> P
    ADD_VALUE = 0x02         # M[P] + A -> M[P]
    OUTPUT = 0x03            # M[P] -> out, A times
    INPUT = 0x04             # in -> M[P], A times
    JUMP_IF_ZERO = 0x05      # if M[P] .eq 0 -> IP = A
    JUMP_IF_NON_ZERO = 0x06  # if M[P] .ne 0 -> IP = A

    # Idioms
    SET_ZERO = 0x10          # 0 -> M[P]
    CLEAR_RANGE = 0x11       # 0 -> M[P..P+A); P + A -> P
    ADD_TO_OFFSET = 0x12     # M[P + O] + M[P] * A -> M[P + O]


JUMPS = (Op.JUMP_IF_ZERO, Op.JUMP_IF_NON_ZERO)

# Opcodes listed with an operand; ADD_TO_OFFSET is listed with two
WITH_ARG = frozenset([
    Op.MOVE_POINTER,
    Op.ADD_VALUE,
    Op.OUTPUT,
    Op.INPUT,
    Op.JUMP_IF_ZERO,
    Op.JUMP_IF_NON_ZERO,
    Op.CLEAR_RANGE
])


@dataclass(frozen=True)
class Instruction:
    op: Op
    arg: int = 0     # Delta, count, jump target or multiplier
    offset: int = 0  # ADD_TO_OFFSET only

    def __str__(self) -> str:
        if self.op == Op.ADD_TO_OFFSET:
            return f'{self.op.name} {self.offset} {self.arg}'

        if self.op in WITH_ARG:
            return f'{self.op.name} {self.arg}'

        return self.op.name


Stream: TypeAlias = list[Instruction]
