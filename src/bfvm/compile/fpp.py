''' First-pass processor: turns grammar actions into a linked raw stream '''

import logging as lg
from typing import Tuple, TypeAlias

from bfvm.common.ops import Op, Instruction, Stream


RunToken: TypeAlias = Tuple[Op, int, int]  # (op, signed run length, source position)


class StructuralError(Exception):
    position: int

    def __init__(self, message: str, position: int):
        super().__init__(f'{message} at position {position}')
        self.position = position


class FPP:
    cmd_list: Stream
    loop_stack: list[Tuple[int, int]]  # (stream index, source position)

    def __init__(self):
        self.cmd_list = []
        self.loop_stack = []

    def issue(self, instr: Instruction):
        self.cmd_list.append(instr)

    def issue_run(self, token: RunToken):
        (op, arg, _) = token
        self.issue(Instruction(op, arg))

    def issue_set_zero(self, position: int):
        lg.debug(f'Zero loop captured at {position}')
        self.issue(Instruction(Op.SET_ZERO))

    def on_loop_open(self, position: int):
        self.loop_stack.append((len(self.cmd_list), position))
        # Target is patched when the loop closes
        self.issue(Instruction(Op.JUMP_IF_ZERO))

    def on_loop_close(self, position: int):
        if not self.loop_stack:
            raise StructuralError("Unmatched ']'", position)

        (start, _) = self.loop_stack.pop()
        end = len(self.cmd_list)
        self.cmd_list[start] = Instruction(Op.JUMP_IF_ZERO, end)
        self.issue(Instruction(Op.JUMP_IF_NON_ZERO, start))

    def finish(self) -> Stream:
        if self.loop_stack:
            (_, position) = self.loop_stack[-1]
            raise StructuralError("Unmatched '['", position)

        return self.cmd_list
