import logging as lg
from typing import BinaryIO

from bfvm.common.ops import Op, Instruction, Stream
from bfvm.common.hwconf import TAPE_SIZE, CELL_MODULUS, INPUT_EOF_FILL


class TapeError(Exception):
    pass


class StepLimitExceeded(Exception):
    pass


class CPU():
    pc: int     # Program counter
    ptr: int    # Data pointer
    steps: int  # Instructions executed so far
    tape: bytearray

    def __init__(
        self,
        code: Stream,
        stdin: BinaryIO,
        stdout: BinaryIO,
        max_steps: int | None = None
    ):
        self.code = code        # Resolved stream, read-only
        self.stdin = stdin
        self.stdout = stdout
        self.max_steps = max_steps

        self.pc = 0
        self.ptr = 0
        self.steps = 0
        self.tape = bytearray(TAPE_SIZE)

    # - Helpers - #

    def debug_dump(self):
        lg.debug(f'PC:{self.pc} PTR:{self.ptr} STEPS:{self.steps}')

    def checked(self, addr: int) -> int:
        if addr < 0 or addr >= TAPE_SIZE:
            raise TapeError(f'Cell {addr} is outside the tape (pc {self.pc})')

        return addr

    # - Operations - #

    def move_pointer(self, instr: Instruction):
        self.ptr = self.checked(self.ptr + instr.arg)

    def add_value(self, instr: Instruction):
        self.tape[self.ptr] = (self.tape[self.ptr] + instr.arg) % CELL_MODULUS

    def output(self, instr: Instruction):
        for _ in range(instr.arg):
            self.stdout.write(bytes([self.tape[self.ptr]]))

    def input(self, instr: Instruction):
        # Pending output may be a prompt
        self.stdout.flush()
        data = self.stdin.read(instr.arg)

        # Each read overwrites the cell, so only the last one is observable
        if len(data) == instr.arg:
            self.tape[self.ptr] = data[-1]
        else:
            self.tape[self.ptr] = INPUT_EOF_FILL

    def jump_if_zero(self, instr: Instruction):
        if self.tape[self.ptr] == 0:
            self.pc = instr.arg

    def jump_if_non_zero(self, instr: Instruction):
        if self.tape[self.ptr] != 0:
            self.pc = instr.arg

    def set_zero(self, instr: Instruction):
        self.tape[self.ptr] = 0

    def clear_range(self, instr: Instruction):
        end = self.checked(self.ptr + instr.arg)
        self.tape[self.ptr:end] = bytes(instr.arg)
        self.ptr = end

    def add_to_offset(self, instr: Instruction):
        value = self.tape[self.ptr]

        # The loop this replaces never ran
        if value == 0:
            return

        addr = self.checked(self.ptr + instr.offset)
        self.tape[addr] = (self.tape[addr] + value * instr.arg) % CELL_MODULUS

    HANDLERS = {
        Op.MOVE_POINTER: move_pointer,
        Op.ADD_VALUE: add_value,
        Op.OUTPUT: output,
        Op.INPUT: input,
        Op.JUMP_IF_ZERO: jump_if_zero,
        Op.JUMP_IF_NON_ZERO: jump_if_non_zero,
        Op.SET_ZERO: set_zero,
        Op.CLEAR_RANGE: clear_range,
        Op.ADD_TO_OFFSET: add_to_offset
    }

    # -- Implementation -- #

    def exec_next(self):
        instr = self.code[self.pc]
        handler = self.HANDLERS[instr.op]
        handler(self, instr)
        self.pc += 1

    def run(self):
        end = len(self.code)

        while self.pc < end:
            if self.max_steps is not None and self.steps >= self.max_steps:
                self.debug_dump()
                raise StepLimitExceeded(f'Step budget of {self.max_steps} exhausted')

            self.steps += 1
            self.exec_next()

        self.stdout.flush()
