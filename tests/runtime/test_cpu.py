import io

import pytest

import bfvm.runtime.cpu as cpu
from bfvm.common.ops import Op, Instruction
from bfvm.common.hwconf import TAPE_SIZE

from unit_utils import run_code


def make_cpu(code, stdin: bytes = b'', max_steps=None):
    return cpu.CPU(code, io.BytesIO(stdin), io.BytesIO(), max_steps)


def test_add_value_wraps():
    proc = make_cpu([Instruction(Op.ADD_VALUE, -1)])
    proc.run()
    assert proc.tape[0] == 255

    proc = make_cpu([Instruction(Op.ADD_VALUE, 255), Instruction(Op.ADD_VALUE, 1)])
    proc.run()
    assert proc.tape[0] == 0


def test_output_repeats():
    code = [Instruction(Op.ADD_VALUE, 65), Instruction(Op.OUTPUT, 3)]
    assert run_code(code) == b'AAA'


def test_input_keeps_last_byte():
    proc = make_cpu([Instruction(Op.INPUT, 2)], b'xyz')
    proc.run()

    assert proc.tape[0] == ord('y')
    assert proc.stdin.read() == b'z'


def test_input_exhaustion_fills_zero():
    proc = make_cpu([Instruction(Op.ADD_VALUE, 7), Instruction(Op.INPUT, 3)], b'ab')
    proc.run()
    assert proc.tape[0] == 0

    proc = make_cpu([Instruction(Op.ADD_VALUE, 7), Instruction(Op.INPUT, 1)])
    proc.run()
    assert proc.tape[0] == 0


def test_jumps():
    # Skipped loop: cell is zero on entry
    code = [
        Instruction(Op.JUMP_IF_ZERO, 2),
        Instruction(Op.OUTPUT, 1),
        Instruction(Op.JUMP_IF_NON_ZERO, 0),
        Instruction(Op.ADD_VALUE, 66),
        Instruction(Op.OUTPUT, 1)
    ]
    assert run_code(code) == b'B'


def test_loop_counts_down():
    code = [
        Instruction(Op.ADD_VALUE, 3),
        Instruction(Op.JUMP_IF_ZERO, 6),
        Instruction(Op.MOVE_POINTER, 1),
        Instruction(Op.ADD_VALUE, 2),
        Instruction(Op.MOVE_POINTER, -1),
        Instruction(Op.ADD_VALUE, -1),
        Instruction(Op.JUMP_IF_NON_ZERO, 1)
    ]

    proc = make_cpu(code)
    proc.run()

    assert proc.tape[:2] == bytearray([0, 6])
    assert proc.ptr == 0


def test_clear_range():
    proc = make_cpu([
        Instruction(Op.ADD_VALUE, 1),
        Instruction(Op.MOVE_POINTER, 2),
        Instruction(Op.ADD_VALUE, 1),
        Instruction(Op.MOVE_POINTER, -2),
        Instruction(Op.CLEAR_RANGE, 2),
    ])
    proc.run()

    assert proc.ptr == 2
    assert proc.tape[:3] == bytearray([0, 0, 1])


def test_add_to_offset():
    proc = make_cpu([
        Instruction(Op.MOVE_POINTER, 1),
        Instruction(Op.ADD_VALUE, 100),
        Instruction(Op.ADD_TO_OFFSET, 3, 1),
        Instruction(Op.ADD_TO_OFFSET, -1, -1),
        Instruction(Op.SET_ZERO)
    ])
    proc.run()

    assert proc.tape[:3] == bytearray([156, 0, 44])


def test_add_to_offset_skipped_on_zero():
    # Target is off the tape, but the loop would never have run
    proc = make_cpu([Instruction(Op.ADD_TO_OFFSET, 1, -1), Instruction(Op.SET_ZERO)])
    proc.run()
    assert proc.steps == 2

    proc = make_cpu([
        Instruction(Op.ADD_VALUE, 1),
        Instruction(Op.ADD_TO_OFFSET, 1, -1)
    ])

    with pytest.raises(cpu.TapeError):
        proc.run()


def test_pointer_bounds():
    with pytest.raises(cpu.TapeError):
        make_cpu([Instruction(Op.MOVE_POINTER, -1)]).run()

    with pytest.raises(cpu.TapeError):
        make_cpu([Instruction(Op.MOVE_POINTER, TAPE_SIZE)]).run()

    with pytest.raises(cpu.TapeError):
        make_cpu([
            Instruction(Op.MOVE_POINTER, TAPE_SIZE - 2),
            Instruction(Op.CLEAR_RANGE, 2)
        ]).run()

    proc = make_cpu([Instruction(Op.MOVE_POINTER, TAPE_SIZE - 1)])
    proc.run()
    assert proc.ptr == TAPE_SIZE - 1


def test_step_limit():
    # +[] never terminates
    code = [
        Instruction(Op.ADD_VALUE, 1),
        Instruction(Op.JUMP_IF_ZERO, 2),
        Instruction(Op.JUMP_IF_NON_ZERO, 1)
    ]

    with pytest.raises(cpu.StepLimitExceeded):
        make_cpu(code, max_steps=1000).run()
