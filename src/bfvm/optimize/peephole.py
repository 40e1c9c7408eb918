''' Peephole passes over the instruction stream '''

import logging as lg
from typing import Callable, TypeAlias

from bfvm.common.hwconf import CELL_MODULUS, MAX_PASSES
from bfvm.common.ops import Op, Instruction, Stream


# A rule either rewrites at code[i], appending to out and returning the next
# index to scan, or returns None without touching out
Rule: TypeAlias = Callable[[Stream, int, Stream], int | None]

FUSIBLE = (Op.MOVE_POINTER, Op.ADD_VALUE, Op.OUTPUT, Op.INPUT)


def normalize_value(value: int) -> int:
    ''' Cell delta folded into (-128, 128] '''
    value %= CELL_MODULUS

    if value > CELL_MODULUS // 2:
        value -= CELL_MODULUS

    return value


# - Rules - #

def fuse_run(code: Stream, i: int, out: Stream) -> int | None:
    op = code[i].op

    if op not in FUSIBLE:
        return None

    total = 0
    j = i

    while j < len(code) and code[j].op == op:
        total += code[j].arg
        j += 1

    if op == Op.ADD_VALUE:
        total = normalize_value(total)

    # Zero net effect: the run disappears
    if total != 0:
        out.append(Instruction(op, total))

    return j


def match_zero_loop(code: Stream, i: int, out: Stream) -> int | None:
    if i + 2 >= len(code):
        return None

    (start, body, end) = code[i:i + 3]

    if start.op != Op.JUMP_IF_ZERO or end.op != Op.JUMP_IF_NON_ZERO:
        return None

    if body.op != Op.ADD_VALUE or normalize_value(body.arg) not in (-1, 1):
        return None

    out.append(Instruction(Op.SET_ZERO))
    return i + 3


def clear_unit(code: Stream, i: int) -> tuple[int, int] | None:
    ''' (cells cleared, instructions consumed) for a clear unit at code[i] '''
    instr = code[i]

    if instr.op == Op.CLEAR_RANGE:
        return (instr.arg, 1)

    if instr.op == Op.SET_ZERO and i + 1 < len(code):
        if code[i + 1] == Instruction(Op.MOVE_POINTER, 1):
            return (1, 2)

    return None


def match_clear_range(code: Stream, i: int, out: Stream) -> int | None:
    cells = 0
    units = 0
    j = i

    while j < len(code):
        unit = clear_unit(code, j)

        if unit is None:
            break

        cells += unit[0]
        j += unit[1]
        units += 1

    if units < 2:
        return None

    out.append(Instruction(Op.CLEAR_RANGE, cells))
    return j


def match_multiply_loop(code: Stream, i: int, out: Stream) -> int | None:
    if code[i].op != Op.JUMP_IF_ZERO:
        return None

    deltas: dict[int, int] = {}  # offset -> net change per iteration
    pointer = 0
    j = i + 1

    while j < len(code) and code[j].op in (Op.MOVE_POINTER, Op.ADD_VALUE):
        if code[j].op == Op.MOVE_POINTER:
            pointer += code[j].arg
        else:
            deltas[pointer] = deltas.get(pointer, 0) + code[j].arg

        j += 1

    if j >= len(code) or code[j].op != Op.JUMP_IF_NON_ZERO or pointer != 0:
        return None

    step = normalize_value(deltas.pop(0, 0))

    # Counting down runs value times, counting up runs (256 - value) times
    if step not in (-1, 1):
        return None

    for offset, delta in deltas.items():
        multiplier = normalize_value(-step * delta)

        if multiplier != 0:
            out.append(Instruction(Op.ADD_TO_OFFSET, multiplier, offset))

    out.append(Instruction(Op.SET_ZERO))
    return j + 1


RULES: list[Rule] = [
    fuse_run,
    match_zero_loop,
    match_clear_range,
    match_multiply_loop
]


# - Passes - #

def run_pass(code: Stream) -> Stream:
    out: Stream = []
    i = 0

    while i < len(code):
        for rule in RULES:
            next_i = rule(code, i, out)

            if next_i is not None:
                i = next_i
                break
        else:
            out.append(code[i])
            i += 1

    return out


def optimize(code: Stream, max_passes: int = MAX_PASSES) -> Stream:
    '''
    Runs peephole passes until the stream stops changing or max_passes
    is reached. Jump targets in the result are stale and must be resolved.
    '''
    for n in range(max_passes):
        new_code = run_pass(code)
        lg.debug(f'Pass {n + 1}: {len(code)} -> {len(new_code)} instructions')

        if new_code == code:
            break

        code = new_code

    return code
