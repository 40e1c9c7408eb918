from bfvm.common.ops import Op, Instruction, Stream
from bfvm.compile.fpp import StructuralError


def resolve(code: Stream) -> Stream:
    ''' Links every jump to the index of its partner in a single scan '''
    resolved = list(code)
    stack: list[int] = []

    for index, instr in enumerate(code):
        if instr.op == Op.JUMP_IF_ZERO:
            stack.append(index)

        elif instr.op == Op.JUMP_IF_NON_ZERO:
            if not stack:
                raise StructuralError('Unmatched JUMP_IF_NON_ZERO', index)

            start = stack.pop()
            resolved[start] = Instruction(Op.JUMP_IF_ZERO, index)
            resolved[index] = Instruction(Op.JUMP_IF_NON_ZERO, start)

    if stack:
        raise StructuralError('Unmatched JUMP_IF_ZERO', stack[-1])

    return resolved
