from bfvm.common.ops import Stream


def render(code: Stream) -> str:
    ''' Whitespace-separated opcode names, each followed by its operands '''
    return ' '.join(str(instr) for instr in code)


def dump(code: Stream) -> list[str]:
    width = len(str(len(code)))
    return [f'{index:>{width}}: {instr}' for index, instr in enumerate(code)]
