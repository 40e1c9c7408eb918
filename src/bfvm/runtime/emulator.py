import sys
from pathlib import Path
import logging as lg
import time
from typing import BinaryIO

import click

from bfvm.common.hwconf import MAX_PASSES
from bfvm.common.ops import Stream
import bfvm.common.listing as listing
import bfvm.compile.asm as asm
from bfvm.compile.fpp import StructuralError
import bfvm.runtime.cpu as cpu


EXIT_OK = 0
EXIT_COMPILE_ERROR = 1
EXIT_TAPE_ERROR = 2
EXIT_KEYBOARD = 3
EXIT_STEP_LIMIT = 4


def execute(
    code: Stream,
    stdin: BinaryIO,
    stdout: BinaryIO,
    max_steps: int | None = None
) -> cpu.CPU:
    proc = cpu.CPU(code, stdin, stdout, max_steps)
    started = time.perf_counter()

    try:
        proc.run()
    finally:
        stdout.flush()

    lg.info(f'Executed {proc.steps} instructions in {time.perf_counter() - started:.4f}s')
    return proc


@click.command()
@click.option('-c', '--bytecode', is_flag=True, help='Print bytecode instead of executing')
@click.option('--no-optimize', is_flag=True, help='Skip the peephole optimizer')
@click.option(
    '--passes', type=click.IntRange(min=0), default=MAX_PASSES, show_default=True,
    help='Upper bound on optimizer passes'
)
@click.option('--max-steps', type=click.IntRange(min=1), help='Abort after N instructions')
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.argument('program_file', type=Path)
def run(
    bytecode: bool, no_optimize: bool, passes: int,
    max_steps: int | None, verbose: bool, program_file: Path
):
    ''' Execute a Brainfuck program. '''
    # stdout carries program output, logging stays on stderr
    lg.basicConfig(level=lg.DEBUG if verbose else lg.WARNING, force=True)
    lg.info('BFVM')

    try:
        # Not seekable when it is a pipe, so read it whole
        source = program_file.read_bytes()
    except OSError as e:
        lg.error(f'Cannot open file {program_file}: {e.strerror}')
        sys.exit(EXIT_COMPILE_ERROR)

    settings = asm.CompileSettings().update(
        optimize=not no_optimize,
        max_passes=passes,
        verbose=verbose
    )

    try:
        code = asm.build(source, settings)
    except StructuralError as e:
        lg.error(f'{e}')
        sys.exit(EXIT_COMPILE_ERROR)

    if bytecode:
        click.echo(listing.render(code))
        sys.exit(EXIT_OK)

    try:
        execute(
            code,
            click.get_binary_stream('stdin'),
            click.get_binary_stream('stdout'),
            max_steps
        )

    except cpu.TapeError as e:
        lg.error(f'Execution halted on tape error: {e}')
        sys.exit(EXIT_TAPE_ERROR)

    except cpu.StepLimitExceeded as e:
        lg.error(f'Execution halted: {e}')
        sys.exit(EXIT_STEP_LIMIT)

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        sys.exit(EXIT_KEYBOARD)

    sys.exit(EXIT_OK)


if __name__ == '__main__':
    run()
