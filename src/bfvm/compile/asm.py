import logging as lg
import time

from bfvm.common.hwconf import MAX_PASSES
from bfvm.common.ops import Stream
import bfvm.common.listing as listing
from bfvm.compile.fpp import FPP
import bfvm.compile.grammar as grammar
import bfvm.optimize.peephole as peephole
import bfvm.optimize.resolver as resolver


class CompileSettings:
    optimize: bool
    max_passes: int
    verbose: bool

    def __init__(self):
        self.optimize = True
        self.max_passes = MAX_PASSES
        self.verbose = False

    def update(
        self,
        optimize: bool | None = None,
        max_passes: int | None = None,
        verbose: bool | None = None
    ):
        if optimize is not None:
            self.optimize = optimize

        if max_passes is not None:
            self.max_passes = max_passes

        if verbose is not None:
            self.verbose = verbose

        return self


def decode_source(source: str | bytes) -> str:
    if isinstance(source, bytes):
        # One character per byte, so positions are byte offsets
        return source.decode('latin-1')

    return source


def compile_source(source: str | bytes) -> Stream:
    first_pass = FPP()
    actions = grammar.program.parse_string(decode_source(source))

    for (func, arg) in actions:  # type: ignore
        func(first_pass, arg)

    return first_pass.finish()


def build(source: str | bytes, settings: CompileSettings | None = None) -> Stream:
    if settings is None:
        settings = CompileSettings()

    started = time.perf_counter()
    code = compile_source(source)
    compiled = time.perf_counter()
    lg.info(f'Compiled {len(code)} instructions in {compiled - started:.4f}s')

    if settings.optimize:
        code = peephole.optimize(code, settings.max_passes)
        lg.info(
            f'Optimized to {len(code)} instructions '
            f'in {time.perf_counter() - compiled:.4f}s'
        )

    code = resolver.resolve(code)

    if settings.verbose:
        for line in listing.dump(code):
            lg.debug(line)

    return code
