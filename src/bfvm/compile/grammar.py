# type: ignore
''' Lexical grammar: command runs, brackets and inert text '''

import pyparsing as pp

import bfvm.common.ops as ops
from bfvm.compile.fpp import FPP

COMMANDS = '><+-.,[]'


def g_run(char, op, sign=1):
    # Word() over a single character matches the whole run
    return pp.Word(char).set_parse_action(
        lambda s, loc, r: (FPP.issue_run, (op, sign * len(r[0]), loc))
    )


def g_mark(literal, func):
    return pp.Literal(literal).set_parse_action(lambda s, loc, r: (func, loc))


right = g_run('>', ops.Op.MOVE_POINTER)
left = g_run('<', ops.Op.MOVE_POINTER, -1)
inc = g_run('+', ops.Op.ADD_VALUE)
dec = g_run('-', ops.Op.ADD_VALUE, -1)
out = g_run('.', ops.Op.OUTPUT)
inp = g_run(',', ops.Op.INPUT)

set_zero = g_mark('[-]', FPP.issue_set_zero)
loop_open = g_mark('[', FPP.on_loop_open)
loop_close = g_mark(']', FPP.on_loop_close)

inert = pp.Suppress(pp.CharsNotIn(COMMANDS))

cmd = set_zero | loop_open | loop_close | right | left | inc | dec | out | inp

program = pp.ZeroOrMore(cmd | inert) + pp.StringEnd()

# Source positions are reported against the untouched text
program.parse_with_tabs()
