'''
comp: postfix (RPN) calculator.

Takes a flat sequence of whitespace-separated tokens and runs them, in
order, against an operand stack. Each token is a command, the name of a
function defined earlier with ``fn NAME ... end``, or a number. Comments go
between ``(`` and ``)``, and nest.

    3 4 +                   -> 7
    fn sq dup x end 5 sq    -> 25
    ( 1 2 + ) 3 4 +         -> 7

Three memory registers, a, b and c, sit beside the stack: ``sa`` stores,
``a`` recalls.
'''

from .cli import CLI
from .lexer import Lexer
from .machine import Machine
from .util import CompError, CompWarning, ParseFailure, StackUnderflow


__all__ = ('Machine', 'Lexer', 'CLI',
           'CompError', 'CompWarning', 'ParseFailure', 'StackUnderflow')
