import sys
from decimal import Decimal
from inspect import signature as getsignature, Parameter
from functools import reduce
from collections import deque, namedtuple

import warnings
import operator
import math

from .util import CompError, CompWarning, StackUnderflow, wrap_user_errors
from .lexer import Lexer
from . import numeric


Function = namedtuple('Function', ['name', 'body'])


def requires(depth):
    '''
    Mark a stack command with how many elements it needs on the stack.
    '''
    def decorator(f):
        f.depth = depth
        return f
    return decorator


class Machine:
    '''
    Arithmetic stack machine (RPN calculator).

    Runs tokens from a pending queue against an operand stack, three memory
    registers, and a table of user-defined functions. Commands may push
    tokens back onto the front of the queue; that's how functions inline.
    '''

    DEFAULT_PRECISION = None
    REGISTERS = 'abc'
    DEFAULT_REGISTER = 0.0

    def _nullary(f):
        '''
        Dirty hack to work around 0-arg builtins failing inspect.getsignature.
        '''
        def wrapped():
            if callable(f):
                return f()
            else:
                return f
        try:
            wrapped.__doc__ = f.__doc__
            wrapped.__name__ = f.__name__
        except AttributeError:
            pass
        return wrapped

    # FIXME: *really* dirty hack around getsignature not working on some
    # builtins.
    def _unary(f):
        '''
        Dirty hack to work around 1-arg builtins failing inspect.getsignature.
        '''
        def wrapped(only):
            return f(only)
        try:
            wrapped.__doc__ = f.__doc__
            wrapped.__name__ = f.__name__
        except AttributeError:
            pass
        return wrapped

    def _binary(f):
        '''
        Dirty hack to work around 2-arg builtins failing inspect.getsignature.
        '''
        def wrapped(left, right):
            return f(left, right)
        try:
            wrapped.__doc__ = f.__doc__
            wrapped.__name__ = f.__name__
        except AttributeError:
            pass
        return wrapped

    # Pure functions of the stack: arity is how many elements they pop,
    # earliest pushed first in the argument list.
    MATH = {
        # Arithmetic
        '+': _binary(operator.__add__),
        '-': _binary(operator.__sub__),
        'x': _binary(operator.__mul__),
        '/': _binary(operator.__truediv__),
        '^': numeric.power,
        'exp': numeric.power,
        '%': _binary(math.fmod),
        'mod': _binary(math.fmod),
        'chs': numeric.chs,
        'abs': _unary(math.fabs),
        'round': numeric.round_half_away,
        'int': numeric.round_half_away,
        'inv': numeric.inv,
        'sqrt': _unary(math.sqrt),
        'throot': numeric.throot,
        'proot': numeric.proot,
        '!': numeric.factorial,
        'gcd': numeric.gcd,

        # Constants
        'pi': _nullary(math.pi),
        'e': _nullary(math.e),

        # Trigonometry
        'd_r': _unary(math.radians),
        'dtor': _unary(math.radians),
        'r_d': _unary(math.degrees),
        'rtod': _unary(math.degrees),
        'sin': _unary(math.sin),
        'asin': _unary(math.asin),
        'cos': _unary(math.cos),
        'acos': _unary(math.acos),
        'tan': _unary(math.tan),
        'atan': _unary(math.atan),

        # Logarithms
        'log2': _unary(math.log2),
        'log': _unary(math.log10),
        'log10': _unary(math.log10),
        'logn': numeric.logn,
        'ln': _unary(math.log),
    }

    def __init__(self, verbose=None, precision=DEFAULT_PRECISION):
        '''
        Create empty stack machine.

        :param verbose: Trace every token and the stack after it on stderr.
        :param precision: Decimal places to round to on output, if any.
        '''
        self.stack = deque()
        self.queue = deque()
        self.registers = dict.fromkeys(type(self).REGISTERS,
                                       type(self).DEFAULT_REGISTER)
        self.functions = []
        self.lexer = Lexer()
        self.verbose = verbose
        self.precision = precision

    def feed(self, tokens):
        '''
        Queue tokens and run them all, returning the resulting stack.

        On error, whatever's left of the queue is dropped; the stack is left
        as the failing command found it.
        '''
        self.queue.extend(tokens)
        try:
            self.run()
        except CompError:
            self.queue.clear()
            raise
        return self.stack

    def run(self):
        '''
        Run until the pending queue is empty.
        '''
        while self.queue:
            self.step()

    def step(self):
        '''
        Take one token off the front of the queue and run it.

        Commands first, then user functions, then numeric literals.
        '''
        token = self.queue.popleft()
        f = type(self).COMMANDS.get(token)
        if f is not None:
            self._apply(token, f)
        else:
            function = self._function(token)
            if function is not None:
                self.expand(function)
            else:
                self._pshstack(self.lexer.number(token))
        if self.verbose:
            print(token, *map(self.format, self.stack), sep='\t',
                  file=sys.stderr)

    def classify(self, token):
        '''
        Return what a token would be run as, were it run now.
        '''
        if token in type(self).COMMANDS:
            return 'command'
        elif self._function(token) is not None:
            return 'function'
        elif self.lexer.isnumber(token):
            return 'number'
        else:
            return 'invalid'

    def depth(self, token):
        '''
        Return number of elements command needs on the stack, if a command.
        '''
        f = type(self).COMMANDS.get(token)
        if f is None:
            return None
        return self._depth(f)

    def _arity(self, f):
        '''
        Return number of non-default position arguments.
        '''
        signature = getsignature(f)
        parameters = signature.parameters.values()
        positionals = [parameter
                       for parameter
                       in parameters
                       if parameter.kind == Parameter.POSITIONAL_OR_KEYWORD and
                          parameter.default == Parameter.empty]
        return len(positionals)

    def _depth(self, f):
        if f in type(self).FUNCTIONS.values():
            return getattr(f, 'depth', 0)
        return self._arity(f)

    def _apply(self, name, f):
        '''
        Run command on stack, checking the stack is deep enough first.
        '''
        depth = self._depth(f)
        if len(self.stack) < depth:
            raise StackUnderflow(name, depth)
        if f in type(self).FUNCTIONS.values():
            f(self)
            return
        # If you don't reverse, you'll do 2**9 when you say 9 2 ^ instead of
        # 9**2.
        args = reversed(self._popstack(depth))
        res = self._call(name, f, *args)
        if isinstance(res, tuple):
            self._pshstack(*res)
        else:
            self._pshstack(res)

    @wrap_user_errors('Cannot evaluate {1}')
    def _call(self, name, f, *args):
        return f(*args)

    def _function(self, name):
        '''
        Return first function defined with name, if any.
        '''
        return next((function
                     for function
                     in self.functions
                     if function.name == name),
                    None)

    def expand(self, function):
        '''
        Put function body in front of the rest of the queue.
        '''
        self.queue.extendleft(reversed(function.body))

    def _round(self, n):
        '''
        Round number to precision (on output) if machine set to round.
        '''
        if self.precision is None:
            return n
        else:
            return round(n, self.precision)

    def _oconvert(self, number):
        '''
        Convert number to positional notation, no trailing .0.
        '''
        if math.isnan(number):
            return 'NaN'
        elif math.isinf(number):
            return 'inf' if number > 0 else '-inf'
        elif number.is_integer():
            sign = '-' if math.copysign(1, number) < 0 else ''
            return sign + str(abs(int(number)))
        return format(Decimal(repr(number)), 'f')

    def format(self, number):
        return self._oconvert(self._round(float(number)))

    def printstack(self, file=None):
        '''
        Print all elements on the stack, bottom of the stack first.
        '''
        file = file or sys.stdout
        for number in self.stack:
            print(self.format(number), file=file)

    def _pshstack(self, *new):
        '''
        Push all elements onto stack, leftmost at the bottom.
        '''
        self.stack.extend(new)

    def _popstack(self, n=1):
        '''
        Pop specified number of args from stack, topmost first.

        Callers check depth first.
        '''
        return [self.stack.pop() for _ in range(n)]

    def _fold(self, f):
        self._pshstack(reduce(f, [self.stack.popleft()
                                  for _
                                  in range(len(self.stack))]))

    def dropstack(self):
        '''
        Discard element at top of stack. Only warns if there's none.
        '''
        if not self.stack:
            warnings.warn('Nothing on stack to drop', CompWarning)
            return
        self.stack.pop()

    @requires(1)
    def dupstack(self):
        '''
        Duplicate element at top of stack.
        '''
        top = self._popstack()[0]
        self._pshstack(top)
        self._pshstack(top)

    @requires(2)
    def revstack(self):
        '''
        Swap two elements at top of stack.
        '''
        self._pshstack(*self._popstack(n=2))

    def clrstack(self):
        '''
        Clear everything from the stack.
        '''
        self.stack.clear()

    @requires(1)
    def rollstack(self):
        '''
        Move top of stack to the bottom.
        '''
        self.stack.rotate(1)

    @requires(1)
    def rotstack(self):
        '''
        Move bottom of stack to the top.
        '''
        self.stack.rotate(-1)

    @requires(1)
    def sumstack(self):
        '''
        Add everything on the stack together.
        '''
        self._fold(operator.__add__)

    @requires(1)
    def prodstack(self):
        '''
        Multiply everything on the stack together.
        '''
        self._fold(operator.__mul__)

    def _storer(name):
        @requires(1)
        def store(self):
            self.registers[name] = self._popstack()[0]
        store.__name__ = 'store' + name
        store.__doc__ = 'Pop top of stack into register {}.'.format(name)
        return store

    def _loader(name):
        def load(self):
            self._pshstack(self.registers[name])
        load.__name__ = 'load' + name
        load.__doc__ = 'Push copy of register {}.'.format(name)
        return load

    def define(self):
        '''
        Take function name, then body up to ``end``, off the queue.

        The name is taken as is, even if it's a command. ``fn`` inside the
        body is just another token.
        '''
        if not self.queue:
            warnings.warn("'fn' without a function name", CompWarning)
            return
        name = self.queue.popleft()
        body = []
        while self.queue:
            token = self.queue.popleft()
            if token == 'end':
                break
            body.append(token)
        else:
            warnings.warn("Function {} has no 'end'".format(repr(name)),
                          CompWarning)
        if name in type(self).COMMANDS:
            warnings.warn('Function {} hidden by command of the same name'
                          .format(repr(name)), CompWarning)
        elif self._function(name) is not None:
            warnings.warn('Function {} already defined; first definition wins'
                          .format(repr(name)), CompWarning)
        self.functions.append(Function(name, tuple(body)))

    def comment(self):
        '''
        Skip tokens up to the matching ``)``, nested parentheses included.
        '''
        nesting = 0
        while self.queue:
            token = self.queue.popleft()
            if token == '(':
                nesting += 1
            elif token == ')':
                if not nesting:
                    return
                nesting -= 1
        warnings.warn("Comment has no closing ')'", CompWarning)

    # Commands that work on the machine itself rather than on values.
    FUNCTIONS = {
        'drop': dropstack,
        'dup': dupstack,
        'swap': revstack,
        'cls': clrstack,
        'clr': clrstack,
        'roll': rollstack,
        'rot': rotstack,
        '+_': sumstack,
        'x_': prodstack,
        'fn': define,
        '(': comment,
    }
    for register in REGISTERS:
        FUNCTIONS['s' + register] = FUNCTIONS['.' + register] = \
            _storer(register)
        FUNCTIONS[register] = _loader(register)
    del register

    # Every command, by spelling.
    COMMANDS = dict()
    for namespace in MATH, FUNCTIONS:
        COMMANDS.update(namespace)
    del namespace
