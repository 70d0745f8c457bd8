'''
Numerical routines behind the calculator commands that aren't a plain call
into Python's math module.

All take and return floats, operands in push order: for ``a b throot``,
``throot(a, b)``.
'''

import math

from .util import ParseFailure


U64_MAX = 2 ** 64 - 1


def unsigned(value):
    '''
    Read a stack value as an unsigned 64-bit integer.
    '''
    if not math.isfinite(value) or not float(value).is_integer() or \
       not 0 <= value <= U64_MAX:
        raise ParseFailure(value, 'unsigned integer')
    return int(value)


def chs(x):
    return -x


def inv(x):
    return 1 / x


def round_half_away(x):
    '''
    Round to nearest integral value, halves away from zero. Stays a float.
    '''
    if not math.isfinite(x):
        return x
    return math.copysign(math.floor(abs(x) + 0.5), x)


def power(a, b):
    '''
    a to the b. Overflows to ±inf like the other arithmetic, instead of
    raising as math.pow does.
    '''
    try:
        return math.pow(a, b)
    except OverflowError:
        odd = float(b).is_integer() and math.fmod(b, 2) != 0
        return -math.inf if a < 0 and odd else math.inf


def throot(a, b):
    '''
    b-th root of a.
    '''
    return power(a, 1 / b)


def proot(a, b, c):
    '''
    Roots of a·x² + b·x + c = 0, as (real1, imag1, real2, imag2).
    '''
    disc = b * b - 4 * a * c
    if disc < 0:
        real = -b / (2 * a)
        imag = math.sqrt(-disc) / (2 * a)
        return real, imag, real, -imag
    root = math.sqrt(disc)
    return (-b + root) / (2 * a), 0.0, (-b - root) / (2 * a), 0.0


def factorial(n):
    '''
    Product of floor(n) down to 2; anything below 2 is 1.

    Iterative, and gives up once the product is infinite, so neither
    recursion depth nor run time grows past 171 multiplications.
    '''
    product = 1.0
    if not n >= 2:
        return product
    elif math.isinf(n):
        return math.inf
    for k in range(2, math.floor(n) + 1):
        product *= k
        if math.isinf(product):
            break
    return product


def _euclid(a, b):
    if b == 0:
        return a
    return _euclid(b, a % b)


def gcd(a, b):
    '''
    Greatest common divisor, Euclid's, on the unsigned reading of a and b.

    Recursion depth is logarithmic in the smaller operand.
    '''
    return float(_euclid(unsigned(a), unsigned(b)))


def logn(a, b):
    '''
    Logarithm of a in base b.
    '''
    return math.log(a, b)
