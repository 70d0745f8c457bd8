from functools import wraps


class CompError(Exception):
    pass


class StackUnderflow(CompError):
    '''
    Command run with fewer elements on the stack than it consumes.
    '''
    def __init__(self, command, depth):
        super().__init__("'{}' needs at least {} element(s) on stack"
                         .format(command, depth))
        self.command = command
        self.depth = depth


class ParseFailure(CompError):
    '''
    Token neither a command, a function, nor a number of the expected kind.
    '''
    def __init__(self, token, kind='number'):
        super().__init__('Cannot parse {} as {}'.format(repr(token), kind))
        self.token = token
        self.kind = kind


class CompWarning(UserWarning):
    pass


def wrap_user_errors(fmt):
    '''
    Ugly hack decorator that converts exceptions to CompErrors.

    Passes through CompErrors.
    '''
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except CompError:
                raise
            except Exception as e:
                raise CompError(fmt.format(*args, **kwargs), e) from e
        return wrapper
    return decorator
