from pytest import Item, fixture

from comp.machine import Machine


def pytest_assertion_pass(item: Item,
                          lineno: int,
                          orig: str,
                          expl: str) -> None:
    '''
    Log every assertion, in case we later need to audit a run.

    Excessive in most cases.

    Use with pytest -rP.
    '''
    print('given', item.name + ':' + str(lineno), str(orig))  # no repr()!)
    print('actual', item.name + ':' + str(lineno),
          # Get rid of full-diff, -vv for full diff, etc.
          '\n'.join(str(expl).splitlines()[:-2]))


@fixture
def machine():
    return Machine()


@fixture
def run(machine):
    '''
    Run a whitespace-separated program, returning the stack as a list.
    '''
    def run(program):
        return list(machine.feed(program.split()))
    return run
