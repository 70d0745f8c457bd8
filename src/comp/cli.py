from os import isatty, path
from sys import exit
import sys
from argparse import ArgumentParser, FileType, OPTIONAL, REMAINDER
from importlib.metadata import version, PackageNotFoundError
import traceback
import warnings

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory

from .util import CompError, CompWarning
from .machine import Machine
from .lexer import Lexer


class InteractiveInput:
    def __init__(self, prompt, history=None):
        self.prompt = prompt
        self.history = history

    def __iter__(self):
        try:
            session = PromptSession(message=self.prompt,
                                    vi_mode=True,
                                    enable_suspend=True,
                                    enable_open_in_editor=True,
                                    # Persistent
                                    history=self.history,
                                    prompt_continuation=' ' * len(self.prompt),
                                    # Certainly not! But be explicit.
                                    erase_when_done=False)
            while True:
                yield session.prompt()
        except EOFError:
            return


class CLI:
    '''
    Command line interface to the comp calculator.
    '''

    DEFAULT_PROMPT = '> '
    HISTORY_FILE = '~/.comp_history'
    # Status on any evaluation error.
    EXIT_FAILURE = 99

    def dumper(self):
        '''
        Dump all tokens, what they'd run as, and stack depth needed.
        '''
        machine = Machine()
        print('<class>\t<repr(token)>\t<depth>')
        for token in self._tokens():
            print(machine.classify(token),
                  repr(token),
                  machine.depth(token),
                  sep='\t')

    def executor(self):
        '''
        Run all tokens, then print the stack.
        '''
        machine = self._machine()
        try:
            machine.feed(self._tokens())
        except CompError as e:
            self._report(e)
            exit(self.EXIT_FAILURE)
        machine.printstack()

    def interactor(self):
        '''
        Run each line as it's typed, printing the stack after each.
        '''
        machine = self._machine()
        lexer = Lexer()
        history = FileHistory(path.expanduser(self.HISTORY_FILE))
        for line in InteractiveInput(prompt=self.args.prompt or
                                     self.DEFAULT_PROMPT,
                                     history=history):
            try:
                machine.feed(lexer.lex(line))
            # Abort entire rest of line, makes sense anyway
            except CompError as e:
                self._report(e)
            machine.printstack()

    def raw_grammar(self):
        '''
        Print current internally defined numeric literal grammar.
        '''
        print(Lexer.NUMBER)

    def _machine(self):
        return Machine(verbose=self.args.verbose,
                       precision=self.args.precision)

    def _tokens(self):
        '''
        Return tokens from the command line, or else the whole input file.
        '''
        lexer = Lexer()
        if self.args.tokens:
            return list(lexer.lex(' '.join(self.args.tokens)))
        if self.args.file is None:
            return list(lexer.lex(sys.stdin.read()))
        with self.args.file as fp:
            return list(lexer.lex(fp.read()))

    def _report(self, error):
        if self.args.verbose:
            traceback.print_exc(file=sys.stderr)
        print(error.args[0], file=sys.stderr)

    def _showwarning(self, message, category, filename, lineno, file=None,
                     line=None):
        print('warning:', message, file=sys.stderr)

    def _split(self, args):
        '''
        Split args into options and tokens, at the first negative number
        argparse would take for an option, like -1e5 or -inf.
        '''
        lexer = Lexer()
        for i, arg in enumerate(args):
            if arg.startswith('-') and lexer.isnumber(arg):
                return args[:i], args[i:]
        return args, []

    def _interactive(self):
        '''
        Return True if we should prompt for input...

        If either:
        - prompt explicitly specified.
        - nothing to run given, and both stdin/out are a tty
        '''
        if self.args.prompt:
            return True
        return not self.args.tokens and self.args.file is None and \
            isatty(sys.stdin.fileno()) and isatty(sys.stdout.fileno())

    def __init__(self):
        '''
        Create ready to run CLI.

        Does not run or parse command line arguments.
        '''
        self.argument_parser = ArgumentParser(
            prog='comp',
            description='Postfix (RPN) calculator')
        self.argument_parser.add_argument('-v', '--verbose',
                                          action='store_true')
        self.argument_parser.add_argument('-V', '--version',
                                          action='version',
                                          version='%(prog)s ' + _version())
        self.argument_parser.add_argument('-k', '--precision',
                                          type=int,
                                          metavar='DIGITS')
        int_nonint_groups = self.argument_parser.add_mutually_exclusive_group()
        int_nonint_groups.add_argument('-f', '--file',
                                       type=FileType('r'))
        int_nonint_groups.add_argument('-p', '--prompt',
                                       nargs=OPTIONAL,
                                       const=self.DEFAULT_PROMPT)
        main_groups = self.argument_parser.add_mutually_exclusive_group()
        for short_, long_, action in [('-G', '--raw-grammar',
                                       self.raw_grammar),
                                      ('-D', '--dump', self.dumper)]:
            main_groups.add_argument(short_, long_,
                                     action='store_const',
                                     const=action,
                                     dest='action')
        self.argument_parser.add_argument('tokens',
                                          nargs=REMAINDER,
                                          metavar='TOKEN')
        self.argument_parser.set_defaults(action=None)

    def run(self, *, args=None):
        '''
        Run CLI, given these args, or previously passed CLI args.
        '''
        if args is None:
            args = sys.argv[1:]
        options, tokens = self._split(list(args))
        self.args = self.argument_parser.parse_args(options)
        self.args.tokens += tokens
        if self.args.tokens and self.args.file is not None:
            self.argument_parser.error('tokens and --file are exclusive')
        if self.args.action is None:
            if self._interactive():
                self.args.action = self.interactor
            else:
                self.args.action = self.executor
        with warnings.catch_warnings():
            warnings.simplefilter('always', CompWarning)
            warnings.showwarning = self._showwarning
            try:
                self.args.action()
            except KeyboardInterrupt:
                exit(1)


def _version():
    try:
        return version('comp')
    except PackageNotFoundError:
        return 'unknown'
