from functools import reduce
import operator

import regex

from .util import ParseFailure


class Lexer:
    '''
    Lexer for the comp token stream.

    Tokens are whatever whitespace separates; only numeric literals have a
    grammar. For consistency, needs to be instantiated, despite holding no
    internal state.
    '''
    # Integral part of a number
    INTEGRAL = r'''
                # DO NOT REPEAT ME! I REPEAT MYSELF INTERNALLY!
                (?:
                    # 1, 12, or the 1 in 1_200.
                    \d{1,3}
                    (?:
                        # The 4, 45, etc. in 1234, 12345, etc.
                        \d
                        |
                        # Support not just digits, but thousands separators
                        (?:
                            _\d{3}
                        )
                    )*
                )
                '''
    # Fractional part of a number. Never empty.
    FRACTIONAL = r'''
                  (?:
                      \d+
                      (?:
                          _\d{3}
                      )*
                      (?:
                          _\d{1,2}
                      )?
                  )
                  '''
    EXPONENT = r'''
                (?:
                    [eE]
                    [+-]?
                    \d+
                )
                '''
    # Number, of any kind supported by grammar.
    # String formatting and regex is a tricky business, because of the braces.
    # It works here. Be careful in general!
    NUMBER = r'''
              [+-]?
              (?:
                  (?:
                      # 1, 12, 1_200, 1_200. (notice trailing dot), 1.3
                      {INTEGRAL}
                      (?:
                          \.
                          {FRACTIONAL}?
                      )?
                  |
                      # .2, 0.2, 0.200_200
                      \.
                      {FRACTIONAL}
                  )
                  {EXPONENT}?
              |
                  (?i:
                      inf(?:inity)?
                      |
                      nan
                  )
              )
              '''.format(INTEGRAL=INTEGRAL,
                         FRACTIONAL=FRACTIONAL,
                         EXPONENT=EXPONENT)
    TOKEN = r'\S+'

    # Default regex flags for matching lexemes
    FLAGS = reduce(operator.__or__,
                   {regex.POSIX,
                    regex.DOTALL,
                    regex.VERSION1,
                    regex.VERBOSE},
                   0)

    def lex(self, text):
        '''
        Take text and yield all whitespace-delimited tokens, in order.
        '''
        for match in regex.finditer(type(self).TOKEN, text,
                                    flags=type(self).FLAGS):
            yield match.group(0)

    def isnumber(self, token):
        '''
        Return True if token is a numeric literal.
        '''
        return regex.fullmatch(type(self).NUMBER, token,
                               flags=type(self).FLAGS) is not None

    def number(self, token):
        '''
        Convert numeric literal to float.
        '''
        if not self.isnumber(token):
            raise ParseFailure(token)
        # Handle the underscores in here.
        return float(token.replace('_', ''))
