'''
minscheme scanner: string -> tokens
only support paranthesis, identifier, string, integer, boolean
string does not support backslash escaped string character

every token must be followed by white space, closing paranthesis or end of input
so malformed tokens like 24r2 or 33^3 are rejected early instead of being split in two

positions are 1-based, line is counted by newlines consumed
column is the index into the whole source, not reset by newline
ref: https://craftinginterpreters.com/scanning.html
'''

import enum
from typing import ClassVar, List, Set

from minscheme_base import SchemePanic, format_bool, scheme_panic


'''fixed-width integer, shared by scanner and evaluator'''

INTEGER_MIN = -2**63
INTEGER_MAX = 2**63-1


def integer_in_range(x: int):
    return INTEGER_MIN <= x <= INTEGER_MAX


@enum.unique
class TokenTag(enum.Enum):
    OPEN_PAREN = enum.auto()
    CLOSE_PAREN = enum.auto()
    IDENTIFIER = enum.auto()
    INTEGER = enum.auto()
    BOOLEAN = enum.auto()
    STRING = enum.auto()


class Token:
    '''token is simple and relatively fixed, we won't use different classes'''

    def __init__(self, tag: TokenTag, line: int, column: int, literal=None):
        self.tag = tag
        self.line = line
        self.column = column
        self.literal = literal


def stringify_token_full(token: Token):
    if token.tag == TokenTag.INTEGER:
        return '%s:%d' % (token.tag.name, token.literal)
    elif token.tag == TokenTag.STRING or token.tag == TokenTag.IDENTIFIER:
        return '%s:%s' % (token.tag.name, token.literal)
    elif token.tag == TokenTag.BOOLEAN:
        return '%s:%s' % (token.tag.name, format_bool(token.literal))
    else:
        return token.tag.name


class SchemeSyntaxError(Exception):
    def __init__(self, line: int, column: int, message: str):
        self.line = line
        self.column = column
        self.message = message

    def __str__(self) -> str:
        return 'SyntaxError: %s (line: %d, column: %d)' % (self.message, self.line, self.column)


class Scanner:
    # class vars
    _identifier_start_chars: ClassVar[Set[str]] = set('!$%&*/:<=>?_^')
    _identifier_chars: ClassVar[Set[str]] = set('/!$%*:<=>?_-+')
    _whitespace_chars: ClassVar[Set[str]] = set(' \t\n\r')

    # instance vars
    _source: str
    _start: int
    _start_line: int
    _current: int
    _line: int
    _tokens: List[Token]

    def __init__(self):
        self._restart('')

    def scan(self, source: str):
        self._restart(source)
        try:
            while not self._is_at_end():
                self._mark_start()
                self._scan_one_token()
        except SchemeSyntaxError as err:
            scheme_panic(str(err))
        return self._tokens

    def _restart(self, source: str):
        self._source = source
        self._start = 0
        self._start_line = 1
        self._current = 0
        self._line = 1
        self._tokens = []

    def _scan_one_token(self):
        c = self._peek()
        if c == '(':
            self._advance()
            self._add_token(TokenTag.OPEN_PAREN)
        elif c == ')':
            self._advance()
            self._add_token(TokenTag.CLOSE_PAREN)
        elif c == '+' or c == '-':
            self._scan_sign()
            self._scan_delimiter()
        elif c == '#':
            self._scan_boolean()
            self._scan_delimiter()
        elif Scanner._is_alpha(c) or c in Scanner._identifier_start_chars:
            self._scan_identifier()
            self._scan_delimiter()
        elif Scanner._is_digit(c):
            self._scan_integer('+')
            self._scan_delimiter()
        elif c == '"':
            self._scan_string()
            self._scan_delimiter()
        elif c in Scanner._whitespace_chars:
            self._advance()
        else:
            self._error(self._current, 'Unexpected character: %s' % c)

    def _is_at_end(self):
        return self._current >= len(self._source)

    def _advance(self):
        c = self._source[self._current]
        self._current += 1
        if c == '\n':
            self._line += 1
        return c

    def _peek(self):
        return self._source[self._current]

    def _mark_start(self):
        self._start = self._current
        self._start_line = self._line

    def _add_token(self, tag: TokenTag, literal=None):
        self._tokens.append(Token(tag, self._start_line, self._start+1, literal))

    def _scan_sign(self):
        sign = self._advance()
        if not self._is_at_end() and Scanner._is_digit(self._peek()):
            self._scan_integer(sign)
        else:
            # a lonely sign is the name of the operator
            self._add_token(TokenTag.IDENTIFIER, sign)

    def _scan_integer(self, sign: str):
        digits_start = self._current
        while not self._is_at_end() and Scanner._is_digit(self._peek()):
            self._advance()
        literal = int(self._source[digits_start:self._current])
        if sign == '-':
            literal = -literal
        if not integer_in_range(literal):
            self._error(self._start, 'Integer literal out of range: %s' %
                        self._source[self._start:self._current], self._start_line)
        self._add_token(TokenTag.INTEGER, literal)

    def _scan_boolean(self):
        self._advance()  # consume #
        if self._is_at_end():
            self._error(self._start, 'Unexpected end of input', self._start_line)
        c = self._peek()
        if c == 't':
            self._add_token(TokenTag.BOOLEAN, True)
        elif c == 'f':
            self._add_token(TokenTag.BOOLEAN, False)
        else:
            self._error(self._current, 'Unexpected character when looking for t/f: %r' % c)
        self._advance()

    def _scan_identifier(self):
        self._advance()  # first character has been checked by caller
        while not self._is_at_end() and Scanner._can_continue_identifier(self._peek()):
            self._advance()
        self._add_token(TokenTag.IDENTIFIER, self._source[self._start:self._current])

    def _scan_string(self):
        self._advance()  # consume opening "
        while not self._is_at_end():
            if self._advance() == '"':
                # trim the surrounding quotes
                literal = self._source[self._start+1:self._current-1]
                self._add_token(TokenTag.STRING, literal)
                return
        self._error(self._start, 'String literal is not properly closed', self._start_line)

    def _scan_delimiter(self):
        '''a non-delimiter token must be followed by white space, closing paranthesis or end'''
        if self._is_at_end():
            return
        c = self._peek()
        if c == ')':
            self._mark_start()
            self._advance()
            self._add_token(TokenTag.CLOSE_PAREN)
        elif c not in Scanner._whitespace_chars:
            self._error(self._current, 'Unexpected symbol \'%s\'. Expected white space or closing paren.' % c)

    def _error(self, index: int, message: str, line=None):
        if line is None:
            line = self._line
        raise SchemeSyntaxError(line, index+1, message)

    @staticmethod
    def _is_alpha(c: str):
        return ('a' <= c <= 'z') or ('A' <= c <= 'Z')

    @staticmethod
    def _is_digit(c: str):
        return '0' <= c <= '9'

    @staticmethod
    def _can_continue_identifier(c: str):
        return Scanner._is_alpha(c) or Scanner._is_digit(c) or c in Scanner._identifier_chars


_scanner = Scanner()


def scan_source(source: str):
    return _scanner.scan(source)


'''tests'''


def test_one(source: str, **kargs: str):
    print('* source: %s' % source)
    try:
        tokens = scan_source(source)
        token_str = ', '.join([stringify_token_full(t) for t in tokens])
        print('* tokens: %s' % token_str)
        if 'tokens' in kargs:
            assert token_str == kargs['tokens']
    except SchemePanic as err:
        print('* panic: %s' % err.message)
        assert err.message == kargs['panic']
    print('----------')


def test_simple():
    test_one(
        '(+ 1 4)',
        tokens='OPEN_PAREN, IDENTIFIER:+, INTEGER:1, INTEGER:4, CLOSE_PAREN'
    )
    test_one(
        '(-5)',
        tokens='OPEN_PAREN, INTEGER:-5, CLOSE_PAREN'
    )
    test_one(
        '(if #t "a b" #f)',
        tokens='OPEN_PAREN, IDENTIFIER:if, BOOLEAN:#t, STRING:a b, BOOLEAN:#f, CLOSE_PAREN'
    )
    test_one(
        '((a))',
        tokens='OPEN_PAREN, OPEN_PAREN, IDENTIFIER:a, CLOSE_PAREN, CLOSE_PAREN'
    )
    test_one(
        '',
        tokens=''
    )


def test_white_space():
    test_one(
        '(+ 3    2)\n(-  \n \t   2\t1 \t)\r\n \t \n',
        tokens='OPEN_PAREN, IDENTIFIER:+, INTEGER:3, INTEGER:2, CLOSE_PAREN, '
        'OPEN_PAREN, IDENTIFIER:-, INTEGER:2, INTEGER:1, CLOSE_PAREN'
    )


def test_integer():
    test_one(
        '(+ -4 +1 -713 -5 6)',
        tokens='OPEN_PAREN, IDENTIFIER:+, INTEGER:-4, INTEGER:1, INTEGER:-713, INTEGER:-5, INTEGER:6, CLOSE_PAREN'
    )
    test_one(
        '( - 778899 (+ 2131 4362))',
        tokens='OPEN_PAREN, IDENTIFIER:-, INTEGER:778899, OPEN_PAREN, IDENTIFIER:+, '
        'INTEGER:2131, INTEGER:4362, CLOSE_PAREN, CLOSE_PAREN'
    )
    test_one(
        '9223372036854775807 -9223372036854775808',
        tokens='INTEGER:9223372036854775807, INTEGER:-9223372036854775808'
    )
    test_one(
        '(+ 1 9223372036854775808)',
        panic='SyntaxError: Integer literal out of range: 9223372036854775808 (line: 1, column: 6)'
    )


def test_identifier():
    for identifier in ['+', '>=', 'ho!', 'unless', 'it', '$salam', 'set!', 'a-b+c', '&x', '^']:
        test_one(identifier, tokens='IDENTIFIER:%s' % identifier)


def test_string():
    test_one(
        '"Sh!t and f*ck & stu$$$6!"',
        tokens='STRING:Sh!t and f*ck & stu$$$6!'
    )
    test_one(
        '"down, down',
        panic='SyntaxError: String literal is not properly closed (line: 1, column: 1)'
    )
    test_one(
        '(display\n"abc)',
        panic='SyntaxError: String literal is not properly closed (line: 2, column: 10)'
    )


def test_boolean():
    test_one('#t', tokens='BOOLEAN:#t')
    test_one('#f', tokens='BOOLEAN:#f')
    test_one(
        '#a',
        panic='SyntaxError: Unexpected character when looking for t/f: \'a\' (line: 1, column: 2)'
    )
    test_one(
        '#T',
        panic='SyntaxError: Unexpected character when looking for t/f: \'T\' (line: 1, column: 2)'
    )
    test_one(
        '(if #',
        panic='SyntaxError: Unexpected end of input (line: 1, column: 5)'
    )
    test_one(
        '#tx',
        panic='SyntaxError: Unexpected symbol \'x\'. Expected white space or closing paren. (line: 1, column: 3)'
    )


def test_invalid():
    test_one(
        '(33^3)',
        panic='SyntaxError: Unexpected symbol \'^\'. Expected white space or closing paren. (line: 1, column: 4)'
    )
    test_one(
        '(\')',
        panic='SyntaxError: Unexpected character: \' (line: 1, column: 2)'
    )
    test_one(
        '+%',
        panic='SyntaxError: Unexpected symbol \'%\'. Expected white space or closing paren. (line: 1, column: 2)'
    )
    test_one(
        '(-23+)',
        panic='SyntaxError: Unexpected symbol \'+\'. Expected white space or closing paren. (line: 1, column: 5)'
    )
    test_one(
        '(24r2+)',
        panic='SyntaxError: Unexpected symbol \'r\'. Expected white space or closing paren. (line: 1, column: 4)'
    )
    test_one(
        '(+ 1\n  @)',
        panic='SyntaxError: Unexpected character: @ (line: 2, column: 8)'
    )
    test_one(
        '(a(b))',
        panic='SyntaxError: Unexpected symbol \'(\'. Expected white space or closing paren. (line: 1, column: 3)'
    )


def test_position():
    tokens = scan_source('(define x\n  "a\nb")\n(x)')
    assert [(t.line, t.column) for t in tokens] == [(1, 1), (1, 2), (1, 9), (2, 13), (3, 18), (4, 20), (4, 21), (4, 22)]
    assert ', '.join([stringify_token_full(t) for t in tokens]) == \
        'OPEN_PAREN, IDENTIFIER:define, IDENTIFIER:x, STRING:a\nb, CLOSE_PAREN, OPEN_PAREN, IDENTIFIER:x, CLOSE_PAREN'


def test():
    test_simple()
    test_white_space()
    test_integer()
    test_identifier()
    test_string()
    test_boolean()
    test_invalid()
    test_position()


if __name__ == '__main__':
    test()
