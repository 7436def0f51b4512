'''
parse token list to a forest of syntax nodes

parenthesis is the only grouping mechanism, there is no quote sugar and no dotted list
so the grammar is a very simple recursive descent:

node -> literal | list;
literal -> IDENTIFIER | INTEGER | BOOLEAN | STRING;
list -> OPEN_PAREN ( node )* CLOSE_PAREN;

unlike a full scheme parser, we do not turn lists into typed expressions like if/define/lambda
special forms are recognized by name at evaluation time, so (if 1) is a runtime error, not a parse error
'''

import inspect
from typing import Any, Callable, Dict, List, Type, TypeVar, Union

from minscheme_base import SchemePanic, find_type, format_bool, scheme_panic
from minscheme_lexer import Token, TokenTag, scan_source


class SyntaxNode:
    pass


GenericNode = TypeVar('GenericNode', bound=SyntaxNode)


class IdentifierNode(SyntaxNode):
    def __init__(self, name: str):
        self.name = name


class IntegerNode(SyntaxNode):
    def __init__(self, value: int):
        self.value = value


class BooleanNode(SyntaxNode):
    def __init__(self, value: bool):
        self.value = value


class StringNode(SyntaxNode):
    def __init__(self, value: str):
        self.value = value


class ListNode(SyntaxNode):
    def __init__(self, contents: List[SyntaxNode]):
        self.contents = contents


class SchemeParseError(Exception):
    def __init__(self, message: str):
        self.message = message

    def __str__(self) -> str:
        return 'ParseError: %s' % self.message


_parse_literal_rules: Dict[TokenTag, Callable[[Token], SyntaxNode]] = {
    TokenTag.IDENTIFIER: lambda token: IdentifierNode(token.literal),
    TokenTag.INTEGER: lambda token: IntegerNode(token.literal),
    TokenTag.BOOLEAN: lambda token: BooleanNode(token.literal),
    TokenTag.STRING: lambda token: StringNode(token.literal),
}

TokenParserFuncType = Callable[[Token, int], SyntaxNode]


class Parser:
    '''
    tokens are consumed strictly from left to right
    each nesting level is one call of _parse_level, and depth tells whether a closing paranthesis is expected
    ref: https://craftinginterpreters.com/parsing-expressions.html
    '''

    _rules: Dict[TokenTag, TokenParserFuncType]
    _tokens: List[Token]
    _current: int

    def __init__(self):
        self._rules = {
            TokenTag.IDENTIFIER: self._parse_literal,
            TokenTag.INTEGER: self._parse_literal,
            TokenTag.BOOLEAN: self._parse_literal,
            TokenTag.STRING: self._parse_literal,
            TokenTag.OPEN_PAREN: self._parse_open_paren,
        }
        self._restart([])

    def parse(self, tokens: List[Token]):
        self._restart(tokens)
        nodes: List[SyntaxNode] = []
        try:
            nodes = self._parse_level(0)
        except SchemeParseError as err:
            scheme_panic(str(err))
        return nodes

    def _restart(self, tokens: List[Token]):
        self._tokens = tokens
        self._current = 0

    def _parse_level(self, depth: int):
        nodes: List[SyntaxNode] = []
        while not self._is_at_end():
            token = self._advance()
            if token.tag == TokenTag.CLOSE_PAREN:
                if depth > 0:
                    return nodes
                raise SchemeParseError('Closing parens don\'t match the opening ones')
            nodes.append(self._rules[token.tag](token, depth))
        if depth > 0:
            raise SchemeParseError('Unexpected end of input')
        return nodes

    def _parse_literal(self, token: Token, depth: int):
        return _parse_literal_rules[token.tag](token)

    def _parse_open_paren(self, token: Token, depth: int):
        return ListNode(self._parse_level(depth+1))

    def _is_at_end(self):
        return self._current >= len(self._tokens)

    def _advance(self):
        token = self._tokens[self._current]
        self._current += 1
        return token


_parser = Parser()


def parse_tokens(tokens: List[Token]):
    return _parser.parse(tokens)


'''node stringifier, used in error messages and tests'''

StringifyNodeFuncType = Callable[[SyntaxNode], str]

_stringify_node_rules: Dict[Type, StringifyNodeFuncType] = {}


def update_stringify_node_rules(rules: Dict[Type, StringifyNodeFuncType]):
    _stringify_node_rules.update(rules)


def stringify_node(node: SyntaxNode):
    t = find_type(type(node), _stringify_node_rules)
    f = _stringify_node_rules[t]
    return f(node)


StringifyNodeRuleType = Union[
    Callable[[], str],
    Callable[[GenericNode], str],
]


def stringify_node_rule_decorator(rule_func: StringifyNodeRuleType):
    arity = len(inspect.getfullargspec(rule_func).args)

    def _stringify_node_rule_wrapped(node: SyntaxNode):
        args: List[Any] = [node]
        return rule_func(*args[0:arity])
    return _stringify_node_rule_wrapped


@stringify_node_rule_decorator
def stringify_node_identifier(node: IdentifierNode):
    return node.name


@stringify_node_rule_decorator
def stringify_node_integer(node: IntegerNode):
    return '%d' % node.value


@stringify_node_rule_decorator
def stringify_node_boolean(node: BooleanNode):
    return format_bool(node.value)


@stringify_node_rule_decorator
def stringify_node_string(node: StringNode):
    return '"%s"' % node.value


@stringify_node_rule_decorator
def stringify_node_list(node: ListNode):
    return '(%s)' % (' '.join([stringify_node(subnode) for subnode in node.contents]))


def install_stringify_node_rules():
    rules = {
        IdentifierNode: stringify_node_identifier,
        IntegerNode: stringify_node_integer,
        BooleanNode: stringify_node_boolean,
        StringNode: stringify_node_string,
        ListNode: stringify_node_list,
    }
    update_stringify_node_rules(rules)


'''tests'''


def test_one(source: str, **kargs: str):
    print('* source: %s' % source)
    try:
        tokens = scan_source(source)
        nodes = parse_tokens(tokens)
        nodes_str = ' '.join([stringify_node(node) for node in nodes])
        print('* nodes: %s' % nodes_str)
        if 'nodes' in kargs:
            assert nodes_str == kargs['nodes']
        if 'count' in kargs:
            assert len(nodes) == int(kargs['count'])
    except SchemePanic as err:
        print('* panic: %s' % err.message)
        assert err.message == kargs['panic']
    print('----------')


def test_parse():
    test_one(
        '',
        nodes='',
        count='0'
    )
    test_one(
        '(+ 1 2)',
        nodes='(+ 1 2)',
        count='1'
    )
    test_one(
        '(+ 1 (- 5 4))',
        nodes='(+ 1 (- 5 4))'
    )
    test_one(
        '(define x 3)\n(+ x 2)',
        nodes='(define x 3) (+ x 2)',
        count='2'
    )
    test_one(
        '1 #t "dali" abc ()',
        nodes='1 #t "dali" abc ()',
        count='5'
    )
    test_one(
        '((lambda (x) x) (quote (a "b" #f)))',
        nodes='((lambda (x) x) (quote (a "b" #f)))'
    )


def test_parse_error():
    test_one(
        '(+ 1',
        panic='ParseError: Unexpected end of input'
    )
    test_one(
        '(+ (- 2 1)',
        panic='ParseError: Unexpected end of input'
    )
    test_one(
        ')',
        panic='ParseError: Closing parens don\'t match the opening ones'
    )
    test_one(
        '(+ 1 2))',
        panic='ParseError: Closing parens don\'t match the opening ones'
    )


def test_node_types():
    nodes = parse_tokens(scan_source('(f -1 #f "s")'))
    assert len(nodes) == 1
    root = nodes[0]
    assert isinstance(root, ListNode)
    assert [type(subnode) for subnode in root.contents] == [IdentifierNode, IntegerNode, BooleanNode, StringNode]
    assert root.contents[1].value == -1
    assert root.contents[2].value == False
    assert root.contents[3].value == 's'


def install_rules():
    install_stringify_node_rules()


def test():
    test_parse()
    test_parse_error()
    test_node_types()


if __name__ == '__main__':
    install_rules()
    test()
