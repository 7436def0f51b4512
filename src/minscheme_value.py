'''
runtime values and the environment chain

schemeval is specified as various classes, and this helps static type checking
if we represent it as single class with different tag (like token), we won't have type checking with python's typing

values are never mutated after construction, a list value is a python list that nobody appends to
the empty list is the "no value" result of define and set!

operations (stringify, is_equal) are functions outside class, extensible by rules
'''

import inspect
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

from minscheme_base import find_type, format_bool
from minscheme_parser import BooleanNode, IdentifierNode, IntegerNode, ListNode, StringNode, SyntaxNode


class SchemeVal:
    '''
    schemeVal defaults to be truthy, including 0, "", ()
    the only thing not truthy is #f, see is_truthy
    '''
    pass


GenericVal = TypeVar('GenericVal', bound=SchemeVal)


class SymbolVal(SchemeVal):
    def __init__(self, value: str):
        self.value = value


class IntegerVal(SchemeVal):
    def __init__(self, value: int):
        self.value = value


class BooleanVal(SchemeVal):
    def __init__(self, value: bool):
        self.value = value


class StringVal(SchemeVal):
    def __init__(self, value: str):
        self.value = value


class ListVal(SchemeVal):
    def __init__(self, contents: List[SchemeVal]):
        self.contents = contents


class SchemeEnvError(Exception):
    def __init__(self, name: str):
        self.name = name


class Environment:
    '''
    see chap 4.1.3 and https://craftinginterpreters.com/statements-and-state.html

    should not pass {} to __init__.bindings, because this {} will be shared among different instance
    see: https://stackoverflow.com/questions/26320899/why-is-the-empty-dictionary-a-dangerous-default-value-in-python
    '''

    def __init__(self, bindings: Dict[str, SchemeVal], enclosing: Optional["Environment"] = None):
        self.bindings = bindings
        self.enclosing = enclosing


class ProcVal(SchemeVal):
    '''
    procedure created by lambda
    body is the list of syntax nodes after the parameter list, kept as is and evaluated on every call
    env is where the lambda is evaluated, a call extends this env, not the caller's
    '''

    def __init__(self, pos_paras: List[str], body: List[SyntaxNode], env: Environment):
        self.pos_paras = pos_paras
        self.body = body
        self.env = env


def make_nil():
    return ListVal([])


'''
we use functional programming style for environment, i.e. moving all methods out of class
in this way, new operations can be easily added
'''


def _env_find(env: Environment, name: str):
    cur: Optional[Environment] = env
    while cur is not None:
        if name in cur.bindings:
            return cur
        cur = cur.enclosing
    return None


def env_is_defined(env: Environment, name: str):
    '''only check current frame'''
    return name in env.bindings


def env_is_visible(env: Environment, name: str):
    return _env_find(env, name) is not None


def env_define(env: Environment, name: str, sv: SchemeVal):
    if env_is_defined(env, name):
        raise SchemeEnvError(name)
    env.bindings[name] = sv


def env_set(env: Environment, name: str, sv: SchemeVal):
    found = _env_find(env, name)
    if found is None:
        raise SchemeEnvError(name)
    found.bindings[name] = sv


def env_lookup(env: Environment, name: str):
    found = _env_find(env, name)
    if found is None:
        raise SchemeEnvError(name)
    return found.bindings[name]


def env_extend(env: Environment, parameters: List[str], arguments: List[SchemeVal]):
    return Environment(dict(zip(parameters, arguments)), env)


'''value stringifier, producing the display form'''

StringifyValueFuncType = Callable[[SchemeVal], str]

_stringify_value_rules: Dict[Type, StringifyValueFuncType] = {}


def update_stringify_value_rules(rules: Dict[Type, StringifyValueFuncType]):
    _stringify_value_rules.update(rules)


def stringify_value(sv: SchemeVal):
    t = find_type(type(sv), _stringify_value_rules)
    f = _stringify_value_rules[t]
    return f(sv)


StringifyValueRuleType = Union[
    Callable[[], str],
    Callable[[GenericVal], str],
]


def stringify_value_rule_decorator(rule_func: StringifyValueRuleType):
    arity = len(inspect.getfullargspec(rule_func).args)

    def _stringify_value_rule_wrapped(sv: SchemeVal):
        args: List[Any] = [sv]
        return rule_func(*args[0:arity])
    return _stringify_value_rule_wrapped


@stringify_value_rule_decorator
def stringify_value_symbol(sv: SymbolVal):
    return sv.value


@stringify_value_rule_decorator
def stringify_value_integer(sv: IntegerVal):
    return '%d' % sv.value


@stringify_value_rule_decorator
def stringify_value_boolean(sv: BooleanVal):
    return format_bool(sv.value)


@stringify_value_rule_decorator
def stringify_value_string(sv: StringVal):
    return '"%s"' % sv.value


@stringify_value_rule_decorator
def stringify_value_list(sv: ListVal):
    return '(%s)' % (' '.join([stringify_value(subval) for subval in sv.contents]))


@stringify_value_rule_decorator
def stringify_value_procedure():
    return '#<procedure>'


def install_stringify_value_rules():
    rules = {
        SymbolVal: stringify_value_symbol,
        IntegerVal: stringify_value_integer,
        BooleanVal: stringify_value_boolean,
        StringVal: stringify_value_string,
        ListVal: stringify_value_list,
        ProcVal: stringify_value_procedure,
    }
    update_stringify_value_rules(rules)


def print_value(sv: SchemeVal):
    '''
    the form shown as final result
    symbol and list are data, not self-evaluating, so they are marked with a quote
    nested elements are not marked again, (quote (a b)) prints '(a b) not '('a 'b)
    '''
    if isinstance(sv, (SymbolVal, ListVal)):
        return '\'' + stringify_value(sv)
    return stringify_value(sv)


'''value equality checker'''

EqualityFuncType = Callable[[SchemeVal, SchemeVal], bool]

_is_equal_rules: Dict[Type, EqualityFuncType] = {}


def update_is_equal_rules(rules: Dict[Type, EqualityFuncType]):
    _is_equal_rules.update(rules)


def is_equal(x: SchemeVal, y: SchemeVal):
    if type(x) == type(y):
        t = find_type(type(x), _is_equal_rules)
        f = _is_equal_rules[t]
        return f(x, y)
    else:
        return False


def is_equal_literal(x: Union[SymbolVal, IntegerVal, BooleanVal, StringVal], y: Union[SymbolVal, IntegerVal, BooleanVal, StringVal]):
    return x.value == y.value


def is_equal_list(x: ListVal, y: ListVal):
    if len(x.contents) != len(y.contents):
        return False
    return all([is_equal(subx, suby) for (subx, suby) in zip(x.contents, y.contents)])


def is_equal_object(x: ProcVal, y: ProcVal):
    return x is y


def install_is_equal_rules():
    rules = {
        SymbolVal: is_equal_literal,
        IntegerVal: is_equal_literal,
        BooleanVal: is_equal_literal,
        StringVal: is_equal_literal,
        ListVal: is_equal_list,
        ProcVal: is_equal_object,
    }
    update_is_equal_rules(rules)


def is_truthy(sv: SchemeVal):
    '''
    in scheme, the only thing not truthy is #f
    except that everything is truthy, including 0, "", '()
    '''
    return not isinstance(sv, BooleanVal) or sv.value == True


'''quote syntax node to value, without evaluating it'''

_quote_node_literal_rules: Dict[Type, Callable[[Any], SchemeVal]] = {
    IdentifierNode: lambda node: SymbolVal(node.name),
    IntegerNode: lambda node: IntegerVal(node.value),
    BooleanNode: lambda node: BooleanVal(node.value),
    StringNode: lambda node: StringVal(node.value),
}


def quote_node(node: SyntaxNode):
    if isinstance(node, ListNode):
        return ListVal([quote_node(subnode) for subnode in node.contents])
    else:
        f = _quote_node_literal_rules[type(node)]
        return f(node)


'''tests'''


def install_rules():
    install_stringify_value_rules()
    install_is_equal_rules()


def test_stringify():
    proc = ProcVal(['x'], [IdentifierNode('x')], Environment({}))
    nested = ListVal([IntegerVal(1), SymbolVal('a'), ListVal([StringVal('b c'), BooleanVal(False)]), proc])
    cases = [
        (SymbolVal('a'), 'a', '\'a'),
        (IntegerVal(-42), '-42', '-42'),
        (BooleanVal(True), '#t', '#t'),
        (BooleanVal(False), '#f', '#f'),
        (StringVal('dali'), '"dali"', '"dali"'),
        (make_nil(), '()', '\'()'),
        (proc, '#<procedure>', '#<procedure>'),
        (nested, '(1 a ("b c" #f) #<procedure>)', '\'(1 a ("b c" #f) #<procedure>)'),
    ]
    for (sv, display_str, print_str) in cases:
        assert stringify_value(sv) == display_str
        assert print_value(sv) == print_str


def test_is_equal():
    proc = ProcVal([], [IntegerNode(1)], Environment({}))
    assert is_equal(IntegerVal(1), IntegerVal(1))
    assert not is_equal(IntegerVal(1), IntegerVal(2))
    assert not is_equal(SymbolVal('a'), StringVal('a'))
    assert is_equal(ListVal([SymbolVal('a'), ListVal([])]), ListVal([SymbolVal('a'), ListVal([])]))
    assert not is_equal(ListVal([SymbolVal('a')]), ListVal([SymbolVal('a'), SymbolVal('a')]))
    assert is_equal(proc, proc)
    assert not is_equal(proc, ProcVal([], [IntegerNode(1)], Environment({})))


def test_is_truthy():
    assert is_truthy(IntegerVal(0))
    assert is_truthy(StringVal(''))
    assert is_truthy(make_nil())
    assert is_truthy(BooleanVal(True))
    assert not is_truthy(BooleanVal(False))


def test_quote():
    node = ListNode([IdentifierNode('a'), IntegerNode(1), ListNode([StringNode('s'), BooleanNode(True)]), ListNode([])])
    sv = quote_node(node)
    assert print_value(sv) == '\'(a 1 ("s" #t) ())'
    assert print_value(quote_node(IdentifierNode('a'))) == '\'a'
    assert print_value(quote_node(IntegerNode(1))) == '1'


def test_env():
    glbenv = Environment({})
    env_define(glbenv, 'x', IntegerVal(1))
    try:
        env_define(glbenv, 'x', IntegerVal(2))
        assert False
    except SchemeEnvError as err:
        assert err.name == 'x'

    child = env_extend(glbenv, ['y'], [IntegerVal(2)])
    assert env_is_defined(child, 'y')
    assert not env_is_defined(child, 'x')
    assert env_is_visible(child, 'x')
    assert not env_is_visible(glbenv, 'y')

    # shadowing in child frame is allowed
    env_define(child, 'x', IntegerVal(10))
    assert env_lookup(child, 'x').value == 10
    assert env_lookup(glbenv, 'x').value == 1

    # set updates the nearest frame
    env_set(child, 'x', IntegerVal(11))
    assert env_lookup(child, 'x').value == 11
    assert env_lookup(glbenv, 'x').value == 1
    grandchild = env_extend(child, [], [])
    env_set(grandchild, 'y', IntegerVal(3))
    assert env_lookup(child, 'y').value == 3
    assert env_lookup(grandchild, 'y').value == 3

    for f in [lambda: env_set(child, 'z', IntegerVal(0)), lambda: env_lookup(child, 'z')]:
        try:
            f()
            assert False
        except SchemeEnvError as err:
            assert err.name == 'z'


def test():
    test_stringify()
    test_is_equal()
    test_is_truthy()
    test_quote()
    test_env()


if __name__ == '__main__':
    install_rules()
    test()
