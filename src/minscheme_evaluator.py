'''
evaluate the syntax forest against an environment

the input of the language is a string, which will be transformed to tokens via Scanner
then Parser transforms the tokens to a forest of syntax nodes
finally each top level node is evaluated in order, against one shared environment
the result is the value of the last node, rendered in print form

evaluation dispatches on node type by rules, like stringify and is_equal
a list node is further dispatched on the name of its first element:
special forms (define, set!, lambda, if, and, or, quote) get their operands unevaluated
primitives (+, -, *, /, =, error) get their operands evaluated
any other name is looked up in the environment and must be a procedure

special forms and primitives are looked up before the environment
so a user definition named + can be defined, but (+ 1 2) still adds

arity is always checked before any operand is evaluated
the first runtime error aborts the whole evaluation, definitions done before it are kept
'''

import inspect
import sys
from typing import Any, Callable, Dict, List, Optional, Set, Type, Union, cast

from minscheme_base import SchemePanic, find_type, scheme_panic
from minscheme_lexer import integer_in_range, scan_source, stringify_token_full
from minscheme_parser import BooleanNode, GenericNode, IdentifierNode, IntegerNode, ListNode, StringNode, SyntaxNode, \
    install_stringify_node_rules, parse_tokens, stringify_node
from minscheme_value import BooleanVal, Environment, IntegerVal, ProcVal, SchemeEnvError, SchemeVal, StringVal, \
    env_define, env_extend, env_is_defined, env_is_visible, env_lookup, env_set, install_is_equal_rules, is_equal, \
    install_stringify_value_rules, is_truthy, make_nil, print_value, quote_node, stringify_value


# each call of a user procedure takes about a dozen python frames
sys.setrecursionlimit(10000)


class SchemeRuntimeError(Exception):
    def __init__(self, message: str, node: Optional[SyntaxNode] = None):
        self.message = message
        self.node = node

    def __str__(self) -> str:
        return 'RuntimeError: %s' % self.message


class SchemePrimError(Exception):
    '''raised inside primitive body, which does not know the node, turned into SchemeRuntimeError by caller'''

    def __init__(self, message: str):
        self.message = message


EvalRecurFuncType = Callable[[SyntaxNode, Environment], SchemeVal]
EvalFuncType = Callable[[SyntaxNode, Environment, EvalRecurFuncType], SchemeVal]

_eval_rules: Dict[Type, EvalFuncType] = {}


def update_eval_rules(rules: Dict[Type, EvalFuncType]):
    _eval_rules.update(rules)


def evaluate_nodes(nodes: List[SyntaxNode], env: Environment):
    def evaluate_recursive(node: SyntaxNode, env: Environment) -> SchemeVal:
        t = find_type(type(node), _eval_rules)
        f = _eval_rules[t]
        return f(node, env, evaluate_recursive)

    res: SchemeVal = make_nil()
    try:
        res = pure_eval_sequence(nodes, env, evaluate_recursive)
    except SchemeRuntimeError as err:
        scheme_panic(str(err))
    return res


def pure_eval_sequence(nodes: List[SyntaxNode], env: Environment, evl: EvalRecurFuncType):
    '''return the last value, empty sequence gives empty list'''
    res: SchemeVal = make_nil()
    for node in nodes:
        res = evl(node, env)
    return res


'''
evaluator rule definitions
'''

EvalRuleType = Union[
    Callable[[], SchemeVal],
    Callable[[GenericNode], SchemeVal],
    Callable[[GenericNode, Environment], SchemeVal],
    Callable[[GenericNode, Environment, EvalRecurFuncType], SchemeVal],
]


def eval_rule_decorator(rule_func: EvalRuleType):
    arity = len(inspect.getfullargspec(rule_func).args)

    def _eval_rule_wrapped(node: SyntaxNode, env: Environment, evl: EvalRecurFuncType):
        args: List[Any] = [node, env, evl]
        return rule_func(*args[0:arity])
    return _eval_rule_wrapped


@eval_rule_decorator
def eval_identifier(node: IdentifierNode, env: Environment):
    try:
        return env_lookup(env, node.name)
    except SchemeEnvError:
        raise SchemeRuntimeError('Identifier not found: %s' % node.name, node)


@eval_rule_decorator
def eval_integer(node: IntegerNode):
    return IntegerVal(node.value)


@eval_rule_decorator
def eval_boolean(node: BooleanNode):
    return BooleanVal(node.value)


@eval_rule_decorator
def eval_string(node: StringNode):
    return StringVal(node.value)


@eval_rule_decorator
def eval_list(node: ListNode, env: Environment, evl: EvalRecurFuncType):
    if len(node.contents) == 0:
        return make_nil()
    head = node.contents[0]
    if not isinstance(head, IdentifierNode):
        raise SchemeRuntimeError('First element in an expression must be an identifier: %s' % stringify_node(head), node)
    name = head.name
    if name in _special_form_rules:
        return _special_form_rules[name](node, env, evl)
    elif name in _primitives:
        return pure_eval_call_prim(node, _primitives[name], env, evl)
    else:
        return pure_eval_call_proc(node, env, evl)


def install_eval_rules():
    rules = {
        IdentifierNode: eval_identifier,
        IntegerNode: eval_integer,
        BooleanNode: eval_boolean,
        StringNode: eval_string,
        ListNode: eval_list,
    }
    update_eval_rules(rules)


'''arity and shape checking, shared by special forms, primitives and procedures'''


def pure_check_arity(node: ListNode, name: str, pos_arity: int, has_rest: bool):
    arg_count = len(node.contents)-1
    if has_rest:
        if arg_count < pos_arity:
            raise SchemeRuntimeError('%s expects at least %d arguments, but got %d: %s' % (
                name, pos_arity, arg_count, stringify_node(node)), node)
    else:
        if arg_count != pos_arity:
            raise SchemeRuntimeError('%s expects exactly %d arguments, but got %d: %s' % (
                name, pos_arity, arg_count, stringify_node(node)), node)


def pure_check_name(node: ListNode, keyword: str):
    name_node = node.contents[1]
    if not isinstance(name_node, IdentifierNode):
        raise SchemeRuntimeError('Bad variable name in \'%s\': %s' % (keyword, stringify_node(node)), node)
    return name_node.name


def check_duplicate_parameters(parameters: List[str]):
    '''if duplicate, return the second one; otherwise return None'''
    unq: Set[str] = set([])
    for p in parameters:
        if p in unq:
            return p
        else:
            unq.add(p)
    return None


'''special form rules, dispatched by name, operands not evaluated'''

_special_form_rules: Dict[str, EvalFuncType] = {}


def update_special_form_rules(rules: Dict[str, EvalFuncType]):
    _special_form_rules.update(rules)


@eval_rule_decorator
def eval_define(node: ListNode, env: Environment, evl: EvalRecurFuncType):
    '''return empty list'''
    pure_check_arity(node, 'define', 2, False)
    name = pure_check_name(node, 'define')
    if env_is_defined(env, name):
        raise SchemeRuntimeError('Variable already defined: %s' % name, node)
    initializer = evl(node.contents[2], env)
    try:
        env_define(env, name, initializer)
    except SchemeEnvError:
        # the initializer itself may have defined the name
        raise SchemeRuntimeError('Variable already defined: %s' % name, node)
    return make_nil()


@eval_rule_decorator
def eval_set(node: ListNode, env: Environment, evl: EvalRecurFuncType):
    '''return empty list'''
    pure_check_arity(node, 'set!', 2, False)
    name = pure_check_name(node, 'set!')
    if not env_is_visible(env, name):
        raise SchemeRuntimeError('Can\'t set! an undefined variable: %s' % name, node)
    initializer = evl(node.contents[2], env)
    env_set(env, name, initializer)
    return make_nil()


@eval_rule_decorator
def eval_lambda(node: ListNode, env: Environment):
    '''return the procedure, capturing the current environment'''
    pure_check_arity(node, 'lambda', 2, True)
    para_node = node.contents[1]
    if not isinstance(para_node, ListNode):
        raise SchemeRuntimeError('Bad argument list in \'lambda\' definition: %s' % stringify_node(node), node)
    pos_paras: List[str] = []
    for subnode in para_node.contents:
        if not isinstance(subnode, IdentifierNode):
            raise SchemeRuntimeError('Bad argument in \'lambda\': %s' % stringify_node(subnode), node)
        pos_paras.append(subnode.name)
    para_dup = check_duplicate_parameters(pos_paras)
    if para_dup is not None:
        raise SchemeRuntimeError('Duplicate parameter in \'lambda\': %s' % para_dup, node)
    return ProcVal(pos_paras, node.contents[2:], env)


@eval_rule_decorator
def eval_if(node: ListNode, env: Environment, evl: EvalRecurFuncType):
    '''return the selected branch'''
    pure_check_arity(node, 'if', 3, False)
    pred_val = evl(node.contents[1], env)
    if is_truthy(pred_val):
        return evl(node.contents[2], env)
    else:
        return evl(node.contents[3], env)


@eval_rule_decorator
def eval_and(node: ListNode, env: Environment, evl: EvalRecurFuncType):
    '''return the first false, otherwise the last, #t if empty'''
    res: SchemeVal = BooleanVal(True)
    for subnode in node.contents[1:]:
        res = evl(subnode, env)
        if not is_truthy(res):
            return res
    return res


@eval_rule_decorator
def eval_or(node: ListNode, env: Environment, evl: EvalRecurFuncType):
    '''return the first true, otherwise #f'''
    for subnode in node.contents[1:]:
        res = evl(subnode, env)
        if is_truthy(res):
            return res
    return BooleanVal(False)


@eval_rule_decorator
def eval_quote(node: ListNode):
    pure_check_arity(node, 'quote', 1, False)
    return quote_node(node.contents[1])


def install_special_form_rules():
    rules = {
        'define': eval_define,
        'set!': eval_set,
        'lambda': eval_lambda,
        'if': eval_if,
        'and': eval_and,
        'or': eval_or,
        'quote': eval_quote,
    }
    update_special_form_rules(rules)


'''procedure call'''


def pure_eval_call_proc(node: ListNode, env: Environment, evl: EvalRecurFuncType):
    name = cast(IdentifierNode, node.contents[0]).name
    try:
        operator = env_lookup(env, name)
    except SchemeEnvError:
        raise SchemeRuntimeError('Unknown function: %s' % name, node)
    if not isinstance(operator, ProcVal):
        raise SchemeRuntimeError('Undefined function call: %s is %s' % (name, stringify_value(operator)), node)
    pure_check_arity(node, name, len(operator.pos_paras), False)
    # arguments are evaluated in caller's environment
    operands = [evl(subnode, env) for subnode in node.contents[1:]]
    new_env = env_extend(operator.env, operator.pos_paras, operands)
    return pure_eval_sequence(operator.body, new_env, evl)


'''primitive definitions'''


class PrimVal:
    '''
    built-in operator, not a scheme value: it is never stored in environment, only found by name
    arity is read from the python function signature
    '''

    def __init__(self, name: str, pos_arity: int, has_rest: bool, body: Callable[..., SchemeVal]):
        self.name = name
        self.pos_arity = pos_arity
        self.has_rest = has_rest
        self.body = body


_primitives: Dict[str, PrimVal] = {}


def get_py_func_arity(py_func: Callable):
    rf = inspect.getfullargspec(py_func)
    return len(rf.args), rf.varargs is not None


def update_primitives(prims: Dict[str, Callable]):
    for name in prims:
        py_func = prims[name]
        pos_arity, has_rest = get_py_func_arity(py_func)
        _primitives[name] = PrimVal(name, pos_arity, has_rest, py_func)


def pure_eval_call_prim(node: ListNode, operator: PrimVal, env: Environment, evl: EvalRecurFuncType):
    pure_check_arity(node, operator.name, operator.pos_arity, operator.has_rest)
    operands = [evl(subnode, env) for subnode in node.contents[1:]]
    try:
        return operator.body(*operands)
    except SchemePrimError as err:
        raise SchemeRuntimeError(err.message, node)


def check_integer(name: str, sv: SchemeVal):
    if not isinstance(sv, IntegerVal):
        raise SchemePrimError('%s requires integer operands, now %s' % (name, stringify_value(sv)))
    return sv.value


def check_overflow(name: str, x: int):
    if not integer_in_range(x):
        raise SchemePrimError('Integer overflow in %s' % name)
    return x


def make_prim_int_fold(name: str, py_func: Callable[[int, int], int]):
    def _prim_int_fold(x: SchemeVal, y: SchemeVal, *rest: SchemeVal) -> SchemeVal:
        values = [check_integer(name, sv) for sv in [x, y, *rest]]
        res = values[0]
        for value in values[1:]:
            res = check_overflow(name, py_func(res, value))
        return IntegerVal(res)
    return _prim_int_fold


def make_prim_int2_int(name: str, py_func: Callable[[int, int], int]):
    def _prim_int2_int(x: SchemeVal, y: SchemeVal) -> SchemeVal:
        res = py_func(check_integer(name, x), check_integer(name, y))
        return IntegerVal(check_overflow(name, res))
    return _prim_int2_int


def integer_divide(x: int, y: int):
    '''truncate toward zero, python's // floors instead'''
    if y == 0:
        raise SchemePrimError('Division by zero')
    quotient = abs(x) // abs(y)
    return quotient if (x >= 0) == (y >= 0) else -quotient


prim_op_add = make_prim_int_fold('+', lambda a, b: a+b)
prim_op_mul = make_prim_int_fold('*', lambda a, b: a*b)
prim_op_sub = make_prim_int2_int('-', lambda a, b: a-b)
prim_op_div = make_prim_int2_int('/', integer_divide)


def prim_op_eq(x: SchemeVal, y: SchemeVal):
    '''only integers can be compared, after that it is plain value equality'''
    check_integer('=', x)
    check_integer('=', y)
    return BooleanVal(is_equal(x, y))


def prim_error(sv: SchemeVal):
    raise SchemePrimError(stringify_value(sv))


def install_primitives():
    prims = {
        '+': prim_op_add,
        '-': prim_op_sub,
        '*': prim_op_mul,
        '/': prim_op_div,
        '=': prim_op_eq,
        'error': prim_error,
    }
    update_primitives(prims)


'''entry point'''


def make_global_env():
    return Environment({})


def run_source(source: str, env: Environment):
    '''
    evaluate one chunk of source code, return the print form of the last value
    can be called repeatedly on the same env to accumulate definitions, as repl does
    every error is turned into panic, whose message is the rendered error
    '''
    tokens = scan_source(source)
    nodes = parse_tokens(tokens)
    result = evaluate_nodes(nodes, env)
    return print_value(result)


def install_rules():
    install_stringify_node_rules()
    install_stringify_value_rules()
    install_is_equal_rules()
    install_eval_rules()
    install_special_form_rules()
    install_primitives()


'''tests'''


def test_one(source: str, **kargs: str):
    '''
    each test tries to execute the source code as much as possible
    capture the panic and result
    print them and compare to expected value
    '''

    # source
    source = source.strip()
    print('* source: %s' % source)
    try:
        # scan
        tokens = scan_source(source)
        token_str = ', '.join([stringify_token_full(t) for t in tokens])
        print('* tokens: %s' % token_str)
        if 'tokens' in kargs:
            assert token_str == kargs['tokens']

        # parse
        nodes = parse_tokens(tokens)
        nodes_str = ' '.join([stringify_node(node) for node in nodes])
        print('* nodes: %s' % nodes_str)
        if 'nodes' in kargs:
            assert nodes_str == kargs['nodes']

        # evaluate
        glbenv = make_global_env()
        result = evaluate_nodes(nodes, glbenv)
        result_str = print_value(result)
        print('* result: %s' % result_str)
        if 'result' in kargs:
            assert result_str == kargs['result']
    except SchemePanic as err:
        # any kind of panic
        print('* panic: %s' % err.message)
        assert err.message == kargs['panic']
    print('----------')


def test_literal():
    test_one('1', tokens='INTEGER:1', result='1')
    test_one('-7', result='-7')
    test_one('#t', result='#t')
    test_one('"dali"', tokens='STRING:dali', result='"dali"')
    test_one('', tokens='', nodes='', result='\'()')
    test_one('()', result='\'()')
    test_one('1 2 3', result='3')


def test_quote():
    test_one('(quote (1 2 3))', result='\'(1 2 3)')
    test_one('(quote a)', result='\'a')
    test_one('(quote #t)', result='#t')
    test_one('(quote 1)', result='1')
    test_one('(quote ())', result='\'()')
    test_one('(quote (a (b "c") #f))', result='\'(a (b "c") #f)')
    # never evaluated
    test_one('(quote (error 5))', result='\'(error 5)')
    test_one('(define x (quote a)) x', result='\'a')
    test_one(
        '(quote)',
        panic='RuntimeError: quote expects exactly 1 arguments, but got 0: (quote)'
    )


def test_arithmetic():
    test_one(
        '(+ 2 3)',
        tokens='OPEN_PAREN, IDENTIFIER:+, INTEGER:2, INTEGER:3, CLOSE_PAREN',
        nodes='(+ 2 3)',
        result='5'
    )
    test_one('(- 9 4)', result='5')
    test_one('(* 5 5 5)', result='125')
    test_one('(+ 2 (+ 1 (- 9 3)))', result='9')
    test_one('(+ -4 +1 -713 -5 6)', result='-715')
    test_one('(/ 7 2)', result='3')
    test_one('(/ -7 2)', result='-3')
    test_one('(/ 7 -2)', result='-3')
    test_one('(/ -7 -2)', result='3')
    test_one('(= 4 4)', result='#t')
    test_one('(= 4 5)', result='#f')
    test_one('(= -3 (- 0 3))', result='#t')
    test_one(
        '(/ 7 0)',
        panic='RuntimeError: Division by zero'
    )
    test_one(
        '(+ 1)',
        panic='RuntimeError: + expects at least 2 arguments, but got 1: (+ 1)'
    )
    test_one(
        '(- 1 2 3)',
        panic='RuntimeError: - expects exactly 2 arguments, but got 3: (- 1 2 3)'
    )
    # arity is checked before operands are evaluated
    test_one(
        '(- (error 1) 2 3)',
        panic='RuntimeError: - expects exactly 2 arguments, but got 3: (- (error 1) 2 3)'
    )
    test_one(
        '(+ 1 "a")',
        panic='RuntimeError: + requires integer operands, now "a"'
    )
    test_one(
        '(= 1 #t)',
        panic='RuntimeError: = requires integer operands, now #t'
    )
    test_one(
        '(* 2 (quote (1)))',
        panic='RuntimeError: * requires integer operands, now (1)'
    )


def test_overflow():
    test_one('(+ 9223372036854775806 1)', result='9223372036854775807')
    test_one(
        '(+ 9223372036854775807 1)',
        panic='RuntimeError: Integer overflow in +'
    )
    test_one(
        '(* 3037000500 3037000500)',
        panic='RuntimeError: Integer overflow in *'
    )
    test_one(
        '(- -9223372036854775808 1)',
        panic='RuntimeError: Integer overflow in -'
    )
    test_one(
        '(/ -9223372036854775808 -1)',
        panic='RuntimeError: Integer overflow in /'
    )


def test_define_set():
    test_one('(define x 3)\n(+ x 2)', result='5')
    test_one('(define x 1)', result='\'()')
    test_one(
        '(define x 3)\n(define x 5)',
        panic='RuntimeError: Variable already defined: x'
    )
    test_one('(define x 5) (set! x 4) (/ (+ x 1 2 3) 2)', result='5')
    test_one('(define x 5) (set! x 4)', result='\'()')
    test_one(
        '(set! x 5)',
        panic='RuntimeError: Can\'t set! an undefined variable: x'
    )
    # value not evaluated when name check fails
    test_one(
        '(set! x (error 1))',
        panic='RuntimeError: Can\'t set! an undefined variable: x'
    )
    test_one(
        '(define 1 2)',
        panic='RuntimeError: Bad variable name in \'define\': (define 1 2)'
    )
    test_one(
        '(define x 1) (set! "x" 2)',
        panic='RuntimeError: Bad variable name in \'set!\': (set! "x" 2)'
    )
    test_one(
        '(define x)',
        panic='RuntimeError: define expects exactly 2 arguments, but got 1: (define x)'
    )
    test_one(
        '(set! x 1 2)',
        panic='RuntimeError: set! expects exactly 2 arguments, but got 3: (set! x 1 2)'
    )
    test_one(
        '(define x (define x 1))',
        panic='RuntimeError: Variable already defined: x'
    )


def test_if():
    test_one('(if #t 5 4)', result='5')
    test_one('(if #f 4 5)', result='5')
    test_one('(if (= 4 4) 4 5)', result='4')
    test_one('(if 0 1 2)', result='1')
    test_one('(if (quote ()) 1 2)', result='1')
    test_one('(if #f (error 1) 2)', result='2')
    test_one(
        '(if #t 1)',
        panic='RuntimeError: if expects exactly 3 arguments, but got 2: (if #t 1)'
    )


def test_and_or():
    test_one('(and)', result='#t')
    test_one('(and #t)', result='#t')
    test_one('(and 1 2 3)', result='3')
    test_one('(and 2 #f 3)', result='#f')
    test_one('(and 4 #f (error 5))', result='#f')
    test_one('(or)', result='#f')
    test_one('(or #f)', result='#f')
    test_one('(or 1 2)', result='1')
    test_one('(or 1 #f)', result='1')
    test_one('(or #f 5)', result='5')
    test_one('(or #f #f)', result='#f')
    test_one('(or 1 (error 5))', result='1')
    test_one(
        '(and 1 (error 5))',
        panic='RuntimeError: 5'
    )


def test_lambda():
    test_one('(lambda (x) x)', result='#<procedure>')
    test_one('(define inc (lambda (x) (+ x 1))) (inc 4)', result='5')
    test_one('(define f (lambda () 7)) (f)', result='7')
    # body is not evaluated on creation
    test_one('(lambda () (error 1))', result='#<procedure>')
    # body of several forms returns the last
    test_one(
        '''
        (define count 0)
        (define incr (lambda () (set! count (+ count 1)) count))
        (incr)
        (incr)
        ''',
        result='2'
    )
    # recursion
    test_one(
        '''
        (define fact
          (lambda (n)
            (if (= n 0)
              1
              (* n (fact (- n 1))))))
        (fact 10)
        ''',
        result='3628800'
    )
    test_one(
        '(lambda (x))',
        panic='RuntimeError: lambda expects at least 2 arguments, but got 1: (lambda (x))'
    )
    test_one(
        '(lambda x x)',
        panic='RuntimeError: Bad argument list in \'lambda\' definition: (lambda x x)'
    )
    test_one(
        '(lambda (x 1) x)',
        panic='RuntimeError: Bad argument in \'lambda\': 1'
    )
    test_one(
        '(lambda (x y x) x)',
        panic='RuntimeError: Duplicate parameter in \'lambda\': x'
    )


def test_call():
    test_one(
        '(f 1)',
        panic='RuntimeError: Unknown function: f'
    )
    test_one(
        '(define f 1) (f 2)',
        panic='RuntimeError: Undefined function call: f is 1'
    )
    test_one(
        '(define f (lambda (a b) a)) (f 1)',
        panic='RuntimeError: f expects exactly 2 arguments, but got 1: (f 1)'
    )
    test_one(
        '(1 2)',
        panic='RuntimeError: First element in an expression must be an identifier: 1'
    )
    test_one(
        '((lambda (x) x) 1)',
        panic='RuntimeError: First element in an expression must be an identifier: (lambda (x) x)'
    )
    # arguments are evaluated in caller's environment
    test_one(
        '''
        (define g (lambda (a) a))
        (define h (lambda (b) (g b)))
        (h 3)
        ''',
        result='3'
    )
    # primitives take precedence over user definitions
    test_one('(define + (lambda (a b) a)) (+ 1 2)', result='3')


def test_scope():
    # procedure captures the environment where it is created
    test_one(
        '''
        (define make-adder (lambda (n) (lambda (x) (+ x n))))
        (define add2 (make-adder 2))
        (add2 5)
        ''',
        result='7'
    )
    # free name is resolved where the procedure is defined, not where it is called
    test_one(
        '''
        (define y 1)
        (define get-y (lambda () y))
        (define f (lambda (y) (get-y)))
        (f 100)
        ''',
        result='1'
    )
    # each call gets a fresh frame
    test_one(
        '''
        (define f (lambda () (define z 1) z))
        (f)
        (f)
        ''',
        result='1'
    )
    test_one(
        '''
        (define f (lambda () (define z 1) z))
        (f)
        z
        ''',
        panic='RuntimeError: Identifier not found: z'
    )
    # parameter shadows global, set! changes the nearest binding
    test_one(
        '''
        (define x 1)
        (define f (lambda (x) (set! x 10) x))
        (+ (f 2) x)
        ''',
        result='11'
    )
    test_one(
        '''
        (define make-counter
          (lambda ()
            (define n 0)
            (lambda () (set! n (+ n 1)) n)))
        (define c1 (make-counter))
        (define c2 (make-counter))
        (c1)
        (c1)
        (c2)
        (+ (c1) (* 10 (c2)))
        ''',
        result='23'
    )


def test_error():
    test_one(
        'x',
        panic='RuntimeError: Identifier not found: x'
    )
    test_one(
        '(error 5)',
        panic='RuntimeError: 5'
    )
    test_one(
        '(error "boom")',
        panic='RuntimeError: "boom"'
    )
    test_one(
        '(error (quote (a b)))',
        panic='RuntimeError: (a b)'
    )
    test_one(
        '(error)',
        panic='RuntimeError: error expects exactly 1 arguments, but got 0: (error)'
    )
    test_one(
        '(33^3)',
        panic='SyntaxError: Unexpected symbol \'^\'. Expected white space or closing paren. (line: 1, column: 4)'
    )
    test_one(
        '(+ 1 2',
        panic='ParseError: Unexpected end of input'
    )
    test_one(
        '(+ 1 2))',
        panic='ParseError: Closing parens don\'t match the opening ones'
    )


def test_session():
    '''same environment shared by several chunks, like repl'''
    glbenv = make_global_env()
    assert run_source('(define x 3)', glbenv) == '\'()'
    assert run_source('(+ x 2)', glbenv) == '5'
    assert run_source('', glbenv) == '\'()'
    assert run_source('(define inc (lambda (n) (+ n 1)))', glbenv) == '\'()'
    assert run_source('(inc x)', glbenv) == '4'

    # error aborts the rest of the chunk, but keeps what is done before
    try:
        run_source('(define a 1) (error "x") (define b 2)', glbenv)
        assert False
    except SchemePanic as err:
        assert err.message == 'RuntimeError: "x"'
    assert run_source('a', glbenv) == '1'
    try:
        run_source('b', glbenv)
        assert False
    except SchemePanic as err:
        assert err.message == 'RuntimeError: Identifier not found: b'

    # lexical and structural errors do not touch the environment
    for source in ['(define c 1) (1^', '(define c 1) (']:
        try:
            run_source(source, glbenv)
            assert False
        except SchemePanic:
            pass
        try:
            run_source('c', glbenv)
            assert False
        except SchemePanic as err:
            assert err.message == 'RuntimeError: Identifier not found: c'


def test_deep_recursion():
    test_one(
        '''
        (define count-down (lambda (n) (if (= n 0) 0 (+ 1 (count-down (- n 1))))))
        (count-down 300)
        ''',
        result='300'
    )


def test():
    test_literal()
    test_quote()
    test_arithmetic()
    test_overflow()
    test_define_set()
    test_if()
    test_and_or()
    test_lambda()
    test_call()
    test_scope()
    test_error()
    test_session()
    test_deep_recursion()


if __name__ == '__main__':
    install_rules()
    test()
