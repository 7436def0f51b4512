'''
shared plumbing for every stage of the interpreter

the pipeline is split into several modules: lexer, parser, value, evaluator
they all report errors and output through the functions here, so the behavior can be switched in one place
'''

import sys
from typing import Any, Dict, List, Type


'''basic formatting'''


def format_bool(x: bool):
    return '#t' if x else '#f'


'''dynamic dispatching by type'''


def find_type(cur_type: Type[object], type_dict: Dict[Type, Any]):
    '''searching cur_type in the type hierarchy, until finding a base class in type_dict'''
    while cur_type != object:
        if cur_type in type_dict:
            return cur_type
        else:
            cur_type = cur_type.__base__
    return cur_type


'''
global config

with suppress_panic being True
error will not exit process directly
instead error is turned into panic, handled by the caller (test_one, or the repl)

with suppress_print being True
print will not go to console directly
instead it is buffered, and later explicitly dumped as string

both make test easier
'''

scheme_config = {
    'suppress_panic': True,
    'suppress_print': True
}


class SchemePanic(Exception):
    def __init__(self, message: str):
        self.message = message

    def __str__(self) -> str:
        return self.message


def scheme_panic(message: str):
    if scheme_config['suppress_panic']:
        raise SchemePanic(message)
    else:
        print(message, file=sys.stderr)
        exit(1)


_scheme_buf: List[str] = []


def scheme_print(message: str):
    if scheme_config['suppress_print']:
        _scheme_buf.append(message)
    else:
        print(message, end='')


def scheme_flush():
    res = ''.join(_scheme_buf)
    _scheme_buf.clear()
    return res


def test_panic():
    scheme_config['suppress_panic'] = True
    try:
        scheme_panic('RuntimeError: 5')
        assert False
    except SchemePanic as err:
        assert err.message == 'RuntimeError: 5'
        assert str(err) == 'RuntimeError: 5'


def test_print():
    scheme_config['suppress_print'] = True
    scheme_print('a')
    scheme_print('\n')
    scheme_print('b')
    assert scheme_flush() == 'a\nb'
    assert scheme_flush() == ''


def test_find_type():
    class A:
        pass

    class B(A):
        pass

    assert find_type(B, {A: 1}) == A
    assert find_type(A, {B: 1}) == object
    assert format_bool(True) == '#t'
    assert format_bool(False) == '#f'


def test():
    test_panic()
    test_print()
    test_find_type()


if __name__ == '__main__':
    test()
