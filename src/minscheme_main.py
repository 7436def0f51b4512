'''
command line front end

evaluate program files given as arguments, then optionally enter a plain read loop
all of them share one global environment, so definitions in files are visible in the loop

output goes through scheme_print, so tests can capture it with scheme_flush
no line editing, history or color here, input() is good enough
'''

import argparse
import os
import tempfile
from typing import List, Optional

from minscheme_base import SchemePanic, scheme_config, scheme_flush, scheme_print
from minscheme_evaluator import install_rules, make_global_env, run_source
from minscheme_value import Environment


BANNER = 'Interactive MinScheme (0.1.0) - type quit or press Ctrl-D to exit'
RECURSION_MESSAGE = 'RuntimeError: Too much recursion'


def run_file(path: str, env: Environment):
    with open(path) as f:
        source = f.read()
    return run_source(source, env)


def repl(env: Environment, prompt: str = '> '):
    while True:
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            scheme_print('\n')
            break
        source = line.strip()
        if len(source) == 0:
            continue
        if source == 'quit':
            break
        try:
            scheme_print(run_source(source, env) + '\n')
        except SchemePanic as err:
            scheme_print(err.message + '\n')
        except RecursionError:
            scheme_print(RECURSION_MESSAGE + '\n')


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(prog='minscheme', description='A minimal scheme interpreter')
    parser.add_argument('-i', '--interactive', action='store_true',
                        help='enter the read loop after evaluating files')
    parser.add_argument('files', nargs='*', help='program files, evaluated in order')
    args = parser.parse_args(argv)

    install_rules()
    glbenv = make_global_env()
    for path in args.files:
        try:
            scheme_print(run_file(path, glbenv) + '\n')
        except SchemePanic as err:
            scheme_print('[in %s] %s\n' % (path, err.message))
            return 1
        except RecursionError:
            scheme_print('[in %s] %s\n' % (path, RECURSION_MESSAGE))
            return 1
    if len(args.files) == 0 or args.interactive:
        scheme_print(BANNER + '\n')
        repl(glbenv)
    return 0


def console_main():
    '''entry of console script, output goes to console directly'''
    scheme_config['suppress_print'] = False
    exit(main())


'''tests'''


def _feed_input(lines: List[str]):
    '''replace builtin input with a fake one reading from lines'''
    import builtins
    original_input = builtins.input
    remaining = list(lines)

    def _fake_input(prompt: str = ''):
        if len(remaining) == 0:
            raise EOFError()
        return remaining.pop(0)
    builtins.input = _fake_input
    return lambda: setattr(builtins, 'input', original_input)


def test_repl():
    scheme_flush()
    restore = _feed_input(['(define x 3)', '', '(+ x 2)', '(set! y 1)', '(+ x', '(quote (a b))'])
    try:
        repl(make_global_env())
    finally:
        restore()
    output = scheme_flush()
    print(output)
    assert output == '\'()\n5\nRuntimeError: Can\'t set! an undefined variable: y\n' \
        'ParseError: Unexpected end of input\n\'(a b)\n\n'


def test_repl_quit():
    scheme_flush()
    restore = _feed_input(['1', 'quit', '2'])
    try:
        repl(make_global_env())
    finally:
        restore()
    assert scheme_flush() == '1\n'


def test_repl_recursion():
    scheme_flush()
    restore = _feed_input(['(define loop (lambda (n) (+ 1 (loop n))))', '(loop 1)', '(+ 1 2)'])
    try:
        repl(make_global_env())
    finally:
        restore()
    output = scheme_flush()
    print(output)
    assert output == '\'()\n%s\n3\n\n' % RECURSION_MESSAGE


def test_main():
    with tempfile.TemporaryDirectory() as dirname:
        lib_path = os.path.join(dirname, 'lib.scm')
        with open(lib_path, 'w') as f:
            f.write('(define square (lambda (x) (* x x)))\n')
        main_path = os.path.join(dirname, 'main.scm')
        with open(main_path, 'w') as f:
            f.write('(define y 4)\n(square y)\n')
        bad_path = os.path.join(dirname, 'bad.scm')
        with open(bad_path, 'w') as f:
            f.write('(square "a")\n')
        loop_path = os.path.join(dirname, 'loop.scm')
        with open(loop_path, 'w') as f:
            f.write('(define loop (lambda (n) (+ 1 (loop n))))\n(loop 1)\n')

        scheme_flush()
        assert main([lib_path, main_path]) == 0
        assert scheme_flush() == '\'()\n16\n'

        assert main([lib_path, bad_path, main_path]) == 1
        assert scheme_flush() == '\'()\n[in %s] RuntimeError: * requires integer operands, now "a"\n' % bad_path

        assert main([loop_path, main_path]) == 1
        assert scheme_flush() == '[in %s] %s\n' % (loop_path, RECURSION_MESSAGE)

        restore = _feed_input(['(square 5)'])
        try:
            assert main(['-i', lib_path]) == 0
        finally:
            restore()
        assert scheme_flush() == '\'()\n%s\n25\n\n' % BANNER


def test():
    test_repl()
    test_repl_quit()
    test_repl_recursion()
    test_main()


if __name__ == '__main__':
    install_rules()
    test()
