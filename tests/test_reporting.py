from para.annotator import annotate
from para.interpreter import Interpreter
from para.lexer import tokenize
from para.reporting import dump_scope, format_inspect, render_baked, render_flat
from para.scope import ScopeTree
from para.types import BoolVal, FloatVal, IntVal, StrVal

SOURCE = '''\
base : int = 30
person -> {
    age : int = base
    name = "Ann"
}
copy = person -> age
t : temp int = 2
total : muta int = t * 3 + 1
'''


def build(source):
    tokens = annotate(tokenize(source))
    return tokens, Interpreter().interpret(tokens)


def test_render_flat_qualifies_every_statement():
    tokens, _ = build(SOURCE)
    assert render_flat(tokens) == (
        'base :int = 30\n'
        'person-> age :int = person-> base\n'
        'person-> name = "Ann"\n'
        'copy = person-> age\n'
        't temp :int = 2\n'
        'total muta :int = t * 3 + 1\n'
    )


def test_render_flat_reparses_to_same_tree():
    tokens, tree = build(SOURCE)
    _, again = build(render_flat(tokens))
    assert again == tree


def test_render_baked_substitutes_values_and_drops_temp():
    tokens, tree = build(SOURCE)
    assert render_baked(tokens, tree) == (
        'base :int = 30\n'
        'person-> age :int = 30\n'
        'person-> name = "Ann"\n'
        'copy = 30\n'
        'total muta :int = 2 * 3 + 1\n'
    )


def test_render_empty():
    assert render_flat(annotate(tokenize(''))) == ''


def test_dump_scope():
    _, tree = build(SOURCE)
    assert dump_scope(tree) == (
        '// Root scope variables\n'
        'base : int = 30\n'
        'copy : int = 30\n'
        'total : int = 7 [muta]\n'
        '\n'
        '// person-> scope variables\n'
        'person-> age : int = 30\n'
        'person-> name : string = "Ann"\n'
    )
    assert 't : int = 2 [temp]\n' in dump_scope(tree, include_temp=True)


def test_dump_nested_scopes_depth_first():
    tree = ScopeTree()
    tree.assign(['a', 'b', 'x'], BoolVal(False))
    tree.assign(['c', 'y'], FloatVal(0.5))
    tree.assign(['a', 'z'], StrVal('q"uote'))
    assert dump_scope(tree) == (
        '// Root scope variables\n'
        '\n'
        '// a-> scope variables\n'
        'a-> z : string = "q\\"uote"\n'
        '\n'
        '// a-> b-> scope variables\n'
        'a-> b-> x : bool = FALSE\n'
        '\n'
        '// c-> scope variables\n'
        'c-> y : float = 0.5\n'
    )


def test_format_inspect():
    assert format_inspect(3, 2, 'x', 'int', '5') == '[3:2] x : int = 5'
    assert format_inspect(1, 4, 'g-> y') == '[1:4] g-> y : undefined = (nothing)'
    assert format_inspect(1, 1, None) == '[1:1] undefined'


def test_dump_empty_tree():
    tree = ScopeTree()
    tree.assign(['n'], IntVal(-3))
    assert dump_scope(tree) == '// Root scope variables\nn : int = -3\n'
