import pytest

from para import tokens as tk
from para.annotator import annotate
from para.errors import ParseError
from para.lexer import tokenize
from para.types import FloatVal, IntVal, StrVal


def annotated(source):
    return annotate(tokenize(source))


def roles(source):
    return [t.role for t in annotated(source)]


def expression_of(source):
    return next(t for t in annotated(source) if t.role == tk.R_EXPRESSION)


def test_definition_roles():
    toks = annotated('x : int = 5')
    assert [t.role for t in toks] == [tk.R_IDENTIFIER, tk.R_TYPE, tk.R_VALUE_ASSIGN, tk.R_VALUE, tk.R_EOF]
    assert toks[1].value_type == 'int'
    assert toks[3].value == IntVal(5)
    assert toks[3].value_type == 'int'


def test_lookup_after_assignment():
    toks = annotated('y = x\nz = 1')
    assert toks[2].role == tk.R_LOOKUP
    # The flag resets at the newline
    assert toks[4].role == tk.R_IDENTIFIER


def test_inline_group_path():
    toks = annotated('person -> age : int = 25')
    assert [t.role for t in toks[:3]] == [tk.R_GROUP, tk.R_ARROW, tk.R_IDENTIFIER]
    assert [t.token_number for t in toks[:3]] == [1, 2, 3]


def test_qualified_lookup():
    toks = annotated('copy = person -> age')
    assert [t.role for t in toks] == [
        tk.R_IDENTIFIER, tk.R_VALUE_ASSIGN, tk.R_GROUP, tk.R_ARROW, tk.R_LOOKUP, tk.R_EOF,
    ]


def test_block_splices_group_path():
    toks = annotated('a -> b -> {\n    x = 1\n}')
    assert [t.role for t in toks] == [
        tk.R_BLOCK_OPEN, tk.R_NEWLINE,
        tk.R_GROUP, tk.R_ARROW, tk.R_GROUP, tk.R_ARROW, tk.R_IDENTIFIER,
        tk.R_VALUE_ASSIGN, tk.R_VALUE, tk.R_NEWLINE,
        tk.R_BLOCK_CLOSE, tk.R_EOF,
    ]
    assert toks[0].literal == 'a-> b'
    assert [t.literal for t in toks[2:7:2]] == ['a', 'b', 'x']
    assert toks[2].synthetic and toks[3].synthetic
    assert not toks[6].synthetic


def test_multi_segment_block_closes_fully():
    toks = annotated('a -> b -> {\n    x = 1\n}\ny = 2')
    close = [t.role for t in toks].index(tk.R_BLOCK_CLOSE)
    tail = toks[close + 1:]
    assert not any(t.role == tk.R_GROUP for t in tail)
    assert [t.literal for t in tail if t.role == tk.R_IDENTIFIER] == ['y']


def test_block_splices_right_hand_lookup():
    toks = annotated('g -> {\n    y = x\n}')
    i = [t.role for t in toks].index(tk.R_VALUE_ASSIGN)
    rhs = toks[i + 1:i + 4]
    assert [(t.role, t.literal) for t in rhs] == [
        (tk.R_GROUP, 'g'), (tk.R_ARROW, '->'), (tk.R_LOOKUP, 'x'),
    ]


def test_nested_blocks_close_in_order():
    source = 'outer -> {\n    inner -> {\n        v = 1\n    }\n    w = 2\n}\nroot = 3'
    toks = annotated(source)
    idents = [t for t in toks if t.role == tk.R_IDENTIFIER]
    paths = []
    for ident in idents:
        i = toks.index(ident)
        prefix = [t.literal for t in toks[:i] if t.role == tk.R_GROUP and t.line == ident.line]
        paths.append(prefix + [ident.literal])
    assert paths == [['outer', 'inner', 'v'], ['outer', 'w'], ['root']]


def test_typed_group_synthesises_member_type():
    toks = annotated('stats -> : float {\n    speed = 3\n    label : string = "x"\n}')
    assert toks[0].role == tk.R_BLOCK_OPEN
    assert toks[0].value_type == 'float'
    types = [t for t in toks if t.role == tk.R_TYPE]
    assert [(t.literal, t.synthetic) for t in types] == [('float', True), ('string', False)]


def test_modifiers_fold_into_identifier():
    for source in ('x : muta temp int = 1', 'x : int muta temp = 1', 'x muta temp = 1'):
        ident = annotated(source)[0]
        assert ident.role == tk.R_IDENTIFIER
        assert ident.mutable and ident.temp, source
    ident = annotated('x : const int = 1')[0]
    assert ident.const and not ident.mutable


def test_literal_values():
    toks = annotated('a = 1.5\nb = "hi\\n"\nc = null')
    values = [t for t in toks if t.role == tk.R_VALUE]
    assert values[0].value == FloatVal(1.5)
    assert values[1].value == StrVal('hi\n')
    assert values[2].value_type == 'null'


def test_string_escapes():
    toks = annotated('s = "C:\\xfiles\\q \\t\\"\\\\"')
    value = next(t for t in toks if t.role == tk.R_VALUE)
    assert value.value == StrVal('C:\\xfiles\\q \t"\\')


def test_expression_extracted():
    toks = annotated('a = 1 + b\nc = 2')
    assert [t.role for t in toks[:4]] == [tk.R_IDENTIFIER, tk.R_VALUE_ASSIGN, tk.R_EXPRESSION, tk.R_NEWLINE]
    items = toks[2].expression
    assert [(t.role, t.literal) for t in items] == [
        (tk.R_VALUE, '1'), (tk.R_OPERATOR, '+'), (tk.R_LOOKUP, 'b'),
    ]


def test_implicit_multiplication():
    assert [t.literal for t in expression_of('a = 2 (3 + 4)').expression] == \
        ['2', '*', '(', '3', '+', '4', ')']
    assert [t.literal for t in expression_of('a = (1 + 2)(3)').expression] == \
        ['(', '1', '+', '2', ')', '*', '(', '3', ')']
    assert [t.literal for t in expression_of('a = (1 + 2) x').expression] == \
        ['(', '1', '+', '2', ')', '*', 'x']


def test_inspect_ends_right_hand_side():
    toks = annotated('x = 1 + 2 ?')
    assert [t.role for t in toks] == [
        tk.R_IDENTIFIER, tk.R_VALUE_ASSIGN, tk.R_EXPRESSION, tk.R_INSPECT, tk.R_EOF,
    ]
    assert toks[3].token_number == 6


@pytest.mark.parametrize('source, kind', [
    ('x = 1 = 2', 'MultipleAssignments'),
    ('x =\ny = 1', 'EmptyExpression'),
    ('x y = 1', 'DoubleIdentifier'),
    ('}', 'MalformedGroup'),
    ('a -> {\n    x = 1\n', 'MalformedGroup'),
    ('a -> = 1', 'MalformedGroup'),
    ('-> a = 1', 'MalformedGroup'),
    ('x : muta const int = 1', 'ConflictingModifiers'),
    ('muta x = 1', 'MisplacedModifier'),
    ('x : = 1', 'MissingType'),
    ('x = 3000000000', 'IntegerOverflow'),
    ('x = 1 2', 'UnexpectedToken'),
])
def test_structural_errors(source, kind):
    with pytest.raises(ParseError) as exc:
        annotated(source)
    assert exc.value.kind == kind
    assert exc.value.err.line is not None


def test_missing_eof():
    with pytest.raises(ParseError) as exc:
        annotate(tokenize('x = 1')[:-1])
    assert exc.value.kind == 'MissingEOF'
