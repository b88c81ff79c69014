from pathlib import Path

import pytest

from para.errors import EvaluationError
from para.interpreter import compile_module

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_6(capsys):
    with pytest.raises(EvaluationError) as exc:
        compile_module(str(EXAMPLES / 'program_6.para'))
    assert exc.value.kind == 'DivisionByZero'
    assert exc.value.err.line == 3
    assert exc.value.err.token == 6
    # Nothing is inspected once the file fails
    assert capsys.readouterr().out == ''
