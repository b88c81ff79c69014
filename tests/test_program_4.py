from pathlib import Path

from para.interpreter import compile_module
from para.reporting import dump_scope

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_4(capsys):
    interp = compile_module(str(EXAMPLES / 'program_4.para'))
    out = capsys.readouterr().out.strip().splitlines()
    assert out == [
        '[14:2] counter : int = 2',
        '[15:4] person-> nick : string = "Bob"',
        '[16:4] stats-> speed : float = 3.0',
    ]
    assert dump_scope(interp.tree) == (
        '// Root scope variables\n'
        'nickname : string = "Bob"\n'
        'counter : int = 2 [muta]\n'
        '\n'
        '// person-> scope variables\n'
        'person-> name : string = "Alice"\n'
        'person-> nick : string = "Bob"\n'
        'person-> greeting : string = "Alice"\n'
        '\n'
        '// stats-> scope variables\n'
        'stats-> speed : float = 3.0\n'
        'stats-> ratio : float = 0.25\n'
    )
