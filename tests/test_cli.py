import json

import pytest

from para.__main__ import main

PROGRAM = '''\
base : int = 4
box -> {
    side = base
    area = 16
}
box -> side ?
'''


@pytest.fixture
def program(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / 'shape.para'
    path.write_text(PROGRAM, encoding='utf-8')
    return path


def test_run_prints_inspections(program, capsys):
    main([str(program)])
    assert capsys.readouterr().out == '[6:4] box-> side : int = 4\n'


def test_dump(program, capsys):
    main(['--dump', str(program)])
    out = capsys.readouterr().out
    assert out.startswith('[6:4] box-> side : int = 4\n// Root scope variables\nbase : int = 4\n')
    assert 'box-> area : int = 16\n' in out


def test_emit_flat(program, capsys):
    main(['--emit-flat', str(program)])
    out_path = program.with_name('shape.f.para')
    assert capsys.readouterr().out.strip() == str(out_path)
    assert out_path.read_text(encoding='utf-8') == (
        'base :int = 4\n'
        'box-> side = box-> base\n'
        'box-> area = 16\n'
        'box-> side ?\n'
    )


def test_emit_baked(program, capsys):
    main(['--emit-baked', str(program)])
    out_path = program.with_name('shape.baked.para')
    assert capsys.readouterr().out.strip().endswith(str(out_path))
    assert 'box-> side = 4\n' in out_path.read_text(encoding='utf-8')


def test_emit_state(program, capsys):
    main(['--emit-state', str(program)])
    out_path = program.with_name('shape.state.json')
    assert capsys.readouterr().out.strip().endswith(str(out_path))
    data = json.loads(out_path.read_text(encoding='utf-8'))
    assert data['scopes']['box']['variables']['side']['value'] == 4


def test_tokens(program, capsys):
    main(['--tokens', str(program)])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "[1:1] IDENTIFIER 'base'"
    assert lines[1] == "[1:2] TYPE 'int' :int"
    assert lines[-1].split()[1] == 'EOF'


def test_verbose_writes_debug_file(program, tmp_path):
    main(['-vv', str(program)])
    debug = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'assign base : int = 4' in debug
    assert 'fallback box-> base -> base' in debug


def test_error_exits_non_zero(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    bad = tmp_path / 'bad.para'
    bad.write_text('x = 1\nx = 2\n', encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main([str(bad)])
    assert exc.value.code == 1
    assert capsys.readouterr().err.strip() == 'Error: [2:1] ImmutableVariable: x: cannot reassign an immutable variable'


def test_requires_para_extension(tmp_path, capsys):
    other = tmp_path / 'prog.txt'
    other.write_text('x = 1\n', encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main([str(other)])
    assert exc.value.code == 1
    assert 'must have a .para extension' in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / 'nope.para')])
    assert exc.value.code == 1
    assert 'not found' in capsys.readouterr().err
