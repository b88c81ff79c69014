"""CLI entry point for the Para interpreter.

Usage:
    python -m para [-v|-vv|-vvv] <program_file>
    python -m para [-v...] --emit-flat <program_file>
    python -m para [-v...] --emit-baked <program_file>
    python -m para [-v...] --dump <program_file>
    python -m para [-v...] --emit-state <program_file>
    python -m para --tokens <program_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-flat   Annotate the given .para file and write FILE.f.para, one
                fully qualified statement per line
  --emit-baked  Interpret the given .para file and write FILE.baked.para,
                the flattened source with references replaced by values
  --dump        Interpret the given .para file and print every variable
  --emit-state  Interpret the given .para file and write FILE.state.json
  --tokens      Print the annotated token stream of the given .para file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Inspect (`?`) lines are always printed to
standard output.
"""

import argparse
import json
import sys
from contextlib import nullcontext
from pathlib import Path

from .annotator import annotate
from .errors import ParaError
from .interpreter import Interpreter
from .lexer import tokenize
from .reporting import dump_scope, render_baked, render_flat
from .state_json import scope_to_obj

EXTENSION = '.para'


def read_program(name: str) -> str:
    program_file = Path(name)
    if program_file.suffix != EXTENSION:
        print(f"Error: file {program_file} must have a {EXTENSION} extension", file=sys.stderr)
        sys.exit(1)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def write_output(out_path: Path, text: str) -> None:
    with open(out_path, 'w', encoding='utf-8') as out:
        out.write(text)
    print(str(out_path))


def describe_token(token) -> str:
    flags = ''.join(f" {name}" for name, on in
                    (('muta', token.mutable), ('temp', token.temp), ('const', token.const)) if on)
    text = f"[{token.line}:{token.token_number}] {token.role} {token.literal!r}{flags}"
    if token.value_type:
        text += f" :{token.value_type}"
    return text


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Para language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-flat', metavar='PARA_FILE', help='write the flattened source for the given .para file')
    group.add_argument('--emit-baked', metavar='PARA_FILE', help='write the flattened source with references replaced by values')
    group.add_argument('--dump', metavar='PARA_FILE', help='print all variables after interpreting the given .para file')
    group.add_argument('--emit-state', metavar='PARA_FILE', help='write the final variable state as JSON')
    group.add_argument('--tokens', metavar='PARA_FILE', help='print the annotated token stream')
    parser.add_argument('program', nargs='?', help='Para program file (.para) to interpret')
    args = parser.parse_args(argv)

    name = args.emit_flat or args.emit_baked or args.dump or args.emit_state or args.tokens or args.program
    if not name:
        parser.error('missing program file; or use --emit-flat/--emit-baked/--dump/--emit-state/--tokens')
    source = read_program(name)

    debug_cm = open('debug.txt', 'w', encoding='utf-8') if args.v > 0 else nullcontext()
    with debug_cm as debug_fp:
        try:
            tokens = annotate(tokenize(source))
            if args.tokens:
                for token in tokens:
                    print(describe_token(token))
                return
            if args.emit_flat:
                write_output(Path(name).with_suffix('.f' + EXTENSION), render_flat(tokens))
                return
            interpreter = Interpreter(debug_level=args.v, debug_sink=debug_fp)
            tree = interpreter.interpret(tokens)
        except ParaError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    program_file = Path(name)

    # Baked source
    if args.emit_baked:
        write_output(program_file.with_suffix('.baked' + EXTENSION), render_baked(tokens, tree))
        return

    # Variable dump
    if args.dump:
        sys.stdout.write(dump_scope(tree))
        return

    # JSON state
    if args.emit_state:
        obj = scope_to_obj(tree.root)
        write_output(program_file.with_suffix('.state.json'), json.dumps(obj, ensure_ascii=False, indent=2) + '\n')
        return


if __name__ == '__main__':
    main()
