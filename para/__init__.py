# Para language package
# This package provides the annotator and interpreter for the Para data-definition language.
from .errors import ParaError
from .interpreter import run_program, compile_module, Interpreter

__all__ = [
    'run_program',
    'compile_module',
    'Interpreter',
    'ParaError',
]
