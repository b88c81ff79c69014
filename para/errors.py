"""Para errors: the ErrorVal record and the exceptions that carry it."""

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass
class ErrorVal:
    """Describes a failed rule: its kind name, a message and where it happened."""
    name: str
    message: str
    line: Optional[int] = None
    token: Optional[int] = None
    path: Optional[Sequence[str]] = None

    def location(self) -> str:
        if self.line is None:
            return ''
        if self.token is None:
            return f"[{self.line}]"
        return f"[{self.line}:{self.token}]"

    def __str__(self) -> str:
        parts = []
        loc = self.location()
        if loc:
            parts.append(loc)
        parts.append(f"{self.name}:")
        if self.path:
            parts.append('-> '.join(self.path) + ':')
        parts.append(self.message)
        return ' '.join(parts)


class ParaError(Exception):
    """Exception type used to propagate Para errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(str(err))
        self.err = err

    @property
    def kind(self) -> str:
        return self.err.name


class LexError(ParaError):
    """Raised when the source text cannot be split into tokens."""


class ParseError(ParaError):
    """Raised by the annotator for structural problems."""


class ResolutionError(ParaError):
    """Raised when a path, assignment or declared type cannot be resolved."""


class EvaluationError(ParaError):
    """Raised while evaluating an extracted expression."""


class MutabilityError(ResolutionError):
    """Raised when an assignment targets an existing immutable variable."""
