"""
Parse Error Types.

Invalid input is an expected condition: parsers return an `Err` holding every
problem they found instead of raising. `MareyError` is reserved for failures
outside of the documents themselves (e.g. a file that cannot be read).
"""

from typing import Generic, TypeAlias, TypeVar
import dataclasses

import serde

T = TypeVar("T")
E = TypeVar("E")


class MareyError(Exception):
    """
    Root Error.
    """


@serde.serde
@dataclasses.dataclass(frozen=True)
class ParseError:
    """
    A fatal error or advisory warning attributed to a source file (and, when
    known, a 1-based line within it).
    """

    file: str
    line: int | None
    message: str

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.file}: {self.message}"
        return f"{self.file}:{self.line}: {self.message}"


@dataclasses.dataclass(frozen=True)
class Ok(Generic[T]):
    """
    A successful result.
    """

    value: T


@dataclasses.dataclass(frozen=True)
class Err(Generic[E]):
    """
    A failed result.
    """

    error: E


Result: TypeAlias = Ok[T] | Err[E]
