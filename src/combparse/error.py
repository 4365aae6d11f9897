"""
Parse failures.

A parser never raises when it doesn't match. It returns one of the `ParseError` values below, which are falsy:
```
r = p.attempt(src)
if r:
    value, rest = r     # `r` is a `Success`
else:
    print(r)            # `r` is a `ParseError`
```

`ParseError.exception()` turns a failure into a `ParseException` when it has to be raised.
"""

from __future__ import annotations
from typing import Any, Literal

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from combparse.input import StringInput


@dataclass(frozen=True)
class ParseError:
    """
    Base class of the failure values. Use one of the subclasses.

    Failures are plain data. They can be compared and hashed, which makes them easy to test against.
    """

    def __bool__(self) -> Literal[False]:
        return False

    def leaves(self) -> Iterator[ParseError]:
        """Yields the failures that aren't `Many`, in order, descending into nested `Many`s."""
        yield self

    def exception(self, source: Any = None) -> ParseException:
        """
        Converts this to a `ParseException`.

        `source`: The original object that was being parsed. Only used in the exception message.
        """
        return ParseException(self, source)


@dataclass(frozen=True)
class UnexpectedEnd(ParseError):
    """The input ran out when an item was required."""

    def __str__(self) -> str:
        return "unexpected end of input"


@dataclass(frozen=True)
class Expected(ParseError):
    """
    Something was expected but something else was found.

    `input` is the input at the point of failure.
    """
    expected: str
    found: str | None
    input: Any

    def __str__(self) -> str:
        if self.found is None:
            return f"expected {self.expected} at {self.input!r}"
        return f"expected {self.expected}, found {self.found} at {self.input!r}"


@dataclass(frozen=True)
class Message(ParseError):
    """
    A custom failure, unrelated to the shape of the grammar. (For example, a number that doesn't fit.)
    """
    message: str
    input: Any

    def __str__(self) -> str:
        return f"{self.message} at {self.input!r}"


@dataclass(frozen=True)
class Many(ParseError):
    """
    Every alternative failed.

    `errors` holds the failure of each alternative, in the order they were tried.
    """
    errors: tuple[ParseError, ...]

    def __init__(self, errors: Iterable[ParseError]) -> None:
        object.__setattr__(self, "errors", tuple(errors))

    def leaves(self) -> Iterator[ParseError]:
        for error in self.errors:
            yield from error.leaves()

    def __str__(self) -> str:
        return "multiple errors: " + "; ".join(str(error) for error in self.leaves())


class ParseException(Exception):
    """
    Raised when a failure has to leave the parser. (See `Parser.parse()`)

    The failure value is in `error`. If text was being parsed, each failure position is added as a note.
    """

    def __init__(self, error: ParseError, source: Any = None) -> None:
        super().__init__(str(error))
        self.error: ParseError = error
        self.source: Any = source
        for leaf in error.leaves():
            position = getattr(leaf, "input", None)
            if isinstance(position, StringInput):
                self.add_pos_note(position)

    def add_pos_note(self, position: StringInput) -> None:
        """Adds a note pointing at the position, with an excerpt of the line."""
        note: list[str] = []

        pos = position.pos
        line, column = position.line_and_column()
        note.append(f"At position {pos} (line {line}, column {column})")

        lines = position.src.splitlines()
        if len(lines) > line-1:
            line_str = lines[line-1]
            if len(line_str) >= column - 1:
                if column <= 20:
                    note.append(f"{line_str[:40]}\n{' '*(column-1)}^")
                else:
                    note.append(f"{line_str[(column-20):(column+20)]}\n{' '*19}^")
        self.add_note("\n".join(note))
