"""
Utility parsers built on top of `Parser`.

They work on any input type. For text-only parsers, see `combparse.general`.
"""

from __future__ import annotations
from typing import Any, Callable, TypeVar

from collections.abc import Iterable
import logging

from combparse.error import UnexpectedEnd, Expected, Many
from combparse.input import Input
from combparse.main import Parser, ParseResult, Success, Pure, check_progress


log = logging.getLogger(__name__)


_T = TypeVar("_T")
_ItemT = TypeVar("_ItemT")



class Item(Parser[_ItemT, _ItemT]):
    def attempt(self, input: Input[_ItemT]) -> ParseResult[_ItemT]:
        if (d := input.decompose()) is None:
            return UnexpectedEnd()
        return Success(d[0], d[1])

    def __repr__(self) -> str:
        return self.name if self.name is not None else "item()"


class Satisfy(Parser[_ItemT, _ItemT]):
    def __init__(self, predicate: Callable[[_ItemT], bool]) -> None:
        self.predicate: Callable[[_ItemT], bool] = predicate

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_ItemT]:
        if (d := input.decompose()) is None:
            return UnexpectedEnd()
        item, rest = d
        if self.predicate(item):
            return Success(item, rest)
        return Expected("item satisfying predicate", "different item", input)


class Token(Parser[_ItemT, _ItemT]):
    def __init__(self, expected: _ItemT) -> None:
        self.expected: _ItemT = expected

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_ItemT]:
        if (d := input.decompose()) is None:
            return UnexpectedEnd()
        item, rest = d
        if item == self.expected:
            return Success(item, rest)
        return Expected(repr(self.expected), repr(item), input)

    def __repr__(self) -> str:
        return self.name if self.name is not None else f"token({self.expected!r})"


class Eof(Parser[Any, None]):
    def attempt(self, input: Input[Any]) -> ParseResult[None]:
        if input.is_empty():
            return Success(None, input)
        return Expected("end of input", "more input", input)

    def __repr__(self) -> str:
        return self.name if self.name is not None else "eof()"


class Choice(Parser[_ItemT, _T]):
    def __init__(self, parsers: Iterable[Parser[_ItemT, _T]]) -> None:
        self.parsers: tuple[Parser[_ItemT, _T], ...] = tuple(parsers)

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_T]:
        errors = []
        for parser in self.parsers:
            r = parser.attempt(input)
            if r:
                return r
            if log.isEnabledFor(logging.DEBUG):
                log.debug("choice: %r failed (%s), trying the next alternative", parser, r)
            errors.append(r)
        return Many(errors)


class SepBy(Parser[_ItemT, list[_T]]):
    def __init__(self, parser: Parser[_ItemT, _T], separator: Parser[_ItemT, Any], *, at_least_one: bool) -> None:
        self.parser: Parser[_ItemT, _T] = parser
        self.separator: Parser[_ItemT, Any] = separator
        self.at_least_one: bool = at_least_one

    def attempt(self, input: Input[_ItemT]) -> ParseResult[list[_T]]:
        first = self.parser.attempt(input)
        if not first:
            if self.at_least_one:
                return first
            return Success([], input)

        values = [first.value]
        remaining = first.remaining
        while True:
            sep = self.separator.attempt(remaining)
            if not sep:
                break
            element = self.parser.attempt(sep.remaining)
            if not element:
                # dangling separator, leave it unconsumed
                if log.isEnabledFor(logging.DEBUG):
                    log.debug("%r: no element after separator, backtracking before it", self)
                break
            if __debug__:
                check_progress(self, remaining, element.remaining)
            values.append(element.value)
            remaining = element.remaining
        return Success(values, remaining)

    def __repr__(self) -> str:
        if self.name is not None:
            return self.name
        return f"{'sep_by1' if self.at_least_one else 'sep_by'}({self.parser!r}, {self.separator!r})"



def item() -> Item[Any]:
    """Consumes any single item. Fails with `UnexpectedEnd` if the input is empty."""
    return Item()

def satisfy(predicate: Callable[[_ItemT], bool]) -> Satisfy[_ItemT]:
    """
    Consumes a single item if the predicate returns true for it.

    The failure doesn't describe the predicate. Use `named()` or `Expected` in a custom parser for a more descriptive message.
    """
    return Satisfy(predicate)

def token(expected: _ItemT) -> Token[_ItemT]:
    """Consumes a single item equal to `expected`."""
    return Token(expected)

def eof() -> Eof:
    """Succeeds with `None` only if the input is empty."""
    return Eof()

def empty(value: _T) -> Pure[_T]:
    """Same as `pure()`."""
    return Pure(value)

def between(left: Parser[_ItemT, Any], parser: Parser[_ItemT, _T], right: Parser[_ItemT, Any]) -> Parser[_ItemT, _T]:
    """Parses `left`, `parser`, then `right`. Keeps the value of `parser`."""
    return parser.preceded_by(left).skip(right)

def choice(parsers: Iterable[Parser[_ItemT, _T]]) -> Choice[_ItemT, _T]:
    """
    Attempts each parser in order on the same input. The first one that matches wins.

    If none match, fails with a single `Many` containing every failure in order. (Unlike chained `|`, which nests them in pairs.)
    """
    return Choice(parsers)

def sep_by(parser: Parser[_ItemT, _T], separator: Parser[_ItemT, Any]) -> SepBy[_ItemT, _T]:
    """
    Parses zero or more `parser`s separated by `separator`s. Returns a list of the values.

    A trailing separator that isn't followed by an element is not consumed:
    ```
    sep_by(item(), token(","))("a,")     # Success(value=['a'], remaining=StringInput(','))
    ```
    """
    return SepBy(parser, separator, at_least_one=False)

def sep_by1(parser: Parser[_ItemT, _T], separator: Parser[_ItemT, Any]) -> SepBy[_ItemT, _T]:
    """Like `sep_by()`, but fails with the first failure if there isn't at least one element."""
    return SepBy(parser, separator, at_least_one=True)
