"""
The implementations of the main classes.
"""

from __future__ import annotations
from typing import Any, Callable, Generic, NamedTuple, TypeVar

import copy
import logging

from combparse.error import ParseError, Expected, Message, Many
from combparse.input import Input, as_input


log = logging.getLogger(__name__)


_T = TypeVar("_T")
_U = TypeVar("_U")
_A = TypeVar("_A")
_R = TypeVar("_R")
_T1 = TypeVar("_T1")
_T2 = TypeVar("_T2")
_T3 = TypeVar("_T3")
_ItemT = TypeVar("_ItemT")



class Success(NamedTuple, Generic[_T]):
    """
    Returned from `Parser.attempt()` when the parser matched.

    ```
    r = p.attempt(src)
    if r:
        value, rest = r     # `r` is a `Success` object
    else:
        ...                 # `r` is a `ParseError` object
    ```
    """
    value: _T
    """The parsed value."""
    remaining: Input[Any]
    """The input after the matched items."""

ParseResult = Success[_T] | ParseError
"""What `Parser.attempt()` returns: a `Success` or a falsy `ParseError`."""


def check_progress(parser: Parser[Any, Any], before: Input[Any], after: Input[Any]) -> None:
    """
    Asserts that a repeated parser consumed something.

    Repetitions call this only when assertions are enabled. (Not under `python -O`) Inputs that don't know their length are not checked.
    """
    before_length = before.remaining_length()
    after_length = after.remaining_length()
    if before_length is None or after_length is None:
        return
    assert after_length < before_length, (
        f"{parser!r} succeeded without consuming any input inside a repetition, which would loop forever."
    )



class Parser(Generic[_ItemT, _T]):
    """
    A parser consumes items of type `_ItemT` and produces a value of type `_T`.

    When used for typing: `Parser[ItemType, ValueType]`

    Example: `Parser[str, int]` parses text into an `int`.

    Subclasses only implement `attempt()`. Every other method builds a new parser out of this one:
    ```
    number = digit().many1().map(lambda ds: int("".join(ds)))
    pair = number.skip(char(",")).and_(number)

    pair("12,34")           # Success(value=(12, 34), remaining=StringInput(''))
    pair.parse("12,34")     # (12, 34)
    ```

    Parsers hold no state that changes while parsing. Attempting the same parser on equal inputs always gives equal results, so parsers can be shared between grammars freely.
    """

    name: str | None = None
    """A display name, used by `repr()` and debug logs. Set with `named()`."""

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_T]:
        """
        Runs the parser on the input.

        Returns a `Success` holding the value and the remaining input, or a `ParseError` if the parser doesn't match. Never raises because of a mismatch.
        """
        raise NotImplementedError("Subclasses must implement this method")

    def __call__(self, source: Any) -> ParseResult[_T]:
        """
        Same as `attempt()`, but also accepts strings, bytes and sequences. (See `as_input()`)
        """
        return self.attempt(as_input(source))

    def parse(self, source: Any, *, consume_all: bool = False) -> _T:
        """
        Runs the parser and returns the parsed value.

        Raises a `ParseException` if the parser doesn't match.

        `consume_all`: Also fail if the parser didn't consume the whole input.
        """
        r = self.attempt(as_input(source))
        if not r:
            raise r.exception(source)
        if consume_all and not r.remaining.is_empty():
            raise Expected("end of input", "more input", r.remaining).exception(source)
        return r.value

    def named(self, name: str) -> Parser[_ItemT, _T]:
        """
        Returns a copy of this parser with a display name.

        The original keeps its name, so naming one use of a shared parser doesn't rename the others.
        """
        named = copy.copy(self)
        named.name = name
        return named

    def __repr__(self) -> str:
        return self.name if self.name is not None else f"<{type(self).__name__}>"

    # combinators

    def map(self, f: Callable[[_T], _U]) -> Map[_ItemT, _T, _U]:
        """Transforms the value of a successful parse. Failures pass through unchanged."""
        return Map(self, f)

    def and_(self, other: Parser[_ItemT, _U]) -> And[_ItemT, _T, _U]:
        """
        Parses this, then the other, keeping both values as a tuple.

        Fails with the first failure. The other parser isn't attempted if this one fails.
        """
        return And(self, other)

    def skip(self, other: Parser[_ItemT, Any]) -> Skip[_ItemT, _T]:
        """Parses this, then the other, keeping only the value of this."""
        return Skip(self, other)

    def preceded_by(self, other: Parser[_ItemT, Any]) -> PrecededBy[_ItemT, _T]:
        """Parses the other, then this, keeping only the value of this."""
        return PrecededBy(other, self)

    def bind(self, f: Callable[[_T], Parser[_ItemT, _U]]) -> Bind[_ItemT, _T, _U]:
        """
        Parses this, then passes the value to `f` to pick the parser to run next.

        ```
        # the closing bracket depends on the opening one
        bracket = one_of("([").bind(lambda o: char(")" if o == "(" else "]"))
        ```
        """
        return Bind(self, f)

    def or_(self, other: Parser[_ItemT, _T]) -> Or[_ItemT, _T]:
        """
        Attempts this parser. If it fails, attempts the other on the same input.

        Whatever this parser consumed before failing is discarded. If both fail, fails with `Many([this_error, other_error])`.

        Same as `self | other`.
        """
        return Or(self, other)

    def __or__(self, other: Parser[_ItemT, _T]) -> Or[_ItemT, _T]:
        return Or(self, other)

    def optional(self) -> Optional[_ItemT, _T]:
        """Always succeeds. The value is `None` and nothing is consumed if this parser fails."""
        return Optional(self)

    def many(self) -> Many0[_ItemT, _T]:
        """
        Parses this zero or more times. Returns a list of the values. Never fails.

        This parser must consume input whenever it succeeds, otherwise the repetition never ends. (`optional()` and `pure()` can succeed without consuming.)
        """
        return Many0(self)

    def many1(self) -> Many1[_ItemT, _T]:
        """Like `many()`, but fails with the first failure if this doesn't match at least once."""
        return Many1(self)

    def fold_many0(self, init: _A, f: Callable[[_A, _T], _A]) -> FoldMany0[_ItemT, _T, _A]:
        """
        Like `many()`, but combines the values with `f` instead of collecting them.

        `init` is copied for every attempt, so a mutable accumulator isn't shared between runs.

        ```
        total = digit().fold_many0(0, lambda acc, d: acc * 10 + int(d))
        ```
        """
        return FoldMany0(self, init, f)

    def fold_many1(self, init: _A, f: Callable[[_A, _T], _A]) -> FoldMany1[_ItemT, _T, _A]:
        """Like `fold_many0()`, but fails with the first failure if this doesn't match at least once."""
        return FoldMany1(self, init, f)



class FunctionParser(Parser[_ItemT, _T]):
    """A parser made from a plain function. Create using the `parser` decorator."""

    def __init__(self, function: Callable[[Input[_ItemT]], ParseResult[_T]], name: str | None = None) -> None:
        self.function: Callable[[Input[_ItemT]], ParseResult[_T]] = function
        self.name = name if name is not None else getattr(function, "__name__", None)

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_T]:
        return self.function(input)


def parser(function: Callable[[Input[_ItemT]], ParseResult[_T]]) -> FunctionParser[_ItemT, _T]:
    """
    Turns a function into a parser, so it can be combined like the built-in ones.

    The function must follow the same rules as `Parser.attempt()`: it must not raise on a mismatch, and must not keep state between calls.
    ```
    @parser
    def vowel(input: Input[str]) -> ParseResult[str]:
        if (d := input.decompose()) is None:
            return UnexpectedEnd()
        char, rest = d
        if char in "aeiou":
            return Success(char, rest)
        return Expected("vowel", repr(char), input)
    ```
    """
    return FunctionParser(function)


class Map(Parser[_ItemT, _U], Generic[_ItemT, _T, _U]):
    def __init__(self, parser: Parser[_ItemT, _T], f: Callable[[_T], _U]) -> None:
        self.parser: Parser[_ItemT, _T] = parser
        self.f: Callable[[_T], _U] = f

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_U]:
        r = self.parser.attempt(input)
        if not r:
            return r
        return Success(self.f(r.value), r.remaining)


class And(Parser[_ItemT, tuple[_T, _U]], Generic[_ItemT, _T, _U]):
    def __init__(self, left: Parser[_ItemT, _T], right: Parser[_ItemT, _U]) -> None:
        self.left: Parser[_ItemT, _T] = left
        self.right: Parser[_ItemT, _U] = right

    def attempt(self, input: Input[_ItemT]) -> ParseResult[tuple[_T, _U]]:
        left = self.left.attempt(input)
        if not left:
            return left
        right = self.right.attempt(left.remaining)
        if not right:
            return right
        return Success((left.value, right.value), right.remaining)


class Skip(Parser[_ItemT, _T]):
    def __init__(self, left: Parser[_ItemT, _T], right: Parser[_ItemT, Any]) -> None:
        self.left: Parser[_ItemT, _T] = left
        self.right: Parser[_ItemT, Any] = right

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_T]:
        left = self.left.attempt(input)
        if not left:
            return left
        right = self.right.attempt(left.remaining)
        if not right:
            return right
        return Success(left.value, right.remaining)


class PrecededBy(Parser[_ItemT, _T]):
    def __init__(self, first: Parser[_ItemT, Any], second: Parser[_ItemT, _T]) -> None:
        self.first: Parser[_ItemT, Any] = first
        self.second: Parser[_ItemT, _T] = second

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_T]:
        first = self.first.attempt(input)
        if not first:
            return first
        return self.second.attempt(first.remaining)


class Bind(Parser[_ItemT, _U], Generic[_ItemT, _T, _U]):
    def __init__(self, parser: Parser[_ItemT, _T], f: Callable[[_T], Parser[_ItemT, _U]]) -> None:
        self.parser: Parser[_ItemT, _T] = parser
        self.f: Callable[[_T], Parser[_ItemT, _U]] = f

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_U]:
        r = self.parser.attempt(input)
        if not r:
            return r
        return self.f(r.value).attempt(r.remaining)


class Or(Parser[_ItemT, _T]):
    def __init__(self, left: Parser[_ItemT, _T], right: Parser[_ItemT, _T]) -> None:
        self.left: Parser[_ItemT, _T] = left
        self.right: Parser[_ItemT, _T] = right

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_T]:
        left = self.left.attempt(input)
        if left:
            return left
        if log.isEnabledFor(logging.DEBUG):
            log.debug("%r failed (%s), backtracking to %r", self.left, left, self.right)
        right = self.right.attempt(input)
        if right:
            return right
        return Many((left, right))


class Optional(Parser[_ItemT, _T | None], Generic[_ItemT, _T]):
    def __init__(self, parser: Parser[_ItemT, _T]) -> None:
        self.parser: Parser[_ItemT, _T] = parser

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_T | None]:
        r = self.parser.attempt(input)
        if r:
            return r
        return Success(None, input)


def fold_repeat(
    parser: Parser[_ItemT, _T],
    acc: _A,
    f: Callable[[_A, _T], _A],
    input: Input[_ItemT],
) -> Success[_A]:
    """
    Attempts the parser until it fails, combining the values into `acc`.

    The failure that ends the loop is discarded. The remaining input is the one after the last success.
    """
    count = 0
    while True:
        r = parser.attempt(input)
        if not r:
            break
        if __debug__:
            check_progress(parser, input, r.remaining)
        acc = f(acc, r.value)
        input = r.remaining
        count += 1
    if log.isEnabledFor(logging.DEBUG):
        log.debug("%r repeated %d time(s), stopped at: %s", parser, count, r)
    return Success(acc, input)


def _append(acc: list[_T], value: _T) -> list[_T]:
    acc.append(value)
    return acc


class Many0(Parser[_ItemT, list[_T]]):
    def __init__(self, parser: Parser[_ItemT, _T]) -> None:
        self.parser: Parser[_ItemT, _T] = parser

    def attempt(self, input: Input[_ItemT]) -> ParseResult[list[_T]]:
        return fold_repeat(self.parser, [], _append, input)


class Many1(Parser[_ItemT, list[_T]]):
    def __init__(self, parser: Parser[_ItemT, _T]) -> None:
        self.parser: Parser[_ItemT, _T] = parser

    def attempt(self, input: Input[_ItemT]) -> ParseResult[list[_T]]:
        first = self.parser.attempt(input)
        if not first:
            return first
        return fold_repeat(self.parser, [first.value], _append, first.remaining)


class FoldMany0(Parser[_ItemT, _A], Generic[_ItemT, _T, _A]):
    def __init__(self, parser: Parser[_ItemT, _T], init: _A, f: Callable[[_A, _T], _A]) -> None:
        self.parser: Parser[_ItemT, _T] = parser
        self.init: _A = init
        self.f: Callable[[_A, _T], _A] = f

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_A]:
        return fold_repeat(self.parser, copy.copy(self.init), self.f, input)


class FoldMany1(Parser[_ItemT, _A], Generic[_ItemT, _T, _A]):
    def __init__(self, parser: Parser[_ItemT, _T], init: _A, f: Callable[[_A, _T], _A]) -> None:
        self.parser: Parser[_ItemT, _T] = parser
        self.init: _A = init
        self.f: Callable[[_A, _T], _A] = f

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_A]:
        first = self.parser.attempt(input)
        if not first:
            return first
        acc = self.f(copy.copy(self.init), first.value)
        return fold_repeat(self.parser, acc, self.f, first.remaining)


class Pure(Parser[Any, _T]):
    def __init__(self, value: _T) -> None:
        self.value: _T = value

    def attempt(self, input: Input[Any]) -> ParseResult[_T]:
        return Success(copy.copy(self.value), input)

    def __repr__(self) -> str:
        return self.name if self.name is not None else f"pure({self.value!r})"


class Fail(Parser[Any, Any]):
    def __init__(self, message: str) -> None:
        self.message: str = message

    def attempt(self, input: Input[Any]) -> ParseResult[Any]:
        return Message(self.message, input)

    def __repr__(self) -> str:
        return self.name if self.name is not None else f"fail({self.message!r})"


class Forward(Parser[_ItemT, _T]):
    """
    A placeholder for a parser that's defined later. Used for recursive grammars:
    ```
    expr = forward()
    group = between(char("("), expr, char(")"))
    expr.define(group | digit())
    ```

    Each level of nesting in the parsed input adds to the Python call stack, so very deep nesting can hit the recursion limit.
    """

    def __init__(self) -> None:
        self.parser: Parser[_ItemT, _T] | None = None

    def define(self, parser: Parser[_ItemT, _T]) -> None:
        """Sets the parser this stands for. Can only be called once."""
        if self.parser is not None:
            raise RuntimeError("Forward parser is already defined.")
        self.parser = parser

    def attempt(self, input: Input[_ItemT]) -> ParseResult[_T]:
        if self.parser is None:
            raise RuntimeError("Forward parser was attempted before being defined.")
        return self.parser.attempt(input)

    def named(self, name: str) -> Parser[_ItemT, _T]:
        """
        Returns a named parser that runs this one. Call `define()` on the original, not on the result.
        """
        return FunctionParser(self.attempt, name)



def pure(value: _T) -> Pure[_T]:
    """Always succeeds with a copy of the value. Consumes nothing."""
    return Pure(value)

def fail(message: str) -> Fail:
    """Always fails with a `Message` failure at the current input. Consumes nothing."""
    return Fail(message)

def forward() -> Forward[Any, Any]:
    """Creates a `Forward` parser. Call `define()` on it once the real parser exists."""
    return Forward()


def map2(p1: Parser[_ItemT, _T1], p2: Parser[_ItemT, _T2], f: Callable[[_T1, _T2], _R]) -> Parser[_ItemT, _R]:
    """Parses both in sequence and passes their values to `f`."""
    return p1.and_(p2).map(lambda v: f(v[0], v[1]))

def map3(
    p1: Parser[_ItemT, _T1],
    p2: Parser[_ItemT, _T2],
    p3: Parser[_ItemT, _T3],
    f: Callable[[_T1, _T2, _T3], _R],
) -> Parser[_ItemT, _R]:
    """Parses all three in sequence and passes their values to `f`."""
    return p1.and_(p2).and_(p3).map(lambda v: f(v[0][0], v[0][1], v[1]))

def tuple2(p1: Parser[_ItemT, _T1], p2: Parser[_ItemT, _T2]) -> Parser[_ItemT, tuple[_T1, _T2]]:
    """Parses both in sequence. The value is a 2-tuple."""
    return p1.and_(p2)

def tuple3(
    p1: Parser[_ItemT, _T1],
    p2: Parser[_ItemT, _T2],
    p3: Parser[_ItemT, _T3],
) -> Parser[_ItemT, tuple[_T1, _T2, _T3]]:
    """Parses all three in sequence. The value is a 3-tuple."""
    return map3(p1, p2, p3, lambda a, b, c: (a, b, c))
