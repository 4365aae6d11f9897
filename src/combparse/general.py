"""
Parsers for text. (`StringInput`)

Everything here is built out of the general combinators. Use them as examples for writing your own.
"""

from __future__ import annotations

from combparse.error import Expected, Message
from combparse.input import Input
from combparse.main import Parser, ParseResult, Success
from combparse.combinators import satisfy, token
import combparse.const as const


# single characters

def char(c: str) -> Parser[str, str]:
    """Matches the given character."""
    if len(c) != 1:
        raise ValueError("Expected a single character.")
    return token(c)

def alpha() -> Parser[str, str]:
    """Matches an alphabetic character."""
    return satisfy(str.isalpha)

def digit() -> Parser[str, str]:
    """Matches an ASCII decimal digit."""
    return satisfy(lambda c: c in const.DECIMAL)

def alphanumeric() -> Parser[str, str]:
    """Matches an alphabetic or numeric character."""
    return satisfy(str.isalnum)

def space() -> Parser[str, str]:
    """Matches a whitespace character."""
    return satisfy(str.isspace)

def newline() -> Parser[str, str]:
    return char("\n")

def tab() -> Parser[str, str]:
    return char("\t")

def not_char(c: str) -> Parser[str, str]:
    """Matches any character except the given one."""
    return satisfy(lambda ch: ch != c)

def one_of(chars: str) -> Parser[str, str]:
    """Matches any of the given characters."""
    if not chars:
        raise ValueError("At least one character required.")
    charset = frozenset(chars)
    return satisfy(lambda c: c in charset)

def none_of(chars: str) -> Parser[str, str]:
    """Matches any character that isn't one of the given characters."""
    charset = frozenset(chars)
    return satisfy(lambda c: c not in charset)


# runs of characters

def spaces() -> Parser[str, str]:
    """Matches zero or more whitespace characters."""
    return space().many().map("".join)

def spaces1() -> Parser[str, str]:
    """Matches one or more whitespace characters."""
    return space().many1().map("".join)


class String(Parser[str, str]):
    def __init__(self, expected: str) -> None:
        if not expected:
            raise ValueError("Expected a non-empty string.")
        self.expected: str = expected

    def attempt(self, input: Input[str]) -> ParseResult[str]:
        rest = input
        for expected_char in self.expected:
            if (d := rest.decompose()) is None:
                return Expected(f"string '{self.expected}'", "end of input", input)
            c, rest = d
            if c != expected_char:
                return Expected(f"string '{self.expected}'", f"character '{c}'", input)
        return Success(self.expected, rest)

    def __repr__(self) -> str:
        return self.name if self.name is not None else f"string({self.expected!r})"

def string(s: str) -> String:
    """
    Matches the given string.

    On failure, nothing is consumed and the failure is positioned at the start of the string.
    """
    return String(s)


# numbers

class Unsigned(Parser[str, int]):
    def __init__(self) -> None:
        self.digits: Parser[str, list[str]] = digit().many1()

    def attempt(self, input: Input[str]) -> ParseResult[int]:
        r = self.digits.attempt(input)
        if not r:
            return r
        value = int("".join(r.value))
        if value > const.UNSIGNED_MAX:
            return Message("invalid number", input)
        return Success(value, r.remaining)

    def __repr__(self) -> str:
        return self.name if self.name is not None else "unsigned()"

def unsigned() -> Unsigned:
    """
    Matches one or more decimal digits. The value is an `int`.

    Fails with a `Message` failure if the number is larger than `const.UNSIGNED_MAX`.
    """
    return Unsigned()

def integer() -> Parser[str, int]:
    """Matches an optional `-` followed by an `unsigned()` number."""
    return (
        char("-").optional()
        .and_(unsigned())
        .map(lambda v: -v[1] if v[0] is not None else v[1])
        .named("integer()")
    )
