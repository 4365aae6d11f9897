from __future__ import annotations
from typing import Any

import logging

import pytest

from combparse.combinators import item, token
from combparse.error import Expected, Many, Message, ParseException, UnexpectedEnd
from combparse.input import Input, StringInput
from combparse.main import (
    ParseResult,
    Parser,
    Success,
    fail,
    forward,
    map2,
    map3,
    parser,
    pure,
    tuple2,
    tuple3,
)


@parser
def vowel(input: Input[str]) -> ParseResult[str]:
    if (d := input.decompose()) is None:
        return UnexpectedEnd()
    char, rest = d
    if char in "aeiou":
        return Success(char, rest)
    return Expected("vowel", repr(char), input)


# map

def test_map_transforms_the_value() -> None:
    assert token("a").map(str.upper)("abc") == Success("A", StringInput("bc"))


def test_map_passes_failures_through() -> None:
    assert token("a").map(str.upper)("xbc") == token("a")("xbc")


@pytest.mark.parametrize("text", ["", "a", "ab", "b"])
def test_map_composition(text: str) -> None:
    f = str.upper
    g = lambda s: s * 2
    assert item().map(f).map(g)(text) == item().map(lambda v: g(f(v)))(text)


# sequencing

def test_and_keeps_both_values() -> None:
    assert token("a").and_(token("b"))("abc") == Success(("a", "b"), StringInput("c"))


def test_and_does_not_attempt_the_right_side_after_a_failure() -> None:
    calls = []

    @parser
    def spy(input: Input[str]) -> ParseResult[None]:
        calls.append(input)
        return Success(None, input)

    assert token("a").and_(spy)("xyz") == Expected("'a'", "'x'", StringInput("xyz"))
    assert calls == []


def test_and_does_not_undo_the_left_side() -> None:
    # the failure is reported after the consumed "a"
    assert token("a").and_(token("b"))("ac") == Expected("'b'", "'c'", StringInput("c"))


def test_skip_and_preceded_by() -> None:
    assert token("a").skip(token("b"))("abc") == Success("a", StringInput("c"))
    assert token("b").preceded_by(token("a"))("abc") == Success("b", StringInput("c"))
    assert token("a").skip(token("b"))("aXc") == Expected("'b'", "'X'", StringInput("Xc"))
    assert token("b").preceded_by(token("a"))("Xbc") == Expected("'a'", "'X'", StringInput("Xbc"))


def test_bind_picks_the_next_parser_from_the_value() -> None:
    doubled = item().bind(lambda c: token(c))
    assert doubled("aab") == Success("a", StringInput("b"))
    assert doubled("abb") == Expected("'a'", "'b'", StringInput("bb"))
    assert doubled("") == UnexpectedEnd()


# alternation

def test_or_returns_the_first_success() -> None:
    assert (token("a") | token("b"))("abc") == Success("a", StringInput("bc"))
    assert token("a").or_(token("b"))("bcd") == Success("b", StringInput("cd"))


def test_or_retries_on_the_original_input() -> None:
    ab = token("a").and_(token("b"))
    ac = token("a").and_(token("c"))
    assert (ab | ac)("acd") == ac("acd") == Success(("a", "c"), StringInput("d"))


def test_or_collects_both_failures_in_order() -> None:
    assert (token("x") | token("y"))("hello") == Many([
        Expected("'x'", "'h'", StringInput("hello")),
        Expected("'y'", "'h'", StringInput("hello")),
    ])


def test_chained_or_nests_failures() -> None:
    r = (token("x") | token("y") | token("z"))("a")
    assert r == Many([
        Many([Expected("'x'", "'a'", StringInput("a")), Expected("'y'", "'a'", StringInput("a"))]),
        Expected("'z'", "'a'", StringInput("a")),
    ])


def test_or_logs_backtracking(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="combparse")
    (token("x") | token("a"))("abc")
    assert any("backtracking" in record.getMessage() for record in caplog.records)


# optional

def test_optional_success() -> None:
    assert token("a").optional()("ab") == Success("a", StringInput("b"))


def test_optional_failure_keeps_the_original_input() -> None:
    src = StringInput("ac")
    r = token("a").and_(token("b")).optional().attempt(src)
    assert r == Success(None, src)
    assert r.remaining is src


# repetition

def test_many_collects_the_longest_prefix() -> None:
    assert token("x").many()("xxxyz") == Success(["x", "x", "x"], StringInput("yz"))


def test_many_never_fails() -> None:
    src = StringInput("")
    r = token("x").many().attempt(src)
    assert r == Success([], src)
    assert r.remaining is src
    assert token("x").many()("abc") == Success([], StringInput("abc"))


def test_many_discards_the_partial_last_attempt() -> None:
    ab = token("a").and_(token("b"))
    assert ab.many()("ababac") == Success([("a", "b"), ("a", "b")], StringInput("ac"))


def test_many1_propagates_the_first_failure() -> None:
    assert token("x").many1()("hello") == token("x")("hello")
    assert token("x").many1()("hello") == Expected("'x'", "'h'", StringInput("hello"))


def test_many1_success() -> None:
    assert token("x").many1()("xxa") == Success(["x", "x"], StringInput("a"))


def test_fold_many0() -> None:
    number = item().fold_many0(0, lambda acc, d: acc * 10 + int(d))
    assert number("123") == Success(123, StringInput(""))
    assert number("") == Success(0, StringInput(""))


def test_fold_many0_does_not_share_the_accumulator() -> None:
    def push(acc: list[str], value: str) -> list[str]:
        acc.append(value)
        return acc

    collect = item().fold_many0([], push)
    assert collect("ab").value == ["a", "b"]
    assert collect("cd").value == ["c", "d"]


def test_fold_many1() -> None:
    count = token("x").fold_many1(0, lambda acc, _: acc + 1)
    assert count("xxxa") == Success(3, StringInput("a"))
    assert count("a") == Expected("'x'", "'a'", StringInput("a"))


@pytest.mark.skipif(not __debug__, reason="progress check needs assertions")
@pytest.mark.parametrize(
    "repetition",
    [
        pure(1).many(),
        token("a").optional().many(),
        pure(1).many1(),
        pure(1).fold_many0(0, lambda acc, _: acc),
        pure(1).fold_many1(0, lambda acc, _: acc),
    ],
)
def test_repetition_without_progress_is_caught(repetition: Parser[str, Any]) -> None:
    with pytest.raises(AssertionError, match="without consuming"):
        repetition("abc")


# pure and fail

def test_pure_consumes_nothing() -> None:
    src = StringInput("hello")
    r = pure(42).attempt(src)
    assert r == Success(42, src)
    assert r.remaining is src


def test_pure_returns_a_fresh_copy() -> None:
    p = pure([])
    p("").value.append(1)
    assert p("").value == []


def test_fail_consumes_nothing() -> None:
    src = StringInput("hello")
    r = fail("test error").attempt(src)
    assert r == Message("test error", StringInput("hello"))
    assert r.input is src


# recursion

def test_forward_allows_recursive_grammars() -> None:
    depth = forward()
    depth.define(token("(").and_(depth).skip(token(")")).map(lambda v: v[1] + 1) | pure(0))
    assert depth("((()))") == Success(3, StringInput(""))
    assert depth("(()") == Success(0, StringInput("(()"))


def test_forward_must_be_defined_once() -> None:
    slot = forward()
    with pytest.raises(RuntimeError, match="before being defined"):
        slot("a")
    slot.define(item())
    with pytest.raises(RuntimeError, match="already defined"):
        slot.define(item())


# entry points

def test_parse_returns_the_value() -> None:
    assert token("a").parse("abc") == "a"


def test_parse_raises_on_failure() -> None:
    with pytest.raises(ParseException) as exc_info:
        token("x").parse("abc")
    assert exc_info.value.error == Expected("'x'", "'a'", StringInput("abc"))
    assert exc_info.value.source == "abc"


def test_parse_consume_all() -> None:
    assert token("a").parse("a", consume_all=True) == "a"
    with pytest.raises(ParseException) as exc_info:
        token("a").parse("abc", consume_all=True)
    assert exc_info.value.error == Expected("end of input", "more input", StringInput("bc"))


def test_attempting_twice_gives_equal_results() -> None:
    p = token("a").many().and_(item())
    src = StringInput("aab")
    assert p.attempt(src) == p.attempt(src)


def test_named() -> None:
    letter = token("a").named("letter a")
    assert repr(letter) == "letter a"
    assert repr(token("a")) == "token('a')"
    assert repr(pure(1)) == "pure(1)"


def test_named_leaves_the_original_unchanged() -> None:
    comma = token(",")
    separator = comma.named("separator")
    assert repr(separator) == "separator"
    assert repr(comma) == "token(',')"
    assert separator(",a") == comma(",a") == Success(",", StringInput("a"))


def test_named_forward_sees_the_later_definition() -> None:
    slot = forward()
    named = slot.named("slot")
    slot.define(token("a"))
    assert repr(named) == "slot"
    assert named("ab") == Success("a", StringInput("b"))


def test_function_parser() -> None:
    assert vowel.name == "vowel"
    assert vowel.many()("aeixa") == Success(["a", "e", "i"], StringInput("xa"))
    assert vowel("x") == Expected("vowel", "'x'", StringInput("x"))


# higher-order helpers

def test_map2_and_map3() -> None:
    assert map2(item(), item(), lambda a, b: b + a)("ab") == Success("ba", StringInput(""))
    assert map3(item(), item(), item(), lambda a, b, c: c + b + a)("abcd") == Success("cba", StringInput("d"))


def test_tuple2_and_tuple3() -> None:
    assert tuple2(item(), item())("abc") == Success(("a", "b"), StringInput("c"))
    assert tuple3(item(), item(), item())("abc") == Success(("a", "b", "c"), StringInput(""))
    assert tuple3(item(), item(), item())("ab") == UnexpectedEnd()
