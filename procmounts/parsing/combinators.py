# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
"""Utilities for parsing strings.

A parser is a function str -> (list<T> | None, str) which takes an arbitrary
string and returns a tuple where the first element corresponds to the parsed
result and the second corresponds to the unconsumed part of the input string.
The parsed result is a list<T> on success and None on failure. A failing parser
always hands back its input unchanged.
"""

from typing import Any, Callable, List, Optional, Tuple, TypeVar

_TResult = TypeVar("_TResult")
ParseResult = Tuple[Optional[List[_TResult]], str]
Parser = Callable[[str], ParseResult[_TResult]]

_TIn = TypeVar("_TIn")
_TOut = TypeVar("_TOut")

SPACE_OR_TAB = " \t"


def begins_with(prefix: str) -> Parser[str]:
    """Returns a parser which parses a string with the given prefix"""

    def begins_with_parser(s: str) -> ParseResult[str]:
        if s.startswith(prefix):
            return [prefix], s[len(prefix) :]  # noqa: E203
        return None, s

    return begins_with_parser


def take_while1(chars: str) -> Parser[str]:
    """Returns a parser which consumes the longest non-empty run of characters
    from `chars`.
    """

    def take_while1_parser(s: str) -> ParseResult[str]:
        end = 0
        while end < len(s) and s[end] in chars:
            end += 1
        if end == 0:
            return None, s
        return [s[:end]], s[end:]

    return take_while1_parser


def take_till1(chars: str) -> Parser[str]:
    """Returns a parser which consumes the longest non-empty run of characters
    not in `chars`.

    >>> take_till1(" \\t")("abcd efg")
    (['abcd'], ' efg')
    >>> take_till1(" \\t")(" abcdefg")
    (None, ' abcdefg')
    """

    def take_till1_parser(s: str) -> ParseResult[str]:
        end = 0
        while end < len(s) and s[end] not in chars:
            end += 1
        if end == 0:
            return None, s
        return [s[:end]], s[end:]

    return take_till1_parser


def optional(parser: Parser[_TResult]) -> Parser[_TResult]:
    """Returns a parser which never fails: if the given parser fails, it
    succeeds with an empty result and consumes nothing.
    """

    def optional_parser(s: str) -> ParseResult[_TResult]:
        parsed, rest = parser(s)
        if parsed is None:
            return [], s
        return parsed, rest

    return optional_parser


def discard_result(parser: Parser[_TIn]) -> Parser[_TOut]:
    """Returns a parser which discards the parsed result. It fails if the given
    parser fails.
    """

    def discard_result_parser(s: str) -> ParseResult[_TOut]:
        parsed, rest = parser(s)
        if parsed is None:
            return None, s
        return [], rest

    return discard_result_parser


def replace_result(parser: Parser[_TIn], value: _TOut) -> Parser[_TOut]:
    """Returns a parser which yields `value` whenever the given parser succeeds."""

    def replace_result_parser(s: str) -> ParseResult[_TOut]:
        parsed, rest = parser(s)
        if parsed is None:
            return None, s
        return [value], rest

    return replace_result_parser


def group(parser: Parser[_TIn]) -> Parser[List[_TIn]]:
    """Returns a parser which wraps the aggregated result in a single element, so
    that the result survives being flattened by `chain`.
    """

    def group_parser(s: str) -> ParseResult[List[_TIn]]:
        parsed, rest = parser(s)
        if parsed is None:
            return None, s
        return [parsed], rest

    return group_parser


def map_result(
    parser: Parser[_TIn], f: Callable[[List[_TIn]], _TOut]
) -> Parser[_TOut]:
    """Returns a parser which applies `f` to the whole parsed result."""

    def map_result_parser(s: str) -> ParseResult[_TOut]:
        parsed, rest = parser(s)
        if parsed is None:
            return None, s
        return [f(parsed)], rest

    return map_result_parser


def at_least_zero(parser: Parser[_TResult]) -> Parser[_TResult]:
    """Returns a parser which runs a given parser until failure and returns
    the aggregated results. The given parser must consume input on success.
    """

    def at_least_zero_parser(s: str) -> ParseResult[_TResult]:
        acc: List[_TResult] = []
        rest = s
        while True:
            parsed, rest_ = parser(rest)
            if parsed is None:
                return acc, rest
            acc.extend(parsed)
            rest = rest_

    return at_least_zero_parser


def first_of(parsers: List[Parser]) -> Parser:
    """Returns a parser which runs a list of parsers and greedily returns
    the first successful parse. Fails if all of the given parsers fail.
    """

    def first_of_parser(s: str) -> ParseResult:
        for parser in parsers:
            parsed, rest = parser(s)
            if parsed is not None:
                return parsed, rest
        return None, s

    return first_of_parser


def chain(parsers: List[Parser]) -> Parser:
    """Returns a parser which runs a list of parsers sequentially and
    aggregates the results. Fails if any parser fails.
    """

    def chain_parser(s: str) -> ParseResult:
        acc: List[Any] = []
        rest = s
        for parser in parsers:
            parsed, rest = parser(rest)
            if parsed is None:
                return None, s
            acc.extend(parsed)
        return acc, rest

    return chain_parser


def separated_list1(
    separator: Parser[Any], element: Parser[_TResult]
) -> Parser[_TResult]:
    """Returns a parser for one or more `element`s delimited by `separator`.

    Parsing stops before a separator which is not followed by an element, so
    that separator is left unconsumed.
    """
    return chain(
        [element, at_least_zero(chain([discard_result(separator), element]))]
    )


def map_parser(outer: Parser[str], inner: Parser[_TResult]) -> Parser[_TResult]:
    """Returns a parser which runs `inner` on the text recognised by `outer`.
    Fails unless `inner` consumes all of it.
    """

    def map_parser_parser(s: str) -> ParseResult[_TResult]:
        recognised, rest = outer(s)
        if recognised is None:
            return None, s
        parsed, leftover = inner("".join(recognised))
        if parsed is None or leftover:
            return None, s
        return parsed, rest

    return map_parser_parser


def all_consuming(parser: Parser[_TResult]) -> Parser[_TResult]:
    """Returns a parser which fails if the given parser leaves any input."""

    def all_consuming_parser(s: str) -> ParseResult[_TResult]:
        parsed, rest = parser(s)
        if parsed is None or rest:
            return None, s
        return parsed, rest

    return all_consuming_parser


space0: Parser[str] = optional(take_while1(SPACE_OR_TAB))
space1: Parser[str] = take_while1(SPACE_OR_TAB)
not_whitespace: Parser[str] = take_till1(SPACE_OR_TAB)
