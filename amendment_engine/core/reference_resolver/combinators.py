"""
Parser combinators over a ScanContext.

A parser is a callable taking a ScanContext and returning a value, or FAIL.
Every parser that fails leaves the cursor where it found it, so the next
alternative sees unconsumed input. Successful values may be falsy (None,
0, an empty tuple), so always test failures with ``is FAIL``.
"""

import re
from typing import Any, Callable, List, Optional

from amendment_engine.core.reference_resolver.models import Position
from amendment_engine.core.reference_resolver.scan_context import ScanContext

Parser = Callable[[ScanContext], Any]


class ParseFailure:
    """Singleton failure value."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "FAIL"


FAIL = ParseFailure()


def literal(*alternatives: str, fold: bool = True, word: bool = True, value: Any = None) -> Parser:
    """Match one of the alternatives; first listed wins."""
    def parse(ctx: ScanContext):
        token = ctx.match_literal(*alternatives, fold=fold, word=word)
        if token is None:
            return FAIL
        return token if value is None else value
    return parse


def pattern(regex: str, fold: bool = True, flags: int = 0) -> Parser:
    """Match a regular expression at the cursor; returns the Token."""
    compiled = re.compile(regex, flags)

    def parse(ctx: ScanContext):
        token = ctx.match_pattern(compiled, fold=fold)
        return FAIL if token is None else token
    return parse


def sequence(*parsers: Parser, combine: Optional[Callable[..., Any]] = None) -> Parser:
    """All parsers in order. combine receives their values and may itself return FAIL."""
    def parse(ctx: ScanContext):
        checkpoint = ctx.save()
        values: List[Any] = []
        for parser in parsers:
            value = parser(ctx)
            if value is FAIL:
                ctx.restore(checkpoint)
                return FAIL
            values.append(value)
        if combine is None:
            return tuple(values)
        result = combine(*values)
        if result is FAIL:
            ctx.restore(checkpoint)
        return result
    return parse


def alternative(*parsers: Parser) -> Parser:
    """First parser to succeed; grammar order encodes priority."""
    def parse(ctx: ScanContext):
        checkpoint = ctx.save()
        for parser in parsers:
            value = parser(ctx)
            if value is not FAIL:
                return value
            ctx.restore(checkpoint)
        return FAIL
    return parse


def optional(parser: Parser, default: Any = None) -> Parser:
    def parse(ctx: ScanContext):
        value = parser(ctx)
        return default if value is FAIL else value
    return parse


def repeat(parser: Parser, min_count: int = 0, max_count: Optional[int] = None) -> Parser:
    """Greedy repetition; stops at the first failure, at max_count, or on a zero-width match."""
    def parse(ctx: ScanContext):
        checkpoint = ctx.save()
        values: List[Any] = []
        while max_count is None or len(values) < max_count:
            before = ctx.position
            value = parser(ctx)
            if value is FAIL:
                break
            values.append(value)
            if ctx.position == before:
                break
        if len(values) < min_count:
            ctx.restore(checkpoint)
            return FAIL
        return tuple(values)
    return parse


def mapping(parser: Parser, fn: Callable[[Any], Any]) -> Parser:
    """Transform a successful value; fn may return FAIL to reject it."""
    def parse(ctx: ScanContext):
        checkpoint = ctx.save()
        value = parser(ctx)
        if value is FAIL:
            return FAIL
        result = fn(value)
        if result is FAIL:
            ctx.restore(checkpoint)
        return result
    return parse


def spanned(parser: Parser, build: Callable[[Position, Any], Any]) -> Parser:
    """Run parser and hand build the exact span it consumed, leading whitespace excluded."""
    def parse(ctx: ScanContext):
        checkpoint = ctx.save()
        ctx.skip_whitespace()
        start = ctx.position
        value = parser(ctx)
        if value is FAIL:
            ctx.restore(checkpoint)
            return FAIL
        result = build(Position(start, ctx.position), value)
        if result is FAIL:
            ctx.restore(checkpoint)
        return result
    return parse


def lazy(factory: Callable[[], Parser]) -> Parser:
    """Defer parser construction, for recursive grammars."""
    def parse(ctx: ScanContext):
        return factory()(ctx)
    return parse
