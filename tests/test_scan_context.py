"""
Tests for ScanContext and the parser combinators built on it.
"""

import pytest

from amendment_engine.core.reference_resolver.combinators import (
    FAIL,
    ParseFailure,
    alternative,
    lazy,
    literal,
    mapping,
    optional,
    pattern,
    repeat,
    sequence,
    spanned,
)
from amendment_engine.core.reference_resolver.models import Position
from amendment_engine.core.reference_resolver.scan_context import ScanContext


class TestScanContext:
    """Cursor and matching primitives."""

    def test_start_position_out_of_range(self):
        """A start offset past the end is rejected."""
        with pytest.raises(ValueError, match="outside source"):
            ScanContext("Le II", 10)

    def test_folded_shadow_has_source_offsets(self):
        ctx = ScanContext("À l’alinéa")
        assert ctx.folded == "a l'alinea"
        assert len(ctx.folded) == len(ctx.source)

    def test_match_literal_skips_space_and_folds(self):
        """Literals are written folded and matched against the folded shadow."""
        ctx = ScanContext("  Après le III")
        token = ctx.match_literal("apres")
        assert (token.start, token.stop) == (2, 7)
        assert token.text == "Après"
        assert token.folded == "apres"
        assert ctx.position == 7

    def test_match_literal_respects_word_boundary(self):
        """'les' does not match the start of 'lesquels'."""
        ctx = ScanContext("lesquels")
        assert ctx.match_literal("les") is None
        assert ctx.position == 0

    def test_match_literal_first_alternative_wins(self):
        ctx = ScanContext("de la section")
        token = ctx.match_literal("de la", "de")
        assert token.folded == "de la"

    def test_match_pattern_regex(self):
        ctx = ScanContext("12° bis")
        token = ctx.match_pattern(r"\d+")
        assert token.text == "12"
        assert ctx.position == 2

    def test_match_pattern_failure_keeps_cursor(self):
        """A failed match leaves the cursor where it was."""
        ctx = ScanContext("abc")
        assert ctx.match_pattern(r"\d+") is None
        assert ctx.position == 0

    def test_match_pattern_predicate(self):
        """A predicate consumes the longest run of matching characters."""
        ctx = ScanContext("abc def")
        token = ctx.match_pattern(str.isalpha)
        assert token.text == "abc"

    def test_token_groups(self):
        """Groups come back as source text unless folded text is asked for."""
        ctx = ScanContext("Alinéa 3")
        token = ctx.match_pattern(r"(?P<kind>alinea)\s+(?P<num>\d+)(?P<rest>x)?")
        assert token.group("kind") == "Alinéa"
        assert token.group("kind", fold=True) == "alinea"
        assert token.group("rest") is None
        assert token.span("num") == (7, 8)

    def test_save_and_restore(self):
        ctx = ScanContext("le II")
        checkpoint = ctx.save()
        ctx.match_literal("le")
        assert ctx.remaining() == " II"
        ctx.restore(checkpoint)
        assert ctx.position == 0
        assert not ctx.at_end()


class TestCombinators:
    """Combinators return FAIL and restore the cursor on failure."""

    def test_fail_is_a_falsy_singleton(self):
        assert ParseFailure() is FAIL
        assert not FAIL
        assert repr(FAIL) == "FAIL"

    def test_sequence_restores_on_failure(self):
        """'ii' does not match the start of 'iii', so the whole sequence fails."""
        parser = sequence(literal("le"), literal("ii"))
        ctx = ScanContext("le iii")
        assert parser(ctx) is FAIL
        assert ctx.position == 0

    def test_sequence_combine(self):
        parser = sequence(literal("le"), pattern(r"[ivx]+"), combine=lambda _det, number: number.text)
        assert parser(ScanContext("le IV")) == "IV"

    def test_alternative_first_success_wins(self):
        parser = alternative(literal("a", value="first"), literal("a", value="second"))
        assert parser(ScanContext("a")) == "first"

    def test_optional_default(self):
        ctx = ScanContext("xyz")
        assert optional(literal("le"), default="none")(ctx) == "none"
        assert ctx.position == 0

    def test_repeat_collects_matches(self):
        parser = repeat(literal("a"))
        assert len(parser(ScanContext("a a a"))) == 3

    def test_repeat_min_count(self):
        """Too few repetitions fail without consuming input."""
        ctx = ScanContext("ab")
        parser = repeat(literal("a", word=False), min_count=2)
        assert parser(ctx) is FAIL
        assert ctx.position == 0

    def test_mapping_can_reject(self):
        ctx = ScanContext("12")
        parser = mapping(pattern(r"\d+"), lambda token: FAIL if int(token.text) > 10 else token)
        assert parser(ctx) is FAIL
        assert ctx.position == 0

    def test_spanned_excludes_leading_whitespace(self):
        parser = spanned(literal("le"), lambda position, _value: position)
        assert parser(ScanContext("  le")) == Position(2, 4)

    def test_lazy_supports_recursion(self):
        """A grammar may refer to itself through lazy."""
        nested = alternative(
            sequence(literal("(", word=False), lazy(lambda: nested), literal(")", word=False),
                     combine=lambda _open, depth, _close: depth + 1),
            literal("x", value=0),
        )
        assert nested(ScanContext("((x))")) == 2
