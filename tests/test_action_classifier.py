"""
Tests for the action classifier and the citation scanner.
"""

import pytest

from amendment_engine.core.reference_resolver.action_classifier import ActionClassifier, parse_action, parse_citation
from amendment_engine.core.reference_resolver.combinators import FAIL
from amendment_engine.core.reference_resolver.models import (
    ActionKind,
    ActionMode,
    DivisionKind,
    PortionKind,
    Position,
)
from amendment_engine.core.reference_resolver.scan_context import ScanContext


class TestActionClassifier:
    """Verb, placement and object recognition."""

    def setup_method(self):
        """Set up test fixtures."""
        self.classifier = ActionClassifier()

    def parse(self, text):
        return self.classifier.parse(ScanContext(text))

    def test_replacement_announcing_alineas(self):
        """An announced label without quotation is not an error."""
        action = self.parse("est remplacée par trois alinéas ainsi rédigés")
        assert action.kind == ActionKind.REPLACE
        assert action.mode == ActionMode.SUBSTITUTE
        assert action.content_label == "trois alinéas"
        assert action.citations == ()

    def test_insertion_after_anchor(self):
        text = "Après le III, il est inséré un III bis ainsi rédigé : « III bis. – Texte nouveau. »"
        action = self.parse(text)
        assert action.kind == ActionKind.CREATE
        assert action.mode == ActionMode.INSERT_AFTER
        assert action.anchor.kind == DivisionKind.ITEM
        assert action.anchor.number == "III"
        assert action.content_label == "un III bis"
        assert action.content == "III bis. – Texte nouveau."
        assert action.position == Position(0, len(text))

    def test_word_substitution(self):
        """Quoted words before the verb are targets, quoted words after it are content."""
        action = self.parse("les mots : « agricoles » sont remplacés par les mots : « agricoles et forestiers »")
        assert action.mode == ActionMode.SUBSTITUTE
        assert [t.text for t in action.targets] == ["agricoles"]
        assert [c.text for c in action.citations] == ["agricoles et forestiers"]

    def test_several_targets(self):
        action = self.parse("les mots : « A », « B » et « C » sont supprimés")
        assert action.kind == ActionKind.DELETE
        assert [t.text for t in action.targets] == ["A", "B", "C"]

    def test_suppressed_marker(self):
        action = self.parse("(Supprimé)")
        assert action.kind == ActionKind.DELETE
        assert action.mode == ActionMode.REMOVE

    def test_repeal_includes_terminal(self):
        action = self.parse("est abrogé.")
        assert action.kind == ActionKind.DELETE
        assert action.position == Position(0, 11)

    def test_comma_terminates_list_item(self):
        """An action closing an enumerated item on ',' includes the comma."""
        action = self.parse("est abrogé,")
        assert action.position == Position(0, 11)

    def test_module_level_parse_action(self):
        """parse_action is a plain function over the default classifier."""
        ctx = ScanContext("est abrogé ;")
        action = parse_action(ctx)
        assert action.kind == ActionKind.DELETE
        assert ctx.at_end()

    def test_amendment_announcement(self):
        action = self.parse("il est ainsi modifié :")
        assert action.kind == ActionKind.REPLACE
        assert action.mode == ActionMode.AMEND

    def test_restoration(self):
        action = self.parse("est rétabli : « 3° Texte rétabli. »")
        assert action.kind == ActionKind.CREATE_OR_REPLACE
        assert action.mode == ActionMode.RESTORE
        assert action.content == "3° Texte rétabli."

    def test_insertion_before_words(self):
        """The words of a placement clause become targets."""
        action = self.parse("Avant le mot : « public », est inséré le mot : « service »")
        assert action.mode == ActionMode.INSERT_BEFORE
        assert action.anchor is None
        assert [t.text for t in action.targets] == ["public"]
        assert action.content == "service"

    @pytest.mark.parametrize("text", [
        "À la fin du premier alinéa, les mots : « X » sont supprimés",
        "à la fin du premier alinéa, les mots : « X » sont supprimés",
    ])
    def test_placement_with_reference_anchor(self, text):
        action = self.parse(text)
        assert action.kind == ActionKind.DELETE
        assert action.anchor.kind == PortionKind.ALINEA
        assert action.anchor.ordinal == 1
        assert [t.text for t in action.targets] == ["X"]

    def test_append_mode(self):
        action = self.parse("est complété par une phrase ainsi rédigée : « Elle entre en vigueur. »")
        assert action.kind == ActionKind.CREATE
        assert action.mode == ActionMode.APPEND
        assert action.content_label == "une phrase"

    def test_unbalanced_quotation_fails(self):
        """An opening mark without its closing mark fails the whole action."""
        ctx = ScanContext("est ainsi rédigé : « Texte")
        assert self.classifier.parse(ctx) is FAIL
        assert ctx.position == 0

    def test_dangling_closing_quote_fails(self):
        assert self.parse("est remplacé par le mot : « X » »") is FAIL

    def test_no_verb(self):
        ctx = ScanContext("Le taux est fixé")
        assert self.classifier.parse(ctx) is FAIL
        assert ctx.position == 0


class TestCitations:
    """Quotation scanning."""

    def test_nested_guillemets(self):
        citation = parse_citation(ScanContext("« Le titre « A » est maintenu. »"))
        assert citation.text == "Le titre « A » est maintenu."

    def test_multi_paragraph_quotation(self):
        """A guillemet opening a line continues the quotation."""
        text = "« Premier alinéa ;\n« Second alinéa. »"
        citation = parse_citation(ScanContext(text))
        assert citation.paragraphs == ("Premier alinéa ;", "Second alinéa.")
        assert citation.position == Position(0, len(text))

    def test_straight_quotes(self):
        assert parse_citation(ScanContext('"mots"')).text == "mots"

    def test_not_a_quotation(self):
        ctx = ScanContext("texte")
        assert parse_citation(ctx) is FAIL
        assert ctx.position == 0
