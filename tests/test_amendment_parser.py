"""
Tests for the AmendmentParser component.
"""

from amendment_engine.core.reference_resolver.amendment_parser import AmendmentParser
from amendment_engine.core.reference_resolver.models import (
    ActionKind,
    ActionMode,
    ActionNode,
    DivisionReference,
    ParentChildReference,
    ReferenceAndAction,
)


class TestAmendmentParser:
    """Test cases for composing references and actions."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = AmendmentParser()

    def test_reference_and_action(self):
        """Test a reference followed by its action."""
        text = "Le II est abrogé."
        outcome = self.parser.parse(text)
        assert isinstance(outcome.result, ReferenceAndAction)
        assert outcome.reference.number == "II"
        assert outcome.action.kind == ActionKind.DELETE
        assert outcome.consumed == len(text)
        assert outcome.remaining == ""

    def test_nested_reference_with_rewrite(self):
        """Test a parent/child reference rewritten with quoted content."""
        outcome = self.parser.parse("Le 3° du I est ainsi rédigé : « 3° Les mots ; »")
        reference = outcome.reference
        assert isinstance(reference, ParentChildReference)
        assert reference.parent.number == "I"
        assert reference.child.number == "3°"
        assert outcome.action.mode == ActionMode.REWRITE
        assert outcome.action.content == "3° Les mots ;"

    def test_full_sentence(self):
        """Test the canonical sentence with a code title and an announced label."""
        text = ("La seconde phrase du dernier alinéa du II de l'article 224 du code général des impôts "
                "est remplacée par trois alinéas ainsi rédigés :")
        outcome = self.parser.parse(text)
        assert isinstance(outcome.result, ReferenceAndAction)
        assert outcome.action.content_label == "trois alinéas"
        assert outcome.reference.child.ordinal == 2
        assert outcome.remaining == ""

    def test_bare_reference(self):
        """Test a reference without action."""
        outcome = self.parser.parse("Le dernier alinéa du II")
        assert isinstance(outcome.result, ParentChildReference)
        assert outcome.action is None

    def test_reference_followed_by_other_text(self):
        """Test that unrecognized trailing text is reported as remaining."""
        outcome = self.parser.parse("Le II dispose que")
        assert isinstance(outcome.result, DivisionReference)
        assert outcome.consumed == 5
        assert outcome.remaining == "dispose que"

    def test_action_without_reference(self):
        """Test a sentence that opens on its placement clause."""
        outcome = self.parser.parse("Après le III, il est inséré un III bis ainsi rédigé")
        assert isinstance(outcome.result, ActionNode)
        assert outcome.reference is None
        assert outcome.action.anchor.number == "III"

    def test_suppressed_item(self):
        """Test '3° (Supprimé)'."""
        outcome = self.parser.parse("3° (Supprimé)")
        assert outcome.reference.number == "3°"
        assert outcome.action.kind == ActionKind.DELETE

    def test_unparsed_sentence(self):
        """Test that an unrecognized sentence yields no result."""
        outcome = self.parser.parse("Lorem ipsum dolor")
        assert not outcome.success
        assert outcome.result is None
        assert outcome.consumed == 0
        assert outcome.remaining == "Lorem ipsum dolor"

    def test_start_offset(self):
        """Test that offsets stay relative to the full text."""
        outcome = self.parser.parse("1° Le II est abrogé.", start=3)
        assert outcome.reference.position.start == 3
        assert outcome.result.position.stop == len("1° Le II est abrogé.")

    def test_lead_in_scopes_following_reference(self):
        """Test that 'Au II, le dernier alinéa' is the last alinéa inside the II."""
        outcome = self.parser.parse("Au II, le dernier alinéa est supprimé.")
        reference = outcome.reference
        assert isinstance(reference, ParentChildReference)
        assert reference.parent.number == "II"
        assert reference.child.ordinal == -1
        assert outcome.action.kind == ActionKind.DELETE
        assert outcome.remaining == ""

    def test_lead_in_scopes_numbered_item(self):
        outcome = self.parser.parse("Au I, le 2° est abrogé.")
        assert isinstance(outcome.reference, ParentChildReference)
        assert (outcome.reference.parent.number, outcome.reference.child.number) == ("I", "2°")
        assert outcome.action.mode == ActionMode.REMOVE

    def test_lead_in_before_designated_words(self):
        """Test that a lead-in followed by an action keeps the action's own target."""
        outcome = self.parser.parse("Au II, les mots : « X » sont supprimés.")
        assert outcome.reference.number == "II"
        assert [t.text for t in outcome.action.targets] == ["X"]

    def test_mixed_enumeration_and_composition(self):
        outcome = self.parser.parse("Le 1° du I et le II sont abrogés.")
        first, second = outcome.reference.items
        assert (first.parent.number, first.child.number) == ("I", "1°")
        assert second.number == "II"
        assert outcome.action.kind == ActionKind.DELETE

    def test_trailing_comma_is_consumed(self):
        """Test that an action ending a list item on ',' leaves nothing unread."""
        outcome = self.parser.parse("Au début du II, sont insérés les mots : « X »,")
        assert isinstance(outcome.result, ActionNode)
        assert outcome.action.mode == ActionMode.PREPEND
        assert outcome.remaining == ""
