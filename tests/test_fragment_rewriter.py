"""
Tests for the FragmentRewriter component.
"""

from amendment_engine.core.reference_resolver.action_classifier import parse_action
from amendment_engine.core.reference_resolver.fragment_rewriter import FragmentRewriter
from amendment_engine.core.reference_resolver.models import ActionKind, LocatedFragment, TextBlock
from amendment_engine.core.reference_resolver.scan_context import ScanContext


def fragment(*texts, sentence_span=None):
    return LocatedFragment(tuple(TextBlock(t) for t in texts), "test scope", sentence_span)


def action(text):
    return parse_action(ScanContext(text))


class TestFragmentRewriter:
    """Test cases for applying actions to located fragments."""

    def setup_method(self):
        """Set up test fixtures."""
        self.rewriter = FragmentRewriter()
        self.sentence = fragment("Les exploitants agricoles sont tenus.")

    def test_replace_words(self):
        change = self.rewriter.rewrite(
            self.sentence,
            action("les mots : « agricoles » sont remplacés par les mots : « agricoles et forestiers »"),
        )
        assert change.success
        assert change.old_text == "Les exploitants agricoles sont tenus."
        assert change.new_text == "Les exploitants agricoles et forestiers sont tenus."
        assert change.action_kind == ActionKind.REPLACE

    def test_delete_words(self):
        change = self.rewriter.rewrite(
            fragment("Les exploitants agricoles et forestiers sont tenus."),
            action("les mots : « et forestiers » sont supprimés"),
        )
        assert change.new_text == "Les exploitants agricoles sont tenus."

    def test_delete_whole_fragment(self):
        change = self.rewriter.rewrite(self.sentence, action("est abrogé."))
        assert change.success
        assert change.new_text == ""

    def test_rewrite_whole_fragment(self):
        change = self.rewriter.rewrite(self.sentence, action("est ainsi rédigé : « Nouveau texte. »"))
        assert change.new_text == "Nouveau texte."

    def test_append_sentence(self):
        """Test that a sentence is appended on the same line."""
        change = self.rewriter.rewrite(
            self.sentence,
            action("est complété par une phrase ainsi rédigée : « Elle entre en vigueur. »"),
        )
        assert change.new_text == "Les exploitants agricoles sont tenus. Elle entre en vigueur."

    def test_insert_after_words(self):
        change = self.rewriter.rewrite(
            self.sentence,
            action("Après le mot : « tenus », sont insérés les mots : « de déclarer »"),
        )
        assert change.new_text == "Les exploitants agricoles sont tenus de déclarer."

    def test_insert_division_on_new_line(self):
        """Test that a new division goes after the fragment on its own line."""
        change = self.rewriter.rewrite(
            fragment("III.- Ancien."),
            action("Après le III, il est inséré un III bis ainsi rédigé : « III bis. – Texte. »"),
        )
        assert change.new_text == "III.- Ancien.\nIII bis. – Texte."

    def test_sentence_fragment(self):
        """Test that only the located sentence is rewritten."""
        located = fragment("Première phrase. Seconde phrase.", sentence_span=(17, 32))
        change = self.rewriter.rewrite(located, action("est ainsi rédigée : « Autre phrase. »"))
        assert change.old_text == "Seconde phrase."
        assert change.new_text == "Autre phrase."

    def test_missing_target_words(self):
        """Test that absent words leave the text unchanged and explain why."""
        change = self.rewriter.rewrite(
            self.sentence,
            action("le mot : « inexistant » est remplacé par le mot : « autre »"),
        )
        assert not change.success
        assert change.new_text == change.old_text
        assert "inexistant" in change.error_message

    def test_amend_announcement(self):
        change = self.rewriter.rewrite(self.sentence, action("il est ainsi modifié :"))
        assert not change.success
        assert "ainsi modifié" in change.error_message

    def test_announced_content_without_quotation(self):
        change = self.rewriter.rewrite(self.sentence, action("est remplacée par trois alinéas ainsi rédigés"))
        assert not change.success
        assert change.error_message == "no quoted content (trois alinéas)"

    def test_restore(self):
        change = self.rewriter.rewrite(fragment("3° (Supprimé)"), action("est rétabli : « 3° Texte rétabli. »"))
        assert change.success
        assert change.new_text == "3° Texte rétabli."
