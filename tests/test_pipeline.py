"""
End-to-end tests for the AmendmentResolutionPipeline.
"""

from amendment_engine.core.reference_resolver.batch_extractor import ModificationExtractor
from amendment_engine.core.reference_resolver.document import document_from_paragraphs
from amendment_engine.core.reference_resolver.models import (
    ModificationBlock,
    NavigationError,
    ResolutionStatus,
)
from amendment_engine.core.reference_resolver.pipeline import AmendmentResolutionPipeline

ARTICLE_PARAGRAPHS = [
    "I.- Première section",
    "Texte...",
    "II.- Deuxième section",
    "Premier alinéa. Première phrase. Seconde phrase.",
    "Dernier alinéa.",
    "III.- Troisième section",
    "Autre.",
]


class TestAmendmentResolutionPipeline:
    """Test cases for parse, compile, locate and rewrite."""

    def setup_method(self):
        """Set up test fixtures."""
        self.pipeline = AmendmentResolutionPipeline()
        self.document = document_from_paragraphs(ARTICLE_PARAGRAPHS, article_number="12")

    def test_rewrite_last_alinea(self):
        report = self.pipeline.resolve("Le dernier alinéa du II est ainsi rédigé : « Nouvel alinéa. »", self.document)
        assert report.status == ResolutionStatus.SUCCESS
        assert report.location.text == "Dernier alinéa."
        assert report.change.old_text == "Dernier alinéa."
        assert report.change.new_text == "Nouvel alinéa."
        assert report.failure_reason is None

    def test_delete_sentence(self):
        report = self.pipeline.resolve("La seconde phrase du deuxième alinéa du II est supprimée.", self.document)
        assert report.status == ResolutionStatus.SUCCESS
        assert report.change.old_text == "Première phrase."
        assert report.change.new_text == ""

    def test_anchor_inside_reference(self):
        """Test that a placement clause is resolved inside the leading reference."""
        report = self.pipeline.resolve(
            "Au II, après le deuxième alinéa, il est inséré un alinéa ainsi rédigé : « Alinéa inséré. »",
            self.document,
        )
        assert report.status == ResolutionStatus.SUCCESS
        assert report.path.describe() == "item II > alinea #2"
        assert report.change.new_text == ARTICLE_PARAGRAPHS[3] + "\nAlinéa inséré."

    def test_lead_in_scopes_deletion(self):
        """Test that 'Au II, le dernier alinéa' deletes only that alinéa, not the whole II."""
        report = self.pipeline.resolve("Au II, le dernier alinéa est supprimé.", self.document)
        assert report.status == ResolutionStatus.SUCCESS
        assert report.path.describe() == "item II > alinea #-1"
        assert report.change.old_text == "Dernier alinéa."
        assert report.change.new_text == ""

    def test_bare_reference_has_no_change(self):
        report = self.pipeline.resolve("Le III", self.document)
        assert report.status == ResolutionStatus.SUCCESS
        assert report.change is None
        assert report.location.text == "III.- Troisième section\nAutre."

    def test_missing_division(self):
        report = self.pipeline.resolve("Le IV est abrogé.", self.document)
        assert report.status == ResolutionStatus.FAILED
        assert isinstance(report.location, NavigationError)
        assert "IV" in report.failure_reason

    def test_wrong_article(self):
        report = self.pipeline.resolve("Le II de l'article 13 est abrogé.", self.document)
        assert report.status == ResolutionStatus.FAILED
        assert "article 13" in report.failure_reason

    def test_unparsed_sentence(self):
        report = self.pipeline.resolve("Lorem ipsum", self.document)
        assert report.status == ResolutionStatus.FAILED
        assert report.path is None
        assert report.failure_reason == "no reference or action recognized"

    def test_action_without_target(self):
        report = self.pipeline.resolve("Les mots : « X » sont supprimés.", self.document)
        assert report.status == ResolutionStatus.FAILED
        assert report.failure_reason == "action names no reference to resolve"

    def test_enumeration_is_partial(self):
        report = self.pipeline.resolve("Les I et II sont abrogés.", self.document)
        assert report.status == ResolutionStatus.PARTIAL
        assert report.location.text == "I.- Première section\nTexte..."
        assert report.change.success
        assert report.warnings

    def test_failed_rewrite_is_partial(self):
        report = self.pipeline.resolve("Au II, les mots : « absents » sont supprimés.", self.document)
        assert report.status == ResolutionStatus.PARTIAL
        assert not report.change.success
        assert "absents" in report.failure_reason

    def test_resolve_extracted_block(self):
        """Test that an extracted block reuses its parse."""
        result = ModificationExtractor().parse_block(
            ModificationBlock(block_id="1", raw_text="1° Le dernier alinéa du II est supprimé."))
        report = self.pipeline.resolve_block(result.block, self.document)
        assert report.status == ResolutionStatus.SUCCESS
        assert report.outcome is result.block.parsed.outcome
        assert report.change.new_text == ""

    def test_resolve_unparsed_block(self):
        report = self.pipeline.resolve_block(ModificationBlock(block_id="1", raw_text="Le III"), self.document)
        assert report.location.blocks[0].text == "III.- Troisième section"
