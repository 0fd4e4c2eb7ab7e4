"""
Tests for environment-driven settings.
"""

from amendment_engine.core.reference_resolver import config
from amendment_engine.core.reference_resolver.batch_extractor import ModificationExtractor
from amendment_engine.core.reference_resolver.document import document_from_paragraphs
from amendment_engine.core.reference_resolver.document_navigator import DocumentNavigator


class TestConfig:
    """Settings are read when components are built, not when modules are imported."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("AMENDMENT_ENGINE_MAX_WORKERS", raising=False)
        monkeypatch.delenv("AMENDMENT_ENGINE_LOG_LEVEL", raising=False)
        monkeypatch.delenv("AMENDMENT_ENGINE_PREVIEW_LENGTH", raising=False)
        assert config.max_workers() == 4
        assert config.log_level() == "INFO"
        assert config.preview_length() == 80

    def test_extractor_reads_workers_after_import(self, monkeypatch):
        """Test that a value loaded into the environment later still applies."""
        monkeypatch.setenv("AMENDMENT_ENGINE_MAX_WORKERS", "7")
        assert ModificationExtractor().max_workers == 7

    def test_explicit_workers_win(self, monkeypatch):
        monkeypatch.setenv("AMENDMENT_ENGINE_MAX_WORKERS", "7")
        assert ModificationExtractor(max_workers=2).max_workers == 2

    def test_navigator_preview_length(self, monkeypatch):
        monkeypatch.setenv("AMENDMENT_ENGINE_PREVIEW_LENGTH", "12")
        navigator = DocumentNavigator(document_from_paragraphs(["I.- Texte."]))
        assert navigator.preview_length == 12
