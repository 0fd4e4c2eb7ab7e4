"""
AmendmentResolutionPipeline: parse -> compile -> locate -> rewrite.

Resolves one amendment sentence against one document and reports every
intermediate result, so callers can tell a grammar mismatch from a missing
division or an inapplicable action.
"""

import logging
from typing import Optional

from amendment_engine.core.reference_resolver.amendment_parser import AmendmentParser
from amendment_engine.core.reference_resolver.document_navigator import DocumentNavigator
from amendment_engine.core.reference_resolver.fragment_rewriter import FragmentRewriter
from amendment_engine.core.reference_resolver.models import (
    Document,
    ModificationBlock,
    NavigationError,
    ParentChildReference,
    ParseOutcome,
    ReferenceNode,
    ResolutionReport,
    ResolutionStatus,
)
from amendment_engine.core.reference_resolver.path_compiler import PathCompiler

logger = logging.getLogger(__name__)


class AmendmentResolutionPipeline:
    """
    End-to-end resolution of amendment sentences.

    The target of a sentence is its reference; when its action carries a
    placement clause ("après le 3°"), the anchor is resolved inside that
    reference. Sentences without a reference resolve their anchor alone.
    """

    def __init__(self, parser: Optional[AmendmentParser] = None, compiler: Optional[PathCompiler] = None,
                 rewriter: Optional[FragmentRewriter] = None):
        self.parser = parser or AmendmentParser()
        self.compiler = compiler or PathCompiler()
        self.rewriter = rewriter or FragmentRewriter()

    def resolve(self, text: str, document: Document) -> ResolutionReport:
        return self._resolve_outcome(self.parser.parse(text), document)

    def resolve_block(self, block: ModificationBlock, document: Document) -> ResolutionReport:
        """Resolve an extracted block, reusing its parse when it has one."""
        if block.parsed is not None:
            return self._resolve_outcome(block.parsed.outcome, document)
        return self.resolve(block.raw_text, document)

    def _resolve_outcome(self, outcome: ParseOutcome, document: Document) -> ResolutionReport:
        if not outcome.success:
            return ResolutionReport(outcome, ResolutionStatus.FAILED,
                                    failure_reason="no reference or action recognized")

        target = self.target_of(outcome)
        if target is None:
            return ResolutionReport(outcome, ResolutionStatus.FAILED,
                                    failure_reason="action names no reference to resolve")

        path = self.compiler.compile(target)
        location = DocumentNavigator(document).locate(path)
        if isinstance(location, NavigationError):
            return ResolutionReport(outcome, ResolutionStatus.FAILED, path=path, location=location,
                                    warnings=path.warnings, failure_reason=str(location))

        change = None
        if outcome.action is not None:
            change = self.rewriter.rewrite(location, outcome.action)

        status = ResolutionStatus.SUCCESS
        reason = None
        if path.partial:
            status = ResolutionStatus.PARTIAL
            reason = "; ".join(path.warnings)
        if change is not None and not change.success:
            status = ResolutionStatus.PARTIAL
            reason = change.error_message
        logger.info("Resolved '%s' with status %s", path.describe(), status.value)
        return ResolutionReport(outcome, status, path=path, location=location, change=change,
                                warnings=path.warnings, failure_reason=reason)

    @staticmethod
    def target_of(outcome: ParseOutcome) -> Optional[ReferenceNode]:
        reference = outcome.reference
        action = outcome.action
        anchor = action.anchor if action is not None else None
        if reference is not None and anchor is not None:
            return ParentChildReference(reference.position.union(anchor.position), parent=reference, child=anchor)
        return reference if reference is not None else anchor
