"""
AmendmentParser: composes the reference grammar and the action classifier.

A reference clause is usually followed by its action clause ("Le II est
abrogé"). The parser tries the reference first, then an action on the
leftover; when the sentence opens on an action instead ("Après le III, il est
inséré ..."), it falls back to the action alone.
"""

import logging
from typing import Optional

from amendment_engine.core.reference_resolver.action_classifier import ActionClassifier
from amendment_engine.core.reference_resolver.combinators import FAIL
from amendment_engine.core.reference_resolver.models import (
    ParentChildReference,
    ParseOutcome,
    ReferenceAndAction,
    ReferenceNode,
)
from amendment_engine.core.reference_resolver.reference_parser import parse_reference
from amendment_engine.core.reference_resolver.scan_context import ScanContext

logger = logging.getLogger(__name__)


class AmendmentParser:
    """
    Parses one amendment sentence into ReferenceAndAction, a bare reference,
    or an action alone. Each call builds its own ScanContext, so a parser
    instance can be shared between threads.
    """

    CONNECTIVES = (",",)
    SCOPE_LEADS = ("aux", "au", "a la", "a l'")

    def __init__(self, classifier: Optional[ActionClassifier] = None):
        self.classifier = classifier or ActionClassifier()

    def parse(self, text: str, start: int = 0) -> ParseOutcome:
        """
        Parse text from offset start.

        Returns:
            ParseOutcome whose result is None when neither a reference nor an
            action is recognized; remaining always holds the unconsumed input.
        """
        ctx = ScanContext(text, start)
        result = None

        reference = parse_reference(ctx)
        if reference is not FAIL:
            reference = self._scoped(ctx, reference)
            after_reference = ctx.save()
            ctx.match_literal(*self.CONNECTIVES)
            action = self.classifier.parse(ctx)
            if action is not FAIL:
                result = ReferenceAndAction(reference.position.union(action.position), reference, action)
                logger.debug("Reference and %s action recognized", action.kind.value)
            else:
                ctx.restore(after_reference)
                result = reference
                logger.debug("Bare reference recognized, no action follows")
        else:
            action = self.classifier.parse(ctx)
            if action is not FAIL:
                result = action
                logger.debug("Action recognized without a leading reference")

        if result is None:
            logger.warning("Unparsed amendment sentence: %.80s", text[start:])
        consumed = ctx.position
        return ParseOutcome(source=text, result=result, consumed=consumed, remaining=text[consumed:].strip())

    def _scoped(self, ctx: ScanContext, reference: ReferenceNode) -> ReferenceNode:
        """
        Read "Au II, le dernier alinéa ..." as the last alinéa inside the II.

        Only a lead-in opened by "au"/"aux"/"à la"/"à l'" sets a scope; the
        cursor is left after the lead-in when no reference follows the comma.
        """
        checkpoint = ctx.save()
        ctx.restore(reference.position.start)
        is_lead_in = ctx.match_literal(*self.SCOPE_LEADS) is not None
        ctx.restore(checkpoint)
        if not is_lead_in or ctx.match_literal(*self.CONNECTIVES) is None:
            return reference
        inner = parse_reference(ctx)
        if inner is FAIL:
            ctx.restore(checkpoint)
            return reference
        logger.debug("Lead-in scopes the following reference")
        return ParentChildReference(reference.position.union(inner.position), parent=reference, child=inner)
