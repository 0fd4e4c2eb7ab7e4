"""
FragmentRewriter: applies a classified action to a located fragment.

The rewriter produces the old/new text pair a diff renderer needs; it never
computes the diff itself. Word-level targets ("les mots : « X »") are found
with whitespace, dash, quote and case-insensitive matching and mapped back to
the original text.
"""

import logging
import re
from typing import Tuple

from amendment_engine.core.reference_resolver.models import (
    ActionKind,
    ActionMode,
    ActionNode,
    CitationNode,
    FragmentChange,
    LocatedFragment,
)
from amendment_engine.core.reference_resolver.utils import find_normalized, fold_text

logger = logging.getLogger(__name__)


class RewriteError(Exception):
    """The action cannot be applied to the fragment."""


class FragmentRewriter:
    """
    Computes the new text of a fragment for each action kind:

    - DELETE removes the target words, or the whole fragment;
    - REPLACE substitutes the target words, or rewrites the whole fragment;
    - CREATE inserts content next to the target words or the fragment;
    - CREATE_OR_REPLACE restores the fragment with the quoted content.
    """

    WORD_LABEL_RE = re.compile(r"\b(?:mots?|phrases?|mentions?|references?|dates?)\b")
    SPACE_BEFORE_PUNCT_RE = re.compile(r" +([,.)])")
    MULTI_SPACE_RE = re.compile(r"[ \t]{2,}")

    def rewrite(self, fragment: LocatedFragment, action: ActionNode) -> FragmentChange:
        old_text = fragment.text
        try:
            if action.kind == ActionKind.DELETE:
                new_text = self._delete(old_text, action.targets)
            elif action.mode == ActionMode.AMEND:
                raise RewriteError("'ainsi modifié' announces nested instructions; nothing to apply here")
            elif action.kind == ActionKind.REPLACE:
                new_text = self._replace(old_text, action)
            elif action.kind == ActionKind.CREATE:
                new_text = self._create(old_text, action)
            elif action.kind == ActionKind.CREATE_OR_REPLACE:
                new_text = self._content(action)
            else:
                raise TypeError(f"Unsupported action kind: {action.kind}")
        except RewriteError as e:
            logger.warning("Could not apply %s action: %s", action.kind.value, e)
            return FragmentChange(False, old_text, old_text, action.kind, str(e))
        logger.debug("Applied %s action (%s)", action.kind.value, action.mode.value)
        return FragmentChange(True, old_text, new_text, action.kind)

    # --- Actions ---

    def _delete(self, text: str, targets: Tuple[CitationNode, ...]) -> str:
        if not targets:
            return ""
        for target in targets:
            start, stop = self._find(text, target)
            text = text[:start] + text[stop:]
        return self._tidy(text)

    def _replace(self, text: str, action: ActionNode) -> str:
        content = self._content(action)
        if not action.targets:
            return content
        if len(action.citations) == len(action.targets):
            replacements = [c.text for c in action.citations]
        else:
            replacements = [content] * len(action.targets)
        for target, replacement in zip(action.targets, replacements):
            start, stop = self._find(text, target)
            text = text[:start] + replacement + text[stop:]
        return self._tidy(text)

    def _create(self, text: str, action: ActionNode) -> str:
        content = self._content(action)
        if action.targets:
            start, stop = self._find(text, action.targets[0])
            if action.mode == ActionMode.INSERT_BEFORE:
                return self._tidy(text[:start] + content + " " + text[start:])
            joiner = "" if content[:1] in ",.;)" else " "
            return self._tidy(text[:stop] + joiner + content + text[stop:])
        separator = self._separator(action)
        if action.mode in (ActionMode.INSERT_BEFORE, ActionMode.PREPEND):
            return content + separator + text
        return text + separator + content

    # --- Helpers ---

    @staticmethod
    def _content(action: ActionNode) -> str:
        if not action.citations:
            label = f" ({action.content_label})" if action.content_label else ""
            raise RewriteError(f"no quoted content{label}")
        return action.content

    @staticmethod
    def _find(text: str, target: CitationNode) -> Tuple[int, int]:
        span = find_normalized(text, target.text)
        if span is None:
            raise RewriteError(f"target words not found: « {target.text} »")
        return span

    def _separator(self, action: ActionNode) -> str:
        """New alinéas and divisions go on their own line; words and sentences join with a space."""
        if any(len(c.paragraphs) > 1 for c in action.citations) or len(action.citations) > 1:
            return "\n"
        if action.content_label and not self.WORD_LABEL_RE.search(fold_text(action.content_label)):
            return "\n"
        return " "

    def _tidy(self, text: str) -> str:
        text = self.MULTI_SPACE_RE.sub(" ", text)
        text = self.SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)
        return text.strip()
