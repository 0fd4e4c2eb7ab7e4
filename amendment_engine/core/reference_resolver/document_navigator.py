"""
DocumentNavigator: resolves compiled navigation steps against a document.

The current scope starts as the document's top-level blocks and is narrowed by
each step in turn:

- division steps select the first block opening with the division marker
  ("II.-", "II. -", "II -", "II.", "II°", "II)") and extend the scope to the
  following blocks up to the next heading of the same or a higher rank;
- alinéa steps select one block of the scope (1-based, negative from the end);
- sentence steps select one sentence across the scope's blocks and keep its
  character span inside its block.

A step that cannot be resolved produces a NavigationError naming the step and
the scope it was evaluated against. There is no fallback to a coarser scope,
and the navigator keeps no state between calls.
"""

import logging
import re
from typing import List, Optional, Sequence, Tuple, Union

from amendment_engine.core.reference_resolver import config
from amendment_engine.core.reference_resolver.lexicon import ADVERB_PATTERN
from amendment_engine.core.reference_resolver.models import (
    CompiledPath,
    DivisionKind,
    Document,
    LocatedFragment,
    NavigationError,
    NavigationResult,
    NavigationStep,
    PortionKind,
    ScopeUnit,
    StepKind,
    TextBlock,
)
from amendment_engine.core.reference_resolver.utils import (
    HYPHENS,
    fold_text,
    heading_marker,
    preview,
    split_sentences,
)

logger = logging.getLogger(__name__)

Scope = Tuple[TextBlock, ...]

MARKER_SUFFIXES = (".-", ". -", " -", ".", "°", ")")
ADVERB_AFTER_RE = re.compile(r"\s*(?:%s)(?!\w)" % ADVERB_PATTERN)
FIRST_MARKERS = ("1er", "1re", "premier", "premiere", "ier", "i", "1")


class _StepFailure(Exception):
    """Raised by step handlers; turned into a NavigationError by locate()."""


def _surface(text: str) -> str:
    """Unify dashes, spaces and the degree sign while keeping case."""
    chars = ["-" if c in HYPHENS else " " if c.isspace() else "°" if c == "º" else c for c in text]
    return re.sub(r" +", " ", "".join(chars)).lstrip()


def marker_forms(marker: str) -> List[str]:
    """Surface forms a division marker takes at the start of its block."""
    marker = _surface(marker).strip()
    if marker[-1:] in (".", "-", ")", "°", ":") or "°" in marker:
        return [marker]
    return [marker + suffix for suffix in MARKER_SUFFIXES]


def _article_key(number: str) -> str:
    key = re.sub(r"[\s.]", "", fold_text(number))
    return "1" if key in ("1er", "premier") else key


class DocumentNavigator:
    """Locates fragments of one document; safe to reuse across calls and threads."""

    def __init__(self, document: Document, preview_length: Optional[int] = None):
        self.document = document
        self.preview_length = preview_length or config.preview_length()

    def locate(self, path: Union[CompiledPath, Sequence[NavigationStep]]) -> NavigationResult:
        if isinstance(path, CompiledPath):
            steps, warnings = path.steps, path.warnings
        else:
            steps, warnings = tuple(path), ()

        scope: Scope = tuple(self.document.blocks)
        sentence_span: Optional[Tuple[int, int]] = None
        trail: List[str] = []
        for index, step in enumerate(steps):
            try:
                if sentence_span is not None:
                    raise _StepFailure("cannot narrow below a sentence")
                if step.kind == StepKind.SCOPE:
                    self._check_scope(step)
                elif step.kind == StepKind.DIVISION:
                    scope = self._division(step, scope)
                elif step.kind == StepKind.PORTION and step.unit == PortionKind.ALINEA:
                    scope = self._alinea(step, scope)
                elif step.kind == StepKind.PORTION and step.unit == PortionKind.SENTENCE:
                    scope, sentence_span = self._sentence(step, scope)
                else:
                    raise TypeError(f"Unsupported navigation step: {step!r}")
            except _StepFailure as e:
                error = NavigationError(step, index, self._describe(trail, scope), str(e))
                logger.warning("Navigation failed: %s", error)
                return error
            trail.append(step.label)

        return LocatedFragment(scope, self._describe(trail, scope), sentence_span, warnings)

    # --- Steps ---

    def _check_scope(self, step: NavigationStep) -> None:
        expected = self.document.article_number
        if step.unit != ScopeUnit.ARTICLE or step.relative is not None or not step.marker or not expected:
            return
        if _article_key(step.marker) != _article_key(expected):
            raise _StepFailure(f"document holds article {expected}, not article {step.marker}")

    def _division(self, step: NavigationStep, scope: Scope) -> Scope:
        if step.marker is None:
            position = self._division_by_rank(step, scope)
        else:
            position = self._division_by_marker(step, scope)
        return self._division_scope(scope, position)

    def _division_by_marker(self, step: NavigationStep, scope: Scope) -> int:
        if step.unit == DivisionKind.ITEM:
            forms = marker_forms(step.marker)
            for position, block in enumerate(scope):
                text = _surface(block.text)
                for form in forms:
                    if text.startswith(form) and not ADVERB_AFTER_RE.match(text[len(form):]):
                        return position
        else:
            regex = self._keyword_heading_re(step.unit, step.marker)
            for position, block in enumerate(scope):
                if regex.match(fold_text(block.text)):
                    return position
        raise _StepFailure(f"no block starts with division marker '{step.marker}'")

    @staticmethod
    def _keyword_heading_re(kind: DivisionKind, marker: str) -> "re.Pattern":
        folded = fold_text(marker).strip()
        identifiers = FIRST_MARKERS if folded in FIRST_MARKERS else (folded,)
        return re.compile(
            r"^\s*%s\s+(?:%s)(?![\w'])(?!\s+(?:%s)(?!\w))"
            % (re.escape(kind.value), "|".join(re.escape(i) for i in identifiers), ADVERB_PATTERN)
        )

    def _division_by_rank(self, step: NavigationStep, scope: Scope) -> int:
        headings = [(position, heading_marker(block.text)) for position, block in enumerate(scope)]
        if step.unit == DivisionKind.ITEM:
            ranks = [h.rank for _, h in headings if h is not None and h.kind == DivisionKind.ITEM]
            candidates = [p for p, h in headings if h is not None and ranks and h.rank == min(ranks)]
        else:
            candidates = [p for p, h in headings if h is not None and h.kind == step.unit]
        return candidates[self._resolve_index(step.index, len(candidates), step.unit.value)]

    def _division_scope(self, scope: Scope, position: int) -> Scope:
        block = scope[position]
        if block.children:
            return (block,) + block.children
        heading = heading_marker(block.text)
        end = position + 1
        while end < len(scope):
            other = heading_marker(scope[end].text)
            if other is not None and (heading is None or other.rank <= heading.rank):
                break
            end += 1
        return scope[position:end]

    def _alinea(self, step: NavigationStep, scope: Scope) -> Scope:
        block = scope[self._resolve_index(step.index, len(scope), "alinea")]
        return (block,) + block.children

    def _sentence(self, step: NavigationStep, scope: Scope) -> Tuple[Scope, Tuple[int, int]]:
        sentences = [(block, span) for block in scope for span in split_sentences(block.text)]
        block, span = sentences[self._resolve_index(step.index, len(sentences), "phrase")]
        return (block,), span

    @staticmethod
    def _resolve_index(ordinal: Optional[int], count: int, unit: str) -> int:
        """1-based or negative ordinal to a 0-based position."""
        if not ordinal:
            raise _StepFailure(f"missing {unit} ordinal")
        position = ordinal - 1 if ordinal > 0 else count + ordinal
        if not 0 <= position < count:
            raise _StepFailure(f"{unit} {ordinal} out of range: scope has {count}")
        return position

    def _describe(self, trail: List[str], scope: Scope) -> str:
        where = " > ".join(trail) if trail else "document"
        if not scope:
            return f"{where} (empty)"
        return f"{where} ({len(scope)} blocks, starting '{preview(scope[0].text, self.preview_length)}')"
