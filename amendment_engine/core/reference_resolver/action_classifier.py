"""
Action classifier: recognizes amendment verbs and their quoted content.

    [placement] [subject] verb [object] [citations] [terminal]

    "Après le III, il est inséré un III bis ainsi rédigé : « ... »"
    "À la fin du premier alinéa, les mots : « X » sont remplacés par les mots : « Y »"
    "est remplacée par trois alinéas ainsi rédigés"
    "(Supprimé)"

Matching is done on folded text, so accents and case never matter. Missing
citations are not an error; an opening quotation mark without its closing
mark makes the whole action fail.
"""

import logging
import re
from typing import List, Optional, Tuple

from amendment_engine.core.reference_resolver.combinators import FAIL
from amendment_engine.core.reference_resolver.lexicon import WORD_DESIGNATORS
from amendment_engine.core.reference_resolver.models import (
    ActionKind,
    ActionMode,
    ActionNode,
    CitationNode,
    Position,
)
from amendment_engine.core.reference_resolver.reference_parser import parse_reference
from amendment_engine.core.reference_resolver.scan_context import ScanContext

logger = logging.getLogger(__name__)

QUOTE_PAIRS = {"«": "»", "“": "”", '"': '"'}
CLOSING_QUOTES = {"»", "”"}

_AGREEMENT = r"(?:e|s|es)?"


class ActionClassifier:
    """
    Parses an amendment action at the cursor of a ScanContext.

    Verbs are tried in order; the first match decides the kind and default mode,
    and a leading placement clause refines the mode of insertions.
    """

    PLACEMENT_RE = re.compile(r"(?P<where>apres|avant|a la fin|au debut)(?!\w)")
    SUBJECT_RE = re.compile(r"(?:il|ils)(?!\w)")
    AUXILIARY_RE = re.compile(r"(?:est|sont)(?:\s+(?:egalement|en outre))?(?!\w)")
    SUPPRESSED_RE = re.compile(r"\(\s*supprime%s\s*\)" % _AGREEMENT)

    VERBS: List[Tuple["re.Pattern", ActionKind, ActionMode]] = [
        (re.compile(r"remplace%s(?:\s+par)?(?!\w)" % _AGREEMENT), ActionKind.REPLACE, ActionMode.SUBSTITUTE),
        (re.compile(r"ainsi\s+redige%s(?!\w)" % _AGREEMENT), ActionKind.REPLACE, ActionMode.REWRITE),
        (re.compile(r"redige%s\s+(?:ainsi|comme\s+suit)(?!\w)" % _AGREEMENT), ActionKind.REPLACE, ActionMode.REWRITE),
        (re.compile(r"ainsi\s+modifie%s(?!\w)" % _AGREEMENT), ActionKind.REPLACE, ActionMode.AMEND),
        (re.compile(r"modifie%s\s+(?:ainsi|comme\s+suit)(?!\w)" % _AGREEMENT), ActionKind.REPLACE, ActionMode.AMEND),
        (re.compile(r"insere%s(?!\w)" % _AGREEMENT), ActionKind.CREATE, ActionMode.INSERT),
        (re.compile(r"cree%s(?!\w)" % _AGREEMENT), ActionKind.CREATE, ActionMode.INSERT),
        (re.compile(r"ajoute%s(?!\w)" % _AGREEMENT), ActionKind.CREATE, ActionMode.APPEND),
        (re.compile(r"complete%s(?:\s+par)?(?!\w)" % _AGREEMENT), ActionKind.CREATE, ActionMode.APPEND),
        (re.compile(r"abroge%s(?!\w)" % _AGREEMENT), ActionKind.DELETE, ActionMode.REMOVE),
        (re.compile(r"supprime%s(?!\w)" % _AGREEMENT), ActionKind.DELETE, ActionMode.REMOVE),
        (re.compile(r"retabli%s(?!\w)" % _AGREEMENT), ActionKind.CREATE_OR_REPLACE, ActionMode.RESTORE),
    ]

    PLACEMENT_MODES = {
        "apres": ActionMode.INSERT_AFTER,
        "avant": ActionMode.INSERT_BEFORE,
        "a la fin": ActionMode.APPEND,
        "au debut": ActionMode.PREPEND,
    }

    # "trois alinéas", "un III bis", "une phrase": stops before "ainsi", ":" or a quotation.
    LABEL_RE = re.compile(r"(?P<label>\w[^:«“\".;\n]*?)(?=\s+ainsi(?!\w)|\s*[:«“\"]|\s*[.;]|\s*$)")
    REDIGE_RE = re.compile(r"ainsi\s+redige%s(?!\w)" % _AGREEMENT)
    TERMINAL_RE = re.compile(r"[.;,]")

    def __call__(self, ctx: ScanContext):
        return self.parse(ctx)

    def parse(self, ctx: ScanContext):
        """Parse an action at the cursor; FAIL with the cursor unchanged if none."""
        checkpoint = ctx.save()
        ctx.skip_whitespace()
        start = ctx.position

        suppressed = ctx.match_pattern(self.SUPPRESSED_RE)
        if suppressed is not None:
            return ActionNode(Position(start, ctx.position), ActionKind.DELETE, ActionMode.REMOVE)

        where, anchor, anchor_words = self._placement(ctx)
        targets = self._subject(ctx)
        if targets is FAIL:
            ctx.restore(checkpoint)
            return FAIL

        verb = self._verb(ctx)
        if verb is None:
            ctx.restore(checkpoint)
            return FAIL
        kind, mode = verb
        if where is not None and kind == ActionKind.CREATE:
            mode = self.PLACEMENT_MODES[where]

        citations, label = (), None
        if kind != ActionKind.DELETE:
            citations, label = self._object(ctx)
        if citations is FAIL:
            logger.debug("Unbalanced quotation after verb at offset %d", ctx.position)
            ctx.restore(checkpoint)
            return FAIL

        ctx.match_pattern(self.TERMINAL_RE)
        stop = ctx.position
        if ctx.match_pattern(lambda ch: ch in CLOSING_QUOTES) is not None:
            logger.debug("Dangling closing quotation mark at offset %d", ctx.position)
            ctx.restore(checkpoint)
            return FAIL

        if anchor_words:
            targets = targets + anchor_words
        return ActionNode(
            Position(start, stop),
            kind,
            mode,
            citations=citations,
            targets=targets,
            anchor=anchor,
            content_label=label,
        )

    # --- Clauses ---

    def _placement(self, ctx: ScanContext):
        """ "Après le III," / "avant le mot : « X »," / "À la fin du 2°," """
        checkpoint = ctx.save()
        token = ctx.match_pattern(self.PLACEMENT_RE)
        if token is None:
            return None, None, ()
        where = " ".join(token.folded.split())
        words = self._designated_words(ctx)
        if words is FAIL:
            ctx.restore(checkpoint)
            return None, None, ()
        anchor = None
        if not words:
            anchor = parse_reference(ctx)
            if anchor is FAIL:
                ctx.restore(checkpoint)
                return None, None, ()
        ctx.match_literal(",")
        return where, anchor, words

    def _subject(self, ctx: ScanContext):
        """ "il", or quoted words the action applies to. Returns a tuple of citations, or FAIL."""
        if ctx.match_pattern(self.SUBJECT_RE) is not None:
            return ()
        return self._designated_words(ctx)

    def _designated_words(self, ctx: ScanContext):
        """ "les mots : « X » et « Y »" -> citations; () when no designator; FAIL when malformed."""
        checkpoint = ctx.save()
        if ctx.match_literal(*WORD_DESIGNATORS) is None:
            return ()
        ctx.match_literal(":")
        citations = self._citations(ctx)
        if citations is FAIL or not citations:
            ctx.restore(checkpoint)
            return FAIL if citations is FAIL else ()
        return citations

    def _verb(self, ctx: ScanContext) -> Optional[Tuple[ActionKind, ActionMode]]:
        checkpoint = ctx.save()
        if ctx.match_pattern(self.AUXILIARY_RE) is None:
            return None
        for regex, kind, mode in self.VERBS:
            if ctx.match_pattern(regex) is not None:
                return kind, mode
        ctx.restore(checkpoint)
        return None

    def _object(self, ctx: ScanContext):
        """Content after the verb: designated words, or a label, then citations."""
        words = self._designated_words(ctx)
        if words is FAIL:
            return FAIL, None
        if words:
            return words, None

        label = None
        token = ctx.match_pattern(self.LABEL_RE)
        if token is not None:
            label = token.text.strip()
            ctx.match_pattern(self.REDIGE_RE)
        ctx.match_literal(":")
        citations = self._citations(ctx)
        return citations, label

    # --- Citations ---

    def _citations(self, ctx: ScanContext):
        """Zero or more quotations separated by ",", ";" or "et". FAIL if one is unbalanced."""
        citations: List[CitationNode] = []
        while True:
            before = ctx.save()
            if citations:
                ctx.match_literal(",", ";", "et")
            citation = parse_citation(ctx)
            if citation is FAIL:
                ctx.restore(before)
                if _opens_quotation(ctx):
                    return FAIL
                break
            citations.append(citation)
        return tuple(citations)


def _opens_quotation(ctx: ScanContext) -> bool:
    checkpoint = ctx.save()
    ctx.skip_whitespace()
    opens = ctx.peek() in QUOTE_PAIRS
    ctx.restore(checkpoint)
    return opens


def parse_citation(ctx: ScanContext):
    """Parse one quotation at the cursor.

    Guillemets nest; a « at the start of a line continues a multi-paragraph
    quotation instead of opening a nested one. Returns FAIL, with the cursor
    unchanged, when there is no quotation or it is not closed.
    """
    checkpoint = ctx.save()
    ctx.skip_whitespace()
    start = ctx.position
    source = ctx.source
    opener = source[start:start + 1]
    if opener not in QUOTE_PAIRS:
        ctx.restore(checkpoint)
        return FAIL
    closer = QUOTE_PAIRS[opener]
    depth = 1
    line_start = False
    i = start + 1
    while i < len(source):
        ch = source[i]
        if ch == "\n":
            line_start = True
        elif line_start and ch.isspace():
            pass
        else:
            if opener == closer:
                if ch == closer:
                    depth = 0
            elif ch == opener and not line_start:
                depth += 1
            elif ch == closer:
                depth -= 1
            line_start = False
            if depth == 0:
                break
        i += 1
    if depth != 0:
        ctx.restore(checkpoint)
        return FAIL
    ctx.position = i + 1
    return CitationNode(Position(start, i + 1), _strip_continuations(source[start + 1:i], opener))


def _strip_continuations(raw: str, opener: str) -> str:
    lines = raw.split("\n")
    cleaned = [lines[0].strip()]
    for line in lines[1:]:
        line = line.strip()
        if line.startswith(opener):
            line = line[len(opener):].strip()
        cleaned.append(line)
    return "\n".join(line for line in cleaned if line)


_default_classifier = ActionClassifier()


def parse_action(ctx: ScanContext):
    """Classify the action at the cursor with the default verb table; FAIL if none."""
    return _default_classifier.parse(ctx)
