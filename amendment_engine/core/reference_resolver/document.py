"""
Builders for the document tree consumed by the navigator.

Documents normally come from a markup simplification layer that fills in
TextBlock.markup and TextBlock.span. These helpers build flat documents from
plain article text, where each alinéa is one block.
"""

import re
from typing import Iterable, List, Optional

from amendment_engine.core.reference_resolver.models import Document, TextBlock

PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")
LINE_RE = re.compile(r"[^\n]+")


def document_from_text(text: str, article_number: Optional[str] = None, text_id: Optional[str] = None,
                       title: Optional[str] = None) -> Document:
    """
    Split plain article text into alinéa blocks.

    Blank lines separate alinéas when the text has any; otherwise every
    non-empty line is an alinéa. Each block keeps its span in text.
    """
    blocks: List[TextBlock] = []
    if PARAGRAPH_BREAK_RE.search(text):
        start = 0
        for match in list(PARAGRAPH_BREAK_RE.finditer(text)) + [None]:
            stop = match.start() if match is not None else len(text)
            _append_block(blocks, text, start, stop)
            if match is not None:
                start = match.end()
    else:
        for match in LINE_RE.finditer(text):
            _append_block(blocks, text, match.start(), match.end())
    return Document(tuple(blocks), article_number=article_number, text_id=text_id, title=title)


def document_from_paragraphs(paragraphs: Iterable[str], article_number: Optional[str] = None) -> Document:
    """One block per non-empty paragraph, in order."""
    blocks = tuple(TextBlock(p.strip()) for p in paragraphs if p.strip())
    return Document(blocks, article_number=article_number)


def _append_block(blocks: List[TextBlock], text: str, start: int, stop: int) -> None:
    while start < stop and text[start].isspace():
        start += 1
    while stop > start and text[stop - 1].isspace():
        stop -= 1
    if stop > start:
        blocks.append(TextBlock(text[start:stop], span=(start, stop)))
