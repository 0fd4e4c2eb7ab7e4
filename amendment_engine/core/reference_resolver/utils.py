"""
Text utilities shared by the parsers and the navigator.
"""

import re
import unicodedata
from typing import List, NamedTuple, Optional, Tuple

from amendment_engine.core.reference_resolver.lexicon import (
    ADVERB_PATTERN,
    DIVISION_KEYWORD_PATTERN,
    DIVISION_KEYWORDS,
    DIVISION_RANKS,
    RANK_LOWER,
    RANK_NUMBERED,
    RANK_ROMAN,
    RANK_UPPER,
)
from amendment_engine.core.reference_resolver.models import DivisionKind

HYPHENS = {"‐", "‑", "‒", "–", "—", "―", "−"}
APOSTROPHES = {"’", "‘", "ʼ", "´", "`"}
SPACES = {" ", " ", " ", " ", " ", " "}


def fold_char(ch: str) -> str:
    """Fold one character to exactly one character: lowercase, no diacritics."""
    if ch in HYPHENS:
        return "-"
    if ch in APOSTROPHES:
        return "'"
    if ch in SPACES:
        return " "
    if ch == "º":  # masculine ordinal indicator, often typed for the degree sign
        return "°"
    decomposed = unicodedata.normalize("NFD", ch)
    base = "".join(c for c in decomposed if not unicodedata.combining(c)).lower()
    return base[0] if len(base) >= 1 else ch


def fold_text(text: str) -> str:
    """Fold a string character by character; the result has the same length as text."""
    return "".join(fold_char(ch) for ch in text)


def normalize_for_match(text: str) -> Tuple[str, List[int]]:
    """Normalize text for robust substring matching and return index map to original text.
    Normalization steps:
      - Unicode NFKC (per character, so the map stays exact)
      - Collapse all whitespace (incl. NBSP) to single space
      - Normalize hyphen-like chars to '-'
      - Normalize French quotes to simple quotes
      - Lowercase
    Returns (normalized_text, index_map) where index_map[i] gives original index for normalized char i.
    """
    quotes_map = {"«": '"', "»": '"', "“": '"', "”": '"'}
    out_chars: List[str] = []
    index_map: List[int] = []
    last_was_space = False
    for orig_idx, raw in enumerate(text):
        for ch in unicodedata.normalize("NFKC", raw):
            if ch.isspace():
                if not last_was_space:
                    out_chars.append(" ")
                    index_map.append(orig_idx)
                    last_was_space = True
                continue
            last_was_space = False
            if ch in HYPHENS:
                out_chars.append("-")
            elif ch in quotes_map:
                out_chars.append(quotes_map[ch])
            elif ch in APOSTROPHES:
                out_chars.append("'")
            else:
                out_chars.append(ch.lower())
            index_map.append(orig_idx)
    while out_chars and out_chars[0] == " ":
        out_chars.pop(0)
        index_map.pop(0)
    while out_chars and out_chars[-1] == " ":
        out_chars.pop()
        index_map.pop()
    return "".join(out_chars), index_map


def find_normalized(text: str, target: str, start: int = 0) -> Optional[Tuple[int, int]]:
    """Find target in text ignoring spacing, dash, quote and case variations.

    Returns the (start, stop) span in the original text, or None.
    """
    norm_text, index_map = normalize_for_match(text)
    norm_target, _ = normalize_for_match(target)
    if not norm_target:
        return None
    nstart = 0
    if start:
        nstart = next((i for i, o in enumerate(index_map) if o >= start), len(index_map))
    idx = norm_text.find(norm_target, nstart)
    if idx == -1:
        return None
    return index_map[idx], index_map[idx + len(norm_target) - 1] + 1


# --- Sentence segmentation ---

SENTENCE_END_RE = re.compile(r"[.!?…]+[\"»)\]]*(?=\s)")
ABBREVIATIONS = {"art", "n", "no", "al", "cf", "etc", "p", "mm", "m", "mme", "dr", "lo"}
LEADING_MARKER_RE = re.compile(r"^\s*(?:[IVXLC]+|[A-Z]|\d+|[a-z]{1,3})(?:\s+(?:%s))?$" % ADVERB_PATTERN)
# "L. 254-1", "R. 12": a code prefix is followed by the article number
CODE_PREFIX_TAIL_RE = re.compile(r"\.\s*\d")


def _is_false_boundary(text: str, seg_start: int, punct_start: int) -> bool:
    if text[punct_start] != ".":
        return False
    head = text[seg_start:punct_start]
    words = head.split()
    if not words:
        return True
    last = words[-1]
    if len(last) == 1 and last.isalpha() and last.isupper() and CODE_PREFIX_TAIL_RE.match(text, punct_start):
        return True
    if last.lower().strip("(") in ABBREVIATIONS:
        return True
    if LEADING_MARKER_RE.match(head):
        return True  # "II. Texte", "1. Texte" at the start of a block
    return False


def split_sentences(text: str) -> List[Tuple[int, int]]:
    """Split text into sentences and return their (start, stop) character spans.

    A sentence ends on terminal punctuation followed by whitespace. Surrounding
    whitespace is excluded from the spans and empty segments are dropped.
    """
    spans: List[Tuple[int, int]] = []
    seg_start = 0
    for match in SENTENCE_END_RE.finditer(text):
        if _is_false_boundary(text, seg_start, match.start()):
            continue
        _append_span(spans, text, seg_start, match.end())
        seg_start = match.end()
    _append_span(spans, text, seg_start, len(text))
    return spans


def _append_span(spans: List[Tuple[int, int]], text: str, start: int, stop: int) -> None:
    while start < stop and text[start].isspace():
        start += 1
    while stop > start and text[stop - 1].isspace():
        stop -= 1
    if stop > start:
        spans.append((start, stop))


# --- Heading markers ---

class HeadingMarker(NamedTuple):
    rank: int
    marker: str
    kind: DivisionKind


_ADVERB = r"(?:\s+(?P<adverb>%s)\b)?" % ADVERB_PATTERN

KEYWORD_HEADING_RE = re.compile(
    r"^\s*(?P<keyword>%s)\s+(?P<id>[ivxlc]+(?:er)?|\d+(?:er|re)?|premier|premiere|unique|[a-z])%s(?=\s|$|[.:)\-])"
    % (DIVISION_KEYWORD_PATTERN, _ADVERB)
)
ROMAN_HEADING_RE = re.compile(r"^\s*(?P<id>[IVX][IVXLC]*)%s(?=\s*[.)\-])" % _ADVERB)
UPPER_HEADING_RE = re.compile(r"^\s*(?P<id>[A-Z])%s(?=\s*[.)\-])" % _ADVERB)
NUMBERED_HEADING_RE = re.compile(r"^\s*(?P<id>\d+)\s*°%s" % _ADVERB)
LOWER_HEADING_RE = re.compile(r"^\s*(?P<id>([a-z])\2{0,2})%s\s*\)" % _ADVERB)


def _with_adverb(marker: str, match: "re.Match") -> str:
    adverb = match.group("adverb")
    return f"{marker} {adverb}" if adverb else marker


def heading_marker(text: str) -> Optional[HeadingMarker]:
    """Detect the division marker opening a block of text, if any.

    Lower rank numbers are coarser: a keyword heading ("Section 2") outranks a
    roman item ("II.-"), which outranks "A.", then "1°", then "a)".
    """
    folded = fold_text(text)
    match = KEYWORD_HEADING_RE.match(folded)
    if match:
        kind = DIVISION_KEYWORDS[match.group("keyword")]
        return HeadingMarker(DIVISION_RANKS[kind], _with_adverb(match.group("id"), match), kind)
    # Markers are case-sensitive; only dashes and spaces are unified.
    source = "".join(c if c.isupper() or c.isdigit() else f for c, f in zip(text, folded))
    match = ROMAN_HEADING_RE.match(source)
    if match:
        return HeadingMarker(RANK_ROMAN, _with_adverb(match.group("id"), match), DivisionKind.ITEM)
    match = UPPER_HEADING_RE.match(source)
    if match:
        return HeadingMarker(RANK_UPPER, _with_adverb(match.group("id"), match), DivisionKind.ITEM)
    match = NUMBERED_HEADING_RE.match(source)
    if match:
        return HeadingMarker(RANK_NUMBERED, _with_adverb(match.group("id") + "°", match), DivisionKind.ITEM)
    match = LOWER_HEADING_RE.match(source)
    if match:
        return HeadingMarker(RANK_LOWER, _with_adverb(match.group("id"), match), DivisionKind.ITEM)
    return None


def preview(text: str, length: int) -> str:
    """Single-line preview of text for log and error messages."""
    flat = " ".join(text.split())
    return flat if len(flat) <= length else flat[: length - 3] + "..."
