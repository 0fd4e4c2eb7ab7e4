"""
Scan context: a cursor over an immutable sentence.

The context keeps a folded shadow of the source (lowercase, no diacritics,
unified dashes/apostrophes/spaces) with exactly one character per source
character, so matches found in the folded text map back to the source with
the same offsets.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from amendment_engine.core.reference_resolver.utils import fold_text


@dataclass(frozen=True)
class Token:
    """A matched span. text is the source slice, folded its folded counterpart."""
    start: int
    stop: int
    text: str
    folded: str
    match: Optional["re.Match"] = None
    source: str = ""

    def group(self, name: Union[int, str], fold: bool = False) -> Optional[str]:
        """Source (or folded) text of a regex group, None if it did not participate."""
        if self.match is None:
            return None
        start, stop = self.match.span(name)
        if start == -1:
            return None
        if fold:
            return self.match.group(name)
        return self.source[start:stop]

    def span(self, name: Union[int, str]):
        return self.match.span(name) if self.match is not None else (-1, -1)


class ScanContext:
    """
    Mutable cursor over an immutable source string.

    Matching methods skip leading whitespace, return a Token on success and
    leave the cursor untouched on failure.
    """

    def __init__(self, source: str, position: int = 0):
        if not 0 <= position <= len(source):
            raise ValueError(f"Start position {position} outside source of length {len(source)}")
        self.source = source
        self.folded = fold_text(source)
        self.position = position

    def __repr__(self) -> str:
        return f"ScanContext(position={self.position}, remaining={self.remaining()[:30]!r})"

    # --- Cursor ---

    def save(self) -> int:
        return self.position

    def restore(self, checkpoint: int) -> None:
        self.position = checkpoint

    def remaining(self) -> str:
        return self.source[self.position:]

    def peek(self, n: int = 1) -> str:
        return self.source[self.position:self.position + n]

    def at_end(self) -> bool:
        return not self.source[self.position:].strip()

    def skip_whitespace(self) -> None:
        while self.position < len(self.source) and self.source[self.position].isspace():
            self.position += 1

    # --- Matching ---

    def _start(self, skip_space: bool) -> int:
        pos = self.position
        if skip_space:
            while pos < len(self.source) and self.source[pos].isspace():
                pos += 1
        return pos

    def _token(self, start: int, stop: int, match: Optional["re.Match"] = None) -> Token:
        self.position = stop
        return Token(start, stop, self.source[start:stop], self.folded[start:stop], match, self.source)

    def match_literal(self, *alternatives: str, fold: bool = True, word: bool = True,
                      skip_space: bool = True) -> Optional[Token]:
        """Match the first listed alternative found at the cursor.

        With fold, alternatives are compared against the folded text and must
        themselves be written folded. With word, an alternative ending in a
        letter or digit must not be followed by another one.
        """
        start = self._start(skip_space)
        haystack = self.folded if fold else self.source
        for alternative in alternatives:
            stop = start + len(alternative)
            if haystack[start:stop] != alternative:
                continue
            if word and alternative[-1:].isalnum() and stop < len(haystack) and (
                    haystack[stop].isalnum() or haystack[stop] == "_"):
                continue
            return self._token(start, stop)
        return None

    def match_pattern(self, pattern: Union[str, "re.Pattern", Callable[[str], bool]], fold: bool = True,
                      skip_space: bool = True) -> Optional[Token]:
        """Match a regex at the cursor, or the longest non-empty run of characters
        satisfying a predicate."""
        start = self._start(skip_space)
        haystack = self.folded if fold else self.source
        if not isinstance(pattern, (str, re.Pattern)):
            stop = start
            while stop < len(haystack) and pattern(haystack[stop]):
                stop += 1
            if stop == start:
                return None
            return self._token(start, stop)
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        match = regex.match(haystack, start)
        if match is None:
            return None
        return self._token(start, match.end(), match)
