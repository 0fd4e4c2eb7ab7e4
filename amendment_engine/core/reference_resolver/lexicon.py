"""
French legal drafting lexicon.

All keys are folded (lowercase, no diacritics) so they can be matched against
the folded shadow of a ScanContext.
"""

from typing import Dict, List

from amendment_engine.core.reference_resolver.models import DivisionKind, PortionKind


# bis, ter, ... used to insert a division between two existing ones ("III bis").
MULTIPLICATIVE_ADVERBS: List[str] = [
    "bis", "ter", "quater", "quinquies", "sexies", "septies", "octies", "nonies",
    "decies", "undecies", "duodecies", "terdecies", "quaterdecies", "quindecies",
    "sexdecies", "septdecies", "octodecies", "novodecies", "vicies",
]

# Longest alternatives first, regex alternation is ordered.
ADVERB_PATTERN = "|".join(sorted(MULTIPLICATIVE_ADVERBS, key=len, reverse=True))

ORDINAL_WORDS: Dict[str, int] = {
    "premier": 1, "premiere": 1, "1er": 1, "1re": 1, "1ere": 1,
    "second": 2, "seconde": 2, "deuxieme": 2,
    "troisieme": 3,
    "quatrieme": 4,
    "cinquieme": 5,
    "sixieme": 6,
    "septieme": 7,
    "huitieme": 8,
    "neuvieme": 9,
    "dixieme": 10,
    "onzieme": 11,
    "douzieme": 12,
    "treizieme": 13,
    "quatorzieme": 14,
    "quinzieme": 15,
    "seizieme": 16,
    "dix-septieme": 17,
    "dix-huitieme": 18,
    "dix-neuvieme": 19,
    "vingtieme": 20,
    "dernier": -1, "derniere": -1,
    "avant-dernier": -2, "avant-derniere": -2,
}

ORDINAL_PATTERN = "|".join(sorted((k for k in ORDINAL_WORDS if not k[0].isdigit()), key=len, reverse=True))

CARDINAL_WORDS: Dict[str, int] = {
    "un": 1, "une": 1, "deux": 2, "trois": 3, "quatre": 4, "cinq": 5,
    "six": 6, "sept": 7, "huit": 8, "neuf": 9, "dix": 10,
}

CARDINAL_PATTERN = "|".join(sorted(CARDINAL_WORDS, key=len, reverse=True))

# Plural forms first so "sections" is not read as "section" + "s".
DIVISION_KEYWORDS: Dict[str, DivisionKind] = {
    "sous-sous-paragraphes": DivisionKind.SUBSUBPARAGRAPH,
    "sous-sous-paragraphe": DivisionKind.SUBSUBPARAGRAPH,
    "sous-paragraphes": DivisionKind.SUBPARAGRAPH,
    "sous-paragraphe": DivisionKind.SUBPARAGRAPH,
    "sous-sections": DivisionKind.SUBSECTION,
    "sous-section": DivisionKind.SUBSECTION,
    "sous-titres": DivisionKind.SUBTITLE,
    "sous-titre": DivisionKind.SUBTITLE,
    "paragraphes": DivisionKind.PARAGRAPH,
    "paragraphe": DivisionKind.PARAGRAPH,
    "chapitres": DivisionKind.CHAPTER,
    "chapitre": DivisionKind.CHAPTER,
    "sections": DivisionKind.SECTION,
    "section": DivisionKind.SECTION,
    "parties": DivisionKind.PART,
    "partie": DivisionKind.PART,
    "livres": DivisionKind.BOOK,
    "livre": DivisionKind.BOOK,
    "titres": DivisionKind.TITLE,
    "titre": DivisionKind.TITLE,
}

DIVISION_KEYWORD_PATTERN = "|".join(sorted(DIVISION_KEYWORDS, key=len, reverse=True))

PORTION_KEYWORDS: Dict[str, PortionKind] = {
    "alineas": PortionKind.ALINEA,
    "alinea": PortionKind.ALINEA,
    "phrases": PortionKind.SENTENCE,
    "phrase": PortionKind.SENTENCE,
}

PORTION_KEYWORD_PATTERN = "alineas|alinea|phrases|phrase"

# Heading ranks used to close a division's scope: a division ends at the next
# heading of the same or a higher (smaller) rank.
DIVISION_RANKS: Dict[DivisionKind, int] = {
    DivisionKind.PART: 0,
    DivisionKind.BOOK: 1,
    DivisionKind.TITLE: 2,
    DivisionKind.SUBTITLE: 3,
    DivisionKind.CHAPTER: 4,
    DivisionKind.SECTION: 5,
    DivisionKind.SUBSECTION: 6,
    DivisionKind.PARAGRAPH: 7,
    DivisionKind.SUBPARAGRAPH: 8,
    DivisionKind.SUBSUBPARAGRAPH: 9,
}
RANK_ROMAN = 10
RANK_UPPER = 11
RANK_NUMBERED = 12
RANK_LOWER = 13

# Determiners that may open a reference; longest first.
DETERMINERS: List[str] = [
    "de la", "de l'", "a la", "a l'", "du", "des", "de", "au", "aux", "le", "la", "les", "l'",
]

# Words joining a finer reference to its coarser parent: "X du Y".
COMPOSITION_CONNECTORS: List[str] = ["de la", "de l'", "des", "du", "de"]

# Words closing a bounded interval: "I à III", "du 1° au 3°".
INTERVAL_CONNECTORS: List[str] = ["a la", "a l'", "aux", "au", "a"]

# Words designating quoted targets: "les mots : « X »".
WORD_DESIGNATORS: List[str] = [
    "les mots", "le mot", "les mentions", "la mention", "les references", "la reference",
    "les dates", "la date", "les montants", "le montant", "les taux", "le taux",
    "les chiffres", "le chiffre", "les nombres", "le nombre", "l'annee", "le signe",
    "la phrase", "les phrases", "la ligne", "les lignes", "l'alinea", "les alineas",
]

