"""
Reference grammar.

Recursive-descent parser for French legal citations, from "le II" to "la
seconde phrase du dernier alinéa du II de l'article 224 du code général des
impôts". Produces immutable reference nodes whose positions cover exactly the
consumed input, leading determiner included.

Atoms are tried most specific first:

    counted portions   "les deux dernières phrases"
    portion lists      "les premier et deuxième alinéas", "les deuxième à quatrième alinéas"
    portions           "le dernier alinéa", "la seconde phrase", "l'alinéa 3"
    keyword divisions  "la section 2", "le chapitre III bis", "la deuxième section"
    articles           "l'article L. 254-1", "les articles 3 et 4", "l'article précédent"
    texts              "le code général des impôts", "la loi n° 2020-1721 du 29 décembre 2020"
    items              "II", "A", "3° bis", "a"

Atoms and intervals ("I à III") chain through "du"/"de la"/"de l'"/"des"/"de"
into parent/child pairs where the right-hand reference is always the coarser
parent. Complete chains are then joined by "et"/"ou" into enumerations.
"""

import logging
import re
from typing import List, Optional, Tuple

from amendment_engine.core.reference_resolver.combinators import (
    FAIL,
    Parser,
    alternative,
    literal,
    sequence,
    spanned,
)
from amendment_engine.core.reference_resolver.lexicon import (
    ADVERB_PATTERN,
    CARDINAL_PATTERN,
    CARDINAL_WORDS,
    COMPOSITION_CONNECTORS,
    DETERMINERS,
    DIVISION_KEYWORD_PATTERN,
    DIVISION_KEYWORDS,
    INTERVAL_CONNECTORS,
    ORDINAL_PATTERN,
    ORDINAL_WORDS,
    PORTION_KEYWORDS,
)
from amendment_engine.core.reference_resolver.models import (
    ArticleReference,
    BoundedIntervalReference,
    CountedIntervalReference,
    DivisionKind,
    DivisionReference,
    EnumerationReference,
    ParentChildReference,
    PortionReference,
    Position,
    ReferenceNode,
    TextReference,
)
from amendment_engine.core.reference_resolver.scan_context import ScanContext, Token

logger = logging.getLogger(__name__)

# --- Patterns (matched on folded text unless noted) ---

ORD = r"(?:%s|\d+(?:ere|eme|er|re|e))(?![\w-])" % ORDINAL_PATTERN
ADVERB = r"(?:\s+(?P<adverb>%s)(?!\w))?" % ADVERB_PATTERN

COUNTED_PORTIONS_RE = re.compile(
    r"(?P<count>%s|\d+)\s+(?P<ord>premier(?:e)?s|dernier(?:e)?s)\s+(?P<kind>alineas|phrases)(?!\w)" % CARDINAL_PATTERN
)
PORTION_LIST_RE = re.compile(r"(?P<list>%s(?:\s*(?:,|et)\s*%s)+)\s+(?P<kind>alineas|phrases)(?!\w)" % (ORD, ORD))
PORTION_RANGE_RE = re.compile(r"(?P<first>%s)\s+a\s+(?P<last>%s)\s+(?P<kind>alineas|phrases)(?!\w)" % (ORD, ORD))
PORTION_RE = re.compile(r"(?P<ord>%s)\s+(?P<kind>alinea|phrase)(?!\w)" % ORD)
NUMBERED_PORTION_RE = re.compile(r"(?P<kind>alinea|phrase)\s+(?P<num>\d+|premier|unique)(?!\w)")
ORDINAL_TOKEN_RE = re.compile(ORD)

KEYWORD_DIVISION_RE = re.compile(
    r"(?P<keyword>%s)\s+(?P<id>[ivxlc]+(?:er)?|\d+(?:er|re)?|premier|premiere|unique|[a-z])(?![\w'])%s"
    % (DIVISION_KEYWORD_PATTERN, ADVERB)
)
RANKED_DIVISION_RE = re.compile(r"(?P<ord>%s)\s+(?P<keyword>%s)(?!\w)" % (ORD, DIVISION_KEYWORD_PATTERN))

ARTICLE_NUMBER = r"(?:(?:lo|l|r|d)\s*\.?\s*|a\s*\.\s*)?\d+(?:er)?(?:[-.]\d+)*(?:\s+(?:%s)(?!\w))?" % ADVERB_PATTERN
ARTICLE_RE = re.compile(r"article\s+(?P<number>%s|premier|unique|liminaire)(?![\w-])" % ARTICLE_NUMBER)
ARTICLE_LIST_RE = re.compile(
    r"articles\s+(?P<list>%s(?:\s*(?:,|et|a)\s*%s)+)(?![\w-])" % (ARTICLE_NUMBER, ARTICLE_NUMBER)
)
ARTICLE_NUMBER_RE = re.compile(ARTICLE_NUMBER)
RELATIVE_ARTICLE_RE = re.compile(
    r"(?:article\s+(?P<direction>precedent|suivant)|(?:meme|present)\s+article|(?:ledit|dudit|audit)\s+article)(?!\w)"
)

SAME_TEXT_RE = re.compile(r"(?:meme|present|ledit|dudit|audit)\s+(?P<type>code|loi|ordonnance|decret)(?!\w)")
PRESENT_LAW_RE = re.compile(r"presente\s+(?:loi|ordonnance)(?!\w)")
NUMBERED_TEXT_RE = re.compile(
    r"(?P<type>loi organique|loi|ordonnance|decret|arrete|reglement(?:\s+\((?:ue|ce)\))?|directive(?:\s+\((?:ue|ce)\))?)"
    r"\s+n\s*°\s*(?P<id>\d[\d/\-]*\d|\d)"
    r"(?:\s+du\s+(?P<date>\d{1,2}(?:er)?\s+[a-z]+\s+\d{4}))?"
)
CODE_START_RE = re.compile(r"(?:code|livre des procedures fiscales)(?!\w)")
CODE_WORD_RE = re.compile(r"[a-z][a-z\-]*")
CODE_CONNECTORS = ("et de la", "et de l'", "et des", "et du", "et de", "et d'", "et",
                   "de la", "de l'", "des", "du", "de", "d'")
CODE_STOP_WORDS = {
    "est", "sont", "il", "ils", "a", "au", "aux", "apres", "avant", "qui", "que", "dont", "dans",
    "par", "pour", "ainsi", "sur", "selon", "en", "ou", "et", "le", "la", "les", "l", "un", "une",
    "ce", "cette", "ces", "son", "sa", "ses", "leur", "article", "articles", "alinea", "alineas",
    "phrase", "code", "loi", "mentionne", "mentionnee", "mentionnes", "mentionnees", "prevu", "prevue",
    "prevus", "prevues", "compter", "jusqu", "lorsque", "si",
}

# Item markers are case-sensitive and matched on the source text.
NUMBERED_ITEM_RE = re.compile(r"(?P<id>\d+)\s*°%s" % ADVERB)
ROMAN_ITEM_RE = re.compile(r"(?P<id>[IVXLC]+)%s(?![\w'’])" % ADVERB)
UPPER_ITEM_RE = re.compile(r"(?P<id>[A-Z])%s(?![\w'’])(?!\s+(?:la|le|les|l'|l’|compter|partir)(?!\w))" % ADVERB)
LOWER_ITEM_RE = re.compile(
    r"(?P<id>([a-z])\2{0,2})%s(?![\w'’])"
    r"(?=\s*(?:[,;:.)]|$)|\s+(?:du|de|des|d'|d’|au|aux|et|ou|à|a|est|sont|il|ils)(?!\w))" % ADVERB
)


def _ordinal_value(word: str) -> int:
    if word in ORDINAL_WORDS:
        return ORDINAL_WORDS[word]
    return int(re.match(r"\d+", word).group(0))


def _marker(identifier: str, adverb: Optional[str]) -> str:
    return f"{identifier} {adverb}" if adverb else identifier


def _ordinal_members(token: Token, group: str) -> List[Tuple[int, Position]]:
    """Ordinals found inside a list group, with their absolute positions."""
    offset = token.span(group)[0]
    return [
        (_ordinal_value(m.group(0)), Position(offset + m.start(), offset + m.end()))
        for m in ORDINAL_TOKEN_RE.finditer(token.group(group, fold=True))
    ]


# --- Atom cores: each returns a Builder taking the atom's full span, or FAIL ---

def _counted_portions(ctx: ScanContext):
    checkpoint = ctx.save()
    token = ctx.match_pattern(COUNTED_PORTIONS_RE)
    if token is None:
        return FAIL
    word = token.group("count", fold=True)
    count = CARDINAL_WORDS.get(word) or int(word)
    if count < 1:
        ctx.restore(checkpoint)
        return FAIL
    kind = PORTION_KEYWORDS[token.group("kind", fold=True)]
    ordinal = 1 if token.group("ord", fold=True).startswith("premier") else -count
    first = PortionReference(Position(token.start, token.stop), kind, ordinal)
    return lambda position: CountedIntervalReference(position, first, count)


def _portion_list(ctx: ScanContext):
    token = ctx.match_pattern(PORTION_LIST_RE)
    if token is None:
        return FAIL
    kind = PORTION_KEYWORDS[token.group("kind", fold=True)]
    items = tuple(PortionReference(pos, kind, value) for value, pos in _ordinal_members(token, "list"))
    return lambda position: EnumerationReference(position, items)


def _portion_range(ctx: ScanContext):
    token = ctx.match_pattern(PORTION_RANGE_RE)
    if token is None:
        return FAIL
    kind = PORTION_KEYWORDS[token.group("kind", fold=True)]
    first = PortionReference(Position(*token.span("first")), kind, _ordinal_value(token.group("first", fold=True)))
    last = PortionReference(Position(*token.span("last")), kind, _ordinal_value(token.group("last", fold=True)))
    return lambda position: BoundedIntervalReference(position, first, last)


def _portion(ctx: ScanContext):
    checkpoint = ctx.save()
    token = ctx.match_pattern(PORTION_RE)
    if token is not None:
        kind = PORTION_KEYWORDS[token.group("kind", fold=True)]
        ordinal = _ordinal_value(token.group("ord", fold=True))
        return lambda position: PortionReference(position, kind, ordinal)
    token = ctx.match_pattern(NUMBERED_PORTION_RE)
    if token is None:
        return FAIL
    kind = PORTION_KEYWORDS[token.group("kind", fold=True)]
    number = token.group("num", fold=True)
    ordinal = int(number) if number.isdigit() else 1
    if ordinal == 0:
        ctx.restore(checkpoint)
        return FAIL
    return lambda position: PortionReference(position, kind, ordinal)


def _keyword_division(ctx: ScanContext):
    token = ctx.match_pattern(KEYWORD_DIVISION_RE)
    if token is not None:
        kind = DIVISION_KEYWORDS[token.group("keyword", fold=True)]
        number = _marker(token.group("id"), token.group("adverb"))
        return lambda position: DivisionReference(position, kind, number=number)
    token = ctx.match_pattern(RANKED_DIVISION_RE)
    if token is None:
        return FAIL
    kind = DIVISION_KEYWORDS[token.group("keyword", fold=True)]
    index = _ordinal_value(token.group("ord", fold=True))
    return lambda position: DivisionReference(position, kind, index=index)


def _article_number(text: str) -> str:
    folded = text.lower()
    if folded in ("premier", "1er"):
        return "1er"
    return " ".join(text.split())


def _articles(ctx: ScanContext):
    token = ctx.match_pattern(ARTICLE_LIST_RE)
    if token is None:
        return FAIL
    offset = token.span("list")[0]
    folded_list = token.group("list", fold=True)
    members = [
        ArticleReference(Position(offset + m.start(), offset + m.end()),
                         number=_article_number(token.source[offset + m.start():offset + m.end()]))
        for m in ARTICLE_NUMBER_RE.finditer(folded_list)
    ]
    if len(members) == 2 and re.search(r"(?<=\s)a(?=\s)", folded_list):
        first, last = members
        return lambda position: BoundedIntervalReference(position, first, last)
    items = tuple(members)
    return lambda position: EnumerationReference(position, items)


def _article(ctx: ScanContext):
    token = ctx.match_pattern(ARTICLE_RE)
    if token is not None:
        number = _article_number(token.group("number"))
        return lambda position: ArticleReference(position, number=number)
    token = ctx.match_pattern(RELATIVE_ARTICLE_RE)
    if token is None:
        return FAIL
    direction = token.group("direction", fold=True)
    relative = {"precedent": -1, "suivant": 1}.get(direction, 0)
    return lambda position: ArticleReference(position, relative=relative)


def _code_title(ctx: ScanContext, start_token: Token) -> str:
    """Extend a code name word by word until a stop word or punctuation."""
    stop = start_token.stop
    while True:
        checkpoint = ctx.save()
        ctx.match_literal(*CODE_CONNECTORS)
        word = ctx.match_pattern(CODE_WORD_RE)
        if word is None or word.folded in CODE_STOP_WORDS:
            ctx.restore(checkpoint)
            break
        stop = word.stop
    ctx.restore(stop)
    return ctx.source[start_token.start:stop]


def _text(ctx: ScanContext):
    token = ctx.match_pattern(SAME_TEXT_RE)
    if token is not None:
        return lambda position: TextReference(position, same=True)
    token = ctx.match_pattern(PRESENT_LAW_RE)
    if token is not None:
        title = token.text
        return lambda position: TextReference(position, title=title)
    token = ctx.match_pattern(NUMBERED_TEXT_RE)
    if token is not None:
        title = " ".join(token.text.split())
        text_id = token.group("id")
        return lambda position: TextReference(position, title=title, text_id=text_id)
    token = ctx.match_pattern(CODE_START_RE)
    if token is None:
        return FAIL
    title = " ".join(_code_title(ctx, token).split())
    return lambda position: TextReference(position, title=title)


def _item(ctx: ScanContext):
    token = ctx.match_pattern(NUMBERED_ITEM_RE)
    if token is not None:
        number = _marker(token.group("id") + "°", token.group("adverb"))
        return lambda position: DivisionReference(position, DivisionKind.ITEM, number=number)
    for regex in (ROMAN_ITEM_RE, UPPER_ITEM_RE, LOWER_ITEM_RE):
        token = ctx.match_pattern(regex, fold=False)
        if token is not None:
            number = _marker(token.group("id"), token.group("adverb"))
            return lambda position: DivisionReference(position, DivisionKind.ITEM, number=number)
    return FAIL


_CORE: Parser = alternative(
    _counted_portions,
    _portion_list,
    _portion_range,
    _portion,
    _keyword_division,
    _articles,
    _article,
    _text,
    _item,
)

_determiner = literal(*DETERMINERS)

atom: Parser = spanned(
    alternative(sequence(_determiner, _CORE, combine=lambda _det, build: build), _CORE),
    lambda position, build: build(position),
)


# --- Groups ---

def _enumeration_separator(ctx: ScanContext):
    """Match ",", ", et", "et" or "ou"; True when "et"/"ou" was part of it."""
    if ctx.match_literal(",") is not None:
        return ctx.match_literal("et", "ou") is not None
    if ctx.match_literal("et", "ou") is not None:
        return True
    return FAIL


def _separated(ctx: ScanContext, item: Parser):
    """
    Parse item (separator item)* and return the items as a list.

    Items joined by a bare comma are kept only when the list later closes on
    "et"/"ou" ("le I, le II et le III"). Otherwise the cursor stops before the
    comma, so "Au II, le dernier alinéa" leaves ", le dernier alinéa" unread.
    """
    first = item(ctx)
    if first is FAIL:
        return FAIL
    items = [first]
    closed_at, closed_count = ctx.save(), 1
    while True:
        before = ctx.save()
        joined = _enumeration_separator(ctx)
        if joined is FAIL:
            break
        following = item(ctx)
        if following is FAIL:
            ctx.restore(before)
            break
        items.append(following)
        if joined:
            closed_at, closed_count = ctx.save(), len(items)
    ctx.restore(closed_at)
    return items[:closed_count]


def _enumeration_of(item: Parser) -> Parser:
    def parse(ctx: ScanContext):
        items = _separated(ctx, item)
        if items is FAIL:
            return FAIL
        if len(items) == 1:
            return items[0]
        return EnumerationReference(items[0].position.union(items[-1].position), tuple(items))

    return parse


_interval: Parser = sequence(
    atom,
    literal(*INTERVAL_CONNECTORS),
    atom,
    combine=lambda first, _sep, last: BoundedIntervalReference(first.position.union(last.position), first, last),
)

term: Parser = alternative(_interval, atom)

# "du 1° des I et II": a plural connector brackets a whole enumeration.
_listed_term: Parser = _enumeration_of(term)

_connector = literal(*COMPOSITION_CONNECTORS)
_PLURAL_CONNECTORS = ("des",)


def _chain(ctx: ScanContext):
    """
    Parse term (connector term)*.

    "X du Y du Z" yields ParentChild(parent=ParentChild(parent=Z, child=Y), child=X).
    The chain is collected iteratively so nesting depth is bounded only by input length.
    """
    first = term(ctx)
    if first is FAIL:
        return FAIL
    chain: List[ReferenceNode] = [first]
    while True:
        before = ctx.save()
        connector = _connector(ctx)
        if connector is FAIL:
            break
        parent = (_listed_term if connector.folded in _PLURAL_CONNECTORS else term)(ctx)
        if parent is FAIL:
            ctx.restore(before)
            break
        chain.append(parent)
    node = chain[-1]
    for child in reversed(chain[:-1]):
        node = ParentChildReference(child.position.union(node.position), parent=node, child=child)
    return node


def _factor_parent(members: List[ReferenceNode]) -> ReferenceNode:
    """
    Join chains into an enumeration.

    When only the last chain names a parent ("les I et II de l'article 3"),
    that parent applies to every member.
    """
    last = members[-1]
    position = members[0].position.union(last.position)
    heads = members[:-1]
    if isinstance(last, ParentChildReference) and not any(isinstance(m, ParentChildReference) for m in heads):
        items = tuple(heads) + (last.child,)
        enumeration = EnumerationReference(members[0].position.union(last.child.position), items)
        return ParentChildReference(position, parent=last.parent, child=enumeration)
    return EnumerationReference(position, tuple(members))


def parse_reference(ctx: ScanContext):
    """Parse a reference at the cursor; FAIL with the cursor unchanged if none.

    "et"/"ou" join complete chains: "le 1° du I et le II" is the 1° of the I,
    plus the II.
    """
    members = _separated(ctx, _chain)
    if members is FAIL:
        return FAIL
    if len(members) == 1:
        return members[0]
    return _factor_parent(members)


def reference_from_text(text: str) -> Optional[ReferenceNode]:
    """Parse a reference at the start of text, or return None."""
    node = parse_reference(ScanContext(text))
    if node is FAIL:
        logger.debug("No reference recognized at the start of: %.80s", text)
        return None
    return node
