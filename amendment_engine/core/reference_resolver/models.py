"""
Data models for the amendment engine.

Reference and action nodes are immutable values produced fresh by each parse.
Every node carries a Position span of character offsets into the parsed
sentence; composite nodes always span the union of their descendants.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


# --- Enums ---

class DivisionKind(Enum):
    """Structural subdivisions recognized in French legal texts."""
    ITEM = "item"  # "II", "A", "3°", "a"
    PART = "partie"
    BOOK = "livre"
    TITLE = "titre"
    SUBTITLE = "sous-titre"
    CHAPTER = "chapitre"
    SECTION = "section"
    SUBSECTION = "sous-section"
    PARAGRAPH = "paragraphe"
    SUBPARAGRAPH = "sous-paragraphe"
    SUBSUBPARAGRAPH = "sous-sous-paragraphe"


class PortionKind(Enum):
    """Textual sub-units of a division's content."""
    ALINEA = "alinea"
    SENTENCE = "phrase"


class ActionKind(Enum):
    """Coarse classification of an amendment verb."""
    CREATE = "CREATION"
    REPLACE = "MODIFICATION"
    DELETE = "SUPPRESSION"
    CREATE_OR_REPLACE = "CREATION_OU_MODIFICATION"


class ActionMode(Enum):
    """Finer semantics of an action, derived from the verb and its placement clause."""
    INSERT = "INSERT"                # "est inséré"
    INSERT_BEFORE = "INSERT_BEFORE"  # "avant le mot : « X », est inséré"
    INSERT_AFTER = "INSERT_AFTER"    # "après le III, il est inséré"
    APPEND = "APPEND"                # "est complété par", "à la fin ... est ajouté"
    PREPEND = "PREPEND"              # "au début ... est inséré"
    SUBSTITUTE = "SUBSTITUTE"        # "est remplacé par"
    REWRITE = "REWRITE"              # "est ainsi rédigé"
    AMEND = "AMEND"                  # "est ainsi modifié" (sub-items follow)
    REMOVE = "REMOVE"                # "est supprimé", "est abrogé", "(Supprimé)"
    RESTORE = "RESTORE"              # "est rétabli"


class StepKind(Enum):
    SCOPE = "scope"
    DIVISION = "division"
    PORTION = "portion"


class ScopeUnit(Enum):
    TEXT = "text"
    ARTICLE = "article"


class ExtractionStatus(Enum):
    """Outcome of parsing one modification block in a batch."""
    PARSED = "parsed"                  # reference and action recognized
    REFERENCE_ONLY = "reference_only"  # reference without action, or action alone
    UNPARSED = "unparsed"              # grammar mismatch
    FAILED = "failed"                  # unexpected error while parsing


class ResolutionStatus(Enum):
    """Status of end-to-end resolution."""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


# --- Spans ---

@dataclass(frozen=True)
class Position:
    """Half-open character span [start, stop) in the parsed source."""
    start: int
    stop: int

    def __post_init__(self):
        if self.start < 0 or self.start > self.stop:
            raise ValueError(f"Invalid position span: {self.start}-{self.stop}")

    def union(self, other: "Position") -> "Position":
        return Position(min(self.start, other.start), max(self.stop, other.stop))

    def slice(self, source: str) -> str:
        return source[self.start:self.stop]


# --- Reference nodes ---

@dataclass(frozen=True)
class TextReference:
    """A whole legal text: a code, a law, or "la présente loi"."""
    position: Position
    title: Optional[str] = None
    text_id: Optional[str] = None  # e.g. "2020-1721" for "loi n° 2020-1721"
    same: bool = False             # "le même code"


@dataclass(frozen=True)
class ArticleReference:
    """An article, by number or relative to the current one."""
    position: Position
    number: Optional[str] = None
    relative: Optional[int] = None  # -1 "précédent", +1 "suivant", 0 "même"/"ledit"


@dataclass(frozen=True)
class DivisionReference:
    """A structural division designated by its marker or by its rank."""
    position: Position
    kind: DivisionKind
    number: Optional[str] = None
    index: Optional[int] = None


@dataclass(frozen=True)
class PortionReference:
    """An alinéa or a sentence designated by a signed ordinal (1-based, -1 last)."""
    position: Position
    kind: PortionKind
    ordinal: int

    def __post_init__(self):
        if self.ordinal == 0:
            raise ValueError("Portion ordinals are 1-based or negative, never 0")


@dataclass(frozen=True)
class ParentChildReference:
    """ "X du Y": parent is the coarser scope Y, child the finer reference X."""
    position: Position
    parent: "ReferenceNode"
    child: "ReferenceNode"


@dataclass(frozen=True)
class EnumerationReference:
    position: Position
    items: Tuple["ReferenceNode", ...]


@dataclass(frozen=True)
class BoundedIntervalReference:
    position: Position
    first: "ReferenceNode"
    last: "ReferenceNode"


@dataclass(frozen=True)
class CountedIntervalReference:
    """ "les deux dernières phrases": first is the earliest member of the run."""
    position: Position
    first: "ReferenceNode"
    count: int


ReferenceNode = Union[
    TextReference,
    ArticleReference,
    DivisionReference,
    PortionReference,
    ParentChildReference,
    EnumerationReference,
    BoundedIntervalReference,
    CountedIntervalReference,
]


# --- Action nodes ---

@dataclass(frozen=True)
class CitationNode:
    """Quoted content without its delimiters."""
    position: Position
    text: str

    @property
    def paragraphs(self) -> Tuple[str, ...]:
        return tuple(p.strip() for p in self.text.split("\n") if p.strip())


@dataclass(frozen=True)
class ActionNode:
    """
    A classified amendment action.

    targets are quoted words the action operates on ("les mots : « X » sont
    remplacés ..."); citations are the new content. anchor is the reference
    named in a leading placement clause ("Après le III, ..."), and
    content_label the announced element ("trois alinéas", "un III bis").
    """
    position: Position
    kind: ActionKind
    mode: ActionMode
    citations: Tuple[CitationNode, ...] = ()
    targets: Tuple[CitationNode, ...] = ()
    anchor: Optional[ReferenceNode] = None
    content_label: Optional[str] = None

    @property
    def content(self) -> str:
        return "\n".join(c.text for c in self.citations)


@dataclass(frozen=True)
class ReferenceAndAction:
    position: Position
    reference: ReferenceNode
    action: ActionNode


ParseResult = Union[ReferenceAndAction, ReferenceNode, ActionNode]


@dataclass(frozen=True)
class ParseOutcome:
    """Result of parsing one sentence, with the unconsumed input for diagnostics."""
    source: str
    result: Optional[ParseResult]
    consumed: int
    remaining: str

    @property
    def success(self) -> bool:
        return self.result is not None

    @property
    def reference(self) -> Optional[ReferenceNode]:
        if isinstance(self.result, ReferenceAndAction):
            return self.result.reference
        if isinstance(self.result, ActionNode) or self.result is None:
            return None
        return self.result

    @property
    def action(self) -> Optional[ActionNode]:
        if isinstance(self.result, ReferenceAndAction):
            return self.result.action
        if isinstance(self.result, ActionNode):
            return self.result
        return None


# --- Navigation ---

@dataclass(frozen=True)
class NavigationStep:
    """
    One compiled instruction narrowing the document scope.

    DIVISION steps match by marker, or by index when marker is None. PORTION
    steps always select by signed index (1-based, negative from the end).
    """
    kind: StepKind
    unit: Union[ScopeUnit, DivisionKind, PortionKind]
    marker: Optional[str] = None
    index: Optional[int] = None
    relative: Optional[int] = None
    position: Optional[Position] = None

    @property
    def label(self) -> str:
        unit = self.unit.value
        if self.marker is not None:
            return f"{unit} {self.marker}"
        if self.index is not None:
            return f"{unit} #{self.index}"
        if self.relative is not None:
            return f"{unit} {self.relative:+d}"
        return unit


@dataclass(frozen=True)
class CompiledPath:
    steps: Tuple[NavigationStep, ...]
    warnings: Tuple[str, ...] = ()

    @property
    def partial(self) -> bool:
        return bool(self.warnings)

    def describe(self) -> str:
        return " > ".join(step.label for step in self.steps)


@dataclass(frozen=True)
class TextBlock:
    """A block of document text; span maps back to the source markup when known."""
    text: str
    children: Tuple["TextBlock", ...] = ()
    markup: Optional[str] = None
    span: Optional[Tuple[int, int]] = None


@dataclass(frozen=True)
class Document:
    """Ordered blocks of one article (or a whole text)."""
    blocks: Tuple[TextBlock, ...]
    article_number: Optional[str] = None
    text_id: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class LocatedFragment:
    """
    A resolved location. When sentence_span is set, the fragment is the
    sentence text[start:stop] of the single block in blocks.
    """
    blocks: Tuple[TextBlock, ...]
    scope_description: str
    sentence_span: Optional[Tuple[int, int]] = None
    warnings: Tuple[str, ...] = ()

    @property
    def partial(self) -> bool:
        return bool(self.warnings)

    @property
    def text(self) -> str:
        if self.sentence_span is not None:
            start, stop = self.sentence_span
            return self.blocks[0].text[start:stop]
        return "\n".join(block.text for block in self.blocks)

    @property
    def markup(self) -> Optional[str]:
        if self.sentence_span is not None:
            return None
        parts = [block.markup for block in self.blocks]
        if any(p is None for p in parts):
            return None
        return "\n".join(parts)


@dataclass(frozen=True)
class NavigationError:
    """A step that could not be resolved, with the scope it was evaluated against."""
    step: NavigationStep
    step_index: int
    scope_description: str
    reason: str

    def __str__(self) -> str:
        return f"Step {self.step_index} ({self.step.label}) failed in [{self.scope_description}]: {self.reason}"


NavigationResult = Union[LocatedFragment, NavigationError]


# --- Extraction layer records ---

@dataclass(frozen=True)
class ParsedModification:
    """Parse result of a modification block together with its compiled target path."""
    outcome: ParseOutcome
    target_path: Optional[CompiledPath] = None

    @property
    def reference(self) -> Optional[ReferenceNode]:
        return self.outcome.reference

    @property
    def action(self) -> Optional[ActionNode]:
        return self.outcome.action


@dataclass
class ModificationBlock:
    """A raw amendment instruction in a source document, with its provenance."""
    block_id: str
    raw_text: str
    article_id: Optional[str] = None  # e.g. "LEGIARTI000006308345"
    article_title: Optional[str] = None
    hierarchy_path: Tuple[str, ...] = ()
    start_pos: int = 0
    end_pos: int = 0
    parsed: Optional[ParsedModification] = None


@dataclass
class ExtractionResult:
    """One entry per input block, in input order."""
    block: ModificationBlock
    status: ExtractionStatus
    remaining: str = ""
    failure_reason: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status in (ExtractionStatus.PARSED, ExtractionStatus.REFERENCE_ONLY)


@dataclass(frozen=True)
class FragmentChange:
    """Old/new text pair handed to a diff renderer."""
    success: bool
    old_text: str
    new_text: str
    action_kind: Optional[ActionKind] = None
    error_message: Optional[str] = None


@dataclass
class ResolutionReport:
    """End-to-end result for one amendment sentence against one document."""
    outcome: ParseOutcome
    status: ResolutionStatus
    path: Optional[CompiledPath] = None
    location: Optional[NavigationResult] = None
    change: Optional[FragmentChange] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)
    failure_reason: Optional[str] = None
