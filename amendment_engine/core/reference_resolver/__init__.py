"""
Amendment reference resolver module.

This module parses French legislative amendment instructions into reference
trees and classified actions, compiles references into navigation steps, and
locates the addressed fragment inside a structured document.

The main entry point is the AmendmentResolutionPipeline class in pipeline.py.
"""

# Core components
from amendment_engine.core.reference_resolver.scan_context import ScanContext
from amendment_engine.core.reference_resolver.reference_parser import parse_reference, reference_from_text
from amendment_engine.core.reference_resolver.action_classifier import ActionClassifier, parse_action
from amendment_engine.core.reference_resolver.amendment_parser import AmendmentParser
from amendment_engine.core.reference_resolver.path_compiler import PathCompiler
from amendment_engine.core.reference_resolver.document import document_from_paragraphs, document_from_text
from amendment_engine.core.reference_resolver.document_navigator import DocumentNavigator
from amendment_engine.core.reference_resolver.fragment_rewriter import FragmentRewriter
from amendment_engine.core.reference_resolver.batch_extractor import ModificationExtractor, blocks_from_text

# Main pipeline entry point
from amendment_engine.core.reference_resolver.pipeline import AmendmentResolutionPipeline

# Data models
from amendment_engine.core.reference_resolver.models import (
    ActionKind,
    ActionMode,
    ActionNode,
    ArticleReference,
    BoundedIntervalReference,
    CitationNode,
    CompiledPath,
    CountedIntervalReference,
    DivisionKind,
    DivisionReference,
    Document,
    EnumerationReference,
    ExtractionResult,
    ExtractionStatus,
    FragmentChange,
    LocatedFragment,
    ModificationBlock,
    NavigationError,
    NavigationStep,
    ParentChildReference,
    ParseOutcome,
    ParsedModification,
    PortionKind,
    PortionReference,
    Position,
    ReferenceAndAction,
    ResolutionReport,
    ResolutionStatus,
    ScopeUnit,
    StepKind,
    TextBlock,
    TextReference,
)

__all__ = [
    # Main pipeline entry point
    'AmendmentResolutionPipeline',

    # Core components
    'ScanContext',
    'parse_reference',
    'reference_from_text',
    'ActionClassifier',
    'parse_action',
    'AmendmentParser',
    'PathCompiler',
    'DocumentNavigator',
    'FragmentRewriter',
    'ModificationExtractor',
    'blocks_from_text',
    'document_from_text',
    'document_from_paragraphs',

    # Data models
    'ActionKind',
    'ActionMode',
    'ActionNode',
    'ArticleReference',
    'BoundedIntervalReference',
    'CitationNode',
    'CompiledPath',
    'CountedIntervalReference',
    'DivisionKind',
    'DivisionReference',
    'Document',
    'EnumerationReference',
    'ExtractionResult',
    'ExtractionStatus',
    'FragmentChange',
    'LocatedFragment',
    'ModificationBlock',
    'NavigationError',
    'NavigationStep',
    'ParentChildReference',
    'ParseOutcome',
    'ParsedModification',
    'PortionKind',
    'PortionReference',
    'Position',
    'ReferenceAndAction',
    'ResolutionReport',
    'ResolutionStatus',
    'ScopeUnit',
    'StepKind',
    'TextBlock',
    'TextReference',
]
