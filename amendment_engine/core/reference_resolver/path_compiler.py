"""
PathCompiler: flattens a reference tree into coarse-to-fine navigation steps.
"""

import logging
from typing import List

from amendment_engine.core.reference_resolver.models import (
    ActionNode,
    ArticleReference,
    BoundedIntervalReference,
    CompiledPath,
    CountedIntervalReference,
    DivisionReference,
    EnumerationReference,
    NavigationStep,
    ParentChildReference,
    PortionReference,
    ReferenceAndAction,
    ReferenceNode,
    ScopeUnit,
    StepKind,
    TextReference,
)

logger = logging.getLogger(__name__)


class PathCompiler:
    """
    Depth-first walk of a reference tree, parent before child, one step per
    atomic reference.

    Enumerations and intervals compile to their first member only; the
    compiled path then carries a warning and is marked partial. Ordinals are
    copied unchanged, -1 included.
    """

    def compile(self, node) -> CompiledPath:
        steps: List[NavigationStep] = []
        warnings: List[str] = []
        if isinstance(node, ReferenceAndAction):
            node = node.reference
        self._walk(node, steps, warnings)
        if warnings:
            logger.info("Compiled partial path %s: %s", " > ".join(s.label for s in steps), "; ".join(warnings))
        return CompiledPath(tuple(steps), tuple(warnings))

    def compile_action_anchor(self, action: ActionNode) -> CompiledPath:
        """Path to the reference named in an action's placement clause, if any."""
        if action.anchor is None:
            return CompiledPath(())
        return self.compile(action.anchor)

    def _walk(self, node: ReferenceNode, steps: List[NavigationStep], warnings: List[str]) -> None:
        if isinstance(node, ParentChildReference):
            self._walk(node.parent, steps, warnings)
            self._walk(node.child, steps, warnings)
        elif isinstance(node, TextReference):
            steps.append(NavigationStep(StepKind.SCOPE, ScopeUnit.TEXT,
                                        marker=node.text_id or node.title, position=node.position))
        elif isinstance(node, ArticleReference):
            steps.append(NavigationStep(StepKind.SCOPE, ScopeUnit.ARTICLE, marker=node.number,
                                        relative=node.relative, position=node.position))
        elif isinstance(node, DivisionReference):
            steps.append(NavigationStep(StepKind.DIVISION, node.kind, marker=node.number,
                                        index=node.index, position=node.position))
        elif isinstance(node, PortionReference):
            steps.append(NavigationStep(StepKind.PORTION, node.kind, index=node.ordinal, position=node.position))
        elif isinstance(node, EnumerationReference):
            warnings.append(f"enumeration of {len(node.items)} references: only the first is resolved")
            self._walk(node.items[0], steps, warnings)
        elif isinstance(node, BoundedIntervalReference):
            warnings.append("bounded interval: only its first bound is resolved")
            self._walk(node.first, steps, warnings)
        elif isinstance(node, CountedIntervalReference):
            warnings.append(f"interval of {node.count} elements: only the first is resolved")
            self._walk(node.first, steps, warnings)
        else:
            raise TypeError(f"Cannot compile reference node of type {type(node).__name__}")
