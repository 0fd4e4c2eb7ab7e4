"""
Batch extraction of modification blocks.

Splits bill instructions into ModificationBlocks and parses them in parallel.
Every block is parsed in its own ScanContext, so one malformed block never
affects another; results always come back one per block, in input order.
"""

import concurrent.futures
import dataclasses
import logging
import re
from typing import Dict, List, Optional, Sequence

from amendment_engine.core.reference_resolver.amendment_parser import AmendmentParser
from amendment_engine.core.reference_resolver import config
from amendment_engine.core.reference_resolver.lexicon import ADVERB_PATTERN
from amendment_engine.core.reference_resolver.models import (
    ActionNode,
    ExtractionResult,
    ExtractionStatus,
    ModificationBlock,
    ParsedModification,
    ReferenceAndAction,
)
from amendment_engine.core.reference_resolver.path_compiler import PathCompiler
from amendment_engine.core.reference_resolver.utils import heading_marker

logger = logging.getLogger(__name__)

LEGIARTI_RE = re.compile(r"LEGIARTI\d{12}")


class ModificationExtractor:
    """
    Parses modification blocks concurrently.

    Leading list labels ("1°", "a)", "II. –", "3° bis (nouveau)") are skipped
    before parsing; the parse keeps offsets relative to the block's raw text.
    """

    LABEL_RE = re.compile(
        r"^\s*(?:"
        r"[IVXLC]+(?:\s+(?:%(adv)s))?\s*\.\s*[-–—]?"
        r"|[A-Z](?:\s+(?:%(adv)s))?\s*\.\s*[-–—]?"
        r"|\d+\s*°(?:\s*[A-Z](?![\w']))?(?:\s+(?:%(adv)s))?"
        r"|[a-z]{1,3}(?:\s+(?:%(adv)s))?\s*\)"
        r")(?:\s*\(nouveau\))?\s*" % {"adv": ADVERB_PATTERN}
    )

    def __init__(self, parser: Optional[AmendmentParser] = None, compiler: Optional[PathCompiler] = None,
                 max_workers: Optional[int] = None):
        self.parser = parser or AmendmentParser()
        self.compiler = compiler or PathCompiler()
        self.max_workers = max_workers or config.max_workers()

    def label_end(self, text: str) -> int:
        """Offset of the instruction after any leading list label."""
        match = self.LABEL_RE.match(text)
        # "3° (Supprimé)": the label is the reference of the deletion
        if match is None or match.end() == len(text) or text[match.end()] == "(":
            return 0
        return match.end()

    def parse_block(self, block: ModificationBlock) -> ExtractionResult:
        outcome = self.parser.parse(block.raw_text, start=self.label_end(block.raw_text))
        if not outcome.success:
            return ExtractionResult(block, ExtractionStatus.UNPARSED, remaining=outcome.remaining,
                                    failure_reason="no reference or action recognized")

        target = outcome.reference
        if target is None and outcome.action is not None:
            target = outcome.action.anchor
        target_path = self.compiler.compile(target) if target is not None else None
        parsed_block = dataclasses.replace(block, parsed=ParsedModification(outcome, target_path))

        if isinstance(outcome.result, (ReferenceAndAction, ActionNode)):
            status = ExtractionStatus.PARSED
        else:
            status = ExtractionStatus.REFERENCE_ONLY
        return ExtractionResult(parsed_block, status, remaining=outcome.remaining)

    def extract(self, blocks: Sequence[ModificationBlock]) -> List[ExtractionResult]:
        """Parse all blocks in parallel; one result per block, in input order."""
        results: Dict[int, ExtractionResult] = {}
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index = {executor.submit(self.parse_block, block): i for i, block in enumerate(blocks)}
            for future in concurrent.futures.as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except Exception as e:
                    logger.error("Error parsing block %s: %s", blocks[index].block_id, e)
                    results[index] = ExtractionResult(blocks[index], ExtractionStatus.FAILED,
                                                      remaining=blocks[index].raw_text,
                                                      failure_reason=f"{type(e).__name__}: {e}")

        ordered = [results[i] for i in range(len(blocks))]
        parsed = sum(1 for r in ordered if r.success)
        logger.info("Extracted %d/%d modification blocks", parsed, len(ordered))
        return ordered


def blocks_from_text(text: str, article_id: Optional[str] = None,
                     article_title: Optional[str] = None) -> List[ModificationBlock]:
    """
    Split bill instructions into one block per instruction line.

    Lines opening with a quotation mark belong to the instruction before them
    (quoted new text). Each block records the chain of list labels above it
    ("II", "3°", "a") as its hierarchy path.
    """
    if article_id is None:
        found = LEGIARTI_RE.search(text)
        article_id = found.group(0) if found else None

    blocks: List[ModificationBlock] = []
    stack: List[tuple] = []
    offset = 0
    for line in text.splitlines(keepends=True):
        start, stripped = offset, line.strip()
        offset += len(line)
        if not stripped:
            continue
        if stripped[0] in "«“\"" and blocks:
            previous = blocks[-1]
            previous.raw_text = text[previous.start_pos:offset].rstrip()
            previous.end_pos = previous.start_pos + len(previous.raw_text)
            continue

        heading = heading_marker(stripped)
        if heading is not None:
            while stack and stack[-1][0] >= heading.rank:
                stack.pop()
            stack.append((heading.rank, heading.marker))

        line_start = start + (len(line) - len(line.lstrip()))
        raw = stripped
        index = len(blocks) + 1
        blocks.append(ModificationBlock(
            block_id=f"{article_id}#{index}" if article_id else str(index),
            raw_text=raw,
            article_id=article_id,
            article_title=article_title,
            hierarchy_path=tuple(marker for _, marker in stack),
            start_pos=line_start,
            end_pos=line_start + len(raw),
        ))
    logger.info("Split text into %d modification blocks", len(blocks))
    return blocks
