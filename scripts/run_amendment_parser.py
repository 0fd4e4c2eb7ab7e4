"""
Parse amendment instructions and print what was recognized.

Each instruction line of a bill excerpt becomes a ModificationBlock; blocks are
parsed in parallel and reported as JSON lines, one per block, in input order.

Usage:
  python scripts/run_amendment_parser.py --text "Le II de l'article 3 est abrogé."
  python scripts/run_amendment_parser.py \
    --file data/bill_excerpt.txt \
    --article-id LEGIARTI000006308345 \
    --output scripts/output/parsed_blocks.jsonl
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv

from amendment_engine.core.reference_resolver.batch_extractor import ModificationExtractor, blocks_from_text
from amendment_engine.core.reference_resolver import config
from amendment_engine.core.reference_resolver.models import ExtractionResult, ModificationBlock


def _load_env() -> None:
    project_root = Path(__file__).resolve().parents[1]
    load_dotenv(project_root / ".env.local")
    load_dotenv(project_root / ".env")


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _result_to_dict(result: ExtractionResult) -> Dict[str, Any]:
    block = result.block
    parsed = block.parsed
    entry: Dict[str, Any] = {
        "block_id": block.block_id,
        "hierarchy_path": list(block.hierarchy_path),
        "raw_text": block.raw_text,
        "status": result.status.value,
        "remaining": result.remaining,
        "failure_reason": result.failure_reason,
    }
    if parsed is not None:
        entry["result"] = dataclasses.asdict(parsed.outcome)["result"]
        entry["target_path"] = parsed.target_path.describe() if parsed.target_path else None
        entry["warnings"] = list(parsed.target_path.warnings) if parsed.target_path else []
    return entry


def main() -> int:
    parser = argparse.ArgumentParser(description="Parse French amendment instructions")
    parser.add_argument("--text", action="append", default=[], help="Instruction to parse (repeatable)")
    parser.add_argument("--file", type=str, help="Bill excerpt, one instruction per line")
    parser.add_argument("--article-id", type=str, default=None, help="LEGIARTI identifier of the amended article")
    parser.add_argument("--workers", type=int, default=None, help="Parallel workers")
    parser.add_argument("--output", type=str, default=None, help="Write JSON lines here instead of stdout")
    args = parser.parse_args()

    _load_env()
    logging.basicConfig(level=config.log_level(), format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logger = logging.getLogger(__name__)

    blocks: List[ModificationBlock] = []
    if args.file:
        path = Path(args.file)
        if not path.exists():
            print(f"❌ Input file not found: {path}")
            return 1
        blocks.extend(blocks_from_text(path.read_text(encoding="utf-8"), article_id=args.article_id))
    for i, text in enumerate(args.text, start=len(blocks) + 1):
        blocks.append(ModificationBlock(block_id=str(i), raw_text=text, article_id=args.article_id))
    if not blocks:
        parser.error("nothing to parse: pass --text or --file")

    results = ModificationExtractor(max_workers=args.workers).extract(blocks)
    lines = [json.dumps(_result_to_dict(r), ensure_ascii=False, default=_json_default) for r in results]

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        logger.info("Wrote %d results to %s", len(lines), out_path)
    else:
        print("\n".join(lines))

    parsed = sum(1 for r in results if r.success)
    print(f"✓ Parsed {parsed}/{len(results)} blocks", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
