"""
Resolve amendment instructions against the text of one article.

The article is read as plain text (alinéas separated by blank lines, or one
per line). Each instruction is parsed, compiled, located in the article and,
when it carries an action, applied to the located fragment.

Usage:
  python scripts/run_resolution.py \
    --article data/article_L254-1.txt --article-number "L. 254-1" \
    --instruction "Le dernier alinéa du II est supprimé."
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv

from amendment_engine.core.reference_resolver import config
from amendment_engine.core.reference_resolver.document import document_from_text
from amendment_engine.core.reference_resolver.models import LocatedFragment, ResolutionReport, ResolutionStatus
from amendment_engine.core.reference_resolver.pipeline import AmendmentResolutionPipeline


def _load_env() -> None:
    project_root = Path(__file__).resolve().parents[1]
    load_dotenv(project_root / ".env.local")
    load_dotenv(project_root / ".env")


def _report_to_dict(instruction: str, report: ResolutionReport) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "instruction": instruction,
        "status": report.status.value,
        "path": report.path.describe() if report.path else None,
        "warnings": list(report.warnings),
        "failure_reason": report.failure_reason,
    }
    if isinstance(report.location, LocatedFragment):
        entry["located_text"] = report.location.text
        entry["scope"] = report.location.scope_description
    if report.change is not None:
        entry["change"] = {
            "success": report.change.success,
            "action": report.change.action_kind.value if report.change.action_kind else None,
            "old_text": report.change.old_text,
            "new_text": report.change.new_text,
            "error": report.change.error_message,
        }
    return entry


def main() -> int:
    parser = argparse.ArgumentParser(description="Resolve amendment instructions against an article")
    parser.add_argument("--article", type=str, required=True, help="Plain-text article file")
    parser.add_argument("--article-number", type=str, default=None, help="Article number, e.g. 'L. 254-1'")
    parser.add_argument("--instruction", action="append", default=[], help="Instruction to resolve (repeatable)")
    parser.add_argument("--instructions-file", type=str, default=None, help="One instruction per line")
    args = parser.parse_args()

    _load_env()
    logging.basicConfig(level=config.log_level(), format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    article_path = Path(args.article)
    if not article_path.exists():
        print(f"❌ Article file not found: {article_path}")
        return 1
    document = document_from_text(article_path.read_text(encoding="utf-8"), article_number=args.article_number)

    instructions: List[str] = list(args.instruction)
    if args.instructions_file:
        lines = Path(args.instructions_file).read_text(encoding="utf-8").splitlines()
        instructions.extend(line.strip() for line in lines if line.strip())
    if not instructions:
        parser.error("nothing to resolve: pass --instruction or --instructions-file")

    pipeline = AmendmentResolutionPipeline()
    failed = 0
    for instruction in instructions:
        report = pipeline.resolve(instruction, document)
        if report.status == ResolutionStatus.FAILED:
            failed += 1
        print(json.dumps(_report_to_dict(instruction, report), ensure_ascii=False, indent=2))

    print(f"✓ Resolved {len(instructions) - failed}/{len(instructions)} instructions", file=sys.stderr)
    return 0 if failed == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
