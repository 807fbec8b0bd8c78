#!/usr/bin/env python3
"""
Scan image URLs for explicit content.

Runs a batch analysis (skin heuristic + OCR keyword check) with the default
service configuration from the environment and prints the verdict.

Usage:
    python scripts/scan_images.py https://example.com/a.jpg https://example.com/b.png
    python scripts/scan_images.py --json https://example.com/a.jpg
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from content_scan import AnalysisStatus, configure_logging, get_scan_service
from content_scan.utils import cleanup_all_clients

logger = logging.getLogger(__name__)


def format_verdict(verdict) -> str:
    lines = [
        f"Explicit content: {'YES' if verdict.has_explicit_content else 'no'} "
        f"(confidence {verdict.confidence:.2f})",
    ]
    if verdict.detected_categories:
        lines.append(f"Text categories: {', '.join(sorted(verdict.detected_categories))}")
    for detail in verdict.details:
        flag = "EXPLICIT" if detail.is_explicit else "ok"
        note = ""
        if detail.status != AnalysisStatus.COMPLETE:
            note = f" [image {detail.status.value}]"
        elif detail.text_analysis.is_degraded:
            note = f" [ocr {detail.text_analysis.status.value}]"
        lines.append(
            f"  {flag:8} skin={detail.skin_percentage:6.2f}% "
            f"conf={detail.confidence:.2f}{note}  {detail.url}"
        )
    return "\n".join(lines)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Scan image URLs for explicit content")
    parser.add_argument("urls", nargs="+", help="Image URLs to analyze")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    args = parser.parse_args()

    configure_logging("scan-images")
    service = get_scan_service()

    try:
        verdict = await service.analyze_images_batch(args.urls)
    finally:
        await cleanup_all_clients()

    if args.json:
        print(json.dumps(verdict.model_dump(mode="json", by_alias=True), indent=2))
    else:
        print(format_verdict(verdict))

    return 1 if verdict.has_explicit_content else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
