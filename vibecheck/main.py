"""Command-line entrypoint: summarise a URL or a piece of text."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from vibecheck.config.settings import SettingsError, load_settings
from vibecheck.extraction.classifier import ContentCategory
from vibecheck.extraction.errors import VibeCheckError
from vibecheck.extraction.models import ExtractionRequest
from vibecheck.service import VibeCheckService
from vibecheck.telemetry import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vibecheck", description=__doc__)
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("url", nargs="?", help="page to summarise")
    source.add_argument("--text", help="summarise this text instead of fetching a URL")
    parser.add_argument(
        "--content-type",
        choices=[category.value for category in ContentCategory],
        default=ContentCategory.GENERAL.value,
        help="framing for pasted text (default: general)",
    )
    parser.add_argument("--settings", type=Path, help="path to a settings YAML file")
    parser.add_argument(
        "--extract-only",
        action="store_true",
        help="print the extracted text and strategy without calling the LLM",
    )
    parser.add_argument("--log-level", help="override VIBECHECK_LOG_LEVEL")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level)

    try:
        settings = load_settings(args.settings)
    except SettingsError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    service = VibeCheckService.from_settings(settings)
    request = ExtractionRequest(
        url=args.url,
        raw_content=args.text,
        content_type=ContentCategory.parse(args.content_type),
    )

    try:
        if args.extract_only:
            result = service.pipeline.extract(request)
            print(f"[{result.strategy_used.value} / {result.content_type.value}]")
            print(result.text)
        else:
            print(service.summarize(request).summary)
    except VibeCheckError as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {exc.user_message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
