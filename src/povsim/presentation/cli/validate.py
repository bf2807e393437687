"""Command line validator for the slide content table."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from povsim.data.errors import DataError
from povsim.data.paths import get_definitions_path
from povsim.data.repositories import AchievementsRepository, GameConfigRepository, SlidesRepository
from povsim.services.content_validator import format_issue, has_errors, validate_content


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate slide definitions.")
    parser.add_argument(
        "definitions",
        nargs="?",
        type=Path,
        default=None,
        help="Directory holding slides.json, achievements.json and game.json",
    )
    parser.add_argument(
        "--strict-cycles",
        action="store_true",
        help="Treat auto-advance cycles as errors",
    )
    parser.add_argument("--quiet", action="store_true", help="Only print errors")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    base_path = get_definitions_path(args.definitions)
    try:
        slides = {slide.id: slide for slide in SlidesRepository(base_path).all()}
        achievement_ids = AchievementsRepository(base_path).ids()
        start_slide_id = GameConfigRepository(base_path).get_config().start_slide_id
    except DataError as exc:
        print(f"Failed to load definitions from {base_path}: {exc}")
        sys.exit(1)

    issues = validate_content(
        slides,
        start_slide_id,
        achievement_ids,
        error_on_autoadvance_cycle=args.strict_cycles,
    )
    for issue in issues:
        if args.quiet and issue.severity != "ERROR":
            continue
        print(format_issue(issue))

    if has_errors(issues):
        print("Validation failed.")
        sys.exit(1)
    print(f"Validation passed for {len(slides)} slides in {base_path}.")


if __name__ == "__main__":
    main()
