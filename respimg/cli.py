#!/usr/bin/env python3
"""
Responsive image variant generator.

Resizes every image matched by the given glob patterns to each requested
height, re-encoding into the requested format:

    respimg --size 480,720-png,1080,0-jpg "photos/*.jpg"

produces photos/NAME-480p.webp, NAME-720p.png, NAME-1080p.webp and NAME.jpg
(height 0 keeps the original resolution). Widths follow the source aspect
ratio. With --if-newer, outputs newer than their source are left alone.

Requires: Python 3.8+, Pillow
"""

import argparse
import glob
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import DEFAULT_QUALITY, RunConfig, build_config
from .errors import BatchError, ConfigurationError, ParseError, RespimgError
from .pipeline import PLANNED, RESIZED, SKIPPED, FileResult
from .runner import RunSummary, run_batch
from .sizes import DEFAULT_SIZES, format_sizes, parse_sizes


def size_list(s: str):
    try:
        return parse_sizes(s)
    except ParseError as e:
        raise argparse.ArgumentTypeError(str(e))


def expand_patterns(patterns: Sequence[str]) -> List[Path]:
    """Expand every pattern eagerly. Patterns with no match contribute nothing."""
    files: List[Path] = []
    for pattern in patterns:
        files += [Path(p) for p in sorted(glob.glob(pattern, recursive=True)) if Path(p).is_file()]
    return files


def print_result(result: FileResult) -> None:
    for o in result.outcomes:
        if o.action == RESIZED:
            print(f"DONE  {o.source} -> {o.output} ({o.width}x{o.height})")
        elif o.action == SKIPPED:
            print(f"SKIP  {o.output} up to date")
        elif o.action == PLANNED:
            print(f"DRY   {o.source} -> {o.output}")


def print_summary(summary: RunSummary, config: RunConfig) -> None:
    line = f"Processed {summary.files} file(s): {summary.written} written, {summary.skipped} skipped"
    if config.dry_run:
        line += f", {summary.planned} planned"
    if summary.failures:
        line += f", {len(summary.failures)} failed"
    print(f"{line} in {summary.elapsed:.2f}s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="respimg",
        description="Generate resized image variants for responsive srcset delivery.",
    )
    parser.add_argument("patterns", nargs="*", metavar="PATTERN", help="Glob patterns of source images")
    parser.add_argument("--size", type=size_list, default=None,
                        help=f"Comma-separated height[-format] list, 0 keeps the source size (default: {DEFAULT_SIZES})")
    parser.add_argument("--quality", type=float, default=DEFAULT_QUALITY, help="Quality for webp and jpeg output (0-100)")
    parser.add_argument("--lossless", action="store_true", help="Encode webp in lossless mode")
    parser.add_argument("--parallel", type=int, default=None,
                        help="Maximum number of images processed at once (default: CPU count or $RESPIMG_PARALLEL)")
    parser.add_argument("--quiet", action="store_true", help="Only print errors")
    parser.add_argument("--out-dir", "--outDir", dest="out_dir", default=None,
                        help="Directory for output files (default: next to each source)")
    parser.add_argument("--if-newer", "--ifNewer", dest="if_newer", action="store_true",
                        help="Skip outputs that already exist and are newer than their source")
    parser.add_argument("--dry-run", action="store_true", help="Show planned outputs only")
    parser.add_argument("--keep-going", action="store_true",
                        help="Process every file and report all failures instead of stopping at the first")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(
            sizes=args.size,
            quality=args.quality,
            lossless=args.lossless,
            parallel=args.parallel,
            quiet=args.quiet,
            out_dir=args.out_dir,
            if_newer=args.if_newer,
            dry_run=args.dry_run,
            keep_going=args.keep_going,
        )
    except ConfigurationError as e:
        parser.error(str(e))

    files = expand_patterns(args.patterns)
    if not config.quiet:
        print(f"Found {len(files)} image(s)")
        print(f"Sizes: {format_sizes(list(config.sizes))}, quality={config.options.quality:g}, "
              f"lossless={'on' if config.options.lossless else 'off'}")
        print(f"Parallel={config.parallel}, if-newer={'on' if config.if_newer else 'off'}, "
              f"dry-run={'on' if config.dry_run else 'off'}")

    try:
        summary = run_batch(files, config, report=None if config.quiet else print_result)
    except BatchError as e:
        for err in e.errors:
            print(f"ERR   {err}", file=sys.stderr)
        print(f"ERR   {e}", file=sys.stderr)
        if not config.quiet and e.summary is not None:
            print_summary(e.summary, config)
        sys.exit(1)
    except RespimgError as e:
        print(f"ERR   {e}", file=sys.stderr)
        sys.exit(1)

    if not config.quiet:
        print_summary(summary, config)


if __name__ == "__main__":
    main()
