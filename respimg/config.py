"""Run-wide settings, frozen once at startup and shared by every worker."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .codecs import EncodeOptions, check_format
from .errors import ConfigurationError, UnsupportedFormatError
from .sizes import DEFAULT_SIZES, OutputSpec, parse_sizes

DEFAULT_QUALITY = 80.0
PARALLEL_ENV = "RESPIMG_PARALLEL"


def default_parallel() -> int:
    """Worker count: $RESPIMG_PARALLEL if set, else one per CPU."""
    env = os.environ.get(PARALLEL_ENV, "").strip()
    if env:
        try:
            return int(env)
        except ValueError:
            raise ConfigurationError(f"{PARALLEL_ENV} must be an integer, got {env!r}")
    return os.cpu_count() or 4


@dataclass(frozen=True)
class RunConfig:
    sizes: Tuple[OutputSpec, ...]
    options: EncodeOptions = EncodeOptions()
    parallel: int = 1
    quiet: bool = False
    out_dir: Optional[Path] = None
    if_newer: bool = False
    dry_run: bool = False
    keep_going: bool = False


def build_config(
    sizes: Optional[Sequence[OutputSpec]] = None,
    quality: float = DEFAULT_QUALITY,
    lossless: bool = False,
    parallel: Optional[int] = None,
    quiet: bool = False,
    out_dir: Optional[str] = None,
    if_newer: bool = False,
    dry_run: bool = False,
    keep_going: bool = False,
) -> RunConfig:
    """Validate settings and freeze them into a RunConfig.

    Raises ConfigurationError for an unknown output format, a quality
    outside 0-100 or a non-positive worker count.
    """
    if sizes is None:
        sizes = parse_sizes(DEFAULT_SIZES)
    if not sizes:
        raise ConfigurationError("no output sizes given")
    for spec in sizes:
        try:
            check_format(spec.format)
        except UnsupportedFormatError as e:
            raise ConfigurationError(f"size {spec.height}-{spec.format}: {e}") from e

    if not 0 <= quality <= 100:
        raise ConfigurationError(f"quality must be between 0 and 100, got {quality}")

    if parallel is None:
        parallel = default_parallel()
    if parallel < 1:
        raise ConfigurationError(f"parallel must be at least 1, got {parallel}")

    return RunConfig(
        sizes=tuple(sizes),
        options=EncodeOptions(quality=float(quality), lossless=lossless),
        parallel=parallel,
        quiet=quiet,
        out_dir=Path(out_dir) if out_dir else None,
        if_newer=if_newer,
        dry_run=dry_run,
        keep_going=keep_going,
    )
