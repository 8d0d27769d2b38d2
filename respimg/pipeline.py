"""
Per-file pipeline: plan outputs, decode lazily, resize and write.

One call to process_file handles one source image. The source is decoded
at most once, and only when at least one of its outputs is stale; every
output then reads the same in-memory raster.
"""

import contextlib
import io
import os
import threading
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

from PIL import Image

from . import codecs
from .config import RunConfig
from .errors import DecodeError, EncodeError, UnsupportedFormatError
from .freshness import is_stale
from .sizes import OutputSpec

RESIZED = "resized"
SKIPPED = "skipped"
PLANNED = "planned"


class Job(NamedTuple):
    source: Path
    spec: OutputSpec
    output: Path


class Outcome(NamedTuple):
    action: str
    source: Path
    output: Path
    spec: OutputSpec
    width: int = 0
    height: int = 0


class FileResult(NamedTuple):
    source: Path
    outcomes: List[Outcome]
    decoded: bool


# ---------- Naming and geometry ----------

def output_path(src: Path, spec: OutputSpec, out_dir: Optional[Path] = None) -> Path:
    """{dir}/{stem}.{fmt} for height 0, {dir}/{stem}-{height}p.{fmt} otherwise."""
    directory = out_dir if out_dir is not None else src.parent
    if spec.height == 0:
        return directory / f"{src.stem}.{spec.format}"
    return directory / f"{src.stem}-{spec.height}p.{spec.format}"


def target_width(width: int, height: int, new_height: int) -> int:
    # Truncates width * new_height / height; always from the original size
    return max(1, width * new_height // height)


# ---------- Decode once ----------

class LazyRaster:
    """Decodes a source file on first use and hands out the same image after.

    Safe to share between threads. A failed decode is remembered and
    raised again instead of re-reading the file.
    """

    def __init__(self, path: Path):
        self.path = path
        self.decodes = 0
        self._lock = threading.Lock()
        self._image: Optional[Image.Image] = None
        self._error: Optional[DecodeError] = None

    @property
    def loaded(self) -> bool:
        return self._image is not None

    def get(self) -> Image.Image:
        with self._lock:
            if self._image is None and self._error is None:
                self.decodes += 1
                try:
                    data = self.path.read_bytes()
                    self._image = codecs.decode(data, str(self.path))
                except OSError as e:
                    self._error = DecodeError(self.path, e)
                except DecodeError as e:
                    self._error = e
            if self._error is not None:
                raise self._error
            return self._image


# ---------- Output ----------

def render(im: Image.Image, spec: OutputSpec) -> Image.Image:
    if spec.height == 0:
        return im
    return codecs.resize(im, target_width(im.width, im.height, spec.height), spec.height)


def write_bytes_atomic(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(f".{target.name}.{os.getpid()}.{threading.get_ident()}.tmp")
    try:
        with open(tmp, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
    except OSError:
        with contextlib.suppress(OSError):
            os.unlink(tmp)
        raise


def write_output(path: Path, im: Image.Image, fmt: str, options: codecs.EncodeOptions) -> None:
    buf = io.BytesIO()
    try:
        codecs.encode(buf, im, fmt, options)
    except UnsupportedFormatError as e:
        raise UnsupportedFormatError(fmt, path) from e
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(path, e) from e
    try:
        write_bytes_atomic(path, buf.getvalue())
    except OSError as e:
        raise EncodeError(path, e) from e


# ---------- Main entry ----------

def plan_outputs(src: Path, config: RunConfig) -> Tuple[List[Job], List[Outcome]]:
    """Split the size list into jobs for stale outputs and skipped outcomes for fresh ones."""
    jobs: List[Job] = []
    skipped: List[Outcome] = []
    for spec in config.sizes:
        dst = output_path(src, spec, config.out_dir)
        if is_stale(src, dst, config.if_newer):
            jobs.append(Job(src, spec, dst))
        else:
            skipped.append(Outcome(SKIPPED, src, dst, spec))
    return jobs, skipped


def process_file(
    src: Path,
    config: RunConfig,
    cancelled: Optional[threading.Event] = None,
) -> FileResult:
    """
    Produce every stale output of one source file, in size-list order.

    Returns the per-output outcomes, skipped ones first. Raises DecodeError
    or EncodeError; outputs written before the failure are left in place. When `cancelled`
    gets set the remaining outputs are abandoned between writes.
    """
    src = Path(src)
    raster = LazyRaster(src)
    jobs, outcomes = plan_outputs(src, config)

    for job in jobs:
        if config.dry_run:
            outcomes.append(Outcome(PLANNED, src, job.output, job.spec))
            continue
        if cancelled is not None and cancelled.is_set():
            break
        im = render(raster.get(), job.spec)
        write_output(job.output, im, job.spec.format, config.options)
        outcomes.append(Outcome(RESIZED, src, job.output, job.spec, im.width, im.height))

    return FileResult(src, outcomes, raster.loaded)
