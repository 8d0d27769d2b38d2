"""
Bounded-parallel batch execution.

Each source file becomes one task on a thread pool sized to the configured
parallelism, so at most `parallel` files are being decoded, resized or
written at once. Pillow drops the GIL while decoding, resampling and
encoding, so the threads really run side by side.

By default the first failure stops the batch: tasks that have not started
yet are cancelled, running ones stop after their current output, and the
error is re-raised once every admitted task has returned. With keep_going
every file is attempted and all failures are raised together.
"""

import concurrent.futures as cf
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .config import RunConfig
from .errors import BatchError
from .pipeline import PLANNED, RESIZED, SKIPPED, FileResult, process_file

ProcessFn = Callable[[Path, RunConfig, threading.Event], FileResult]
ReportFn = Callable[[FileResult], None]


@dataclass
class RunSummary:
    files: int = 0
    written: int = 0
    skipped: int = 0
    planned: int = 0
    elapsed: float = 0.0
    failures: List[Exception] = field(default_factory=list)

    def add(self, result: FileResult) -> None:
        self.files += 1
        for outcome in result.outcomes:
            if outcome.action == RESIZED:
                self.written += 1
            elif outcome.action == SKIPPED:
                self.skipped += 1
            elif outcome.action == PLANNED:
                self.planned += 1


def run_batch(
    files: Sequence[Path],
    config: RunConfig,
    process: ProcessFn = process_file,
    report: Optional[ReportFn] = None,
) -> RunSummary:
    """Process every file with at most config.parallel running at once.

    `report` is called on the calling thread once per finished file.
    """
    start = time.perf_counter()
    summary = RunSummary()
    abort = threading.Event()
    failed = []

    def admit(path: Path) -> Optional[FileResult]:
        if abort.is_set():
            return None
        return process(Path(path), config, abort)

    with cf.ThreadPoolExecutor(max_workers=config.parallel) as ex:
        futures = {ex.submit(admit, f): i for i, f in enumerate(files)}
        try:
            for fut in cf.as_completed(futures):
                try:
                    result = fut.result()
                except Exception as e:
                    if not config.keep_going:
                        raise
                    failed.append((futures[fut], e))
                    continue
                if result is None:
                    continue
                summary.add(result)
                if report is not None:
                    report(result)
        except BaseException:
            abort.set()
            for fut in futures:
                fut.cancel()
            raise

    summary.elapsed = time.perf_counter() - start
    summary.failures = [e for _, e in sorted(failed, key=lambda item: item[0])]
    if summary.failures:
        raise BatchError(summary.failures, summary)
    return summary
