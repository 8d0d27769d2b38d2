import os
from pathlib import Path


def is_stale(src: Path, dst: Path, enabled: bool) -> bool:
    """Return True when dst has to be (re)generated from src.

    With the check disabled everything is stale. Otherwise dst is only
    fresh when both stats succeed and dst is strictly newer than src.
    """
    if not enabled:
        return True
    try:
        dst_mtime = os.stat(dst).st_mtime_ns
        src_mtime = os.stat(src).st_mtime_ns
    except OSError:
        return True
    return not dst_mtime > src_mtime
