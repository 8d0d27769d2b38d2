"""Exception hierarchy shared by the parser, pipeline and runner."""

from pathlib import Path
from typing import List, Optional, Union

PathLike = Union[str, Path]


class RespimgError(Exception):
    pass


class ConfigurationError(RespimgError):
    """Bad flags or size list. Always raised before any file is touched."""


class ParseError(ConfigurationError):
    def __init__(self, token: str, reason: str):
        self.token = token
        super().__init__(f"invalid size {token!r}: {reason}")


class DecodeError(RespimgError):
    def __init__(self, path: PathLike, reason: object):
        self.path = Path(path)
        super().__init__(f"decode image {self.path}: {reason}")


class EncodeError(RespimgError):
    def __init__(self, path: Optional[PathLike], reason: object):
        self.path = Path(path) if path is not None else None
        if self.path is None:
            super().__init__(str(reason))
        else:
            super().__init__(f"encode file {self.path}: {reason}")


class UnsupportedFormatError(EncodeError):
    def __init__(self, fmt: str, path: Optional[PathLike] = None):
        self.format = fmt
        super().__init__(path, f"unknown format {fmt!r}")


class BatchError(RespimgError):
    """Raised in keep-going mode once every file has been attempted.

    `summary` is the RunSummary of the whole batch, failures included.
    """

    def __init__(self, errors: List[Exception], summary: Optional[object] = None):
        self.errors = list(errors)
        self.summary = summary
        super().__init__(f"{len(self.errors)} file(s) failed")
