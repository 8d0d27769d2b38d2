"""Batch generation of resized image variants for responsive delivery."""

from .codecs import SUPPORTED_FORMATS, EncodeOptions
from .config import RunConfig, build_config
from .errors import (
    BatchError,
    ConfigurationError,
    DecodeError,
    EncodeError,
    ParseError,
    RespimgError,
    UnsupportedFormatError,
)
from .pipeline import output_path, process_file, target_width
from .runner import RunSummary, run_batch
from .sizes import DEFAULT_FORMAT, OutputSpec, parse_sizes

__version__ = "0.1.0"
