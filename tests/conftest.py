import os
import time
from pathlib import Path

import pytest
from PIL import Image

from respimg.config import build_config
from respimg.sizes import parse_sizes


@pytest.fixture
def make_image(tmp_path: Path):
    """Write a solid image and backdate it so fresh outputs are always newer."""

    def _make(name: str = "photo.jpg", size=(192, 108), color=(200, 40, 40), mode: str = "RGB") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color).save(path)
        past = time.time() - 3600
        os.utime(path, (past, past))
        return path

    return _make


@pytest.fixture
def config_for():
    def _config(sizes: str = "480,720,1080", **kwargs):
        kwargs.setdefault("parallel", 2)
        return build_config(sizes=parse_sizes(sizes), **kwargs)

    return _config
