"""测试共用的图片构造工具。"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

from tiled_watermark.core.config import WatermarkJobConfig


@pytest.fixture()
def make_image() -> Callable[..., Path]:
    def _make(path: Path, size: tuple[int, int] = (100, 80), color: str = "red", mode: str = "RGB") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color).save(path)
        return path

    return _make


@pytest.fixture()
def source_dir(tmp_path: Path) -> Path:
    source = tmp_path / "input"
    source.mkdir()
    return source


@pytest.fixture()
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "output"


@pytest.fixture()
def make_config(source_dir: Path, output_dir: Path) -> Callable[..., WatermarkJobConfig]:
    def _make(**overrides: object) -> WatermarkJobConfig:
        values: dict[str, object] = {
            "input_dir": source_dir,
            "output_dir": output_dir,
            "watermark_text": "WM",
            "font_size": 20,
            "opacity": 100,
            "padding_top_bottom": 10,
            "padding_left_right": 10,
            "crop": False,
        }
        values.update(overrides)
        return WatermarkJobConfig(**values)  # type: ignore[arg-type]

    return _make
