"""裁剪区域、平铺锚点与叠加层描述的单元测试。"""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET

import pytest

from tiled_watermark.core.config import TARGET_ASPECT_RATIO
from tiled_watermark.core.exceptions import InvalidImageMetadata, InvalidLayoutParameters
from tiled_watermark.core.models import CropRectangle, Dimensions
from tiled_watermark.processing.geometry import compute_crop_rectangle, compute_tile_grid
from tiled_watermark.processing.overlay import build_overlay

SAMPLE_SIZES = [
    (1000, 500),
    (1920, 1080),
    (401, 300),
    (500, 400),
    (400, 600),
    (3000, 4000),
    (1, 1),
    (7, 1),
    (1, 9),
]


def test_wide_image_is_cropped_horizontally() -> None:
    rect = compute_crop_rectangle(Dimensions(1000, 500))

    assert rect == CropRectangle(left=187, top=0, width=625, height=500)


def test_tall_image_is_cropped_vertically() -> None:
    rect = compute_crop_rectangle(Dimensions(400, 600))

    assert rect == CropRectangle(left=0, top=140, width=400, height=320)


def test_exact_ratio_keeps_full_canvas() -> None:
    rect = compute_crop_rectangle(Dimensions(500, 400))

    assert rect == CropRectangle(left=0, top=0, width=500, height=400)


@pytest.mark.parametrize("width,height", SAMPLE_SIZES)
def test_crop_rectangle_properties(width: int, height: int) -> None:
    dims = Dimensions(width, height)
    rect = compute_crop_rectangle(dims)

    assert rect.left + rect.width <= width
    assert rect.top + rect.height <= height
    if width / height > TARGET_ASPECT_RATIO:
        assert rect.height == height
        assert rect.top == 0
        assert rect.width == math.floor(height * TARGET_ASPECT_RATIO)
        assert rect.left == (width - rect.width) // 2
    else:
        assert rect.width == width
        assert rect.left == 0
        assert rect.height == math.floor(width / TARGET_ASPECT_RATIO)
        assert rect.top == (height - rect.height) // 2


@pytest.mark.parametrize("width,height", [(0, 100), (100, 0), (-5, 10)])
def test_crop_rejects_non_positive_dimensions(width: int, height: int) -> None:
    with pytest.raises(InvalidImageMetadata):
        compute_crop_rectangle(Dimensions(width, height))


def test_tile_grid_scenario_100x80() -> None:
    grid = compute_tile_grid(Dimensions(100, 80), font_size=20, padding_x=10, padding_y=10)

    assert grid == [
        (10, 10), (40, 10), (70, 10),
        (10, 40), (40, 40), (70, 40),
        (10, 70), (40, 70), (70, 70),
    ]


@pytest.mark.parametrize(
    "width,height,font_size,padding_x,padding_y",
    [(100, 80, 20, 10, 10), (640, 480, 48, 100, 30), (33, 17, 1, 0, 0), (500, 500, 200, 1000, 5)],
)
def test_tile_grid_counts(width: int, height: int, font_size: int, padding_x: int, padding_y: int) -> None:
    grid = compute_tile_grid(Dimensions(width, height), font_size, padding_x, padding_y)

    step_x = font_size + padding_x
    step_y = font_size + padding_y
    columns = (width - padding_x) // step_x + 1 if padding_x < width else 0
    rows = (height - padding_y) // step_y + 1 if padding_y < height else 0
    assert len(grid) == columns * rows
    assert all(0 <= x < width and 0 <= y < height for x, y in grid)
    # 行优先：y 单调不减
    assert [y for _, y in grid] == sorted(y for _, y in grid)


def test_tile_grid_is_empty_when_padding_exceeds_canvas() -> None:
    assert compute_tile_grid(Dimensions(50, 50), font_size=10, padding_x=50, padding_y=0) == []
    assert compute_tile_grid(Dimensions(50, 50), font_size=10, padding_x=0, padding_y=60) == []


def test_tile_grid_rejects_non_positive_step() -> None:
    with pytest.raises(InvalidLayoutParameters):
        compute_tile_grid(Dimensions(50, 50), font_size=0, padding_x=0, padding_y=10)


def test_overlay_has_one_run_per_anchor() -> None:
    dims = Dimensions(100, 80)
    grid = compute_tile_grid(dims, 20, 10, 10)

    overlay = build_overlay(dims, "WM", 20, 50, grid)

    assert overlay.alpha == pytest.approx(0.5)
    assert overlay.fill_rgba == (255, 255, 255, 128)
    assert [(run.x, run.y) for run in overlay.runs] == grid
    assert all(run.text == "WM" for run in overlay.runs)


def test_overlay_svg_escapes_markup_characters() -> None:
    text = '<b>Tom & "Jerry"\'s</b>'
    overlay = build_overlay(Dimensions(60, 40), text, 10, 25, [(10, 10), (30, 10)])

    svg = overlay.to_svg()

    assert "<b>" not in svg
    root = ET.fromstring(svg)
    texts = root.findall("{http://www.w3.org/2000/svg}text")
    assert len(texts) == 2
    assert all(node.text == text for node in texts)
    assert texts[1].get("x") == "30"
    assert root.get("width") == "60"
    assert "rgba(255, 255, 255, 0.25)" in svg
    assert "text-anchor: middle" in svg


@pytest.mark.parametrize("opacity", [-1, 101])
def test_overlay_rejects_out_of_range_opacity(opacity: int) -> None:
    with pytest.raises(InvalidLayoutParameters):
        build_overlay(Dimensions(10, 10), "x", 10, opacity, [])


@pytest.mark.parametrize("ratio", [0, -1.25])
def test_crop_rejects_non_positive_aspect_ratio(ratio: float) -> None:
    with pytest.raises(InvalidLayoutParameters):
        compute_crop_rectangle(Dimensions(100, 80), ratio)


def test_overlay_rejects_font_size_below_one() -> None:
    with pytest.raises(InvalidLayoutParameters):
        build_overlay(Dimensions(10, 10), "x", 0, 50, [(1, 1)])
