"""水印叠加层描述的构建。

描述是声明式的：画布尺寸、字体、透明度以及每个锚点上的文字，
可以交给 Pillow 渲染，也可以导出为 SVG 文本。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from xml.sax.saxutils import escape

from tiled_watermark.core.exceptions import InvalidLayoutParameters
from tiled_watermark.core.models import Dimensions

FONT_FAMILY = "Arial, sans-serif"
FILL_RGB = (255, 255, 255)

_SVG_ENTITIES = {'"': "&quot;", "'": "&apos;"}


@dataclass(slots=True, frozen=True)
class GlyphRun:
    """单个锚点上的一段文字，文字中心对齐到 (x, y)。"""

    x: int
    y: int
    text: str


@dataclass(slots=True, frozen=True)
class OverlayDescriptor:
    """平铺水印叠加层。"""

    dimensions: Dimensions
    font_size: int
    alpha: float
    runs: tuple[GlyphRun, ...]
    font_family: str = FONT_FAMILY
    fill: tuple[int, int, int] = FILL_RGB

    @property
    def fill_rgba(self) -> tuple[int, int, int, int]:
        return (*self.fill, round(self.alpha * 255))

    def to_svg(self) -> str:
        """导出 SVG 文本，水印文字会被转义。"""

        red, green, blue = self.fill
        texts = "".join(
            f'<text class="watermark" x="{run.x}" y="{run.y}">{escape(run.text, _SVG_ENTITIES)}</text>'
            for run in self.runs
        )
        return (
            f'<svg width="{self.dimensions.width}" height="{self.dimensions.height}" '
            'xmlns="http://www.w3.org/2000/svg">'
            "<style>.watermark {"
            f" fill: rgba({red}, {green}, {blue}, {self.alpha:g});"
            f" font-size: {self.font_size}px;"
            f" font-family: {self.font_family};"
            " text-anchor: middle;"
            " dominant-baseline: middle; }</style>"
            f"{texts}</svg>"
        )


def build_overlay(
    dimensions: Dimensions,
    text: str,
    font_size: int,
    opacity_percent: int,
    tile_grid: Iterable[tuple[int, int]],
) -> OverlayDescriptor:
    """根据锚点与样式构建叠加层描述。"""

    if font_size < 1:
        raise InvalidLayoutParameters(f"Font size must be at least 1: {font_size}")
    if not 0 <= opacity_percent <= 100:
        raise InvalidLayoutParameters(f"Opacity must be between 0 and 100: {opacity_percent}")

    runs = tuple(GlyphRun(x=x, y=y, text=text) for x, y in tile_grid)
    return OverlayDescriptor(
        dimensions=dimensions,
        font_size=font_size,
        alpha=opacity_percent / 100,
        runs=runs,
    )
