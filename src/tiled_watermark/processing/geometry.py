"""裁剪区域与平铺水印坐标的纯计算函数。"""

from __future__ import annotations

import math

from tiled_watermark.core.config import TARGET_ASPECT_RATIO
from tiled_watermark.core.exceptions import InvalidImageMetadata, InvalidLayoutParameters
from tiled_watermark.core.models import CropRectangle, Dimensions

TileGrid = list[tuple[int, int]]


def compute_crop_rectangle(dimensions: Dimensions, target_aspect_ratio: float = TARGET_ASPECT_RATIO) -> CropRectangle:
    """计算居中裁剪到目标宽高比的区域。

    比目标更宽的图片裁掉左右两侧，否则裁掉上下两侧；偏移量向下取整。
    """

    width, height = dimensions.width, dimensions.height
    if width <= 0 or height <= 0:
        raise InvalidImageMetadata(f"Invalid image dimensions: {width}x{height}")
    if target_aspect_ratio <= 0:
        raise InvalidLayoutParameters(f"Aspect ratio must be positive: {target_aspect_ratio}")

    if width / height > target_aspect_ratio:
        new_width = math.floor(height * target_aspect_ratio)
        return CropRectangle(left=(width - new_width) // 2, top=0, width=new_width, height=height)

    new_height = math.floor(width / target_aspect_ratio)
    return CropRectangle(left=0, top=(height - new_height) // 2, width=width, height=new_height)


def compute_tile_grid(dimensions: Dimensions, font_size: int, padding_x: int, padding_y: int) -> TileGrid:
    """按行优先顺序生成覆盖画布的水印锚点。"""

    step_x = font_size + padding_x
    step_y = font_size + padding_y
    if step_x <= 0 or step_y <= 0:
        raise InvalidLayoutParameters(f"Tile step must be positive, got ({step_x}, {step_y})")

    return [
        (x, y)
        for y in range(padding_y, dimensions.height, step_y)
        for x in range(padding_x, dimensions.width, step_x)
    ]
