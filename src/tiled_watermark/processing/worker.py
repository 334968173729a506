"""单张图片的处理流程：读取、裁剪、平铺水印、写入。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image

from tiled_watermark.core.config import WatermarkJobConfig
from tiled_watermark.core.exceptions import ImageProcessingError
from tiled_watermark.core.models import Dimensions
from tiled_watermark.processing.codec import ImageCodec
from tiled_watermark.processing.geometry import compute_crop_rectangle, compute_tile_grid
from tiled_watermark.processing.overlay import build_overlay

LOGGER = logging.getLogger(__name__)


def process_one(
    filename: str,
    input_dir: Path,
    output_dir: Path,
    config: WatermarkJobConfig,
    codec: ImageCodec,
    logger: Optional[logging.Logger] = None,
) -> str:
    """处理单个文件并写入输出目录，成功时返回文件名。

    任一步骤失败都会放弃该文件，并以 ImageProcessingError 携带文件名向上抛出。
    """

    if logger is None:
        logger = LOGGER

    input_path = input_dir / filename
    output_path = output_dir / filename
    logger.info("开始处理: %s", filename)

    try:
        _watermark_file(input_path, output_path, config, codec, logger)
    except Exception as exc:  # noqa: BLE001
        logger.error("处理失败: %s -> %s", filename, exc)
        raise ImageProcessingError(filename, exc) from exc

    logger.info("已保存: %s", output_path)
    return filename


def _watermark_file(
    input_path: Path,
    output_path: Path,
    config: WatermarkJobConfig,
    codec: ImageCodec,
    logger: logging.Logger,
) -> None:
    dimensions = codec.read_metadata(input_path)
    logger.debug("原始尺寸 %s: %dx%d", input_path.name, dimensions.width, dimensions.height)

    image: Optional[Image.Image] = None
    composed: Optional[Image.Image] = None
    try:
        if config.crop:
            rect = compute_crop_rectangle(dimensions)
            logger.debug("裁剪 %s 到 %dx%d", input_path.name, rect.width, rect.height)
            image = codec.extract_region(input_path, rect)
            dimensions = Dimensions(width=rect.width, height=rect.height)
        else:
            image = codec.load(input_path)

        grid = compute_tile_grid(
            dimensions,
            config.font_size,
            config.padding_left_right,
            config.padding_top_bottom,
        )
        overlay = build_overlay(dimensions, config.watermark_text, config.font_size, config.opacity, grid)
        logger.debug("平铺水印 %s: %d 个锚点", input_path.name, len(overlay.runs))

        composed = codec.composite(image, overlay)
        codec.write_to_file(composed, output_path)
    finally:
        _close_if_needed(image, composed)


def _close_if_needed(*images: Optional[Image.Image]) -> None:
    for img in images:
        if img is not None:
            img.close()
