"""图像编解码与合成：基于 Pillow 的实现与可替换的协议。"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Protocol, Union

from PIL import Image, ImageDraw, ImageFont

from tiled_watermark.core.exceptions import ImageDecodeError, InvalidImageMetadata, MetadataReadError
from tiled_watermark.core.models import CropRectangle, Dimensions
from tiled_watermark.core.output_manager import save_image
from tiled_watermark.processing.overlay import OverlayDescriptor

LOGGER = logging.getLogger(__name__)

FONT_CANDIDATES = (
    "arial.ttf",
    "Arial.ttf",
    "DejaVuSans.ttf",
    "LiberationSans-Regular.ttf",
)

# Pillow 在不同阶段会抛出的解码类异常
_DECODE_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)

FontType = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


class ImageCodec(Protocol):
    """批处理流程依赖的图像能力。"""

    def read_metadata(self, path: Path) -> Dimensions: ...

    def load(self, path: Path) -> Image.Image: ...

    def extract_region(self, path: Path, rect: CropRectangle) -> Image.Image: ...

    def composite(self, image: Image.Image, overlay: OverlayDescriptor) -> Image.Image: ...

    def write_to_file(self, image: Image.Image, path: Path) -> None: ...


@lru_cache(maxsize=32)
def load_font(size: int) -> FontType:
    """按字号加载字体，优先使用常见的 TrueType 字体。"""

    for candidate in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue

    LOGGER.debug("未找到 TrueType 字体，使用 Pillow 默认字体")
    return ImageFont.load_default(size=size)


class PillowCodec:
    """使用 Pillow 完成读取、裁剪、合成与写入。

    返回的 Image 对象由调用者负责关闭。
    """

    def read_metadata(self, path: Path) -> Dimensions:
        try:
            with Image.open(path) as img:
                width, height = img.size
        except _DECODE_ERRORS as exc:
            LOGGER.debug("无法读取图像元数据 %s: %s", path, exc)
            raise MetadataReadError(f"Cannot read image metadata: {path.name}") from exc

        if width <= 0 or height <= 0:
            raise InvalidImageMetadata(f"Invalid image dimensions: {width}x{height}")
        return Dimensions(width=width, height=height)

    def load(self, path: Path) -> Image.Image:
        try:
            with Image.open(path) as img:
                img.load()
                return img.copy()
        except _DECODE_ERRORS as exc:
            raise ImageDecodeError(f"Cannot decode image: {path.name}") from exc

    def extract_region(self, path: Path, rect: CropRectangle) -> Image.Image:
        try:
            with Image.open(path) as img:
                source = Dimensions(*img.size)
                if not rect.fits_within(source):
                    raise InvalidImageMetadata(
                        f"Crop region {rect.box} outside image bounds {source.width}x{source.height}"
                    )
                img.load()
                return img.crop(rect.box)
        except _DECODE_ERRORS as exc:
            raise ImageDecodeError(f"Cannot decode image: {path.name}") from exc

    def composite(self, image: Image.Image, overlay: OverlayDescriptor) -> Image.Image:
        has_alpha = "A" in image.getbands() or "transparency" in image.info
        base = image.convert("RGBA")

        layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        font = load_font(overlay.font_size)
        fill = overlay.fill_rgba

        for run in overlay.runs:
            if isinstance(font, ImageFont.FreeTypeFont):
                draw.text((run.x, run.y), run.text, fill=fill, font=font, anchor="mm")
            else:
                left, top, right, bottom = draw.textbbox((0, 0), run.text, font=font)
                origin = (run.x - (left + right) / 2, run.y - (top + bottom) / 2)
                draw.text(origin, run.text, fill=fill, font=font)

        base.alpha_composite(layer, dest=(0, 0))
        layer.close()

        if has_alpha:
            return base
        combined = base.convert("RGB")
        base.close()
        return combined

    def write_to_file(self, image: Image.Image, path: Path) -> None:
        save_image(image, path)
