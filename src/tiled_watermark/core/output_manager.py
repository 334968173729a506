"""输出目录准备与图像写入模块。"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from PIL import Image

from tiled_watermark.core.exceptions import ImageWriteError, OutputDirectoryCreateError

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
}

JPEG_QUALITY = 95


def ensure_output_dir(output_dir: Path) -> Path:
    """确保输出目录存在（包含父目录），返回解析后的路径。"""

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputDirectoryCreateError(f"Cannot create output directory: {output_dir}") from exc
    return output_dir


def save_image(image: Image.Image, destination: Path) -> None:
    """将 PIL Image 以与扩展名对应的格式写入磁盘。

    先写入同目录下的临时文件再重命名，写入失败时不会留下不完整的目标文件。
    """

    suffix = destination.suffix.lower()
    image_format = SUPPORTED_FORMATS.get(suffix)
    if not image_format:
        raise ImageWriteError(f"Unsupported output format: {suffix}")

    save_params: dict[str, object] = {"optimize": True}
    image_to_save = image
    if image_format == "JPEG":
        save_params.update(quality=JPEG_QUALITY, subsampling=1)
        if image.mode != "RGB":
            image_to_save = image.convert("RGB")
    elif image.mode not in {"RGB", "RGBA"}:
        image_to_save = image.convert("RGBA" if "A" in image.getbands() else "RGB")

    temp_path = destination.with_name(f".{destination.name}.part")
    try:
        with temp_path.open("wb") as handle:
            image_to_save.save(handle, format=image_format, **save_params)
        os.replace(temp_path, destination)
    except (OSError, ValueError) as exc:
        temp_path.unlink(missing_ok=True)
        raise ImageWriteError(f"Failed to write file: {destination}") from exc
    finally:
        if image_to_save is not image:
            image_to_save.close()

    LOGGER.debug("已写入 %s", destination)
