"""输入目录扫描与筛选逻辑。"""

from __future__ import annotations

from pathlib import Path

from tiled_watermark.core.exceptions import MissingInputDirectory, NoImagesFound

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}


def is_supported_image(name: str) -> bool:
    """按扩展名（不区分大小写）判断是否为支持的图片。"""

    return Path(name).suffix.lower() in IMAGE_EXTENSIONS


def require_input_dir(input_dir: Path) -> None:
    if not input_dir.is_dir():
        raise MissingInputDirectory(f"Input directory does not exist: {input_dir}")


def collect_image_files(input_dir: Path) -> list[str]:
    """列出输入目录下（不递归）的图片文件名，按文件名排序。

    调用方需先用 require_input_dir 确认目录存在；没有匹配文件时抛出 NoImagesFound。
    """

    names = [
        entry.name
        for entry in input_dir.iterdir()
        if entry.is_file() and is_supported_image(entry.name)
    ]
    if not names:
        raise NoImagesFound("No images found in the input directory.")

    # 目录遍历顺序随文件系统而定，按文件名排序以保证批次划分稳定
    names.sort(key=lambda name: (name.lower(), name))
    return names
