"""项目内使用的自定义异常定义。"""

from __future__ import annotations


class TiledWatermarkError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(TiledWatermarkError):
    """配置不合法时抛出。"""

    def __init__(self, errors: list[str] | str) -> None:
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("; ".join(self.errors))


class MissingInputDirectory(TiledWatermarkError):
    """输入目录不存在。"""


class NoImagesFound(TiledWatermarkError):
    """输入目录中没有可处理的图片。"""


class OutputDirectoryCreateError(TiledWatermarkError):
    """无法创建输出目录。"""


class InvalidImageMetadata(TiledWatermarkError):
    """图片尺寸不合法（宽或高不为正数）。"""


class InvalidLayoutParameters(TiledWatermarkError):
    """水印布局参数会导致步长不为正数。"""


class MetadataReadError(TiledWatermarkError):
    """无法读取图片元数据。"""


class ImageDecodeError(TiledWatermarkError):
    """图片解码失败。"""


class ImageWriteError(TiledWatermarkError):
    """输出写入失败。"""


class ImageProcessingError(TiledWatermarkError):
    """单个文件处理失败，携带文件名。"""

    def __init__(self, filename: str, cause: BaseException) -> None:
        self.filename = filename
        self.cause = cause
        super().__init__(f"Failed to process {filename}: {cause}")
