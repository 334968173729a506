"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(slots=True, frozen=True)
class Dimensions:
    """图片宽高（像素）。"""

    width: int
    height: int


@dataclass(slots=True, frozen=True)
class CropRectangle:
    """裁剪区域，坐标相对于原图左上角。"""

    left: int
    top: int
    width: int
    height: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        """转换为 Pillow 使用的 (left, upper, right, lower) 形式。"""

        return self.left, self.top, self.left + self.width, self.top + self.height

    def fits_within(self, dimensions: Dimensions) -> bool:
        return (
            min(self.left, self.top) >= 0
            and self.width > 0
            and self.height > 0
            and self.left + self.width <= dimensions.width
            and self.top + self.height <= dimensions.height
        )


@dataclass(slots=True)
class FileOutcome:
    """记录单个文件的处理结果（用于日志与结果汇总）。"""

    filename: str
    status: str
    message: Optional[str] = None


@dataclass(slots=True)
class RunResult:
    """一次批处理运行的最终结果。"""

    success: bool
    message: str
    processed_filenames: list[str] = field(default_factory=list)
    failed: list[FileOutcome] = field(default_factory=list)

    @property
    def failed_filenames(self) -> list[str]:
        return [outcome.filename for outcome in self.failed]

    def to_dict(self) -> dict[str, Any]:
        """返回宿主可直接序列化的结构。"""

        return {
            "success": self.success,
            "message": self.message,
            "processed": list(self.processed_filenames),
            "failed": [
                {"filename": outcome.filename, "message": outcome.message or ""} for outcome in self.failed
            ],
        }
