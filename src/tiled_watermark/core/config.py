"""处理任务的配置模型。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from tiled_watermark.core.exceptions import InvalidConfigurationError

MAX_CONCURRENT = 4
TARGET_ASPECT_RATIO = 5 / 4

FONT_SIZE_RANGE = (1, 200)
OPACITY_RANGE = (0, 100)
PADDING_RANGE = (0, 1000)


class FailurePolicy(str, Enum):
    """批次内出现失败时的处理策略。"""

    FAIL_FAST = "fail-fast"
    COLLECT_ALL = "collect-all"


@dataclass(slots=True, frozen=True)
class WatermarkJobConfig:
    """单次水印批处理任务的配置。

    构造时即完成校验，非法配置无法被创建，也就不会进入批处理流程。
    """

    input_dir: Path
    output_dir: Path
    watermark_text: str
    font_size: int = 48
    opacity: int = 50
    padding_top_bottom: int = 100
    padding_left_right: int = 100
    crop: bool = False
    max_concurrent: int = MAX_CONCURRENT
    failure_policy: FailurePolicy = FailurePolicy.FAIL_FAST

    def __post_init__(self) -> None:
        object.__setattr__(self, "input_dir", Path(self.input_dir))
        object.__setattr__(self, "output_dir", Path(self.output_dir))

        errors = validate_settings(
            watermark_text=self.watermark_text,
            font_size=self.font_size,
            opacity=self.opacity,
            padding_top_bottom=self.padding_top_bottom,
            padding_left_right=self.padding_left_right,
            max_concurrent=self.max_concurrent,
        )
        try:
            object.__setattr__(self, "failure_policy", FailurePolicy(self.failure_policy))
        except ValueError:
            errors.append(f"Unknown failure policy: {self.failure_policy}")
        if errors:
            raise InvalidConfigurationError(errors)


def validate_settings(
    *,
    watermark_text: str,
    font_size: int,
    opacity: int,
    padding_top_bottom: int,
    padding_left_right: int,
    max_concurrent: int = MAX_CONCURRENT,
) -> list[str]:
    """收集全部校验错误，返回错误描述列表（为空表示合法）。"""

    errors: list[str] = []
    if not isinstance(watermark_text, str) or not watermark_text.strip():
        errors.append("Watermark text is required")

    checks = (
        ("Font size", font_size, FONT_SIZE_RANGE),
        ("Opacity", opacity, OPACITY_RANGE),
        ("Padding Top/Bottom", padding_top_bottom, PADDING_RANGE),
        ("Padding Left/Right", padding_left_right, PADDING_RANGE),
    )
    for label, value, (low, high) in checks:
        if not _is_int(value) or not low <= value <= high:
            errors.append(f"{label} must be a number between {low} and {high}")

    if not _is_int(max_concurrent) or max_concurrent < 1:
        errors.append("Max concurrent must be a positive integer")

    return errors


def _is_int(value: object) -> bool:
    # bool 是 int 的子类，需要排除
    return isinstance(value, int) and not isinstance(value, bool)
