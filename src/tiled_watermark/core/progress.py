"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class BatchProgress:
    """每个批次完成后发送给宿主的进度信息。"""

    processed_count: int
    total_count: int
    percentage: int
    current_batch: tuple[str, ...] = field(default_factory=tuple)
    batch_index: int = 0
    batch_count: int = 0


def compute_percentage(processed: int, total: int) -> int:
    """按四舍五入（0.5 进位）计算百分比。"""

    if total <= 0:
        return 0
    return (processed * 200 + total) // (total * 2)
