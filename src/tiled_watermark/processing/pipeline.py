"""批处理流水线：扫描、分批并发执行水印处理、汇总结果。"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence

from tiled_watermark.core.config import FailurePolicy, WatermarkJobConfig
from tiled_watermark.core.exceptions import ImageProcessingError, TiledWatermarkError
from tiled_watermark.core.models import FileOutcome, RunResult
from tiled_watermark.core.output_manager import ensure_output_dir
from tiled_watermark.core.progress import BatchProgress, compute_percentage
from tiled_watermark.core.scanner import collect_image_files, require_input_dir
from tiled_watermark.processing.codec import ImageCodec, PillowCodec
from tiled_watermark.processing.worker import process_one

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[BatchProgress], None]]


def partition(filenames: Sequence[str], batch_size: int) -> Iterator[list[str]]:
    """将文件列表切分为连续的固定大小批次，最后一批可能不足。"""

    if batch_size < 1:
        raise ValueError(f"batch_size must be positive: {batch_size}")
    for start in range(0, len(filenames), batch_size):
        yield list(filenames[start : start + batch_size])


class WatermarkBatchRunner:
    """按批次驱动单图处理流程。

    每个批次内的文件并发处理，批次之间严格按顺序执行；每个批次结束后
    通过 ``progress_callback`` 通知宿主。所有错误都会记录日志并转换为
    ``RunResult(success=False)`` 返回。
    """

    def __init__(
        self,
        codec: Optional[ImageCodec] = None,
        logger: Optional[logging.Logger] = None,
        progress_callback: ProgressCallback = None,
    ) -> None:
        self.codec = codec if codec is not None else PillowCodec()
        self.logger = logger if logger is not None else LOGGER
        self.progress_callback = progress_callback

    def run(self, config: WatermarkJobConfig) -> RunResult:
        """执行一次水印批处理任务。"""

        self.logger.info(
            "收到水印任务: input=%s output=%s crop=%s policy=%s",
            config.input_dir,
            config.output_dir,
            config.crop,
            config.failure_policy.value,
        )
        try:
            result = self._run(config)
        except TiledWatermarkError as exc:
            self.logger.error("水印任务失败: %s", exc)
            return RunResult(success=False, message=str(exc))
        except Exception as exc:  # noqa: BLE001
            self.logger.exception("水印任务出现未预期的异常")
            return RunResult(success=False, message=str(exc) or type(exc).__name__)

        if result.success:
            self.logger.info("%s", result.message)
        else:
            self.logger.error("水印任务失败: %s", result.message)
        return result

    def _run(self, config: WatermarkJobConfig) -> RunResult:
        require_input_dir(config.input_dir)
        output_dir = ensure_output_dir(config.output_dir)

        filenames = collect_image_files(config.input_dir)
        total = len(filenames)
        self.logger.info("发现 %d 个待处理的图片文件", total)

        batch_size = min(config.max_concurrent, total)
        batches = list(partition(filenames, batch_size))
        processed: list[str] = []
        failed: list[FileOutcome] = []

        with ThreadPoolExecutor(max_workers=batch_size, thread_name_prefix="watermark") as executor:
            for index, batch in enumerate(batches, start=1):
                self.logger.info("开始第 %d/%d 批: %s", index, len(batches), ", ".join(batch))
                succeeded, errors = self._run_batch(executor, batch, config, output_dir)
                processed.extend(succeeded)
                failed.extend(errors)

                if errors and config.failure_policy is FailurePolicy.FAIL_FAST:
                    self.logger.warning("第 %d 批出现失败，终止后续批次", index)
                    return RunResult(
                        success=False,
                        message=errors[0].message or errors[0].filename,
                        processed_filenames=processed,
                        failed=failed,
                    )

                self._emit_progress(
                    BatchProgress(
                        processed_count=len(processed),
                        total_count=total,
                        percentage=compute_percentage(len(processed), total),
                        current_batch=tuple(batch),
                        batch_index=index,
                        batch_count=len(batches),
                    )
                )

        if failed:
            names = ", ".join(outcome.filename for outcome in failed)
            return RunResult(
                success=False,
                message=f"Processed {len(processed)} of {total} images; {len(failed)} failed: {names}",
                processed_filenames=processed,
                failed=failed,
            )

        return RunResult(
            success=True,
            message=f"Processed {total} images successfully.",
            processed_filenames=processed,
        )

    def _run_batch(
        self,
        executor: ThreadPoolExecutor,
        batch: list[str],
        config: WatermarkJobConfig,
        output_dir: Path,
    ) -> tuple[list[str], list[FileOutcome]]:
        """并发执行一个批次并等待全部任务结束，按批次内顺序返回结果。"""

        futures: list[Future[str]] = [
            executor.submit(
                process_one,
                filename,
                config.input_dir,
                output_dir,
                config,
                self.codec,
                self.logger,
            )
            for filename in batch
        ]
        wait(futures)

        succeeded: list[str] = []
        errors: list[FileOutcome] = []
        for filename, future in zip(batch, futures):
            try:
                succeeded.append(future.result())
            except ImageProcessingError as exc:
                errors.append(FileOutcome(filename=filename, status="failed", message=str(exc)))
        return succeeded, errors

    def _emit_progress(self, update: BatchProgress) -> None:
        self.logger.info(
            "进度 %d/%d (%d%%)", update.processed_count, update.total_count, update.percentage
        )
        if not self.progress_callback:
            return
        try:
            self.progress_callback(update)
        except Exception:  # noqa: BLE001
            self.logger.exception("进度回调执行失败")


def run_watermark_job(
    config: WatermarkJobConfig,
    progress_callback: ProgressCallback = None,
    *,
    codec: Optional[ImageCodec] = None,
    logger: Optional[logging.Logger] = None,
) -> RunResult:
    """批处理入口：宿主只需提供配置与可选的进度回调。"""

    runner = WatermarkBatchRunner(codec=codec, logger=logger, progress_callback=progress_callback)
    return runner.run(config)
