"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from tiled_watermark.core.config import MAX_CONCURRENT, FailurePolicy, WatermarkJobConfig
from tiled_watermark.core.exceptions import InvalidConfigurationError
from tiled_watermark.core.progress import BatchProgress
from tiled_watermark.processing.pipeline import run_watermark_job
from tiled_watermark.utils.logging import setup_logging, shutdown_logging

app = typer.Typer(help="Apply a tiled text watermark to a folder of images.")

DEFAULT_OUTPUT_NAME = "watermarked"


@app.callback()
def main() -> None:
    """Apply a tiled text watermark to a folder of images."""


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: BatchProgress) -> None:
        nonlocal task_id
        if task_id is None:
            task_id = progress.add_task("Watermarking", total=update.total_count)
        progress.update(task_id, completed=update.processed_count)
        progress.log(f"Batch {update.batch_index}/{update.batch_count}: {', '.join(update.current_batch)}")

    return callback


@app.command("run")
def run_cli(  # noqa: PLR0913
    input_dir: Path = typer.Argument(..., help="Folder containing the source images"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help=f"Output folder (default: INPUT_DIR/{DEFAULT_OUTPUT_NAME})"
    ),
    text: str = typer.Option(..., "--text", "-t", help="Watermark text"),
    font_size: int = typer.Option(48, "--font-size", help="Font size in pixels (1-200)"),
    opacity: int = typer.Option(50, "--opacity", help="Watermark opacity in percent (0-100)"),
    padding_tb: int = typer.Option(100, "--padding-tb", help="Vertical padding between tiles (0-1000)"),
    padding_lr: int = typer.Option(100, "--padding-lr", help="Horizontal padding between tiles (0-1000)"),
    crop: bool = typer.Option(False, "--crop/--no-crop", help="Center-crop every image to 5:4 first"),
    workers: int = typer.Option(MAX_CONCURRENT, "--workers", "-w", help="Images processed concurrently"),
    collect_all: bool = typer.Option(
        False, "--collect-all", help="Keep processing after a failure and report every failed file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
) -> None:
    """Watermark every JPG/PNG image in INPUT_DIR."""

    logger = setup_logging(logging.DEBUG if verbose else logging.INFO, log_file)

    input_dir = input_dir.expanduser().resolve()
    output_dir = output.expanduser().resolve() if output else input_dir / DEFAULT_OUTPUT_NAME

    try:
        job = WatermarkJobConfig(
            input_dir=input_dir,
            output_dir=output_dir,
            watermark_text=text.strip(),
            font_size=font_size,
            opacity=opacity,
            padding_top_bottom=padding_tb,
            padding_left_right=padding_lr,
            crop=crop,
            max_concurrent=workers,
            failure_policy=FailurePolicy.COLLECT_ALL if collect_all else FailurePolicy.FAIL_FAST,
        )
    except InvalidConfigurationError as exc:
        for error in exc.errors:
            typer.echo(f"Validation error: {error}", err=True)
        raise typer.Exit(code=2) from exc

    logger.debug("CLI 参数解析完成: %s", job)

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
    )

    try:
        with progress:
            result = run_watermark_job(job, progress_callback=_build_progress_callback(progress), logger=logger)
    finally:
        shutdown_logging(logger)

    if result.success:
        typer.echo(result.message)
        typer.echo(f"Output folder: {output_dir}")
        return

    typer.echo(f"Error: {result.message}", err=True)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
