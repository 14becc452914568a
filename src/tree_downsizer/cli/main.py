"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from tree_downsizer.core.config import DEFAULT_MAX_WIDTH, RESAMPLE_FILTERS, JobConfig, default_concurrency
from tree_downsizer.core.exceptions import InvalidConfigurationError
from tree_downsizer.core.models import RunResult
from tree_downsizer.core.progress import ProgressUpdate
from tree_downsizer.processing.pipeline import process_tree
from tree_downsizer.utils.logging import setup_logging

app = typer.Typer(help="递归缩小目录树中过宽的图片，并镜像写入目标目录。")


def _require_path(value: str, name: str) -> Path:
    if not value.strip():
        raise InvalidConfigurationError(f"{name} path must be specified")
    return Path(value).expanduser()


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if task_id is None:
            task_id = progress.add_task("处理图片", total=update.total)
        progress.update(task_id, completed=update.completed)

    return callback


def _summary(result: RunResult) -> str:
    return (
        f"处理完成：缩放 {len(result.resized)} 张，未缩放 {len(result.unchanged)} 张，"
        f"失败 {len(result.failed)} 张。"
    )


@app.command("run")
def run_cli(  # noqa: PLR0913
    source: str = typer.Option(..., "--source", "-s", help="源目录"),
    dest: str = typer.Option(..., "--dest", "-d", help="目标目录"),
    threads: int = typer.Option(default_concurrency(), "--threads", "-t", help="同时处理的最大图片数量"),
    width: int = typer.Option(DEFAULT_MAX_WIDTH, "--width", "-w", help="输出图片宽度上限（像素）"),
    quality: int = typer.Option(100, "--quality", "-q", help="输出质量 0~100，仅作用于 JPEG/WEBP"),
    resample: str = typer.Option("lanczos", "--filter", help=f"重采样滤波器：{'/'.join(RESAMPLE_FILTERS)}"),
    auto_orient: bool = typer.Option(False, "--auto-orient", help="按 EXIF 方向信息旋正后再判断宽度"),
    use_processes: bool = typer.Option(False, "--processes", help="使用进程池代替线程池"),
    show_progress: bool = typer.Option(False, "--progress", help="在 stderr 显示进度"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """执行目录树缩放。"""

    setup_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        job = JobConfig(
            source_dir=_require_path(source, "source"),
            dest_dir=_require_path(dest, "destination"),
            max_concurrency=threads,
            max_width=width,
            quality=quality,
            resample=resample,
            auto_orient=auto_orient,
            use_processes=use_processes,
        )
        job.validate()
    except InvalidConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if show_progress:
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            TextColumn("{task.completed} 张"),
            TimeElapsedColumn(),
            console=Console(stderr=True),
            redirect_stdout=False,
            transient=True,
        )
        with progress:
            result = process_tree(job, progress_callback=_build_progress_callback(progress))
    else:
        result = process_tree(job)

    typer.echo(_summary(result), err=True)

    # 单个文件失败不改变退出码，只有遍历本身失败才返回非零。
    if not result.ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
