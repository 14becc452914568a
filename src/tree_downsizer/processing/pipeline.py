"""处理流水线：遍历源目录树，按准入闸门并发派发每个文件的处理任务。"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterator, Optional

from tree_downsizer.core.config import JobConfig
from tree_downsizer.core.exceptions import ProcessingAborted, WalkError
from tree_downsizer.core.models import STATUS_ERROR_WORKER, FileOutcome, ResizeTask, RunResult
from tree_downsizer.core.progress import ProgressUpdate
from tree_downsizer.core.sink import OutputSink
from tree_downsizer.processing.concurrency import AdmissionGate, CompletionTracker
from tree_downsizer.processing.worker import run_task

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def iter_source_files(source_root: Path, on_error: Callable[[OSError], None]) -> Iterator[Path]:
    """深度优先遍历源目录，产出常规文件相对于根目录的路径。

    同级条目按名称排序。无法读取的目录交给 on_error，并跳过其子树。
    """

    for dirpath, dirnames, filenames in os.walk(source_root, onerror=on_error):
        dirnames.sort()
        current = Path(dirpath)
        for name in sorted(filenames):
            candidate = current / name
            if not candidate.is_file():
                LOGGER.debug("跳过非常规文件: %s", candidate)
                continue
            yield candidate.relative_to(source_root)


def process_tree(
    config: JobConfig,
    sink: Optional[OutputSink] = None,
    progress_callback: ProgressCallback = None,
    cancel_event: Optional[threading.Event] = None,
) -> RunResult:
    """处理入口：校验配置、遍历源目录并等待所有任务完成。

    配置不合法时抛出 InvalidConfigurationError，此时不会触碰任何文件。
    遍历错误记录在返回值的 walk_error 上，单个文件的失败只出现在 failed 列表中。
    """

    config.validate()
    return _TreeRun(config, sink or OutputSink(), progress_callback, cancel_event).run()


class _TreeRun:
    """一次运行的共享状态：闸门、计数器与结果汇总。"""

    def __init__(
        self,
        config: JobConfig,
        sink: OutputSink,
        progress_callback: ProgressCallback,
        cancel_event: Optional[threading.Event],
    ) -> None:
        self.config = config
        self.sink = sink
        self.progress_callback = progress_callback
        self.cancel_event = cancel_event
        self.source_root = Path(config.source_dir)
        self.dest_root = Path(config.dest_dir)
        self.gate = AdmissionGate(config.max_concurrency)
        self.tracker = CompletionTracker()
        self.result = RunResult()
        self._lock = threading.Lock()
        self._completed = 0

    def run(self) -> RunResult:
        LOGGER.info(
            "开始处理 %s -> %s（并发 %d，最大宽度 %d）",
            self.source_root,
            self.dest_root,
            self.config.max_concurrency,
            self.config.max_width,
        )

        with _make_executor(self.config) as executor:
            try:
                self._dispatch(executor)
            finally:
                self.tracker.wait()

        self.result.peak_concurrency = self.gate.peak
        LOGGER.info(
            "处理完成：缩放 %d，未缩放 %d，失败 %d",
            len(self.result.resized),
            len(self.result.unchanged),
            len(self.result.failed),
        )
        self._emit_progress(self._completed, "处理完成", status="done")
        return self.result

    def _dispatch(self, executor: Executor) -> None:
        for relative_path in iter_source_files(self.source_root, self._on_walk_error):
            self.gate.acquire()
            if self.cancel_event is not None and self.cancel_event.is_set():
                self.gate.release()
                LOGGER.info("收到取消信号，停止派发新任务")
                self._record_walk_error(ProcessingAborted("processing cancelled"))
                return

            task = ResizeTask(
                source_root=self.source_root,
                dest_root=self.dest_root,
                relative_path=relative_path,
                max_width=self.config.max_width,
                quality=self.config.quality,
                resample=self.config.resample,
                auto_orient=self.config.auto_orient,
            )

            self.tracker.add()
            try:
                future = executor.submit(run_task, task)
            except BaseException:
                self.gate.release()
                self.tracker.done()
                raise
            future.add_done_callback(lambda fut, task=task: self._on_task_done(fut, task))

    def _on_task_done(self, future: Future, task: ResizeTask) -> None:
        try:
            try:
                outcome = future.result()
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("任务执行异常：%s", task.relative_path)
                outcome = FileOutcome(
                    relative_path=task.relative_path,
                    status=STATUS_ERROR_WORKER,
                    message=f"unexpected error: {exc}",
                )

            self.sink.report(outcome)
            with self._lock:
                self.result.record(outcome)
                self._completed += 1
                completed = self._completed
            self._emit_progress(completed, str(task.relative_path))
        finally:
            self.gate.release()
            self.tracker.done()

    def _on_walk_error(self, error: OSError) -> None:
        LOGGER.debug("遍历失败，跳过该目录：%s", error)
        walk_error = WalkError(str(error))
        self.sink.report_walk_error(walk_error)
        self._record_walk_error(walk_error)

    def _record_walk_error(self, error: WalkError) -> None:
        with self._lock:
            if self.result.walk_error is None:
                self.result.walk_error = error

    def _emit_progress(self, completed: int, message: Optional[str] = None, status: str = "running") -> None:
        if not self.progress_callback:
            return
        self.progress_callback(ProgressUpdate(completed=completed, message=message, status=status))


def _make_executor(config: JobConfig) -> Executor:
    if config.use_processes:
        return ProcessPoolExecutor(max_workers=config.max_concurrency)
    return ThreadPoolExecutor(max_workers=config.max_concurrency, thread_name_prefix="downsizer")
