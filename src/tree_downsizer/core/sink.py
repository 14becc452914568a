"""线程安全的输出通道：成功写 stdout，失败写 stderr。"""

from __future__ import annotations

import sys
import threading
from typing import Optional, TextIO

from tree_downsizer.core.models import STATUS_RESIZED, FileOutcome

RESIZED_LABEL = "resized"
UNCHANGED_LABEL = "not resized"


class OutputSink:
    """串行化所有工作单元的输出，每个文件至多一行。

    未显式指定流时，在写入时才取 sys.stdout / sys.stderr，
    以便 rich 的输出重定向与测试捕获生效。
    """

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self._lock = threading.Lock()

    def report(self, outcome: FileOutcome) -> None:
        """输出单个文件的处理结果。"""

        if outcome.failed:
            self._write(self._err_stream(), f"error: {outcome.relative_path}: {outcome.message}")
            return

        label = RESIZED_LABEL if outcome.status == STATUS_RESIZED else UNCHANGED_LABEL
        self._write(self._out_stream(), f"{label}: {outcome.relative_path}")

    def report_walk_error(self, error: BaseException) -> None:
        """输出遍历阶段的错误。"""

        self._write(self._err_stream(), f"error: {error}")

    def _write(self, stream: TextIO, line: str) -> None:
        with self._lock:
            stream.write(line + "\n")
            stream.flush()

    def _out_stream(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def _err_stream(self) -> TextIO:
        return self._stderr if self._stderr is not None else sys.stderr
