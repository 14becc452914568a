"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from tree_downsizer.core.exceptions import WalkError

STATUS_RESIZED = "resized"
STATUS_UNCHANGED = "unchanged"
STATUS_ERROR_LOAD = "error-load"
STATUS_ERROR_MKDIR = "error-mkdir"
STATUS_ERROR_WRITE = "error-write"
STATUS_ERROR_WORKER = "error-worker"

SUCCESS_STATUSES = frozenset({STATUS_RESIZED, STATUS_UNCHANGED})


@dataclass(frozen=True)
class ResizeTask:
    """单个文件的处理任务，遍历时创建，处理完即丢弃。"""

    source_root: Path
    dest_root: Path
    relative_path: Path
    max_width: int
    quality: Optional[int] = None
    resample: str = "lanczos"
    auto_orient: bool = False


@dataclass(slots=True)
class FileOutcome:
    """记录单个文件的处理结果（用于输出与统计）。"""

    relative_path: Path
    status: str
    output_path: Optional[Path] = None
    message: Optional[str] = None
    original_size: Optional[tuple[int, int]] = None
    output_size: Optional[tuple[int, int]] = None

    @property
    def failed(self) -> bool:
        return self.status not in SUCCESS_STATUSES


@dataclass(slots=True)
class RunResult:
    """一次完整运行的汇总结果。"""

    resized: list[FileOutcome] = field(default_factory=list)
    unchanged: list[FileOutcome] = field(default_factory=list)
    failed: list[FileOutcome] = field(default_factory=list)
    walk_error: Optional[WalkError] = None
    peak_concurrency: int = 0

    @property
    def ok(self) -> bool:
        """只有遍历本身失败才算整体失败，单个文件失败不影响。"""

        return self.walk_error is None

    def record(self, outcome: FileOutcome) -> None:
        if outcome.status == STATUS_RESIZED:
            self.resized.append(outcome)
        elif outcome.status == STATUS_UNCHANGED:
            self.unchanged.append(outcome)
        else:
            self.failed.append(outcome)

    def all_outcomes(self) -> list[FileOutcome]:
        """返回所有结果记录。"""

        return [*self.resized, *self.unchanged, *self.failed]
