"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class ProgressUpdate:
    """处理过程中的进度信息。

    遍历与处理同时进行，总数事先未知，因此 total 通常为 None。
    """

    completed: int
    total: Optional[int] = None
    message: Optional[str] = None
    status: str = "running"
