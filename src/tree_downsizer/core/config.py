"""处理任务的配置模型。"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from tree_downsizer.core.exceptions import InvalidConfigurationError

DEFAULT_MAX_WIDTH = 1920

RESAMPLE_FILTERS = ("nearest", "box", "bilinear", "hamming", "bicubic", "lanczos")


def default_concurrency() -> int:
    """默认并发数：主机逻辑 CPU 数量。"""

    return os.cpu_count() or 1


@dataclass(frozen=True)
class JobConfig:
    """单次运行的完整配置，创建后不可修改。"""

    source_dir: Path
    dest_dir: Path
    max_concurrency: int = field(default_factory=default_concurrency)
    max_width: int = DEFAULT_MAX_WIDTH
    quality: Optional[int] = None  # 仅作用于 JPEG / WEBP
    resample: str = "lanczos"
    auto_orient: bool = False
    use_processes: bool = False

    def validate(self) -> None:
        """检查配置合法性，不合法时抛出 InvalidConfigurationError。"""

        if not str(self.source_dir or "").strip():
            raise InvalidConfigurationError("source path must be specified")
        if not str(self.dest_dir or "").strip():
            raise InvalidConfigurationError("destination path must be specified")
        source = Path(self.source_dir).resolve()
        dest = Path(self.dest_dir).resolve()
        if dest == source or source in dest.parents:
            raise InvalidConfigurationError(
                f"destination {dest} must not be the source directory or inside it"
            )
        if self.max_concurrency < 1:
            raise InvalidConfigurationError(
                f"max concurrency must be a positive integer, got {self.max_concurrency}"
            )
        if self.max_width < 1:
            raise InvalidConfigurationError(f"max width must be a positive integer, got {self.max_width}")
        if self.quality is not None and not 0 <= self.quality <= 100:
            raise InvalidConfigurationError(f"quality must be between 0 and 100, got {self.quality}")
        if self.resample not in RESAMPLE_FILTERS:
            raise InvalidConfigurationError(f"unknown resample filter: {self.resample}")
