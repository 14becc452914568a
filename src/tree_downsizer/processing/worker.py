"""单个文件的处理单元：解码、建目录、缩放、写入。"""

from __future__ import annotations

import logging
from typing import Optional

from PIL import Image

from tree_downsizer.core.models import (
    STATUS_ERROR_LOAD,
    STATUS_ERROR_MKDIR,
    STATUS_ERROR_WRITE,
    STATUS_RESIZED,
    STATUS_UNCHANGED,
    FileOutcome,
    ResizeTask,
)
from tree_downsizer.core.output_manager import (
    DirectoryCreationError,
    ImageWriteError,
    destination_path_for,
    ensure_parent_dir,
    save_image,
    source_path_for,
)
from tree_downsizer.processing.image_loader import ImageLoadingError, load_image
from tree_downsizer.processing.resizer import transform

LOGGER = logging.getLogger(__name__)


def run_task(task: ResizeTask) -> FileOutcome:
    """在工作线程（或进程）中执行单个文件的完整处理流程。

    各阶段的失败都转换为失败结果返回，不向外抛出，
    因此一个文件出错不会影响其他文件。
    """

    source_path = source_path_for(task)

    try:
        image = load_image(source_path, auto_orient=task.auto_orient)
    except ImageLoadingError as exc:
        return FileOutcome(
            relative_path=task.relative_path,
            status=STATUS_ERROR_LOAD,
            message=f"open/decode error: {exc}",
        )

    output: Optional[Image.Image] = None
    try:
        dest_path = destination_path_for(task)
        try:
            ensure_parent_dir(dest_path)
        except DirectoryCreationError as exc:
            return FileOutcome(
                relative_path=task.relative_path,
                status=STATUS_ERROR_MKDIR,
                message=f"directory creation error: {exc}",
                original_size=image.size,
            )

        output, resized = transform(image, task.max_width, task.resample)

        try:
            save_image(output, dest_path, quality=task.quality)
        except ImageWriteError as exc:
            return FileOutcome(
                relative_path=task.relative_path,
                status=STATUS_ERROR_WRITE,
                message=f"save error: {exc}",
                original_size=image.size,
            )

        LOGGER.debug("%s: %s -> %s", task.relative_path, image.size, output.size)
        return FileOutcome(
            relative_path=task.relative_path,
            status=STATUS_RESIZED if resized else STATUS_UNCHANGED,
            output_path=dest_path,
            original_size=image.size,
            output_size=output.size,
        )
    finally:
        _close_if_needed(image, output)


def _close_if_needed(*images: Optional[Image.Image]) -> None:
    seen: set[int] = set()
    for img in images:
        if img is not None and id(img) not in seen:
            seen.add(id(img))
            img.close()
