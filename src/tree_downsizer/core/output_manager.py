"""路径解析、目标目录创建与图像写入。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image

from tree_downsizer.core.exceptions import TreeDownsizerError
from tree_downsizer.core.models import ResizeTask

LOGGER = logging.getLogger(__name__)

LOSSY_FORMATS = {"JPEG", "WEBP"}
JPEG_MODES = {"1", "L", "RGB", "CMYK"}


class DirectoryCreationError(TreeDownsizerError):
    """目标目录创建失败。"""


class ImageWriteError(TreeDownsizerError):
    """输出写入失败。"""


def source_path_for(task: ResizeTask) -> Path:
    """源文件的绝对路径。"""

    return task.source_root / task.relative_path


def destination_path_for(task: ResizeTask) -> Path:
    """目标文件路径：在输出根目录下镜像源文件的相对路径。"""

    return task.dest_root / task.relative_path


def ensure_parent_dir(destination: Path) -> Path:
    """确保目标文件所在目录存在，逐级创建缺失的中间目录。"""

    parent = destination.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreationError(str(exc)) from exc
    return parent


def resolve_format(destination: Path) -> str:
    """根据目标文件扩展名推断 Pillow 输出格式。"""

    suffix = destination.suffix.lower()
    image_format = Image.registered_extensions().get(suffix)
    if not image_format:
        raise ImageWriteError(f"unsupported output extension: {suffix or '(none)'}")
    return image_format


def save_image(image: Image.Image, destination: Path, quality: Optional[int] = None) -> None:
    """将 PIL Image 按目标扩展名对应的格式保存到磁盘。"""

    image_format = resolve_format(destination)

    save_params = {}
    image_to_save = image
    if image_format in LOSSY_FORMATS and quality is not None:
        save_params["quality"] = quality
    if image_format == "JPEG" and image.mode not in JPEG_MODES:
        LOGGER.debug("JPEG 不支持 %s 模式，转换为 RGB: %s", image.mode, destination)
        image_to_save = image.convert("RGB")

    try:
        image_to_save.save(destination, format=image_format, **save_params)
    except (OSError, ValueError) as exc:
        raise ImageWriteError(str(exc)) from exc
    finally:
        if image_to_save is not image:
            image_to_save.close()
