"""图片解码。"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from tree_downsizer.core.exceptions import TreeDownsizerError

LOGGER = logging.getLogger(__name__)


class ImageLoadingError(TreeDownsizerError):
    """图片加载失败。"""


def load_image(path: Path, auto_orient: bool = False) -> Image.Image:
    """完整解码单张图片，可选按 EXIF Orientation 校正方向。

    返回值为新的 Image 对象，调用者负责关闭。原始格式记录在 ``format`` 属性上。
    """

    try:
        with Image.open(path) as img:
            img.load()
            image_format = img.format

            if auto_orient:
                oriented = ImageOps.exif_transpose(img)
                if oriented is not None:
                    img = oriented

            loaded = img.copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        LOGGER.debug("无法识别图像文件 %s: %s", path, exc)
        raise ImageLoadingError(str(exc)) from exc

    loaded.format = image_format
    return loaded
