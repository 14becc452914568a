"""按最大宽度等比缩小图片。"""

from __future__ import annotations

from PIL import Image

from tree_downsizer.core.exceptions import InvalidConfigurationError

RESAMPLE_MAP = {
    "nearest": Image.Resampling.NEAREST,
    "box": Image.Resampling.BOX,
    "bilinear": Image.Resampling.BILINEAR,
    "hamming": Image.Resampling.HAMMING,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


def target_size(size: tuple[int, int], max_width: int) -> tuple[int, int]:
    """计算等比缩放到 max_width 后的尺寸，高度四舍五入且至少为 1。"""

    width, height = size
    new_height = max(1, round(height * max_width / width))
    return max_width, new_height


def resize_image(image: Image.Image, width: int, resample: str = "lanczos") -> Image.Image:
    """把图片缩放到指定宽度，高度按比例计算。"""

    try:
        resample_filter = RESAMPLE_MAP[resample]
    except KeyError as exc:
        raise InvalidConfigurationError(f"unknown resample filter: {resample}") from exc

    return image.resize(target_size(image.size, width), resample_filter)


def transform(image: Image.Image, max_width: int, resample: str = "lanczos") -> tuple[Image.Image, bool]:
    """宽度不超过 max_width 时原样返回，否则缩小到 max_width。

    返回 (图片, 是否缩放)。未缩放时返回的是同一个对象。
    """

    if max_width < 1:
        raise InvalidConfigurationError(f"max width must be a positive integer, got {max_width}")

    if image.width <= max_width:
        return image, False

    return resize_image(image, max_width, resample), True
