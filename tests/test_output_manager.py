"""路径解析、目录创建与图像写入的单元测试。"""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from tree_downsizer.core.models import ResizeTask
from tree_downsizer.core.output_manager import (
    DirectoryCreationError,
    ImageWriteError,
    destination_path_for,
    ensure_parent_dir,
    resolve_format,
    save_image,
    source_path_for,
)


def make_task(tmp_path: Path, relative: str) -> ResizeTask:
    return ResizeTask(
        source_root=tmp_path / "input",
        dest_root=tmp_path / "output",
        relative_path=Path(relative),
        max_width=100,
    )


def test_paths_mirror_relative_location(tmp_path: Path) -> None:
    task = make_task(tmp_path, "a/b/c/photo.jpg")

    assert source_path_for(task) == tmp_path / "input" / "a" / "b" / "c" / "photo.jpg"
    assert destination_path_for(task) == tmp_path / "output" / "a" / "b" / "c" / "photo.jpg"


def test_ensure_parent_dir_creates_intermediate_directories(tmp_path: Path) -> None:
    destination = tmp_path / "output" / "a" / "b" / "c" / "photo.jpg"

    parent = ensure_parent_dir(destination)

    assert parent == destination.parent
    assert parent.is_dir()
    # 已存在时不报错
    ensure_parent_dir(destination)


def test_ensure_parent_dir_fails_when_file_blocks_path(tmp_path: Path) -> None:
    (tmp_path / "blocker").write_text("I am a file")

    with pytest.raises(DirectoryCreationError):
        ensure_parent_dir(tmp_path / "blocker" / "sub" / "photo.jpg")


def test_resolve_format_from_extension() -> None:
    assert resolve_format(Path("a.JPG")) == "JPEG"
    assert resolve_format(Path("a.jpeg")) == "JPEG"
    assert resolve_format(Path("a.png")) == "PNG"


def test_resolve_format_rejects_unknown_extension() -> None:
    with pytest.raises(ImageWriteError):
        resolve_format(Path("photo"))
    with pytest.raises(ImageWriteError):
        resolve_format(Path("notes.txt"))


def test_save_rgba_as_jpeg_converts_to_rgb(tmp_path: Path) -> None:
    destination = tmp_path / "out.jpg"

    save_image(Image.new("RGBA", (20, 20), (0, 255, 0, 100)), destination)

    with Image.open(destination) as saved:
        assert saved.format == "JPEG"
        assert saved.mode == "RGB"


def test_save_png_keeps_alpha(tmp_path: Path) -> None:
    destination = tmp_path / "out.png"

    save_image(Image.new("RGBA", (20, 20), (0, 255, 0, 100)), destination)

    with Image.open(destination) as saved:
        assert saved.mode == "RGBA"


def test_jpeg_quality_is_applied(tmp_path: Path) -> None:
    image = Image.effect_noise((200, 200), 64).convert("RGB")
    low = tmp_path / "low.jpg"
    high = tmp_path / "high.jpg"

    save_image(image, low, quality=10)
    save_image(image, high, quality=95)

    assert low.stat().st_size < high.stat().st_size


def test_save_into_missing_directory_raises_write_error(tmp_path: Path) -> None:
    with pytest.raises(ImageWriteError):
        save_image(Image.new("RGB", (5, 5)), tmp_path / "missing" / "out.png")
