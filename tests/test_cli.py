"""命令行入口与退出码的测试。"""

from __future__ import annotations

from pathlib import Path

from PIL import Image
from typer.testing import CliRunner

from tree_downsizer.cli.main import app

runner = CliRunner()


def test_cli_processes_tree_and_exits_zero(tmp_path: Path) -> None:
    source = tmp_path / "input"
    output = tmp_path / "output"
    source.mkdir()
    Image.new("RGB", (3000, 1500), "red").save(source / "img1.jpg")
    Image.new("RGB", (800, 600), "green").save(source / "img2.png")

    result = runner.invoke(
        app, ["--source", str(source), "--dest", str(output), "--width", "1600", "--threads", "2"]
    )

    assert result.exit_code == 0, result.output
    assert "resized: img1.jpg" in result.output
    assert "not resized: img2.png" in result.output
    with Image.open(output / "img1.jpg") as img1:
        assert img1.width == 1600


def test_per_file_failures_keep_exit_code_zero(tmp_path: Path) -> None:
    source = tmp_path / "input"
    source.mkdir()
    Image.new("RGB", (10, 10)).save(source / "good.png")
    (source / "bad.jpg").write_text("not an image")

    result = runner.invoke(app, ["-s", str(source), "-d", str(tmp_path / "output"), "-t", "1"])

    assert result.exit_code == 0
    assert "error: bad.jpg: open/decode error:" in result.output
    assert "not resized: good.png" in result.output


def test_walk_error_exits_non_zero(tmp_path: Path) -> None:
    result = runner.invoke(app, ["-s", str(tmp_path / "missing"), "-d", str(tmp_path / "output")])

    assert result.exit_code == 1


def test_invalid_threads_rejected_before_work(tmp_path: Path) -> None:
    source = tmp_path / "input"
    source.mkdir()
    Image.new("RGB", (10, 10)).save(source / "good.png")

    result = runner.invoke(app, ["-s", str(source), "-d", str(tmp_path / "output"), "-t", "0"])

    assert result.exit_code == 1
    assert "max concurrency" in result.output
    assert not (tmp_path / "output").exists()


def test_empty_destination_rejected(tmp_path: Path) -> None:
    result = runner.invoke(app, ["-s", str(tmp_path), "-d", ""])

    assert result.exit_code == 1
    assert "destination path must be specified" in result.output


def test_quality_out_of_range_rejected(tmp_path: Path) -> None:
    result = runner.invoke(app, ["-s", str(tmp_path / "input"), "-d", str(tmp_path / "out"), "-q", "101"])

    assert result.exit_code == 1
    assert "quality" in result.output


def test_destination_equal_to_source_leaves_sources_untouched(tmp_path: Path) -> None:
    source = tmp_path / "input"
    source.mkdir()
    Image.new("RGB", (300, 10)).save(source / "a.png")

    result = runner.invoke(app, ["-s", str(source), "-d", str(source), "-w", "50"])

    assert result.exit_code == 1
    with Image.open(source / "a.png") as original:
        assert original.size == (300, 10)


def test_destination_inside_source_rejected(tmp_path: Path) -> None:
    source = tmp_path / "input"
    source.mkdir()
    Image.new("RGB", (10, 10)).save(source / "good.png")

    result = runner.invoke(app, ["-s", str(source), "-d", str(source / "resized")])

    assert result.exit_code == 1
    assert not (source / "resized").exists()
