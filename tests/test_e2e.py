"""End-to-end runs through the command line entry point."""

import numpy as np
import pandas as pd
import pytest
from PIL import Image

from mandelraster.cli import main
from mandelraster.computation import allocate_buffer, render
from mandelraster.geometry import ImageBounds, PlaneRegion


def _expected(width, height, upper_left, lower_right):
    bounds = ImageBounds(width, height)
    pixels = allocate_buffer(bounds)
    render(pixels, bounds, PlaneRegion(upper_left, lower_right))
    return pixels.reshape(height, width)


@pytest.mark.parametrize("schedule", ["serial", "dynamic"])
def test_cli_writes_grayscale_png(tmp_path, schedule):
    output = tmp_path / "mandel.png"
    rc = main([str(output), "100x75", "-1.20,0.35", "-1,0.20", "--schedule", schedule, "--quiet"])
    assert rc == 0

    with Image.open(output) as image:
        assert image.mode == "L"
        assert image.size == (100, 75)
        data = np.asarray(image)

    np.testing.assert_array_equal(data, _expected(100, 75, complex(-1.20, 0.35), complex(-1.0, 0.20)))


def test_cli_writes_chunk_report(tmp_path, capsys):
    output = tmp_path / "out" / "mandel.png"
    report = tmp_path / "chunks.csv"
    rc = main([str(output), "40x30", "-2,1", "1,-1", "--schedule", "static", "--chunk-size", "10", "--report", str(report)])
    assert rc == 0
    assert output.exists()
    assert len(pd.read_csv(report)) == 3

    out = capsys.readouterr().out
    assert "[Run] Starting render" in out
    assert "[Timing] Total:" in out


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["mandel.png", "100x75", "-1.20,0.35"],
        ["mandel.png", "100", "-1.20,0.35", "-1,0.20"],
        ["mandel.png", "100x75", "-1.20", "-1,0.20"],
        ["mandel.png", "100x75", "-1.20,abc", "-1,0.20"],
        ["mandel.png", "100x75", "-1,0.20", "-1.20,0.35"],
    ],
)
def test_cli_rejects_bad_arguments(tmp_path, monkeypatch, argv):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code != 0
    assert not (tmp_path / "mandel.png").exists()


def test_cli_config_file(tmp_path):
    config = tmp_path / "renders.yaml"
    config.write_text(
        f"""
defaults:
  image_size: 24x16
  upper_left: "-2,1"
  lower_right: "1,-1"
renders:
  - output: {tmp_path / "serial.png"}
  - output: {tmp_path / "numba.png"}
    schedule: numba
"""
    )
    assert main(["--config", str(config), "--quiet"]) == 0

    with Image.open(tmp_path / "serial.png") as serial, Image.open(tmp_path / "numba.png") as numba_image:
        np.testing.assert_array_equal(np.asarray(serial), np.asarray(numba_image))


def test_cli_config_file_missing(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(tmp_path / "missing.yaml")])
    assert "ERROR" in str(excinfo.value.code)


def test_cli_config_file_quiet_prints_nothing(tmp_path, capsys):
    config = tmp_path / "renders.yaml"
    config.write_text(
        f"""
renders:
  - output: {tmp_path / "quiet.png"}
    image_size: 16x8
    schedule: dynamic
"""
    )
    assert main(["--config", str(config), "--quiet"]) == 0
    assert (tmp_path / "quiet.png").exists()

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_cli_config_file_quiet_still_reports_failures(tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    config = tmp_path / "renders.yaml"
    config.write_text(
        f"""
renders:
  - output: {blocker / "nested.png"}
    image_size: 16x8
"""
    )
    assert main(["--config", str(config), "--quiet"]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "FAILED" in captured.err
