from __future__ import annotations

from pathlib import Path

import pytest

from stereorig.api.stereo_camera_model import StereoCameraModel
from stereorig.cli.main import main


def _write_rig(directory: Path, *, with_pose: bool = True) -> None:
    model = StereoCameraModel.from_rectified("rig", 500.0, 500.0, 320.0, 240.0, baseline=0.1, image_size=(640, 480))
    assert model.save(directory, ignore_stereo_transform=not with_pose)


def test_info(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write_rig(tmp_path)
    assert main(["info", str(tmp_path), "rig"]) == 0
    out = capsys.readouterr().out
    assert "name: rig" in out
    assert "baseline: 0.1" in out


def test_depth_and_disparity(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write_rig(tmp_path)
    assert main(["depth", str(tmp_path), "rig", "10", "0"]) == 0
    out = capsys.readouterr().out
    assert "10 px -> 5 m" in out
    assert "0 px -> 0 m" in out

    assert main(["disparity", str(tmp_path), "rig", "5000", "--mm"]) == 0
    assert "5000 mm -> 10 px" in capsys.readouterr().out


def test_missing_pose_file_fails_unless_ignored(tmp_path: Path) -> None:
    _write_rig(tmp_path, with_pose=False)
    assert main(["info", str(tmp_path), "rig"]) == 1
    assert main(["info", str(tmp_path), "rig", "--ignore-stereo-transform"]) == 0


@pytest.mark.integration
def test_scale_writes_rescaled_calibration(tmp_path: Path) -> None:
    src = tmp_path / "src"
    out = tmp_path / "out"
    src.mkdir()
    _write_rig(src)
    assert main(["scale", str(src), "rig", "0.5", "--out", str(out)]) == 0

    scaled = StereoCameraModel()
    assert scaled.load(out, "rig")
    assert scaled.left.fx == 250.0
    assert scaled.left.image_size == (320, 240)
    assert scaled.baseline() == pytest.approx(0.1)


def test_disparity_mm_rejects_fractional_depths(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write_rig(tmp_path)
    with pytest.raises(SystemExit) as exc:
        main(["disparity", str(tmp_path), "rig", "12.7", "--mm"])
    assert exc.value.code == 2
    assert "integer millimetres" in capsys.readouterr().err
