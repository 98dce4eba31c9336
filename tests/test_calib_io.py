from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from stereorig.calib_io import (
    CalibrationFormatError,
    matrix_from_block,
    matrix_to_block,
    optional_matrix_from_block,
    read_calibration_yaml,
    write_calibration_yaml,
)


def test_matrix_from_block_row_major():
    m = matrix_from_block({"rows": 2, "cols": 3, "data": [1, 2, 3, 4, 5, 6]}, (2, 3))
    assert m.dtype == np.float64
    assert np.array_equal(m, [[1, 2, 3], [4, 5, 6]])


def test_matrix_from_block_rejects_count_mismatch():
    with pytest.raises(CalibrationFormatError, match="rows\\*cols"):
        matrix_from_block({"rows": 3, "cols": 3, "data": [0.0] * 8}, (3, 3), "rotation_matrix")


def test_matrix_from_block_rejects_wrong_shape():
    with pytest.raises(CalibrationFormatError, match="must be 3x1"):
        matrix_from_block({"rows": 1, "cols": 3, "data": [0.0, 0.0, 0.0]}, (3, 1), "translation_matrix")


def test_matrix_from_block_rejects_missing_block():
    with pytest.raises(CalibrationFormatError):
        matrix_from_block(None, (3, 3), "essential_matrix")


def test_optional_block_empty_reads_none():
    assert optional_matrix_from_block(None, (3, 3)) is None
    assert optional_matrix_from_block({"rows": 0, "cols": 0, "data": []}, (3, 3)) is None
    assert matrix_to_block(None) == {"rows": 0, "cols": 0, "data": []}


def test_read_yaml_with_opencv_header(tmp_path: Path) -> None:
    p = tmp_path / "cam.yaml"
    p.write_text(
        "%YAML:1.0\n"
        "---\n"
        "camera_name: cam\n"
        "rotation_matrix:\n"
        "   rows: 1\n"
        "   cols: 2\n"
        "   data: [ 1., 2. ]\n",
        encoding="utf-8",
    )
    data = read_calibration_yaml(p)
    assert data["camera_name"] == "cam"
    assert np.array_equal(matrix_from_block(data["rotation_matrix"], (1, 2)), [[1.0, 2.0]])


def test_write_then_read_yaml(tmp_path: Path) -> None:
    p = write_calibration_yaml(tmp_path / "sub" / "x.yaml", {"camera_name": "007", "m": matrix_to_block(np.eye(2))})
    data = read_calibration_yaml(p)
    assert data["camera_name"] == "007"
    assert data["m"] == {"rows": 2, "cols": 2, "data": [1.0, 0.0, 0.0, 1.0]}
