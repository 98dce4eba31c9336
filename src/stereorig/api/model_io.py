from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np

from stereorig.calib_io import (
    matrix_from_block,
    matrix_to_block,
    optional_matrix_from_block,
    read_calibration_yaml,
    write_calibration_yaml,
)


@dataclass(frozen=True)
class StereoPose:
    """Contents of a `{name}_pose.yaml` file (ROS stereo calibration layout)."""

    camera_name: str
    R: np.ndarray  # (3,3)
    T: np.ndarray  # (3,1)
    E: np.ndarray | None  # (3,3)
    F: np.ndarray | None  # (3,3)


def stereo_pose_path(directory: str | Path, camera_name: str) -> Path:
    return Path(directory) / f"{camera_name}_pose.yaml"


def load_stereo_pose(path: Path) -> StereoPose:
    """
    Parse a stereo pose file.

    Raises CalibrationFormatError when a matrix block has the wrong shape or
    element count. E and F stored as empty (0x0) blocks read back as None.
    """
    data = read_calibration_yaml(path)
    name = data.get("camera_name")
    return StereoPose(
        camera_name="" if name is None else str(name),
        R=matrix_from_block(data.get("rotation_matrix"), (3, 3), "rotation_matrix"),
        T=matrix_from_block(data.get("translation_matrix"), (3, 1), "translation_matrix"),
        E=optional_matrix_from_block(data.get("essential_matrix"), (3, 3), "essential_matrix"),
        F=optional_matrix_from_block(data.get("fundamental_matrix"), (3, 3), "fundamental_matrix"),
    )


def save_stereo_pose(path: Path, pose: StereoPose) -> Path:
    return write_calibration_yaml(
        path,
        {
            "camera_name": str(pose.camera_name),
            "rotation_matrix": matrix_to_block(np.asarray(pose.R, dtype=np.float64).reshape(3, 3)),
            "translation_matrix": matrix_to_block(np.asarray(pose.T, dtype=np.float64).reshape(3, 1)),
            "essential_matrix": matrix_to_block(pose.E),
            "fundamental_matrix": matrix_to_block(pose.F),
        },
    )
