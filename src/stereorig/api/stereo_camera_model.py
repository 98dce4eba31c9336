from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from stereorig.api.model_io import StereoPose, load_stereo_pose, save_stereo_pose, stereo_pose_path
from stereorig.core.camera_model import CameraModel
from stereorig.core.transform import RigidTransform

log = logging.getLogger(__name__)


class InvalidModelError(RuntimeError):
    pass


def _as_matrix(m: np.ndarray | None, shape: tuple[int, int]) -> np.ndarray | None:
    if m is None:
        return None
    return np.asarray(m, dtype=np.float64).reshape(shape)


def _result(values: np.ndarray) -> float | np.ndarray:
    values = values.astype(np.float32)
    if values.ndim == 0:
        return float(values)
    return values


class StereoCameraModel:
    """
    Calibrated stereo rig: two monocular calibrations plus extrinsics.

    Convention (ROS / OpenCV stereoCalibrate):
    - R, T map points from the left camera frame into the right one
    - E, F are the essential and fundamental matrices of the pair

    R and T are both set or both None. When None, no extrinsic transform is
    defined and `stereo_transform()` returns the null transform.
    """

    def __init__(
        self,
        name: str = "",
        left: CameraModel | None = None,
        right: CameraModel | None = None,
        R: np.ndarray | None = None,
        T: np.ndarray | None = None,
        E: np.ndarray | None = None,
        F: np.ndarray | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if (R is None) != (T is None):
            raise ValueError("R and T must be given together")
        self._log = logger if logger is not None else log
        self.left = left if left is not None else CameraModel(logger=logger)
        self.right = right if right is not None else CameraModel(logger=logger)
        self.R = _as_matrix(R, (3, 3))
        self.T = _as_matrix(T, (3, 1))
        self.E = _as_matrix(E, (3, 3))
        self.F = _as_matrix(F, (3, 3))
        self._name = ""
        if name:
            self.set_name(name)

    @classmethod
    def from_rectified(
        cls,
        name: str,
        fx: float,
        fy: float,
        cx: float,
        cy: float,
        baseline: float,
        image_size: tuple[int, int] = (0, 0),
        logger: logging.Logger | None = None,
    ) -> "StereoCameraModel":
        """
        Rig of two identical, already rectified pinhole cameras.

        The right camera is `baseline` (metres) along +x of the left one.
        """
        left = CameraModel.from_intrinsics(fx, fy, cx, cy, image_size=image_size)
        right = CameraModel.from_intrinsics(fx, fy, cx, cy, Tx=-baseline * fx, image_size=image_size)
        return cls(
            name=name,
            left=left,
            right=right,
            R=np.eye(3, dtype=np.float64),
            T=np.array([[-baseline], [0.0], [0.0]], dtype=np.float64),
            logger=logger,
        )

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        self.set_name(name)

    def set_name(self, name: str) -> None:
        self._name = name
        self.left.name = name + "_left"
        self.right.name = name + "_right"

    def is_valid(self) -> bool:
        return self.left.is_valid() and self.right.is_valid()

    def _require_valid(self) -> None:
        if not self.is_valid():
            raise InvalidModelError(f"stereo model {self._name!r} is not valid (left and right need fx, fy, cx, cy > 0)")

    def baseline(self) -> float:
        """
        Distance between the optical centers.

        Taken from T when the extrinsics are loaded, otherwise from the
        rectified right projection matrix (Tx = -fx * baseline).
        """
        self._require_valid()
        if self.T is not None:
            return float(np.linalg.norm(self.T))
        return -self.right.Tx / self.right.fx

    def load(self, directory: str | Path, camera_name: str, ignore_stereo_transform: bool = False) -> bool:
        self.set_name(camera_name)
        if not (self.left.load(directory, camera_name + "_left") and self.right.load(directory, camera_name + "_right")):
            return False
        if ignore_stereo_transform:
            return True

        self.R = None
        self.T = None
        path = stereo_pose_path(directory, camera_name)
        if not path.exists():
            self._log.warning('Could not load stereo calibration file "%s".', path)
            return False

        self._log.info('Reading stereo calibration file "%s"', path)
        pose = load_stereo_pose(path)
        # Identifier only; the children keep the names given by set_name().
        self._name = pose.camera_name or camera_name
        self.R = pose.R
        self.T = pose.T
        self.E = pose.E
        self.F = pose.F
        return True

    def save(self, directory: str | Path, ignore_stereo_transform: bool = False) -> bool:
        if not (self.left.save(directory) and self.right.save(directory)):
            return False
        if ignore_stereo_transform:
            return True

        # Missing extrinsics are not an error on save.
        if self._name and self.R is not None and self.T is not None:
            path = stereo_pose_path(directory, self._name)
            self._log.info('Saving stereo calibration to file "%s"', path)
            save_stereo_pose(path, StereoPose(camera_name=self._name, R=self.R, T=self.T, E=self.E, F=self.F))
        return True

    def scale(self, scale: float) -> None:
        """Rescale both intrinsics; extrinsics are physical and stay as they are."""
        self.left = self.left.scaled(scale)
        self.right = self.right.scaled(scale)

    def compute_depth(self, disparity: float | np.ndarray) -> float | np.ndarray:
        """depth = baseline * fx / (disparity + cx_right - cx_left); 0 disparity gives 0."""
        self._require_valid()
        d = np.asarray(disparity, dtype=np.float32)
        num = np.float32(self.baseline()) * np.float32(self.left.fx)
        offset = np.float32(self.right.cx) - np.float32(self.left.cx)
        with np.errstate(divide="ignore", invalid="ignore"):
            depth = np.where(d == 0, np.float32(0.0), num / (d + offset))
        return _result(depth)

    def compute_disparity(self, depth: float | np.ndarray) -> float | np.ndarray:
        """disparity = baseline * fx / depth - (cx_right - cx_left); 0 depth (metres) gives 0."""
        self._require_valid()
        z = np.asarray(depth, dtype=np.float32)
        return self._disparity_from_metres(z)

    def compute_disparity_mm(self, depth_mm: int | np.ndarray) -> float | np.ndarray:
        """Same as `compute_disparity` for unsigned integer depth in millimetres (16-bit depth images)."""
        self._require_valid()
        raw = np.asarray(depth_mm)
        if not np.issubdtype(raw.dtype, np.integer):
            raise ValueError(f"depth_mm must be an unsigned integer millimetre value, got dtype {raw.dtype}")
        if np.any(raw < 0):
            raise ValueError("depth_mm must be >= 0")
        z = raw.astype(np.float32) / np.float32(1000.0)
        return self._disparity_from_metres(z)

    def _disparity_from_metres(self, z: np.ndarray) -> float | np.ndarray:
        num = np.float32(self.baseline()) * np.float32(self.left.fx)
        offset = np.float32(self.right.cx) - np.float32(self.left.cx)
        with np.errstate(divide="ignore", invalid="ignore"):
            disparity = np.where(z == 0, np.float32(0.0), num / z - offset)
        return _result(disparity)

    def stereo_transform(self) -> RigidTransform:
        if self.R is None or self.T is None:
            return RigidTransform.null()
        R = self.R
        T = self.T.reshape(3)
        return RigidTransform.from_values(
            R[0, 0], R[0, 1], R[0, 2], T[0],
            R[1, 0], R[1, 1], R[1, 2], T[1],
            R[2, 0], R[2, 1], R[2, 2], T[2],
        )

    def __repr__(self) -> str:
        return f"StereoCameraModel(name={self._name!r}, left={self.left!r}, right={self.right!r}, extrinsics={self.R is not None})"
