from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from stereorig.calib_io import (
    matrix_from_block,
    matrix_to_block,
    optional_matrix_from_block,
    read_calibration_yaml,
    write_calibration_yaml,
)

log = logging.getLogger(__name__)


class CameraModel:
    """
    Monocular pinhole camera calibration (ROS camera_info convention).

    - K: (3,3) intrinsic matrix
    - D: (1,N) distortion coefficients
    - R: (3,3) rectification rotation
    - P: (3,4) projection matrix; for the right camera of a rectified pair
      P[0,3] = Tx = -fx * baseline

    fx, fy, cx, cy are read from P when it is set, otherwise from K.
    """

    def __init__(
        self,
        name: str = "",
        image_size: tuple[int, int] = (0, 0),
        K: np.ndarray | None = None,
        D: np.ndarray | None = None,
        R: np.ndarray | None = None,
        P: np.ndarray | None = None,
        distortion_model: str = "plumb_bob",
        logger: logging.Logger | None = None,
    ) -> None:
        self.name = name
        self.image_size = (int(image_size[0]), int(image_size[1]))
        self.K = None if K is None else np.asarray(K, dtype=np.float64).reshape(3, 3)
        self.D = None if D is None else np.asarray(D, dtype=np.float64).reshape(1, -1)
        self.R = None if R is None else np.asarray(R, dtype=np.float64).reshape(3, 3)
        self.P = None if P is None else np.asarray(P, dtype=np.float64).reshape(3, 4)
        self.distortion_model = distortion_model
        self._log = logger if logger is not None else log

    @classmethod
    def from_intrinsics(
        cls,
        fx: float,
        fy: float,
        cx: float,
        cy: float,
        *,
        Tx: float = 0.0,
        name: str = "",
        image_size: tuple[int, int] = (0, 0),
    ) -> "CameraModel":
        """Pinhole model without distortion, identity rectification."""
        K = np.array([[fx, 0.0, cx], [0.0, fy, cy], [0.0, 0.0, 1.0]], dtype=np.float64)
        P = np.array([[fx, 0.0, cx, Tx], [0.0, fy, cy, 0.0], [0.0, 0.0, 1.0, 0.0]], dtype=np.float64)
        return cls(
            name=name,
            image_size=image_size,
            K=K,
            D=np.zeros((1, 5), dtype=np.float64),
            R=np.eye(3, dtype=np.float64),
            P=P,
        )

    def _intrinsic(self, row: int, col: int) -> float:
        if self.P is not None:
            return float(self.P[row, col])
        if self.K is not None:
            return float(self.K[row, col])
        return 0.0

    @property
    def fx(self) -> float:
        return self._intrinsic(0, 0)

    @property
    def fy(self) -> float:
        return self._intrinsic(1, 1)

    @property
    def cx(self) -> float:
        return self._intrinsic(0, 2)

    @property
    def cy(self) -> float:
        return self._intrinsic(1, 2)

    @property
    def Tx(self) -> float:
        return 0.0 if self.P is None else float(self.P[0, 3])

    def is_valid(self) -> bool:
        return self.fx > 0.0 and self.fy > 0.0 and self.cx > 0.0 and self.cy > 0.0

    def scaled(self, scale: float) -> "CameraModel":
        """
        Copy of this model for images resized by `scale`.

        The first two rows of K and P carry pixel units and are multiplied;
        D and R are unit-less and kept.
        """
        scale = float(scale)
        if not scale > 0.0:
            raise ValueError(f"scale must be > 0, got {scale}")
        K = None
        P = None
        if self.K is not None:
            K = self.K.copy()
            K[:2, :] *= scale
        if self.P is not None:
            P = self.P.copy()
            P[:2, :] *= scale
        w, h = self.image_size
        return CameraModel(
            name=self.name,
            image_size=(int(round(w * scale)), int(round(h * scale))),
            K=K,
            D=None if self.D is None else self.D.copy(),
            R=None if self.R is None else self.R.copy(),
            P=P,
            distortion_model=self.distortion_model,
            logger=self._log,
        )

    def file_path(self, directory: str | Path) -> Path:
        return Path(directory) / f"{self.name}.yaml"

    def load(self, directory: str | Path, camera_name: str) -> bool:
        self.name = camera_name
        path = self.file_path(directory)
        if not path.exists():
            self._log.warning('Could not load calibration file "%s".', path)
            return False

        self._log.info('Reading calibration file "%s"', path)
        data = read_calibration_yaml(path)
        self.image_size = (int(data.get("image_width", 0)), int(data.get("image_height", 0)))
        self.K = optional_matrix_from_block(data.get("camera_matrix"), (3, 3), "camera_matrix")
        self.R = optional_matrix_from_block(data.get("rectification_matrix"), (3, 3), "rectification_matrix")
        self.P = optional_matrix_from_block(data.get("projection_matrix"), (3, 4), "projection_matrix")
        self.distortion_model = str(data.get("distortion_model", "plumb_bob"))

        D = data.get("distortion_coefficients")
        if D is None or int(D.get("cols", 0)) == 0:
            self.D = None
        else:
            self.D = matrix_from_block(D, (1, int(D["cols"])), "distortion_coefficients")
        return True

    def save(self, directory: str | Path) -> bool:
        if not self.name:
            self._log.warning("Cannot save calibration: camera name is empty.")
            return False
        if self.K is None and self.P is None:
            self._log.warning('Cannot save calibration "%s": no intrinsics set.', self.name)
            return False

        path = self.file_path(directory)
        self._log.info('Saving calibration to file "%s"', path)
        write_calibration_yaml(
            path,
            {
                "camera_name": self.name,
                "image_width": int(self.image_size[0]),
                "image_height": int(self.image_size[1]),
                "camera_matrix": matrix_to_block(self.K),
                "distortion_model": self.distortion_model,
                "distortion_coefficients": matrix_to_block(self.D),
                "rectification_matrix": matrix_to_block(self.R),
                "projection_matrix": matrix_to_block(self.P),
            },
        )
        return True

    def __repr__(self) -> str:
        return (
            f"CameraModel(name={self.name!r}, image_size={self.image_size}, "
            f"fx={self.fx:g}, fy={self.fy:g}, cx={self.cx:g}, cy={self.cy:g})"
        )
