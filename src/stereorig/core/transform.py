from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class RigidTransform:
    """
    Rigid 3D transform stored as a 3x4 matrix [R | t].

    The all-zero transform is the "null" transform, used to signal that no
    transform is defined.
    """

    data: np.ndarray  # (3,4)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", np.asarray(self.data, dtype=np.float64).reshape(3, 4))

    @classmethod
    def from_values(
        cls,
        r11: float,
        r12: float,
        r13: float,
        o14: float,
        r21: float,
        r22: float,
        r23: float,
        o24: float,
        r31: float,
        r32: float,
        r33: float,
        o34: float,
    ) -> "RigidTransform":
        return cls(np.array([[r11, r12, r13, o14], [r21, r22, r23, o24], [r31, r32, r33, o34]], dtype=np.float64))

    @classmethod
    def from_rt(cls, R: np.ndarray, t: np.ndarray) -> "RigidTransform":
        R = np.asarray(R, dtype=np.float64).reshape(3, 3)
        t = np.asarray(t, dtype=np.float64).reshape(3, 1)
        return cls(np.hstack([R, t]))

    @classmethod
    def identity(cls) -> "RigidTransform":
        return cls(np.eye(3, 4, dtype=np.float64))

    @classmethod
    def null(cls) -> "RigidTransform":
        return cls(np.zeros((3, 4), dtype=np.float64))

    def is_null(self) -> bool:
        return not np.any(self.data)

    def is_identity(self) -> bool:
        return bool(np.array_equal(self.data, np.eye(3, 4)))

    @property
    def rotation(self) -> np.ndarray:
        return self.data[:, :3].copy()

    @property
    def translation(self) -> np.ndarray:
        return self.data[:, 3].copy()

    @property
    def x(self) -> float:
        return float(self.data[0, 3])

    @property
    def y(self) -> float:
        return float(self.data[1, 3])

    @property
    def z(self) -> float:
        return float(self.data[2, 3])

    def to_matrix4(self) -> np.ndarray:
        m = np.eye(4, dtype=np.float64)
        m[:3, :] = self.data
        return m

    def inverse(self) -> "RigidTransform":
        R = self.data[:, :3]
        t = self.data[:, 3]
        return RigidTransform.from_rt(R.T, -R.T @ t)

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Transform (N,3) points."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return pts @ self.data[:, :3].T + self.data[:, 3]

    def __matmul__(self, other: "RigidTransform") -> "RigidTransform":
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return RigidTransform((self.to_matrix4() @ other.to_matrix4())[:3, :])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return bool(np.array_equal(self.data, other.data))

    def __str__(self) -> str:
        return " ".join(f"{v:g}" for v in self.data.reshape(-1))
