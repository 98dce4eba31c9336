from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import yaml


class CalibrationFormatError(ValueError):
    pass


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise CalibrationFormatError(msg)


def matrix_from_block(block: Any, shape: tuple[int, int], key: str = "matrix") -> np.ndarray:
    """
    Parse a ROS-style `{rows, cols, data}` block into a float64 matrix.

    `data` is the flat row-major element list. The element count and the
    declared shape must both match `shape`.
    """
    _require(isinstance(block, dict), f"{key} must be a mapping with rows, cols and data")
    rows = int(block.get("rows", 0))
    cols = int(block.get("cols", 0))
    data = block.get("data") or []
    _require(isinstance(data, (list, tuple)), f"{key}.data must be a list")
    _require(rows * cols == len(data), f"{key}: rows*cols={rows * cols} but data has {len(data)} values")
    _require((rows, cols) == tuple(shape), f"{key} must be {shape[0]}x{shape[1]}, got {rows}x{cols}")
    return np.asarray(data, dtype=np.float64).reshape(rows, cols)


def optional_matrix_from_block(block: Any, shape: tuple[int, int], key: str = "matrix") -> np.ndarray | None:
    """Like `matrix_from_block`, but a missing or 0x0 block reads as None."""
    if block is None:
        return None
    if isinstance(block, dict) and int(block.get("rows", 0)) == 0 and int(block.get("cols", 0)) == 0:
        _require(not block.get("data"), f"{key} is 0x0 but has data")
        return None
    return matrix_from_block(block, shape, key)


def matrix_to_block(m: np.ndarray | None) -> dict[str, Any]:
    if m is None:
        return {"rows": 0, "cols": 0, "data": []}
    m = np.asarray(m, dtype=np.float64)
    if m.ndim == 1:
        m = m.reshape(1, -1)
    rows, cols = m.shape
    return {"rows": int(rows), "cols": int(cols), "data": [float(v) for v in m.reshape(-1)]}


def read_calibration_yaml(path: Path) -> dict[str, Any]:
    """
    Read a calibration YAML file.

    OpenCV FileStorage writes a `%YAML:1.0` directive that PyYAML rejects, so
    that first line is dropped.
    """
    text = Path(path).read_text(encoding="utf-8")
    lines = text.splitlines()
    if lines and lines[0].startswith("%YAML:"):
        text = "\n".join(lines[1:])
    data = yaml.safe_load(text)
    if data is None:
        return {}
    _require(isinstance(data, dict), f"{path}: top level must be a mapping")
    return data


def write_calibration_yaml(path: Path, data: dict[str, Any]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=None, sort_keys=False)
    return path
