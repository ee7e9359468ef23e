from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np


@dataclass
class Point2D:
    """
    A point of the image plane in normalized camera coordinates (x=X/Z, y=Y/Z).

    The same type carries distorted and undistorted coordinates; the role is
    given by the operation that produced it. Instances are mutable so they can
    be passed as output buffers.
    """

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def nan(cls) -> "Point2D":
        return cls(math.nan, math.nan)

    def set(self, x: float, y: float) -> "Point2D":
        self.x = float(x)
        self.y = float(y)
        return self

    def to_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    def __iter__(self):
        yield self.x
        yield self.y


def point_xy(point: Any) -> tuple[float, float] | None:
    """
    Read (x, y) from a Point2D, any object exposing `x`/`y`, or a length-2 sequence.
    Returns None for a None input.
    """
    if point is None:
        return None
    if hasattr(point, "x") and hasattr(point, "y"):
        return float(point.x), float(point.y)
    xy = np.asarray(point, dtype=np.float64).reshape(-1)
    if xy.shape[0] != 2:
        raise ValueError(f"point must have 2 coordinates, got {xy.shape[0]}")
    return float(xy[0]), float(xy[1])


def write_point(out: Any, x: float, y: float) -> Any:
    """Store (x, y) into `out` (a Point2D, an object with x/y, or a mutable 2-sequence)."""
    if isinstance(out, Point2D):
        return out.set(x, y)
    if hasattr(out, "x") and hasattr(out, "y"):
        out.x = float(x)
        out.y = float(y)
        return out
    out[0] = x
    out[1] = y
    return out


def split_points(points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """(N,2) or (N,1,2) array -> (x, y) float64 arrays of shape (N,)."""
    pts = np.asarray(points, dtype=np.float64)
    if pts.shape[-1] != 2:
        raise ValueError("points must have shape (N,2)")
    pts = pts.reshape(-1, 2)
    return pts[:, 0].copy(), pts[:, 1].copy()


def stack_points(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    return np.stack([np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)], axis=-1)
