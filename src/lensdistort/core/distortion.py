from __future__ import annotations

import math
from typing import Any

import numpy as np

from lensdistort.core.coefficients import CoefficientStore
from lensdistort.core.components import DistortionComponents
from lensdistort.core.conventions import BROWN, METASHAPE, OPENCV, DistortionConvention
from lensdistort.core.evaluator import distort_xy, undistort_xy
from lensdistort.core.geometry import Point2D, point_xy, split_points, stack_points, write_point


class _Coefficient:
    """Read/write access to one named coefficient, routed through the store."""

    def __init__(self, name: str):
        self.name = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj._store[self.name]

    def __set__(self, obj, value: float) -> None:
        obj._store.update(**{self.name: value})


class LensDistortion:
    """
    Lens distortion on normalized camera coordinates (x=X/Z, y=Y/Z).

    One engine serves every convention; the `DistortionConvention` descriptor
    decides which coefficients exist, how containers are laid out and which
    radial / tangential formulas apply.

    Coefficients can be given as a container (list, tuple, numpy vector of
    float32 or float64) laid out as one of the convention's layouts, or as
    named scalars. Nothing given means no distortion.
    """

    def __init__(
        self,
        convention: DistortionConvention,
        coefficients: Any = None,
        *,
        undistort_iterations: int | None = None,
        **fields: float,
    ):
        if coefficients is not None and fields:
            raise TypeError("pass either a coefficient container or named coefficients, not both")
        self._store = CoefficientStore(convention)
        if fields:
            self._store.assign(**fields)
        else:
            self._store.set_from_container(coefficients)
        self._undistort_iterations = convention.undistort_iterations
        if undistort_iterations is not None:
            self.undistort_iterations = undistort_iterations

    # -- identity -----------------------------------------------------------------

    @property
    def convention(self) -> DistortionConvention:
        return self._store.convention

    def get_distortion_convention(self) -> str:
        return self._store.convention.name

    def get_distortion_components(self) -> DistortionComponents:
        return self._store.components

    @property
    def components(self) -> DistortionComponents:
        return self._store.components

    @property
    def undistort_iterations(self) -> int:
        return self._undistort_iterations

    @undistort_iterations.setter
    def undistort_iterations(self, value: int) -> None:
        value = int(value)
        if value < 1:
            raise ValueError("undistort_iterations must be >= 1")
        self._undistort_iterations = value

    @property
    def undistort_epsilon(self) -> float | None:
        return self._store.convention.undistort_epsilon

    # -- coefficients ---------------------------------------------------------------

    def get_distortion_coefficients(self, out: Any = None) -> Any:
        """
        Coefficients as a float64 vector in the convention's longest layout, or
        written into `out` with the layout selected by its length (returns `out`).
        """
        if out is None:
            return self._store.to_array(np.float64)
        return self._store.fill(out, np.float64)

    def get_distortion_coefficients_float(self, out: Any = None) -> Any:
        if out is None:
            return self._store.to_array(np.float32)
        return self._store.fill(out, np.float32)

    def get_distortion_coefficients_double(self, out: Any = None) -> Any:
        if out is None:
            return self._store.to_array(np.float64)
        return self._store.fill(out, np.float64)

    def set_distortion_coefficients(self, coefficients: Any) -> None:
        """
        Replace the coefficients from a container. None or empty resets to no
        distortion; an unsupported length raises InvalidCoefficientsError and
        keeps the current coefficients.
        """
        self._store.set_from_container(coefficients)

    def set_coefficients(self, **fields: float) -> None:
        """Set the named coefficients; the others become 0."""
        self._store.assign(**fields)

    def update_coefficients(self, **fields: float) -> None:
        self._store.update(**fields)

    def as_dict(self) -> dict[str, float]:
        return self._store.as_dict()

    # -- point mapping ----------------------------------------------------------------

    def distort(self, point: Any, out: Any = None) -> Any:
        """
        Distort an undistorted point. The result is written into `out` when
        given (and `out` is returned), else into a new Point2D.
        A None point gives (nan, nan).
        """
        if out is None:
            out = Point2D()
        xy = point_xy(point)
        if xy is None:
            return write_point(out, math.nan, math.nan)
        xd, yd = self.distort_xy(xy[0], xy[1])
        return write_point(out, float(xd), float(yd))

    def undistort(self, point: Any, out: Any = None) -> Any:
        """
        Undistort a distorted point (approximate inverse of `distort`).
        Same output and None conventions as `distort`.
        """
        if out is None:
            out = Point2D()
        xy = point_xy(point)
        if xy is None:
            return write_point(out, math.nan, math.nan)
        x, y = self.undistort_xy(xy[0], xy[1])
        return write_point(out, float(x), float(y))

    def distort_xy(self, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        store = self._store
        return distort_xy(store.convention, store.view(), store.components, x, y)

    def undistort_xy(self, xd: np.ndarray, yd: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        store = self._store
        return undistort_xy(
            store.convention,
            store.view(),
            store.components,
            xd,
            yd,
            iterations=self._undistort_iterations,
        )

    def distort_points(self, points: np.ndarray) -> np.ndarray:
        """(N,2) undistorted points -> (N,2) distorted points."""
        x, y = split_points(points)
        return stack_points(*self.distort_xy(x, y))

    def undistort_points(self, points: np.ndarray) -> np.ndarray:
        x, y = split_points(points)
        return stack_points(*self.undistort_xy(x, y))

    # -- misc --------------------------------------------------------------------------

    def copy(self) -> "LensDistortion":
        other = object.__new__(type(self))
        other._store = CoefficientStore(self._store.convention)
        other._store.assign(**self._store.as_dict())
        other._undistort_iterations = self._undistort_iterations
        return other

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LensDistortion):
            return NotImplemented
        return self.convention.name == other.convention.name and self.as_dict() == other.as_dict()

    def __repr__(self) -> str:
        nonzero = ", ".join(f"{k}={v!r}" for k, v in self.as_dict().items() if v != 0.0)
        return f"{type(self).__name__}({nonzero})"


class BrownDistortion(LensDistortion):
    """
    Brown-Conrady distortion (Brown 1966, "Decentering distortion of lenses").

      r2 = x^2 + y^2
      x' = x (1 + k1 r2 + k2 r4 + k3 r6 + k4 r8) + (p1 (r2 + 2x^2) + 2 p2 xy)(1 + p3 r2 + p4 r4)
      y' = y (1 + k1 r2 + k2 r4 + k3 r6 + k4 r8) + (p2 (r2 + 2y^2) + 2 p1 xy)(1 + p3 r2 + p4 r4)

    Accepted containers: (k1,k2,k3,k4,p1,p2,p3,p4), (k1,k2,k3,p1,p2), (k1,k2,k3).
    """

    k1 = _Coefficient("k1")
    k2 = _Coefficient("k2")
    k3 = _Coefficient("k3")
    k4 = _Coefficient("k4")
    p1 = _Coefficient("p1")
    p2 = _Coefficient("p2")
    p3 = _Coefficient("p3")
    p4 = _Coefficient("p4")

    def __init__(self, coefficients: Any = None, *, undistort_iterations: int | None = None, **fields: float):
        super().__init__(BROWN, coefficients, undistort_iterations=undistort_iterations, **fields)


class OpenCVDistortion(LensDistortion):
    """
    OpenCV distortion model (rational radial, tangential, thin prism, tilt).

      x'' = x' (1 + k1 r2 + k2 r4 + k3 r6) / (1 + k4 r2 + k5 r4 + k6 r6)
            + 2 p1 x'y' + p2 (r2 + 2x'^2) + s1 r2 + s2 r4
      y'' = y' (1 + k1 r2 + k2 r4 + k3 r6) / (1 + k4 r2 + k5 r4 + k6 r6)
            + p1 (r2 + 2y'^2) + 2 p2 x'y' + s3 r2 + s4 r4

    Containers use OpenCV's distCoeffs order
    (k1,k2,p1,p2,k3,k4,k5,k6,s1,s2,s3,s4,tx,ty) truncated to 14, 12, 8, 5 or 4
    values. The tilt angles (tx, ty) are kept and classified but do not take
    part in the point mapping.
    """

    k1 = _Coefficient("k1")
    k2 = _Coefficient("k2")
    k3 = _Coefficient("k3")
    k4 = _Coefficient("k4")
    k5 = _Coefficient("k5")
    k6 = _Coefficient("k6")
    p1 = _Coefficient("p1")
    p2 = _Coefficient("p2")
    s1 = _Coefficient("s1")
    s2 = _Coefficient("s2")
    s3 = _Coefficient("s3")
    s4 = _Coefficient("s4")
    tx = _Coefficient("tx")
    ty = _Coefficient("ty")

    def __init__(self, coefficients: Any = None, *, undistort_iterations: int | None = None, **fields: float):
        super().__init__(OPENCV, coefficients, undistort_iterations=undistort_iterations, **fields)


class MetashapeDistortion(LensDistortion):
    """
    Agisoft Metashape frame camera distortion.

      x' = x (1 + k1 r2 + k2 r4 + k3 r6 + k4 r8) + p1 (r2 + 2x^2) + 2 p2 xy
      y' = y (1 + k1 r2 + k2 r4 + k3 r6 + k4 r8) + p2 (r2 + 2y^2) + 2 p1 xy

    Affinity and skew (b1, b2) belong to the intrinsics and are not handled here.
    """

    k1 = _Coefficient("k1")
    k2 = _Coefficient("k2")
    k3 = _Coefficient("k3")
    k4 = _Coefficient("k4")
    p1 = _Coefficient("p1")
    p2 = _Coefficient("p2")

    def __init__(self, coefficients: Any = None, *, undistort_iterations: int | None = None, **fields: float):
        super().__init__(METASHAPE, coefficients, undistort_iterations=undistort_iterations, **fields)
