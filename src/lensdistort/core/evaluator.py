from __future__ import annotations

import logging
from typing import Mapping

import numpy as np

from lensdistort.core.components import DistortionComponents
from lensdistort.core.conventions import DistortionConvention
from lensdistort.core.tilt import apply_tilt, compute_tilt_projection_matrix

logger = logging.getLogger(__name__)


def radial_factor(
    conv: DistortionConvention, c: Mapping[str, float], mask: DistortionComponents, r2: np.ndarray
) -> np.ndarray:
    """
    Radial scale factor at squared radius r2.

      polynomial: 1 + k1 r2 + k2 r4 + k3 r6 + k4 r8
      rational:   (1 + k1 r2 + k2 r4 + k3 r6) / (1 + k4 r2 + k5 r4 + k6 r6)
    """
    r2 = np.asarray(r2, dtype=np.float64)
    if not mask.has_radial:
        return np.ones_like(r2)
    # Horner form in r2.
    num = 1.0 + r2 * (c["k1"] + r2 * (c["k2"] + r2 * c["k3"]))
    if conv.radial == "polynomial":
        return num + c["k4"] * (r2 * r2) * (r2 * r2)
    if mask.has_radial_rational:
        den = 1.0 + r2 * (c["k4"] + r2 * (c["k5"] + r2 * c["k6"]))
        return num / den
    return num


def decentering_offset(
    conv: DistortionConvention,
    c: Mapping[str, float],
    mask: DistortionComponents,
    x: np.ndarray,
    y: np.ndarray,
    r2: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Tangential (decentering) offset plus, for OpenCV, the thin prism terms."""
    dx = np.zeros_like(x)
    dy = np.zeros_like(y)
    if mask.has_tangential:
        p1, p2 = c["p1"], c["p2"]
        xy2 = 2.0 * x * y
        if conv.tangential == "brown":
            dx = p1 * (r2 + 2.0 * x * x) + p2 * xy2
            dy = p2 * (r2 + 2.0 * y * y) + p1 * xy2
            p3 = c.get("p3", 0.0)
            p4 = c.get("p4", 0.0)
            if p3 != 0.0 or p4 != 0.0:
                scale = 1.0 + r2 * (p3 + r2 * p4)
                dx = dx * scale
                dy = dy * scale
        else:
            dx = p1 * xy2 + p2 * (r2 + 2.0 * x * x)
            dy = p1 * (r2 + 2.0 * y * y) + p2 * xy2
    if mask.has_prism:
        r4 = r2 * r2
        dx = dx + c["s1"] * r2 + c["s2"] * r4
        dy = dy + c["s3"] * r2 + c["s4"] * r4
    return dx, dy


def distort_xy(
    conv: DistortionConvention,
    c: Mapping[str, float],
    mask: DistortionComponents,
    x: np.ndarray,
    y: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Closed-form forward model: undistorted normalized coordinates -> distorted ones.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if not mask.is_distorted:
        return x.copy(), y.copy()
    r2 = x * x + y * y
    radial = radial_factor(conv, c, mask, r2)
    dx, dy = decentering_offset(conv, c, mask, x, y, r2)
    return x * radial + dx, y * radial + dy


def undistort_xy(
    conv: DistortionConvention,
    c: Mapping[str, float],
    mask: DistortionComponents,
    xd: np.ndarray,
    yd: np.ndarray,
    iterations: int | None = None,
    epsilon: float | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Approximate inverse of `distort_xy` by bounded fixed-point iteration.

    The radial factor is evaluated once at the squared radius of the distorted
    input; each iteration removes the decentering offset evaluated at the
    current estimate and divides by that factor:

      x_{n+1} = (xd - dx(x_n, y_n)) / radial(r_d^2)

    The loop runs `iterations` times, or stops early once the largest update
    is below `epsilon` (when given).
    """
    xd = np.asarray(xd, dtype=np.float64)
    yd = np.asarray(yd, dtype=np.float64)
    x = xd.copy()
    y = yd.copy()
    if not mask.is_distorted:
        return x, y

    if iterations is None:
        iterations = conv.undistort_iterations
    if epsilon is None:
        epsilon = conv.undistort_epsilon

    # Only built for the rational + tilt case; used to report the residual on
    # the tilted sensor plane, never to update the estimate.
    tilt = None
    if mask.has_radial_rational and mask.has_tilt:
        tilt = compute_tilt_projection_matrix(c["tx"], c["ty"])

    r2 = xd * xd + yd * yd
    radial = radial_factor(conv, c, mask, r2)
    n_iter = 0
    for n_iter in range(1, int(iterations) + 1):
        dx, dy = decentering_offset(conv, c, mask, x, y, r2)
        x_new = (xd - dx) / radial
        y_new = (yd - dy) / radial
        step = np.max(np.maximum(np.abs(x_new - x), np.abs(y_new - y)), initial=0.0)
        x, y = x_new, y_new
        if epsilon is not None and step < epsilon:
            break

    if tilt is not None:
        xr, yr = distort_xy(conv, c, mask, x, y)
        u_est, v_est = apply_tilt(tilt.mat_tilt, xr, yr)
        u_ref, v_ref = apply_tilt(tilt.mat_tilt, xd, yd)
        residual = np.max(np.hypot(u_est - u_ref, v_est - v_ref), initial=0.0)
        logger.debug(f"{conv.name} undistort: {n_iter} iterations, tilted-plane residual {residual:.3e}")

    return x, y
