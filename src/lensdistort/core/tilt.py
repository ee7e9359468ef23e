from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from lensdistort.errors import NumericDegeneracyError

# Below this |R[2,2]| the structured inverse of the tilt matrix is refused.
TILT_DEGENERACY_EPS = 1e-12


@dataclass(frozen=True)
class TiltMatrices:
    """
    Sensor-tilt (Scheimpflug) projection for tilt angles (tau_x, tau_y).

    mat_tilt maps homogeneous distorted coordinates onto the tilted sensor
    plane; the derivative matrices are taken with respect to tau_x and tau_y.
    All arrays are (3,3) float64.
    """

    tau_x: float
    tau_y: float
    mat_tilt: np.ndarray
    d_mat_tilt_d_tau_x: np.ndarray
    d_mat_tilt_d_tau_y: np.ndarray
    inv_mat_tilt: np.ndarray


def _rot_x(tau: float) -> tuple[np.ndarray, np.ndarray]:
    c, s = np.cos(tau), np.sin(tau)
    rot = np.array([[1.0, 0.0, 0.0], [0.0, c, s], [0.0, -s, c]], dtype=np.float64)
    d_rot = np.array([[0.0, 0.0, 0.0], [0.0, -s, c], [0.0, -c, -s]], dtype=np.float64)
    return rot, d_rot


def _rot_y(tau: float) -> tuple[np.ndarray, np.ndarray]:
    c, s = np.cos(tau), np.sin(tau)
    rot = np.array([[c, 0.0, -s], [0.0, 1.0, 0.0], [s, 0.0, c]], dtype=np.float64)
    d_rot = np.array([[-s, 0.0, -c], [0.0, 0.0, 0.0], [c, 0.0, -s]], dtype=np.float64)
    return rot, d_rot


def _proj_z(rot: np.ndarray, homogeneous: float = 1.0) -> np.ndarray:
    """
    Projection that removes the perspective induced by `rot` along z:

      [[R22, 0, -R02], [0, R22, -R12], [0, 0, h]]

    With h=0 the same layout gives the derivative of the projection from the
    derivative of the rotation.
    """
    return np.array(
        [
            [rot[2, 2], 0.0, -rot[0, 2]],
            [0.0, rot[2, 2], -rot[1, 2]],
            [0.0, 0.0, homogeneous],
        ],
        dtype=np.float64,
    )


def tilt_rotation(tau_x: float, tau_y: float) -> np.ndarray:
    """R = Ry(tau_y) @ Rx(tau_x)."""
    rot_x, _ = _rot_x(float(tau_x))
    rot_y, _ = _rot_y(float(tau_y))
    return rot_y @ rot_x


def compute_tilt_projection_matrix(tau_x: float, tau_y: float) -> TiltMatrices:
    """
    Build the tilt matrix, its partial derivatives and its inverse.

      R        = Ry(tau_y) Rx(tau_x)
      P        = proj_z(R)
      matTilt  = P R
      dmatTilt = P dR + dP R           (product rule, for tau_x and tau_y)
      inverse  = R^T P^-1              (P^-1 in closed form from its sparsity)

    Raises NumericDegeneracyError when R[2,2] = cos(tau_x) cos(tau_y) is too
    close to zero for the inverse (tilt near 90 degrees).
    """
    tau_x = float(tau_x)
    tau_y = float(tau_y)
    rot_x, d_rot_x = _rot_x(tau_x)
    rot_y, d_rot_y = _rot_y(tau_y)

    rot = rot_y @ rot_x
    proj = _proj_z(rot)
    mat_tilt = proj @ rot

    d_rot_d_tau_x = rot_y @ d_rot_x
    d_proj_d_tau_x = _proj_z(d_rot_d_tau_x, homogeneous=0.0)
    d_mat_tilt_d_tau_x = proj @ d_rot_d_tau_x + d_proj_d_tau_x @ rot

    d_rot_d_tau_y = d_rot_y @ rot_x
    d_proj_d_tau_y = _proj_z(d_rot_d_tau_y, homogeneous=0.0)
    d_mat_tilt_d_tau_y = proj @ d_rot_d_tau_y + d_proj_d_tau_y @ rot

    r22 = rot[2, 2]
    if not np.isfinite(r22) or abs(r22) < TILT_DEGENERACY_EPS:
        raise NumericDegeneracyError(
            f"tilt matrix is not invertible for tau_x={tau_x}, tau_y={tau_y} (R[2,2]={r22:.3e})"
        )
    inv = 1.0 / r22
    inv_proj = np.array(
        [
            [inv, 0.0, inv * rot[0, 2]],
            [0.0, inv, inv * rot[1, 2]],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )
    inv_mat_tilt = rot.T @ inv_proj

    return TiltMatrices(
        tau_x=tau_x,
        tau_y=tau_y,
        mat_tilt=mat_tilt,
        d_mat_tilt_d_tau_x=d_mat_tilt_d_tau_x,
        d_mat_tilt_d_tau_y=d_mat_tilt_d_tau_y,
        inv_mat_tilt=inv_mat_tilt,
    )


def apply_tilt(matrix: np.ndarray, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Map (x, y) through a homogeneous 3x3 matrix.

    A zero third component is projected with scale 1, as OpenCV does.
    """
    m = np.asarray(matrix, dtype=np.float64).reshape(3, 3)
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    u = m[0, 0] * x + m[0, 1] * y + m[0, 2]
    v = m[1, 0] * x + m[1, 1] * y + m[1, 2]
    w = m[2, 0] * x + m[2, 1] * y + m[2, 2]
    scale = np.divide(1.0, w, out=np.ones_like(w), where=w != 0.0)
    return u * scale, v * scale
