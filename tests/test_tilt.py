from __future__ import annotations

import logging

import numpy as np
import pytest

from lensdistort import NumericDegeneracyError, OpenCVDistortion
from lensdistort.core.tilt import apply_tilt, compute_tilt_projection_matrix, tilt_rotation


def test_zero_tilt_is_identity():
    t = compute_tilt_projection_matrix(0.0, 0.0)
    np.testing.assert_allclose(t.mat_tilt, np.eye(3), atol=1e-15)
    np.testing.assert_allclose(t.inv_mat_tilt, np.eye(3), atol=1e-15)


@pytest.mark.parametrize("tau", [(0.01, -0.02), (0.3, 0.1), (-0.5, 0.7)])
def test_inverse(tau):
    t = compute_tilt_projection_matrix(*tau)
    np.testing.assert_allclose(t.mat_tilt @ t.inv_mat_tilt, np.eye(3), atol=1e-12)
    np.testing.assert_allclose(t.inv_mat_tilt @ t.mat_tilt, np.eye(3), atol=1e-12)


def test_rotation_is_orthonormal():
    rot = tilt_rotation(0.2, -0.3)
    np.testing.assert_allclose(rot @ rot.T, np.eye(3), atol=1e-15)
    assert rot[2, 2] == pytest.approx(np.cos(0.2) * np.cos(-0.3))


@pytest.mark.parametrize("tau", [(0.0, 0.0), (0.05, -0.03), (0.4, 0.25)])
def test_derivatives_match_finite_differences(tau):
    tx, ty = tau
    h = 1e-6
    t = compute_tilt_projection_matrix(tx, ty)
    fd_x = (compute_tilt_projection_matrix(tx + h, ty).mat_tilt - compute_tilt_projection_matrix(tx - h, ty).mat_tilt) / (2 * h)
    fd_y = (compute_tilt_projection_matrix(tx, ty + h).mat_tilt - compute_tilt_projection_matrix(tx, ty - h).mat_tilt) / (2 * h)
    np.testing.assert_allclose(t.d_mat_tilt_d_tau_x, fd_x, atol=1e-6)
    np.testing.assert_allclose(t.d_mat_tilt_d_tau_y, fd_y, atol=1e-6)


@pytest.mark.parametrize("tau", [(np.pi / 2, 0.0), (0.0, -np.pi / 2)])
def test_degenerate_tilt_raises(tau):
    with pytest.raises(NumericDegeneracyError):
        compute_tilt_projection_matrix(*tau)


def test_degenerate_tilt_is_an_arithmetic_error():
    with pytest.raises(ArithmeticError):
        compute_tilt_projection_matrix(np.pi / 2, np.pi / 2)


def test_apply_tilt():
    rng = np.random.default_rng(0)
    x = rng.uniform(-0.3, 0.3, size=100)
    y = rng.uniform(-0.3, 0.3, size=100)
    t = compute_tilt_projection_matrix(0.05, -0.04)
    u, v = apply_tilt(t.mat_tilt, x, y)
    x2, y2 = apply_tilt(t.inv_mat_tilt, u, v)
    assert np.max(np.abs(x2 - x)) < 1e-12
    assert np.max(np.abs(y2 - y)) < 1e-12

    # Zero homogeneous component keeps the affine part.
    m = np.array([[2.0, 0.0, 1.0], [0.0, 3.0, 0.0], [0.0, 0.0, 0.0]])
    u, v = apply_tilt(m, np.array([1.0]), np.array([1.0]))
    assert u[0] == pytest.approx(3.0)
    assert v[0] == pytest.approx(3.0)


def test_opencv_undistort_reports_tilt_residual(caplog):
    model = OpenCVDistortion(k1=-0.1, k4=0.01, tx=0.01, ty=0.02)
    with caplog.at_level(logging.DEBUG, logger="lensdistort.core.evaluator"):
        model.undistort_points(np.array([[0.1, 0.2], [-0.2, 0.05]]))
    assert "tilted-plane residual" in caplog.text


def test_opencv_undistort_with_degenerate_tilt_raises():
    model = OpenCVDistortion(k1=-0.1, k4=0.01, tx=np.pi / 2)
    with pytest.raises(NumericDegeneracyError):
        model.undistort_points(np.array([[0.1, 0.2]]))
    # Without a rational term the tilt matrices are never built.
    OpenCVDistortion(k1=-0.1, tx=np.pi / 2).undistort_points(np.array([[0.1, 0.2]]))
