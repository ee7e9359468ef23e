from __future__ import annotations

import numpy as np
import pytest

from lensdistort import OpenCVDistortion

cv2 = pytest.importorskip("cv2")

DIST = np.array(
    [-0.12, 0.05, 8e-4, -5e-4, -0.01, 0.02, -0.005, 0.001, 1e-3, -5e-4, -8e-4, 3e-4],
    dtype=np.float64,
)


def _project(dist: np.ndarray, pts: np.ndarray) -> np.ndarray:
    obj = np.concatenate([pts, np.ones((pts.shape[0], 1))], axis=1).reshape(-1, 1, 3)
    img, _ = cv2.projectPoints(obj, np.zeros(3), np.zeros(3), np.eye(3), dist)
    return img.reshape(-1, 2)


@pytest.mark.parametrize("n", [4, 5, 8, 12])
def test_distort_matches_project_points(n: int):
    rng = np.random.default_rng(0)
    pts = rng.uniform(-0.4, 0.4, size=(200, 2))
    model = OpenCVDistortion(DIST[:n])
    ours = model.distort_points(pts)
    ref = _project(DIST[:n], pts)
    assert np.max(np.abs(ours - ref)) < 1e-9


def test_undistort_close_to_undistort_points():
    rng = np.random.default_rng(0)
    pts = rng.uniform(-0.2, 0.2, size=(200, 2))
    model = OpenCVDistortion(DIST)
    ours = model.undistort_points(pts)
    ref = cv2.undistortPoints(pts.reshape(-1, 1, 2), np.eye(3), DIST).reshape(-1, 2)
    assert np.max(np.abs(ours - ref)) < 1e-3


def test_coefficients_are_returned_in_opencv_order():
    model = OpenCVDistortion(DIST)
    np.testing.assert_array_equal(model.get_distortion_coefficients(np.zeros(12)), DIST)
