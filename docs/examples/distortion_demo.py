"""
Distortion API demo.

Builds a model per convention, maps a grid of normalized points through
distort/undistort and prints the worst round-trip error. Optionally writes
the models as JSON documents.
"""

from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np

from lensdistort import create_distortion, save_distortion

MODELS = {
    "brown": [-0.1047, 0.25263, -0.0385946, 0.0, 0.000508056, -0.0027698, 0.0, 0.0],
    # OpenCV distCoeffs order: k1, k2, p1, p2, k3, k4, k5, k6
    "opencv": [-0.12, 0.05, 8e-4, -5e-4, -0.01, 0.02, -0.005, 0.001],
    "agisoft-metashape": [-0.08, 0.03, -0.005, 0.001, 4e-4, -6e-4],
}


def main() -> int:
    ap = argparse.ArgumentParser(description="Round-trip a grid of points through each distortion convention.")
    ap.add_argument("--limit", type=float, default=0.3, help="Half-width of the normalized grid.")
    ap.add_argument("--n", type=int, default=41)
    ap.add_argument("--out-dir", type=Path, default=None, help="Write each model as JSON here.")
    args = ap.parse_args()

    g = np.linspace(-args.limit, args.limit, args.n)
    xx, yy = np.meshgrid(g, g)
    pts = np.stack([xx.ravel(), yy.ravel()], axis=-1)

    for name, coeffs in MODELS.items():
        model = create_distortion(name, coeffs)
        dist = model.distort_points(pts)
        back = model.undistort_points(dist)
        shift = np.max(np.linalg.norm(dist - pts, axis=-1))
        err = np.max(np.linalg.norm(back - pts, axis=-1))
        print(f"{name:18s} components={'|'.join(model.components.names())}")
        print(f"{'':18s} max shift={shift:.3e} max round-trip error={err:.3e}")
        if args.out_dir is not None:
            save_distortion(args.out_dir / f"{name}.json", model)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
