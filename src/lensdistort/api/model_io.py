from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any

from lensdistort.api.registry import create_distortion, resolve_convention
from lensdistort.core.distortion import LensDistortion
from lensdistort.errors import DistortionConfigError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "lensdistort.distortion.v0"


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise DistortionConfigError(msg)


def distortion_to_dict(model: LensDistortion) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "convention": model.get_distortion_convention(),
        "coefficients": model.as_dict(),
        "undistort_iterations": int(model.undistort_iterations),
    }


def distortion_from_dict(data: dict[str, Any]) -> LensDistortion:
    """
    Parse a distortion document:

      {"schema_version": "lensdistort.distortion.v0",
       "convention": "brown",
       "coefficients": {"k1": -0.1, "p1": 0.0005},
       "undistort_iterations": 5}

    `coefficients` may also be a list laid out as one of the convention's
    layouts (e.g. an OpenCV distCoeffs vector). Missing names default to 0.
    """
    _require(isinstance(data, dict), "distortion document must be a JSON object")
    schema_version = data.get("schema_version")
    _require(schema_version == SCHEMA_VERSION, f"schema_version must be {SCHEMA_VERSION}")

    convention = data.get("convention")
    _require(isinstance(convention, str) and bool(convention), "convention is required")
    try:
        name = resolve_convention(convention)
    except KeyError as e:
        raise DistortionConfigError(str(e.args[0])) from e

    coeffs = data.get("coefficients", {})
    _require(coeffs is None or isinstance(coeffs, (dict, list)), "coefficients must be an object or a list")
    try:
        if isinstance(coeffs, dict):
            fields = {str(k): float(v) for k, v in coeffs.items()}
            _require(all(math.isfinite(v) for v in fields.values()), "coefficients must be finite")
            model = create_distortion(name, **fields)
        else:
            values = [float(v) for v in coeffs] if coeffs is not None else None
            _require(values is None or all(math.isfinite(v) for v in values), "coefficients must be finite")
            model = create_distortion(name, values)
    except DistortionConfigError:
        raise
    except (ValueError, TypeError) as e:
        raise DistortionConfigError(f"invalid {name} coefficients: {e}") from e

    iterations = data.get("undistort_iterations")
    if iterations is not None:
        _require(
            isinstance(iterations, int) and not isinstance(iterations, bool) and iterations >= 1,
            "undistort_iterations must be an integer >= 1",
        )
        model.undistort_iterations = iterations
    return model


def save_distortion(path: Path, model: LensDistortion) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(distortion_to_dict(model), indent=2), encoding="utf-8")
    logger.info(f"Saved {model.get_distortion_convention()} distortion to {path}")
    return path


def load_distortion(path: Path) -> LensDistortion:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DistortionConfigError(f"{path} is not valid JSON: {e}") from e
    try:
        return distortion_from_dict(data)
    except DistortionConfigError as e:
        raise DistortionConfigError(f"{path}: {e}") from e
