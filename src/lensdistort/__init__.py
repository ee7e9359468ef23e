from lensdistort.api import (
    available_conventions,
    create_distortion,
    distortion_from_dict,
    distortion_to_dict,
    load_distortion,
    register_convention,
    save_distortion,
)
from lensdistort.core.components import DistortionComponents
from lensdistort.core.distortion import BrownDistortion, LensDistortion, MetashapeDistortion, OpenCVDistortion
from lensdistort.core.geometry import Point2D
from lensdistort.errors import (
    DistortionConfigError,
    InvalidCoefficientsError,
    LensDistortionError,
    NumericDegeneracyError,
)

__all__ = [
    "Point2D",
    "DistortionComponents",
    "LensDistortion",
    "BrownDistortion",
    "OpenCVDistortion",
    "MetashapeDistortion",
    "available_conventions",
    "create_distortion",
    "register_convention",
    "distortion_from_dict",
    "distortion_to_dict",
    "load_distortion",
    "save_distortion",
    "LensDistortionError",
    "InvalidCoefficientsError",
    "NumericDegeneracyError",
    "DistortionConfigError",
]
