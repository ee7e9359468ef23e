from lensdistort.api.model_io import distortion_from_dict, distortion_to_dict, load_distortion, save_distortion
from lensdistort.api.registry import available_conventions, create_distortion, register_convention

__all__ = [
    "available_conventions",
    "create_distortion",
    "register_convention",
    "distortion_from_dict",
    "distortion_to_dict",
    "load_distortion",
    "save_distortion",
]
