from __future__ import annotations

from typing import Any, Callable

from lensdistort.core.distortion import BrownDistortion, LensDistortion, MetashapeDistortion, OpenCVDistortion

DistortionFactory = Callable[..., LensDistortion]

_FACTORIES: dict[str, DistortionFactory] = {}
_ALIASES: dict[str, str] = {}


def _key(name: str) -> str:
    return str(name).strip().lower()


def register_convention(name: str, factory: DistortionFactory, *, aliases: tuple[str, ...] = ()) -> None:
    """
    Map a convention identifier (and optional aliases) to a constructor.

    The factory is called as factory(coefficients=None, **fields).
    """
    key = _key(name)
    _FACTORIES[key] = factory
    for alias in aliases:
        _ALIASES[_key(alias)] = key


def resolve_convention(name: str) -> str:
    key = _key(name)
    key = _ALIASES.get(key, key)
    if key not in _FACTORIES:
        raise KeyError(f"Unknown distortion convention {name!r}, known ones are {available_conventions()}")
    return key


def available_conventions() -> list[str]:
    return sorted(_FACTORIES)


def create_distortion(name: str, coefficients: Any = None, **fields: float) -> LensDistortion:
    """Build a distortion model of the named convention."""
    return _FACTORIES[resolve_convention(name)](coefficients, **fields)


register_convention("brown", BrownDistortion, aliases=("brown-conrady",))
register_convention("opencv", OpenCVDistortion, aliases=("cv2",))
register_convention("agisoft-metashape", MetashapeDistortion, aliases=("metashape", "agisoft_metashape"))
