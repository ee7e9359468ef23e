from __future__ import annotations

import pytest

from lensdistort import (
    BrownDistortion,
    MetashapeDistortion,
    OpenCVDistortion,
    available_conventions,
    create_distortion,
    register_convention,
)
from lensdistort.api.registry import resolve_convention


def test_builtin_conventions():
    names = available_conventions()
    assert {"brown", "opencv", "agisoft-metashape"} <= set(names)
    assert isinstance(create_distortion("brown"), BrownDistortion)
    assert isinstance(create_distortion("opencv"), OpenCVDistortion)
    assert isinstance(create_distortion("agisoft-metashape"), MetashapeDistortion)


def test_convention_names_round_trip():
    for name in ("brown", "opencv", "agisoft-metashape"):
        assert create_distortion(name).get_distortion_convention() == name


def test_aliases_and_case():
    assert resolve_convention("Metashape") == "agisoft-metashape"
    assert resolve_convention(" CV2 ") == "opencv"
    assert resolve_convention("brown-conrady") == "brown"


def test_create_with_container_or_fields():
    m = create_distortion("opencv", [-0.1, 0.01, 1e-3, -1e-3])
    assert m.k1 == pytest.approx(-0.1)
    assert m.p2 == pytest.approx(-1e-3)

    m = create_distortion("metashape", k2=0.02)
    assert m.as_dict()["k2"] == pytest.approx(0.02)


def test_unknown_convention():
    with pytest.raises(KeyError, match="known ones are"):
        create_distortion("fisheye")


def test_register_custom_convention():
    def factory(coefficients=None, **fields):
        return BrownDistortion(coefficients, undistort_iterations=12, **fields)

    register_convention("brown-precise", factory, aliases=("bp",))
    m = create_distortion("BP", k1=-0.1)
    assert isinstance(m, BrownDistortion)
    assert m.undistort_iterations == 12
    assert "brown-precise" in available_conventions()
