from __future__ import annotations

import pytest

from lensdistort import BrownDistortion, DistortionComponents, MetashapeDistortion, OpenCVDistortion

C = DistortionComponents


def test_zero_coefficients_have_no_distortion():
    for model in (BrownDistortion(), OpenCVDistortion(), MetashapeDistortion()):
        assert model.get_distortion_components() == C.NO_DISTORTION
        assert not model.components.is_distorted


@pytest.mark.parametrize(
    "field, expected",
    [
        ("k1", C.RADIAL_SIMPLE),
        ("k2", C.RADIAL_SIMPLE),
        ("k3", C.RADIAL_SIMPLE),
        ("k4", C.RADIAL_RATIONAL),
        ("k5", C.RADIAL_RATIONAL),
        ("k6", C.RADIAL_RATIONAL),
        ("p1", C.TANGENTIAL),
        ("p2", C.TANGENTIAL),
        ("s1", C.PRISM),
        ("s2", C.PRISM),
        ("s3", C.PRISM),
        ("s4", C.PRISM),
        ("tx", C.TILT),
        ("ty", C.TILT),
    ],
)
def test_opencv_single_field_sets_its_group(field: str, expected: DistortionComponents):
    model = OpenCVDistortion(**{field: 0.01})
    assert model.get_distortion_components() == expected


@pytest.mark.parametrize("field", ["k1", "k2", "k3", "k4"])
def test_brown_radial_fields(field: str):
    assert BrownDistortion(**{field: -0.2}).components == C.RADIAL_SIMPLE


@pytest.mark.parametrize("field", ["p1", "p2", "p3", "p4"])
def test_brown_tangential_fields(field: str):
    assert BrownDistortion(**{field: 1e-4}).components == C.TANGENTIAL


def test_metashape_groups():
    m = MetashapeDistortion(k4=1e-3, p2=-2e-4)
    assert m.components == C.RADIAL_SIMPLE | C.TANGENTIAL
    assert m.components.has_radial
    assert not m.components.has_radial_rational
    assert not m.components.has_prism


def test_mask_follows_every_mutation():
    m = OpenCVDistortion(k1=-0.1)
    assert m.components == C.RADIAL_SIMPLE
    m.tx = 0.01
    assert m.components == C.RADIAL_SIMPLE | C.TILT
    m.k1 = 0.0
    assert m.components == C.TILT
    m.set_distortion_coefficients(None)
    assert m.components == C.NO_DISTORTION


def test_capability_accessors_and_names():
    mask = C.RADIAL_RATIONAL | C.TILT
    assert mask.has_radial
    assert mask.has_radial_rational
    assert not mask.has_radial_simple
    assert mask.has_tilt
    assert not mask.has_tangential
    assert mask.names() == ["RADIAL_RATIONAL", "TILT"]
    assert C.NO_DISTORTION.names() == []
    assert C.RADIAL == C.RADIAL_SIMPLE | C.RADIAL_RATIONAL
