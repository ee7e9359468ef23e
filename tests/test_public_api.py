from __future__ import annotations


def test_public_api_exports() -> None:
    import lensdistort as ld

    assert hasattr(ld, "BrownDistortion")
    assert hasattr(ld, "OpenCVDistortion")
    assert hasattr(ld, "MetashapeDistortion")
    assert hasattr(ld, "create_distortion")
    assert hasattr(ld, "load_distortion")
    assert hasattr(ld, "save_distortion")
    assert hasattr(ld, "DistortionComponents")
    assert issubclass(ld.InvalidCoefficientsError, ld.LensDistortionError)
    assert issubclass(ld.InvalidCoefficientsError, ValueError)
