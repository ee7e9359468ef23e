from __future__ import annotations


class LensDistortionError(Exception):
    pass


class InvalidCoefficientsError(LensDistortionError, ValueError):
    """A coefficient container does not match any layout of the convention."""


class NumericDegeneracyError(LensDistortionError, ArithmeticError):
    """A near-zero divisor was met while building or inverting a matrix."""


class DistortionConfigError(LensDistortionError, ValueError):
    pass
