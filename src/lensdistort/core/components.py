from __future__ import annotations

import enum


class DistortionComponents(enum.Flag):
    """
    Term groups that are active in a set of distortion coefficients.

    A flag is raised iff at least one coefficient of its group is non-zero.
    """

    NO_DISTORTION = 0
    RADIAL_SIMPLE = 1
    RADIAL_RATIONAL = 2
    TANGENTIAL = 4
    PRISM = 8
    TILT = 16

    RADIAL = RADIAL_SIMPLE | RADIAL_RATIONAL

    @property
    def has_radial_simple(self) -> bool:
        return bool(self & DistortionComponents.RADIAL_SIMPLE)

    @property
    def has_radial_rational(self) -> bool:
        return bool(self & DistortionComponents.RADIAL_RATIONAL)

    @property
    def has_radial(self) -> bool:
        return bool(self & DistortionComponents.RADIAL)

    @property
    def has_tangential(self) -> bool:
        return bool(self & DistortionComponents.TANGENTIAL)

    @property
    def has_prism(self) -> bool:
        return bool(self & DistortionComponents.PRISM)

    @property
    def has_tilt(self) -> bool:
        return bool(self & DistortionComponents.TILT)

    @property
    def is_distorted(self) -> bool:
        return self != DistortionComponents.NO_DISTORTION

    def names(self) -> list[str]:
        """Names of the single-bit flags that are set, lowest bit first."""
        return [
            c.name
            for c in (
                DistortionComponents.RADIAL_SIMPLE,
                DistortionComponents.RADIAL_RATIONAL,
                DistortionComponents.TANGENTIAL,
                DistortionComponents.PRISM,
                DistortionComponents.TILT,
            )
            if self & c
        ]
