from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping

from lensdistort.core.components import DistortionComponents


@dataclass(frozen=True)
class DistortionConvention:
    """
    Static description of a lens distortion convention.

    `fields` is the natural order of the coefficients. `layouts` lists the
    accepted wire layouts (field names in container order), longest first;
    a container is matched to a layout by its length only.
    """

    name: str
    title: str
    fields: tuple[str, ...]
    layouts: tuple[tuple[str, ...], ...]
    groups: tuple[tuple[DistortionComponents, tuple[str, ...]], ...]
    radial: Literal["polynomial", "rational"]
    tangential: Literal["brown", "opencv"]
    undistort_iterations: int
    undistort_epsilon: float | None = None

    @property
    def accepted_lengths(self) -> tuple[int, ...]:
        return tuple(len(layout) for layout in self.layouts)

    @property
    def canonical_length(self) -> int:
        return len(self.layouts[0])

    def layout_for(self, length: int) -> tuple[str, ...] | None:
        for layout in self.layouts:
            if len(layout) == length:
                return layout
        return None

    def expected_lengths_text(self) -> str:
        lengths = [str(n) for n in self.accepted_lengths]
        if len(lengths) == 1:
            return lengths[0]
        return ", ".join(lengths[:-1]) + " or " + lengths[-1]

    def classify(self, values: Mapping[str, float]) -> DistortionComponents:
        mask = DistortionComponents.NO_DISTORTION
        for flag, names in self.groups:
            if any(values[n] != 0.0 for n in names):
                mask |= flag
        return mask


BROWN = DistortionConvention(
    name="brown",
    title="Brown (1966) radial / decentering",
    fields=("k1", "k2", "k3", "k4", "p1", "p2", "p3", "p4"),
    layouts=(
        ("k1", "k2", "k3", "k4", "p1", "p2", "p3", "p4"),
        ("k1", "k2", "k3", "p1", "p2"),
        ("k1", "k2", "k3"),
    ),
    groups=(
        (DistortionComponents.RADIAL_SIMPLE, ("k1", "k2", "k3", "k4")),
        (DistortionComponents.TANGENTIAL, ("p1", "p2", "p3", "p4")),
    ),
    radial="polynomial",
    tangential="brown",
    undistort_iterations=5,
)

# OpenCV orders its distCoeffs vector (k1,k2,p1,p2,k3,k4,k5,k6,s1,s2,s3,s4,tx,ty).
_OPENCV_WIRE = ("k1", "k2", "p1", "p2", "k3", "k4", "k5", "k6", "s1", "s2", "s3", "s4", "tx", "ty")

OPENCV = DistortionConvention(
    name="opencv",
    title="OpenCV rational / tangential / thin prism / tilt",
    fields=("k1", "k2", "k3", "k4", "k5", "k6", "p1", "p2", "s1", "s2", "s3", "s4", "tx", "ty"),
    layouts=tuple(_OPENCV_WIRE[:n] for n in (14, 12, 8, 5, 4)),
    groups=(
        (DistortionComponents.RADIAL_SIMPLE, ("k1", "k2", "k3")),
        (DistortionComponents.RADIAL_RATIONAL, ("k4", "k5", "k6")),
        (DistortionComponents.TANGENTIAL, ("p1", "p2")),
        (DistortionComponents.PRISM, ("s1", "s2", "s3", "s4")),
        (DistortionComponents.TILT, ("tx", "ty")),
    ),
    radial="rational",
    tangential="opencv",
    undistort_iterations=50,
    undistort_epsilon=1e-6,
)

METASHAPE = DistortionConvention(
    name="agisoft-metashape",
    title="Agisoft Metashape radial / tangential",
    fields=("k1", "k2", "k3", "k4", "p1", "p2"),
    layouts=(
        ("k1", "k2", "k3", "k4", "p1", "p2"),
        ("k1", "k2", "k3", "p1", "p2"),
        ("k1", "k2", "k3"),
    ),
    groups=(
        (DistortionComponents.RADIAL_SIMPLE, ("k1", "k2", "k3", "k4")),
        (DistortionComponents.TANGENTIAL, ("p1", "p2")),
    ),
    radial="polynomial",
    tangential="brown",
    undistort_iterations=10,
)

CONVENTIONS: tuple[DistortionConvention, ...] = (BROWN, OPENCV, METASHAPE)
