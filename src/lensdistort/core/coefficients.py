from __future__ import annotations

import logging
from typing import Any, Mapping

import numpy as np

from lensdistort.core.components import DistortionComponents
from lensdistort.core.conventions import DistortionConvention
from lensdistort.errors import InvalidCoefficientsError

logger = logging.getLogger(__name__)


def _as_flat_values(container: Any) -> np.ndarray | None:
    """Flatten a coefficient container to float64; None for a null/empty container."""
    if container is None:
        return None
    arr = np.asarray(container, dtype=np.float64).reshape(-1)
    if arr.size == 0:
        return None
    return arr


class CoefficientStore:
    """
    Coefficients of one distortion convention and their component mask.

    Values are kept by field name in the convention's natural order. Every
    mutation builds the complete new state first and commits values and mask
    together, so a rejected input never leaves a partially updated store.
    """

    def __init__(self, convention: DistortionConvention, container: Any = None):
        self._convention = convention
        self._values: dict[str, float] = {name: 0.0 for name in convention.fields}
        self._components = DistortionComponents.NO_DISTORTION
        if container is not None:
            self.set_from_container(container)

    @property
    def convention(self) -> DistortionConvention:
        return self._convention

    @property
    def components(self) -> DistortionComponents:
        return self._components

    def __getitem__(self, name: str) -> float:
        return self._values[name]

    def as_dict(self) -> dict[str, float]:
        return dict(self._values)

    def view(self) -> Mapping[str, float]:
        # Read-only snapshot used by the evaluator; the dict is replaced, never mutated.
        return self._values

    def _commit(self, values: dict[str, float]) -> None:
        components = self._convention.classify(values)
        self._values = values
        self._components = components
        logger.debug(f"{self._convention.name} coefficients set: {values} -> {components}")

    def _check_names(self, names) -> None:
        unknown = [n for n in names if n not in self._values]
        if unknown:
            raise InvalidCoefficientsError(
                f"Unknown {self._convention.name} coefficient(s) {unknown}, expected names are {list(self._convention.fields)}."
            )

    def reset(self) -> None:
        self._commit({name: 0.0 for name in self._convention.fields})

    def assign(self, **fields: float) -> None:
        """Set the named coefficients; every other coefficient becomes 0."""
        self._check_names(fields)
        values = {name: float(fields.get(name, 0.0)) for name in self._convention.fields}
        self._commit(values)

    def update(self, **fields: float) -> None:
        """Change only the named coefficients."""
        self._check_names(fields)
        values = dict(self._values)
        for name, value in fields.items():
            values[name] = float(value)
        self._commit(values)

    def set_from_container(self, container: Any) -> None:
        """
        Set the coefficients from a vector/array laid out as one of the
        convention's layouts. None or an empty container means no distortion.
        """
        arr = _as_flat_values(container)
        if arr is None:
            self.reset()
            return
        layout = self._convention.layout_for(arr.shape[0])
        if layout is None:
            raise InvalidCoefficientsError(
                f"Incorrect {self._convention.name} coefficients length {arr.shape[0]}, "
                f"expected values are {self._convention.expected_lengths_text()}."
            )
        values = {name: 0.0 for name in self._convention.fields}
        for name, value in zip(layout, arr):
            values[name] = float(value)
        self._commit(values)

    def fill(self, out: Any, dtype: type = np.float64) -> Any:
        """
        Write the coefficients into `out` using the layout selected by its
        length and return `out`. `out` may be a numpy array or a mutable sequence.
        """
        if isinstance(out, np.ndarray):
            length = int(out.size)
        else:
            length = len(out)
        layout = self._convention.layout_for(length)
        if layout is None:
            raise InvalidCoefficientsError(
                f"Invalid {self._convention.name} coefficients length {length}, "
                f"expected ones are {self._convention.expected_lengths_text()}."
            )
        cast = np.dtype(dtype).type
        if isinstance(out, np.ndarray):
            for i, name in enumerate(layout):
                out.flat[i] = self._values[name]
        else:
            for i, name in enumerate(layout):
                out[i] = float(cast(self._values[name]))
        return out

    def to_array(self, dtype: type = np.float64) -> np.ndarray:
        out = np.zeros((self._convention.canonical_length,), dtype=dtype)
        return self.fill(out, dtype)
