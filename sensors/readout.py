"""Three-axis sensor readout value type.

A Readout carries any 3-axis quantity (angular rate, specific force,
magnetic field) and is reused for the {roll, pitch, yaw} attitude output.

Arithmetic is element-wise. The right-hand operand may be another Readout
(field by field) or a scalar (applied to every field). Equality is exact
floating-point comparison.
"""

import operator
from dataclasses import dataclass
from typing import Callable, Iterator, Sequence, Union

import numpy as np


@dataclass(frozen=True)
class Readout:
    """Immutable 3-axis reading.

    Attributes:
        x: First axis value
        y: Second axis value
        z: Third axis value
    """

    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> 'Readout':
        """Readout with every axis at zero."""
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_array(cls, values: Sequence[float]) -> 'Readout':
        """Build a Readout from a 3-element sequence or array.

        Raises:
            ValueError: If values does not hold exactly three elements
        """
        values = np.asarray(values, dtype=float).reshape(-1)
        if values.shape != (3,):
            raise ValueError(
                f"Readout requires exactly 3 values, got shape {values.shape}"
            )
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def to_array(self) -> np.ndarray:
        """Return the readout as a numpy array of shape (3,)."""
        return np.array([self.x, self.y, self.z], dtype=float)

    def element_wise(
        self,
        other: Union['Readout', float],
        operation: Callable[[float, float], float],
    ) -> 'Readout':
        """Apply a binary operation axis by axis."""
        if isinstance(other, Readout):
            return Readout(
                operation(self.x, other.x),
                operation(self.y, other.y),
                operation(self.z, other.z),
            )
        return Readout(
            operation(self.x, other),
            operation(self.y, other),
            operation(self.z, other),
        )

    def __add__(self, other: Union['Readout', float]) -> 'Readout':
        return self.element_wise(other, operator.add)

    def __sub__(self, other: Union['Readout', float]) -> 'Readout':
        return self.element_wise(other, operator.sub)

    def __mul__(self, other: Union['Readout', float]) -> 'Readout':
        return self.element_wise(other, operator.mul)

    def __truediv__(self, other: Union['Readout', float]) -> 'Readout':
        return self.element_wise(other, operator.truediv)

    def __neg__(self) -> 'Readout':
        return Readout(-self.x, -self.y, -self.z)

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __str__(self) -> str:
        return f"{self.x} {self.y} {self.z}"
