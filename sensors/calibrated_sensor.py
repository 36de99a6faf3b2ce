"""Bias-calibrated sensor wrappers.

A calibrated sensor wraps a raw SensorSource and subtracts a static bias
from every reading. The bias is determined by sampling the source at rest:

    bias = estimate(samples) - rest_reading

where rest_reading is what an ideal sensor reports at rest. It is zero for
a gyroscope and the gravity vector for an accelerometer, so calibration
removes the offset without removing gravity.

Calibration only affects readings taken afterwards.
"""

import logging
from typing import List, Optional, Protocol

import numpy as np

from sensors.readout import Readout
from sensors._internal.validation import validate_positive_integer


logger = logging.getLogger(__name__)


class SensorSource(Protocol):
    """Anything that yields an instantaneous 3-axis reading."""

    def read(self) -> Readout:
        ...


class CalibratedSensor:
    """Sensor with a static bias removed from every reading.

    Subclasses choose how the bias is estimated from the calibration
    samples by overriding _estimate_offset.

    Attributes:
        bias: Offset currently subtracted from raw readings
        rest_reading: Expected ideal reading while at rest
    """

    def __init__(
        self,
        source: SensorSource,
        rest_reading: Optional[Readout] = None,
        name: str = 'sensor',
    ) -> None:
        """Wrap a raw sensor source.

        Args:
            source: Raw reading provider
            rest_reading: Ideal reading at rest (default: zero on every axis)
            name: Label used in log messages
        """
        self._source = source
        self._rest_reading = (
            rest_reading if rest_reading is not None else Readout.zero()
        )
        self._bias = Readout.zero()
        self._name = name

    def read(self) -> Readout:
        """Return the current reading with the bias removed."""
        return self._source.read() - self._bias

    def calibrate_bias(self, num_samples: int) -> Readout:
        """Sample the source at rest and update the bias.

        Blocks for as long as num_samples raw reads take.

        Args:
            num_samples: Number of raw samples to collect

        Returns:
            The new bias

        Raises:
            ValueError: If num_samples is not a positive integer
        """
        validate_positive_integer(num_samples, 'num_samples')

        samples = [self._source.read() for _ in range(num_samples)]
        offset = self._estimate_offset(samples)
        self._bias = offset - self._rest_reading

        logger.info(
            "Calibrated %s over %d samples, bias: %s",
            self._name, num_samples, self._bias,
        )
        return self._bias

    def _estimate_offset(self, samples: List[Readout]) -> Readout:
        """Per-axis mean of the calibration samples."""
        stacked = np.array([sample.to_array() for sample in samples])
        return Readout.from_array(np.mean(stacked, axis=0))

    @property
    def bias(self) -> Readout:
        """Offset subtracted from raw readings."""
        return self._bias

    @property
    def rest_reading(self) -> Readout:
        """Ideal reading expected while at rest."""
        return self._rest_reading

    @property
    def source(self) -> SensorSource:
        """Wrapped raw reading provider."""
        return self._source


class ImuCalibratedSensor(CalibratedSensor):
    """Gyroscope or accelerometer calibrated by averaging samples at rest."""


class CompassCalibratedSensor(CalibratedSensor):
    """Magnetometer calibrated for hard-iron offset.

    The offset is the per-axis midpoint of the extremes seen while
    sampling. Rotating the sensor through all orientations during
    calibration centers the field sphere. For samples taken at rest it
    reduces to the reading itself.
    """

    def _estimate_offset(self, samples: List[Readout]) -> Readout:
        stacked = np.array([sample.to_array() for sample in samples])
        midpoint = (np.max(stacked, axis=0) + np.min(stacked, axis=0)) / 2.0
        return Readout.from_array(midpoint)
