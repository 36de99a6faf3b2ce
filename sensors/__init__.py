"""Sensor readout and calibration module.

Public API:
    - Readout: Immutable 3-axis reading with element-wise arithmetic
    - SensorSource: Protocol for raw 3-axis reading providers
    - CalibratedSensor: Source wrapper that removes a static bias
    - ImuCalibratedSensor: Mean-of-samples calibration (gyro, accelerometer)
    - CompassCalibratedSensor: Hard-iron calibration (magnetometer)
"""

from sensors.readout import Readout
from sensors.calibrated_sensor import (
    SensorSource,
    CalibratedSensor,
    ImuCalibratedSensor,
    CompassCalibratedSensor,
)

__all__ = [
    'Readout',
    'SensorSource',
    'CalibratedSensor',
    'ImuCalibratedSensor',
    'CompassCalibratedSensor',
]
