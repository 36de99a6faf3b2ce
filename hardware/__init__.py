"""Hardware interface module for the Pololu Balboa 32U4 IMU.

This module provides the hardware layer for running the attitude
estimator on the physical robot, including:
- I2C communication with the gyroscope, accelerometer and magnetometer
- Fixed-rate estimation loop
- Configuration loading
"""

from .config_loader import load_hardware_estimator
from .i2c_interface import BalboaImuI2CInterface, I2CSensorChannel
from .attitude_loop import HardwareAttitudeLoop, AttitudeLoopStats

__all__ = [
    'load_hardware_estimator',
    'BalboaImuI2CInterface',
    'I2CSensorChannel',
    'HardwareAttitudeLoop',
    'AttitudeLoopStats',
]
