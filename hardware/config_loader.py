"""Configuration loader for the hardware attitude estimator.

This module wires the Balboa I2C sensors to an AttitudeEstimator using
parameters from config/ YAML files.
"""

from typing import Optional, Tuple

from smbus2 import SMBus

from state_estimation import AttitudeEstimator, EstimatorConfig
from .i2c_interface import BalboaImuI2CInterface, DEFAULT_I2C_BUS


def load_hardware_estimator(
    estimator_params_path: str = 'config/estimator_params.yaml',
    bus: int = DEFAULT_I2C_BUS,
    smbus: Optional[SMBus] = None,
) -> Tuple[AttitudeEstimator, BalboaImuI2CInterface, EstimatorConfig]:
    """Create an estimator reading from the Balboa IMU over I2C.

    The estimator is returned uncalibrated; call
    estimator.calibrate(config) with the robot at rest.

    Args:
        estimator_params_path: Path to estimator configuration YAML
        bus: I2C bus number
        smbus: Already opened bus to use instead of opening one

    Returns:
        Tuple of (estimator, i2c_interface, config). The caller owns the
        interface and must close() it.

    Example:
        >>> estimator, imu, config = load_hardware_estimator()
        >>> estimator.calibrate(config)
        >>> attitude = estimator.update()
    """
    config = EstimatorConfig.from_yaml(estimator_params_path)
    i2c_interface = BalboaImuI2CInterface(bus=bus, smbus=smbus)

    estimator = AttitudeEstimator.from_config(
        i2c_interface.gyroscope,
        i2c_interface.accelerometer,
        i2c_interface.magnetometer,
        config,
    )
    return estimator, i2c_interface, config
