"""I2C sensor interface for the Pololu Balboa 32U4 IMU.

This module reads the on-board inertial and magnetic sensors directly as
I2C master:
- LSM6DS33 (0x6B): Gyroscope and accelerometer
- LIS3MDL (0x1E): Magnetometer

Each sensor is exposed as a channel with read() -> Readout so it can be
handed to the AttitudeEstimator as a raw SensorSource.
"""

import logging
import struct
import time
from typing import Optional

import numpy as np
from smbus2 import SMBus

from sensors import Readout


logger = logging.getLogger(__name__)


# I2C Device Addresses
GYRO_ACCEL_ADDRESS = 0x6B    # LSM6DS33
MAG_ADDRESS = 0x1E           # LIS3MDL
DEFAULT_I2C_BUS = 1          # Raspberry Pi I2C bus 1

# LSM6DS33 Register Addresses
LSM6_CTRL1_XL = 0x10    # Accelerometer control
LSM6_CTRL2_G = 0x11     # Gyroscope control
LSM6_CTRL3_C = 0x12     # Common control
LSM6_OUTX_L_G = 0x22    # Gyro data start
LSM6_OUTX_L_XL = 0x28   # Accel data start

# LIS3MDL Register Addresses
LIS3_CTRL_REG1 = 0x20   # XY operating mode, output data rate
LIS3_CTRL_REG2 = 0x21   # Full scale
LIS3_CTRL_REG3 = 0x22   # Conversion mode
LIS3_CTRL_REG4 = 0x23   # Z operating mode
LIS3_OUT_X_L = 0x28     # Mag data start
LIS3_AUTO_INCREMENT = 0x80

SAMPLE_SIZE_BYTES = 6   # 3x int16, little endian


class I2CSensorChannel:
    """One 3-axis sensor output register block on the I2C bus.

    Attributes:
        address: I2C device address
        register: First output register (X low byte)
        scale: Physical units per LSB
    """

    def __init__(self, bus: SMBus, address: int, register: int, scale: float):
        self._bus = bus
        self.address = address
        self.register = register
        self.scale = scale

    def read_raw(self) -> np.ndarray:
        """Read the three signed 16-bit counts.

        Raises:
            OSError: If the bus transaction fails
        """
        data = self._bus.read_i2c_block_data(
            self.address, self.register, SAMPLE_SIZE_BYTES
        )
        return np.array(struct.unpack('<hhh', bytes(data)), dtype=float)

    def read(self) -> Readout:
        """Read one sample in physical units."""
        return Readout.from_array(self.read_raw() * self.scale)


class BalboaImuI2CInterface:
    """I2C interface to the Balboa gyroscope, accelerometer and magnetometer.

    Example:
        >>> imu = BalboaImuI2CInterface(bus=1)
        >>> estimator = AttitudeEstimator(
        ...     imu.gyroscope, imu.accelerometer, imu.magnetometer, 0.01
        ... )
        >>> imu.close()

    Attributes:
        gyroscope: Channel reading angular rate in rad/s
        accelerometer: Channel reading specific force in m/s²
        magnetometer: Channel reading magnetic field in gauss
    """

    # LSM6DS33 scaling factors (±4g accel, ±500dps gyro)
    ACCEL_SCALE = 0.122e-3 * 9.81           # mg/LSB to m/s²
    GYRO_SCALE = 17.50e-3 * (np.pi / 180.0)  # mdps/LSB to rad/s

    # LIS3MDL scaling factor (±4 gauss)
    MAG_SCALE = 1.0 / 6842.0                 # LSB to gauss

    def __init__(
        self,
        bus: int = DEFAULT_I2C_BUS,
        smbus: Optional[SMBus] = None,
    ):
        """Open the bus and configure the sensors.

        Args:
            bus: I2C bus number (default 1 for Raspberry Pi)
            smbus: Already opened bus to use instead of opening one

        Raises:
            OSError: If the bus cannot be opened or a sensor does not respond
        """
        self._bus_num = bus
        self._bus = smbus if smbus is not None else SMBus(bus)

        self._init_gyro_accel()
        self._init_magnetometer()

        self.gyroscope = I2CSensorChannel(
            self._bus, GYRO_ACCEL_ADDRESS, LSM6_OUTX_L_G, self.GYRO_SCALE
        )
        self.accelerometer = I2CSensorChannel(
            self._bus, GYRO_ACCEL_ADDRESS, LSM6_OUTX_L_XL, self.ACCEL_SCALE
        )
        self.magnetometer = I2CSensorChannel(
            self._bus,
            MAG_ADDRESS,
            LIS3_OUT_X_L | LIS3_AUTO_INCREMENT,
            self.MAG_SCALE,
        )

        logger.info(
            "Balboa IMU initialized on bus %d (LSM6DS33 0x%02X, LIS3MDL 0x%02X)",
            bus, GYRO_ACCEL_ADDRESS, MAG_ADDRESS,
        )

    def _init_gyro_accel(self) -> None:
        """Configure LSM6DS33: 208 Hz, ±4 g, ±500 dps."""
        # Soft reset to a clean state
        self._bus.write_byte_data(GYRO_ACCEL_ADDRESS, LSM6_CTRL3_C, 0b00000001)
        time.sleep(0.05)

        self._bus.write_byte_data(GYRO_ACCEL_ADDRESS, LSM6_CTRL1_XL, 0b01011000)
        self._bus.write_byte_data(GYRO_ACCEL_ADDRESS, LSM6_CTRL2_G, 0b01010100)

        # Block data update and register auto-increment
        self._bus.write_byte_data(GYRO_ACCEL_ADDRESS, LSM6_CTRL3_C, 0b01000100)

        # At 208 Hz one sample takes ~5 ms
        time.sleep(0.1)

    def _init_magnetometer(self) -> None:
        """Configure LIS3MDL: ultra-high-performance, 10 Hz, ±4 gauss."""
        self._bus.write_byte_data(MAG_ADDRESS, LIS3_CTRL_REG1, 0x70)
        self._bus.write_byte_data(MAG_ADDRESS, LIS3_CTRL_REG2, 0x00)
        # Continuous conversion
        self._bus.write_byte_data(MAG_ADDRESS, LIS3_CTRL_REG3, 0x00)
        self._bus.write_byte_data(MAG_ADDRESS, LIS3_CTRL_REG4, 0x0C)

    def close(self) -> None:
        """Close the I2C bus."""
        self._bus.close()
        logger.info("Balboa IMU bus %d closed", self._bus_num)
