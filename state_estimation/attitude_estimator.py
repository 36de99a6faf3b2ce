"""Attitude estimator: Kalman roll/pitch plus tilt-compensated compass yaw.

Each update cycle:
    1. Read calibrated gyroscope, accelerometer and magnetometer
    2. Convert body rates to Euler rates using the previous attitude
       (control input)
    3. Compute tilt from the gravity direction (measurement)
    4. Advance the Kalman filter and extract roll and pitch
    5. Resolve yaw from the filtered tilt and the magnetometer
    6. Convert to degrees and keep the result as feedback for step 2

Yaw is not part of the filter state. It is recomputed each cycle from
the current tilt and the raw magnetometer reading.

The estimator starts uncalibrated (zero bias). Call calibrate_imu and
calibrate_mag with the body at rest before the first update for
meaningful output.
"""

import logging
from typing import Optional

import numpy as np

from sensors import (
    Readout,
    SensorSource,
    ImuCalibratedSensor,
    CompassCalibratedSensor,
)
from state_estimation.config import (
    EstimatorConfig,
    DEFAULT_ESTIMATE_COVARIANCE_DIAGONAL,
    DEFAULT_PROCESS_NOISE_DIAGONAL,
    DEFAULT_MEASUREMENT_NOISE_DIAGONAL,
    STANDARD_GRAVITY_MPS2,
)
from state_estimation.kalman_filter import (
    LinearKalmanFilter,
    roll_from_state,
    pitch_from_state,
)
from state_estimation._internal.imu_fusion import (
    euler_rates_from_body_rates,
    tilt_from_accelerometer,
    yaw_from_magnetometer,
    attitude_to_degrees,
)


logger = logging.getLogger(__name__)


class AttitudeEstimator:
    """Roll, pitch and yaw estimator over three 3-axis sensors.

    Not thread-safe: concurrent update calls on one instance must be
    serialized by the caller.

    Calibration keeps the accelerometer's rest reading, so a calibrated
    accelerometer at rest reads gravity. Pass
    accelerometer_rest_reading=Readout.zero() to have it read zero instead.

    Attributes:
        attitude_deg: Most recent Readout(roll, pitch, yaw) in degrees
    """

    def __init__(
        self,
        gyro: SensorSource,
        acc: SensorSource,
        mag: SensorSource,
        sampling_period_s: float,
        accelerometer_rest_reading: Optional[Readout] = None,
    ) -> None:
        """Initialize estimator with default filter tuning.

        Args:
            gyro: Raw gyroscope source (rad/s)
            acc: Raw accelerometer source
            mag: Raw magnetometer source
            sampling_period_s: Nominal time between updates
            accelerometer_rest_reading: Ideal accelerometer reading at
                rest (default: (0, 0, 9.81) m/s^2)

        Raises:
            ValueError: If sampling_period_s is not positive
        """
        if accelerometer_rest_reading is None:
            accelerometer_rest_reading = Readout(0.0, 0.0, STANDARD_GRAVITY_MPS2)

        self._gyro = ImuCalibratedSensor(gyro, name='gyroscope')
        self._acc = ImuCalibratedSensor(
            acc, rest_reading=accelerometer_rest_reading, name='accelerometer'
        )
        self._mag = CompassCalibratedSensor(mag, name='magnetometer')

        self._kalman = LinearKalmanFilter(sampling_period_s)
        self._kalman.set_P_diagonal(DEFAULT_ESTIMATE_COVARIANCE_DIAGONAL)
        self._kalman.set_Q_diagonal(DEFAULT_PROCESS_NOISE_DIAGONAL)
        self._kalman.set_R_diagonal(DEFAULT_MEASUREMENT_NOISE_DIAGONAL)

        self._attitude_deg = Readout.zero()

    @classmethod
    def from_config(
        cls,
        gyro: SensorSource,
        acc: SensorSource,
        mag: SensorSource,
        config: EstimatorConfig,
    ) -> 'AttitudeEstimator':
        """Create estimator with tuning taken from an EstimatorConfig."""
        estimator = cls(
            gyro,
            acc,
            mag,
            sampling_period_s=config.sampling_period_s,
            accelerometer_rest_reading=Readout.from_array(
                config.accelerometer_rest_reading_mps2
            ),
        )
        estimator.set_P_diagonal(config.estimate_covariance_diagonal)
        estimator.set_Q_diagonal(config.process_noise_diagonal)
        estimator.set_R_diagonal(config.measurement_noise_diagonal)
        return estimator

    def calibrate_imu(self, num_samples: int) -> None:
        """Calibrate gyroscope and accelerometer bias (body at rest)."""
        self._gyro.calibrate_bias(num_samples)
        self._acc.calibrate_bias(num_samples)

    def calibrate_mag(self, num_samples: int) -> None:
        """Calibrate magnetometer hard-iron offset."""
        self._mag.calibrate_bias(num_samples)

    def calibrate(self, config: EstimatorConfig) -> None:
        """Run both calibrations with the configured sample counts."""
        logger.info("Calibrating IMU and magnetometer, keep the body still")
        self.calibrate_imu(config.imu_calibration_samples)
        self.calibrate_mag(config.mag_calibration_samples)

    def update(self, dt: Optional[float] = None) -> Readout:
        """Run one read-compute cycle.

        Args:
            dt: Time since the previous update. If given, the filter
                model is updated to it first (variable-rate sampling).

        Returns:
            Readout(roll, pitch, yaw) in degrees
        """
        if dt is not None:
            self.set_dt(dt)

        gyro_reading = self._gyro.read()
        acc_reading = self._acc.read()
        mag_reading = self._mag.read()

        control = euler_rates_from_body_rates(
            gyro_reading,
            np.deg2rad(self._attitude_deg.x),
            np.deg2rad(self._attitude_deg.y),
        )
        measurement = tilt_from_accelerometer(acc_reading)

        state = self._kalman.update(control, measurement)

        roll_rad = roll_from_state(state)
        pitch_rad = pitch_from_state(state)
        yaw_rad = yaw_from_magnetometer(roll_rad, pitch_rad, mag_reading)

        self._attitude_deg = attitude_to_degrees(roll_rad, pitch_rad, yaw_rad)
        return self._attitude_deg

    def set_dt(self, dt: float) -> None:
        """Change the filter's sample interval."""
        self._kalman.set_dt(dt)

    def set_P_diagonal(self, value: float) -> None:
        """Tune estimate covariance diagonal."""
        self._kalman.set_P_diagonal(value)

    def set_Q_diagonal(self, value: float) -> None:
        """Tune process noise diagonal."""
        self._kalman.set_Q_diagonal(value)

    def set_R_diagonal(self, value: float) -> None:
        """Tune measurement noise diagonal."""
        self._kalman.set_R_diagonal(value)

    @property
    def attitude_deg(self) -> Readout:
        """Most recent Readout(roll, pitch, yaw) in degrees."""
        return self._attitude_deg

    @property
    def kalman_filter(self) -> LinearKalmanFilter:
        """Underlying roll/pitch filter."""
        return self._kalman

    @property
    def gyro(self) -> ImuCalibratedSensor:
        """Calibrated gyroscope."""
        return self._gyro

    @property
    def accelerometer(self) -> ImuCalibratedSensor:
        """Calibrated accelerometer."""
        return self._acc

    @property
    def magnetometer(self) -> CompassCalibratedSensor:
        """Calibrated magnetometer."""
        return self._mag
