"""State estimation module for attitude (roll, pitch, yaw) estimation.

This module fuses gyroscope, accelerometer and magnetometer readings into
an orientation estimate: a linear Kalman filter for roll and pitch, and a
tilt-compensated compass for yaw.

Public API:
    - EstimatorConfig: Configuration dataclass for estimator parameters
    - LinearKalmanFilter: Two-axis roll/pitch Kalman filter
    - AttitudeEstimator: Sensor-to-attitude orchestrator
"""

from state_estimation.config import EstimatorConfig
from state_estimation.kalman_filter import LinearKalmanFilter
from state_estimation.attitude_estimator import AttitudeEstimator

__all__ = [
    'EstimatorConfig',
    'LinearKalmanFilter',
    'AttitudeEstimator',
]
