"""IMU sensor fusion mathematics.

Provides the pure functions that turn raw sensor readouts into Kalman
filter inputs and resolve yaw from the filtered tilt.

Frame and angle conventions:
    - Roll (phi): rotation about the body X-axis (forward)
    - Pitch (theta): rotation about the body Y-axis (right)
    - Yaw (psi): rotation about the body Z-axis (vertical)

All angles are in radians unless the name says otherwise.
"""

import numpy as np

from sensors import Readout


def euler_rates_from_body_rates(
    gyro_radps: Readout,
    previous_roll_rad: float,
    previous_pitch_rad: float,
) -> np.ndarray:
    """Convert body angular rates to roll and pitch Euler rates.

    Standard body-to-Euler rate transform, linearized about the previous
    attitude estimate:

        roll_rate  = gx + sin(phi) tan(theta) gy + cos(phi) tan(theta) gz
        pitch_rate = cos(phi) gy - sin(phi) gz

    Args:
        gyro_radps: Calibrated gyroscope reading in rad/s
        previous_roll_rad: Roll from the previous cycle
        previous_pitch_rad: Pitch from the previous cycle

    Returns:
        Control vector [[roll_rate], [pitch_rate]] of shape (2, 1)

    Note:
        tan(theta) is unbounded as pitch approaches +/-90 degrees. The
        result there is meaningless and is not clamped.
    """
    sin_roll = np.sin(previous_roll_rad)
    cos_roll = np.cos(previous_roll_rad)
    tan_pitch = np.tan(previous_pitch_rad)

    roll_rate = (
        gyro_radps.x
        + sin_roll * tan_pitch * gyro_radps.y
        + cos_roll * tan_pitch * gyro_radps.z
    )
    pitch_rate = cos_roll * gyro_radps.y - sin_roll * gyro_radps.z

    return np.array([[roll_rate], [pitch_rate]])


def roll_from_accelerometer(acceleration: Readout) -> float:
    """Compute roll angle from the gravity direction.

    roll = atan2(a_y, sqrt(a_x^2 + a_z^2))

    Note:
        Valid only while the body is quasi-static. Sustained linear
        acceleration corrupts the estimate.
    """
    return np.arctan2(
        acceleration.y,
        np.sqrt(acceleration.x ** 2 + acceleration.z ** 2),
    )


def pitch_from_accelerometer(acceleration: Readout) -> float:
    """Compute pitch angle from the gravity direction.

    pitch = atan2(-a_x, sqrt(a_y^2 + a_z^2))
    """
    return np.arctan2(
        -acceleration.x,
        np.sqrt(acceleration.y ** 2 + acceleration.z ** 2),
    )


def tilt_from_accelerometer(acceleration: Readout) -> np.ndarray:
    """Measurement vector [[roll], [pitch]] of shape (2, 1)."""
    return np.array([
        [roll_from_accelerometer(acceleration)],
        [pitch_from_accelerometer(acceleration)],
    ])


def yaw_from_magnetometer(
    roll_rad: float,
    pitch_rad: float,
    magnetic_field: Readout,
) -> float:
    """Tilt-compensated compass heading.

    Rotates the magnetometer reading into the horizontal plane using the
    filtered roll and pitch, then takes the heading:

        h_x = m_x cos(theta) + m_y sin(theta) sin(phi) + m_z sin(theta) cos(phi)
        h_y = m_y cos(phi) - m_z sin(phi)
        yaw = atan2(-h_y, h_x)

    Yaw is recomputed from scratch every cycle, so magnetic disturbance
    shows up in the output unsmoothed.

    Args:
        roll_rad: Filtered roll
        pitch_rad: Filtered pitch
        magnetic_field: Calibrated magnetometer reading (any unit)

    Returns:
        Yaw in radians, in [-pi, pi]
    """
    sin_roll = np.sin(roll_rad)
    cos_roll = np.cos(roll_rad)
    sin_pitch = np.sin(pitch_rad)
    cos_pitch = np.cos(pitch_rad)

    horizontal_x = (
        magnetic_field.x * cos_pitch
        + magnetic_field.y * sin_pitch * sin_roll
        + magnetic_field.z * sin_pitch * cos_roll
    )
    horizontal_y = magnetic_field.y * cos_roll - magnetic_field.z * sin_roll

    return np.arctan2(-horizontal_y, horizontal_x)


def attitude_to_degrees(
    roll_rad: float,
    pitch_rad: float,
    yaw_rad: float,
) -> Readout:
    """Pack an attitude as Readout(roll, pitch, yaw) in degrees."""
    return Readout(
        float(np.rad2deg(roll_rad)),
        float(np.rad2deg(pitch_rad)),
        float(np.rad2deg(yaw_rad)),
    )
