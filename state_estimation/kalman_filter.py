"""Two-axis linear Kalman filter for roll and pitch.

State vector (4, 1):
    [roll, roll_drift, pitch, pitch_drift]

Two decoupled angle + drift sub-systems are stacked. Each angle is
propagated by the gyro-derived Euler rate (control input) and corrected by
the accelerometer-derived tilt (measurement):

    x[k+1] = A x[k] + B u[k]
    z[k]   = H x[k]

with

    A = [[1, -dt, 0,   0],     B = [[dt, 0 ],     H = [[1, 0, 0, 0],
         [0,   1, 0,   0],          [0,  0 ],          [0, 0, 1, 0]]
         [0,   0, 1, -dt],          [0,  dt],
         [0,   0, 0,   1]]          [0,  0 ]]

Covariances P (4, 4), Q (4, 4) and R (2, 2) start at zero and are tuned
through the diagonal setters. They must be symmetric positive
semi-definite and R must be positive definite. Neither is checked here.
"""

import logging

import numpy as np

from state_estimation._internal.validation import validate_positive


logger = logging.getLogger(__name__)


STATE_DIMENSION = 4
CONTROL_DIMENSION = 2
MEASUREMENT_DIMENSION = 2

ROLL_INDEX = 0
ROLL_DRIFT_INDEX = 1
PITCH_INDEX = 2
PITCH_DRIFT_INDEX = 3


def build_state_transition_matrix(dt: float) -> np.ndarray:
    """State transition matrix A (4, 4) for sample interval dt."""
    return np.array([
        [1.0, -dt, 0.0, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [0.0, 0.0, 1.0, -dt],
        [0.0, 0.0, 0.0, 1.0],
    ])


def build_control_matrix(dt: float) -> np.ndarray:
    """Control input matrix B (4, 2) for sample interval dt."""
    return np.array([
        [dt, 0.0],
        [0.0, 0.0],
        [0.0, dt],
        [0.0, 0.0],
    ])


def build_observation_matrix() -> np.ndarray:
    """Observation matrix H (2, 4) selecting roll and pitch."""
    return np.array([
        [1.0, 0.0, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
    ])


def roll_from_state(state: np.ndarray) -> float:
    """Extract roll (rad) from a state vector."""
    return float(state[ROLL_INDEX, 0])


def pitch_from_state(state: np.ndarray) -> float:
    """Extract pitch (rad) from a state vector."""
    return float(state[PITCH_INDEX, 0])


class LinearKalmanFilter:
    """Discrete linear Kalman filter over the roll/pitch model.

    Attributes:
        A: State transition matrix (4, 4)
        B: Control input matrix (4, 2)
        H: Observation matrix (2, 4)
        P: Estimate covariance (4, 4)
        Q: Process noise covariance (4, 4)
        R: Measurement noise covariance (2, 2)
        state: Current state estimate (4, 1)
    """

    def __init__(self, dt: float) -> None:
        """Initialize the filter for sample interval dt.

        A and B are derived from dt. State, P, Q and R start at zero.

        Args:
            dt: Sample interval in seconds

        Raises:
            ValueError: If dt is not positive
        """
        validate_positive(dt, 'dt')

        self.A = build_state_transition_matrix(dt)
        self.B = build_control_matrix(dt)
        self.H = build_observation_matrix()

        self.state = np.zeros((STATE_DIMENSION, 1))
        self.P = np.zeros((STATE_DIMENSION, STATE_DIMENSION))
        self.Q = np.zeros((STATE_DIMENSION, STATE_DIMENSION))
        self.R = np.zeros((MEASUREMENT_DIMENSION, MEASUREMENT_DIMENSION))

        self._identity = np.eye(STATE_DIMENSION)

    def update(self, control: np.ndarray, measurement: np.ndarray) -> np.ndarray:
        """Advance one time step.

        Predict:
            x' = A x + B u
            P' = A P A^T + Q
        Correct:
            y = z - H x'
            S = H P' H^T + R
            K = P' H^T S^-1
            x = x' + K y
            P = (I - K H) P'

        Args:
            control: Euler rates [roll_rate, pitch_rate], shape (2,) or (2, 1)
            measurement: Tilt [roll, pitch], shape (2,) or (2, 1)

        Returns:
            Copy of the posterior state (4, 1)

        Note:
            S is singular when R is zero. That is a tuning precondition,
            not a runtime fault; numpy raises LinAlgError in that case.
        """
        control = np.reshape(control, (CONTROL_DIMENSION, 1))
        measurement = np.reshape(measurement, (MEASUREMENT_DIMENSION, 1))

        # Predict
        predicted_state = self.A @ self.state + self.B @ control
        predicted_covariance = self.A @ self.P @ self.A.T + self.Q

        # Correct
        innovation = measurement - self.H @ predicted_state
        innovation_covariance = (
            self.H @ predicted_covariance @ self.H.T + self.R
        )
        kalman_gain = (
            predicted_covariance @ self.H.T
            @ np.linalg.inv(innovation_covariance)
        )

        self.state = predicted_state + kalman_gain @ innovation
        self.P = (self._identity - kalman_gain @ self.H) @ predicted_covariance

        return self.state.copy()

    def set_P_diagonal(self, value: float) -> None:
        """Overwrite every diagonal entry of P, keeping off-diagonals."""
        np.fill_diagonal(self.P, value)

    def set_Q_diagonal(self, value: float) -> None:
        """Overwrite every diagonal entry of Q, keeping off-diagonals."""
        np.fill_diagonal(self.Q, value)

    def set_R_diagonal(self, value: float) -> None:
        """Overwrite every diagonal entry of R, keeping off-diagonals."""
        np.fill_diagonal(self.R, value)

    def set_dt(self, dt: float) -> None:
        """Update the dt-dependent entries of A and B in place.

        Only A[0, 1], A[2, 3], B[0, 0] and B[2, 1] change.
        """
        self.A[ROLL_INDEX, ROLL_DRIFT_INDEX] = -dt
        self.A[PITCH_INDEX, PITCH_DRIFT_INDEX] = -dt
        self.B[ROLL_INDEX, 0] = dt
        self.B[PITCH_INDEX, 1] = dt
        logger.debug("Kalman filter sample interval set to %.6f s", dt)
