"""Unit tests for the roll/pitch linear Kalman filter."""

import numpy as np
import pytest

from state_estimation import LinearKalmanFilter
from state_estimation.kalman_filter import (
    build_state_transition_matrix,
    build_control_matrix,
    build_observation_matrix,
    roll_from_state,
    pitch_from_state,
)


@pytest.fixture
def tuned_filter():
    """Filter with typical tuning at 100 Hz."""
    kalman = LinearKalmanFilter(0.01)
    kalman.set_P_diagonal(1.0)
    kalman.set_Q_diagonal(0.001)
    kalman.set_R_diagonal(0.03)
    return kalman


class TestModelMatrices:
    """Tests for dt-parameterized model construction."""

    def test_state_transition(self):
        A = build_state_transition_matrix(0.02)
        expected = np.array([
            [1.0, -0.02, 0.0, 0.0],
            [0.0, 1.0, 0.0, 0.0],
            [0.0, 0.0, 1.0, -0.02],
            [0.0, 0.0, 0.0, 1.0],
        ])
        np.testing.assert_array_equal(A, expected)

    def test_control(self):
        B = build_control_matrix(0.02)
        expected = np.array([[0.02, 0.0], [0.0, 0.0], [0.0, 0.02], [0.0, 0.0]])
        np.testing.assert_array_equal(B, expected)

    def test_observation_selects_angles(self):
        H = build_observation_matrix()
        state = np.array([[1.0], [2.0], [3.0], [4.0]])
        np.testing.assert_array_equal(H @ state, np.array([[1.0], [3.0]]))

    def test_initial_filter_state(self):
        kalman = LinearKalmanFilter(0.01)

        assert kalman.state.shape == (4, 1)
        assert not np.any(kalman.state)
        assert not np.any(kalman.P)
        assert not np.any(kalman.Q)
        assert not np.any(kalman.R)
        np.testing.assert_array_equal(kalman.A, build_state_transition_matrix(0.01))
        np.testing.assert_array_equal(kalman.B, build_control_matrix(0.01))

    def test_non_positive_dt_raises(self):
        with pytest.raises(ValueError, match="dt must be positive"):
            LinearKalmanFilter(0.0)


class TestDiagonalSetters:
    """Tests for P/Q/R tuning setters."""

    @pytest.mark.parametrize("setter, attribute", [
        ('set_P_diagonal', 'P'),
        ('set_Q_diagonal', 'Q'),
        ('set_R_diagonal', 'R'),
    ])
    def test_overwrites_diagonal_only(self, setter, attribute):
        kalman = LinearKalmanFilter(0.01)
        matrix = getattr(kalman, attribute)
        matrix[0, 1] = 0.25
        matrix[1, 0] = 0.25

        getattr(kalman, setter)(0.7)

        matrix = getattr(kalman, attribute)
        np.testing.assert_array_equal(np.diag(matrix), np.full(matrix.shape[0], 0.7))
        assert matrix[0, 1] == 0.25
        assert matrix[1, 0] == 0.25


class TestSetDt:
    """Tests for runtime sample interval changes."""

    def test_changes_exactly_four_entries(self, tuned_filter):
        A_before = tuned_filter.A.copy()
        B_before = tuned_filter.B.copy()
        P_before = tuned_filter.P.copy()
        Q_before = tuned_filter.Q.copy()
        R_before = tuned_filter.R.copy()

        tuned_filter.set_dt(0.05)

        changed_A = np.argwhere(tuned_filter.A != A_before)
        changed_B = np.argwhere(tuned_filter.B != B_before)
        assert sorted(map(tuple, changed_A)) == [(0, 1), (2, 3)]
        assert sorted(map(tuple, changed_B)) == [(0, 0), (2, 1)]
        assert tuned_filter.A[0, 1] == -0.05
        assert tuned_filter.A[2, 3] == -0.05
        assert tuned_filter.B[0, 0] == 0.05
        assert tuned_filter.B[2, 1] == 0.05

        np.testing.assert_array_equal(tuned_filter.P, P_before)
        np.testing.assert_array_equal(tuned_filter.Q, Q_before)
        np.testing.assert_array_equal(tuned_filter.R, R_before)

    def test_consistent_with_construction(self):
        kalman = LinearKalmanFilter(0.01)
        kalman.set_dt(0.03)

        np.testing.assert_array_equal(kalman.A, build_state_transition_matrix(0.03))
        np.testing.assert_array_equal(kalman.B, build_control_matrix(0.03))

    def test_idempotent(self):
        kalman = LinearKalmanFilter(0.01)
        kalman.set_dt(0.02)
        A_once, B_once = kalman.A.copy(), kalman.B.copy()

        kalman.set_dt(0.02)

        np.testing.assert_array_equal(kalman.A, A_once)
        np.testing.assert_array_equal(kalman.B, B_once)


class TestUpdate:
    """Tests for the predict/correct recursion."""

    def test_single_step_matches_equations(self, tuned_filter):
        """One step against a direct evaluation of the KF equations."""
        A, B, H = tuned_filter.A, tuned_filter.B, tuned_filter.H
        P, Q, R = tuned_filter.P.copy(), tuned_filter.Q, tuned_filter.R
        x = np.zeros((4, 1))
        u = np.array([[0.3], [-0.1]])
        z = np.array([[0.05], [0.2]])

        x_pred = A @ x + B @ u
        P_pred = A @ P @ A.T + Q
        S = H @ P_pred @ H.T + R
        K = P_pred @ H.T @ np.linalg.inv(S)
        x_expected = x_pred + K @ (z - H @ x_pred)
        P_expected = (np.eye(4) - K @ H) @ P_pred

        state = tuned_filter.update(u, z)

        assert state.shape == (4, 1)
        np.testing.assert_allclose(state, x_expected)
        np.testing.assert_allclose(tuned_filter.P, P_expected)

    def test_accepts_flat_vectors(self, tuned_filter):
        state = tuned_filter.update(np.zeros(2), np.array([0.1, -0.1]))
        assert state.shape == (4, 1)

    def test_returns_copy(self, tuned_filter):
        state = tuned_filter.update(np.zeros(2), np.array([0.1, 0.1]))
        state[0, 0] = 100.0
        assert tuned_filter.state[0, 0] != 100.0

    def test_converges_to_consistent_measurement(self):
        """Small noise, constant inputs: the estimate tracks the measurement."""
        kalman = LinearKalmanFilter(0.01)
        kalman.set_P_diagonal(1.0)
        kalman.set_Q_diagonal(1e-4)
        kalman.set_R_diagonal(1e-4)
        measurement = np.array([[0.5], [-0.3]])

        for _ in range(3000):
            state = kalman.update(np.zeros((2, 1)), measurement)

        assert np.isclose(roll_from_state(state), 0.5, atol=1e-3)
        assert np.isclose(pitch_from_state(state), -0.3, atol=1e-3)

    def test_rest_fixed_point(self, tuned_filter):
        """Zero rate and zero tilt keep the estimate at zero."""
        for _ in range(200):
            state = tuned_filter.update(np.zeros(2), np.zeros(2))

        np.testing.assert_allclose(state, np.zeros((4, 1)), atol=1e-12)

    def test_covariance_stays_symmetric(self, tuned_filter):
        for _ in range(100):
            tuned_filter.update(np.array([0.1, 0.2]), np.array([0.05, 0.04]))

        np.testing.assert_allclose(tuned_filter.P, tuned_filter.P.T, atol=1e-10)

    def test_zero_measurement_noise_is_singular(self):
        """Zero P and R leave S singular; numpy's error propagates."""
        kalman = LinearKalmanFilter(0.01)
        with pytest.raises(np.linalg.LinAlgError):
            kalman.update(np.zeros(2), np.zeros(2))
