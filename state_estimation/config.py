"""Attitude estimator configuration parameters.

Single source of truth for estimator tuning and calibration settings.
See config/estimator_params.yaml for parameter values.
"""

from dataclasses import dataclass, field
from typing import Tuple

import yaml

from state_estimation._internal.validation import (
    validate_positive,
    validate_non_negative,
    validate_positive_integer,
)


DEFAULT_ESTIMATE_COVARIANCE_DIAGONAL = 1.0
DEFAULT_PROCESS_NOISE_DIAGONAL = 0.001
DEFAULT_MEASUREMENT_NOISE_DIAGONAL = 0.03
STANDARD_GRAVITY_MPS2 = 9.81


@dataclass(frozen=True)
class EstimatorConfig:
    """Configuration parameters for the attitude estimator.

    All parameters immutable after construction (frozen=True).
    Units encoded in parameter names.

    Attributes:
        sampling_period_s: Nominal time between updates (dt)
        estimate_covariance_diagonal: Initial diagonal of P
        process_noise_diagonal: Diagonal of Q. Larger values trust the
            gyroscope less and track the accelerometer faster.
        measurement_noise_diagonal: Diagonal of R. Larger values trust
            the accelerometer less and give smoother output.
        imu_calibration_samples: Samples averaged for gyro/accel bias
        mag_calibration_samples: Samples used for magnetometer offset
        accelerometer_rest_reading_mps2: Ideal accelerometer reading at
            rest, preserved through calibration
    """

    sampling_period_s: float
    estimate_covariance_diagonal: float = DEFAULT_ESTIMATE_COVARIANCE_DIAGONAL
    process_noise_diagonal: float = DEFAULT_PROCESS_NOISE_DIAGONAL
    measurement_noise_diagonal: float = DEFAULT_MEASUREMENT_NOISE_DIAGONAL
    imu_calibration_samples: int = 100
    mag_calibration_samples: int = 100
    accelerometer_rest_reading_mps2: Tuple[float, float, float] = field(
        default=(0.0, 0.0, STANDARD_GRAVITY_MPS2)
    )

    def __post_init__(self) -> None:
        """Validate parameters satisfy constraints."""
        validate_positive(self.sampling_period_s, 'sampling_period_s')
        validate_non_negative(
            self.estimate_covariance_diagonal, 'estimate_covariance_diagonal'
        )
        validate_non_negative(
            self.process_noise_diagonal, 'process_noise_diagonal'
        )
        # Zero R makes the innovation covariance singular
        validate_positive(
            self.measurement_noise_diagonal, 'measurement_noise_diagonal'
        )
        validate_positive_integer(
            self.imu_calibration_samples, 'imu_calibration_samples'
        )
        validate_positive_integer(
            self.mag_calibration_samples, 'mag_calibration_samples'
        )

        rest_reading = tuple(
            float(value) for value in self.accelerometer_rest_reading_mps2
        )
        if len(rest_reading) != 3:
            raise ValueError(
                f"accelerometer_rest_reading_mps2 must have 3 values, "
                f"got {len(rest_reading)}"
            )
        object.__setattr__(
            self, 'accelerometer_rest_reading_mps2', rest_reading
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'EstimatorConfig':
        """Load configuration from YAML file.

        Keys missing from the file keep their defaults, except
        sampling_period_s which is required.

        Args:
            yaml_path: Path to YAML file containing estimator parameters

        Returns:
            EstimatorConfig instance

        Raises:
            FileNotFoundError: If YAML file does not exist
            TypeError: If sampling_period_s is missing or a key is unknown
            ValueError: If parameters are invalid
        """
        with open(yaml_path, 'r') as file:
            # An empty file loads as None
            config = yaml.safe_load(file) or {}

        return cls(**config)
