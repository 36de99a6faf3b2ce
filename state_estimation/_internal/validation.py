"""Runtime contract validation utilities.

Internal module for parameter and input validation at construction and
configuration time. The per-cycle numeric path is not validated.
"""


def validate_positive(value: float, name: str) -> None:
    """Validate that a value is strictly positive.

    Args:
        value: Value to validate
        name: Parameter name for error message

    Raises:
        ValueError: If value <= 0
    """
    if value <= 0:
        raise ValueError(
            f"{name} must be positive, got {value}"
        )


def validate_non_negative(value: float, name: str) -> None:
    """Validate that a value is non-negative.

    Args:
        value: Value to validate
        name: Parameter name for error message

    Raises:
        ValueError: If value < 0
    """
    if value < 0:
        raise ValueError(
            f"{name} must be non-negative, got {value}"
        )


def validate_positive_integer(value: int, name: str) -> None:
    """Validate that a value is a positive integer.

    Raises:
        ValueError: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value}")
