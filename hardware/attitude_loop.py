"""Fixed-rate attitude estimation loop for hardware.

This module provides the host loop that:
- Calls the estimator at a target frequency
- Feeds the measured time between iterations as dt
- Monitors timing and reports progress
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from sensors import Readout
from state_estimation import AttitudeEstimator


logger = logging.getLogger(__name__)


@dataclass
class AttitudeLoopStats:
    """Statistics from loop execution.

    Attributes:
        iterations: Total loop iterations
        avg_loop_time_ms: Average estimator update time (milliseconds)
        max_loop_time_ms: Maximum estimator update time (milliseconds)
        avg_dt_ms: Average measured sample interval (milliseconds)
        timing_violations: Count of iterations exceeding target period
    """
    iterations: int = 0
    avg_loop_time_ms: float = 0.0
    max_loop_time_ms: float = 0.0
    avg_dt_ms: float = 0.0
    timing_violations: int = 0


class HardwareAttitudeLoop:
    """Run an AttitudeEstimator at a fixed rate with measured dt.

    Example:
        >>> imu = BalboaImuI2CInterface(bus=1)
        >>> estimator = AttitudeEstimator(
        ...     imu.gyroscope, imu.accelerometer, imu.magnetometer, 0.01
        ... )
        >>> loop = HardwareAttitudeLoop(estimator, target_frequency_hz=100.0)
        >>> loop.run(duration_s=10.0)
    """

    def __init__(self,
                 estimator: AttitudeEstimator,
                 target_frequency_hz: float = 100.0,
                 log_every_n: int = 100,
                 clock: Callable[[], float] = time.perf_counter,
                 sleep: Callable[[float], None] = time.sleep):
        """Initialize the loop.

        Args:
            estimator: Attitude estimator to drive
            target_frequency_hz: Target loop frequency (default 100 Hz)
            log_every_n: Log progress every N iterations (0 disables)
            clock: Monotonic time source in seconds
            sleep: Sleep function in seconds

        Raises:
            ValueError: If target_frequency_hz is not positive
        """
        if target_frequency_hz <= 0:
            raise ValueError(
                f"target_frequency_hz must be positive, got {target_frequency_hz}"
            )

        self.estimator = estimator
        self.target_period_s = 1.0 / target_frequency_hz
        self.log_every_n = log_every_n

        self._clock = clock
        self._sleep = sleep

        self.stats = AttitudeLoopStats()
        self._running = False
        self._total_loop_time_ms = 0.0
        self._total_dt_ms = 0.0

    def run(self,
            duration_s: Optional[float] = None,
            on_attitude: Optional[Callable[[Readout], None]] = None
            ) -> AttitudeLoopStats:
        """Execute the estimation loop.

        Args:
            duration_s: Run duration in seconds (None = until stop() or
                KeyboardInterrupt)
            on_attitude: Called with each new Readout(roll, pitch, yaw)

        Returns:
            AttitudeLoopStats: Statistics from loop execution
        """
        self._running = True
        start_time = self._clock()
        previous_start_time: Optional[float] = None

        logger.info(
            "Starting attitude loop at %.1f Hz", 1.0 / self.target_period_s
        )

        try:
            while self._running:
                loop_start_time = self._clock()

                if duration_s is not None and loop_start_time - start_time >= duration_s:
                    logger.info("Reached duration limit (%.1fs)", duration_s)
                    break

                if previous_start_time is None:
                    dt = self.target_period_s
                else:
                    dt = loop_start_time - previous_start_time
                previous_start_time = loop_start_time

                attitude = self.estimator.update(dt)
                loop_time_ms = (self._clock() - loop_start_time) * 1000.0

                self._update_stats(loop_time_ms, dt * 1000.0)

                if on_attitude is not None:
                    on_attitude(attitude)

                if self.log_every_n and self.stats.iterations % self.log_every_n == 0:
                    logger.info(
                        "Iter %d | roll %7.2f pitch %7.2f yaw %7.2f deg | "
                        "loop %.2f ms",
                        self.stats.iterations,
                        attitude.x, attitude.y, attitude.z,
                        loop_time_ms,
                    )

                sleep_time = self.target_period_s - (self._clock() - loop_start_time)
                if sleep_time > 0:
                    self._sleep(sleep_time)
                else:
                    self.stats.timing_violations += 1
                    logger.warning(
                        "Iteration %d overran target period by %.2f ms",
                        self.stats.iterations, -sleep_time * 1000.0,
                    )

        except KeyboardInterrupt:
            logger.info("Attitude loop stopped by user")

        finally:
            self._running = False

        return self.stats

    def _update_stats(self, loop_time_ms: float, dt_ms: float) -> None:
        """Fold one iteration into the running statistics."""
        self.stats.iterations += 1
        self._total_loop_time_ms += loop_time_ms
        self._total_dt_ms += dt_ms

        self.stats.avg_loop_time_ms = (
            self._total_loop_time_ms / self.stats.iterations
        )
        self.stats.avg_dt_ms = self._total_dt_ms / self.stats.iterations
        self.stats.max_loop_time_ms = max(
            self.stats.max_loop_time_ms, loop_time_ms
        )

    def stop(self) -> None:
        """Request the loop to exit after the current iteration."""
        self._running = False
