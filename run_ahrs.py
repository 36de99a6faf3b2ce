#!/usr/bin/env python3
"""Main entry point to run the attitude estimator on the Balboa robot.

Reads the on-board gyroscope, accelerometer and magnetometer over I2C,
calibrates sensor bias with the robot at rest, then prints roll, pitch
and yaw at a fixed rate.

Examples:
    # Run at 100 Hz until Ctrl+C
    python run_ahrs.py

    # Run for 30 seconds at 50 Hz
    python run_ahrs.py --frequency 50 --duration 30

    # Use custom tuning
    python run_ahrs.py --estimator-params config/estimator_params.yaml
"""

import argparse
import logging
import sys

from hardware import load_hardware_estimator, HardwareAttitudeLoop


def parse_args():
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Kalman AHRS attitude estimator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Hardware parameters
    parser.add_argument(
        '--bus',
        type=int,
        default=1,
        help='I2C bus number (default: 1)'
    )

    # Loop parameters
    parser.add_argument(
        '--frequency',
        type=float,
        default=100.0,
        help='Estimation loop frequency in Hz (default: 100.0)'
    )
    parser.add_argument(
        '--duration',
        type=float,
        default=None,
        help='Run duration in seconds (default: run until Ctrl+C)'
    )

    # Configuration
    parser.add_argument(
        '--estimator-params',
        type=str,
        default='config/estimator_params.yaml',
        help='Path to estimator parameters YAML'
    )
    parser.add_argument(
        '--skip-calibration',
        action='store_true',
        help='Do not calibrate sensor bias at startup'
    )

    # Logging
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Disable progress logging'
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("KALMAN AHRS - Attitude Estimator")
    print("=" * 60)
    print(f"I2C bus:        {args.bus}")
    print(f"Frequency:      {args.frequency:.1f} Hz")
    print(f"Duration:       {args.duration if args.duration else 'unlimited'}")
    print(f"Parameters:     {args.estimator_params}")
    print("=" * 60)
    print()

    print(f"Connecting to IMU on I2C bus {args.bus}...")
    try:
        estimator, i2c_interface, config = load_hardware_estimator(
            estimator_params_path=args.estimator_params,
            bus=args.bus,
        )
        print("✓ IMU connected")
    except (OSError, ValueError, TypeError) as e:
        print(f"✗ Failed to start estimator: {e}")
        print("\nTroubleshooting:")
        print("  - Check I2C is enabled: sudo raspi-config > Interface Options > I2C")
        print("  - Test I2C detection: sudo i2cdetect -y 1 (expect 0x1e and 0x6b)")
        sys.exit(1)

    try:
        if not args.skip_calibration:
            print("Calibrating (keep robot stationary)...")
            estimator.calibrate(config)
            print("✓ Calibration complete")
            print(f"  Gyro bias:  {estimator.gyro.bias}")
            print(f"  Accel bias: {estimator.accelerometer.bias}")
            print(f"  Mag offset: {estimator.magnetometer.bias}")
        print()

        loop = HardwareAttitudeLoop(
            estimator,
            target_frequency_hz=args.frequency,
            log_every_n=0 if args.quiet else int(args.frequency),
        )
        stats = loop.run(duration_s=args.duration)

        print()
        print("=" * 60)
        print(f"Iterations:        {stats.iterations}")
        print(f"Avg update time:   {stats.avg_loop_time_ms:.3f} ms")
        print(f"Max update time:   {stats.max_loop_time_ms:.3f} ms")
        print(f"Avg dt:            {stats.avg_dt_ms:.3f} ms")
        print(f"Timing violations: {stats.timing_violations}")
        print(f"Final attitude:    {estimator.attitude_deg} (roll pitch yaw, deg)")
        print("=" * 60)
    finally:
        print("\nClosing I2C connection...")
        i2c_interface.close()
        print("✓ Done")


if __name__ == '__main__':
    main()
