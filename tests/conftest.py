"""Shared fixtures: replayable sensor sources and a fake I2C bus."""

from __future__ import annotations

import itertools
import struct
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest

from sensors import Readout


PROJECT_ROOT = Path(__file__).resolve().parent.parent


class ReplaySensor:
    """SensorSource that cycles through a fixed list of readouts."""

    def __init__(self, readouts: Sequence[Readout]):
        self._readouts = itertools.cycle(list(readouts))
        self.read_count = 0

    def read(self) -> Readout:
        self.read_count += 1
        return next(self._readouts)


class FakeSMBus:
    """Minimal smbus2.SMBus stand-in.

    Records byte writes and serves block reads from canned int16 triples
    keyed by (address, register).
    """

    def __init__(self):
        self.writes: List[Tuple[int, int, int]] = []
        self.blocks: Dict[Tuple[int, int], bytes] = {}
        self.closed = False

    def set_counts(self, address: int, register: int, counts: Sequence[int]):
        self.blocks[(address, register)] = struct.pack('<hhh', *counts)

    def write_byte_data(self, address: int, register: int, value: int):
        self.writes.append((address, register, value))

    def read_i2c_block_data(self, address: int, register: int, length: int):
        if (address, register) not in self.blocks:
            raise OSError(121, "Remote I/O error")
        return list(self.blocks[(address, register)][:length])

    def close(self):
        self.closed = True


@pytest.fixture
def replay_sensor():
    """Factory for ReplaySensor sources."""
    def factory(*readouts: Readout) -> ReplaySensor:
        return ReplaySensor(readouts)
    return factory


@pytest.fixture
def fake_smbus():
    """Fresh FakeSMBus."""
    return FakeSMBus()


@pytest.fixture
def estimator_params_path():
    """Path to the shipped estimator parameters YAML."""
    return str(PROJECT_ROOT / 'config' / 'estimator_params.yaml')
