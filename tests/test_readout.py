"""Unit tests for the Readout value type."""

import dataclasses

import numpy as np
import pytest

from sensors import Readout


@pytest.fixture
def a():
    return Readout(1.5, -2.25, 3.0)


@pytest.fixture
def b():
    return Readout(0.5, 4.0, -1.25)


class TestReadoutArithmetic:
    """Tests for element-wise operators."""

    def test_add_readout(self, a, b):
        assert a + b == Readout(2.0, 1.75, 1.75)

    def test_subtract_scalar(self, a):
        assert a - 1.0 == Readout(0.5, -3.25, 2.0)

    def test_multiply_readout(self, a, b):
        assert a * b == Readout(0.75, -9.0, -3.75)

    def test_divide_scalar(self, a):
        assert a / 2.0 == Readout(0.75, -1.125, 1.5)

    def test_add_then_subtract_restores(self, a, b):
        result = (a + b) - b
        assert np.allclose(result.to_array(), a.to_array())

    def test_scale_then_divide_restores(self, a):
        result = (a * 3.7) / 3.7
        assert np.allclose(result.to_array(), a.to_array())

    def test_self_sum_equals_double(self, a):
        assert a + a == a * 2

    def test_negation(self, a):
        assert -a == Readout(-1.5, 2.25, -3.0)

    def test_operands_not_mutated(self, a, b):
        a_before = Readout(a.x, a.y, a.z)
        _ = a + b
        _ = a * 4.0
        assert a == a_before

    def test_compound_assignment_rebinds(self, a, b):
        original = a
        total = a
        total += b
        assert total == a + b
        assert original == Readout(1.5, -2.25, 3.0)


class TestReadoutEquality:
    """Tests for exact field-wise comparison."""

    def test_equal_fields(self):
        assert Readout(1.0, 2.0, 3.0) == Readout(1.0, 2.0, 3.0)

    def test_single_field_differs(self):
        assert Readout(1.0, 2.0, 3.0) != Readout(1.0, 2.0, 3.0 + 1e-12)

    def test_no_tolerance(self):
        assert Readout(0.1 + 0.2, 0.0, 0.0) != Readout(0.3, 0.0, 0.0)


class TestReadoutConversions:
    """Tests for array conversion and formatting."""

    def test_immutable(self, a):
        with pytest.raises(dataclasses.FrozenInstanceError):
            a.x = 10.0

    def test_to_array(self, a):
        np.testing.assert_array_equal(a.to_array(), np.array([1.5, -2.25, 3.0]))

    def test_from_array(self):
        assert Readout.from_array(np.array([1.0, 2.0, 3.0])) == Readout(1.0, 2.0, 3.0)

    def test_from_array_wrong_length_raises(self):
        with pytest.raises(ValueError, match="exactly 3 values"):
            Readout.from_array([1.0, 2.0])

    def test_unpacking(self, a):
        x, y, z = a
        assert (x, y, z) == (1.5, -2.25, 3.0)

    def test_str_is_space_separated(self):
        assert str(Readout(1.0, -2.5, 3.0)) == "1.0 -2.5 3.0"

    def test_zero(self):
        assert Readout.zero() == Readout(0.0, 0.0, 0.0)
