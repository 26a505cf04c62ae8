"""Tests for distance computation, logistic rescaling and input validation."""
import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from cmdscope.errors import InvalidDimensionError, InvalidInputError
from cmdscope.preprocessing import (
    calc_distances, check_dims, check_distance_matrix, check_labels, check_n_dims,
    check_sample_matrix, check_threshold, logistic_transform)


# ---------------------------------------------------------------------------
# Distances
# ---------------------------------------------------------------------------

class TestCalcDistances:

    def test_unit_square(self, unit_square):
        D = calc_distances(unit_square)
        expected = np.array([
            [0, 1, 1, np.sqrt(2)],
            [1, 0, np.sqrt(2), 1],
            [1, np.sqrt(2), 0, 1],
            [np.sqrt(2), 1, 1, 0]])
        assert_allclose(D, expected, atol=1e-12)

    def test_symmetric_zero_diagonal_nonnegative(self, pantry):
        D = calc_distances(pantry)
        assert D.shape == (16, 16)
        assert_array_equal(D, D.T)
        assert_array_equal(np.diagonal(D), 0)
        assert np.all(D >= 0)

    def test_threaded_blocks_match_serial(self, pantry):
        serial = calc_distances(pantry)
        threaded = calc_distances(pantry, n_jobs=3)
        assert_allclose(threaded, serial, rtol=1e-12)
        assert_array_equal(threaded, threaded.T)
        assert_array_equal(np.diagonal(threaded), 0)

    def test_does_not_modify_input(self, unit_square):
        before = unit_square.copy()
        calc_distances(unit_square)
        assert_array_equal(unit_square, before)

    @pytest.mark.parametrize('X', [
        np.zeros((1, 3)),
        np.zeros(5),
        np.zeros((4, 0)),
        np.array([[0.0, 1.0], [np.nan, 2.0]]),
    ])
    def test_rejects_invalid_samples(self, X):
        with pytest.raises(InvalidInputError):
            calc_distances(X)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            check_sample_matrix(np.zeros((1, 2)))


class TestCheckDistanceMatrix:

    def test_accepts_valid(self, triangle_violation):
        D = check_distance_matrix(triangle_violation)
        assert_array_equal(D, triangle_violation)

    def test_accepts_dataframe(self, triangle_violation):
        df = pd.DataFrame(triangle_violation, index=list('abc'), columns=list('abc'))
        assert_array_equal(check_distance_matrix(df), triangle_violation)

    def test_rejects_non_square(self):
        with pytest.raises(InvalidInputError, match="square"):
            check_distance_matrix(np.zeros((3, 2)))

    def test_rejects_single_sample(self):
        with pytest.raises(InvalidInputError):
            check_distance_matrix(np.zeros((1, 1)))

    def test_rejects_negative(self):
        D = np.array([[0.0, -1.0], [-1.0, 0.0]])
        with pytest.raises(InvalidInputError, match="negative"):
            check_distance_matrix(D)

    def test_rejects_asymmetric(self):
        D = np.array([[0.0, 1.0, 2.0], [1.0, 0.0, 3.0], [2.5, 3.0, 0.0]])
        with pytest.raises(InvalidInputError, match="symmetric"):
            check_distance_matrix(D)

    def test_tolerates_rounding_asymmetry(self):
        D = np.array([[0.0, 1.0], [1.0 + 1e-13, 0.0]])
        check_distance_matrix(D)

    def test_rejects_nonzero_diagonal(self):
        D = np.array([[1.0, 1.0], [1.0, 0.0]])
        with pytest.raises(InvalidInputError, match="diagonal"):
            check_distance_matrix(D)

    def test_rejects_infinite(self):
        D = np.array([[0.0, np.inf], [np.inf, 0.0]])
        with pytest.raises(InvalidInputError):
            check_distance_matrix(D)


# ---------------------------------------------------------------------------
# Logistic transform
# ---------------------------------------------------------------------------

class TestLogisticTransform:

    @pytest.mark.parametrize('k_shape', [-1.0, 0.0, 0.05, 0.1, 3.0, 100.0])
    def test_fixed_point_at_fifty(self, k_shape):
        assert logistic_transform(np.array([50.0]), k_shape)[0] == 50.0

    def test_zero_steepness_is_constant(self):
        x = np.linspace(0, 100, 21)
        assert_array_equal(logistic_transform(x, 0.0), np.full_like(x, 50.0))

    @pytest.mark.parametrize('k_shape', [0.01, 0.1, 0.2])
    def test_strictly_increasing(self, k_shape):
        x = np.linspace(0, 100, 201)
        assert np.all(np.diff(logistic_transform(x, k_shape)) > 0)

    def test_formula(self):
        x = np.array([[0.0, 25.0], [60.0, 100.0]])
        expected = 100.0 / (1.0 + np.exp(-0.1 * (x - 50.0)))
        assert_allclose(logistic_transform(x, 0.1), expected, rtol=1e-12)

    def test_elementwise(self):
        X = np.array([[10.0, 90.0], [40.0, 70.0]])
        full = logistic_transform(X, 0.1)
        for i in range(2):
            for j in range(2):
                assert full[i, j] == pytest.approx(logistic_transform(np.array([X[i, j]]), 0.1)[0], rel=1e-15)

    def test_no_overflow_for_steep_curves(self):
        out = logistic_transform(np.array([0.0, 100.0]), 1000.0)
        assert_allclose(out, [0.0, 100.0])

    def test_dataframe_keeps_labels(self, pantry):
        out = logistic_transform(pantry, 0.1)
        assert isinstance(out, pd.DataFrame)
        assert list(out.index) == list(pantry.index)
        assert list(out.columns) == list(pantry.columns)
        assert out.shape == pantry.shape

    def test_does_not_modify_input(self, pantry):
        before = pantry.copy()
        logistic_transform(pantry, 0.2)
        pd.testing.assert_frame_equal(pantry, before)

    @pytest.mark.parametrize('k_shape', [np.nan, np.inf, 'steep', None, [0.1, 0.2]])
    def test_rejects_invalid_steepness(self, k_shape):
        with pytest.raises(InvalidInputError):
            logistic_transform(np.array([1.0]), k_shape)

    def test_accepts_integer_steepness(self):
        assert_allclose(logistic_transform(np.array([50.0, 51.0]), 1), [50.0, 100.0 * (1 / (1 + np.exp(-1.0)))])

    def test_rejects_non_finite_values(self):
        with pytest.raises(InvalidInputError):
            logistic_transform(np.array([1.0, np.nan]), 0.1)


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------

class TestParameterChecks:

    @pytest.mark.parametrize('n_dims', [0, 4, -1, 1.0, True, '2', None])
    def test_rejects_invalid_n_dims(self, n_dims):
        with pytest.raises(InvalidDimensionError):
            check_n_dims(n_dims, 4)

    def test_accepts_numpy_integer(self):
        assert check_n_dims(np.int64(3), 4) == 3

    def test_dims_default_range(self):
        assert check_dims(None, 5) == [1, 2, 3, 4]

    def test_dims_keep_order(self):
        assert check_dims((3, 1), 5) == [3, 1]

    @pytest.mark.parametrize('dims', [[], [1, 5], [2, 1.5]])
    def test_rejects_invalid_dims(self, dims):
        with pytest.raises(InvalidDimensionError):
            check_dims(dims, 5)

    def test_labels(self):
        assert check_labels(None, 3) is None
        assert_array_equal(check_labels(['a', 'b', 'c'], 3), ['a', 'b', 'c'])
        with pytest.raises(InvalidInputError):
            check_labels(['a', 'b'], 3)

    def test_threshold(self):
        assert check_threshold(0) == 0.0
        assert check_threshold(np.float32(2.5)) == 2.5
        for value in (-1.0, np.nan, 'wide', None):
            with pytest.raises(InvalidInputError):
                check_threshold(value)
