"""Shared fixtures for the cmdscope tests."""
import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def unit_square():
    """Four corners of the unit square."""
    return np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])


@pytest.fixture
def colinear_points():
    """Three points on a line at 0, 5 and 12."""
    return np.array([[0.0], [5.0], [12.0]])


@pytest.fixture
def triangle_violation():
    """Distances violating the triangle inequality: d(1,2)=1, d(1,3)=1, d(2,3)=10."""
    return np.array([
        [0.0, 1.0, 1.0],
        [1.0, 0.0, 10.0],
        [1.0, 10.0, 0.0]])


@pytest.fixture
def points_3d():
    """10 points in exactly three dimensions."""
    rng = np.random.default_rng(7)
    return rng.normal(size=(10, 3)) * 4.0


@pytest.fixture
def pantry():
    """16 countries x 20 foods, prevalence percentages in [0, 100]."""
    rng = np.random.default_rng(2024)
    countries = [f"country_{i:02d}" for i in range(16)]
    foods = [f"food_{j:02d}" for j in range(20)]
    values = rng.uniform(0, 100, size=(16, 20))
    return pd.DataFrame(values, index=countries, columns=foods)


@pytest.fixture
def matched_pairs():
    """Six objects in three matched pairs at distance 2, all other distances 1.

    Not Euclidean: the spectrum of the Gram matrix is [2, 2, 2, 0, -1, -1].
    """
    D = np.ones((6, 6)) - np.eye(6)
    for i in (0, 2, 4):
        D[i, i + 1] = D[i + 1, i] = 2.0
    return D
