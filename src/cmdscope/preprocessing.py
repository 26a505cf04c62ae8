"""
Module for data pre-processing: input validation, logistic rescaling and
the computation of pairwise distance matrices.
"""

import numpy as np
import pandas as pd
from concurrent.futures import ThreadPoolExecutor
from scipy.spatial.distance import squareform, pdist, cdist
from scipy.special import expit
from .errors import InvalidInputError, InvalidDimensionError

SYMMETRY_TOL = 1e-8

def _as_array(X):
    """Return the values of X as a float array, without copying ndarrays
    that already are float."""
    if isinstance(X, pd.DataFrame):
        X = X.to_numpy()
    try:
        return np.asarray(X, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Input cannot be converted to a real-valued matrix: {e}")

def check_sample_matrix(X):
    """
    Validate a sample matrix of n observations and m features.

    Parameters
    ----------
    X : ndarray or DataFrame of shape (n_samples, n_features)
        Sample matrix.

    Returns
    -------
    ndarray of shape (n_samples, n_features)
        The sample matrix as a float array.

    Raises
    ------
    InvalidInputError
        If X is not two-dimensional, has fewer than two rows or no columns,
        or contains non-finite values.
    """
    X = _as_array(X)
    if X.ndim != 2:
        raise InvalidInputError(f"Sample matrix must be two-dimensional, got {X.ndim} dimension(s).")
    n_samples, n_features = X.shape
    if n_samples < 2:
        raise InvalidInputError(f"At least two samples are required, got {n_samples}.")
    if n_features < 1:
        raise InvalidInputError("Sample matrix must have at least one feature.")
    if not np.all(np.isfinite(X)):
        raise InvalidInputError("Sample matrix contains NaN or infinite values.")
    return X

def check_distance_matrix(D, tol=SYMMETRY_TOL):
    """
    Validate a matrix of pairwise distances.

    Parameters
    ----------
    D : ndarray or DataFrame of shape (n_samples, n_samples)
        Distance matrix.
    tol : float, optional
        Tolerance for symmetry and the zero diagonal, relative to the
        largest distance, by default SYMMETRY_TOL.

    Returns
    -------
    ndarray of shape (n_samples, n_samples)
        The distance matrix as a float array.

    Raises
    ------
    InvalidInputError
        If D is not square, has fewer than two rows, contains non-finite or
        negative entries, has a non-zero diagonal or is not symmetric.
    """
    D = _as_array(D)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise InvalidInputError(f"Distance matrix must be square, got shape {D.shape}.")
    if D.shape[0] < 2:
        raise InvalidInputError(f"At least two samples are required, got {D.shape[0]}.")
    if not np.all(np.isfinite(D)):
        raise InvalidInputError("Distance matrix contains NaN or infinite values.")
    if np.any(D < 0):
        raise InvalidInputError("Distance matrix contains negative entries.")

    scale = max(np.max(D), 1.0)
    if np.max(np.abs(np.diagonal(D))) > tol * scale:
        raise InvalidInputError("Distance matrix must have a zero diagonal.")
    if np.max(np.abs(D - D.T)) > tol * scale:
        raise InvalidInputError("Distance matrix must be symmetric.")
    return D

def check_n_dims(n_dims, n_samples):
    """Validate the target dimensionality against the number of samples.

    Raises
    ------
    InvalidDimensionError
        If n_dims is not an integer in [1, n_samples - 1].
    """
    if isinstance(n_dims, (bool, np.bool_)) or not isinstance(n_dims, (int, np.integer)):
        raise InvalidDimensionError(f"Number of dimensions must be an integer, got {n_dims!r}.")
    if n_dims < 1 or n_dims > n_samples - 1:
        raise InvalidDimensionError(
            f"Number of dimensions must lie in [1, {n_samples - 1}] for {n_samples} samples, got {n_dims}.")
    return int(n_dims)

def check_dims(dims, n_samples):
    """Validate a collection of target dimensionalities, defaulting to 1, ..., n_samples - 1."""
    if dims is None:
        return list(range(1, n_samples))
    dims = [d for d in dims]
    if len(dims) == 0:
        raise InvalidDimensionError("At least one number of dimensions is required.")
    return [check_n_dims(d, n_samples) for d in dims]

def check_labels(labels, n_samples):
    """Validate optional object labels, returned as an array."""
    if labels is None:
        return None
    labels = np.asarray(labels)
    if labels.ndim != 1 or len(labels) != n_samples:
        raise InvalidInputError(
            f"Got {labels.size} labels for {n_samples} samples.")
    return labels

def check_threshold(threshold):
    """Validate a residual threshold as a non-negative, finite number."""
    try:
        value = float(threshold)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Threshold must be a non-negative number, got {threshold!r}.")
    if not np.isfinite(value) or value < 0:
        raise InvalidInputError(f"Threshold must be a non-negative number, got {threshold!r}.")
    return value

def logistic_transform(X, k_shape):
    """
    Rescale percentages with a logistic curve centered at 50.

    Each value x is mapped to f(x) = 100 / (1 + exp(-k_shape * (x - 50))).
    Values near 50 are pulled together and values towards 0 or 100 are
    pushed apart. The transform is elementwise and has no fitting step.

    Parameters
    ----------
    X : ndarray or DataFrame
        Values, typically in [0, 100].
    k_shape : float
        Steepness of the curve. For k_shape > 0 the transform is strictly
        increasing; k_shape = 0 maps every value to 50.

    Returns
    -------
    ndarray or DataFrame
        Transformed values of the same shape. A DataFrame input keeps its
        index and columns.

    Raises
    ------
    InvalidInputError
        If k_shape or any entry of X is not finite.
    """
    try:
        k_shape = float(k_shape)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Steepness k_shape must be a real number, got {k_shape!r}.")
    if not np.isfinite(k_shape):
        raise InvalidInputError(f"Steepness k_shape must be finite, got {k_shape}.")

    values = _as_array(X)
    if not np.all(np.isfinite(values)):
        raise InvalidInputError("Input contains NaN or infinite values.")

    # expit(0) is exactly 0.5, hence f(50) == 50 for any steepness
    transformed = 100.0 * expit(k_shape * (values - 50.0))

    if isinstance(X, pd.DataFrame):
        return pd.DataFrame(transformed, index=X.index, columns=X.columns)
    return transformed

def calc_distances(X, n_jobs=1):
    """
    Calculate matrix of pairwise Euclidean distances among the rows of an input matrix.

    Parameters
    ----------
    X : ndarray or DataFrame of shape (n_samples, n_features)
        Input matrix containing samples for which pairwise distances will be calculated.
    n_jobs : int, optional
        Number of worker threads. If larger than one, row blocks of the
        distance matrix are computed in parallel, by default 1.

    Returns
    -------
    ndarray of shape (n_samples, n_samples)
        A symmetric matrix of pairwise distances with zero diagonal, where
        element (i, j) is the Euclidean distance between rows i and j of X.

    Raises
    ------
    InvalidInputError
        If X is not a valid sample matrix.
    """
    X = check_sample_matrix(X)
    n_samples = X.shape[0]

    if n_jobs is None or n_jobs <= 1 or n_samples < 2 * n_jobs:
        return squareform(pdist(X, metric='euclidean'))

    bounds = np.linspace(0, n_samples, n_jobs + 1).astype(int)
    blocks = list(zip(bounds[:-1], bounds[1:]))
    with ThreadPoolExecutor(max_workers=n_jobs) as executor:
        parts = list(executor.map(lambda b: cdist(X[b[0]:b[1]], X, metric='euclidean'), blocks))

    D = np.vstack(parts)
    # Enforce exact symmetry and zero diagonal, as in the serial path
    D = np.triu(D, k=1)
    return D + D.T
