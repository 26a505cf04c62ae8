"""
Module for evaluating maps: goodness-of-fit derived from the eigenvalue
spectrum and residual analysis of the distances a map induces.
"""

import warnings
from collections import namedtuple
import numpy as np
import pandas as pd
from numba import jit
from scipy.spatial.distance import squareform, pdist
from .errors import InvalidInputError, DegenerateInputError, NonMonotonicFitWarning
from .preprocessing import (
    check_distance_matrix, check_n_dims, check_dims, check_labels, check_threshold)

RTOL = 1e-10

ResidualReport = namedtuple(
    'ResidualReport',
    ['residuals', 'variance', 'max_abs', 'outliers', 'nonpositive_share', 'stress'])

OUTLIER_COLUMNS = ['i', 'j', 'distance', 'induced_distance', 'residual']

def _clean_spectrum(eigenvalues, rtol=RTOL):
    """Return a copy of the eigenvalues with numerical zeros set to exactly zero."""
    evals = np.asarray(eigenvalues, dtype=np.float64).ravel().copy()
    if evals.size < 2:
        raise InvalidInputError("Eigenvalue spectrum must contain at least two values.")
    if not np.all(np.isfinite(evals)):
        raise InvalidInputError("Eigenvalue spectrum contains NaN or infinite values.")
    scale = np.max(np.abs(evals))
    evals[np.abs(evals) <= rtol * scale] = 0.0
    if not np.any(evals != 0):
        raise DegenerateInputError("Eigenvalue spectrum is zero; goodness-of-fit is undefined.")
    return evals

def _gof_arrays(evals):
    """Cumulative GOF_abs and GOF_pos for all numbers of dimensions 1..n."""
    positive = np.maximum(evals, 0)
    gof_abs = np.cumsum(evals) / np.sum(np.abs(evals))
    total_pos = np.sum(positive)
    if total_pos > 0:
        gof_pos = np.cumsum(positive) / total_pos
    else:
        gof_pos = np.zeros_like(evals)
    return gof_abs, gof_pos

def _warn_decreasing(k_first):
    warnings.warn(
        f"GOF_abs decreases from {k_first} dimensions on, as negative eigenvalues enter the sum.",
        NonMonotonicFitWarning)

def count_negative(eigenvalues, rtol=RTOL):
    """Number of eigenvalues that are negative beyond numerical noise."""
    return int(np.sum(_clean_spectrum(eigenvalues, rtol) < 0))

def gof_score(eigenvalues, n_dims, rtol=RTOL):
    """
    Calculate the goodness-of-fit of a classical MDS solution.

    Two variants are computed from the eigenvalue spectrum lambda_1 >= ... >= lambda_n:

    - GOF_abs(k) = sum(lambda_1..lambda_k) / sum(|lambda_i|)
    - GOF_pos(k) = sum(max(lambda_1..lambda_k, 0)) / sum(max(lambda_i, 0))

    Both coincide when no eigenvalue is negative. If lambda_k < 0 (k > 1),
    GOF_abs is lower than for k - 1 and a NonMonotonicFitWarning is issued.

    Parameters
    ----------
    eigenvalues : ndarray of shape (n_samples,)
        Full eigenvalue spectrum, sorted in descending order.
    n_dims : int
        Number of dimensions k, in [1, n_samples - 1].
    rtol : float, optional
        Eigenvalues with absolute value below rtol times the largest absolute
        eigenvalue are treated as exact zeros, by default 1e-10.

    Returns
    -------
    tuple of float
        (GOF_abs, GOF_pos), both typically within [0, 1].
        Higher values indicate better fit.

    Raises
    ------
    InvalidDimensionError
        If n_dims lies outside [1, n_samples - 1].
    DegenerateInputError
        If all eigenvalues are zero.
    """
    evals = _clean_spectrum(eigenvalues, rtol)
    n_dims = check_n_dims(n_dims, len(evals))
    if n_dims > 1 and evals[n_dims - 1] < 0:
        _warn_decreasing(n_dims)
    gof_abs, gof_pos = _gof_arrays(evals)
    return float(gof_abs[n_dims - 1]), float(gof_pos[n_dims - 1])

def gof_curve(eigenvalues, dims=None, rtol=RTOL):
    """
    Calculate the goodness-of-fit curve over a range of dimensions.

    The curve is a data product for choosing the number of dimensions
    (e.g., via a scree/elbow inspection); no dimensionality is selected here.
    GOF_pos is non-decreasing in k. GOF_abs decreases once negative
    eigenvalues enter the sum; in that case a NonMonotonicFitWarning is
    issued and the affected rows are flagged in column 'abs_decreasing'.

    Parameters
    ----------
    eigenvalues : ndarray of shape (n_samples,)
        Full eigenvalue spectrum, sorted in descending order.
    dims : iterable of int, optional
        Numbers of dimensions to evaluate, by default 1, ..., n_samples - 1.
    rtol : float, optional
        Relative tolerance below which eigenvalues count as zero, by default 1e-10.

    Returns
    -------
    DataFrame
        Indexed by 'n_dims', with columns 'gof_abs', 'gof_pos' and
        'abs_decreasing' (True where GOF_abs fell relative to k - 1).
    """
    evals = _clean_spectrum(eigenvalues, rtol)
    dims = check_dims(dims, len(evals))

    gof_abs, gof_pos = _gof_arrays(evals)
    idx = np.asarray(dims, dtype=int) - 1
    # GOF_abs(k) < GOF_abs(k-1) exactly when lambda_k < 0
    decreasing = (evals[idx] < 0) & (idx > 0)

    if np.any(decreasing):
        _warn_decreasing(int(idx[decreasing][0]) + 1)

    curve = pd.DataFrame({
        'gof_abs': gof_abs[idx],
        'gof_pos': gof_pos[idx],
        'abs_decreasing': decreasing},
        index=pd.Index(dims, name='n_dims'))
    return curve

def induced_distances(Y):
    """
    Calculate the Euclidean distances among map coordinates.

    Parameters
    ----------
    Y : ndarray of shape (n_samples, n_dims)
        Map coordinates.

    Returns
    -------
    ndarray of shape (n_samples, n_samples)
        Pairwise distances implied by the map.
    """
    Y = np.asarray(Y, dtype=np.float64)
    if Y.ndim == 1:
        Y = Y.reshape(-1, 1)
    if Y.ndim != 2 or Y.shape[0] < 2:
        raise InvalidInputError(f"Map coordinates must be of shape (n_samples, n_dims) with n_samples >= 2, got {Y.shape}.")
    return squareform(pdist(Y, metric='euclidean'))

def residual_matrix(D, Y):
    """
    Calculate the residual matrix E = D_map - D of a map.

    Parameters
    ----------
    D : ndarray of shape (n_samples, n_samples)
        Original distance matrix.
    Y : ndarray of shape (n_samples, n_dims)
        Map coordinates.

    Returns
    -------
    ndarray of shape (n_samples, n_samples)
        Symmetric residual matrix with zero diagonal. Negative entries mark
        pairs the map places closer together than the input distances.

    Raises
    ------
    InvalidInputError
        If D is not a valid distance matrix or Y does not match its size.
    """
    D = check_distance_matrix(D)
    D_map = induced_distances(Y)
    if D_map.shape != D.shape:
        raise InvalidInputError(
            f"Map has {D_map.shape[0]} samples, distance matrix has {D.shape[0]}.")
    E = D_map - D
    # Zero diagonal and exact symmetry, regardless of tolerated noise in D
    E = np.triu(E, k=1)
    return E + E.T

@jit(nopython=True)
def _exceeding_pairs(E, threshold):
    """Collect upper-triangle pairs (i, j) with |E[i, j]| > threshold.

    Returns
    -------
    ndarray of shape (n_pairs, 2)
        Pair indices in row-major order.
    """
    n_samples = E.shape[0]
    count = 0
    for i in range(n_samples):
        for j in range(i + 1, n_samples):
            if abs(E[i, j]) > threshold:
                count += 1

    pairs = np.empty((count, 2), dtype=np.int64)
    k = 0
    for i in range(n_samples):
        for j in range(i + 1, n_samples):
            if abs(E[i, j]) > threshold:
                pairs[k, 0] = i
                pairs[k, 1] = j
                k += 1
    return pairs

def outlier_pairs(D, Y, threshold, labels=None):
    """
    List the pairs of objects whose map distance deviates from the input
    distance by more than a threshold.

    Parameters
    ----------
    D : ndarray of shape (n_samples, n_samples)
        Original distance matrix.
    Y : ndarray of shape (n_samples, n_dims)
        Map coordinates.
    threshold : float
        Pairs with |residual| strictly greater than threshold are reported.
    labels : sequence of length n_samples, optional
        Object labels, attached as columns 'label_i' and 'label_j'.

    Returns
    -------
    DataFrame
        One row per pair (i < j), with columns 'i', 'j', 'distance',
        'induced_distance', 'residual' (and labels, if provided), sorted by
        absolute residual in descending order.
    """
    D = check_distance_matrix(D)
    labels = check_labels(labels, D.shape[0])
    E = residual_matrix(D, Y)
    return _outlier_frame(D, E, threshold, labels)

def _outlier_columns(labels):
    if labels is None:
        return OUTLIER_COLUMNS
    return OUTLIER_COLUMNS + ['label_i', 'label_j']

def _outlier_frame(D, E, threshold, labels=None):
    pairs = _exceeding_pairs(E, check_threshold(threshold))
    i, j = pairs[:, 0], pairs[:, 1]
    df = pd.DataFrame({
        'i': i,
        'j': j,
        'distance': D[i, j],
        'induced_distance': D[i, j] + E[i, j],
        'residual': E[i, j]})
    if labels is not None:
        df['label_i'] = labels[i]
        df['label_j'] = labels[j]

    order = np.argsort(-np.abs(df['residual'].to_numpy()), kind='stable')
    return df.iloc[order].reset_index(drop=True)

def stress_score(D, Y):
    """
    Calculate Kruskal's Stress-1 of a map.

    Stress-1 = sqrt( sum (D_map - D)^2 / sum D^2 ), summed over all pairs.

    Parameters
    ----------
    D : ndarray of shape (n_samples, n_samples)
        Original distance matrix.
    Y : ndarray of shape (n_samples, n_dims)
        Map coordinates.

    Returns
    -------
    float
        Stress, bounded within [0, inf). Lower values indicate better fit.
    """
    D = check_distance_matrix(D)
    E = residual_matrix(D, Y)
    return _stress(D, E)

def _stress(D, E):
    iu = np.triu_indices(D.shape[0], k=1)
    denom = np.sum(D[iu] ** 2)
    if denom == 0:
        raise DegenerateInputError("All pairwise distances are zero; stress is undefined.")
    return float(np.sqrt(np.sum(E[iu] ** 2) / denom))

def residual_report(D, Y, threshold=None, labels=None, atol=1e-9):
    """
    Compare the distances induced by a map to the original distances.

    Classical MDS with a limited number of dimensions tends to shrink
    distances (D_map <= D) as long as the discarded eigenvalues are
    positive. The share of non-positive residuals is reported as an
    observation; negative discarded eigenvalues can produce positive
    residuals.

    Parameters
    ----------
    D : ndarray of shape (n_samples, n_samples)
        Original distance matrix.
    Y : ndarray of shape (n_samples, n_dims)
        Map coordinates.
    threshold : float, optional
        If provided, pairs with |residual| above threshold are listed in
        'outliers', by default None (empty outlier table).
    labels : sequence of length n_samples, optional
        Object labels attached to the outlier table.
    atol : float, optional
        Residuals up to atol (relative to the largest distance) count as
        non-positive, by default 1e-9.

    Returns
    -------
    ResidualReport
        residuals : ndarray of shape (n_samples, n_samples), read-only
        variance : float, population variance of the pairwise residuals
        max_abs : float, largest absolute residual
        outliers : DataFrame, see `outlier_pairs`
        nonpositive_share : float, share of pairs with D_map <= D
        stress : float, Kruskal's Stress-1
    """
    D = check_distance_matrix(D)
    labels = check_labels(labels, D.shape[0])
    E = residual_matrix(D, Y)
    iu = np.triu_indices(D.shape[0], k=1)
    upper = E[iu]

    if threshold is None:
        outliers = pd.DataFrame(columns=_outlier_columns(labels))
    else:
        outliers = _outlier_frame(D, E, threshold, labels)

    scale = max(np.max(D), 1.0)
    E.setflags(write=False)
    return ResidualReport(
        residuals=E,
        variance=float(np.var(upper)),
        max_abs=float(np.max(np.abs(upper))),
        outliers=outliers,
        nonpositive_share=float(np.mean(upper <= atol * scale)),
        stress=_stress(D, E))
