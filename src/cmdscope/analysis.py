"""
End-to-end analysis: from a sample matrix to a classical MDS map and its
fit diagnostics, and sweeps of these diagnostics over the number of
dimensions.
"""

from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
import pandas as pd
from .mapping import cmdscale, embed
from .metrics import gof_score, gof_curve, residual_report
from .preprocessing import (
    calc_distances, check_distance_matrix, check_dims, check_labels, check_threshold,
    logistic_transform)

Analysis = namedtuple(
    'Analysis', ['distances', 'result', 'gof_abs', 'gof_pos', 'residuals'])

def analyze(X, n_dims, k_shape=None, threshold=None, labels=None, n_jobs=1):
    """
    Run the full pipeline on a sample matrix.

    sample matrix -> (optional) logistic transform -> distances -> CMDS ->
    goodness-of-fit and residual analysis.

    Parameters
    ----------
    X : ndarray or DataFrame of shape (n_samples, n_features)
        Sample matrix, e.g., percentages in [0, 100].
    n_dims : int
        Number of map dimensions, in [1, n_samples - 1].
    k_shape : float, optional
        If provided, values are rescaled with `logistic_transform` using
        this steepness before distances are computed, by default None.
    threshold : float, optional
        Residual threshold for listing outlier pairs, by default None.
    labels : sequence of length n_samples, optional
        Row labels for the outlier table. If omitted and X is a DataFrame,
        its index is used.
    n_jobs : int, optional
        Number of threads for the distance computation, by default 1.

    Returns
    -------
    Analysis
        distances : ndarray, the (read-only) input distance matrix
        result : CMDSResult
        gof_abs, gof_pos : float
        residuals : ResidualReport
    """
    if labels is None and isinstance(X, pd.DataFrame):
        labels = X.index.to_numpy()
    if k_shape is not None:
        X = logistic_transform(X, k_shape)

    D = calc_distances(X, n_jobs=n_jobs)
    labels = check_labels(labels, D.shape[0])
    D.setflags(write=False)
    result = cmdscale(D, n_dims)
    gof_abs, gof_pos = gof_score(result.eigenvalues, n_dims)
    report = residual_report(D, result.Y, threshold=threshold, labels=labels)

    return Analysis(
        distances=D, result=result, gof_abs=gof_abs, gof_pos=gof_pos, residuals=report)

def _evaluate_dims(D, eigenvalues, eigenvectors, n_dims, threshold):
    Y = embed(eigenvalues, eigenvectors, n_dims)
    report = residual_report(D, Y, threshold=threshold)
    return {
        'n_dims': n_dims,
        'eigenvalue': float(eigenvalues[n_dims - 1]),
        'residual_variance': report.variance,
        'max_abs_residual': report.max_abs,
        'n_outliers': len(report.outliers),
        'nonpositive_share': report.nonpositive_share,
        'stress': report.stress}

def dimension_sweep(D, dims=None, threshold=None, n_jobs=1, verbose=0):
    """
    Evaluate classical MDS maps over a range of dimensions.

    The distance matrix is decomposed once; each number of dimensions is
    then evaluated independently. The result is meant for inspecting
    scree/fit curves, the choice of dimensions is left to the caller.
    If GOF_abs decreases within the evaluated range, a single
    NonMonotonicFitWarning is issued, as in `gof_curve`.

    Parameters
    ----------
    D : ndarray of shape (n_samples, n_samples)
        Distance matrix.
    dims : iterable of int, optional
        Numbers of dimensions to evaluate, by default 1, ..., n_samples - 1.
    threshold : float, optional
        Residual threshold used to count outlier pairs, by default None
        (no outliers counted).
    n_jobs : int, optional
        Number of worker threads, by default 1.
    verbose : int, optional
        Verbosity level, by default 0.

    Returns
    -------
    DataFrame
        Indexed by 'n_dims', with columns 'eigenvalue', 'gof_abs', 'gof_pos',
        'abs_decreasing', 'residual_variance', 'max_abs_residual',
        'n_outliers', 'nonpositive_share' and 'stress'.
    """
    method_str = "SWEEP"
    D = check_distance_matrix(D)
    n_samples = D.shape[0]
    dims = check_dims(dims, n_samples)
    if threshold is not None:
        threshold = check_threshold(threshold)

    # Decompose once at the smallest valid dimensionality; embeddings for
    # all other dimensions are built from the same spectrum.
    result = cmdscale(D, 1)
    evals, evecs = result.eigenvalues, result.eigenvectors
    curve = gof_curve(evals, dims)

    if verbose > 0:
        print("[{0}] Evaluating {1} dimensionalities for {2} samples".format(method_str, len(dims), n_samples))

    if n_jobs is None or n_jobs <= 1:
        rows = [_evaluate_dims(D, evals, evecs, d, threshold) for d in dims]
    else:
        with ThreadPoolExecutor(max_workers=n_jobs) as executor:
            futures = [executor.submit(_evaluate_dims, D, evals, evecs, d, threshold) for d in dims]
            rows = [future.result() for future in futures]

    sweep = pd.DataFrame(rows).set_index('n_dims')
    for pos, col in enumerate(['gof_abs', 'gof_pos', 'abs_decreasing'], start=1):
        sweep.insert(pos, col, curve[col].to_numpy())

    if verbose > 1:
        for n_dims, row in sweep.iterrows():
            print("[{0}] n_dims={1}: GOF (pos) {2:.4f}, residual variance {3:.4f}, stress {4:.4f}".format(
                method_str, n_dims, row['gof_pos'], row['residual_variance'], row['stress']))

    return sweep
