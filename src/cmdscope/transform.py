"""
Module for transforming maps post-creation, i.e., aligning a map to a
reference map by translation, rotation and reflection.
"""

from scipy.linalg import orthogonal_procrustes
import numpy as np
from .errors import InvalidInputError

def align_embedding(Y, Y_ref, center=True):
    """
    Align a map to a reference map using Orthogonal Procrustes Analysis.

    Classical MDS determines coordinates only up to translation, rotation
    and reflection. Aligning one map onto another removes these degrees of
    freedom, so maps from different runs can be compared coordinate-wise.

    Parameters
    ----------
    Y : ndarray
        Map coordinates, shape (n_samples, n_dims)
    Y_ref : ndarray
        Reference map, shape (n_samples, n_dims)
    center : bool, optional
        If True, both maps are centered before alignment and the result is
        translated onto the centroid of the reference, by default True.

    Returns
    -------
    ndarray
        Aligned map, shape (n_samples, n_dims)

    Raises
    ------
    InvalidInputError
        If the maps are empty or differ in shape.
    """
    Y = np.asarray(Y, dtype=np.float64)
    Y_ref = np.asarray(Y_ref, dtype=np.float64)
    if Y.size == 0 or Y_ref.size == 0:
        raise InvalidInputError("Input maps must not be empty.")
    if Y.ndim != 2 or Y.shape != Y_ref.shape:
        raise InvalidInputError(
            f"Input map and reference map must have the same two-dimensional shape, got {Y.shape} and {Y_ref.shape}.")

    if center:
        offset_ref = Y_ref.mean(axis=0)
        Y_c = Y - Y.mean(axis=0)
        Y_ref_c = Y_ref - offset_ref
    else:
        offset_ref = np.zeros(Y.shape[1])
        Y_c = Y
        Y_ref_c = Y_ref

    R, _ = orthogonal_procrustes(Y_c, Y_ref_c)
    return Y_c.dot(R) + offset_ref
