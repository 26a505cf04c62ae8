"""
Classic (eigendecomposition-based) Multidimensional Scaling, as proposed in:

Torgerson, W.S. Multidimensional scaling: I. Theory and method. Psychometrika 17, 401–419 (1952).

The solver is split into its explicit steps (double-centering,
eigendecomposition, embedding) so that the Gram matrix and the full
eigenvalue spectrum can be inspected and reused by the fit diagnostics.
"""

import inspect
import warnings
from collections import namedtuple
import numpy as np
from ..errors import DegenerateInputError, NumericalInstabilityWarning
from ..preprocessing import check_distance_matrix, check_n_dims, SYMMETRY_TOL
from ..metrics import gof_score, count_negative

EPSILON = 1e-12

CMDSResult = namedtuple(
    'CMDSResult', ['Y', 'eigenvalues', 'eigenvectors', 'gram', 'residual', 'stable'])
CMDSResult.__doc__ = """Outcome of a classical MDS solve.

Y : ndarray of shape (n_samples, n_dims)
    Configuration matrix.
eigenvalues : ndarray of shape (n_samples,)
    Full eigenvalue spectrum of the Gram matrix, in descending order.
eigenvectors : ndarray of shape (n_samples, n_samples)
    Orthonormal eigenvectors, column j belonging to eigenvalues[j].
gram : ndarray of shape (n_samples, n_samples)
    Double-centered Gram matrix B.
residual : float
    Relative eigendecomposition residual.
stable : bool
    False if the residual exceeded its tolerance.
"""

def _readonly(a):
    a.setflags(write=False)
    return a

def double_center(D, tol=SYMMETRY_TOL):
    """Compute the double-centered Gram matrix B = -1/2 * J D^2 J.

    Parameters
    ----------
    D : ndarray of shape (n, n)
        Symmetric distance matrix.
    tol : float, optional
        Tolerance (relative to the largest entry of B) for the symmetry check.

    Returns
    -------
    ndarray of shape (n, n)
        Symmetric Gram matrix.
    """
    # Number of points
    n = len(D)

    # Centering matrix
    J = np.eye(n) - np.ones((n, n))/n

    # YY^T
    B = -J.dot(D**2).dot(J)/2

    asymmetry = np.max(np.abs(B - B.T))
    if asymmetry > tol * max(np.max(np.abs(B)), EPSILON):
        warnings.warn(
            f"Gram matrix deviates from symmetry by {asymmetry:.3e}; symmetrizing.",
            NumericalInstabilityWarning)
    return (B + B.T) / 2

def eigendecompose(B):
    """Full symmetric eigendecomposition of B, sorted by eigenvalue in descending order.

    Each eigenvector is signed such that its component of largest absolute
    value is positive.

    Returns
    -------
    evals : ndarray of shape (n,)
    evecs : ndarray of shape (n, n)
    """
    # Diagonalize
    evals, evecs = np.linalg.eigh(B)

    # Sort by eigenvalue in descending order
    idx   = np.argsort(evals, kind='stable')[::-1]
    evals = evals[idx]
    evecs = evecs[:,idx]

    # Enforce consistent sign for each eigenvector
    max_idx = np.argmax(np.abs(evecs), axis=0)
    signs = np.sign(evecs[max_idx, np.arange(evecs.shape[1])])
    signs[signs == 0] = 1
    evecs = evecs * signs

    return evals, evecs

def decomposition_residual(B, evals, evecs):
    """Relative residual of an eigendecomposition.

    Returns the larger of ||B V - V diag(evals)||_F / ||B||_F and the
    deviation of V from orthonormality.
    """
    fit = np.linalg.norm(B.dot(evecs) - evecs * evals) / max(np.linalg.norm(B), EPSILON)
    ortho = np.max(np.abs(evecs.T.dot(evecs) - np.eye(evecs.shape[1])))
    return max(fit, ortho)

def embed(eigenvalues, eigenvectors, n_dims):
    """Build the configuration matrix from the top n_dims eigenpairs.

    Column j is eigenvector j scaled by sqrt(max(eigenvalue j, 0)); non-positive
    eigenvalues therefore contribute a zero column instead of imaginary coordinates.

    Parameters
    ----------
    eigenvalues : ndarray of shape (n,)
        Eigenvalues in descending order.
    eigenvectors : ndarray of shape (n, n)
        Matching eigenvectors (columns).
    n_dims : int
        Number of dimensions to keep.

    Returns
    -------
    ndarray of shape (n, n_dims)
    """
    n_dims = check_n_dims(n_dims, len(eigenvalues))
    L = np.sqrt(np.maximum(eigenvalues[:n_dims], 0))
    return eigenvectors[:, :n_dims] * L

def cmdscale(D, n_dims, tol=1e-8):
    """Perform classical multidimensional scaling (CMDS) on the input distance matrix.

    CMDS reduces the dimensionality of a distance matrix while
    preserving the pairwise distances as well as possible using eigenvalue decomposition.

    Parameters
    ----------
    D : ndarray of shape (n, n)
        Symmetric distance matrix to be scaled.
    n_dims : int
        Number of dimensions to which the data should be reduced, in [1, n-1].
    tol : float, optional, default=1e-8
        Tolerance for the relative eigendecomposition residual. Above it, the
        result is flagged as unstable.

    Returns
    -------
    CMDSResult
        Configuration matrix, full eigen spectrum, Gram matrix and
        stability diagnostics. All arrays are read-only.

    Raises
    ------
    InvalidInputError
        If `D` is not a valid distance matrix.
    InvalidDimensionError
        If `n_dims` lies outside [1, n-1].
    DegenerateInputError
        If all pairwise distances are zero.
    """
    D = check_distance_matrix(D)
    n = len(D)
    n_dims = check_n_dims(n_dims, n)
    if not np.any(D > 0):
        raise DegenerateInputError("All pairwise distances are zero; no meaningful embedding exists.")

    B = double_center(D)
    evals, evecs = eigendecompose(B)

    residual = decomposition_residual(B, evals, evecs)
    stable = bool(residual <= tol)
    if not stable:
        warnings.warn(
            f"Eigendecomposition residual {residual:.3e} exceeds tolerance {tol:.1e}.",
            NumericalInstabilityWarning)

    Y = embed(evals, evecs, n_dims)

    return CMDSResult(
        Y=_readonly(Y),
        eigenvalues=_readonly(evals),
        eigenvectors=_readonly(evecs),
        gram=_readonly(B),
        residual=float(residual),
        stable=stable)

class CMDS():

    def __init__(self, n_dims = 2, tol = 1e-8, verbose = 0):
        self.n_dims = n_dims
        self.tol = tol
        self.verbose = verbose
        self.method_str = "CMDS"

    def __str__(self):
        """Create a string representation of the CMDS instance, including
        all parameters modified by the user."""
        signature = inspect.signature(self.__init__)
        defaults = {k: v.default for k, v in signature.parameters.items() if v.default is not inspect.Parameter.empty}

        result = f"CMDS(n_dims={self.n_dims}"
        for param, default_value in defaults.items():
            current_value = getattr(self, param)
            if current_value != default_value and param != "n_dims":
                result += f", {param}={current_value}"
        result += ")"
        return result

    def get_params(self):
        """Get model parameters."""
        return {'n_dims': self.n_dims, 'tol': self.tol, 'verbose': self.verbose}

    def set_params(self, params):
        """Set model parameters."""
        for key, value in params.items():
            if key not in self.get_params():
                raise ValueError(f"Invalid parameter '{key}' for {self.method_str}.")
            setattr(self, key, value)
        return self

    def fit(self, X):
        """Fit the CMDS model to the provided distance matrix.

        Parameters
        ----------
        X : np.array of shape (n, n)
            Symmetric distance matrix to be scaled.

        Returns
        -------
        self : object
            Returns the instance itself with the configuration matrix `Y_`,
            the eigen spectrum (`eigenvalues_`, `eigenvectors_`), the
            goodness-of-fit pair `gof_` and the stability flag `stable_`
            stored as attributes.
        """
        result = cmdscale(X, self.n_dims, tol=self.tol)
        self.Y_ = result.Y
        self.eigenvalues_ = result.eigenvalues
        self.eigenvectors_ = result.eigenvectors
        self.stable_ = result.stable
        self.gof_ = gof_score(result.eigenvalues, self.n_dims)

        if self.verbose > 0:
            print("[{0}] Scaled {1} samples to {2} dimensions. GOF: {3:.4f} (abs), {4:.4f} (pos)".format(
                self.method_str, len(result.eigenvalues), self.n_dims, self.gof_[0], self.gof_[1]))
        if self.verbose > 1:
            n_negative = count_negative(result.eigenvalues)
            print("[{0}] Leading eigenvalues: {1}".format(
                self.method_str, np.array2string(result.eigenvalues[:self.n_dims + 1], precision=4)))
            print("[{0}] Negative eigenvalues: {1}. Decomposition residual: {2:.3e}".format(
                self.method_str, n_negative, result.residual))
        return self

    def fit_transform(self, X):
        """Fit the CMDS model to the distance matrix and return the transformed coordinates.

        Parameters
        ----------
        X : np.array of shape (n, n)
            Symmetric distance matrix to be scaled.

        Returns
        -------
        np.array of shape (n, n_dims)
            The transformed coordinates (configuration matrix) in the reduced dimensional space.
        """
        self.fit(X)
        return self.Y_
