"""
Exceptions and warnings raised by cmdscope.
"""

class Error(Exception):
    """Base class for other exceptions"""
    pass

class InvalidInputError(Error, ValueError):
    """Raised when a sample or distance matrix is malformed or undersized"""
    pass

class InvalidDimensionError(Error, ValueError):
    """Raised when the requested number of dimensions lies outside [1, n-1]"""
    pass

class DegenerateInputError(Error, ValueError):
    """Raised when all pairwise distances are zero, so no embedding exists"""
    pass

class NumericalInstabilityWarning(UserWarning):
    """Issued when the eigendecomposition residual exceeds its tolerance.

    The result is still returned, flagged as unstable.
    """
    pass

class NonMonotonicFitWarning(UserWarning):
    """Issued when the absolute goodness-of-fit decreases with the number of
    dimensions, i.e., once negative eigenvalues enter the sum."""
    pass
