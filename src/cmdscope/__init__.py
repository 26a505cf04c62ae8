__version__ = "0.1.0"

from .errors import (
    Error, InvalidInputError, InvalidDimensionError, DegenerateInputError,
    NumericalInstabilityWarning, NonMonotonicFitWarning)
from .preprocessing import calc_distances, logistic_transform
from .mapping import CMDS, cmdscale
from .metrics import gof_score, gof_curve, residual_matrix, residual_report, stress_score
from .transform import align_embedding
from .analysis import analyze, dimension_sweep
