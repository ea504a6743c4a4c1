"""Per-momentum self-consistency: eigensolvers, pairing update and the iteration driver."""
from .eigensolver import EigenDecomposition, EigenSolver, EigenSolverError, NumpyEigenSolver, ScipyEigenSolver
from .loop import LoopStatus, SCFResult, SelfConsistencyLoop
from .order_parameter import WARMUP_ITERATIONS, update
from .state import ConvergenceMetric, OrderParameterState

__all__ = [
    "EigenDecomposition",
    "EigenSolver",
    "EigenSolverError",
    "NumpyEigenSolver",
    "ScipyEigenSolver",
    "LoopStatus",
    "SCFResult",
    "SelfConsistencyLoop",
    "WARMUP_ITERATIONS",
    "update",
    "ConvergenceMetric",
    "OrderParameterState",
]
