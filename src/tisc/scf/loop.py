"""Per-momentum-point self-consistency driver."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from ..config import ConfigurationError, PhysicalParameters
from ..hamiltonian.assemble import assemble
from ..hamiltonian.materials import MaterialModel, material_for
from ..hamiltonian.matrices import PAIRING_CHANNELS
from .eigensolver import EigenDecomposition, EigenSolver, ScipyEigenSolver
from .order_parameter import WARMUP_ITERATIONS, update
from .state import ConvergenceMetric, OrderParameterState


class LoopStatus(str, Enum):
    INITIALIZING = "initializing"
    ITERATING = "iterating"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass(slots=True)
class SCFIterationRecord:
    iteration: int
    max_abs_delta: Optional[float]
    rms_delta: Optional[float]


@dataclass(slots=True)
class SCFResult:
    status: LoopStatus
    iterations: int
    state: OrderParameterState
    decomposition: EigenDecomposition
    metric: Optional[ConvergenceMetric]
    history: List[SCFIterationRecord]

    @property
    def converged(self) -> bool:
        return self.status is LoopStatus.CONVERGED


class SelfConsistencyLoop:
    """Alternate Hamiltonian assembly, diagonalisation and pairing update.

    The loop is ``INITIALIZING -> ITERATING -> CONVERGED | EXHAUSTED``.  It
    converges once ``iteration > WARMUP_ITERATIONS`` and
    ``max_abs_delta <= tolerance``; it stops as exhausted when the iteration
    count reaches ``max_iterations``.  A cap below 1 or a non-positive
    tolerance raises ``ConfigurationError`` before any work.  An
    :class:`EigenSolverError` propagates to the caller, which owns the decision
    about the failed point.
    """

    def __init__(
        self,
        parameters: PhysicalParameters,
        material: Optional[MaterialModel] = None,
        solver: Optional[EigenSolver] = None,
        *,
        tolerance: float = 1e-8,
        max_iterations: int = 200,
    ) -> None:
        self.parameters = parameters
        self.material = material if material is not None else material_for(parameters)
        self.solver = solver if solver is not None else ScipyEigenSolver()
        self.tolerance = float(tolerance)
        self.max_iterations = int(max_iterations)

    def initial_state(self) -> OrderParameterState:
        """Uniform singlet gap on the A and B channels of the SC layers, zero elsewhere."""
        p = self.parameters
        amps = np.zeros((p.layer_count, len(PAIRING_CHANNELS)), dtype=complex)
        for name in ("A", "B"):
            amps[: p.sc_layer_count, PAIRING_CHANNELS.index(name)] = p.initial_gap
        return OrderParameterState(amps, p.orbital_count)

    def step(self, momentum: Sequence[float], cell_blocks, state: OrderParameterState,
             iteration: int) -> tuple[OrderParameterState, Optional[ConvergenceMetric], EigenDecomposition]:
        """One build -> diagonalise -> update pass."""
        H = assemble(self.parameters, momentum, cell_blocks, state)
        decomposition = self.solver.solve(H)
        new_state, metric = update(decomposition, self.parameters, momentum, state, iteration)
        return new_state, metric, decomposition

    def run(
        self,
        momentum: Sequence[float],
        *,
        initial_state: Optional[OrderParameterState] = None,
        max_iterations: Optional[int] = None,
        tolerance: Optional[float] = None,
    ) -> SCFResult:
        max_iter = max_iterations if max_iterations is not None else self.max_iterations
        tol = tolerance if tolerance is not None else self.tolerance
        if max_iter < 1:
            raise ConfigurationError(f"max_iterations must be at least 1, got {max_iter}")
        if not tol > 0:
            raise ConfigurationError(f"tolerance must be positive, got {tol}")

        status = LoopStatus.INITIALIZING
        state = initial_state if initial_state is not None else self.initial_state()
        cell_blocks = self.material.build_cell_blocks(momentum)
        history: List[SCFIterationRecord] = []
        metric: Optional[ConvergenceMetric] = None
        decomposition: Optional[EigenDecomposition] = None
        iteration = 0

        status = LoopStatus.ITERATING
        while status is LoopStatus.ITERATING:
            iteration += 1
            state, metric, decomposition = self.step(momentum, cell_blocks, state, iteration)
            history.append(
                SCFIterationRecord(
                    iteration=iteration,
                    max_abs_delta=None if metric is None else metric.max_abs_delta,
                    rms_delta=None if metric is None else metric.rms_delta,
                )
            )
            if metric is not None:
                logging.debug(
                    "k=(%.4f, %.4f) iteration %d: max|dD|=%.3e rms=%.3e",
                    momentum[0], momentum[1], iteration, metric.max_abs_delta, metric.rms_delta,
                )
            if iteration > WARMUP_ITERATIONS and metric is not None and metric.max_abs_delta <= tol:
                status = LoopStatus.CONVERGED
            elif iteration >= max_iter:
                status = LoopStatus.EXHAUSTED

        return SCFResult(
            status=status,
            iterations=iteration,
            state=state,
            decomposition=decomposition,
            metric=metric,
            history=history,
        )


__all__ = [
    "LoopStatus",
    "SCFIterationRecord",
    "SCFResult",
    "SelfConsistencyLoop",
]
