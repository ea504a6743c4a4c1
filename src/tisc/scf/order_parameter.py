"""Pairing-field update from a BdG eigen-decomposition."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ..config import ConfigurationError, PhysicalParameters
from .eigensolver import EigenDecomposition
from .state import ConvergenceMetric, OrderParameterState

# Iterations after which the convergence metric is measured.
WARMUP_ITERATIONS = 10


def anomalous_correlator(decomposition: EigenDecomposition, layer_count: int, orbital_count: int,
                         kbt: float) -> np.ndarray:
    """``sum_n tanh(E_n / 2 kT) u_n(l) v_n(l)^dagger`` for every layer, shape (L, N, N).

    ``u`` is the electron and ``v`` the hole part of eigenvector ``n`` restricted
    to layer ``l``.  Every eigenpair contributes; the odd weight selects the
    relevant half of the particle-hole symmetric spectrum.
    """
    if kbt <= 0:
        raise ConfigurationError(f"Thermal energy must be positive, got kT={kbt}")
    M = decomposition.size
    vecs = decomposition.vectors.reshape(layer_count, 2, orbital_count, M)
    u, v = vecs[:, 0], vecs[:, 1]
    weights = np.tanh(decomposition.values / (2.0 * kbt))
    return np.einsum("lam,m,lbm->lab", u, weights, v.conj())


def update(decomposition: EigenDecomposition, parameters: PhysicalParameters, momentum: Sequence[float],
           prior: OrderParameterState, iteration: int
           ) -> tuple[OrderParameterState, Optional[ConvergenceMetric]]:
    """Recompute the pairing field; measure convergence once past warm-up.

    ``F_l = -(U_l / 2) sum_n tanh(E_n / 2kT) u_n(l) v_n(l)^dagger`` with ``U_l``
    the layer's interaction, then projected onto the pairing channels.  The
    metric compares the projected matrices of ``prior`` and the new state and
    is ``None`` while ``iteration <= WARMUP_ITERATIONS``.
    """
    if parameters.temperature <= 0:
        raise ConfigurationError(f"temperature must be positive, got {parameters.temperature}")
    L, N = parameters.layer_count, parameters.orbital_count
    correlator = anomalous_correlator(decomposition, L, N, parameters.kbt)
    accumulator = np.zeros((L, N, N), dtype=np.complex128)
    accumulator -= 0.5 * parameters.layer_interactions()[:, None, None] * correlator
    state = OrderParameterState.from_matrices(accumulator)

    metric = None
    if iteration > WARMUP_ITERATIONS:
        metric = ConvergenceMetric.between(state, prior)
    return state, metric


__all__ = ["WARMUP_ITERATIONS", "anomalous_correlator", "update"]
