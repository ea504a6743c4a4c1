"""Observables of a converged momentum point: LDOS, band sample, ground-state energy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from ..config import PhysicalParameters, SolverSettings
from ..hamiltonian.matrices import orbital_projectors, spin_projectors
from ..scf.eigensolver import EigenDecomposition
from ..scf.state import OrderParameterState


@dataclass(slots=True)
class ObservableResults:
    """Per-point observables.

    ldos:         (L, nE) electron LDOS
    ldos_spin:    (3, L, nE) weighted by Mx, My, Mz
    ldos_orbital: (3, L, nE) weighted by Px, Py, Pz
    bands:        smallest strictly positive eigenvalues, NaN padded
    """
    energies: np.ndarray
    ldos: np.ndarray
    ldos_spin: np.ndarray
    ldos_orbital: np.ndarray
    bands: np.ndarray
    ground_state_energy_raw: float
    ground_state_energy: float
    ground_state_energy_mf: float


def gaussian(x: np.ndarray, width: float) -> np.ndarray:
    return np.exp(-0.5 * (x / width) ** 2) / (np.sqrt(2.0 * np.pi) * width)


def _electron_components(decomposition: EigenDecomposition, layer_count: int, orbital_count: int) -> np.ndarray:
    M = decomposition.size
    return decomposition.vectors.reshape(layer_count, 2, orbital_count, M)[:, 0]


def local_density_of_states(decomposition: EigenDecomposition, layer_count: int, orbital_count: int,
                            energies: np.ndarray, width: float,
                            operators: Optional[np.ndarray] = None) -> np.ndarray:
    """Gaussian-broadened LDOS ``sum_n w_n(l) g(E - E_n)``.

    Without ``operators`` the weight is the electron-sector norm of eigenvector
    ``n`` on layer ``l``; with ``operators`` of shape (K, N, N) it is the
    expectation value ``u^dagger O_k u`` and the result has shape (K, L, nE).
    """
    u = _electron_components(decomposition, layer_count, orbital_count)
    kernel = gaussian(energies[None, :] - decomposition.values[:, None], width)
    if operators is None:
        weights = np.sum(np.abs(u) ** 2, axis=1)
        return weights @ kernel
    weights = np.einsum("lam,kab,lbm->klm", u.conj(), operators, u).real
    return weights @ kernel


def band_sample(values: np.ndarray, count: int = 5) -> np.ndarray:
    """The ``count`` smallest strictly positive eigenvalues (ascending, NaN padded)."""
    positive = np.sort(values[values > 0])[:count]
    out = np.full(count, np.nan)
    out[: positive.size] = positive
    return out


def ground_state_energy_raw(values: np.ndarray) -> float:
    return float(np.sum(values[values < 0]))


def chemical_potential_correction(parameters: PhysicalParameters) -> float:
    """``sum_l mu_l N``: the constant dropped when the hole sector is normal ordered."""
    return float(np.sum(parameters.layer_chemical_potentials()) * parameters.orbital_count)


def double_counting_correction(parameters: PhysicalParameters, state: OrderParameterState) -> float:
    """``sum_l w_l |D_l|^2 / 2`` with ``w_l`` the region's double-counting weight."""
    squared = 0.5 * np.sum(np.abs(state.matrices) ** 2, axis=(1, 2))
    return float(np.sum(parameters.double_counting_weights() * squared))


def extract(decomposition: EigenDecomposition, parameters: PhysicalParameters, momentum: Sequence[float],
            state: OrderParameterState, settings: Optional[SolverSettings] = None) -> ObservableResults:
    settings = settings if settings is not None else SolverSettings()
    L, N = parameters.layer_count, parameters.orbital_count
    energies = settings.energy_grid()
    width = settings.broadening

    raw = ground_state_energy_raw(decomposition.values)
    corrected = raw + chemical_potential_correction(parameters)
    return ObservableResults(
        energies=energies,
        ldos=local_density_of_states(decomposition, L, N, energies, width),
        ldos_spin=local_density_of_states(decomposition, L, N, energies, width, spin_projectors(N)),
        ldos_orbital=local_density_of_states(decomposition, L, N, energies, width, orbital_projectors(N)),
        bands=band_sample(decomposition.values, settings.band_count),
        ground_state_energy_raw=raw,
        ground_state_energy=corrected,
        ground_state_energy_mf=corrected - double_counting_correction(parameters, state),
    )


__all__ = [
    "ObservableResults",
    "gaussian",
    "local_density_of_states",
    "band_sample",
    "ground_state_energy_raw",
    "chemical_potential_correction",
    "double_counting_correction",
    "extract",
]
