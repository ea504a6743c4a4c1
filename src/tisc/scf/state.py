"""Order-parameter snapshots and the convergence metric between two of them."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..hamiltonian.matrices import PAIRING_CHANNELS, pairing_projectors


@dataclass(frozen=True, eq=False)
class OrderParameterState:
    """Pairing amplitudes ``delta[l, c]`` per layer and channel (eV).

    The pairing matrix of a layer is ``sum_c delta[l, c] P_c``; a state is
    never modified once built, each iteration produces a new one.
    """

    amplitudes: np.ndarray
    orbital_count: int

    def __post_init__(self) -> None:
        amps = np.array(self.amplitudes, dtype=np.complex128)
        if amps.ndim != 2 or amps.shape[1] != len(PAIRING_CHANNELS):
            raise ValueError(
                f"amplitudes must have shape (layers, {len(PAIRING_CHANNELS)}), got {amps.shape}"
            )
        amps.setflags(write=False)
        object.__setattr__(self, "amplitudes", amps)

    @classmethod
    def zeros(cls, layer_count: int, orbital_count: int) -> "OrderParameterState":
        return cls(np.zeros((layer_count, len(PAIRING_CHANNELS)), dtype=complex), orbital_count)

    @classmethod
    def from_matrices(cls, matrices: np.ndarray) -> "OrderParameterState":
        """Project ``(L, N, N)`` pairing matrices onto the channels.

        ``delta_c = Tr(P_c^dagger F) / Tr(P_c^dagger P_c)``; components outside
        the channel set are dropped.
        """
        matrices = np.asarray(matrices)
        N = matrices.shape[-1]
        proj = pairing_projectors(N)
        norms = np.einsum("cij,cij->c", proj.conj(), proj).real
        amps = np.einsum("cij,lij->lc", proj.conj(), matrices) / norms
        return cls(amps, N)

    @property
    def layer_count(self) -> int:
        return self.amplitudes.shape[0]

    @property
    def matrices(self) -> np.ndarray:
        return np.einsum("lc,cij->lij", self.amplitudes, pairing_projectors(self.orbital_count))

    def channel(self, name: str) -> np.ndarray:
        """Amplitude of channel ``name`` in every layer."""
        return self.amplitudes[:, PAIRING_CHANNELS.index(name)]

    def as_dict(self) -> dict[str, np.ndarray]:
        return {name: self.amplitudes[:, i].copy() for i, name in enumerate(PAIRING_CHANNELS)}


@dataclass(frozen=True)
class ConvergenceMetric:
    max_abs_delta: float
    rms_delta: float

    @classmethod
    def between(cls, new: OrderParameterState, prior: OrderParameterState) -> "ConvergenceMetric":
        a, b = new.matrices, prior.matrices
        if a.shape != b.shape:
            raise ValueError(f"Cannot compare order parameters of shapes {a.shape} and {b.shape}")
        diff = np.abs(a - b)
        return cls(float(diff.max(initial=0.0)), float(np.sqrt(np.mean(diff ** 2))))


__all__ = ["OrderParameterState", "ConvergenceMetric"]
