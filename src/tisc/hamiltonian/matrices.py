"""Pauli/Dirac matrices, the hole-sector transform and the fixed projector sets.

Basis convention inside one layer: the orbital index is the slow index and
spin the fast one, ``kron(orbital, spin)``.  The A/B label is the slowest
binary index of the orbital space (orbital for 4-band cells, sublattice for the
8-band cell).  The Nambu hole sector uses ``U c^dagger`` with ``U = 1 (x) i sigma_y``,
so a spin-singlet s-wave gap is proportional to the identity in the
electron-hole block.
"""

from __future__ import annotations

from functools import lru_cache

import numpy as np

SIGMA_0 = np.eye(2, dtype=complex)
SIGMA_X = np.array([[0, 1], [1, 0]], dtype=complex)
SIGMA_Y = np.array([[0, -1j], [1j, 0]], dtype=complex)
SIGMA_Z = np.array([[1, 0], [0, -1]], dtype=complex)
PAULI = (SIGMA_0, SIGMA_X, SIGMA_Y, SIGMA_Z)

# Dirac matrices of the four-band models, kron(orbital, spin).
GAMMA_0 = np.kron(SIGMA_Z, SIGMA_0)
GAMMA_1 = np.kron(SIGMA_X, SIGMA_X)
GAMMA_2 = np.kron(SIGMA_X, SIGMA_Y)
GAMMA_3 = np.kron(SIGMA_X, SIGMA_Z)

REGION_MATRICES = {
    "A": np.array([[1, 0], [0, 0]], dtype=complex),
    "B": np.array([[0, 0], [0, 1]], dtype=complex),
    "mixed": SIGMA_X,
}
SPIN_SUFFIXES = ("", "_x", "_y", "_z")
PAIRING_CHANNELS = tuple(region + suffix for region in REGION_MATRICES for suffix in SPIN_SUFFIXES)
SPIN_LABELS = ("Mx", "My", "Mz")
ORBITAL_LABELS = ("Px", "Py", "Pz")


def _check_orbital_count(orbital_count: int) -> None:
    if orbital_count < 4 or orbital_count % 4:
        raise ValueError(f"orbital_count must be a positive multiple of 4, got {orbital_count}")


def spin_matrix(spin: np.ndarray, orbital_count: int) -> np.ndarray:
    """Spin operator ``spin`` acting on every orbital of the layer."""
    return np.kron(np.eye(orbital_count // 2, dtype=complex), spin)


def region_matrix(region: np.ndarray, spin: np.ndarray, orbital_count: int) -> np.ndarray:
    """``region`` on the A/B index, identity on the inner orbitals, ``spin`` on spin."""
    _check_orbital_count(orbital_count)
    inner = np.eye(orbital_count // 4, dtype=complex)
    return np.kron(np.kron(region, inner), spin)


@lru_cache(maxsize=None)
def spin_flip(orbital_count: int) -> np.ndarray:
    out = spin_matrix(1j * SIGMA_Y, orbital_count)
    out.setflags(write=False)
    return out


def hole_block(electron_block_minus_k: np.ndarray) -> np.ndarray:
    """Hole-sector partner ``-U h(-k)* U^dagger`` of an electron block at ``-k``."""
    u = spin_flip(electron_block_minus_k.shape[0])
    return -u @ electron_block_minus_k.conj() @ u.conj().T


def bdg_double(electron_k: np.ndarray, electron_minus_k: np.ndarray) -> np.ndarray:
    """Block-diagonal electron/hole block of size 2N without pairing."""
    n = electron_k.shape[0]
    out = np.zeros((2 * n, 2 * n), dtype=complex)
    out[:n, :n] = electron_k
    out[n:, n:] = hole_block(electron_minus_k)
    return out


@lru_cache(maxsize=None)
def pairing_projectors(orbital_count: int) -> np.ndarray:
    """Channel matrices ``(len(PAIRING_CHANNELS), N, N)`` in ``PAIRING_CHANNELS`` order.

    The channels are mutually orthogonal under the Frobenius inner product.
    """
    mats = [
        region_matrix(region, spin, orbital_count)
        for region in REGION_MATRICES.values()
        for spin in PAULI
    ]
    out = np.array(mats)
    out.setflags(write=False)
    return out


@lru_cache(maxsize=None)
def spin_projectors(orbital_count: int) -> np.ndarray:
    out = np.array([spin_matrix(s, orbital_count) for s in PAULI[1:]])
    out.setflags(write=False)
    return out


@lru_cache(maxsize=None)
def orbital_projectors(orbital_count: int) -> np.ndarray:
    out = np.array([region_matrix(t, SIGMA_0, orbital_count) for t in PAULI[1:]])
    out.setflags(write=False)
    return out


__all__ = [
    "SIGMA_0",
    "SIGMA_X",
    "SIGMA_Y",
    "SIGMA_Z",
    "PAULI",
    "GAMMA_0",
    "GAMMA_1",
    "GAMMA_2",
    "GAMMA_3",
    "PAIRING_CHANNELS",
    "SPIN_LABELS",
    "ORBITAL_LABELS",
    "spin_matrix",
    "region_matrix",
    "spin_flip",
    "hole_block",
    "bdg_double",
    "pairing_projectors",
    "spin_projectors",
    "orbital_projectors",
]
