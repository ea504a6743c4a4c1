"""Assembly of the full BdG matrix for one momentum point.

Layout: layer ``l`` occupies rows ``l*2N : (l+1)*2N``; inside a layer the first
N rows are the electron sector and the last N the hole sector.  Only blocks on
or above the diagonal are taken from the inputs; every block below the
diagonal is written as the conjugate transpose of its mirror, so the result is
Hermitian by construction.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Sequence
import numpy as np
from .blocks import CellBlocks

if TYPE_CHECKING:
    from ..config import PhysicalParameters
    from ..scf.state import OrderParameterState


def _place_pair(H: np.ndarray, rows: slice, cols: slice, block: np.ndarray) -> None:
    H[rows, cols] = block
    H[cols, rows] = block.conj().T


def assemble(parameters: "PhysicalParameters", momentum: Sequence[float], cell_blocks: CellBlocks,
             state: "OrderParameterState") -> np.ndarray:
    """Return the Hermitian BdG matrix of size ``L * 2N``.

    The pairing block of layer ``l`` is ``sum_c delta[l, c] P_c`` over all
    pairing channels (``state.matrices``); it sits in the electron-hole corner
    of the layer block and its adjoint in the hole-electron corner.
    """
    L, N = cell_blocks.layer_count, cell_blocks.orbital_count
    if L != parameters.layer_count or N != parameters.orbital_count:
        raise ValueError(
            f"Cell blocks ({L} layers, {N} orbitals) do not match parameters "
            f"({parameters.layer_count} layers, {parameters.orbital_count} orbitals)"
        )
    pairing = state.matrices
    if pairing.shape != (L, N, N):
        raise ValueError(f"Order parameter shape {pairing.shape} != ({L},{N},{N})")

    b = cell_blocks.block_size
    H = np.zeros((L * b, L * b), dtype=np.complex128)
    layer = [slice(i * b, (i + 1) * b) for i in range(L)]
    for i in range(L):
        start = i * b
        electron = slice(start, start + N)
        hole = slice(start + N, start + b)
        H[layer[i], layer[i]] = cell_blocks.on_site[i]
        _place_pair(H, electron, hole, H[electron, hole] + pairing[i])
    for i in range(L - 1):
        _place_pair(H, layer[i], layer[i + 1], cell_blocks.hop_z[i])
    if cell_blocks.hop_zz is not None:
        for i in range(L - 2):
            _place_pair(H, layer[i], layer[i + 2], cell_blocks.hop_zz[i])
    return H


__all__ = ["assemble"]
