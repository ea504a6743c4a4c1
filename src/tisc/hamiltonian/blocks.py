"""Data container for the per-layer BdG blocks of one momentum point."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import numpy as np

@dataclass(slots=True)
class CellBlocks:
    """Layer-resolved BdG blocks (electron and hole sectors, no pairing).

    on_site: (L, 2N, 2N) diagonal block of every layer
    hop_z:   (L-1, 2N, 2N) coupling from layer l to l+1 (placed above the diagonal)
    hop_zz:  (L-2, 2N, 2N) coupling from layer l to l+2, or None
    orbital_count: electron orbitals per layer (N)
    """
    on_site: np.ndarray
    hop_z: np.ndarray
    hop_zz: Optional[np.ndarray]
    layer_count: int
    orbital_count: int

    def validate(self) -> None:
        b = self.block_size
        L = self.layer_count
        if self.on_site.shape != (L, b, b):
            raise ValueError(f"on_site shape {self.on_site.shape} != ({L},{b},{b})")
        if self.hop_z.shape != (max(L - 1, 0), b, b):
            raise ValueError(f"hop_z shape {self.hop_z.shape} != ({max(L - 1, 0)},{b},{b})")
        if self.hop_zz is not None and self.hop_zz.shape != (max(L - 2, 0), b, b):
            raise ValueError(f"hop_zz shape {self.hop_zz.shape} != ({max(L - 2, 0)},{b},{b})")

    @property
    def block_size(self) -> int:
        return 2 * self.orbital_count

    @property
    def dim(self) -> int:
        return self.layer_count * self.block_size
