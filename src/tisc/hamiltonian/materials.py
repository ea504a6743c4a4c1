"""Material models of the TI/SC slab.

Every model supplies the *electron* on-site block ``h(kx, ky)`` of one layer and
its couplings to the next (and, optionally, next-nearest) layer.  The hole
sector and the heterostructure layering are produced generically by
:meth:`MaterialModel.build_cell_blocks`: the first ``sc_layer_count`` layers use
the s-wave cell, the rest the selected variant, and the two regions are joined
by an interface hopping ``-t_int * 1``.

Variant tags
------------
``dirac``     baseline Dirac-mass TI (4 orbitals)
``tci``       four-band TCI with next-nearest-layer hopping (4 orbitals)
``tci_chen``  two-sublattice rock-salt TCI (8 orbitals)
``bi2se3``    lattice-regularised Bi2Se3 k.p model (4 orbitals)
``swave``     s-wave superconductor cell in every layer (any multiple of 4)
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Optional, Sequence

import numpy as np

from ..config import ConfigurationError, PhysicalParameters
from .blocks import CellBlocks
from .matrices import (
    GAMMA_0,
    GAMMA_1,
    GAMMA_2,
    GAMMA_3,
    SIGMA_0,
    SIGMA_X,
    SIGMA_Y,
    SIGMA_Z,
    bdg_double,
    spin_matrix,
)


class MaterialModel(object, metaclass=ABCMeta):
    """Electron-sector tight-binding cell of one layer."""

    tag: str = ""
    min_orbitals: int = 4
    defaults: dict[str, float] = {}

    def __init__(self, parameters: PhysicalParameters, chemical_potential: Optional[float] = None,
                 overrides: Optional[dict] = None):
        self.parameters = parameters
        self.orbital_count = int(parameters.orbital_count)
        if self.orbital_count < self.min_orbitals:
            raise ConfigurationError(
                f"orbital_count={self.orbital_count} is below the minimum of {self.min_orbitals} "
                f"required by material '{self.tag}'"
            )
        if not self.supports(self.orbital_count):
            raise ConfigurationError(
                f"orbital_count={self.orbital_count} is not supported by material '{self.tag}'"
            )
        overrides = dict(parameters.model if overrides is None else overrides)
        unknown = sorted(set(overrides) - set(self.defaults))
        if unknown:
            raise ConfigurationError(
                f"Unknown model parameters for material '{self.tag}': {', '.join(unknown)}"
            )
        self.options = {**self.defaults, **{k: float(v) for k, v in overrides.items()}}
        self.chemical_potential = parameters.mu_ti if chemical_potential is None else chemical_potential
        self.a = float(parameters.lattice_constant)
        vx, vy, vz = parameters.zeeman
        self._zeeman = spin_matrix(vx * SIGMA_X + vy * SIGMA_Y + vz * SIGMA_Z, self.orbital_count)
        self._sc_cell = None

    def supports(self, orbital_count: int) -> bool:
        return orbital_count == self.min_orbitals

    @abstractmethod
    def kinetic(self, kx: float, ky: float) -> np.ndarray:
        """In-plane part of the on-site electron block (N x N, Hermitian)."""

    @abstractmethod
    def hop_z(self, kx: float, ky: float) -> np.ndarray:
        """Electron coupling from layer l to layer l+1."""

    def hop_zz(self, kx: float, ky: float) -> Optional[np.ndarray]:
        return None

    def electron_on_site(self, kx: float, ky: float) -> np.ndarray:
        eye = np.eye(self.orbital_count, dtype=complex)
        return self.kinetic(kx, ky) - self.chemical_potential * eye + self._zeeman

    def build_cell_blocks(self, momentum: Sequence[float]) -> CellBlocks:
        """Per-layer BdG blocks of the heterostructure at ``momentum = (kx, ky)``."""

        kx, ky = float(momentum[0]), float(momentum[1])
        p = self.parameters
        L, n_sc, N = p.layer_count, p.sc_layer_count, self.orbital_count
        if self._sc_cell is None:
            self._sc_cell = SWaveCell(p, chemical_potential=p.mu_sc, overrides={})
        sc = self._sc_cell
        cells = [sc if layer < n_sc else self for layer in range(L)]

        on_site_by_cell = {}
        hop_by_cell = {}
        for cell in (sc, self):
            on_site_by_cell[id(cell)] = bdg_double(cell.electron_on_site(kx, ky), cell.electron_on_site(-kx, -ky))
            hop_by_cell[id(cell)] = bdg_double(cell.hop_z(kx, ky), cell.hop_z(-kx, -ky))
        interface = -p.interface_hopping * np.eye(N, dtype=complex)
        interface = bdg_double(interface, interface)

        on_site = np.array([on_site_by_cell[id(cell)] for cell in cells])
        hop_z = np.zeros((max(L - 1, 0), 2 * N, 2 * N), dtype=complex)
        for layer in range(L - 1):
            left, right = cells[layer], cells[layer + 1]
            hop_z[layer] = hop_by_cell[id(left)] if left is right else interface

        hop_zz = None
        nnn = self.hop_zz(kx, ky)
        if nnn is not None:
            nnn = bdg_double(nnn, self.hop_zz(-kx, -ky))
            hop_zz = np.zeros((max(L - 2, 0), 2 * N, 2 * N), dtype=complex)
            for layer in range(L - 2):
                if cells[layer] is self and cells[layer + 2] is self:
                    hop_zz[layer] = nnn

        blocks = CellBlocks(on_site=on_site, hop_z=hop_z, hop_zz=hop_zz, layer_count=L, orbital_count=N)
        blocks.validate()
        return blocks


class SWaveCell(MaterialModel):
    """Single-band s-wave metal, copied over N/2 spinful orbitals."""

    tag = "swave"

    def supports(self, orbital_count):
        return orbital_count % 4 == 0

    def kinetic(self, kx, ky):
        t = self.parameters.sc_hopping
        eps = -2.0 * t * (np.cos(kx * self.a) + np.cos(ky * self.a))
        return eps * np.eye(self.orbital_count, dtype=complex)

    def hop_z(self, kx, ky):
        return -self.parameters.sc_hopping * np.eye(self.orbital_count, dtype=complex)


class DiracTI(MaterialModel):
    """Cubic-lattice Dirac model ``M(k) Gamma0 + A sum_i sin(k_i a) Gamma_i``.

    ``M(k) = M - 2B (3 - cos kx a - cos ky a - cos kz a)``; the kz dependence
    is written as layer hopping.
    """

    tag = "dirac"
    defaults = {"velocity": 1.0, "curvature": 0.5}

    def kinetic(self, kx, ky):
        A, B = self.options["velocity"], self.options["curvature"]
        sx, sy = np.sin(kx * self.a), np.sin(ky * self.a)
        mass = self.parameters.dirac_mass - 2.0 * B * (3.0 - np.cos(kx * self.a) - np.cos(ky * self.a))
        return mass * GAMMA_0 + A * (sx * GAMMA_1 + sy * GAMMA_2)

    def hop_z(self, kx, ky):
        A, B = self.options["velocity"], self.options["curvature"]
        return B * GAMMA_0 - 0.5j * A * GAMMA_3


class TCI(MaterialModel):
    """Four-band crystalline insulator with second-neighbour hopping in plane and along z."""

    tag = "tci"
    defaults = {"hopping": 1.0, "nnn_hopping": 0.25, "soc": 0.8}

    def kinetic(self, kx, ky):
        t1, t2, lam = self.options["hopping"], self.options["nnn_hopping"], self.options["soc"]
        cx, cy = np.cos(kx * self.a), np.cos(ky * self.a)
        mass = self.parameters.dirac_mass - 2.0 * t1 * (cx + cy) - 4.0 * t2 * cx * cy
        return mass * GAMMA_0 + lam * (np.sin(kx * self.a) * GAMMA_1 + np.sin(ky * self.a) * GAMMA_2)

    def hop_z(self, kx, ky):
        return -self.options["hopping"] * GAMMA_0 - 0.5j * self.options["soc"] * GAMMA_3

    def hop_zz(self, kx, ky):
        return -self.options["nnn_hopping"] * GAMMA_0


class ChenTCI(MaterialModel):
    """Rock-salt TCI on two sublattices (A, B), each carrying a four-band Dirac cell."""

    tag = "tci_chen"
    min_orbitals = 8
    defaults = {"sublattice_mass": 0.6, "hopping": 1.0, "nnn_hopping": 0.3, "soc": 0.5}

    _SUB_Z = np.kron(SIGMA_Z, np.eye(4))
    _SUB_X = np.kron(SIGMA_X, np.eye(4))

    def kinetic(self, kx, ky):
        o = self.options
        cx, cy = np.cos(kx * self.a), np.cos(ky * self.a)
        out = o["sublattice_mass"] * self._SUB_Z
        out = out - 2.0 * o["hopping"] * (cx + cy) * self._SUB_X
        out = out + (self.parameters.dirac_mass + 4.0 * o["nnn_hopping"] * cx * cy) * np.kron(SIGMA_0, GAMMA_0)
        out = out + o["soc"] * (np.sin(kx * self.a) * np.kron(SIGMA_0, GAMMA_1)
                                + np.sin(ky * self.a) * np.kron(SIGMA_0, GAMMA_2))
        return out

    def hop_z(self, kx, ky):
        return -self.options["hopping"] * self._SUB_X - 0.5j * self.options["soc"] * np.kron(SIGMA_0, GAMMA_3)

    def hop_zz(self, kx, ky):
        return -self.options["nnn_hopping"] * np.kron(SIGMA_0, GAMMA_0)


class Bi2Se3(MaterialModel):
    """Four-band Bi2Se3 model (eV, Angstrom), regularised on a lattice a x a x c.

    ``k^2 -> 2(1 - cos k a)/a^2`` and ``k -> sin(k a)/a``; the quintuple-layer
    spacing ``c`` sets the layer hopping.
    """

    tag = "bi2se3"
    defaults = {
        "C": -0.0068,
        "D1": 1.3,
        "D2": 19.6,
        "M": 0.28,
        "B1": 10.0,
        "B2": 56.6,
        "A1": 2.2,
        "A2": 4.1,
        "c": 9.55,
    }

    def kinetic(self, kx, ky):
        o = self.options
        a, c = self.a, o["c"]
        k2 = 2.0 * (2.0 - np.cos(kx * a) - np.cos(ky * a)) / a ** 2
        eps = o["C"] + 2.0 * o["D1"] / c ** 2 + o["D2"] * k2
        mass = o["M"] - 2.0 * o["B1"] / c ** 2 - o["B2"] * k2
        eye = np.eye(4, dtype=complex)
        return eps * eye + mass * GAMMA_0 + o["A2"] * (np.sin(kx * a) * GAMMA_1 + np.sin(ky * a) * GAMMA_2) / a

    def hop_z(self, kx, ky):
        o = self.options
        c = o["c"]
        eye = np.eye(4, dtype=complex)
        return -(o["D1"] / c ** 2) * eye + (o["B1"] / c ** 2) * GAMMA_0 - 0.5j * (o["A1"] / c) * GAMMA_3


MATERIALS = {cls.tag: cls for cls in (DiracTI, TCI, ChenTCI, Bi2Se3, SWaveCell)}


def material_for(parameters: PhysicalParameters) -> MaterialModel:
    """Select the model once per run; raises ``ConfigurationError`` on bad input."""
    try:
        cls = MATERIALS[parameters.material]
    except KeyError:
        raise ConfigurationError(
            f"Unknown material '{parameters.material}'; choose one of {sorted(MATERIALS)}"
        ) from None
    return cls(parameters)


def build_cell_blocks(parameters: PhysicalParameters, momentum: Sequence[float]) -> CellBlocks:
    return material_for(parameters).build_cell_blocks(momentum)


__all__ = [
    "MaterialModel",
    "SWaveCell",
    "DiracTI",
    "TCI",
    "ChenTCI",
    "Bi2Se3",
    "MATERIALS",
    "material_for",
    "build_cell_blocks",
]
