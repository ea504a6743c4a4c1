"""Momentum grid, per-point solving and global result aggregation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ..config import ConfigurationError, PhysicalParameters, SolverSettings, validate
from ..hamiltonian.materials import MaterialModel, material_for
from ..hamiltonian.matrices import PAIRING_CHANNELS
from ..observables.extract import ObservableResults, extract
from ..scf.eigensolver import EigenSolver, EigenSolverError, ScipyEigenSolver
from ..scf.loop import SCFIterationRecord, SelfConsistencyLoop
from ..scf.state import ConvergenceMetric, OrderParameterState
from .distribute import Distributor, SerialDistributor

STATUS_CONVERGED = "converged"
STATUS_EXHAUSTED = "exhausted"
STATUS_FAILED = "failed"


@dataclass(frozen=True)
class MomentumPoint:
    index: int
    kx: float
    ky: float

    def __getitem__(self, item):
        return (self.kx, self.ky)[item]

    def __len__(self):
        return 2


class MomentumGrid:
    """Regular ``n x n`` grid over ``[-pi/a, pi/a)``, flattened as ``ix * n + iy``."""

    def __init__(self, size: int, lattice_constant: float = 1.0):
        if size < 1:
            raise ConfigurationError(f"grid_size must be at least 1, got {size}")
        self.size = int(size)
        self.axis = np.linspace(-np.pi / lattice_constant, np.pi / lattice_constant, self.size, endpoint=False)

    def __len__(self) -> int:
        return self.size * self.size

    def point(self, index: int) -> MomentumPoint:
        if not 0 <= index < len(self):
            raise IndexError(f"momentum index {index} outside grid of {len(self)} points")
        ix, iy = divmod(index, self.size)
        return MomentumPoint(index, float(self.axis[ix]), float(self.axis[iy]))

    def points(self) -> List[MomentumPoint]:
        return [self.point(i) for i in range(len(self))]


@dataclass(slots=True)
class PointResult:
    momentum: MomentumPoint
    status: str
    iterations: int = 0
    metric: Optional[ConvergenceMetric] = None
    state: Optional[OrderParameterState] = None
    observables: Optional[ObservableResults] = None
    error: Optional[str] = None
    history: List[SCFIterationRecord] = field(default_factory=list)


class PointSolver:
    """Self-consistency loop plus observable extraction for single points."""

    def __init__(self, parameters: PhysicalParameters, settings: SolverSettings,
                 solver: Optional[EigenSolver] = None, material: Optional[MaterialModel] = None):
        self.parameters = parameters
        self.settings = settings
        self.loop = SelfConsistencyLoop(
            parameters,
            material if material is not None else material_for(parameters),
            solver if solver is not None else ScipyEigenSolver(),
            tolerance=settings.tolerance,
            max_iterations=settings.max_iterations,
        )

    def solve(self, point: MomentumPoint) -> PointResult:
        try:
            result = self.loop.run(point)
        except EigenSolverError as exc:
            logging.error("k-point %d (%.4f, %.4f) failed: %s", point.index, point.kx, point.ky, exc)
            return PointResult(momentum=point, status=STATUS_FAILED, error=str(exc))

        if result.converged:
            logging.info("k-point %d converged after %d iterations", point.index, result.iterations)
        else:
            logging.warning(
                "k-point %d not converged after %d iterations (max|dD|=%s)",
                point.index,
                result.iterations,
                "n/a" if result.metric is None else f"{result.metric.max_abs_delta:.3e}",
            )
        observables = extract(result.decomposition, self.parameters, point, result.state, self.settings)
        return PointResult(
            momentum=point,
            status=result.status.value,
            iterations=result.iterations,
            metric=result.metric,
            state=result.state,
            observables=observables,
            history=result.history,
        )


def _solve_points(payload, indices: Sequence[int]) -> List[PointResult]:
    parameters, settings, solver, material = payload
    grid = MomentumGrid(settings.grid_size, parameters.lattice_constant)
    point_solver = PointSolver(parameters, settings, solver, material)
    return [point_solver.solve(grid.point(i)) for i in indices]


class GlobalResultGrid:
    """All point results of a run, ordered by grid index, with stacked views."""

    def __init__(self, grid: MomentumGrid, results: Sequence[PointResult], parameters: PhysicalParameters,
                 settings: SolverSettings):
        self.grid = grid
        self.parameters = parameters
        self.settings = settings
        self.results = sorted(results, key=lambda r: r.momentum.index)
        if [r.momentum.index for r in self.results] != list(range(len(grid))):
            raise ValueError("Gathered results do not cover every momentum point exactly once")

    def __len__(self) -> int:
        return len(self.results)

    @property
    def momenta(self) -> np.ndarray:
        return np.array([(r.momentum.kx, r.momentum.ky) for r in self.results])

    @property
    def statuses(self) -> np.ndarray:
        return np.array([r.status for r in self.results])

    @property
    def failures(self) -> dict[int, str]:
        return {r.momentum.index: r.error for r in self.results if r.status == STATUS_FAILED}

    @property
    def iterations(self) -> np.ndarray:
        return np.array([r.iterations for r in self.results])

    def _stack(self, getter, shape, dtype=float) -> np.ndarray:
        out = np.full((len(self.results),) + tuple(shape), np.nan, dtype=dtype)
        for i, r in enumerate(self.results):
            if r.status != STATUS_FAILED:
                out[i] = getter(r)
        return out

    @property
    def order_parameter(self) -> np.ndarray:
        """Channel amplitudes, shape (points, L, channels); NaN for failed points."""
        shape = (self.parameters.layer_count, len(PAIRING_CHANNELS))
        return self._stack(lambda r: r.state.amplitudes, shape, dtype=complex)

    @property
    def bands(self) -> np.ndarray:
        return self._stack(lambda r: r.observables.bands, (self.settings.band_count,))

    @property
    def ground_state_energy(self) -> np.ndarray:
        """Columns: raw, chemical-potential corrected, double-counting corrected."""
        return self._stack(
            lambda r: (r.observables.ground_state_energy_raw,
                       r.observables.ground_state_energy,
                       r.observables.ground_state_energy_mf),
            (3,),
        )

    @property
    def ldos(self) -> np.ndarray:
        return self._stack(lambda r: r.observables.ldos,
                           (self.parameters.layer_count, self.settings.energy_points))

    @property
    def ldos_spin(self) -> np.ndarray:
        return self._stack(lambda r: r.observables.ldos_spin,
                           (3, self.parameters.layer_count, self.settings.energy_points))

    @property
    def ldos_orbital(self) -> np.ndarray:
        return self._stack(lambda r: r.observables.ldos_orbital,
                           (3, self.parameters.layer_count, self.settings.energy_points))

    def mean_ldos(self) -> np.ndarray:
        """Momentum-averaged LDOS over the points that did not fail."""
        return np.nanmean(self.ldos, axis=0)

    def to_arrays(self) -> dict[str, np.ndarray]:
        return {
            "momenta": self.momenta,
            "status": self.statuses,
            "iterations": self.iterations,
            "channels": np.array(PAIRING_CHANNELS),
            "order_parameter": self.order_parameter,
            "bands": self.bands,
            "ground_state_energy": self.ground_state_energy,
            "energies": self.settings.energy_grid(),
            "ldos": self.ldos,
            "ldos_spin": self.ldos_spin,
            "ldos_orbital": self.ldos_orbital,
        }

    def save(self, path: str) -> None:
        np.savez_compressed(path, **self.to_arrays())


def prepare(parameters: PhysicalParameters, settings: SolverSettings) -> MaterialModel:
    """Validate the whole configuration once; returns the selected material model."""
    validate(parameters, settings)
    return material_for(parameters)


class GridOrchestrator:
    def __init__(self, parameters: PhysicalParameters, settings: SolverSettings, *,
                 solver: Optional[EigenSolver] = None, distributor: Optional[Distributor] = None):
        self.material = prepare(parameters, settings)
        self.parameters = parameters
        self.settings = settings
        self.solver = solver if solver is not None else ScipyEigenSolver()
        self.distributor = distributor if distributor is not None else SerialDistributor()
        self.grid = MomentumGrid(settings.grid_size, parameters.lattice_constant)

    def run(self) -> Optional[GlobalResultGrid]:
        """Solve every grid point; the coordinator receives the assembled grid."""
        d = self.distributor
        if d.is_root:
            logging.info(
                "Solving %d momentum points (material=%s, layers=%d, orbitals=%d) on %d worker(s)",
                len(self.grid), self.parameters.material, self.parameters.layer_count,
                self.parameters.orbital_count, d.size,
            )
        payload = (self.parameters, self.settings, self.solver, self.material)
        gathered = d.execute(_solve_points, payload, len(self.grid))
        if gathered is None:
            return None
        out = GlobalResultGrid(self.grid, gathered, self.parameters, self.settings)
        counts = {s: int(np.sum(out.statuses == s)) for s in (STATUS_CONVERGED, STATUS_EXHAUSTED, STATUS_FAILED)}
        logging.info("Grid finished: %d converged, %d exhausted, %d failed",
                     counts[STATUS_CONVERGED], counts[STATUS_EXHAUSTED], counts[STATUS_FAILED])
        return out


__all__ = [
    "STATUS_CONVERGED",
    "STATUS_EXHAUSTED",
    "STATUS_FAILED",
    "MomentumPoint",
    "MomentumGrid",
    "PointResult",
    "PointSolver",
    "GlobalResultGrid",
    "prepare",
    "GridOrchestrator",
]
