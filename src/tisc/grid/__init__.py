"""Momentum-grid orchestration and work distribution."""
from .distribute import Distributor, MPIDistributor, ProcessPoolDistributor, SerialDistributor
from .orchestrator import GlobalResultGrid, GridOrchestrator, MomentumGrid, PointResult, PointSolver

__all__ = [
    "Distributor",
    "MPIDistributor",
    "ProcessPoolDistributor",
    "SerialDistributor",
    "GlobalResultGrid",
    "GridOrchestrator",
    "MomentumGrid",
    "PointResult",
    "PointSolver",
]
