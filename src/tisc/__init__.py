"""Self-consistent BdG pairing solver for topological insulator / superconductor slabs."""
from .config import ConfigurationError, PhysicalParameters, SolverSettings, load_config
from .grid.orchestrator import GlobalResultGrid, GridOrchestrator

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "PhysicalParameters",
    "SolverSettings",
    "load_config",
    "GlobalResultGrid",
    "GridOrchestrator",
]
