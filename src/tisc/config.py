"""Run configuration: physical parameters, solver settings and the YAML loader."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

import numpy as np
import scipy.constants as spc
import yaml


KB_EV = spc.Boltzmann / spc.elementary_charge


class ConfigurationError(ValueError):
    """Invalid run configuration, detected before any momentum point is processed."""


@dataclass(frozen=True)
class PhysicalParameters:
    """Physical inputs of the heterostructure, set once and read-only afterwards.

    Energies are in eV, temperature in Kelvin, lengths in Angstrom.  The first
    ``sc_layer_count`` layers form the s-wave superconductor, the remaining
    ``layer_count - sc_layer_count`` layers the topological material selected by
    ``material``.  Pairing interactions follow the attractive-Hubbard sign
    convention (negative means attractive).

    ``model`` carries overrides for the selected variant's own parameter subset
    (see ``tisc.hamiltonian.materials``).  ``dc_weight_ti``/``dc_weight_sc`` set
    the mean-field double-counting coefficients; ``None`` selects ``1/U`` of the
    region (zero for a non-interacting region).
    """

    material: str = "dirac"
    layer_count: int = 20
    sc_layer_count: int = 5
    orbital_count: int = 4
    dirac_mass: float = -0.5
    mu_ti: float = 0.0
    mu_sc: float = 0.5
    interaction_ti: float = 0.0
    interaction_sc: float = -1.5
    zeeman: tuple[float, float, float] = (0.0, 0.0, 0.0)
    temperature: float = 1.0
    lattice_constant: float = 1.0
    sc_hopping: float = 1.0
    interface_hopping: float = 0.5
    initial_gap: float = 0.1
    model: Mapping[str, float] = field(default_factory=dict)
    dc_weight_ti: Optional[float] = None
    dc_weight_sc: Optional[float] = None

    @property
    def kbt(self) -> float:
        return KB_EV * self.temperature

    def layer_interactions(self) -> np.ndarray:
        """Pairing interaction per layer (SC region first)."""
        out = np.full(self.layer_count, float(self.interaction_ti))
        out[: self.sc_layer_count] = self.interaction_sc
        return out

    def layer_chemical_potentials(self) -> np.ndarray:
        out = np.full(self.layer_count, float(self.mu_ti))
        out[: self.sc_layer_count] = self.mu_sc
        return out

    def double_counting_weights(self) -> np.ndarray:
        """Per-layer coefficient of the mean-field double-counting correction."""

        def _weight(explicit: Optional[float], interaction: float) -> float:
            if explicit is not None:
                return float(explicit)
            return 0.0 if interaction == 0 else 1.0 / interaction

        out = np.full(self.layer_count, _weight(self.dc_weight_ti, self.interaction_ti))
        out[: self.sc_layer_count] = _weight(self.dc_weight_sc, self.interaction_sc)
        return out


@dataclass(frozen=True)
class SolverSettings:
    """Numerical controls of the self-consistency engine and observables."""

    max_iterations: int = 200
    tolerance: float = 1e-8
    grid_size: int = 8
    energy_min: float = -1.0
    energy_max: float = 1.0
    energy_points: int = 201
    broadening: float = 0.02
    band_count: int = 5

    def energy_grid(self) -> np.ndarray:
        return np.linspace(self.energy_min, self.energy_max, self.energy_points)


def validate(parameters: PhysicalParameters, settings: SolverSettings) -> None:
    """Check scalar constraints; raise ``ConfigurationError`` naming the culprit."""

    if parameters.temperature <= 0:
        raise ConfigurationError(f"temperature must be positive, got {parameters.temperature}")
    if settings.tolerance <= 0:
        raise ConfigurationError(f"tolerance must be positive, got {settings.tolerance}")
    if settings.max_iterations < 1:
        raise ConfigurationError(f"max_iterations must be at least 1, got {settings.max_iterations}")
    if settings.grid_size < 1:
        raise ConfigurationError(f"grid_size must be at least 1, got {settings.grid_size}")
    if parameters.layer_count < 1:
        raise ConfigurationError(f"layer_count must be at least 1, got {parameters.layer_count}")
    if not 0 <= parameters.sc_layer_count <= parameters.layer_count:
        raise ConfigurationError(
            f"sc_layer_count must lie in [0, {parameters.layer_count}], got {parameters.sc_layer_count}"
        )
    if parameters.lattice_constant <= 0:
        raise ConfigurationError(f"lattice_constant must be positive, got {parameters.lattice_constant}")
    if len(parameters.zeeman) != 3:
        raise ConfigurationError(f"zeeman needs three components, got {len(parameters.zeeman)}")
    if settings.broadening <= 0:
        raise ConfigurationError(f"broadening must be positive, got {settings.broadening}")
    if settings.energy_points < 1:
        raise ConfigurationError(f"energy_points must be at least 1, got {settings.energy_points}")
    if settings.energy_max <= settings.energy_min:
        raise ConfigurationError("energy_max must exceed energy_min")
    if settings.band_count < 1:
        raise ConfigurationError(f"band_count must be at least 1, got {settings.band_count}")


def _coerce(key: str, default: Any, value: Any) -> Any:
    if key == "zeeman":
        return tuple(float(v) for v in value)
    if key == "model":
        return {str(k): float(v) for k, v in dict(value or {}).items()}
    if default is None:
        return None if value is None else float(value)
    if isinstance(default, str):
        if not isinstance(value, str):
            raise TypeError(f"expected a string, got {type(value).__name__}")
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
            raise TypeError(f"expected an integer, got {value!r}")
        return int(value)
    if isinstance(value, bool):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


def _build(cls, section: Optional[Mapping[str, Any]], name: str):
    if section is not None and not isinstance(section, Mapping):
        raise ConfigurationError(f"Section '{name}' must be a mapping")
    section = dict(section or {})
    defaults = {f.name: f.default for f in fields(cls)}
    unknown = sorted(set(section) - set(defaults))
    if unknown:
        raise ConfigurationError(f"Unknown keys in '{name}' section: {', '.join(unknown)}")
    for key, value in section.items():
        try:
            section[key] = _coerce(key, defaults[key], value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid value for '{name}.{key}': {value!r} ({exc})") from exc
    return cls(**section)


def load_config(input_data: str) -> tuple[PhysicalParameters, SolverSettings]:
    """Parse a YAML document (a path ending in .yml/.yaml, or the text itself).

    The document holds a ``physical`` and a ``solver`` mapping whose keys are the
    field names of :class:`PhysicalParameters` and :class:`SolverSettings`.
    """

    try:
        if isinstance(input_data, str) and input_data.lower().endswith((".yml", ".yaml")):
            with open(input_data, "r") as stream:
                output = yaml.safe_load(stream)
        else:
            output = yaml.safe_load(input_data)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Could not parse configuration: {exc}") from exc
    if output is None:
        output = {}
    if not isinstance(output, dict):
        raise ConfigurationError("Configuration must be a mapping with 'physical' and 'solver' sections")
    unknown = sorted(set(output) - {"physical", "solver"})
    if unknown:
        raise ConfigurationError(f"Unknown configuration sections: {', '.join(unknown)}")
    parameters = _build(PhysicalParameters, output.get("physical"), "physical")
    settings = _build(SolverSettings, output.get("solver"), "solver")
    return parameters, settings


__all__ = [
    "KB_EV",
    "ConfigurationError",
    "PhysicalParameters",
    "SolverSettings",
    "validate",
    "load_config",
]
