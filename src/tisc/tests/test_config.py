import numpy as np
import pytest

from tisc.config import KB_EV, ConfigurationError, PhysicalParameters, SolverSettings, load_config, validate

CONFIG = """
physical:
  material: tci
  layer_count: 6
  sc_layer_count: 2
  zeeman: [0.0, 0.0, 0.05]
  interaction_sc: -1.2
  model:
    soc: 0.6
solver:
  grid_size: 3
  tolerance: 1.0e-9
"""


def test_load_config_from_text():
    p, s = load_config(CONFIG)
    assert p.material == "tci"
    assert p.layer_count == 6 and p.sc_layer_count == 2
    assert p.zeeman == (0.0, 0.0, 0.05)
    assert p.model == {"soc": 0.6}
    assert s.grid_size == 3 and s.tolerance == 1e-9
    # untouched fields keep their defaults
    assert s.max_iterations == SolverSettings().max_iterations


def test_load_config_from_file(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text(CONFIG)
    p, _ = load_config(str(path))
    assert p.interaction_sc == -1.2


def test_empty_document_gives_defaults():
    p, s = load_config("")
    assert p == PhysicalParameters()
    assert s == SolverSettings()


@pytest.mark.parametrize("text", [
    "physical:\n  not_a_field: 1\n",
    "solver:\n  tolerence: 1.0e-6\n",
    "extra:\n  x: 1\n",
    "- just\n- a list\n",
    "physical: [1, 2]\n",
    "physical:\n  zeeman: 0.1\n",
    "physical:\n  model: [1, 2]\n",
    "physical:\n  layer_count: four\n",
    "physical:\n  layer_count: 2.5\n",
    "physical:\n  temperature: warm\n",
    "physical:\n  material: 3\n",
    "solver:\n  max_iterations: true\n",
])
def test_bad_documents_rejected(text):
    with pytest.raises(ConfigurationError):
        load_config(text)


@pytest.mark.parametrize("physical,solver", [
    ({"temperature": 0.0}, {}),
    ({"temperature": -3.0}, {}),
    ({}, {"tolerance": 0.0}),
    ({}, {"max_iterations": 0}),
    ({}, {"grid_size": 0}),
    ({"layer_count": 4, "sc_layer_count": 5}, {}),
    ({}, {"energy_min": 1.0, "energy_max": -1.0}),
])
def test_validate_rejects(physical, solver):
    with pytest.raises(ConfigurationError):
        validate(PhysicalParameters(**physical), SolverSettings(**solver))


def test_layer_profiles():
    p = PhysicalParameters(layer_count=5, sc_layer_count=2, mu_sc=0.4, mu_ti=-0.1,
                           interaction_sc=-2.0, interaction_ti=0.0)
    assert np.allclose(p.layer_interactions(), [-2, -2, 0, 0, 0])
    assert np.allclose(p.layer_chemical_potentials(), [0.4, 0.4, -0.1, -0.1, -0.1])
    assert np.allclose(p.double_counting_weights(), [-0.5, -0.5, 0, 0, 0])
    q = PhysicalParameters(layer_count=3, sc_layer_count=1, dc_weight_sc=1.0, dc_weight_ti=0.25)
    assert np.allclose(q.double_counting_weights(), [1.0, 0.25, 0.25])


def test_thermal_energy():
    assert PhysicalParameters(temperature=300.0).kbt == pytest.approx(0.025852, rel=1e-4)
    assert KB_EV == pytest.approx(8.617333e-5, rel=1e-6)


def test_invalid_value_names_the_field():
    with pytest.raises(ConfigurationError, match="physical.temperature"):
        load_config("physical:\n  temperature: warm\n")
    with pytest.raises(ConfigurationError, match="physical.zeeman"):
        load_config("physical:\n  zeeman: 0.1\n")


def test_numeric_values_are_coerced():
    p, s = load_config("physical:\n  temperature: 2\n  layer_count: 6.0\n  dc_weight_sc: 1\nsolver:\n  grid_size: 3\n")
    assert isinstance(p.temperature, float) and p.temperature == 2.0
    assert isinstance(p.layer_count, int) and p.layer_count == 6
    assert p.dc_weight_sc == 1.0
    assert s.grid_size == 3
