import numpy as np

from tisc.cli import main

CONFIG = """
physical:
  material: swave
  layer_count: 2
  sc_layer_count: 2
  interaction_sc: -1.5
solver:
  grid_size: 2
  max_iterations: 15
  energy_points: 11
"""


def test_cli_writes_archive(tmp_path):
    cfg = tmp_path / "run.yaml"
    cfg.write_text(CONFIG)
    out = tmp_path / "out.npz"
    assert main(["--config", str(cfg), "--out", str(out), "--log-level", "WARNING"]) == 0
    data = np.load(out)
    assert data["bands"].shape == (4, 5)
    assert data["ldos"].shape == (4, 2, 11)


def test_cli_rejects_bad_config(tmp_path):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("physical:\n  temperature: -1\n")
    assert main(["--config", str(cfg), "--out", str(tmp_path / "x.npz")]) == 2
    assert not (tmp_path / "x.npz").exists()


def test_cli_rejects_malformed_value(tmp_path):
    cfg = tmp_path / "typo.yaml"
    cfg.write_text("physical:\n  zeeman: 0.1\n  layer_count: four\n")
    assert main(["--config", str(cfg), "--out", str(tmp_path / "y.npz")]) == 2
    assert not (tmp_path / "y.npz").exists()
