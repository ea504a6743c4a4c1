import numpy as np
import pytest

from tisc.config import ConfigurationError, PhysicalParameters
from tisc.hamiltonian.materials import MATERIALS, ChenTCI, DiracTI, SWaveCell, build_cell_blocks, material_for
from tisc.hamiltonian.matrices import SIGMA_Z, hole_block, spin_matrix


def test_orbital_count_below_minimum():
    with pytest.raises(ConfigurationError):
        ChenTCI(PhysicalParameters(material="tci_chen", orbital_count=4))


@pytest.mark.parametrize("tag", ["dirac", "tci", "bi2se3"])
def test_orbital_count_mismatch(tag):
    with pytest.raises(ConfigurationError):
        material_for(PhysicalParameters(material=tag, orbital_count=8))


def test_swave_accepts_multiples_of_four():
    assert isinstance(material_for(PhysicalParameters(material="swave", orbital_count=8)), SWaveCell)
    with pytest.raises(ConfigurationError):
        material_for(PhysicalParameters(material="swave", orbital_count=6))


def test_unknown_material_and_model_key():
    with pytest.raises(ConfigurationError):
        material_for(PhysicalParameters(material="graphene"))
    with pytest.raises(ConfigurationError):
        material_for(PhysicalParameters(material="dirac", model={"soc": 1.0}))


def test_model_override():
    m = material_for(PhysicalParameters(material="dirac", model={"velocity": 2.0}))
    assert m.options["velocity"] == 2.0
    assert m.options["curvature"] == DiracTI.defaults["curvature"]


@pytest.mark.parametrize("tag,n_orb,has_nnn", [
    ("dirac", 4, False),
    ("tci", 4, True),
    ("tci_chen", 8, True),
    ("bi2se3", 4, False),
    ("swave", 4, False),
])
def test_cell_block_shapes(tag, n_orb, has_nnn):
    p = PhysicalParameters(material=tag, orbital_count=n_orb, layer_count=6, sc_layer_count=2)
    blocks = build_cell_blocks(p, (0.2, -0.4))
    b = 2 * n_orb
    assert blocks.on_site.shape == (6, b, b)
    assert blocks.hop_z.shape == (5, b, b)
    assert (blocks.hop_zz is not None) == has_nnn
    for block in blocks.on_site:
        assert np.allclose(block, block.conj().T)


def test_next_nearest_hopping_only_inside_topological_region():
    p = PhysicalParameters(material="tci", layer_count=6, sc_layer_count=2)
    hop_zz = build_cell_blocks(p, (0.1, 0.3)).hop_zz
    assert hop_zz.shape == (4, 8, 8)
    assert np.allclose(hop_zz[0], 0) and np.allclose(hop_zz[1], 0)
    assert not np.allclose(hop_zz[2], 0) and not np.allclose(hop_zz[3], 0)


def test_interface_hopping():
    p = PhysicalParameters(material="dirac", layer_count=4, sc_layer_count=2, interface_hopping=0.5)
    blocks = build_cell_blocks(p, (0.3, 0.1))
    eye = np.eye(4)
    assert np.allclose(blocks.hop_z[1][:4, :4], -0.5 * eye)
    assert np.allclose(blocks.hop_z[1][4:, 4:], 0.5 * eye)
    assert np.allclose(blocks.hop_z[1][:4, 4:], 0)


def test_hole_sector_of_swave_layer():
    p = PhysicalParameters(material="swave", layer_count=1, sc_layer_count=1, mu_sc=0.3)
    kx, ky = 0.4, 1.1
    block = build_cell_blocks(p, (kx, ky)).on_site[0]
    xi = -2.0 * (np.cos(kx) + np.cos(ky)) - 0.3
    assert np.allclose(block[:4, :4], xi * np.eye(4))
    assert np.allclose(block[4:, 4:], -xi * np.eye(4))


def test_hole_block_matches_electron_at_minus_k():
    m = material_for(PhysicalParameters(material="dirac"))
    k = (0.7, -0.2)
    block = m.build_cell_blocks(k).on_site[-1]
    assert np.allclose(block[4:, 4:], hole_block(m.electron_on_site(-k[0], -k[1])))


def test_zeeman_enters_electron_block():
    k = (0.5, 0.25)
    plain = material_for(PhysicalParameters(material="dirac")).electron_on_site(*k)
    zeeman = material_for(PhysicalParameters(material="dirac", zeeman=(0.0, 0.0, 0.1))).electron_on_site(*k)
    assert np.allclose(zeeman - plain, 0.1 * spin_matrix(SIGMA_Z, 4))


def test_registry_tags():
    assert set(MATERIALS) == {"dirac", "tci", "tci_chen", "bi2se3", "swave"}
