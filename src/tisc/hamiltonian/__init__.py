"""Layer Hamiltonians of the heterostructure and full BdG assembly."""
from .assemble import assemble
from .blocks import CellBlocks
from .materials import MATERIALS, MaterialModel, build_cell_blocks, material_for

__all__ = ["assemble", "CellBlocks", "MATERIALS", "MaterialModel", "build_cell_blocks", "material_for"]
