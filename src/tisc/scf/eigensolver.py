"""Dense Hermitian eigensolvers behind a small interface.

Any object with a ``solve(matrix) -> EigenDecomposition`` method returning
ascending eigenvalues and orthonormal eigenvector columns can drive the
self-consistency loop.  Failures are reported as :class:`EigenSolverError`.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass

import numpy as np
import scipy.linalg as la


class EigenSolverError(RuntimeError):
    """The eigen-decomposition of a Hamiltonian did not converge."""


@dataclass(frozen=True, eq=False)
class EigenDecomposition:
    values: np.ndarray
    vectors: np.ndarray

    @property
    def size(self) -> int:
        return self.values.size


class EigenSolver(object, metaclass=ABCMeta):
    @abstractmethod
    def solve(self, matrix: np.ndarray) -> EigenDecomposition:
        pass


class ScipyEigenSolver(EigenSolver):
    """LAPACK ``*heevr``/``*heevd`` via :func:`scipy.linalg.eigh`."""

    def __init__(self, driver: str | None = None):
        self.driver = driver

    def solve(self, matrix):
        try:
            values, vectors = la.eigh(matrix, driver=self.driver, check_finite=True)
        except (la.LinAlgError, ValueError) as exc:
            raise EigenSolverError(f"eigh failed for a {matrix.shape[0]}x{matrix.shape[0]} matrix: {exc}") from exc
        return EigenDecomposition(values, vectors)


class NumpyEigenSolver(EigenSolver):
    def solve(self, matrix):
        if not np.all(np.isfinite(matrix)):
            raise EigenSolverError("Hamiltonian contains non-finite entries")
        try:
            values, vectors = np.linalg.eigh(matrix)
        except np.linalg.LinAlgError as exc:
            raise EigenSolverError(f"numpy.linalg.eigh did not converge: {exc}") from exc
        return EigenDecomposition(values, vectors)


__all__ = [
    "EigenSolverError",
    "EigenDecomposition",
    "EigenSolver",
    "ScipyEigenSolver",
    "NumpyEigenSolver",
]
