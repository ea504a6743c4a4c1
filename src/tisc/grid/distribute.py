"""Static work distribution and result gathering over momentum points.

A distributor owns three things: a one-time broadcast of the shared run
payload, a static strided partition (point ``i`` belongs to worker
``i % size``) and a barrier-style gather of per-point results onto the
coordinating worker.  ``execute`` runs a worker function over the owned
indices of every worker and returns the gathered results on the coordinator
(``None`` elsewhere).
"""

from __future__ import annotations

import multiprocessing as mp
from abc import ABCMeta, abstractmethod
from typing import Any, Callable, List, Optional, Sequence

Worker = Callable[[Any, Sequence[int]], list]


def owner(index: int, size: int) -> int:
    return index % size


def partition(n_points: int, size: int, rank: int) -> list[int]:
    """Indices owned by ``rank`` out of ``size`` workers."""
    if size < 1:
        raise ValueError(f"Worker count must be positive, got {size}")
    if not 0 <= rank < size:
        raise IndexError(f"rank {rank} outside [0, {size})")
    return list(range(rank, n_points, size))


class Distributor(object, metaclass=ABCMeta):
    rank: int = 0
    size: int = 1

    @property
    def is_root(self) -> bool:
        return self.rank == 0

    def owner(self, index: int) -> int:
        return owner(index, self.size)

    def owned_indices(self, n_points: int) -> list[int]:
        return partition(n_points, self.size, self.rank)

    @abstractmethod
    def broadcast_parameters(self, payload: Any) -> Any:
        pass

    @abstractmethod
    def gather_results(self, local_results: list) -> Optional[list]:
        pass

    def execute(self, worker: Worker, payload: Any, n_points: int) -> Optional[list]:
        payload = self.broadcast_parameters(payload)
        local = worker(payload, self.owned_indices(n_points))
        return self.gather_results(local)


class SerialDistributor(Distributor):
    """Single worker; broadcast and gather are identities."""

    def broadcast_parameters(self, payload):
        return payload

    def gather_results(self, local_results):
        return list(local_results)


class ProcessPoolDistributor(Distributor):
    """Local worker processes from a fork-context :mod:`multiprocessing` pool.

    Every pool task receives its own pickled copy of the payload (the
    broadcast) and the strided index list of one virtual rank.
    """

    def __init__(self, processes: int):
        if processes < 1:
            raise ValueError(f"processes must be positive, got {processes}")
        self.size = int(processes)

    def broadcast_parameters(self, payload):
        return [payload] * self.size

    def gather_results(self, local_results):
        out: list = []
        for part in local_results:
            out.extend(part)
        return out

    def execute(self, worker, payload, n_points):
        payloads = self.broadcast_parameters(payload)
        tasks = [(payloads[rank], partition(n_points, self.size, rank)) for rank in range(self.size)]
        if self.size == 1:
            return self.gather_results([worker(*tasks[0])])
        ctx = mp.get_context("fork")
        with ctx.Pool(processes=self.size) as pool:
            parts = pool.starmap(worker, tasks)
        return self.gather_results(parts)


class MPIDistributor(Distributor):
    """MPI ranks via :mod:`mpi4py`; rank 0 is the coordinator."""

    def __init__(self, comm=None):
        from mpi4py import MPI

        self.comm = comm if comm is not None else MPI.COMM_WORLD
        self.rank = self.comm.Get_rank()
        self.size = self.comm.Get_size()

    def broadcast_parameters(self, payload):
        return self.comm.bcast(payload if self.is_root else None, root=0)

    def gather_results(self, local_results):
        parts: Optional[List[list]] = self.comm.gather(local_results, root=0)
        if not self.is_root:
            return None
        out: list = []
        for part in parts:
            out.extend(part)
        return out


__all__ = [
    "owner",
    "partition",
    "Distributor",
    "SerialDistributor",
    "ProcessPoolDistributor",
    "MPIDistributor",
]
