"""Command-line entry point: solve a momentum grid from a YAML file and save the results."""
from __future__ import annotations

import argparse
import logging
import sys

from .config import ConfigurationError, load_config
from .grid.distribute import MPIDistributor, ProcessPoolDistributor, SerialDistributor
from .grid.orchestrator import GridOrchestrator


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="tisc-scf", description=__doc__)
    ap.add_argument("--config", required=True, help="YAML file with 'physical' and 'solver' sections")
    ap.add_argument("--out", required=True, help="output .npz archive")
    group = ap.add_mutually_exclusive_group()
    group.add_argument("--workers", type=int, default=1, help="local worker processes")
    group.add_argument("--mpi", action="store_true", help="distribute over MPI ranks (needs mpi4py)")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(levelname)s %(message)s")

    if args.mpi:
        distributor = MPIDistributor()
    elif args.workers > 1:
        distributor = ProcessPoolDistributor(args.workers)
    else:
        distributor = SerialDistributor()

    try:
        parameters, settings = load_config(args.config)
        orchestrator = GridOrchestrator(parameters, settings, distributor=distributor)
    except ConfigurationError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2

    result = orchestrator.run()
    if result is not None:
        result.save(args.out)
        logging.info("Saved %d momentum points to %s", len(result), args.out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
