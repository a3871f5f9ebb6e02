"""CLI façade: build the grid, run it on the selected backend, print the checksum."""

import argparse
import importlib
import logging
import time

from . import config
from .digest import format_report, grid_digest
from .errors import AnnealError

logger = logging.getLogger(__name__)


def positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text!r}")
    return value


def non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {text!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="anneal",
        description="Run the anneal cellular automaton on a torus and print its checksum.",
    )
    p.add_argument("lines", type=positive_int, help="interior grid height")
    p.add_argument("iterations", type=non_negative_int, help="number of generations")
    p.add_argument("--gpu", choices=["cupy", "off"], default="cupy")
    p.add_argument("--config", default=None, help="alternative TOML config file")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p


def main(argv=None) -> int:
    """
    CLI façade wrapping the CPU and GPU engines.
    """
    args = build_parser().parse_args(argv)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.config is not None:
        config.use_config(args.config)

    sim_mod = "anneal.core"
    if args.gpu != "off":
        try:
            import cupy  # noqa: F401  check for install
            sim_mod = "anneal.gpu_backend"
        except ImportError:
            logger.error("--gpu=%s requires the '%s' package to be installed.", args.gpu, args.gpu)
            return 1

    sim = None
    try:
        sim = importlib.import_module(sim_mod).Simulation(args.lines)
        t0 = time.perf_counter()
        sim.upload()
        sim.run(args.iterations)
        sim.download()
        elapsed_ms = (time.perf_counter() - t0) * 1000.0
    except AnnealError as exc:
        logger.error("simulation failed: %s", exc)
        return 1
    finally:
        if sim is not None:
            sim.close()

    print(format_report(grid_digest(sim.interior()), elapsed_ms))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
