"""Benchmark for the core CPU simulation."""

import time

from anneal.core import Simulation


def run_benchmark():
    """Runs the benchmark and prints the elapsed time."""
    sim = Simulation(256)
    sim.upload()
    t0 = time.perf_counter()
    sim.run(128)
    sim.download()
    elapsed = time.perf_counter() - t0
    print(f"Elapsed: {elapsed:.4f}s")


if __name__ == "__main__":
    run_benchmark()
