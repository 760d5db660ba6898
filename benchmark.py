"""
Benchmark suite for the Pollard Rho race.

Benchmarks:
1. Sequence iterator: cost of one g(v) step at several sizes
2. Single worker: one rho walk on semiprimes of growing size
3. Worker scaling: the same targets raced with 1, 2, 4 and 8 workers
4. Stress test: random semiprimes, success rate and timings
"""

import time
import sys
import random
from typing import List, Callable

import numpy as np

from rho_race import next_residue, rho_search, race, is_prime, ResultSlot


# ============================================================================
# BENCHMARK UTILITIES
# ============================================================================

class BenchmarkResult:
    """Store benchmark results with statistics."""

    def __init__(self, name: str, times: List[float], operations: int = 1):
        self.name = name
        self.times = np.sort(np.asarray(times, dtype=np.float64))
        self.operations = operations

        self.min = float(self.times[0])
        self.max = float(self.times[-1])
        self.mean = float(np.mean(self.times))
        self.median = float(np.median(self.times))
        self.p90 = float(np.percentile(self.times, 90))
        self.stdev = float(np.std(self.times, ddof=1)) if len(self.times) > 1 else 0.0

    def __str__(self):
        return (f"{self.name:40} | "
                f"Mean: {self.mean*1000:8.3f}ms | "
                f"Median: {self.median*1000:8.3f}ms | "
                f"P90: {self.p90*1000:8.3f}ms | "
                f"StdDev: {self.stdev*1000:8.3f}ms | "
                f"Min: {self.min*1000:8.3f}ms | "
                f"Max: {self.max*1000:8.3f}ms")


def benchmark(func: Callable, *args, iterations: int = 5, **kwargs) -> BenchmarkResult:
    """
    Benchmark a function and return statistics.

    Args:
        func: Function to benchmark
        *args: Positional arguments to function
        iterations: Number of iterations to run
        **kwargs: Keyword arguments to function

    Returns:
        BenchmarkResult with timing statistics
    """
    times = []

    # Warm up
    func(*args, **kwargs)

    for _ in range(iterations):
        start = time.perf_counter()
        func(*args, **kwargs)
        times.append(time.perf_counter() - start)

    return BenchmarkResult(func.__name__, times)


def random_prime(lo: int, hi: int, rng: random.Random) -> int:
    """Random prime in [lo, hi)."""
    while True:
        p = rng.randrange(lo, hi) | 1
        if p < hi and is_prime(p):
            return p


def random_semiprime(bits: int, rng: random.Random) -> tuple[int, int, int]:
    """Product of two primes of about bits/2 bits each, returned as (n, p, q)."""
    half = max(3, bits // 2)
    p = random_prime(1 << (half - 1), 1 << half, rng)
    q = random_prime(1 << (half - 1), 1 << half, rng)
    while q == p:
        q = random_prime(1 << (half - 1), 1 << half, rng)
    return p * q, p, q


# ============================================================================
# 1. SEQUENCE ITERATOR
# ============================================================================

def benchmark_sequence():
    """Benchmark g(v) = v^2 + 1 mod n."""
    print("\n" + "="*100)
    print("SEQUENCE ITERATOR BENCHMARKS")
    print("="*100)

    rng = random.Random(1)
    for bits in (32, 64, 128, 256, 512):
        n = rng.getrandbits(bits) | (1 << (bits - 1)) | 1
        v = rng.randrange(n)

        def steps():
            x = v
            for _ in range(10_000):
                x = next_residue(x, n)
            return x

        result = benchmark(steps, iterations=5)
        result.name = f"10k steps ({bits}-bit n)"
        print(result)


# ============================================================================
# 2. SINGLE WORKER
# ============================================================================

def benchmark_single_worker():
    """Benchmark one rho walk per target."""
    print("\n" + "="*100)
    print("SINGLE WORKER BENCHMARKS")
    print("="*100)

    rng = random.Random(2)
    for bits in (24, 32, 40, 48):
        n, p, q = random_semiprime(bits, rng)

        def walk():
            return rho_search(n, rng.randrange(n), ResultSlot())

        result = benchmark(walk, iterations=5)
        result.name = f"{bits}-bit semiprime ({p} x {q})"
        print(result)


# ============================================================================
# 3. WORKER SCALING
# ============================================================================

def benchmark_worker_scaling():
    """Race the same targets with growing worker counts."""
    print("\n" + "="*100)
    print("WORKER SCALING BENCHMARKS")
    print("="*100)

    rng = random.Random(3)
    targets = [random_semiprime(40, rng)[0] for _ in range(5)]

    for workers in (1, 2, 4, 8):
        times = []
        found = 0
        for n in targets:
            result = race(n, workers)
            times.append(result.elapsed)
            found += result.found
        result = BenchmarkResult(f"{workers} worker(s), 40-bit", times)
        print(result)
        print(f"  → Found: {found}/{len(targets)}")


# ============================================================================
# 4. STRESS TEST
# ============================================================================

def benchmark_stress_test():
    """Stress test with random semiprimes."""
    print("\n" + "="*100)
    print("STRESS TEST (20 Random Semiprimes)")
    print("="*100)

    rng = random.Random(4)
    times = []
    iterations = []
    successful = 0

    start_total = time.perf_counter()
    for _ in range(20):
        n, p, q = random_semiprime(rng.choice((32, 36, 40)), rng)
        result = race(n, 4)
        if result.factor in (p, q):
            successful += 1
            times.append(result.elapsed)
            iterations.append(max(r.iterations for r in result.reports))
    total_time = time.perf_counter() - start_total

    if times:
        print(BenchmarkResult("Stress test races", times))
        steps = np.asarray(iterations)
        print(f"Iterations of slowest worker: median {np.median(steps):.0f}, max {steps.max()}")
    print(f"Successful: {successful}/20")
    print(f"Total time: {total_time:.3f}s")


# ============================================================================
# MAIN BENCHMARK SUITE
# ============================================================================

def run_all_benchmarks():
    """Run all benchmarks."""
    print("\n")
    print("╔" + "="*98 + "╗")
    print("║" + " "*30 + "POLLARD RHO RACE BENCHMARK SUITE" + " "*36 + "║")
    print("╚" + "="*98 + "╝")

    try:
        benchmark_sequence()
        benchmark_single_worker()
        benchmark_worker_scaling()
        benchmark_stress_test()

        print("\n" + "="*100)
        print("BENCHMARK COMPLETE")
        print("="*100 + "\n")

    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    run_all_benchmarks()
