"""
Find one non-trivial factor of a composite integer by racing Pollard's Rho workers.

ALGORITHM:
1. Sequence: g(v) = v^2 + 1 (mod n), iterated from a random start
   - The orbit collides modulo the smallest prime p after ~sqrt(p) steps
2. Floyd cycle detection: tortoise x takes one step, hare y takes two
   - gcd(|x - y|, n) exposes p once both walkers share a residue mod p
3. Race: several workers walk from independent random starts
   - The first worker to find 1 < d < n claims the shared result slot
   - The others notice the claim at their next periodic check and stop

TERMINATION:
- d == n means the walk cycled without splitting n; that worker gives up
  and never writes n as a factor
- Every worker therefore stops, so prime inputs report None instead of hanging
- max_iterations bounds a walk further (useful in tests)

Workers are threads sharing one ResultSlot; the slot's lock is the only
synchronization in a race.
"""
import enum
import logging
import math
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import lru_cache

log = logging.getLogger(__name__)

# Iterations between two looks at the result slot
CHECK_INTERVAL = 1_000_000

# Workers used when the caller does not ask for more
DEFAULT_WORKERS = 1


class RhoRaceError(Exception):
    """Base class for errors raised before or while starting a race."""


class InvalidTarget(RhoRaceError, ValueError):
    """The number to factor is not an integer >= 2."""


class InvalidWorkerCount(RhoRaceError, ValueError):
    """A race needs at least one worker."""


class WorkerStartupError(RhoRaceError, RuntimeError):
    """Worker bookkeeping or threads could not be allocated."""


class SearchOutcome(enum.Enum):
    CLAIMED = "claimed"
    LOST = "lost"
    ABANDONED = "abandoned"
    EXHAUSTED = "exhausted"
    CAPPED = "capped"


@dataclass(frozen=True)
class SearchReport:
    """What a single worker did during a race."""
    worker: int
    start: int
    outcome: SearchOutcome
    iterations: int
    factor: int | None = None


@dataclass(frozen=True)
class RaceResult:
    """Final state of a race, read once after every worker has finished."""
    n: int
    factor: int | None
    winner: int | None
    reports: tuple[SearchReport, ...]
    elapsed: float

    @property
    def found(self) -> bool:
        return self.factor is not None

    @property
    def cofactor(self) -> int | None:
        if self.factor is None:
            return None
        return self.n // self.factor


class ResultSlot:
    """
    Holds the first factor found in a race, or None.

    The slot goes from empty to filled at most once. claim() checks and
    writes under one lock, so two workers can never both see it empty
    and both write.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._value: int | None = None
        self._winner: int | None = None
        self._cancelled = False

    def claim(self, value: int, worker: int | None = None) -> bool:
        """
        Store value if the slot is still empty.

        Args:
            value: The factor to record (must be > 1)
            worker: Index of the claiming worker

        Returns:
            True if this call filled the slot, False if it was already taken
        """
        if value <= 1:
            raise ValueError(f"{value} is not a non-trivial factor")
        with self._lock:
            if self._value is not None or self._cancelled:
                return False
            self._value = value
            self._winner = worker
            return True

    def cancel(self) -> None:
        """Close an empty slot so that running workers stop at their next check."""
        with self._lock:
            self._cancelled = True

    def is_claimed(self) -> bool:
        with self._lock:
            return self._value is not None

    def is_closed(self) -> bool:
        """True once workers have no reason to keep searching."""
        with self._lock:
            return self._value is not None or self._cancelled

    @property
    def value(self) -> int | None:
        with self._lock:
            return self._value

    @property
    def winner(self) -> int | None:
        with self._lock:
            return self._winner


# Miller–Rabin primality test (memoized)
@lru_cache(maxsize=128)
def is_prime(n: int, bases: tuple[int, ...] = (2, 325, 9375, 28178, 450775, 9780504, 1795265022)) -> bool:
    if n < 2:
        return False
    for p in (2, 3, 5, 7, 11, 13, 17, 19, 23):
        if n == p:
            return True
        if n % p == 0:
            return False

    # write n-1 as d * 2^s
    d: int = n - 1
    s: int = 0
    while (d & 1) == 0:
        d >>= 1
        s += 1

    def check(a):
        x: int = pow(a, d, n)
        if x == 1 or x == n - 1:
            return True
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                return True
        return False

    for a in bases:
        if a % n == 0:
            continue
        if not check(a):
            return False
    return True


def next_residue(v: int, n: int) -> int:
    """g(v) = v^2 + 1 (mod n)."""
    return (v * v + 1) % n


# Floyd's Pollard Rho for one starting point
def rho_search(
    n: int,
    start: int,
    slot: ResultSlot,
    worker: int = 0,
    check_interval: int = CHECK_INTERVAL,
    max_iterations: int | None = None,
) -> SearchReport:
    """
    Walk the rho sequence from start until a factor, a cycle, or a claimed slot.

    Args:
        n: Number to factor
        start: Initial residue for both tortoise and hare
        slot: Result slot shared with the other workers
        worker: Index used in reports and logs
        check_interval: Iterations between two looks at the slot
        max_iterations: Optional cap on the walk length

    Returns:
        SearchReport describing how the walk ended
    """
    _check_walk_args(check_interval, max_iterations)
    x: int = start
    y: int = start
    counter: int = 0

    while True:
        if counter % check_interval == 0 and slot.is_closed():
            # Someone else already won, don't bother
            outcome, d = SearchOutcome.ABANDONED, None
            break
        if max_iterations is not None and counter >= max_iterations:
            outcome, d = SearchOutcome.CAPPED, None
            break

        # hare runs twice for each tortoise step
        x = next_residue(x, n)
        y = next_residue(next_residue(y, n), n)
        counter += 1

        d = math.gcd(abs(x - y), n)
        if d == 1:
            continue
        if d == n:
            outcome = SearchOutcome.EXHAUSTED
        elif slot.claim(d, worker):
            outcome = SearchOutcome.CLAIMED
        else:
            outcome = SearchOutcome.LOST
        break

    log.debug("worker %d: %s after %d iterations (start=%d, d=%s)",
              worker, outcome.value, counter, start, d)
    return SearchReport(worker, start, outcome, counter, d)


def _check_walk_args(check_interval: int, max_iterations: int | None) -> None:
    if check_interval < 1:
        raise ValueError(f"check_interval must be positive, got {check_interval}")
    if max_iterations is not None and max_iterations < 0:
        raise ValueError(f"max_iterations must not be negative, got {max_iterations}")


def _check_race_args(n, workers: int) -> None:
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidTarget(f"expected an integer, got {type(n).__name__}")
    if n < 2:
        raise InvalidTarget(f"{n} has no non-trivial factors")
    if isinstance(workers, bool) or not isinstance(workers, int):
        raise InvalidWorkerCount(f"worker count must be an integer, got {workers!r}")
    if workers < 1:
        raise InvalidWorkerCount(f"must have at least one worker, got {workers}")


def race(
    n: int,
    workers: int = DEFAULT_WORKERS,
    seed: int | None = None,
    check_interval: int = CHECK_INTERVAL,
    max_iterations: int | None = None,
    check_prime: bool = False,
) -> RaceResult:
    """
    Race `workers` rho searches from independent random starts.

    Blocks until every worker has finished, then reads the result slot.

    Args:
        n: Number to factor (odd composite for a meaningful answer)
        workers: Number of concurrent searches (>= 1)
        seed: Seed for the starting points; None draws fresh ones
        check_interval: Iterations between slot checks in each worker
        max_iterations: Optional per-worker cap on the walk length
        check_prime: Return at once without searching if n is prime

    Returns:
        RaceResult whose factor is None when no worker split n

    Raises:
        InvalidTarget: n is not an integer >= 2
        InvalidWorkerCount: workers < 1
        WorkerStartupError: worker state or threads could not be allocated
    """
    _check_race_args(n, workers)
    _check_walk_args(check_interval, max_iterations)

    t0 = time.perf_counter()
    if check_prime and is_prime(n):
        log.info("%d is prime, skipping search", n)
        return RaceResult(n, None, None, (), time.perf_counter() - t0)

    rng = random.Random(seed)
    try:
        starts = [rng.randrange(n) for _ in range(workers)]
    except MemoryError as e:
        raise WorkerStartupError(f"couldn't allocate {workers} starting points") from e

    slot = ResultSlot()
    log.info("racing %d worker(s) on %d-bit n", workers, n.bit_length())

    futures = []
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rho") as executor:
        try:
            for i, start in enumerate(starts):
                futures.append(executor.submit(
                    rho_search, n, start, slot, i, check_interval, max_iterations))
        except (RuntimeError, MemoryError) as e:
            slot.cancel()
            raise WorkerStartupError(f"couldn't start worker {len(futures)} of {workers}") from e

    # the executor joined every thread on exit; result() re-raises worker errors
    reports = tuple(f.result() for f in futures)
    elapsed = time.perf_counter() - t0
    factor = slot.value
    if factor is None:
        log.info("no factor found by %d worker(s) in %.3fs", workers, elapsed)
    else:
        log.info("worker %d found %d in %.3fs", slot.winner, factor, elapsed)
    return RaceResult(n, factor, slot.winner, reports, elapsed)


def find_factor(n: int, workers: int = DEFAULT_WORKERS, **kwargs) -> int | None:
    """
    Return one non-trivial factor of n, or None if the race found nothing.

    Keyword arguments are passed through to race().
    """
    return race(n, workers, **kwargs).factor
