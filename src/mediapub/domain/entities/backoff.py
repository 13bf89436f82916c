"""Backoff policies for the retry controller.

An algorithm is a factory ``base_delay_ms -> (attempt -> delay_ms)``.
Attempts are numbered from 1 (the first retry).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from mediapub.domain.entities.errors import ConfigError

BackoffSchedule = Callable[[int], float]
BackoffAlgorithm = Callable[[int], BackoffSchedule]

MIN_DELAY_MS = 1
MAX_DELAY_MS = 30_000
MAX_RETRIES = 10


def binary_exponential(delay_ms: int) -> BackoffSchedule:
    """Delay doubles per attempt: ``delay, 2*delay, 4*delay, ...``."""

    def schedule(attempt: int) -> float:
        return float(delay_ms * 2 ** (attempt - 1))

    return schedule


def linear(delay_ms: int) -> BackoffSchedule:
    def schedule(attempt: int) -> float:
        return float(delay_ms * attempt)

    return schedule


def fibonacci(delay_ms: int) -> BackoffSchedule:
    """Delay grows with the Fibonacci sequence (1, 1, 2, 3, 5, ...)."""

    def schedule(attempt: int) -> float:
        a, b = 1, 1
        for _ in range(attempt - 1):
            a, b = b, a + b
        return float(delay_ms * a)

    return schedule


def constant(delay_ms: int) -> BackoffSchedule:
    def schedule(attempt: int) -> float:
        return float(delay_ms)

    return schedule


ALGORITHMS: dict[str, BackoffAlgorithm] = {
    "binaryexponential": binary_exponential,
    "linear": linear,
    "fibonacci": fibonacci,
    "constant": constant,
}


def get_algorithm(name: str) -> BackoffAlgorithm:
    """Look up an algorithm by name.

    Matching ignores case and underscores, so ``binary_exponential`` and
    ``binaryExponential`` name the same algorithm.
    """
    algorithm = None
    if isinstance(name, str):
        algorithm = ALGORITHMS.get(name.replace("_", "").lower())
    if algorithm is None:
        raise ConfigError("invalid backoff algorithm")
    return algorithm


def _in_range(value: object, low: int, high: int) -> bool:
    # bool is an int subclass; True must not pass as 1
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return low <= value <= high


@dataclass(frozen=True)
class BackoffPolicy:
    """Retry bound and delay schedule for one logical request.

    Args:
        algorithm: Registered algorithm name (see ``ALGORITHMS``).
        delay_ms: Base delay in milliseconds, ``1..30000``.
        retries: Maximum number of retries, ``0..10``.
        tries: Attempts already made, ``0..retries-1`` (``0`` when
            ``retries`` is ``0``).
        method: Algorithm injected directly; takes precedence over
            ``algorithm``.
    """

    algorithm: str = "binary_exponential"
    delay_ms: int = 5_000
    retries: int = 3
    tries: int = 0
    method: BackoffAlgorithm | None = None

    def validated(self) -> BackoffPolicy:
        """Return ``self`` or raise ``ConfigError``."""
        if not _in_range(self.delay_ms, MIN_DELAY_MS, MAX_DELAY_MS):
            raise ConfigError("invalid backoff delay")
        if not _in_range(self.retries, 0, MAX_RETRIES):
            raise ConfigError("invalid backoff retries")
        if not _in_range(self.tries, 0, max(self.retries - 1, 0)):
            raise ConfigError("invalid backoff tries")
        if self.method is None:
            get_algorithm(self.algorithm)
        elif not callable(self.method):
            raise ConfigError("invalid backoff algorithm")
        return self

    def schedule(self) -> BackoffSchedule:
        algorithm = self.method or get_algorithm(self.algorithm)
        return algorithm(self.delay_ms)
