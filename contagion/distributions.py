"""
This module contains the distributions used to parameterize stochastic decisions.

Every distribution is sampled with an explicit random generator, so that a
simulation seeded with a given generator always makes the same decisions.
"""
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Callable, List, Tuple

import numpy as np

from contagion.ranges import HalfOpenRange, PartPer10K, per_10k


class Distribution(ABC):
    """
    A distribution of values which can be sampled with a random generator.
    """

    @abstractmethod
    def sample(self, rng: np.random.Generator):
        pass

    def __repr__(self):
        return f"<{self.__class__.__name__}>"


class ConstantDistribution(Distribution):
    """
    A degenerate distribution which always returns the same value.
    """

    def __init__(self, value: Any):
        self.value = value

    def sample(self, rng: np.random.Generator):
        return self.value


class NormalDistribution(Distribution):
    def __init__(self, mean: float, stddev: float):
        self.mean = mean
        self.stddev = stddev

    def sample(self, rng: np.random.Generator) -> float:
        return self.mean + rng.standard_normal() * self.stddev


class NormalDurationDistribution(Distribution):
    """
    A normal distribution of durations.
    Sampling is done in whole milliseconds.

    Args:
        mean: The mean duration.
        stddev: The standard deviation of the duration.

    """

    def __init__(self, mean: timedelta, stddev: timedelta):
        self.mean = mean
        self.stddev = stddev
        self._mean_ms = _to_millis(mean)
        self._stddev_ms = _to_millis(stddev)

    def sample(self, rng: np.random.Generator) -> timedelta:
        offset_ms = int(rng.standard_normal() * self._stddev_ms)
        return timedelta(milliseconds=self._mean_ms + offset_ms)


class UniformFloatDistribution(Distribution):
    def __init__(self, min: float, max: float):
        self.min = min
        self.max = max
        self._diff = max - min

    def sample(self, rng: np.random.Generator) -> float:
        return self.min + rng.random() * self._diff


class UniformIntDistribution(Distribution):
    """
    A uniform distribution of integers from ``min`` (inclusive) to ``max`` (exclusive).
    """

    def __init__(self, min: int, max: int):
        assert max > min, f"Max {max} must be greater than min {min}"
        self.min = min
        self.max = max

    def sample(self, rng: np.random.Generator) -> int:
        return int(rng.integers(self.min, self.max))


class RateDistribution(Distribution):
    """
    A boolean distribution which is True with a probability of ``rate``.
    """

    def __init__(self, rate: PartPer10K):
        self.rate = rate

    def sample(self, rng: np.random.Generator) -> bool:
        return bool(rng.integers(PartPer10K.TOTAL) < self.rate.n)


Bin = Tuple[HalfOpenRange, PartPer10K]


class HistogramDistribution(Distribution):
    """
    A distribution made of weighted bins, each with its own distribution over the bin's range.

    Sampling is done in two stages: a bin is chosen according to the bin weights,
    and then a value is sampled from the chosen bin's distribution.

    Args:
        bins: The bin ranges and their weights. The ranges must cover their domain with no gaps
            and the weights must add up to exactly 100%.
        sampler: Builds the distribution used to sample values inside a given bin range.

    Example:
        Create an age distribution where ages are uniform inside each bin::

            ages = HistogramDistribution(
                bins=[(HalfOpenRange(0, 50), percent(50)), (HalfOpenRange(50, 100), percent(50))],
                sampler=lambda r: UniformIntDistribution(r.from_, r.to),
            )

    """

    def __init__(
        self,
        bins: List[Bin],
        sampler: Callable[[HalfOpenRange], Distribution],
    ):
        sorted_bins = sorted(bins, key=lambda b: b[0].from_)
        parts = 0
        for idx, (bin_range, weight) in enumerate(sorted_bins):
            next_bin = sorted_bins[idx + 1] if idx + 1 < len(sorted_bins) else None
            if next_bin is not None and bin_range.to != next_bin[0].from_:
                raise ValueError(
                    f"Gap in bins: {bin_range.to} to {next_bin[0].from_} is not covered"
                )
            parts += weight.n

        if parts != PartPer10K.TOTAL:
            raise ValueError(
                f"Bins must add up to exactly 100%. Got: {per_10k(parts).percentage_string()}"
            )

        self.ranges = [bin_range for bin_range, _ in sorted_bins]
        self.cutoffs = np.cumsum([weight.n for _, weight in sorted_bins], dtype=np.int64)
        self.distributions = [sampler(bin_range) for bin_range in self.ranges]

    def sample(self, rng: np.random.Generator):
        draw = rng.integers(PartPer10K.TOTAL)
        return self.distributions[self._bin_index(draw)].sample(rng)

    def _bin_index(self, draw: int) -> int:
        for idx, cutoff in enumerate(self.cutoffs):
            if cutoff > draw:
                return idx

        # Unreachable if the bins were validated correctly.
        raise RuntimeError(
            f"Sample {draw} not within range - histogram distribution is not configured properly"
        )


def _to_millis(duration: timedelta) -> int:
    return (duration.days * 86400 + duration.seconds) * 1000 + duration.microseconds // 1000
