"""
This module contains half-open ranges and fixed-point probabilities.
"""
from typing import Any


class HalfOpenRange:
    """
    A range from ``from_`` (inclusive) to ``to`` (exclusive) over any totally ordered type.

    Args:
        from_: The start of the range, contained in the range.
        to: The end of the range, not contained in the range.

    Example:
        Create a range of working ages::

            working_age = HalfOpenRange(18, 65)
            working_age.contains(64)  # True
            working_age.contains(65)  # False

    """

    def __init__(self, from_: Any, to: Any):
        if from_ >= to:
            raise ValueError(
                f"Start value must be before end value. Got start value: {from_} and end value: {to}"
            )
        self.from_ = from_
        self.to = to

    def contains(self, value) -> bool:
        return self.from_ <= value < self.to

    def overlaps_with(self, other: "HalfOpenRange") -> bool:
        """
        Returns True if the two ranges share at least one value.
        Ranges which only touch, eg. [0, 5) and [5, 10), do not overlap.
        """
        return (
            # [  )
            # [    )
            self.from_ == other.from_
            # [   )
            #   [ )
            or self.to == other.to
            # [    )
            #   [    )
            or (self.from_ < other.from_ < self.to)
            #   [     )
            # [     )
            or (self.from_ < other.to < self.to)
            #    [  )
            # [         )
            or (other.from_ < self.from_ and self.to < other.to)
        )

    def __contains__(self, value) -> bool:
        return self.contains(value)

    def __eq__(self, obj):
        return isinstance(obj, HalfOpenRange) and self.from_ == obj.from_ and self.to == obj.to

    def __hash__(self):
        return hash((self.from_, self.to))

    def __str__(self) -> str:
        return f"[{self.from_}, {self.to})"

    def __repr__(self) -> str:
        return f"<HalfOpenRange {self}>"


class PartPer10K:
    """
    A probability or weight expressed in parts per ten thousand.
    Whole numbers avoid floating point drift when weights are summed.
    """

    TOTAL = 10000

    def __init__(self, n: int):
        self.n = n

    def percentage_string(self) -> str:
        return f"{self.n // 100}.{self.n % 100:02d}%"

    def __eq__(self, obj):
        return isinstance(obj, PartPer10K) and self.n == obj.n

    def __hash__(self):
        return hash(self.n)

    def __repr__(self) -> str:
        return f"<PartPer10K {self.n}>"


def per_10k(n: int) -> PartPer10K:
    return PartPer10K(n)


def per_1k(n: int) -> PartPer10K:
    return PartPer10K(n * 10)


def percent(n: int) -> PartPer10K:
    return PartPer10K(n * 100)
