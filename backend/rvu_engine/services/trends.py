"""Trend classification over window buckets.

Compares the sum of the latest ``compare_last_n`` buckets against the sum of
the ``compare_last_n`` buckets just before them. Both sums are rounded to
cents before comparing so float noise never flips a flat series.
"""

from collections.abc import Sequence
from enum import Enum

from rvu_engine.services.records import round_half_up
from rvu_engine.services.time_windows import WindowBucket


class Trend(str, Enum):
    """Direction of change between two adjacent window ranges."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class TrendMetric(str, Enum):
    """Bucket series a trend is computed over."""

    RVU = "rvu"
    REVENUE = "revenue"


def classify_trend(values: Sequence[float], compare_last_n: int) -> Trend:
    """Classify a series of per-window values, oldest first.

    Short series are padded with zeros on the old side, so a user with a
    single week of history compares that week against zero.

    Raises:
        ValueError: If compare_last_n is less than 1.
    """
    if compare_last_n < 1:
        raise ValueError(f"compare_last_n must be at least 1, got {compare_last_n}")

    current_values = values[-compare_last_n:]
    prior_values = values[-2 * compare_last_n:-compare_last_n] if len(values) > compare_last_n else []

    current = round_half_up(sum(current_values))
    prior = round_half_up(sum(prior_values))

    if current > prior:
        return Trend.UP
    if current < prior:
        return Trend.DOWN
    return Trend.STABLE


def classify_bucket_trend(
    buckets: Sequence[WindowBucket],
    compare_last_n: int,
    metric: TrendMetric = TrendMetric.RVU,
) -> Trend:
    """Classify the RVU or revenue series of a bucket sequence."""
    if TrendMetric(metric) is TrendMetric.RVU:
        values = [bucket.rvu_sum for bucket in buckets]
    else:
        values = [bucket.revenue_sum for bucket in buckets]
    return classify_trend(values, compare_last_n)
