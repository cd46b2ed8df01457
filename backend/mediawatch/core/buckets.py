"""
Calendar bucketing for the analytics time series.

Each granularity is a small strategy object that knows how to align a date
to the start of its bucket, advance one bucket and format a label.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Union

from dateutil.relativedelta import relativedelta

from mediawatch.config import MAX_BUCKETS
from mediawatch.schemas import Granularity, TimeBucket
from mediawatch.utils import bucket_date


class BucketStrategy:
    """Alignment, stepping and labelling for one granularity."""

    step: relativedelta

    def align(self, day: date) -> date:
        raise NotImplementedError

    def advance(self, day: date) -> date:
        return day + self.step

    def label(self, start: date) -> str:
        raise NotImplementedError


class DailyStrategy(BucketStrategy):
    step = relativedelta(days=1)

    def align(self, day: date) -> date:
        return day

    def label(self, start: date) -> str:
        return f"{start.month}/{start.day}"


class WeeklyStrategy(BucketStrategy):
    step = relativedelta(weeks=1)

    def align(self, day: date) -> date:
        # Weeks start on Monday
        return day - timedelta(days=day.weekday())

    def label(self, start: date) -> str:
        return f"{start.month}/{start.day} 주"


class MonthlyStrategy(BucketStrategy):
    step = relativedelta(months=1)

    def align(self, day: date) -> date:
        return day.replace(day=1)

    def label(self, start: date) -> str:
        return f"{start.year}/{start.month}"


class QuarterlyStrategy(BucketStrategy):
    step = relativedelta(months=3)

    def align(self, day: date) -> date:
        first_month = 3 * ((day.month - 1) // 3) + 1
        return date(day.year, first_month, 1)

    def label(self, start: date) -> str:
        return f"{start.year} Q{(start.month - 1) // 3 + 1}"


class YearlyStrategy(BucketStrategy):
    step = relativedelta(years=1)

    def align(self, day: date) -> date:
        return date(day.year, 1, 1)

    def label(self, start: date) -> str:
        return str(start.year)


STRATEGIES: Dict[Granularity, BucketStrategy] = {
    Granularity.DAILY: DailyStrategy(),
    Granularity.WEEKLY: WeeklyStrategy(),
    Granularity.MONTHLY: MonthlyStrategy(),
    Granularity.QUARTERLY: QuarterlyStrategy(),
    Granularity.YEARLY: YearlyStrategy(),
}


def get_strategy(granularity: Union[Granularity, str]) -> BucketStrategy:
    return STRATEGIES[Granularity(granularity)]


def build_time_buckets(
    start_date: date,
    end_date: date,
    granularity: Union[Granularity, str],
    max_buckets: int = MAX_BUCKETS,
) -> List[TimeBucket]:
    """
    Build contiguous buckets covering [start_date, end_date].

    Args:
        start_date: First day of the range
        end_date: Last day of the range, inclusive
        granularity: Bucket width
        max_buckets: Safety cap on the number of buckets

    Returns:
        Chronologically ordered TimeBuckets where each bucket's end is the
        next bucket's start
    """
    strategy = get_strategy(granularity)
    buckets: List[TimeBucket] = []

    current = strategy.align(start_date)
    while True:
        following = strategy.advance(current)
        buckets.append(
            TimeBucket(
                bucket=current.isoformat(),
                label=strategy.label(current),
                start=current,
                end=following,
            )
        )
        current = following
        if current > end_date or len(buckets) >= max_buckets:
            break

    return buckets


def _as_date(moment: Union[datetime, date]) -> date:
    if isinstance(moment, datetime):
        return bucket_date(moment)
    return moment


def assign_to_bucket(
    moment: Union[datetime, date, None],
    buckets: Sequence[TimeBucket],
) -> Optional[TimeBucket]:
    """
    Find the bucket a document date belongs to.

    Scans from the latest bucket backwards and returns the first whose start
    is not after the date. Dates before the first bucket fall into the first
    bucket; dates after the last bucket fall into the last one.

    Returns:
        The matching bucket, or None when there are no buckets or no date
    """
    if not buckets or moment is None:
        return None

    day = _as_date(moment)
    for bucket in reversed(buckets):
        if day >= bucket.start:
            return bucket
    return buckets[0]


def is_within(moment: Union[datetime, date], buckets: Sequence[TimeBucket]) -> bool:
    """True when the date lies inside [first.start, last.end)."""
    if not buckets:
        return False
    day = _as_date(moment)
    return buckets[0].start <= day < buckets[-1].end
