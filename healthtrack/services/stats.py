"""
Dashboard insights derived from the storage service's statistics summary.

Missing numbers are read as zero and an empty population yields zero
percentages, so a partial summary never breaks the stats panel.
"""

import math
from collections.abc import Iterable
from typing import Literal

from pydantic import BaseModel, ConfigDict

from healthtrack.domain.models import BMICategory, StatsSummary
from healthtrack.services.metrics import get_bmi_color

GOOD_AVERAGE_SCORE = 70
ABOVE_NORMAL_ALERT_PERCENT = 50


class DistributionShare(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    count: int
    percent: int
    color: str | None = None


class StatsInsights(BaseModel):
    """Display-ready figures for the stats panel."""

    model_config = ConfigDict(frozen=True)

    total_records: int
    average_score: int
    min_score: float
    max_score: float
    bmi_shares: tuple[DistributionShare, ...]
    age_shares: tuple[DistributionShare, ...]
    gender_shares: tuple[DistributionShare, ...]
    normal_bmi_percent: int
    above_normal_percent: int
    above_normal_alert: bool
    score_verdict: Literal["good", "needs improvement"] | None
    tracking_message: str


def share_percent(count: int, total: int) -> int:
    """Whole percent, halves rounded up."""
    if total <= 0:
        return 0
    return math.floor(count / total * 100 + 0.5)


def _shares(
    buckets: Iterable[tuple[str | None, int]], total: int, colored: bool = False
) -> tuple[DistributionShare, ...]:
    return tuple(
        DistributionShare(
            label=label or "Unknown",
            count=count,
            percent=share_percent(count, total),
            color=get_bmi_color(label) if colored else None,
        )
        for label, count in buckets
    )


def summarize_stats(stats: StatsSummary) -> StatsInsights:
    total = stats.total_records
    scores = stats.health_score_stats

    bmi_counts = {bucket.category: bucket.count for bucket in stats.bmi_distribution}
    normal_percent = share_percent(bmi_counts.get(BMICategory.NORMAL.value, 0), total)
    above_normal_percent = share_percent(
        bmi_counts.get(BMICategory.OVERWEIGHT.value, 0), total
    ) + share_percent(bmi_counts.get(BMICategory.OBESE.value, 0), total)

    verdict: Literal["good", "needs improvement"] | None = None
    if scores.average_score:
        verdict = "good" if scores.average_score >= GOOD_AVERAGE_SCORE else "needs improvement"

    return StatsInsights(
        total_records=total,
        average_score=math.floor(scores.average_score + 0.5) if scores.average_score else 0,
        min_score=scores.min_score or 0,
        max_score=scores.max_score or 0,
        bmi_shares=_shares(
            ((b.category, b.count) for b in stats.bmi_distribution), total, colored=True
        ),
        age_shares=_shares(((b.group, b.count) for b in stats.age_distribution), total),
        gender_shares=_shares(((b.gender, b.count) for b in stats.gender_distribution), total),
        normal_bmi_percent=normal_percent,
        above_normal_percent=above_normal_percent,
        above_normal_alert=above_normal_percent > ABOVE_NORMAL_ALERT_PERCENT,
        score_verdict=verdict,
        tracking_message=(
            f"{total} {'person is' if total == 1 else 'people are'} actively tracking their health"
        ),
    )
