"""Legend ordering for the stacked equity chart."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .models import EQUITY_SUFFIX, ChartPoint


@dataclass(frozen=True)
class ChartSeries:
    """One stacked area of the chart, described from the latest point."""

    key: str
    name: str
    equity: float
    percentage: float

    @property
    def label(self) -> str:
        return f"{self.name} ({self.percentage:.1f}%)"


def chart_series(points: Sequence[ChartPoint]) -> List[ChartSeries]:
    """Return the chart areas ordered by their share of the latest total."""

    if not points:
        return []
    last = points[-1]
    series = []
    for key, equity in last.equity_fields().items():
        percentage = (equity / last.total_equity) * 100 if last.total_equity else 0.0
        series.append(
            ChartSeries(
                key=key,
                name=key[: -len(EQUITY_SUFFIX)],
                equity=equity,
                percentage=percentage,
            )
        )
    series.sort(key=lambda item: item.percentage, reverse=True)
    return series


__all__ = ["ChartSeries", "chart_series"]
