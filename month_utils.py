from __future__ import annotations

import calendar
from datetime import date

from layout import ANCHORS, LayoutAnchors
from roadmap_models import TOTAL_MONTHS


def month_to_x(month: float, anchors: LayoutAnchors = ANCHORS) -> float:
    """
    Map a month offset in [0, TOTAL_MONTHS] onto the chart's x range
    [pad_l, width - pad_r]. Linear and monotonic.
    """
    return anchors.pad_l + (month / TOTAL_MONTHS) * anchors.chart_w


def months_to_year_str(months: int) -> str:
    """54 -> '4年6ヶ月', 48 -> '4年'."""
    yr, mo = divmod(months, 12)
    return f"{yr}年" if mo == 0 else f"{yr}年{mo}ヶ月"


def add_months(d: date, months: int) -> date:
    """
    Calendar month arithmetic. The day is clamped to the last day of the
    target month (Jan 31 + 1 month -> Feb 28/29).
    """
    idx = d.month - 1 + months
    year = d.year + idx // 12
    month = idx % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def format_jp_date(d: date) -> str:
    return f"{d.year}年{d.month}月{d.day}日"
