import sys
from datetime import date
from pathlib import Path

# Force a headless backend for matplotlib before any pyplot imports.
import matplotlib

matplotlib.use("Agg")

import pytest

# Ensure project root is on sys.path for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from calculator import calculate_roadmap  # noqa: E402
from roadmap_models import RoadmapInput  # noqa: E402
from text_metrics import MetricsContext  # noqa: E402


class FixedAdvanceMetrics:
    """Every character is 0.6 * size wide. Makes fit/wrap results exact."""

    def measure_width(self, text: str, size: float, weight: str = "bold") -> float:
        return len(text) * size * 0.6


@pytest.fixture(scope="session")
def metrics() -> MetricsContext:
    return MetricsContext()


@pytest.fixture
def fixed_metrics() -> FixedAdvanceMetrics:
    return FixedAdvanceMetrics()


@pytest.fixture
def make_data():
    def _make(plan_key=6, income=40, savings=25, start=date(2024, 1, 1), show_grid=True, show_icons=True):
        return calculate_roadmap(
            RoadmapInput(
                plan_key=plan_key,
                target_monthly_income=income,
                monthly_savings=savings,
                start_date=start,
                show_grid=show_grid,
                show_icons=show_icons,
            )
        )

    return _make
