from __future__ import annotations


# =============================================================================
# roadmap_models.py (input / output records)
#
#   - RoadmapInput: what the form collects (validated by pydantic)
#   - RoadmapData: the normalized record handed to the renderer
#   - ExportSettings: knobs for the SVG/PNG/PDF exporters
#
# RoadmapData only checks per-field bounds. Cross-field consistency
# (learning + acquisition == total, etc.) is established by calculator.py;
# the renderer draws whatever it is given.
# =============================================================================

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Length of the whole plan, in months (5 years).
TOTAL_MONTHS = 60

PlanKey = Literal[3, 4, 5, 6, 9, 10]


class RoadmapInput(BaseModel):
    plan_key: PlanKey
    target_monthly_income: int = Field(ge=0)
    monthly_savings: int = Field(ge=0)
    start_date: date = Field(default_factory=date.today)

    show_grid: bool = Field(default=True)
    show_icons: bool = Field(default=True)


class RoadmapData(BaseModel):
    model_config = ConfigDict(frozen=True)

    plan_key: int
    total_months: int = Field(ge=0)
    learning_months: int = Field(ge=0)
    acquisition_months: int = Field(ge=0)
    freelance_months: int = Field(ge=0)

    # Amounts are in 万円 (10,000 JPY units).
    target_monthly_income: int = Field(ge=0)
    monthly_savings: int = Field(ge=0)
    acquisition_income_per_month: float = Field(ge=0)
    acquisition_total_income: int = Field(ge=0)
    total_savings: int = Field(ge=0)

    start_date: date
    learning_end_date: date
    graduation_date: date

    show_grid: bool = True
    show_icons: bool = True


class ExportSettings(BaseModel):
    font_family: str = Field(default="Yomogi")  # Falls back at render-time if not found.
    png_scale: Literal[1, 2, 3] = Field(default=2)
    page_size: Literal["A3", "A4"] = Field(default="A4")
    sketch_seed: int = Field(default=1)
    embed_webfont: bool = Field(default=True)
    fallback_font_family: Optional[str] = Field(default=None)

    @field_validator("font_family")
    @classmethod
    def _font_not_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            return "Yomogi"
        return v

    @field_validator("fallback_font_family")
    @classmethod
    def _fallback_strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None
