from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from month_utils import add_months
from roadmap_models import TOTAL_MONTHS, RoadmapData, RoadmapInput


@dataclass(frozen=True)
class PlanDef:
    label: str
    total_months: int
    learning_months: int
    acquisition_months: int
    acquisition_total_income: int  # 万円 earned over the whole acquisition phase


PLANS: Dict[int, PlanDef] = {
    3: PlanDef("3ヶ月", 3, 2, 1, 5),
    4: PlanDef("4ヶ月", 4, 2, 2, 5),
    5: PlanDef("5ヶ月", 5, 4, 1, 10),
    6: PlanDef("6ヶ月", 6, 4, 2, 10),
    9: PlanDef("9ヶ月", 9, 8, 1, 20),
    10: PlanDef("10ヶ月", 10, 8, 2, 20),
}

PLAN_KEYS: List[int] = sorted(PLANS)

MAX_MONTHLY_INCOME = 9999


def calculate_roadmap(inp: RoadmapInput) -> RoadmapData:
    """Derive every duration, amount and date the diagram needs from the form input."""
    plan = PLANS[inp.plan_key]

    acquisition_total_income = plan.acquisition_total_income
    acquisition_income_per_month = acquisition_total_income / plan.acquisition_months
    freelance_months = TOTAL_MONTHS - plan.total_months
    total_savings = inp.monthly_savings * freelance_months

    return RoadmapData(
        plan_key=inp.plan_key,
        total_months=plan.total_months,
        learning_months=plan.learning_months,
        acquisition_months=plan.acquisition_months,
        freelance_months=freelance_months,
        target_monthly_income=inp.target_monthly_income,
        monthly_savings=inp.monthly_savings,
        acquisition_income_per_month=acquisition_income_per_month,
        acquisition_total_income=acquisition_total_income,
        total_savings=total_savings,
        start_date=inp.start_date,
        learning_end_date=add_months(inp.start_date, plan.learning_months),
        graduation_date=add_months(inp.start_date, plan.total_months),
        show_grid=inp.show_grid,
        show_icons=inp.show_icons,
    )


def validate_input(raw: Mapping[str, Any]) -> Dict[str, str]:
    """
    Form validation. Returns field -> message; an empty dict means OK.
    Savings equal to the income target is allowed.
    """
    errors: Dict[str, str] = {}

    plan_key = raw.get("plan_key")
    if not plan_key:
        errors["plan_key"] = "プランを選択してください"
    elif plan_key not in PLANS:
        errors["plan_key"] = f"プランは {', '.join(str(k) for k in PLAN_KEYS)} ヶ月から選んでください"

    income = raw.get("target_monthly_income")
    if income is None or income < 1:
        errors["target_monthly_income"] = "1万円以上を入力してください"
    elif income > MAX_MONTHLY_INCOME:
        errors["target_monthly_income"] = f"値が大きすぎます（〜{MAX_MONTHLY_INCOME}万円）"

    savings = raw.get("monthly_savings")
    if savings is None or savings < 0:
        errors["monthly_savings"] = "0万円以上を入力してください"
    elif income is not None and savings > income:
        errors["monthly_savings"] = "稼ぎたい金額以下にしてください"

    return errors
