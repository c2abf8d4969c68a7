from __future__ import annotations


# =============================================================================
# app.py (Streamlit UI)
#
#   - Sidebar form: plan, income target, savings target, start date, toggles
#   - Live preview of the hand-drawn roadmap
#   - Download as SVG / PNG (2x) / PDF (A4 landscape)
#
# Run with:  streamlit run app.py
# =============================================================================

import logging
from datetime import date
from typing import Any, Dict

import streamlit as st
from pydantic import ValidationError

from calculator import PLAN_KEYS, PLANS, calculate_roadmap, validate_input
from export import export_pdf_bytes, export_png_bytes, export_svg_bytes, preview_png_bytes
from renderer import render_roadmap
from roadmap_models import ExportSettings, RoadmapInput
from text_metrics import MetricsContext, resolve_font_families

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

APP_TITLE = "🚀 フリーランスロードマップ ジェネレーター"
APP_SUBTITLE = "入力するだけで、あなた専用の手書き風ロードマップが完成！"

DEFAULT_PLAN = 6
DEFAULT_INCOME = 40
DEFAULT_SAVINGS = 25


# ----------------------------
# Caching helpers
# ----------------------------


@st.cache_resource(show_spinner=False)
def _metrics(font_family: str) -> MetricsContext:
    """One measurement surface per process; shared by all sessions."""
    return MetricsContext(resolve_font_families([font_family]))


@st.cache_data(show_spinner=False)
def _cached_outputs(input_dump: Dict[str, Any], settings_dump: Dict[str, Any]) -> Dict[str, bytes]:
    """Cache wrapper: compose the diagram once and build every export from it."""
    inp = RoadmapInput(**input_dump)
    settings = ExportSettings(**settings_dump)
    data = calculate_roadmap(inp)
    tree = render_roadmap(data, _metrics(settings.font_family))
    logger.info("Rendered %d-month plan (start %s)", data.total_months, data.start_date)
    return {
        "preview": preview_png_bytes(tree, settings, dpi=110),
        "svg": export_svg_bytes(tree, settings),
        "png": export_png_bytes(tree, settings),
        "pdf": export_pdf_bytes(tree, settings),
    }


def _plan_caption(key: int) -> str:
    plan = PLANS[key]
    return f"{key}ヶ月プラン（学習 {plan.learning_months}ヶ月 / 案件 {plan.acquisition_months}ヶ月）"


def main() -> None:
    st.set_page_config(page_title="Freelance Roadmap", page_icon="🗺️", layout="wide")
    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)

    with st.sidebar:
        st.header("📝 入力フォーム")
        plan_key = st.radio(
            "📅 プランを選択",
            PLAN_KEYS,
            index=PLAN_KEYS.index(DEFAULT_PLAN),
            format_func=_plan_caption,
        )
        income = st.number_input("💰 稼ぎたい金額（月・万円）", min_value=0, max_value=99999, value=DEFAULT_INCOME, step=1)
        savings = st.number_input("🐷 貯金したい金額（月・万円）", min_value=0, max_value=99999, value=DEFAULT_SAVINGS, step=1)
        start = st.date_input("📅 開始日（任意）", value=date.today())
        show_grid = st.checkbox("方眼紙背景", value=True)
        show_icons = st.checkbox("落書きアイコン", value=True)

    raw = {
        "plan_key": plan_key,
        "target_monthly_income": int(income),
        "monthly_savings": int(savings),
        "start_date": start,
        "show_grid": show_grid,
        "show_icons": show_icons,
    }
    errors = validate_input(raw)
    if errors:
        for msg in errors.values():
            st.error(msg)
        return

    try:
        inp = RoadmapInput(**raw)
    except ValidationError as exc:
        st.error(f"入力エラー: {exc}")
        return

    settings = ExportSettings()
    with st.spinner("ロードマップを生成中..."):
        outputs = _cached_outputs(inp.model_dump(), settings.model_dump())

    st.image(outputs["preview"])

    c1, c2, c3 = st.columns(3)
    with c1:
        st.download_button("📄 SVGで保存", outputs["svg"], file_name="roadmap.svg", mime="image/svg+xml")
    with c2:
        st.download_button("🖼 PNGで保存", outputs["png"], file_name="roadmap.png", mime="image/png")
    with c3:
        st.download_button("📑 PDFで保存", outputs["pdf"], file_name="roadmap.pdf", mime="application/pdf")


if __name__ == "__main__":
    main()
