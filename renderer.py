from __future__ import annotations

import logging
from typing import List

from drawing import DrawingTree, SketchBackend, Text, TreeBackend, plain, sketch
from elements import (
    BoxSpec,
    bar_label,
    fmt_man,
    fmt_num,
    graduation_milestone,
    info_box,
    phase_bar,
    sparkle,
    speech_bubble,
    stick_figure,
)
from layout import ANCHORS, LayoutAnchors
from month_utils import format_jp_date, month_to_x, months_to_year_str
from roadmap_models import TOTAL_MONTHS, RoadmapData
from text_fit import draw_fit_text, fit_font_size
from text_metrics import MetricsContext

logger = logging.getLogger(__name__)

TITLE = "フリーランス 5年ロードマップ"

BACKGROUND = "#FFFDF8"
GRID_COLOR = "#C5D8F1"
GRID_STEP = 20

# (fill, stroke) per phase.
PHASE_COLORS = {
    "learning": ("#FFE0B2", "#FF6B00"),
    "acquisition": ("#FFF9C4", "#F59E0B"),
    "freelance": ("#E0F7FA", "#00ACC1"),
    "milestone": ("#E8F5E9", "#388E3C"),
}

# The learning-end bubble is only drawn when the learning bar is at least this wide.
LEARNING_BUBBLE_MIN_W = 58


def build_box_specs(data: RoadmapData) -> List[BoxSpec]:
    """The four info boxes, left to right."""
    return [
        BoxSpec(
            label="案件獲得期間の収入見込み",
            formula=f"平均 {fmt_num(data.acquisition_income_per_month)}万円 × {data.acquisition_months}ヶ月",
            result=f"＝ {fmt_man(data.acquisition_total_income)}",
            fill="#FFF8E1", stroke="#F59E0B",
            formula_color="#B8860B", result_color="#E65100",
        ),
        BoxSpec(
            label="卒業後の月収目標",
            formula=f"月 {fmt_man(data.target_monthly_income)}",
            result="フリーランス達成！",
            fill="#E8F5E9", stroke="#388E3C",
            formula_color="#2E7D32", result_color="#4CAF50",
        ),
        BoxSpec(
            label="月貯金目標",
            formula=f"月 {fmt_man(data.monthly_savings)}",
            result="将来への投資💪",
            fill="#FFF3E0", stroke="#FF6B00",
            formula_color="#FF6B00", result_color="#FF9500",
        ),
        BoxSpec(
            label="5年間の貯金合計",
            formula=f"月{fmt_man(data.monthly_savings)} × {data.freelance_months}ヶ月",
            result=f"＝ {fmt_man(data.total_savings)}",
            sub="フリーランス期間の積み立て",
            fill="#EDE7F6", stroke="#7B1FA2",
            formula_color="#6A1B9A", result_color="#4A148C",
            sub_color="#9C27B0",
        ),
    ]


def footnote_text(data: RoadmapData) -> str:
    return (
        f"{data.total_months}ヶ月プラン（学習{data.learning_months}m + 案件{data.acquisition_months}m"
        f" + フリーランス{data.freelance_months}m）= 5年計画"
    )


# ---------------------------------------------------------------------------
# Sections (drawn in this order, top to bottom)
# ---------------------------------------------------------------------------


def _draw_background(b: SketchBackend, data: RoadmapData, anchors: LayoutAnchors) -> None:
    with b.group("background"):
        b.rectangle(0, 0, anchors.width, anchors.height, plain(None, 0, fill=BACKGROUND))

    if data.show_grid:
        with b.group("grid"):
            st = plain(GRID_COLOR, 0.6)
            for gx in range(GRID_STEP, anchors.width + 1, GRID_STEP):
                b.line(gx, 0, gx, anchors.height, st)
            for gy in range(GRID_STEP, anchors.height + 1, GRID_STEP):
                b.line(0, gy, anchors.width, gy, st)


def _draw_title(b: SketchBackend, data: RoadmapData, anchors: LayoutAnchors) -> None:
    with b.group("title"):
        b.text(Text(TITLE, anchors.width / 2, anchors.title_y, size=26, fill="#2D1B00", weight="bold"))
        b.line(160, anchors.underline_y, 1040, anchors.underline_y, sketch("#FF6B00", 2.5, roughness=2.5))
        b.text(Text(
            f"開始日: {format_jp_date(data.start_date)}",
            anchors.width - anchors.pad_r, anchors.title_y - 14,
            size=11, fill="#888", anchor="end",
        ))


def _draw_axis(b: SketchBackend, data: RoadmapData, anchors: LayoutAnchors) -> None:
    right = anchors.width - anchors.pad_r
    with b.group("axis"):
        b.line(anchors.pad_l - 12, anchors.axis_y, right + 12, anchors.axis_y, sketch("#555", 2, roughness=1.2, bowing=0.5))
        b.linear_path(
            [(right + 2, anchors.axis_y - 6), (right + 14, anchors.axis_y), (right + 2, anchors.axis_y + 6)],
            sketch("#555", 2, roughness=1),
        )

        # Year markers: 現在, 1年 ... 5年
        for yr in range(TOTAL_MONTHS // 12 + 1):
            x = month_to_x(yr * 12, anchors)
            b.line(x, anchors.axis_y - 7, x, anchors.axis_y + 7, plain("#555", 2))
            b.text(Text("現在" if yr == 0 else f"{yr}年", x, anchors.axis_y - 13, size=12, fill="#444", weight="bold"))

        # Small ticks at the phase boundaries
        for m, col in ((data.learning_months, "#FF6B00"), (data.total_months, "#388E3C")):
            x = month_to_x(m, anchors)
            b.line(x, anchors.axis_y - 4, x, anchors.axis_y + 4, plain(col, 2))


def _draw_phases(b: SketchBackend, metrics: MetricsContext, data: RoadmapData, anchors: LayoutAnchors) -> None:
    learn_x = month_to_x(0, anchors)
    learn_w = month_to_x(data.learning_months, anchors) - learn_x
    acq_x = month_to_x(data.learning_months, anchors)
    acq_w = month_to_x(data.total_months, anchors) - acq_x
    free_x = month_to_x(data.total_months, anchors)
    free_w = month_to_x(TOTAL_MONTHS, anchors) - free_x

    fill, stroke = PHASE_COLORS["learning"]
    with b.group("bar:learning"):
        phase_bar(b, learn_x, learn_w, fill=fill, stroke=stroke, stroke_width=2.2, roughness=2.2, bowing=1, anchors=anchors)
    fill, stroke = PHASE_COLORS["acquisition"]
    with b.group("bar:acquisition"):
        phase_bar(b, acq_x, acq_w, fill=fill, stroke=stroke, stroke_width=2, roughness=2.2, bowing=1, anchors=anchors)
    fill, stroke = PHASE_COLORS["freelance"]
    with b.group("bar:freelance"):
        phase_bar(b, free_x, free_w, fill=fill, stroke=stroke, stroke_width=2.2, roughness=2, bowing=0.5, anchors=anchors)

    with b.group("bar-label:learning"):
        bar_label(b, metrics, learn_x, learn_w, "学習期間", f"{data.learning_months}ヶ月", "#E65100", "#BF360C", anchors)
    with b.group("bar-label:acquisition"):
        bar_label(b, metrics, acq_x, acq_w, "案件獲得期間", f"{data.acquisition_months}ヶ月", "#B8860B", "#A0522D", anchors)

    # The freelance bar always spans most of the chart: three horizontal lines.
    with b.group("bar-label:freelance"):
        cx = free_x + free_w / 2
        cy = anchors.bar_top + anchors.bar_h / 2
        inner_w = free_w - 24
        draw_fit_text(b, metrics, "フリーランス期間", cx, cy - 26, inner_w, 18, "#006064")
        draw_fit_text(
            b, metrics,
            f"{data.freelance_months}ヶ月（{months_to_year_str(data.freelance_months)}）",
            cx, cy, inner_w, 15, "#00838F",
        )
        draw_fit_text(b, metrics, f"目標: 月 {fmt_man(data.target_monthly_income)}", cx, cy + 26, inner_w, 14, "#00838F")

    if learn_w >= LEARNING_BUBBLE_MIN_W:
        with b.group("bubble:learning-end"):
            speech_bubble(b, metrics, "学習終わり！🎉", month_to_x(data.learning_months, anchors), anchors.bar_top - 2, "down", anchors=anchors)
    with b.group("bubble:quit-job"):
        speech_bubble(b, metrics, "仕事やめる？", month_to_x(data.total_months, anchors), anchors.bar_bottom, "up", "#FFFDE7", anchors=anchors)

    with b.group("milestone"):
        graduation_milestone(b, month_to_x(data.total_months, anchors), anchors)

    if data.show_icons:
        with b.group("icons"):
            stick_figure(b, anchors.pad_l + 22, anchors.bar_bottom + anchors.icon_offset, "#FF6B00")
            sparkle(b, free_x + free_w * 0.15, anchors.bar_top - 16, "#00ACC1")
            sparkle(b, free_x + free_w * 0.40, anchors.bar_top - 20, "#0097A7")
            sparkle(b, free_x + free_w * 0.72, anchors.bar_top - 16, "#00BCD4")


def _draw_boxes(b: SketchBackend, metrics: MetricsContext, data: RoadmapData, anchors: LayoutAnchors) -> None:
    top = anchors.calc_top(data.show_icons)
    for i, spec in enumerate(build_box_specs(data)):
        with b.group(f"info-box:{i}"):
            info_box(b, metrics, anchors.box_x(i), top, anchors.box_w, anchors.box_h, spec)


def _draw_footnote(b: SketchBackend, metrics: MetricsContext, data: RoadmapData, anchors: LayoutAnchors) -> None:
    memo = footnote_text(data)
    with b.group("footnote"):
        b.rectangle(anchors.pad_l, anchors.memo_y, anchors.memo_w, anchors.memo_h, sketch("#FF6B00", 1.5, roughness=2, fill="#FFF3E0"))
        fs = fit_font_size(metrics, memo, anchors.memo_w - 14, 10, 7, "normal")
        b.text(Text(memo, anchors.pad_l + anchors.memo_w / 2, anchors.memo_y + anchors.memo_h - 7, size=fs, fill="#E65100", weight="normal"))


def render_roadmap(
    data: RoadmapData,
    metrics: MetricsContext,
    anchors: LayoutAnchors = ANCHORS,
) -> DrawingTree:
    """
    Lay out the whole roadmap and return it as a DrawingTree.

    Same input, same tree: geometry in the tree is exact, the hand-drawn
    wobble is added later by whichever backend replays it.
    """
    tree_backend = TreeBackend(anchors.width, anchors.height)
    b: SketchBackend = tree_backend

    _draw_background(b, data, anchors)
    _draw_title(b, data, anchors)
    _draw_axis(b, data, anchors)
    _draw_phases(b, metrics, data, anchors)
    _draw_boxes(b, metrics, data, anchors)
    _draw_footnote(b, metrics, data, anchors)

    tree = tree_backend.tree
    logger.debug(
        "Composed %d-month roadmap: %d groups, show_grid=%s, show_icons=%s",
        data.total_months, len(tree.children), data.show_grid, data.show_icons,
    )
    return tree
