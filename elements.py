from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Optional

from drawing import SketchBackend, Text, plain, sketch
from layout import ANCHORS, LayoutAnchors
from text_fit import draw_fit_text, fit_font_size, wrap_text
from text_metrics import MetricsContext

# Bar widths (px) at which the in-bar label changes form.
BAR_LABEL_HORIZONTAL_MIN = 80
BAR_LABEL_ROTATED_MIN = 22

BarLabelTier = Literal["horizontal", "rotated", "hidden"]


def fmt_man(n: float) -> str:
    """1350 -> '1,350万円'. Whole numbers are printed without a decimal part."""
    return f"{fmt_num(n)}万円"


def fmt_num(n: float) -> str:
    if float(n).is_integer():
        return f"{int(n):,}"
    return f"{n:,.1f}"


# ---------------------------------------------------------------------------
# Phase bars
# ---------------------------------------------------------------------------


def phase_bar(backend: SketchBackend, x: float, w: float, *, fill: str, stroke: str,
              stroke_width: float, roughness: float, bowing: float,
              anchors: LayoutAnchors = ANCHORS) -> None:
    backend.rectangle(
        x, anchors.bar_top, w, anchors.bar_h,
        sketch(stroke, stroke_width, roughness=roughness, bowing=bowing, fill=fill),
    )


def bar_label_tier(bar_w: float) -> BarLabelTier:
    if bar_w >= BAR_LABEL_HORIZONTAL_MIN:
        return "horizontal"
    if bar_w >= BAR_LABEL_ROTATED_MIN:
        return "rotated"
    return "hidden"


def bar_label(
    backend: SketchBackend,
    metrics: MetricsContext,
    bar_x: float,
    bar_w: float,
    line1: str,
    line2: str,
    color1: str,
    color2: str,
    anchors: LayoutAnchors = ANCHORS,
) -> BarLabelTier:
    """
    Label drawn inside a phase bar; its form depends on the bar width:
      >= 80px  -> two horizontal lines (name, duration)
      22-80px  -> one line rotated 90deg counter-clockwise, fitted to the bar height
      < 22px   -> no label; the bar color identifies the phase
    """
    cx = bar_x + bar_w / 2
    cy = anchors.bar_top + anchors.bar_h / 2
    inner_w = bar_w - 8
    tier = bar_label_tier(bar_w)

    if tier == "horizontal":
        draw_fit_text(backend, metrics, line1, cx, cy - 12, inner_w, 14, color1)
        draw_fit_text(backend, metrics, line2, cx, cy + 14, inner_w, 22, color2)
    elif tier == "rotated":
        label = f"{line1} {line2}"
        start = min(12, math.floor(bar_w * 0.72))
        fs = fit_font_size(metrics, label, anchors.bar_h - 8, start)
        backend.text(Text(label, cx, cy, size=fs, fill=color1, weight="bold", rotate=-90))
    return tier


# ---------------------------------------------------------------------------
# Info boxes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BoxSpec:
    label: str  # small heading
    formula: str  # middle line
    result: str  # big line
    fill: str
    stroke: str
    formula_color: str
    result_color: str
    sub: Optional[str] = None
    sub_color: Optional[str] = None


# Height of the heading strip at the top of an info box.
BOX_HEADING_H = 22


def info_box(
    backend: SketchBackend,
    metrics: MetricsContext,
    bx: float,
    by: float,
    bw: float,
    bh: float,
    spec: BoxSpec,
) -> None:
    backend.rectangle(bx, by, bw, bh, sketch(spec.stroke, 2, roughness=2, fill=spec.fill))

    cx = bx + bw / 2
    inner_w = bw - 16

    label_fs = fit_font_size(metrics, spec.label, inner_w, 11, 8, "normal")
    backend.text(Text(spec.label, cx, by + 16, size=label_fs, fill="#888", weight="normal"))

    fml_fs = fit_font_size(metrics, spec.formula, inner_w, 13, 8)
    fml_lines = wrap_text(metrics, spec.formula, inner_w, fml_fs)
    fml_lh = fml_fs + 4

    res_fs = fit_font_size(metrics, spec.result, inner_w, 19, 8)
    res_lines = wrap_text(metrics, spec.result, inner_w, res_fs)
    res_lh = res_fs + 4

    sub_fs = fit_font_size(metrics, spec.sub, inner_w, 10, 7, "normal") if spec.sub else 0

    # Center the formula/result/sub block in the space under the heading.
    used_h = len(fml_lines) * fml_lh + len(res_lines) * res_lh + (sub_fs + 6 if spec.sub else 0)
    y = by + BOX_HEADING_H + (bh - BOX_HEADING_H - used_h) / 2 + fml_fs

    for ln in fml_lines:
        backend.text(Text(ln, cx, y, size=fml_fs, fill=spec.formula_color, weight="bold"))
        y += fml_lh
    for ln in res_lines:
        backend.text(Text(ln, cx, y, size=res_fs, fill=spec.result_color, weight="bold"))
        y += res_lh
    if spec.sub and spec.sub_color:
        backend.text(Text(spec.sub, cx, y + 2, size=sub_fs, fill=spec.sub_color, weight="normal"))


# ---------------------------------------------------------------------------
# Speech bubbles and the graduation milestone
# ---------------------------------------------------------------------------

BUBBLE_H = 32
BUBBLE_GAP = 14
BUBBLE_MIN_W = 80
BUBBLE_FONT_SIZE = 13


def speech_bubble(
    backend: SketchBackend,
    metrics: MetricsContext,
    label: str,
    tip_x: float,
    tip_y: float,
    direction: Literal["down", "up"] = "down",
    fill: str = "#FFF8F0",
    anchors: LayoutAnchors = ANCHORS,
) -> None:
    """
    Rounded label box with a pointer at (tip_x, tip_y).
    direction="down": bubble above the tip, pointer pointing down (and vice versa).
    """
    bw = max(metrics.measure_width(label, BUBBLE_FONT_SIZE) + 28, BUBBLE_MIN_W)
    bh = BUBBLE_H
    by = tip_y - bh - BUBBLE_GAP if direction == "down" else tip_y + BUBBLE_GAP
    bx = max(anchors.pad_l, min(anchors.width - anchors.pad_r - bw, tip_x - bw / 2))
    ar_x = min(bx + bw - 10, max(bx + 10, tip_x))

    backend.rectangle(bx, by, bw, bh, sketch("#FF6B00", 1.8, roughness=2, fill=fill))
    py = by + bh if direction == "down" else by
    tip = py + 12 if direction == "down" else py - 12
    backend.polygon(
        [(ar_x - 7, py), (ar_x + 7, py), (ar_x, tip)],
        plain("#FF6B00", 1.5, fill=fill),
    )
    backend.text(Text(label, bx + bw / 2, by + bh / 2 + 5, size=BUBBLE_FONT_SIZE, fill="#E65100", weight="bold"))


def graduation_milestone(backend: SketchBackend, x: float, anchors: LayoutAnchors = ANCHORS) -> None:
    """Divider line across the bars at `x` plus the banner to its right."""
    backend.line(
        x, anchors.bar_top - 6, x, anchors.bar_bottom + 6,
        sketch("#388E3C", 2.8, roughness=1.6),
    )
    bx = x + 4
    by = anchors.bar_bottom + anchors.grad_banner_offset
    bw, bh = anchors.grad_banner_w, anchors.grad_banner_h
    backend.rectangle(bx, by, bw, bh, sketch("#388E3C", 2, roughness=2.2, fill="#E8F5E9"))
    backend.text(Text("🎓 卒業！", bx + bw / 2, by + bh - 8, size=13, fill="#1B5E20", weight="bold"))


# ---------------------------------------------------------------------------
# Doodles
# ---------------------------------------------------------------------------


def stick_figure(backend: SketchBackend, cx: float, cy: float, color: str = "#FF6B00") -> None:
    o = sketch(color, 2, roughness=2, bowing=0)
    backend.circle(cx, cy - 22, 8, o)
    backend.line(cx, cy - 14, cx, cy + 10, o)  # body
    backend.line(cx - 12, cy - 4, cx + 12, cy - 4, o)  # arms
    backend.line(cx, cy + 10, cx - 10, cy + 26, o)
    backend.line(cx, cy + 10, cx + 10, cy + 26, o)


_SPARKLE_RAYS = [(0, -8, 0, 8), (8, 0, -8, 0), (6, -6, -6, 6), (-6, -6, 6, 6)]


def sparkle(backend: SketchBackend, x: float, y: float, color: str = "#F59E0B") -> None:
    st = plain(color, 2, linecap="round")
    for x1, y1, x2, y2 in _SPARKLE_RAYS:
        backend.line(x + x1, y + y1, x + x2, y + y2, st)
