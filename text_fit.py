from __future__ import annotations

from typing import List

from drawing import SketchBackend, Text
from text_metrics import MetricsContext


def fit_font_size(
    metrics: MetricsContext,
    text: str,
    max_width: float,
    start_size: int,
    min_size: int = 8,
    weight: str = "bold",
) -> int:
    """
    Largest size in [min_size, start_size] (step 1) at which `text` fits
    `max_width`. Returns min_size when nothing fits; the caller wraps at
    that size.
    """
    for s in range(int(start_size), int(min_size) - 1, -1):
        if metrics.measure_width(text, s, weight) <= max_width:
            return s
    return int(min_size)


def wrap_text(
    metrics: MetricsContext,
    text: str,
    max_width: float,
    size: float,
    weight: str = "bold",
) -> List[str]:
    """
    Split `text` into lines that each fit `max_width` at `size`.

    Breaks between characters, not words: Japanese has no spaces to break on.
    A single character wider than max_width still gets a line of its own, so
    "".join(lines) == text always holds.
    """
    if metrics.measure_width(text, size, weight) <= max_width:
        return [text]

    lines: List[str] = []
    line = ""
    for ch in text:
        candidate = line + ch
        if line and metrics.measure_width(candidate, size, weight) > max_width:
            lines.append(line)
            line = ch
        else:
            line = candidate
    if line:
        lines.append(line)
    return lines


def line_height(size: float) -> float:
    return size + 5


def draw_fit_text(
    backend: SketchBackend,
    metrics: MetricsContext,
    text: str,
    cx: float,
    y: float,
    max_width: float,
    size: int,
    fill: str,
    weight: str = "bold",
    min_size: int = 8,
) -> float:
    """
    Shrink-to-fit, wrap, and draw `text` centered on (cx, y).

    A single line has its baseline at y; extra lines are spread evenly above
    and below it. Returns the vertical space used (lines * line height).
    """
    fs = fit_font_size(metrics, text, max_width, size, min_size, weight)
    lines = wrap_text(metrics, text, max_width, fs, weight)
    lh = line_height(fs)
    ly = y - (len(lines) - 1) * lh / 2.0
    for ln in lines:
        backend.text(Text(ln, cx, ly, size=fs, fill=fill, weight=weight, anchor="middle"))
        ly += lh
    return len(lines) * lh
