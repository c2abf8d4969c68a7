from __future__ import annotations

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Layout anchors
#
# Every vertical position in the diagram is one of these constants (or a
# constant plus a fixed offset). Bands, top to bottom:
#   title -> axis -> phase bars -> milestone banner -> icons -> info boxes -> footnote
# Horizontal positions inside the axis/bar band come from month_to_x().
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LayoutAnchors:
    width: int = 1200
    height: int = 620

    pad_l: float = 80
    pad_r: float = 70

    title_y: float = 40
    underline_y: float = 50
    axis_y: float = 108

    bar_top: float = 132
    bar_h: float = 130

    # Banner sits below the "quit job?" bubble that hangs under the bars.
    grad_banner_offset: float = 54
    grad_banner_h: float = 32
    grad_banner_w: float = 108

    # Stick figure center; puts its head below the "quit job?" bubble (bar_bottom + 14..46).
    icon_offset: float = 84
    calc_offset_no_icon: float = 100
    calc_offset_icon: float = 120

    box_gap: float = 14
    box_h: float = 90
    box_count: int = 4

    memo_h: float = 24
    memo_pad_b: float = 12
    memo_w: float = 520

    @property
    def chart_w(self) -> float:
        return self.width - self.pad_l - self.pad_r

    @property
    def bar_bottom(self) -> float:
        return self.bar_top + self.bar_h

    @property
    def box_w(self) -> int:
        return int((self.chart_w - self.box_gap * (self.box_count - 1)) // self.box_count)

    def calc_top(self, show_icons: bool) -> float:
        return self.bar_bottom + (self.calc_offset_icon if show_icons else self.calc_offset_no_icon)

    def box_x(self, i: int) -> float:
        return self.pad_l + i * (self.box_w + self.box_gap)

    @property
    def memo_y(self) -> float:
        return self.height - self.memo_pad_b - self.memo_h


ANCHORS = LayoutAnchors()
