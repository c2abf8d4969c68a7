from __future__ import annotations

import math
import random
import xml.etree.ElementTree as ET
from typing import List, Optional, Sequence

from drawing import DrawingTree, Point, SketchBackend, Style, Text, replay

SVG_NS = "http://www.w3.org/2000/svg"
WEBFONT_IMPORT = "@import url('https://fonts.googleapis.com/css2?family=Yomogi&display=swap');"

# Base random offset (px) of a sketchy stroke before roughness scaling.
MAX_RANDOMNESS_OFFSET = 2.0


def _n(v: float) -> str:
    """Compact number formatting for SVG attributes."""
    s = f"{v:.2f}".rstrip("0").rstrip(".")
    return "0" if s in ("", "-0") else s


class RoughPen:
    """
    Turns exact geometry into hand-drawn SVG path data.

    Each straight segment is drawn twice as a cubic curve whose endpoints and
    control points are jittered by `roughness` and whose middle is pushed off
    the chord by `bowing`. Seeded, so the same tree always yields the same SVG.
    """

    def __init__(self, seed: int = 1):
        self.rng = random.Random(seed)

    def _off(self, v: float, roughness: float, gain: float) -> float:
        return roughness * gain * self.rng.uniform(-v, v)

    def _one_pass(self, x1: float, y1: float, x2: float, y2: float, st: Style, offset: float, gain: float, move: bool) -> str:
        diverge = 0.2 + self.rng.random() * 0.2
        mid_dx = st.bowing * MAX_RANDOMNESS_OFFSET * (y2 - y1) / 200
        mid_dy = st.bowing * MAX_RANDOMNESS_OFFSET * (x1 - x2) / 200
        mid_dx = self._off(mid_dx, st.roughness, gain)
        mid_dy = self._off(mid_dy, st.roughness, gain)
        r = st.roughness

        head = ""
        if move:
            head = f"M{_n(x1 + self._off(offset, r, gain))} {_n(y1 + self._off(offset, r, gain))} "
        c1x = mid_dx + x1 + (x2 - x1) * diverge + self._off(offset, r, gain)
        c1y = mid_dy + y1 + (y2 - y1) * diverge + self._off(offset, r, gain)
        c2x = mid_dx + x1 + 2 * (x2 - x1) * diverge + self._off(offset, r, gain)
        c2y = mid_dy + y1 + 2 * (y2 - y1) * diverge + self._off(offset, r, gain)
        ex = x2 + self._off(offset, r, gain)
        ey = y2 + self._off(offset, r, gain)
        return f"{head}C{_n(c1x)} {_n(c1y)} {_n(c2x)} {_n(c2y)} {_n(ex)} {_n(ey)}"

    def line(self, x1: float, y1: float, x2: float, y2: float, st: Style) -> str:
        length = math.hypot(x2 - x1, y2 - y1)
        if length < 200:
            gain = 1.0
        elif length > 500:
            gain = 0.4
        else:
            gain = -0.0016668 * length + 1.233334
        offset = MAX_RANDOMNESS_OFFSET
        if offset * offset * 100 > length * length:
            offset = length / 10
        first = self._one_pass(x1, y1, x2, y2, st, offset, gain, move=True)
        second = self._one_pass(x1, y1, x2, y2, st, offset / 2, gain, move=True)
        return f"{first} {second}"

    def polyline(self, points: Sequence[Point], st: Style, closed: bool = False) -> str:
        pts = list(points)
        if closed and pts:
            pts.append(pts[0])
        return " ".join(self.line(x1, y1, x2, y2, st) for (x1, y1), (x2, y2) in zip(pts, pts[1:]))

    def jitter_polygon(self, points: Sequence[Point], st: Style) -> str:
        """Slightly wobbly closed outline, used for solid fills."""
        j = st.roughness * 0.5
        pts = [(x + self.rng.uniform(-j, j), y + self.rng.uniform(-j, j)) for x, y in points]
        return "M" + " L".join(f"{_n(x)} {_n(y)}" for x, y in pts) + " Z"

    def ellipse(self, cx: float, cy: float, r: float, st: Style) -> str:
        out: List[str] = []
        steps = 18
        for _pass in range(2):
            start = self.rng.uniform(0, 2 * math.pi)
            pts = []
            for i in range(steps + 1):
                ang = start + 2 * math.pi * i / steps
                rr = r * (1 + self.rng.uniform(-0.04, 0.04) * st.roughness)
                pts.append((cx + rr * math.cos(ang), cy + rr * math.sin(ang)))
            out.append("M" + " L".join(f"{_n(x)} {_n(y)}" for x, y in pts))
        return " ".join(out)


class SvgBackend(SketchBackend):
    """Builds a standalone SVG document (ElementTree) from drawing calls."""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        seed: int = 1,
        font_family: str = "Yomogi",
        embed_webfont: bool = True,
    ):
        self.root = ET.Element(
            "svg",
            {
                "xmlns": SVG_NS,
                "width": str(width),
                "height": str(height),
                "viewBox": f"0 0 {width} {height}",
            },
        )
        if embed_webfont:
            style = ET.SubElement(self.root, "style")
            style.text = WEBFONT_IMPORT
        self.font_family = f"'{font_family}', cursive"
        self.pen = RoughPen(seed)
        self._stack: List[ET.Element] = [self.root]

    @property
    def _parent(self) -> ET.Element:
        return self._stack[-1]

    def _path(self, d: str, st: Style, *, fill: Optional[str] = None) -> None:
        attrs = {
            "d": d,
            "fill": fill or "none",
            "stroke": st.stroke or "none",
            "stroke-width": _n(st.stroke_width),
        }
        if st.linecap:
            attrs["stroke-linecap"] = st.linecap
        ET.SubElement(self._parent, "path", attrs)

    def _fill_only(self, d: str, fill: str) -> None:
        ET.SubElement(self._parent, "path", {"d": d, "fill": fill, "stroke": "none"})

    def _plain_attrs(self, st: Style) -> dict:
        attrs = {"fill": st.fill or "none", "stroke": st.stroke or "none"}
        if st.stroke:
            attrs["stroke-width"] = _n(st.stroke_width)
        if st.linecap:
            attrs["stroke-linecap"] = st.linecap
        return attrs

    def rectangle(self, x, y, w, h, style):
        if style.roughness <= 0:
            attrs = {"x": _n(x), "y": _n(y), "width": _n(w), "height": _n(h)}
            attrs.update(self._plain_attrs(style))
            ET.SubElement(self._parent, "rect", attrs)
            return
        corners = [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
        if style.fill and style.fill_style == "solid":
            self._fill_only(self.pen.jitter_polygon(corners, style), style.fill)
        self._path(self.pen.polyline(corners, style, closed=True), style)

    def line(self, x1, y1, x2, y2, style):
        if style.roughness <= 0:
            attrs = {"x1": _n(x1), "y1": _n(y1), "x2": _n(x2), "y2": _n(y2)}
            attrs.update(self._plain_attrs(style))
            ET.SubElement(self._parent, "line", attrs)
            return
        self._path(self.pen.line(x1, y1, x2, y2, style), style)

    def linear_path(self, points, style):
        if style.roughness <= 0:
            attrs = {"points": " ".join(f"{_n(x)},{_n(y)}" for x, y in points)}
            attrs.update(self._plain_attrs(style))
            ET.SubElement(self._parent, "polyline", attrs)
            return
        self._path(self.pen.polyline(points, style), style)

    def polygon(self, points, style):
        if style.roughness <= 0:
            attrs = {"points": " ".join(f"{_n(x)},{_n(y)}" for x, y in points)}
            attrs.update(self._plain_attrs(style))
            ET.SubElement(self._parent, "polygon", attrs)
            return
        if style.fill and style.fill_style == "solid":
            self._fill_only(self.pen.jitter_polygon(points, style), style.fill)
        self._path(self.pen.polyline(points, style, closed=True), style)

    def circle(self, cx, cy, r, style):
        if style.roughness <= 0:
            attrs = {"cx": _n(cx), "cy": _n(cy), "r": _n(r)}
            attrs.update(self._plain_attrs(style))
            ET.SubElement(self._parent, "circle", attrs)
            return
        fill = style.fill if style.fill_style == "solid" else None
        self._path(self.pen.ellipse(cx, cy, r, style), style, fill=fill)

    def text(self, node: Text):
        attrs = {
            "x": _n(node.x),
            "y": _n(node.y),
            "text-anchor": node.anchor,
            "font-family": self.font_family,
            "font-size": _n(node.size),
            "fill": node.fill,
            "font-weight": node.weight,
            "opacity": _n(node.opacity),
        }
        if node.rotate is not None:
            attrs["transform"] = f"rotate({_n(node.rotate)}, {_n(node.x)}, {_n(node.y)})"
        el = ET.SubElement(self._parent, "text", attrs)
        el.text = node.content

    def begin_group(self, role):
        self._stack.append(ET.SubElement(self._parent, "g", {"data-role": role}))

    def end_group(self):
        self._stack.pop()

    def to_string(self) -> str:
        return ET.tostring(self.root, encoding="unicode")


def tree_to_svg(
    tree: DrawingTree,
    *,
    seed: int = 1,
    font_family: str = "Yomogi",
    embed_webfont: bool = True,
) -> str:
    """Serialize a DrawingTree to a standalone SVG document string."""
    backend = SvgBackend(tree.width, tree.height, seed=seed, font_family=font_family, embed_webfont=embed_webfont)
    replay(tree, backend)
    return backend.to_string()
