from __future__ import annotations

from typing import List, Optional, Tuple, Union

from matplotlib.axes import Axes
from matplotlib.lines import Line2D
from matplotlib.patches import Circle, Patch, Polygon, Rectangle

from drawing import SketchBackend, Style, Text

_HA = {"start": "left", "middle": "center", "end": "right"}


def sketch_params(style: Style) -> Optional[Tuple[float, float, float]]:
    """
    Map roughness/bowing onto matplotlib's sketch filter
    (scale, length, randomness). Plain shapes get no filter.
    """
    if style.roughness <= 0:
        return None
    scale = 0.6 * style.roughness
    length = 160.0 / (1.0 + style.bowing)
    return scale, length, 16.0


class MatplotlibBackend(SketchBackend):
    """
    Draws onto an Axes whose data coordinates are diagram pixels
    (x to the right, y downward). `px_to_pt` converts diagram pixels to
    points for font sizes and line widths.
    """

    def __init__(self, ax: Axes, px_to_pt: float, families: Optional[List[str]] = None):
        self.ax = ax
        self.px_to_pt = px_to_pt
        self.families = families or ["DejaVu Sans"]
        self._roles: List[str] = []
        self._z = 0

    def _add(self, artist: Union[Line2D, Patch], style: Optional[Style] = None) -> None:
        self._z += 1
        artist.set_zorder(self._z)
        artist.set_clip_on(False)
        if self._roles:
            artist.set_gid(self._roles[-1])
        if style is not None:
            params = sketch_params(style)
            if params is not None:
                artist.set_sketch_params(*params)
        if isinstance(artist, Line2D):
            self.ax.add_line(artist)
        else:
            self.ax.add_patch(artist)

    def _patch_kw(self, style: Style) -> dict:
        return {
            "facecolor": style.fill if (style.fill and style.fill_style == "solid") else "none",
            "edgecolor": style.stroke or "none",
            "linewidth": style.stroke_width * self.px_to_pt if style.stroke else 0.0,
        }

    def _line_kw(self, style: Style) -> dict:
        kw = {
            "color": style.stroke or "none",
            "linewidth": style.stroke_width * self.px_to_pt,
        }
        if style.linecap == "round":
            kw["solid_capstyle"] = "round"
        return kw

    def rectangle(self, x, y, w, h, style):
        self._add(Rectangle((x, y), w, h, **self._patch_kw(style)), style)

    def line(self, x1, y1, x2, y2, style):
        self._add(Line2D([x1, x2], [y1, y2], **self._line_kw(style)), style)

    def linear_path(self, points, style):
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        self._add(Line2D(xs, ys, **self._line_kw(style)), style)

    def polygon(self, points, style):
        self._add(Polygon(list(points), closed=True, **self._patch_kw(style)), style)

    def circle(self, cx, cy, r, style):
        self._add(Circle((cx, cy), r, **self._patch_kw(style)), style)

    def text(self, node: Text):
        t = self.ax.text(
            node.x,
            node.y,
            node.content,
            fontsize=node.size * self.px_to_pt,
            color=node.fill,
            fontweight=node.weight,
            family=self.families,
            ha=_HA[node.anchor],
            va="baseline",
            alpha=node.opacity,
            # SVG rotates clockwise for positive angles; matplotlib counter-clockwise.
            rotation=-node.rotate if node.rotate is not None else 0.0,
            rotation_mode="anchor",
        )
        self._z += 1
        t.set_zorder(self._z)
        t.set_clip_on(False)
        if self._roles:
            t.set_gid(self._roles[-1])

    def begin_group(self, role):
        self._roles.append(role)

    def end_group(self):
        self._roles.pop()
