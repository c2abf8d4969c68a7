from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Literal, Optional, Sequence, Tuple, Union

Point = Tuple[float, float]
TextAnchor = Literal["start", "middle", "end"]


@dataclass(frozen=True)
class Style:
    """
    Stroke/fill style for one shape.

    roughness: how wavy the stroke is (0 = a plain, exact shape)
    bowing:    how much a straight stroke curves away from its chord
    The defaults match the sketch library the diagram was designed with.
    """

    stroke: Optional[str] = "#000000"
    stroke_width: float = 1.0
    fill: Optional[str] = None
    fill_style: Literal["solid", "none"] = "none"
    roughness: float = 1.0
    bowing: float = 1.0
    linecap: Optional[str] = None


def sketch(stroke: str, stroke_width: float, *, roughness: float, bowing: float = 1.0, fill: Optional[str] = None) -> Style:
    return Style(
        stroke=stroke,
        stroke_width=stroke_width,
        fill=fill,
        fill_style="solid" if fill else "none",
        roughness=roughness,
        bowing=bowing,
    )


def plain(stroke: Optional[str], stroke_width: float = 1.0, *, fill: Optional[str] = None, linecap: Optional[str] = None) -> Style:
    return Style(
        stroke=stroke,
        stroke_width=stroke_width,
        fill=fill,
        fill_style="solid" if fill else "none",
        roughness=0.0,
        bowing=0.0,
        linecap=linecap,
    )


# ---------------------------------------------------------------------------
# Drawing tree nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float
    style: Style


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    style: Style


@dataclass(frozen=True)
class Path:
    """Open polyline through `points`."""

    points: Tuple[Point, ...]
    style: Style


@dataclass(frozen=True)
class Polygon:
    points: Tuple[Point, ...]
    style: Style


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    style: Style


@dataclass(frozen=True)
class Text:
    content: str
    x: float
    y: float
    size: float
    fill: str = "#333"
    weight: str = "normal"
    anchor: TextAnchor = "middle"
    opacity: float = 1.0
    rotate: Optional[float] = None  # degrees, SVG sense (negative = counter-clockwise)


@dataclass
class Group:
    role: str
    children: List["Node"] = field(default_factory=list)

    def iter_shapes(self) -> Iterator["Node"]:
        for child in self.children:
            if isinstance(child, Group):
                yield from child.iter_shapes()
            else:
                yield child

    def texts(self) -> List[Text]:
        return [n for n in self.iter_shapes() if isinstance(n, Text)]


Node = Union[Rect, Line, Path, Polygon, Circle, Text, Group]


@dataclass
class DrawingTree:
    width: int
    height: int
    children: List[Node] = field(default_factory=list)

    def groups(self) -> List[Group]:
        return [n for n in self.children if isinstance(n, Group)]

    def group(self, role: str) -> Optional[Group]:
        for g in self.groups():
            if g.role == role:
                return g
        return None

    def roles(self) -> List[str]:
        return [g.role for g in self.groups()]

    def iter_shapes(self) -> Iterator[Node]:
        for child in self.children:
            if isinstance(child, Group):
                yield from child.iter_shapes()
            else:
                yield child


# ---------------------------------------------------------------------------
# Backend interface
# ---------------------------------------------------------------------------


class SketchBackend(ABC):
    """
    What the diagram code draws onto. One implementation per target surface:
    TreeBackend (records a DrawingTree), SvgBackend, MatplotlibBackend.
    """

    @abstractmethod
    def rectangle(self, x: float, y: float, w: float, h: float, style: Style) -> None: ...

    @abstractmethod
    def line(self, x1: float, y1: float, x2: float, y2: float, style: Style) -> None: ...

    @abstractmethod
    def linear_path(self, points: Sequence[Point], style: Style) -> None: ...

    @abstractmethod
    def polygon(self, points: Sequence[Point], style: Style) -> None: ...

    @abstractmethod
    def circle(self, cx: float, cy: float, r: float, style: Style) -> None: ...

    @abstractmethod
    def text(self, node: Text) -> None: ...

    @abstractmethod
    def begin_group(self, role: str) -> None: ...

    @abstractmethod
    def end_group(self) -> None: ...

    @contextmanager
    def group(self, role: str) -> Iterator["SketchBackend"]:
        self.begin_group(role)
        try:
            yield self
        finally:
            self.end_group()


class TreeBackend(SketchBackend):
    """Records every call into a DrawingTree."""

    def __init__(self, width: int, height: int):
        self.tree = DrawingTree(width=width, height=height)
        self._stack: List[Group] = []

    def _append(self, node: Node) -> None:
        if self._stack:
            self._stack[-1].children.append(node)
        else:
            self.tree.children.append(node)

    def rectangle(self, x, y, w, h, style):
        self._append(Rect(x, y, w, h, style))

    def line(self, x1, y1, x2, y2, style):
        self._append(Line(x1, y1, x2, y2, style))

    def linear_path(self, points, style):
        self._append(Path(tuple((float(px), float(py)) for px, py in points), style))

    def polygon(self, points, style):
        self._append(Polygon(tuple((float(px), float(py)) for px, py in points), style))

    def circle(self, cx, cy, r, style):
        self._append(Circle(cx, cy, r, style))

    def text(self, node):
        self._append(node)

    def begin_group(self, role):
        g = Group(role=role)
        self._append(g)
        self._stack.append(g)

    def end_group(self):
        self._stack.pop()


def replay(tree: DrawingTree, backend: SketchBackend) -> SketchBackend:
    """Draw a recorded tree onto another backend (SVG, matplotlib, ...)."""

    def _walk(nodes: List[Node]) -> None:
        for n in nodes:
            if isinstance(n, Group):
                with backend.group(n.role):
                    _walk(n.children)
            elif isinstance(n, Rect):
                backend.rectangle(n.x, n.y, n.w, n.h, n.style)
            elif isinstance(n, Line):
                backend.line(n.x1, n.y1, n.x2, n.y2, n.style)
            elif isinstance(n, Path):
                backend.linear_path(n.points, n.style)
            elif isinstance(n, Polygon):
                backend.polygon(n.points, n.style)
            elif isinstance(n, Circle):
                backend.circle(n.cx, n.cy, n.r, n.style)
            elif isinstance(n, Text):
                backend.text(n)
            else:
                raise TypeError(f"Unknown drawing node: {type(n).__name__}")

    _walk(tree.children)
    return backend
