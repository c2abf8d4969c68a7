from datetime import date

import pytest

from calculator import PLAN_KEYS
from drawing import Circle, Line, Path, Polygon, Rect, Text
from layout import ANCHORS
from month_utils import month_to_x
from renderer import PHASE_COLORS, build_box_specs, footnote_text, render_roadmap

FULL_ROLES = [
    "background",
    "grid",
    "title",
    "axis",
    "bar:learning",
    "bar:acquisition",
    "bar:freelance",
    "bar-label:learning",
    "bar-label:acquisition",
    "bar-label:freelance",
    "bubble:learning-end",
    "bubble:quit-job",
    "milestone",
    "icons",
    "info-box:0",
    "info-box:1",
    "info-box:2",
    "info-box:3",
    "footnote",
]


def _bar_rect(tree, phase):
    (rect,) = [n for n in tree.group(f"bar:{phase}").children if isinstance(n, Rect)]
    return rect


def test_render_is_deterministic(metrics, make_data):
    data = make_data()
    assert render_roadmap(data, metrics) == render_roadmap(data, metrics)


def test_canvas_size_and_group_order(metrics, make_data):
    tree = render_roadmap(make_data(), metrics)
    assert (tree.width, tree.height) == (1200, 620)
    assert tree.roles() == FULL_ROLES


def test_grid_toggle_removes_only_grid(metrics, make_data):
    with_grid = render_roadmap(make_data(show_grid=True), metrics)
    without = render_roadmap(make_data(show_grid=False), metrics)
    assert without.roles() == [r for r in FULL_ROLES if r != "grid"]
    for g in without.groups():
        assert with_grid.group(g.role) == g


def test_bars_follow_month_scale(metrics, make_data):
    data = make_data(plan_key=10)
    tree = render_roadmap(data, metrics)
    learning = _bar_rect(tree, "learning")
    acquisition = _bar_rect(tree, "acquisition")
    freelance = _bar_rect(tree, "freelance")

    assert learning.x == month_to_x(0)
    assert acquisition.x == month_to_x(data.learning_months)
    assert freelance.x == month_to_x(data.total_months)
    assert freelance.x + freelance.w == pytest.approx(ANCHORS.width - ANCHORS.pad_r)
    # adjacent, never overlapping
    assert learning.x + learning.w == pytest.approx(acquisition.x)
    assert acquisition.x + acquisition.w == pytest.approx(freelance.x)
    for r in (learning, acquisition, freelance):
        assert (r.y, r.h) == (ANCHORS.bar_top, ANCHORS.bar_h)


def test_six_month_plan_box_contents(metrics, make_data):
    data = make_data(plan_key=6, income=40, savings=25, start=date(2024, 1, 1))
    specs = build_box_specs(data)
    assert "40万円" in specs[1].formula
    assert "25万円" in specs[2].formula
    assert specs[0].result == "＝ 10万円"
    assert specs[3].result == "＝ 1,350万円"
    assert "54ヶ月" in specs[3].formula
    assert footnote_text(data) == "6ヶ月プラン（学習4m + 案件2m + フリーランス54m）= 5年計画"

    tree = render_roadmap(data, metrics)
    for i in range(4):
        contents = [t.content for t in tree.group(f"info-box:{i}").texts()]
        assert contents and all(contents)
    assert any("2024年1月1日" in t.content for t in tree.group("title").texts())


def test_shortest_plan_labels_degrade(metrics, make_data):
    tree = render_roadmap(make_data(plan_key=3), metrics)

    assert _bar_rect(tree, "learning").w == pytest.approx(35.0)
    assert _bar_rect(tree, "acquisition").w == pytest.approx(17.5)

    (learning_label,) = tree.group("bar-label:learning").texts()
    assert learning_label.rotate == -90
    assert tree.group("bar-label:acquisition").children == []
    # learning bar narrower than the bubble threshold
    assert "bubble:learning-end" not in tree.roles()
    assert "bubble:quit-job" in tree.roles()


def test_savings_equal_to_income_renders(metrics, make_data):
    tree = render_roadmap(make_data(income=30, savings=30), metrics)
    rects = [_info_rect(tree, i) for i in range(4)]
    for left, right in zip(rects, rects[1:]):
        assert left.x + left.w < right.x
    assert rects[-1].x + rects[-1].w <= ANCHORS.width - ANCHORS.pad_r


def _info_rect(tree, i):
    return next(n for n in tree.group(f"info-box:{i}").children if isinstance(n, Rect))


def _positions(group):
    return [(n.x, n.y) for n in group.iter_shapes() if isinstance(n, (Rect, Text))]


def test_icons_toggle_only_shifts_info_boxes(metrics, make_data):
    on = render_roadmap(make_data(show_icons=True), metrics)
    off = render_roadmap(make_data(show_icons=False), metrics)

    assert "icons" in on.roles()
    assert off.roles() == [r for r in FULL_ROLES if r != "icons"]

    for g in off.groups():
        if g.role.startswith("info-box:"):
            before = _positions(on.group(g.role))
            after = _positions(g)
            assert len(before) == len(after)
            for (x1, y1), (x2, y2) in zip(before, after):
                assert x2 == pytest.approx(x1)
                assert y1 - y2 == pytest.approx(20)
        else:
            assert on.group(g.role) == g


def test_vertical_bands_do_not_overlap(metrics, make_data):
    tree = render_roadmap(make_data(), metrics)
    title_y = max(t.y for t in tree.group("title").texts())
    axis_label_y = max(t.y for t in tree.group("axis").texts())
    banner = next(n for n in tree.group("milestone").children if isinstance(n, Rect))
    box_top = _info_rect(tree, 0).y
    memo = next(n for n in tree.group("footnote").children if isinstance(n, Rect))

    assert title_y < axis_label_y < ANCHORS.bar_top
    assert ANCHORS.bar_bottom < banner.y < banner.y + banner.h < box_top
    assert box_top + ANCHORS.box_h < memo.y
    assert memo.y + memo.h <= ANCHORS.height


def _shapes(group, kind):
    return [n for n in group.iter_shapes() if isinstance(n, kind)]


def test_phase_bars_use_fixed_sketch_style(metrics, make_data):
    assert PHASE_COLORS == {
        "learning": ("#FFE0B2", "#FF6B00"),
        "acquisition": ("#FFF9C4", "#F59E0B"),
        "freelance": ("#E0F7FA", "#00ACC1"),
        "milestone": ("#E8F5E9", "#388E3C"),
    }
    tree = render_roadmap(make_data(), metrics)
    # phase -> (roughness, bowing, stroke width)
    expected = {
        "learning": (2.2, 1, 2.2),
        "acquisition": (2.2, 1, 2),
        "freelance": (2, 0.5, 2.2),
    }
    for phase, (roughness, bowing, stroke_width) in expected.items():
        st = _bar_rect(tree, phase).style
        fill, stroke = PHASE_COLORS[phase]
        assert (st.roughness, st.bowing, st.stroke_width) == (roughness, bowing, stroke_width)
        assert (st.fill, st.stroke, st.fill_style) == (fill, stroke, "solid")


def test_element_sketch_styles(metrics, make_data):
    tree = render_roadmap(make_data(), metrics)

    underline = _shapes(tree.group("title"), Line)[0]
    assert underline.style.roughness == 2.5

    axis_line, *ticks = _shapes(tree.group("axis"), Line)
    assert (axis_line.style.roughness, axis_line.style.bowing) == (1.2, 0.5)
    assert all(t.style.roughness == 0 for t in ticks)
    (arrow,) = _shapes(tree.group("axis"), Path)
    assert arrow.style.roughness == 1

    (divider,) = _shapes(tree.group("milestone"), Line)
    (banner,) = _shapes(tree.group("milestone"), Rect)
    assert (divider.style.roughness, divider.style.stroke_width) == (1.6, 2.8)
    assert (banner.style.roughness, banner.style.stroke_width) == (2.2, 2)

    for i in range(4):
        st = _info_rect(tree, i).style
        assert (st.roughness, st.stroke_width) == (2, 2)

    for role in ("bubble:learning-end", "bubble:quit-job"):
        (bubble,) = _shapes(tree.group(role), Rect)
        (pointer,) = _shapes(tree.group(role), Polygon)
        assert (bubble.style.roughness, bubble.style.stroke_width) == (2, 1.8)
        assert pointer.style.roughness == 0

    (memo,) = _shapes(tree.group("footnote"), Rect)
    assert (memo.style.roughness, memo.style.stroke_width) == (2, 1.5)

    assert all(n.style.roughness == 0 for n in _shapes(tree.group("grid"), Line))

    icons = tree.group("icons")
    (head,) = _shapes(icons, Circle)
    figure = [head] + [n for n in _shapes(icons, Line) if n.style.roughness > 0]
    sparkle_rays = [n for n in _shapes(icons, Line) if n.style.roughness == 0]
    assert len(figure) == 5 and len(sparkle_rays) == 12
    for n in figure:
        assert (n.style.roughness, n.style.bowing, n.style.stroke_width) == (2, 0, 2)


def _figure_bounds(icons):
    head = next(n for n in icons.children if isinstance(n, Circle))
    limbs = [n for n in icons.children if isinstance(n, Line) and n.style.roughness > 0]
    xs = [head.cx - head.r, head.cx + head.r] + [v for ln in limbs for v in (ln.x1, ln.x2)]
    ys = [head.cy - head.r, head.cy + head.r] + [v for ln in limbs for v in (ln.y1, ln.y2)]
    return min(xs), min(ys), max(xs), max(ys)


def _intersects(bounds, rect):
    x0, y0, x1, y1 = bounds
    return x0 < rect.x + rect.w and rect.x < x1 and y0 < rect.y + rect.h and rect.y < y1


@pytest.mark.parametrize("plan_key", PLAN_KEYS)
def test_stick_figure_clears_bubbles_banner_and_boxes(metrics, make_data, plan_key):
    tree = render_roadmap(make_data(plan_key=plan_key), metrics)
    bounds = _figure_bounds(tree.group("icons"))

    others = []
    for role in tree.roles():
        if role.startswith(("bubble:", "info-box:")) or role == "milestone":
            others.extend(_shapes(tree.group(role), Rect))
    assert others
    for rect in others:
        assert not _intersects(bounds, rect), (plan_key, rect)
