from concurrent.futures import ThreadPoolExecutor

import pytest

import text_metrics
from drawing import Text, TreeBackend
from text_fit import draw_fit_text, fit_font_size, line_height, wrap_text
from text_metrics import WIDTH_SAFETY, MeasurementUnavailableError, MetricsContext, resolve_font_families

JP_SAMPLES = [
    "フリーランス期間の積み立て",
    "案件獲得期間の収入見込み",
    "平均 5万円 × 2ヶ月",
    "学習終わり！🎉",
    "abc",
]


# ----------------------------
# Fixed-advance metrics: exact numbers
# ----------------------------


def test_fit_font_size_picks_largest_fitting_size(fixed_metrics):
    # 10 chars at size s are 6*s wide.
    assert fit_font_size(fixed_metrics, "abcdefghij", 61, 14) == 10
    assert fit_font_size(fixed_metrics, "abcdefghij", 1000, 14) == 14


def test_fit_font_size_returns_min_when_nothing_fits(fixed_metrics):
    assert fit_font_size(fixed_metrics, "abcdefghij", 5, 14, min_size=8) == 8


def test_wrap_text_breaks_between_characters(fixed_metrics):
    # 6px per char at size 10; three chars fit in 20px.
    assert wrap_text(fixed_metrics, "abcdefghij", 20, 10) == ["abc", "def", "ghi", "j"]


def test_wrap_text_oversized_character_gets_own_line(fixed_metrics):
    assert wrap_text(fixed_metrics, "abc", 3, 10) == ["a", "b", "c"]


def test_wrap_text_single_line_when_it_fits(fixed_metrics):
    assert wrap_text(fixed_metrics, "abc", 100, 10) == ["abc"]


def test_draw_fit_text_centers_lines_and_reports_height(fixed_metrics):
    b = TreeBackend(200, 200)
    used = draw_fit_text(b, fixed_metrics, "abcdefghij", 100, 80, 20, 10, "#000", min_size=10)

    texts = [n for n in b.tree.children if isinstance(n, Text)]
    assert [t.content for t in texts] == ["abc", "def", "ghi", "j"]
    assert used == 4 * line_height(10)

    lh = line_height(10)
    assert texts[0].y == pytest.approx(80 - 1.5 * lh)
    assert texts[-1].y == pytest.approx(80 + 1.5 * lh)
    assert all(t.x == 100 and t.anchor == "middle" for t in texts)


def test_draw_fit_text_single_line_baseline_at_y(fixed_metrics):
    b = TreeBackend(200, 200)
    used = draw_fit_text(b, fixed_metrics, "abc", 50, 70, 100, 14, "#000")
    (t,) = b.tree.children
    assert (t.y, t.size) == (70, 14)
    assert used == line_height(14)


# ----------------------------
# Real Agg measurement
# ----------------------------


def test_measure_width_applies_safety_factor(metrics):
    raw = metrics.raw_width("フリーランス", 14)
    assert raw > 0
    assert metrics.measure_width("フリーランス", 14) == pytest.approx(raw * WIDTH_SAFETY)


def test_measure_width_grows_with_size_and_length(metrics):
    assert metrics.measure_width("学習期間", 20) > metrics.measure_width("学習期間", 10)
    assert metrics.measure_width("学習期間です", 12) > metrics.measure_width("学習", 12)
    assert metrics.measure_width("", 12) == 0.0


@pytest.mark.parametrize("text", JP_SAMPLES)
def test_fit_font_size_is_monotonic_in_width(metrics, text):
    sizes = [fit_font_size(metrics, text, w, 22) for w in range(10, 400, 15)]
    assert sizes == sorted(sizes)


@pytest.mark.parametrize("text", JP_SAMPLES)
@pytest.mark.parametrize("max_width", [25, 60, 140])
def test_wrap_text_keeps_every_character_and_each_line_fits(metrics, text, max_width):
    lines = wrap_text(metrics, text, max_width, 12)
    assert "".join(lines) == text
    for ln in lines:
        assert len(ln) == 1 or metrics.measure_width(ln, 12) <= max_width


def test_resolve_font_families_skips_missing_fonts():
    fams = resolve_font_families(["No Such Font 12345"])
    assert "No Such Font 12345" not in fams
    assert fams[-1] == "DejaVu Sans"


def test_measurement_surface_failure_raises(monkeypatch):
    def _broken(*args, **kwargs):
        raise OSError("no surface")

    monkeypatch.setattr(text_metrics, "RendererAgg", _broken)
    with pytest.raises(MeasurementUnavailableError):
        MetricsContext(["DejaVu Sans"])


def test_shared_context_matches_single_thread_results():
    shared = MetricsContext(["DejaVu Sans"])
    reference = MetricsContext(["DejaVu Sans"])
    jobs = [(text, size) for text in JP_SAMPLES for size in range(8, 23)] * 4
    fit_jobs = JP_SAMPLES * 4

    with ThreadPoolExecutor(max_workers=8) as pool:
        widths = list(pool.map(lambda job: shared.measure_width(*job), jobs))
        sizes = list(pool.map(lambda text: fit_font_size(shared, text, 90, 22), fit_jobs))

    assert widths == [reference.measure_width(t, s) for t, s in jobs]
    assert sizes == [fit_font_size(reference, t, 90, 22) for t in fit_jobs]
    # one cache entry per distinct (text, size, weight)
    assert set(shared._cache) == {(t, float(s), "bold") for t, s in jobs}


def test_measurement_cache_drops_least_recently_used():
    ctx = MetricsContext(["DejaVu Sans"], cache_size=2)
    ctx.raw_width("a", 10)
    ctx.raw_width("b", 10)
    ctx.raw_width("a", 10)
    ctx.raw_width("c", 10)
    assert list(ctx._cache) == [("a", 10.0, "bold"), ("c", 10.0, "bold")]
