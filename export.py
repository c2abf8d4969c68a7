from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional, Tuple

import matplotlib.pyplot as plt

from drawing import DrawingTree, replay
from mpl_backend import MatplotlibBackend
from roadmap_models import ExportSettings
from svg_backend import tree_to_svg
from text_metrics import resolve_font_families

logger = logging.getLogger(__name__)

# Figure dpi at which one diagram pixel is one output pixel (scale 1).
BASE_DPI = 100

# Landscape page sizes in inches.
PAGE_SIZES = {
    "A4": (11.69, 8.27),
    "A3": (16.54, 11.69),
}


def export_svg_bytes(tree: DrawingTree, settings: Optional[ExportSettings] = None) -> bytes:
    """Serialize the roadmap as a standalone SVG document (UTF-8 bytes)."""
    settings = settings or ExportSettings()
    svg = tree_to_svg(
        tree,
        seed=settings.sketch_seed,
        font_family=settings.font_family,
        embed_webfont=settings.embed_webfont,
    )
    data = svg.encode("utf-8")
    logger.info("Exported SVG (%d bytes)", len(data))
    return data


def _draw_figure(tree: DrawingTree, settings: ExportSettings, page: Optional[Tuple[float, float]] = None) -> plt.Figure:
    """
    Replay the tree onto a new figure. Without `page` the figure is exactly
    the diagram size at BASE_DPI; with `page` (inches) the diagram is scaled
    to fit and centered on the page.
    """
    if page is None:
        fig_w, fig_h = tree.width / BASE_DPI, tree.height / BASE_DPI
        rect = [0.0, 0.0, 1.0, 1.0]
        diagram_w_in = fig_w
    else:
        fig_w, fig_h = page
        ratio = min(fig_w / tree.width, fig_h / tree.height)
        diagram_w_in, diagram_h_in = tree.width * ratio, tree.height * ratio
        rect = [
            (fig_w - diagram_w_in) / 2 / fig_w,
            (fig_h - diagram_h_in) / 2 / fig_h,
            diagram_w_in / fig_w,
            diagram_h_in / fig_h,
        ]

    fig = plt.figure(figsize=(fig_w, fig_h), dpi=BASE_DPI)
    ax = fig.add_axes(rect)
    ax.set_xlim(0, tree.width)
    ax.set_ylim(tree.height, 0)
    ax.axis("off")

    families = resolve_font_families([settings.font_family, settings.fallback_font_family])
    px_to_pt = diagram_w_in * 72.0 / tree.width
    replay(tree, MatplotlibBackend(ax, px_to_pt, families))
    return fig


def export_png_bytes(tree: DrawingTree, settings: Optional[ExportSettings] = None) -> bytes:
    """Rasterize the roadmap to PNG at settings.png_scale (2x by default)."""
    settings = settings or ExportSettings()
    fig = _draw_figure(tree, settings)
    bio = BytesIO()
    fig.savefig(bio, format="png", dpi=BASE_DPI * settings.png_scale, facecolor="white")
    # Important: close to avoid memory growth in Streamlit
    plt.close(fig)
    data = bio.getvalue()
    logger.info("Exported PNG at %dx (%d bytes)", settings.png_scale, len(data))
    return data


def export_pdf_bytes(tree: DrawingTree, settings: Optional[ExportSettings] = None) -> bytes:
    """Landscape PDF page with the roadmap centered on it (vector output)."""
    settings = settings or ExportSettings()
    fig = _draw_figure(tree, settings, page=PAGE_SIZES[settings.page_size])
    bio = BytesIO()
    fig.savefig(bio, format="pdf", facecolor="white")
    plt.close(fig)
    data = bio.getvalue()
    logger.info("Exported PDF %s (%d bytes)", settings.page_size, len(data))
    return data


def preview_png_bytes(tree: DrawingTree, settings: Optional[ExportSettings] = None, *, dpi: int = 80) -> bytes:
    """Lower-resolution PNG preview (faster for live updates in the UI)."""
    settings = settings or ExportSettings()
    fig = _draw_figure(tree, settings)
    bio = BytesIO()
    fig.savefig(bio, format="png", dpi=dpi, facecolor="white")
    plt.close(fig)
    return bio.getvalue()
