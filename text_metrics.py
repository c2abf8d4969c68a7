from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Iterable, List, Optional, Tuple

from matplotlib import font_manager as fm
from matplotlib.backends.backend_agg import RendererAgg
from matplotlib.font_manager import FontProperties

logger = logging.getLogger(__name__)

# The display font (Yomogi) is close to monospace and usually a little wider
# than whatever we end up measuring with, so measured widths are padded.
WIDTH_SAFETY = 1.05

# Measured widths kept per context (least recently used are dropped first).
CACHE_SIZE = 4096

# Tried in order after the preferred family; DejaVu Sans always ships with matplotlib.
FALLBACK_FAMILIES = [
    "Noto Sans CJK JP",
    "Noto Sans JP",
    "IPAexGothic",
    "IPAGothic",
    "TakaoGothic",
    "Hiragino Sans",
    "Yu Gothic",
    "Arial",
]


class MeasurementUnavailableError(RuntimeError):
    """The off-screen text measurement surface could not be created."""


def _font_family_available(family: str) -> bool:
    family = (family or "").strip()
    if not family:
        return False
    # Matplotlib stores font names; check case-insensitively.
    fam_lower = family.lower()
    for f in fm.fontManager.ttflist:
        if f.name.lower() == fam_lower:
            return True
    return False


def resolve_font_families(preferred: Iterable[Optional[str]] = ()) -> List[str]:
    """
    Returns the font families matplotlib can actually render, in priority order:
      1) the preferred families that are installed
      2) installed CJK-capable fallbacks (the diagram text is Japanese)
      3) DejaVu Sans (matplotlib default), always last
    """
    preferred = list(preferred)
    out: List[str] = []
    for fam in preferred + FALLBACK_FAMILIES:
        fam = (fam or "").strip()
        if fam and fam not in out and _font_family_available(fam):
            out.append(fam)
    wanted = [p for p in preferred if p]
    if wanted and wanted[0] not in out:
        logger.warning("Font %r not installed; measuring with %s", wanted[0], out or ["DejaVu Sans"])
    if "DejaVu Sans" not in out:
        out.append("DejaVu Sans")
    return out


class MetricsContext:
    """
    Measures rendered text width on a single off-screen Agg surface.

    The surface runs at 72 dpi so one point equals one pixel of the
    1200x620 diagram. Construct one context and pass it to every fit /
    compose call; it is safe to share between threads.
    """

    def __init__(self, families: Optional[List[str]] = None, cache_size: int = CACHE_SIZE):
        self.families = list(families) if families else resolve_font_families()
        try:
            self._renderer = RendererAgg(1, 1, 72)
        except Exception as exc:
            raise MeasurementUnavailableError(f"Could not create text measurement surface: {exc}") from exc
        self._lock = threading.Lock()
        self._cache_size = max(1, int(cache_size))
        self._cache: "OrderedDict[Tuple[str, float, str], float]" = OrderedDict()
        logger.debug("Text measurement surface ready (families=%s)", self.families)

    def raw_width(self, text: str, size: float, weight: str = "bold") -> float:
        if not text:
            return 0.0
        key = (text, float(size), weight)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                return cached
            prop = FontProperties(family=self.families, size=size, weight=weight)
            w, _, _ = self._renderer.get_text_width_height_descent(text, prop, ismath=False)
            self._cache[key] = float(w)
            if len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)
            return float(w)

    def measure_width(self, text: str, size: float, weight: str = "bold") -> float:
        return self.raw_width(text, size, weight) * WIDTH_SAFETY
