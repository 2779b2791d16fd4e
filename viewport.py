"""
Pan/zoom transform over a finished layout.
Drag and pinch are two independent delta streams. Each keeps a live value while its gesture runs
and commits it once, when the gesture ends.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from models import Size

logger = logging.getLogger(__name__)

ZOOM_IN_MULTIPLIER = 3
FALLBACK_MIN_SCALE = 0.3
WHEEL_ZOOM_FACTOR = 1.15


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def fit_scale(viewport: Size, content: Size) -> float:
    """Largest zoom-out that still shows the whole content, never above 1."""
    ratios = [1.0]
    for available, needed in ((viewport.width, content.width), (viewport.height, content.height)):
        ratios.append(available / needed if needed > 0 else math.inf)
    fit = min(ratios)
    if not math.isfinite(fit) or fit <= 0:
        return FALLBACK_MIN_SCALE
    return fit


def scale_bounds(viewport: Size, content: Size,
                 zoom_in_multiplier: float = ZOOM_IN_MULTIPLIER) -> Tuple[float, float]:
    min_scale = fit_scale(viewport, content)
    return min_scale, max(min_scale * zoom_in_multiplier, 1.0)


def pinch_scale(committed_scale: float, factor: float, min_scale: float, max_scale: float) -> float:
    return clamp(committed_scale * factor, min_scale, max_scale)


@dataclass(frozen=True)
class ViewportState:
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0
    committed_scale: float = 1.0
    committed_translate_x: float = 0.0
    committed_translate_y: float = 0.0
    panning: bool = False
    pinching: bool = False


class ViewportController:
    """
    Owns the view transform. Every event replaces the state with a new ViewportState.
    Knows nothing about the tree except its content size.
    """

    def __init__(self, viewport_size: Size = Size(1, 1), content_size: Size = Size(1, 1),
                 zoom_in_multiplier: float = ZOOM_IN_MULTIPLIER):
        if zoom_in_multiplier <= 0:
            raise ValueError("zoom_in_multiplier must be positive")
        self.zoom_in_multiplier = zoom_in_multiplier
        self.viewport_size = viewport_size
        self.content_size = content_size
        self.state = ViewportState()
        self._reclamp()

    @property
    def min_scale(self) -> float:
        return scale_bounds(self.viewport_size, self.content_size, self.zoom_in_multiplier)[0]

    @property
    def max_scale(self) -> float:
        return scale_bounds(self.viewport_size, self.content_size, self.zoom_in_multiplier)[1]

    def transform(self) -> Tuple[float, float, float]:
        return self.state.scale, self.state.translate_x, self.state.translate_y

    # ==================== SIZES ====================

    def resize(self, viewport_size: Optional[Size] = None, content_size: Optional[Size] = None):
        if viewport_size is not None:
            self.viewport_size = viewport_size
        if content_size is not None:
            self.content_size = content_size
        self._reclamp()

    def _reclamp(self):
        low, high = self.min_scale, self.max_scale
        committed = clamp(self.state.committed_scale, low, high)
        live = clamp(self.state.scale, low, high) if self.state.pinching else committed
        if committed != self.state.committed_scale:
            logger.debug("Reclamped committed scale %s -> %s", self.state.committed_scale, committed)
        self.state = replace(self.state, scale=live, committed_scale=committed)

    # ==================== PAN ====================

    def begin_pan(self):
        self.state = replace(self.state, panning=True)

    def update_pan(self, total_dx: float, total_dy: float):
        """total_dx/total_dy are cumulative since the pan started."""
        if not self.state.panning:
            self.begin_pan()
        self.state = replace(
            self.state,
            translate_x=self.state.committed_translate_x + total_dx,
            translate_y=self.state.committed_translate_y + total_dy,
        )

    def end_pan(self):
        if not self.state.panning:
            return
        self.state = replace(
            self.state,
            committed_translate_x=self.state.translate_x,
            committed_translate_y=self.state.translate_y,
            panning=False,
        )

    # ==================== PINCH ====================

    def begin_pinch(self):
        self.state = replace(self.state, pinching=True)

    def update_pinch(self, factor: float):
        """factor is cumulative since the pinch started."""
        if not self.state.pinching:
            self.begin_pinch()
        scale = pinch_scale(self.state.committed_scale, factor, self.min_scale, self.max_scale)
        self.state = replace(self.state, scale=scale)

    def end_pinch(self):
        if not self.state.pinching:
            return
        self.state = replace(self.state, committed_scale=self.state.scale, pinching=False)

    # ==================== DISCRETE ====================

    def wheel(self, notches: float):
        if self.state.pinching:
            return
        scale = pinch_scale(self.state.committed_scale, WHEEL_ZOOM_FACTOR ** notches,
                            self.min_scale, self.max_scale)
        self.state = replace(self.state, scale=scale, committed_scale=scale)

    def reset(self):
        if self.state.panning or self.state.pinching:
            return
        scale = clamp(1.0, self.min_scale, self.max_scale)
        self.state = ViewportState(scale=scale, committed_scale=scale)
