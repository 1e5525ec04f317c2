"""Drawing-surface capability interface and its Pillow backend.

Architectural role:
    Decouples the pattern renderer and compositor from the rasterizer. Render
    code only talks to `DrawingSurface`; `PillowSurface` is the production
    implementation over a Pillow RGBA image.

Capabilities:
    - `fill_rect` / `fill_path`: solid fills with CSS-style colors.
    - `fill_linear_gradient`: multi-stop linear gradient over a rectangle.
    - `draw_image`: scaled image placement.
    - `save` / `restore` / `shadow(...)`: scoped drop-shadow state.
    - `to_png`: PNG export.

Compositing model:
    Every operation paints source-over onto the canvas. When a shadow is
    active, the shadow is derived from the painted layer's alpha, tinted with
    the shadow color, blurred with a Gaussian of sigma `blur / 2` and
    composited underneath the layer.

Performance characteristics:
    Opaque rectangle/path fills without an active shadow draw straight into the
    canvas. Translucent fills, gradients, images and shadowed draws go through
    a full-canvas RGBA layer and `Image.alpha_composite`.
"""

import io
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Protocol, Sequence

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFilter

RGBA = tuple[int, int, int, int]
Point = tuple[float, float]
ColorStop = tuple[float, str]

TRANSPARENT: RGBA = (0, 0, 0, 0)

_RGBA_FUNC = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)$",
    re.IGNORECASE,
)


def parse_color(color: str) -> RGBA:
    """Parse a CSS-style color string into an 8-bit RGBA tuple.

    `rgb()`/`rgba()` accept a fractional alpha in `[0, 1]` as in CSS. Other
    notations (hex, named colors) are delegated to `PIL.ImageColor`.

    Raises:
        ValueError: For unknown color notations.
    """
    match = _RGBA_FUNC.match(color.strip())
    if match:
        r, g, b = (min(255, int(v)) for v in match.group(1, 2, 3))
        alpha = match.group(4)
        a = 255 if alpha is None else round(max(0.0, min(1.0, float(alpha))) * 255)
        return (r, g, b, a)

    rgb = ImageColor.getrgb(color)
    if len(rgb) == 3:
        return (rgb[0], rgb[1], rgb[2], 255)
    return tuple(rgb)


@dataclass(frozen=True)
class DrawState:
    """Save/restore-able drawing state (shadow parameters only)."""

    shadow_color: RGBA = TRANSPARENT
    shadow_blur: float = 0.0
    shadow_offset: Point = (0.0, 0.0)

    @property
    def casts_shadow(self) -> bool:
        return self.shadow_color[3] > 0 and (
            self.shadow_blur > 0 or self.shadow_offset != (0.0, 0.0)
        )


class DrawingSurface(Protocol):
    """Minimal raster capabilities required by the render pipeline."""

    width: int
    height: int

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None:
        ...

    def fill_path(self, points: Sequence[Point], color: str) -> None:
        ...

    def fill_linear_gradient(
        self,
        start: Point,
        end: Point,
        stops: Sequence[ColorStop],
        rect: tuple[float, float, float, float] | None = None,
    ) -> None:
        ...

    def draw_image(self, image: Image.Image, x: float, y: float, w: float, h: float) -> None:
        ...

    def save(self) -> None:
        ...

    def restore(self) -> None:
        ...

    def shadow(self, color: str, blur: float, offset: Point = (0.0, 0.0)):
        ...

    def to_png(self) -> bytes:
        ...


class PillowSurface:
    """`DrawingSurface` implementation backed by a Pillow RGBA image."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid surface size: {width}x{height}")
        self.width = width
        self.height = height
        self._image = Image.new("RGBA", (width, height), TRANSPARENT)
        self._state = DrawState()
        self._stack: list[DrawState] = []

    @property
    def image(self) -> Image.Image:
        """Underlying canvas image (live object; do not mutate)."""
        return self._image

    @property
    def state(self) -> DrawState:
        return self._state

    # =========================================================
    # STATE
    # =========================================================

    def save(self) -> None:
        self._stack.append(self._state)

    def restore(self) -> None:
        # Unbalanced restore is a no-op, as on an HTML canvas.
        if self._stack:
            self._state = self._stack.pop()

    def set_shadow(self, color: str, blur: float, offset: Point = (0.0, 0.0)) -> None:
        if blur < 0:
            raise ValueError(f"shadow blur must be >= 0, got {blur}")
        self._state = DrawState(
            shadow_color=parse_color(color),
            shadow_blur=float(blur),
            shadow_offset=(float(offset[0]), float(offset[1])),
        )

    @contextmanager
    def shadow(self, color: str, blur: float, offset: Point = (0.0, 0.0)) -> Iterator["PillowSurface"]:
        """Apply a drop shadow to draws inside the block, then restore state."""
        self.save()
        try:
            self.set_shadow(color, blur, offset)
            yield self
        finally:
            self.restore()

    # =========================================================
    # DRAWING
    # =========================================================

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None:
        if w <= 0 or h <= 0:
            return
        box = [x, y, x + w - 1, y + h - 1]
        fill = parse_color(color)
        if self._can_draw_direct(fill):
            ImageDraw.Draw(self._image).rectangle(box, fill=fill)
            return
        layer = Image.new("RGBA", self._image.size, TRANSPARENT)
        ImageDraw.Draw(layer).rectangle(box, fill=fill)
        self._paint(layer)

    def fill_path(self, points: Sequence[Point], color: str) -> None:
        if len(points) < 3:
            return
        fill = parse_color(color)
        if self._can_draw_direct(fill):
            ImageDraw.Draw(self._image).polygon(list(points), fill=fill)
            return
        layer = Image.new("RGBA", self._image.size, TRANSPARENT)
        ImageDraw.Draw(layer).polygon(list(points), fill=fill)
        self._paint(layer)

    def fill_linear_gradient(
        self,
        start: Point,
        end: Point,
        stops: Sequence[ColorStop],
        rect: tuple[float, float, float, float] | None = None,
    ) -> None:
        """Fill `rect` (default: whole canvas) with a linear gradient.

        The gradient axis runs from `start` to `end`; pixels are sampled at
        their centers and projected onto the axis. Positions before the first
        stop or after the last stop take the end colors. Channels are
        interpolated on non-premultiplied RGBA.
        """
        if not stops:
            raise ValueError("gradient requires at least one color stop")

        ordered = sorted(stops, key=lambda stop: stop[0])
        offsets = np.array([min(1.0, max(0.0, float(o))) for o, _ in ordered], dtype=np.float64)
        colors = np.array([parse_color(c) for _, c in ordered], dtype=np.float64)

        ys, xs = np.mgrid[0:self.height, 0:self.width].astype(np.float64) + 0.5
        dx = end[0] - start[0]
        dy = end[1] - start[1]
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            # Degenerate axis paints nothing, matching canvas behavior.
            return
        t = ((xs - start[0]) * dx + (ys - start[1]) * dy) / length_sq
        t = np.clip(t, 0.0, 1.0)

        pixels = np.empty((self.height, self.width, 4), dtype=np.float64)
        for channel in range(4):
            pixels[..., channel] = np.interp(t, offsets, colors[:, channel])

        if rect is not None:
            rx, ry, rw, rh = rect
            mask = (xs >= rx) & (xs < rx + rw) & (ys >= ry) & (ys < ry + rh)
            pixels[~mask] = 0.0

        layer = Image.fromarray(np.rint(pixels).astype(np.uint8))
        self._paint(layer)

    def draw_image(self, image: Image.Image, x: float, y: float, w: float, h: float) -> None:
        size = (max(1, round(w)), max(1, round(h)))
        source = image if image.mode == "RGBA" else image.convert("RGBA")
        if source.size != size:
            source = source.resize(size, Image.Resampling.LANCZOS)
        layer = Image.new("RGBA", self._image.size, TRANSPARENT)
        layer.paste(source, (round(x), round(y)))
        self._paint(layer)

    def to_png(self) -> bytes:
        buffer = io.BytesIO()
        self._image.save(buffer, format="PNG")
        return buffer.getvalue()

    # =========================================================
    # COMPOSITING
    # =========================================================

    def _can_draw_direct(self, fill: RGBA) -> bool:
        return fill[3] == 255 and not self._state.casts_shadow

    def _paint(self, layer: Image.Image) -> None:
        if self._state.casts_shadow:
            self._image.alpha_composite(self._shadow_for(layer))
        self._image.alpha_composite(layer)

    def _shadow_for(self, layer: Image.Image) -> Image.Image:
        state = self._state
        r, g, b, a = state.shadow_color
        mask = layer.getchannel("A")
        if a < 255:
            mask = mask.point(lambda v: v * a // 255)

        tinted = Image.new("RGBA", layer.size, (r, g, b, 0))
        tinted.putalpha(mask)

        shadow = Image.new("RGBA", layer.size, (r, g, b, 0))
        shadow.paste(tinted, (round(state.shadow_offset[0]), round(state.shadow_offset[1])))
        if state.shadow_blur > 0:
            shadow = shadow.filter(ImageFilter.GaussianBlur(radius=state.shadow_blur / 2))
        return shadow
