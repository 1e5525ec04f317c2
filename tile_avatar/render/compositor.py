"""Layered avatar compositing.

Architectural role:
    Produces the final PNG for one identifier. This is the entry point used by
    the HTTP API and the CLI.

Layer order (later layers paint over earlier ones):
    1. Seeded tile pattern (`tile_avatar.render.pattern`).
    2. Full-canvas vertical gradient, translucent gray at the top to opaque
       black at the bottom.
    3. Watermark scaled to 300x180, horizontally centered and anchored to the
       bottom edge, drawn inside a scoped black drop shadow (blur 60).

Concurrency model:
    `render_avatar` suspends once, while awaiting the watermark. Rasterization
    runs in a worker thread via `asyncio.to_thread`. Each call owns its
    surface and its `SeededRandom`; nothing mutable is shared between calls.

Error handling strategy:
    Failures propagate unchanged (`ValueError` for an empty identifier,
    `WatermarkError` for the watermark). No partial image is returned.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from PIL import Image

from tile_avatar.config import DEBUG
from tile_avatar.core.random_source import SeededRandom
from tile_avatar.core.seed import derive_seed
from tile_avatar.image.watermark import WatermarkProvider, get_watermark_source
from tile_avatar.render.pattern import PATTERN_SETTINGS, PatternSettings, TileSpec, draw_pattern
from tile_avatar.render.surface import ColorStop, DrawingSurface, PillowSurface


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompositorSettings:
    """Fixed canvas, overlay and watermark geometry."""

    canvas_size: int = 400
    gradient_stops: tuple[ColorStop, ...] = (
        (0.0, "rgba(54, 54, 54, 0.37)"),
        (0.7, "rgba(0, 0, 0, 0.67)"),
        (1.0, "rgb(0, 0, 0)"),
    )
    watermark_width: int = 300
    watermark_height: int = 180
    shadow_color: str = "rgb(0, 0, 0)"
    shadow_blur: float = 60
    pattern: PatternSettings = PATTERN_SETTINGS

    def __post_init__(self):
        if self.pattern.canvas_size != self.canvas_size:
            raise ValueError(
                f"pattern canvas ({self.pattern.canvas_size}) does not match "
                f"compositor canvas ({self.canvas_size})"
            )

    def watermark_box(self) -> tuple[float, float, int, int]:
        """Return `(x, y, width, height)` of the watermark placement."""
        x = (self.canvas_size - self.watermark_width) / 2
        y = self.canvas_size - self.watermark_height
        return (x, y, self.watermark_width, self.watermark_height)


COMPOSITOR_SETTINGS = CompositorSettings()


def apply_gradient(surface: DrawingSurface, settings: CompositorSettings = COMPOSITOR_SETTINGS) -> None:
    surface.fill_linear_gradient(
        start=(0, 0),
        end=(0, surface.height),
        stops=settings.gradient_stops,
        rect=(0, 0, surface.width, surface.height),
    )


def draw_watermark(
    surface: DrawingSurface,
    watermark: Image.Image,
    settings: CompositorSettings = COMPOSITOR_SETTINGS,
) -> None:
    """Draw the watermark with a drop shadow confined to this call."""
    x, y, width, height = settings.watermark_box()
    with surface.shadow(settings.shadow_color, settings.shadow_blur):
        surface.draw_image(watermark, x, y, width, height)


def compose_layers(
    surface: DrawingSurface,
    seed: int,
    watermark: Image.Image,
    settings: CompositorSettings = COMPOSITOR_SETTINGS,
) -> list[TileSpec]:
    """Paint all avatar layers onto `surface` and return the drawn tiles."""
    tiles = draw_pattern(surface, SeededRandom(seed), settings.pattern)
    apply_gradient(surface, settings)
    draw_watermark(surface, watermark, settings)
    return tiles


def compose_avatar(
    seed: int,
    watermark: Image.Image,
    settings: CompositorSettings = COMPOSITOR_SETTINGS,
    surface_factory: Callable[[int, int], DrawingSurface] = PillowSurface,
) -> bytes:
    """Render a complete avatar for `seed` and return PNG bytes."""
    surface = surface_factory(settings.canvas_size, settings.canvas_size)
    compose_layers(surface, seed, watermark, settings)
    return surface.to_png()


async def render_avatar(
    identifier: str,
    aux: str | None = None,
    *,
    watermark_source: WatermarkProvider | None = None,
    settings: CompositorSettings = COMPOSITOR_SETTINGS,
) -> bytes:
    """Render the avatar PNG for an identifier.

    Args:
        identifier: Address-like identifier. Must be non-empty.
        aux: Optional auxiliary data mixed into the seed.
        watermark_source: Override for the process-wide watermark source.
        settings: Canvas/overlay configuration.

    Returns:
        PNG-encoded 400x400 image.

    Raises:
        ValueError: If `identifier` is empty.
        WatermarkError: If the watermark cannot be fetched or decoded.
    """
    seed = derive_seed(identifier, aux)
    if DEBUG:
        logger.debug("Rendering avatar identifier=%r aux=%r seed=%d", identifier, aux, seed)

    source = watermark_source or get_watermark_source()
    watermark = await source.aload()

    return await asyncio.to_thread(compose_avatar, seed, watermark, settings)
