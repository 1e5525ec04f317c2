"""Seeded cut-corner tile pattern.

Architectural role:
    Paints the base layer of every avatar: a fixed grid of square tiles, each
    with a background fill and a foreground octagon whose corners are cut by a
    per-tile offset. Called by `tile_avatar.render.compositor` before the
    gradient and watermark layers.

Selection order per tile (the order matters for reproducibility):
    1. background palette index
    2. foreground palette index, redrawn until it differs from the background
    3. offset-table index

Traversal:
    Column by column: the outer loop walks x, the inner loop walks y.

Determinism:
    All choices are drawn from the `SeededRandom` passed in by the caller. The
    module holds no random state of its own.
"""

from dataclasses import dataclass

from tile_avatar.core.random_source import SeededRandom
from tile_avatar.render.surface import DrawingSurface, Point


@dataclass(frozen=True)
class PatternSettings:
    """Immutable grid, palette and offset-table configuration.

    Attributes:
        grid_size: Tiles per row/column.
        box_size: Tile edge length in pixels.
        canvas_size: Edge length of the square canvas; tile coordinates wrap
            modulo this value.
        colors: Palette as CSS color strings. At least two entries.
        offsets: Divisors applied to `box_size` to get the corner-cut size.
    """

    grid_size: int = 10
    box_size: int = 40
    canvas_size: int = 400
    colors: tuple[str, ...] = ("#FFE8FF", "#FF1DFF", "#44106C", "#1A0335", "#672EEB")
    offsets: tuple[float, ...] = (1.25, 1.35, 1.425, 1.5, 1.6, 2)

    def __post_init__(self):
        if len(self.colors) < 2:
            raise ValueError("palette needs at least two colors for distinct foregrounds")
        if not self.offsets or any(o <= 0 for o in self.offsets):
            raise ValueError("offset table must contain positive divisors")
        if self.grid_size <= 0 or self.box_size <= 0 or self.canvas_size <= 0:
            raise ValueError("grid_size, box_size and canvas_size must be positive")


PATTERN_SETTINGS = PatternSettings()


@dataclass(frozen=True)
class TileSpec:
    """Resolved drawing parameters for one grid cell."""

    column: int
    row: int
    x: int
    y: int
    background_index: int
    foreground_index: int
    offset: float


def cut_corner_path(x: float, y: float, size: float, offset: float) -> list[Point]:
    """Return the eight vertices of the cut-corner shape, clockwise from top-left.

    Offsets above `size / 2` make opposite edges cross; the path is still
    emitted unchanged and filled as-is.
    """
    return [
        (x + offset, y),
        (x + size - offset, y),
        (x + size, y + offset),
        (x + size, y + size - offset),
        (x + size - offset, y + size),
        (x + offset, y + size),
        (x, y + size - offset),
        (x, y + offset),
    ]


def pick_tile(source: SeededRandom, settings: PatternSettings, column: int, row: int) -> TileSpec:
    """Draw the color and offset choices for one cell from `source`."""
    palette_size = len(settings.colors)

    background_index = source.choice_index(palette_size)
    foreground_index = source.choice_index(palette_size)
    while foreground_index == background_index:
        foreground_index = source.choice_index(palette_size)

    x = (column * settings.box_size) % settings.canvas_size
    y = (row * settings.box_size) % settings.canvas_size
    offset = settings.box_size / settings.offsets[source.choice_index(len(settings.offsets))]

    return TileSpec(
        column=column,
        row=row,
        x=x,
        y=y,
        background_index=background_index,
        foreground_index=foreground_index,
        offset=offset,
    )


def draw_tile(surface: DrawingSurface, tile: TileSpec, settings: PatternSettings) -> None:
    surface.fill_rect(tile.x, tile.y, settings.box_size, settings.box_size,
                      settings.colors[tile.background_index])
    surface.fill_path(
        cut_corner_path(tile.x, tile.y, settings.box_size, tile.offset),
        settings.colors[tile.foreground_index],
    )


def draw_pattern(
    surface: DrawingSurface,
    source: SeededRandom,
    settings: PatternSettings = PATTERN_SETTINGS,
) -> list[TileSpec]:
    """Paint the full tile grid onto `surface`.

    Args:
        surface: Target drawing surface.
        source: Per-render value source. Consumed in traversal order.
        settings: Grid/palette configuration.

    Returns:
        The `TileSpec` for every cell, in drawing order.
    """
    tiles: list[TileSpec] = []
    for column in range(settings.grid_size):
        for row in range(settings.grid_size):
            tile = pick_tile(source, settings, column, row)
            draw_tile(surface, tile, settings)
            tiles.append(tile)
    return tiles
