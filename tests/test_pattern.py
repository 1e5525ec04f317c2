"""
Unit tests for the seeded tile pattern.

Tests traversal order, distinct colors, grid coverage and reproducibility.
"""

from contextlib import contextmanager

import pytest

from tile_avatar.core.random_source import SeededRandom
from tile_avatar.core.seed import derive_seed
from tile_avatar.render.pattern import (
    PATTERN_SETTINGS,
    PatternSettings,
    cut_corner_path,
    draw_pattern,
    pick_tile,
)
from tile_avatar.render.surface import PillowSurface


class RecordingSurface:
    """DrawingSurface stand-in that records every call."""

    def __init__(self, width=400, height=400):
        self.width = width
        self.height = height
        self.calls = []

    def fill_rect(self, x, y, w, h, color):
        self.calls.append(("rect", (x, y, w, h), color))

    def fill_path(self, points, color):
        self.calls.append(("path", tuple(points), color))

    def fill_linear_gradient(self, start, end, stops, rect=None):
        self.calls.append(("gradient", (start, end), tuple(stops)))

    def draw_image(self, image, x, y, w, h):
        self.calls.append(("image", (x, y, w, h), image.size))

    def save(self):
        self.calls.append(("save",))

    def restore(self):
        self.calls.append(("restore",))

    @contextmanager
    def shadow(self, color, blur, offset=(0.0, 0.0)):
        self.save()
        self.calls.append(("shadow", color, blur))
        try:
            yield self
        finally:
            self.restore()

    def to_png(self):
        return b""


class TestPatternSettings:

    def test_defaults(self):
        assert PATTERN_SETTINGS.grid_size == 10
        assert PATTERN_SETTINGS.box_size == 40
        assert PATTERN_SETTINGS.canvas_size == 400
        assert len(PATTERN_SETTINGS.colors) == 5
        assert PATTERN_SETTINGS.offsets == (1.25, 1.35, 1.425, 1.5, 1.6, 2)

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            PATTERN_SETTINGS.grid_size = 3

    def test_single_color_palette_rejected(self):
        with pytest.raises(ValueError):
            PatternSettings(colors=("#000000",))

    def test_non_positive_offset_rejected(self):
        with pytest.raises(ValueError):
            PatternSettings(offsets=(1.5, 0))


class TestCutCornerPath:

    def test_vertices_clockwise_from_top_edge(self):
        assert cut_corner_path(40, 80, 40, 20) == [
            (60, 80), (60, 80), (80, 100), (80, 100),
            (60, 120), (60, 120), (40, 100), (40, 100),
        ]

    def test_small_offset_gives_octagon(self):
        points = cut_corner_path(0, 0, 40, 10)
        assert points[0] == (10, 0)
        assert points[1] == (30, 0)
        assert points[2] == (40, 10)
        assert points[-1] == (0, 10)
        assert len(set(points)) == 8


class TestPickTile:

    def test_foreground_differs_from_background(self):
        source = SeededRandom(derive_seed("0xfeed"))
        for i in range(500):
            tile = pick_tile(source, PATTERN_SETTINGS, i % 10, i // 10 % 10)
            assert tile.foreground_index != tile.background_index

    def test_offset_comes_from_table(self):
        allowed = {PATTERN_SETTINGS.box_size / o for o in PATTERN_SETTINGS.offsets}
        source = SeededRandom(derive_seed("0xbeef"))
        for _ in range(200):
            assert pick_tile(source, PATTERN_SETTINGS, 0, 0).offset in allowed

    def test_consumes_background_foreground_offset_in_order(self):
        probe = SeededRandom(1)
        background = probe.choice_index(5)
        foreground = probe.choice_index(5)
        while foreground == background:
            foreground = probe.choice_index(5)
        offset_index = probe.choice_index(6)

        tile = pick_tile(SeededRandom(1), PATTERN_SETTINGS, 2, 3)
        assert tile.background_index == background
        assert tile.foreground_index == foreground
        assert tile.offset == 40 / PATTERN_SETTINGS.offsets[offset_index]
        assert (tile.x, tile.y) == (80, 120)


class TestDrawPattern:

    @pytest.fixture
    def recorded(self):
        surface = RecordingSurface()
        tiles = draw_pattern(surface, SeededRandom(derive_seed("0xabc...123")))
        return surface, tiles

    def test_one_tile_per_cell(self, recorded):
        _, tiles = recorded
        assert len(tiles) == 100
        assert {(t.x, t.y) for t in tiles} == {
            (x, y) for x in range(0, 400, 40) for y in range(0, 400, 40)
        }

    def test_column_major_traversal(self, recorded):
        _, tiles = recorded
        assert [(t.column, t.row) for t in tiles[:3]] == [(0, 0), (0, 1), (0, 2)]
        assert (tiles[10].column, tiles[10].row) == (1, 0)

    def test_distinct_colors_every_cell(self, recorded):
        _, tiles = recorded
        assert all(t.foreground_index != t.background_index for t in tiles)

    def test_background_then_shape_per_tile(self, recorded):
        surface, tiles = recorded
        assert len(surface.calls) == 200
        for tile, (rect, path) in zip(tiles, zip(surface.calls[::2], surface.calls[1::2])):
            assert rect == ("rect", (tile.x, tile.y, 40, 40), PATTERN_SETTINGS.colors[tile.background_index])
            assert path[0] == "path"
            assert path[2] == PATTERN_SETTINGS.colors[tile.foreground_index]
            assert path[1][0] == (tile.x + tile.offset, tile.y)

    def test_same_seed_same_layout(self):
        seed = derive_seed("0x00000000000000000000000000000000000000aa")
        first = draw_pattern(RecordingSurface(), SeededRandom(seed))
        second = draw_pattern(RecordingSurface(), SeededRandom(seed))
        assert first == second

    def test_different_seeds_different_layout(self):
        first = draw_pattern(RecordingSurface(), SeededRandom(derive_seed("0xabc", "one")))
        second = draw_pattern(RecordingSurface(), SeededRandom(derive_seed("0xabc", "two")))
        assert first != second

    def test_covers_full_canvas(self):
        surface = PillowSurface(400, 400)
        draw_pattern(surface, SeededRandom(derive_seed("0xcafe")))
        alpha = surface.image.getchannel("A")
        assert alpha.getextrema() == (255, 255)

    def test_small_grid_settings(self):
        settings = PatternSettings(grid_size=2, box_size=10, canvas_size=20, colors=("#000000", "#ffffff"))
        surface = RecordingSurface(20, 20)
        tiles = draw_pattern(surface, SeededRandom(5), settings)
        assert {(t.x, t.y) for t in tiles} == {(0, 0), (0, 10), (10, 0), (10, 10)}
        assert all({t.background_index, t.foreground_index} == {0, 1} for t in tiles)
