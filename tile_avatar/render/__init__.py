"""Raster rendering package.

Module split:
    - `surface`: `DrawingSurface` protocol and the Pillow-backed implementation.
    - `pattern`: seeded cut-corner tile grid.
    - `compositor`: pattern + gradient + shadowed watermark -> PNG bytes.
"""
