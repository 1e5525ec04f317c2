"""Watermark resource package.

Scope:
    Fetches and decodes the branding watermark drawn over every avatar, with a
    bounded timeout and an optional process-wide cache.

Non-goals:
    - No image generation; rendering lives in `tile_avatar.render`.
    - No persistence of fetched resources to disk.
"""
