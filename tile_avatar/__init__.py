"""Deterministic tile-avatar rendering service.

Package layout:
    - `core`: seed derivation and the seeded value source.
    - `render`: drawing surface, tile pattern and layer compositor.
    - `image`: watermark retrieval.
    - `api`: HTTP and CLI adapters.
    - `config`: environment-driven runtime settings.
"""
