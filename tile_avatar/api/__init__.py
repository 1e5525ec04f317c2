"""Entry points for the avatar renderer.

`http_api` serves `GET /api` with FastAPI, `cli` writes one PNG to disk and
`main` launches the HTTP app under uvicorn. All three hand the identifier to
`tile_avatar.render.compositor.render_avatar` as received.
"""
