"""
Command-line adapter: render one avatar to a PNG file.

Architectural role:
- Operator tool over the same pipeline the HTTP API uses.
- Delegates rendering to `tile_avatar.render.compositor.render_avatar`.

Request lifecycle:
1. Parse `address`, optional `--data`, optional `--out`.
2. Derive and print the seed.
3. Render through `render_avatar` (watermark fetched per configuration).
4. Write the PNG and print its path.

Input validation behavior:
- Blank `address` is rejected by argparse-level validation. Any other value
  is passed through unchanged.

Error handling strategy:
- `WatermarkError`, any other render failure, and `OSError` while writing
  print a one-line message to stderr and exit with status 1. No file is
  written on failure.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from tile_avatar.config import configure_logging
from tile_avatar.core.seed import derive_seed
from tile_avatar.image.watermark import WatermarkConfig, WatermarkError, WatermarkSource
from tile_avatar.render.compositor import render_avatar


def _non_blank(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("address must not be blank")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a deterministic tile avatar")
    parser.add_argument("address", type=_non_blank, help="Identifier to render (e.g. 0x-address)")
    parser.add_argument("--data", default=None, help="Optional auxiliary data mixed into the seed")
    parser.add_argument("--out", default=None, help="Output PNG path (default: <address>.png)")
    parser.add_argument(
        "--watermark",
        default=None,
        help="Watermark URL or local path (default: WATERMARK_URL)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    source = None
    if args.watermark:
        source = WatermarkSource(WatermarkConfig(url=args.watermark))

    out_path = Path(args.out) if args.out else Path(f"{args.address}.png")
    seed = derive_seed(args.address, args.data)
    print(f"Seed: {seed} (0x{seed:08x})")

    try:
        png = asyncio.run(render_avatar(args.address, args.data, watermark_source=source))
    except WatermarkError as exc:
        print(f"Watermark unavailable: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        print(f"Render failed: {exc.__class__.__name__}: {exc}", file=sys.stderr)
        return 1

    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(png)
    except OSError as exc:
        print(f"Could not write {out_path}: {exc}", file=sys.stderr)
        return 1

    print(f"Wrote {out_path} ({len(png)} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
