"""Runtime configuration for the service and CLI adapters.

Architectural role:
    Centralizes environment-driven settings consumed by the HTTP API, the CLI
    and the watermark source. Render geometry and palette constants are not
    configured here; they are immutable values in `tile_avatar.render`.

Determinism:
    Values are resolved at import time from the process environment (after an
    optional `.env` file is loaded) and do not change afterwards.

Relevant environment variables:
    - `APP_HOST`, `APP_PORT`
    - `DEBUG`
    - `LOG_LEVEL`
    - `CACHE_MAX_AGE_SECONDS`
    - `WATERMARK_URL`, `WATERMARK_TIMEOUT_SECONDS`, `WATERMARK_RETRY_ATTEMPTS`,
      `WATERMARK_BACKOFF_SECONDS`, `WATERMARK_CACHE`, `WATERMARK_USER_AGENT`
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    """Read a boolean-ish environment variable (`1/true/yes/on`)."""
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8000"))

# Per-request seed/debug logging is opt-in.
DEBUG = _env_flag("DEBUG")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Rendered output is a pure function of the query string.
CACHE_MAX_AGE_SECONDS = int(os.getenv("CACHE_MAX_AGE_SECONDS", "86400"))

DEFAULT_WATERMARK_URL = "https://blog.aavegotchi.com/content/images/2023/07/fulllogo.png"

WATERMARK_URL = os.getenv("WATERMARK_URL", DEFAULT_WATERMARK_URL).strip()
WATERMARK_TIMEOUT_SECONDS = float(os.getenv("WATERMARK_TIMEOUT_SECONDS", "10"))
WATERMARK_RETRY_ATTEMPTS = int(os.getenv("WATERMARK_RETRY_ATTEMPTS", "1"))
WATERMARK_BACKOFF_SECONDS = float(os.getenv("WATERMARK_BACKOFF_SECONDS", "0.5"))
WATERMARK_CACHE = _env_flag("WATERMARK_CACHE", "true")
WATERMARK_USER_AGENT = os.getenv("WATERMARK_USER_AGENT", "tile-avatar/1.0").strip()


def configure_logging(level: str | None = None) -> None:
    """Install a root log handler for process entry points.

    Library modules only create named loggers; this is called once by the CLI
    and the uvicorn launcher.
    """
    logging.basicConfig(
        level=(level or LOG_LEVEL),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
