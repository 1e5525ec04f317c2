"""
Server entrypoint for the avatar HTTP API.

Architectural role:
- Configures process logging.
- Runs `tile_avatar.api.http_api:app` under uvicorn.

Configuration:
- `APP_HOST` / `APP_PORT` select the bind address.
- `LOG_LEVEL` selects the root log level.
"""

import uvicorn

from tile_avatar.config import APP_HOST, APP_PORT, LOG_LEVEL, configure_logging


def main():
    """Run the API server until interrupted."""
    configure_logging()
    uvicorn.run(
        "tile_avatar.api.http_api:app",
        host=APP_HOST,
        port=APP_PORT,
        log_level=LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
