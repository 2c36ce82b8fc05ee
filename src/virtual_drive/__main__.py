"""Run the virtual drive as a standalone HTTP server.

Usage:
    VIRTUAL_DRIVE_PORT=3001 STORAGE_TYPE=memory USE_SAMPLE_DATA=1 python -m virtual_drive

Settings are read from the environment (see ``DriveSettings.from_env``).
"""

import os
import sys

import uvicorn

from .api import create_app
from .settings import DriveSettings, SettingsError


def main():
    host = os.environ.get("VIRTUAL_DRIVE_HOST", "127.0.0.1")
    port = int(os.environ.get("VIRTUAL_DRIVE_PORT", "3001"))

    settings = DriveSettings.from_env()
    try:
        app = create_app(settings)
    except SettingsError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(2)

    print(f"Virtual drive starting on http://{host}:{port}")
    print(f"Storage: {settings.storage_type}")

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
