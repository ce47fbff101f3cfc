"""Entrypoint for running The Chronicles of Max content server."""
from __future__ import annotations

import os
from pathlib import Path

from max_chronicles import create_app


def _optional_path(raw: str | None) -> Path | None:
    return Path(raw) if raw else None


# Configuration from environment variables
PORT = int(os.environ.get("PORT", "3000"))
PRODUCTION = os.environ.get("CHRONICLES_ENV", "").lower() == "production"
CONTENT_ROOT_STR = os.environ.get("CHRONICLES_CONTENT_ROOT")

# Both modes scan at startup; only production skips the built-in listener
# and expects a WSGI server to import ``app``.
app = create_app(_optional_path(CONTENT_ROOT_STR), eager_scan=True)

if __name__ == "__main__" and not PRODUCTION:
    app.run(host="0.0.0.0", port=PORT, debug=True)
