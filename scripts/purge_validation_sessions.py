"""
Delete expired validation sessions from the configured session store.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import replace

from app.config import get_sheet_ingestion_settings
from app.sessions import build_session_store


def main() -> int:
    parser = argparse.ArgumentParser(description="Purge expired validation sessions.")
    parser.add_argument(
        "--backend",
        dest="backend",
        choices=["database", "file"],
        default=None,
        help="Override SESSION_STORE_BACKEND for this run.",
    )
    args = parser.parse_args()

    settings = get_sheet_ingestion_settings()
    backend = args.backend or settings.session_store_backend
    if backend == "memory":
        parser.error("The memory backend lives inside the API process and cannot be purged externally.")

    store = build_session_store(replace(settings, session_store_backend=backend))
    purged = store.purge_expired()

    payload = {
        "backend": backend,
        "ttl_seconds": settings.session_ttl_seconds,
        "purged": purged,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
