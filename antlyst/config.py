from __future__ import annotations

import os
from pathlib import Path

DATA_DIR = Path(os.getenv("ANTLYST_DATA_DIR", "data_store"))
CACHE_DIR = DATA_DIR / "cache"

REDIS_URL = os.getenv("REDIS_URL", "").strip()
CACHE_VERSION = "v1"
CACHE_TTL_SECONDS = int(os.getenv("ANTLYST_CACHE_TTL_SECONDS", "86400"))

MAX_UPLOAD_BYTES = int(os.getenv("ANTLYST_MAX_UPLOAD_BYTES", str(30 * 1024 * 1024)))
MAX_ROWS = int(os.getenv("ANTLYST_MAX_ROWS", "1000000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()

MANIFEST_PREVIEW_ROWS = int(os.getenv("ANTLYST_MANIFEST_PREVIEW_ROWS", "1000"))

CSV_ENCODINGS = ("utf-8-sig", "utf-8", "cp1252", "latin-1")
