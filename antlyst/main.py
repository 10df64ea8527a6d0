from __future__ import annotations

import hashlib
import logging
from typing import Any

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from pydantic import BaseModel

from antlyst.cache import CacheManager
from antlyst.config import CACHE_VERSION, LOG_LEVEL, MAX_ROWS, MAX_UPLOAD_BYTES
from antlyst.contract import ConfigValidationError, validate_config
from antlyst.dashboards import _utc_now_iso, generate_dashboard
from antlyst.ingest import ParseError, read_table
from antlyst.manifest import build_manifest
from antlyst.schemas import DashboardStyle

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Antlyst Dashboard Engine", version="0.1.0")
cache = CacheManager()


class DashboardResponse(BaseModel):
    file_hash: str
    style: str
    cached: bool
    dashboard: dict[str, Any]


class ManifestResponse(BaseModel):
    file_hash: str
    manifest: dict[str, Any]


class InvalidateResponse(BaseModel):
    file_hash: str
    removed: int


def _sha256_bytes(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def _cache_key(file_hash: str, artifact: str, params: str = "default") -> str:
    return f"cache:{CACHE_VERSION}:{file_hash}:{artifact}:{params}"


async def _read_upload(file: UploadFile) -> bytes:
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=400, detail=f"File too large (max {MAX_UPLOAD_BYTES // (1024 * 1024)}MB)."
        )
    return content


def _cached_dashboard(key: str) -> dict[str, Any] | None:
    document = cache.get(key)
    if document is None:
        return None
    try:
        validate_config(document)
    except ConfigValidationError as exc:
        logger.warning("Cached dashboard %s failed validation, regenerating: %s", key, exc)
        return None
    return document


@app.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok", "timestamp": _utc_now_iso()}


@app.post("/dashboards", response_model=DashboardResponse)
async def create_dashboard(
    file: UploadFile = File(...),
    style: DashboardStyle = Query(default="simple"),
    force: bool = Query(default=False),
) -> DashboardResponse:
    content = await _read_upload(file)
    file_hash = _sha256_bytes(content)
    key = _cache_key(file_hash, "dashboard", style)

    if not force:
        cached = _cached_dashboard(key)
        if cached is not None:
            return DashboardResponse(file_hash=file_hash, style=style, cached=True, dashboard=cached)

    try:
        config = generate_dashboard(content, style, max_rows=MAX_ROWS)
    except ParseError as exc:
        raise HTTPException(status_code=400, detail=f"Could not parse CSV: {exc}") from exc

    document = config.to_dict()
    cache.set(key, document)
    return DashboardResponse(file_hash=file_hash, style=style, cached=False, dashboard=document)


@app.post("/manifests", response_model=ManifestResponse)
async def create_manifest(file: UploadFile = File(...)) -> ManifestResponse:
    content = await _read_upload(file)
    try:
        table = read_table(content, max_rows=MAX_ROWS)
    except ParseError as exc:
        raise HTTPException(status_code=400, detail=f"Could not parse CSV: {exc}") from exc
    return ManifestResponse(file_hash=_sha256_bytes(content), manifest=build_manifest(table))


@app.delete("/dashboards/{file_hash}", response_model=InvalidateResponse)
def invalidate_dashboards(file_hash: str) -> InvalidateResponse:
    removed = cache.invalidate_prefix(_cache_key(file_hash, "dashboard", ""))
    logger.info("Invalidated %d cached dashboards for %s", removed, file_hash)
    return InvalidateResponse(file_hash=file_hash, removed=removed)
