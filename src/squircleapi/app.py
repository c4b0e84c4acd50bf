from __future__ import annotations

import logging
import os
from urllib.parse import quote

import anyio
from fastapi import FastAPI, HTTPException, Path, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .errors import StoreError
from .export_sink import DirectorySink
from .theme_contract import (
    ErrorBody,
    ErrorResponse,
    ThemeCreateRequestV1,
    ThemeExportLocationV1,
    ThemeListResponseV1,
    ThemeModelV1,
    ThemeRefV1,
)
from .theme_store import AsyncThemeStore, ThemeStore

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = float(os.getenv("SQUIRCLE_REQUEST_TIMEOUT_SECONDS", "15"))
MAX_REQUEST_BYTES = int(os.getenv("SQUIRCLE_MAX_REQUEST_BYTES", "1048576"))

app = FastAPI(
    title="SquircleAPI",
    description=(
        "Squircle IDE runtime API. Manages editor color themes (built-in and user "
        "created), the active theme selection and the versioned runtime database."
    ),
    version="1.0.0",
)

cors_origins = [origin.strip() for origin in os.getenv("SQUIRCLE_CORS_ORIGINS", "*").split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# A failed migration raises here and aborts startup.
theme_store = ThemeStore.from_env()
theme_store.ensure_schema()
export_sink = DirectorySink.from_env()


def _themes() -> AsyncThemeStore:
    return AsyncThemeStore(theme_store)


def _store_http_error(exc: StoreError) -> HTTPException:
    logger.warning("Theme operation failed: %s (%s)", exc.message, exc.code)
    body = ErrorResponse(
        error=ErrorBody(code=exc.code, message=exc.message, details=exc.details)
    )
    return HTTPException(status_code=exc.status_code, detail=body.model_dump()["error"])


@app.middleware("http")
async def request_limits_and_timeout(request, call_next):
    content_length = request.headers.get("content-length")
    if content_length is not None:
        try:
            if int(content_length) > MAX_REQUEST_BYTES:
                return JSONResponse(status_code=413, content={"detail": "Request body too large."})
        except ValueError:
            return JSONResponse(status_code=400, content={"detail": "Invalid Content-Length header."})

    try:
        with anyio.fail_after(REQUEST_TIMEOUT_SECONDS):
            return await call_next(request)
    except TimeoutError:
        return JSONResponse(status_code=504, content={"detail": "Request timed out."})


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get(
    "/v1/themes",
    response_model=ThemeListResponseV1,
    tags=["themes"],
)
async def list_themes_v1(query: str = Query(default="", max_length=120)) -> ThemeListResponseV1:
    try:
        return await _themes().list_themes(query)
    except StoreError as exc:
        raise _store_http_error(exc) from exc


@app.get(
    "/v1/themes/active",
    response_model=ThemeModelV1,
    tags=["themes"],
    responses={404: {"model": ErrorResponse}},
)
async def get_active_theme_v1() -> ThemeModelV1:
    try:
        return await _themes().get_active_theme()
    except StoreError as exc:
        raise _store_http_error(exc) from exc


@app.post(
    "/v1/themes/import",
    response_model=ThemeModelV1,
    tags=["themes"],
    responses={400: {"model": ErrorResponse}},
)
async def import_theme_v1(request: Request) -> ThemeModelV1:
    raw = await request.body()
    try:
        return await _themes().import_theme(raw)
    except StoreError as exc:
        raise _store_http_error(exc) from exc


@app.get(
    "/v1/themes/{uuid}",
    response_model=ThemeModelV1,
    tags=["themes"],
    responses={404: {"model": ErrorResponse}},
)
async def get_theme_v1(uuid: str) -> ThemeModelV1:
    try:
        return await _themes().get_theme(uuid)
    except StoreError as exc:
        raise _store_http_error(exc) from exc


@app.post(
    "/v1/themes",
    response_model=ThemeModelV1,
    status_code=201,
    tags=["themes"],
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_theme_v1(request: ThemeCreateRequestV1) -> ThemeModelV1:
    themes = _themes()
    try:
        await themes.create_theme(request.meta, request.properties)
        return await themes.get_theme(request.meta.uuid)
    except StoreError as exc:
        raise _store_http_error(exc) from exc


@app.delete(
    "/v1/themes/{uuid}",
    status_code=204,
    tags=["themes"],
)
async def remove_theme_v1(uuid: str = Path(min_length=1, max_length=64)) -> Response:
    try:
        await _themes().remove_theme(ThemeRefV1(uuid=uuid))
    except StoreError as exc:
        raise _store_http_error(exc) from exc
    return Response(status_code=204)


@app.post(
    "/v1/themes/{uuid}/select",
    status_code=204,
    tags=["themes"],
)
async def select_theme_v1(uuid: str = Path(min_length=1, max_length=64)) -> Response:
    try:
        await _themes().select_theme(ThemeRefV1(uuid=uuid))
    except StoreError as exc:
        raise _store_http_error(exc) from exc
    return Response(status_code=204)


@app.get(
    "/v1/themes/{uuid}/export",
    tags=["themes"],
    responses={404: {"model": ErrorResponse}},
)
async def download_theme_v1(uuid: str) -> Response:
    themes = _themes()
    try:
        exported = await themes.export_theme(await themes.resolve_theme(uuid))
    except StoreError as exc:
        raise _store_http_error(exc) from exc

    headers = {
        "Content-Disposition": f"attachment; filename*=UTF-8''{quote(exported.fileName)}",
    }
    return Response(content=exported.content, media_type=exported.mimeType, headers=headers)


@app.post(
    "/v1/themes/{uuid}/export",
    response_model=ThemeExportLocationV1,
    tags=["themes"],
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def export_theme_v1(uuid: str) -> ThemeExportLocationV1:
    themes = _themes()
    try:
        return await themes.save_export(await themes.resolve_theme(uuid), export_sink)
    except StoreError as exc:
        raise _store_http_error(exc) from exc
