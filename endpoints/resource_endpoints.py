from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from persistence.errors import (
    CollectionNotFound,
    DuplicateId,
    InvalidPayload,
    InvalidRequest,
    ItemNotFound,
    PersistError,
    StoreError,
)
from persistence.repositories import AsyncResourceRepository

router = APIRouter(tags=["resources"])
logger = logging.getLogger(__name__)


def get_repository(request: Request) -> AsyncResourceRepository:
    return request.app.state.repository


def _debug_log_requests(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.debug_log_requests)


def _http_error(e: StoreError) -> HTTPException:
    """Map store errors onto the HTTP vocabulary."""
    if isinstance(e, CollectionNotFound):
        logger.info("Resource not found: %s", e.collection)
        return HTTPException(status_code=404, detail="Resource not found")
    if isinstance(e, ItemNotFound):
        logger.info("Item not found: %s/%s", e.collection, e.record_id)
        return HTTPException(status_code=404, detail="Item not found")
    if isinstance(e, DuplicateId):
        logger.info("Duplicate ID: %s/%s", e.collection, e.record_id)
        return HTTPException(status_code=409, detail="Duplicate ID")
    if isinstance(e, (InvalidPayload, InvalidRequest)):
        logger.info("Rejected request: %s", e)
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, PersistError):
        logger.error("Save failed, memory and disk may differ: %s", e, exc_info=e)
        return HTTPException(status_code=500, detail="Failed to write to JSON file")
    logger.error("Unexpected store error: %r", e, exc_info=e)
    return HTTPException(status_code=500, detail="Internal server error")


async def _read_json_body(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.info("Invalid JSON body for %s %s: %s", request.method, request.url.path, e)
        raise HTTPException(status_code=400, detail="Invalid JSON body") from e


@router.get("/{resource}")
async def get_all(resource: str, repo: AsyncResourceRepository = Depends(get_repository)):
    try:
        return await repo.list_all(resource)
    except StoreError as e:
        raise _http_error(e) from e


@router.get("/{resource}/{id}")
async def get_one(resource: str, id: str, repo: AsyncResourceRepository = Depends(get_repository)):
    try:
        return await repo.get_by_id(resource, id)
    except StoreError as e:
        raise _http_error(e) from e


@router.post("/{resource}", status_code=201)
async def create_item(
    resource: str,
    request: Request,
    repo: AsyncResourceRepository = Depends(get_repository),
) -> JSONResponse:
    payload = await _read_json_body(request)
    if _debug_log_requests(request):
        logger.debug("POST /%s payload=%s", resource, payload)
    try:
        record = await repo.create(resource, payload)
    except StoreError as e:
        raise _http_error(e) from e
    return JSONResponse(record["id"], status_code=201)


@router.put("/{resource}/{id}")
async def update_item(
    resource: str,
    id: str,
    request: Request,
    repo: AsyncResourceRepository = Depends(get_repository),
) -> JSONResponse:
    payload = await _read_json_body(request)
    if _debug_log_requests(request):
        logger.debug("PUT /%s/%s payload=%s", resource, id, payload)
    try:
        record_id = await repo.update(resource, id, payload)
    except StoreError as e:
        raise _http_error(e) from e
    return JSONResponse(record_id)


@router.delete("/{resource}/{id}")
async def delete_item(resource: str, id: str, repo: AsyncResourceRepository = Depends(get_repository)):
    try:
        return await repo.delete(resource, id)
    except StoreError as e:
        raise _http_error(e) from e
