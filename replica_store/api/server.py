"""FastAPI gateway over the replicated file store."""

from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config import StoreConfig
from ..errors import (
    AlreadyDown,
    AlreadyUp,
    CatalogFull,
    DuplicateName,
    InvalidNode,
    InvalidRequest,
    NoHealthyNodes,
    NotFound,
    StoreError,
    Unavailable,
)
from ..messaging import MessageEnvelope
from ..models import FileListing, NodeStatus, NodeTransition
from ..runtime import ReplicaStoreRuntime


runtime = ReplicaStoreRuntime.bootstrap(StoreConfig.from_env())
logger = logging.getLogger(__name__)

app = FastAPI(title="Replica Store API", version="0.1.0")

_cors_origins = [origin.strip() for origin in os.environ.get("REPLICA_STORE_CORS_ORIGINS", "*").split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins or ["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS_BY_ERROR = (
    (NotFound, 404),
    (InvalidNode, 404),
    (DuplicateName, 409),
    (AlreadyDown, 409),
    (AlreadyUp, 409),
    (CatalogFull, 503),
    (NoHealthyNodes, 503),
    (Unavailable, 503),
    (InvalidRequest, 422),
)


class FileCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    payload: str = Field(default="")


def _http_error(exc: StoreError) -> HTTPException:
    status = next((code for error_type, code in _STATUS_BY_ERROR if isinstance(exc, error_type)), 400)
    if status >= 500:
        logger.warning("Request failed: %s", exc)
    return HTTPException(status_code=status, detail={"error": exc.code, "message": str(exc)})


def _serialize_listing(listing: FileListing) -> dict[str, Any]:
    return {
        "name": listing.name,
        "payload": listing.payload.decode("utf-8", errors="replace"),
        "replicas": [{"node_id": loc.node_id, "node_healthy": loc.node_healthy} for loc in listing.replicas],
    }


def _serialize_node(row: NodeStatus) -> dict[str, Any]:
    return {"node_id": row.node_id, "healthy": row.healthy, "status": "UP" if row.healthy else "DOWN"}


def _serialize_transition(transition: NodeTransition) -> dict[str, Any]:
    return {
        "node_id": transition.node_id,
        "status": "UP" if transition.healthy else "DOWN",
        "invalidated_files": transition.invalidated_files,
        "healed": [{"file": e.file_name, "node_id": e.node_id} for e in transition.healing_events],
    }


def _serialize_activity_event(event: MessageEnvelope) -> dict[str, Any]:
    return {"topic": event.topic, "payload": event.payload}


@app.post("/files")
async def create_file(payload: FileCreateRequest):
    try:
        result = runtime.gateway.create_file(payload.name, payload.payload)
    except StoreError as exc:
        raise _http_error(exc) from exc
    return {
        "name": result.name,
        "replica_count": result.replica_count,
        "node_ids": result.node_ids,
        "degraded": result.degraded,
    }


@app.get("/files")
async def list_files():
    return [_serialize_listing(listing) for listing in runtime.gateway.list_files()]


@app.get("/files/{name:path}")
async def read_file(name: str):
    try:
        result = runtime.gateway.read_file(name)
    except StoreError as exc:
        raise _http_error(exc) from exc
    return {
        "name": result.name,
        "node_id": result.node_id,
        "payload": result.payload.decode("utf-8", errors="replace"),
    }


@app.get("/nodes")
async def list_nodes():
    return [_serialize_node(row) for row in runtime.gateway.list_nodes()]


@app.post("/nodes/{node_id}:fail")
async def fail_node(node_id: int):
    try:
        transition = runtime.gateway.fail_node(node_id)
    except StoreError as exc:
        raise _http_error(exc) from exc
    return _serialize_transition(transition)


@app.post("/nodes/{node_id}:recover")
async def recover_node(node_id: int):
    try:
        transition = runtime.gateway.recover_node(node_id)
    except StoreError as exc:
        raise _http_error(exc) from exc
    return _serialize_transition(transition)


@app.get("/activity")
async def list_activity(limit: int = 10):
    return [_serialize_activity_event(event) for event in runtime.gateway.recent_activity(limit)]


@app.get("/metrics")
async def get_metrics():
    return runtime.get_metrics_snapshot()
