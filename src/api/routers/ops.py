import os
import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api import state
from api.backend import BackendAPI
from api.dependencies import get_backend
from api.metrics import RECENT_ANALYSES

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(backend: BackendAPI = Depends(get_backend)) -> dict:
    """Health check endpoint for container orchestration."""
    model = backend.classifier.model
    health = {
        "status": "healthy",
        "profile": os.getenv("DEPLOYMENT_PROFILE", "unknown"),
        "intent_backend": backend.settings.intent_backend,
        "intent_model": model.name if model is not None else None,
        "intent_model_ready": bool(model is not None and model.is_ready()),
        "recent_analyses": len(state.recent_analyses),
    }
    # keyword fallback still answers, so a missing model only degrades
    if model is not None and not model.is_ready():
        health["status"] = "degraded"
    return health


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    RECENT_ANALYSES.set(len(state.recent_analyses))
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
