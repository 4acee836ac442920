# Health and activity-log API for the GCSE AI Marker backend.
import ipaddress, os, time, datetime
from typing import Any, Dict, List, Optional, Union
from datetime import timezone
from fastapi import FastAPI, HTTPException, Query, Request
from pydantic import BaseModel, Field
from contextlib import asynccontextmanager

from aimarker.adapters.activity_store_local import ActivityStoreLocal
from aimarker.domain.activity import USER_AGENT_MAX_LEN
from aimarker.domain.errors import PersistenceFailure, UseCaseError, ValidationError
from aimarker.domain.ports import ActivityLogPort
from aimarker.domain.settings import MarkerSettings, load_settings
from aimarker.usecases.log_activity import ListActivity, LogActivity
from aimarker.utils.logging import configure_root


def utcnow_iso() -> str:
    return datetime.datetime.now(timezone.utc).isoformat()


def client_ip(request: Request) -> Optional[str]:
    # Test clients and some proxies report host names instead of addresses.
    host = request.client.host if request.client else None
    try:
        return str(ipaddress.ip_address(host)) if host else None
    except ValueError:
        return None


def header_user_agent(request: Request) -> Optional[str]:
    # Browser headers are trimmed; a user_agent sent in the body is validated as is.
    ua = request.headers.get("user-agent")
    return ua[:USER_AGENT_MAX_LEN] if ua else None


# ---------- Request models ----------
class ActivityRequest(BaseModel):
    user_id: Union[str, int] = Field(..., description="Owning user reference")
    action: str = Field(..., description="e.g. 'LOGIN', 'SUBMIT_QUESTION'")
    details: Dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    success: Optional[bool] = None


def create_app(
    store: Optional[ActivityLogPort] = None,
    settings: Optional[MarkerSettings] = None,
) -> FastAPI:
    cfg = settings or load_settings()
    activity_store = store or ActivityStoreLocal(cfg.data_dir)
    log_activity = LogActivity(activity_store)
    list_activity = ListActivity(activity_store)
    started_at = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_root()
        yield

    app = FastAPI(title="GCSE AI Marker API", version="0.1.0", lifespan=lifespan)
    app.state.settings = cfg
    app.state.store = activity_store

    # ---------- Health ----------
    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "uptime": round(time.monotonic() - started_at, 3),
            "timestamp": utcnow_iso(),
            "port": int(os.getenv("PORT") or cfg.port),
        }

    @app.get("/api/health")
    def api_health():
        return {
            "status": "ok",
            "openaiClient": cfg.openai_configured,
            "apiKeyConfigured": cfg.api_key_configured,
            "rateLimited": cfg.rate_limited,
            "timestamp": utcnow_iso(),
        }

    # ---------- Activity log ----------
    @app.post("/api/activity", status_code=201)
    def record_activity(req: ActivityRequest, request: Request):
        metadata: Dict[str, Any] = {
            "ip_address": req.ip_address or client_ip(request),
            "user_agent": req.user_agent or header_user_agent(request),
        }
        if req.success is not None:
            metadata["success"] = req.success
        try:
            entry = log_activity(req.user_id, req.action, req.details, metadata)
        except ValidationError as e:
            raise HTTPException(422, {"code": e.code, "message": e.message, "field": e.field})
        except PersistenceFailure as e:
            raise HTTPException(500, {"code": e.code, "message": "Could not record activity"})
        return entry.formatted()

    @app.get("/api/activity", response_model=List[Dict[str, Any]])
    def activity(
        user_id: Optional[str] = None,
        action: Optional[str] = None,
        success: Optional[bool] = None,
        limit: Optional[int] = Query(None, ge=0),
    ):
        try:
            return list_activity(user_id=user_id, action=action, success=success, limit=limit)
        except UseCaseError as e:
            raise HTTPException(422, {"code": e.code, "message": e.message})

    return app


app = create_app()
