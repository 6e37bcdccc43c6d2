# studio/routes/ops.py
from fastapi import APIRouter, Depends, HTTPException, Header, Request
from sqlalchemy.orm import Session
from sqlalchemy import text
from ..db import get_db
from ..logging_config import log_event
from ..reference import ReferenceData, get_reference
from ..settings import get_settings

router = APIRouter(prefix="/ops", tags=["operations"])
settings = get_settings()

# --- 1. DEPLOYMENT MONITORING (Health) ---
@router.get("/health")
def health_check(db: Session = Depends(get_db), ref: ReferenceData = Depends(get_reference)):
    """
    Deep Health Check: verifies the DB connection and that reference tables loaded.
    """
    status = {"api": "online", "version": settings.APP_VERSION, "checks": {}}

    try:
        db.execute(text("SELECT 1"))
        status["checks"]["database"] = "ok"
    except Exception as e:
        status["checks"]["database"] = f"failed: {str(e)}"
        raise HTTPException(503, detail=status)

    status["checks"]["mode_library"] = "ok" if ref.modes is not None else "missing"
    status["reference"] = ref.summary()
    return status

# --- 2. REFERENCE RELOAD (development only) ---
@router.post("/reference/reload")
def reload_reference(request: Request, x_admin_key: str = Header(None)):
    """
    Drops the cached reference tables and parses them again.
    Disabled in production, where the tables live for the whole process.
    """
    if settings.is_production:
        raise HTTPException(403, "Reload disabled in production")
    if x_admin_key != settings.ADMIN_KEY:
        raise HTTPException(403, "Unauthorized")

    store = request.app.state.reference_store
    store.clear()
    ref = store.get()
    log_event("REFERENCE_RELOADED", "Reference data reloaded", ref.summary())
    return {"status": "reloaded", "reference": ref.summary()}
