# studio/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
from .db import Base, engine
from . import models  # noqa: F401  (registers tables on Base.metadata)
from .errors import install_error_handlers
from .reference import ReferenceStore
from .settings import get_settings
from .routes import assessments, catalog, ops, scoring

settings = get_settings()


def _ensure_db_ready() -> None:
    Base.metadata.create_all(bind=engine)


# Run schema init at import time so pytest cannot bypass it
_ensure_db_ready()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _ensure_db_ready()
    # parse reference tables once, before the first request
    app.state.reference_store.get()
    yield


app = FastAPI(title="Schema Studio API", version=settings.APP_VERSION, lifespan=lifespan)
app.state.reference_store = ReferenceStore(settings.DATA_DIR or None)

install_error_handlers(app)

app.include_router(catalog.router)
app.include_router(scoring.router)
app.include_router(assessments.router)
app.include_router(ops.router)


@app.get("/")
def health():
    return {"status": "ok", "service": "schema-studio"}
