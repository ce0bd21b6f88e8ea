"""
main.py — FastAPI Application Entrypoint

Purpose:
- Initialize logging from settings.
- Register API routers.
- Define the root-level health endpoint.
- Provide `app` object used by the ASGI server (uvicorn).

No calculation logic lives here.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roi_app.core.config import settings
from roi_app.core.logging import configure_logging
from roi_app.api.v1 import roi

# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------

configure_logging(settings.LOG_LEVEL, settings.ROI_ENGINE_LOG_LEVEL)

app = FastAPI(
    title=settings.API_TITLE,
    description="ROI calculation engine for indicators and projects",
    version="0.1.0",
)

# -----------------------------------------------------------------------------
# CORS (dashboard runs on a separate origin)
# -----------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Router Registration
# -----------------------------------------------------------------------------

app.include_router(roi.router, prefix="/api/v1")

# -----------------------------------------------------------------------------
# Health Check
# -----------------------------------------------------------------------------

@app.get("/")
def root():
    return {"status": "ok", "message": "ROI backend running"}
