"""Main FastAPI application."""
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from nomadai.config import settings
from nomadai.api import ingest, dashboard

# Tables are created by scripts/setup_db.py (Base.metadata.create_all)

app = FastAPI(
    title="NomadAI API",
    description="Event ingestion and UX issue detection (rage clicks, dead clicks)",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-API-Key", "X-Auth-Token"],
)

# Include routers
app.include_router(ingest.router)
app.include_router(dashboard.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "NomadAI API",
        "version": "1.0.0",
        "endpoints": {
            "health": "GET /health",
            "ingest": "POST /ingest",
            "dashboard": "GET /dashboard",
        },
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
