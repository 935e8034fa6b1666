"""
Lab Floor Plan Engine – FastAPI Backend

Main entry point. Sets up logging and CORS, creates the editing session,
includes all routes.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from config import CORS_ORIGINS, EXPORT_DIR, LOG_LEVEL
from services.lab_session import LabSession

# Import route modules
from routes.lab import router as lab_router
from routes.multiverse import router as multiverse_router
from routes.editor import router as editor_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the editing session owned by this app."""
    app.state.lab_session = LabSession()
    logger.info("Lab session ready")
    yield


app = FastAPI(
    title="Lab Floor Plan Engine",
    description="Lay out lab zones, score collaboration distance, and branch layout alternatives",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Static file serving for exports
app.mount("/exports", StaticFiles(directory=str(EXPORT_DIR)), name="exports")

# Include routers
app.include_router(lab_router)
app.include_router(multiverse_router)
app.include_router(editor_router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn
    from config import HOST, PORT
    uvicorn.run("main:app", host=HOST, port=PORT, reload=True)
