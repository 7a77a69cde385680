"""
UniFind Campus Lost-and-Found Tracker

FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine import Engine

from unifind import db
from unifind.api import register_error_handlers, router as api_router
from unifind.config import settings
from unifind.workflow import WorkflowEngine

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(db_engine: Optional[Engine] = None) -> FastAPI:
    """Build the application around `db_engine` (defaults to the configured database)."""
    db_engine = db_engine or db.engine
    session_factory = db.SessionLocal if db_engine is db.engine else db.create_session_factory(db_engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle management."""
        logger.info("Starting UniFind API")
        if settings.uses_default_secret:
            logger.warning("JWT_SECRET is the development default; set it in the environment")
        db.init_db(db_engine)
        yield
        logger.info("Shutting down UniFind API")

    app = FastAPI(
        title="UniFind Lost & Found",
        description="""
        Campus lost-and-found tracker.

        ## Workflow

        - Students report LOST items and claim FOUND ones
        - Staff register FOUND items and approve or reject claims
        - Approving a claim moves the item to CLAIMED and writes an audit record, atomically
        - Staff may override any item status (e.g. ARCHIVED); every change is audited
        """,
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.db_engine = db_engine
    app.state.workflow = WorkflowEngine(session_factory)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(api_router)

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with system info."""
        return {
            "system": "UniFind Lost & Found",
            "version": "1.0.0",
            "status": "operational",
            "docs": "/docs"
        }

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/health/db", tags=["health"])
    def db_health_check():
        """Round-trip to the database."""
        try:
            with db_engine.connect() as conn:
                ok = conn.execute(text("SELECT 1")).scalar_one()
            return {"db": "connected", "result": {"ok": ok}}
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return JSONResponse(status_code=500, content={"db": "error", "message": str(e)})

    return app


app = create_app()
