"""
Easy Deck Backend - Application Entry Point
Mounts the deck, Google Slides and chat routers under a single FastAPI application
"""

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db, init_database
from services.chat.app import router as chat_router
from services.decks.app import router as decks_router
from services.google_slides.app import router as google_slides_router
from shared.errors import register_exception_handlers
from shared.response_models import HealthResponse
from shared.utils import config, setup_logging

logger = setup_logging("easydeck-backend")

API_PREFIX = "/api/v1"
VERSION = "1.0.0"

app = FastAPI(
    title="Easy Deck Backend API",
    description="""
    Decks and slides owned by signed-in users, kept in step with Google Slides,
    plus a chat assistant that can apply Slides changes.
    """,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Health",
            "description": "Service health and status endpoints",
        },
        {
            "name": "Decks",
            "description": "Deck and slide CRUD - mounted at /api/v1",
        },
        {
            "name": "Google Slides",
            "description": "Google credentials, Slides calls and deck linking - mounted at /api/v1/google",
        },
        {
            "name": "Chat",
            "description": "Deck chat and message log - mounted at /api/v1/chat",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(decks_router, prefix=API_PREFIX, tags=["Decks"])
app.include_router(google_slides_router, prefix=API_PREFIX, tags=["Google Slides"])
app.include_router(chat_router, prefix=API_PREFIX, tags=["Chat"])


@app.on_event("startup")
async def startup() -> None:
    init_database()
    logger.info("Easy Deck backend started")


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with service information and API navigation"""
    return {
        "service": "Easy Deck Backend API",
        "version": VERSION,
        "services": {
            "decks": {"base_url": f"{API_PREFIX}/decks"},
            "google_slides": {"base_url": f"{API_PREFIX}/google"},
            "chat": {"base_url": f"{API_PREFIX}/chat"},
        },
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json",
        },
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(db: Session = Depends(get_db)) -> HealthResponse:
    """Health check endpoint; reports degraded when the database is unreachable"""
    try:
        db.execute(text("SELECT 1"))
        database_status = "operational"
    except SQLAlchemyError as e:
        logger.warning(f"Health check database probe failed: {e}")
        database_status = "unavailable"

    healthy = database_status == "operational"
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        message="Easy Deck backend is operational" if healthy else "Database is unavailable",
        version=VERSION,
        dependencies={
            "database": database_status,
            "google_slides_api": config.get("google_slides_api_base"),
        },
    )


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Easy Deck Backend on http://0.0.0.0:8000")
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=config.get("debug", False), log_level="info")
