"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bookburst.api.auth_routes import router as auth_router
from bookburst.api.book_routes import router as books_router
from bookburst.api.community_routes import follow_router, reviews_router, users_router
from bookburst.api.personalization_routes import router as personalization_router
from bookburst.api.preference_routes import router as preference_router
from bookburst.api.recommendation_routes import router as recommendation_router
from bookburst.api.shelf_routes import router as shelf_router
from bookburst.core.config import settings
from bookburst.infrastructure.database.connection import dispose_db, init_db

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting BookBurst application")
    await init_db()
    logger.info("Database initialized")
    yield
    await dispose_db()
    logger.info("Shutting down BookBurst application")


app = FastAPI(
    title="BookBurst",
    description="Track your reading, follow other readers, get books picked for you",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(books_router)
app.include_router(shelf_router)
app.include_router(users_router)
app.include_router(follow_router)
app.include_router(reviews_router)
app.include_router(preference_router)
app.include_router(personalization_router)
app.include_router(recommendation_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
