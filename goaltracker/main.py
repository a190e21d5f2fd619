# goaltracker/main.py
import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from goaltracker.api.v1.api import api_router
from goaltracker.core.config import settings
from goaltracker.core.database import init_db
from goaltracker.core.errors import NotAuthenticatedError
from goaltracker.services.session import build_session

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    # Tests install their own session before startup
    if getattr(app.state, "session", None) is None:
        app.state.session = await build_session()
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    try:
        yield
    finally:
        await app.state.session.close()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Authentication", "description": "Email/password sign-up, sign-in and sign-out"},
        {"name": "Google Authentication", "description": "Google OAuth sign-in"},
        {"name": "goals", "description": "Goal snapshots, mutations and calendar views"},
        {"name": "User Management", "description": "Profile documents"},
    ],
)

# Session middleware holds the OAuth state between login and callback
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)

origins = [
    settings.FRONTEND_URL,
    "http://localhost:3000",  # Local development
    "http://localhost:3001",  # Backup local port
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request, exc: NotAuthenticatedError):
    return JSONResponse(status_code=401, content={"detail": exc.message})


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for better error responses"""
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )

    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "docs": "/docs",
        "health": "/health",
        "goals": "/api/v1/goals",
        "goals_stream": "/api/v1/goals/ws",
    }


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("goaltracker.main:app", host="0.0.0.0", port=port, reload=False)
