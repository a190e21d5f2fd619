from fastapi import APIRouter

from goaltracker.api.v1.routes import auth, google_auth, goals, users

api_router = APIRouter()

# Each router declares its own tag, matching the openapi_tags in main.py
api_router.include_router(auth.router, prefix="/auth")
api_router.include_router(google_auth.router, prefix="/auth/google")
api_router.include_router(goals.router)
api_router.include_router(users.router, prefix="/users")
