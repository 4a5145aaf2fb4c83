# app/routes/__init__.py
from fastapi import APIRouter
from app.routes.auth import auth, profile
from app.routes.trip import trip_routes
from app.routes.preferences import preference_routes
from app.routes.images import image_routes
from app.routes.users import user_routes


api_router = APIRouter()

# Auth routes
api_router.include_router(auth.router)
api_router.include_router(profile.router)

# User administration
api_router.include_router(user_routes.router)

# Trip routes
api_router.include_router(trip_routes.router)

# Preference routes
api_router.include_router(preference_routes.router)

# Image routes
api_router.include_router(image_routes.router)
