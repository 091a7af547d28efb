"""Main API router that includes all v1 routes."""
from fastapi import APIRouter
from catalog_service.api.v1.routes import auth, books, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(books.router, prefix="/books", tags=["books"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
