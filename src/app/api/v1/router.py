from fastapi import APIRouter

from src.app.api.v1 import access_requests, admin, analytics, auth, contacts, users

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(access_requests.router)
api_router.include_router(contacts.router)
api_router.include_router(analytics.router)
api_router.include_router(admin.router)
