from fastapi import APIRouter
from . import categories, hosts, movies, users

api_router = APIRouter()

api_router.include_router(users.router)
api_router.include_router(categories.router)
api_router.include_router(hosts.router)
api_router.include_router(movies.router)

__all__ = ["api_router"]
