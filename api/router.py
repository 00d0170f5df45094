"""Main API router that includes versioned routers."""

from fastapi import APIRouter

from api.v1 import auth, clients, files, health, invoices, linking, projects, recycle_bin, users

api_router = APIRouter()

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(health.router, tags=["health"])
v1_router.include_router(auth.router, tags=["auth"])
v1_router.include_router(users.router, tags=["users"])
v1_router.include_router(clients.router, tags=["clients"])
v1_router.include_router(linking.router, tags=["linking"])
v1_router.include_router(projects.router, tags=["projects"])
v1_router.include_router(invoices.router, tags=["invoices"])
v1_router.include_router(files.router, tags=["files"])
v1_router.include_router(recycle_bin.router, tags=["recycle-bin"])

api_router.include_router(v1_router)
