from fastapi import APIRouter
from .v1 import auth, operations

api_router = APIRouter(prefix="/api", tags=["flow-ops"])

api_router.include_router(auth.router)
api_router.include_router(operations.router)


@api_router.get("/health")
def health():
    return {"status": "ok"}
