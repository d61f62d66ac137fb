"""
API v1 routes.
"""

from fastapi import APIRouter

from sessionvault.api.v1 import auth, token

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Auth"])
router.include_router(token.router, prefix="/auth/token", tags=["Auth"])
