"""API v1 router and endpoint organization."""

from fastapi import APIRouter

from wp_autopost.api.v1 import taxonomy

router = APIRouter(tags=["v1"])

router.include_router(taxonomy.router)

__all__ = ["router"]
