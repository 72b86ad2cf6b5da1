from fastapi import APIRouter

from coaching_api.shared.config.settings import settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness of the booking API")
async def health_check() -> dict[str, str]:
    """Report that the process serves requests; the database is not consulted."""
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
    }
