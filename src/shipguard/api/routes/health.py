"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_distance_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.distance.client import check_health as distance_health_check
    return distance_health_check


@router.get("/health/distance", status_code=status.HTTP_200_OK)
def health_distance() -> dict:
    """Check the distance-matrix service with the configured API key."""
    try:
        from ...data.config_repository import get_credential_store

        distance_health_check = _get_distance_health_check()
        healthy = distance_health_check(api_key=get_credential_store().get_api_key())
        return {"service": "distance_matrix", "healthy": healthy}
    except Exception as e:
        return {"service": "distance_matrix", "healthy": False, "error": str(e)}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and blackout calendar table status."""
    from ...config import settings
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set SHIPGUARD_SUPABASE_URL and SHIPGUARD_SUPABASE_KEY environment variables.",
            "calendar_dir": str(settings.calendar_dir),
        }

    try:
        response = supabase.table(settings.calendar_table).select("calendar", count="exact").limit(1).execute()
        count = response.count or 0
        return {
            "configured": True,
            "connected": True,
            "blackout_dates_count": count,
            "message": f"Database connected. Found {count} blackout dates.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
