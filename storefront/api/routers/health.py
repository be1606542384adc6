# storefront/api/routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter

from storefront.domain.schemas import HealthOut

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut)
def health():
    return HealthOut(status="OK", timestamp=datetime.now(timezone.utc))
