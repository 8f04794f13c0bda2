from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import require_permission
from core.database import get_db
from models.user import User
from schemas.dashboard import DashboardStats
from services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("read:containers")),
):
    """Yard totals, type split, in-park count per line and 30 days of movements."""
    return DashboardService.compute_stats(db)
