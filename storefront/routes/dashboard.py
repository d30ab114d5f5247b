from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Role
from storefront.schemas.dashboard import DashboardStats
from storefront.services.auth import require_roles
from storefront.services.dashboard import get_dashboard_stats

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats, dependencies=[Depends(require_roles(Role.ADMIN))])
def dashboard_stats(db: Session = Depends(get_db)):
    return get_dashboard_stats(db)
