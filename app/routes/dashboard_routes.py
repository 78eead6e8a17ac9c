from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.dashboard_schemas import DashboardSummary
from app.services.projection_service import ProjectionService

router = APIRouter()


@router.get("/", response_model=DashboardSummary)
def get_dashboard(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Portfolio counts and totals for the authenticated user"""
    return ProjectionService(db).dashboard_summary(user)
