from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import Optional
import uuid

from leadhive.database import get_session
from leadhive.auth.router import get_current_user
from leadhive.users.models import User
from leadhive.dashboard.schemas import DashboardStats
from leadhive.dashboard import service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("/stats", response_model=DashboardStats)
def read_stats(
    pipeline_id: Optional[uuid.UUID] = Query(None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    return service.get_dashboard_stats(session, current_user.id, pipeline_id)
