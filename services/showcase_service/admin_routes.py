from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from database import get_db
from schemas import (
    AdminDashboard, UsersPage, ProjectsPage, UserResponse, UserStatusUpdate, ProjectEnvelope
)
from crud import (
    admin_dashboard, list_users_page, list_pending_projects_page, set_user_status,
    set_project_status, serialize_projects, platform_analytics, overview_report,
    user_activity_report, project_performance_report
)
from auth import require_role
from models import User, UserType, UserStatus, ProjectStatus
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

admin_only = require_role(UserType.ADMIN)

REPORT_BUILDERS = {
    "overview": overview_report,
    "user-activity": user_activity_report,
    "project-performance": project_performance_report,
}


@router.get("/dashboard", response_model=AdminDashboard)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    return admin_dashboard(db)


@router.get("/users", response_model=UsersPage)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    role: Optional[UserType] = None,
    user_status: Optional[UserStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    return list_users_page(db, page=page, limit=limit, role=role, status=user_status)


@router.put("/users/{user_id}/status", response_model=UserResponse)
def update_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    try:
        new_status = UserStatus(payload.status)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    user = set_user_status(db, user_id, new_status)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    logger.info("Admin %s set user %s to %s", current_user.id, user_id, new_status.value)
    return UserResponse.model_validate(user)


@router.get("/projects/pending", response_model=ProjectsPage)
def pending_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    return list_pending_projects_page(db, page=page, limit=limit)


def _moderate(db: Session, project_id: int, new_status: ProjectStatus) -> dict:
    project = set_project_status(db, project_id, new_status)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return {"project": serialize_projects(db, [project])[0]}


@router.put("/projects/{project_id}/approve", response_model=ProjectEnvelope)
def approve_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    return _moderate(db, project_id, ProjectStatus.PUBLISHED)


@router.put("/projects/{project_id}/reject", response_model=ProjectEnvelope)
def reject_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    return _moderate(db, project_id, ProjectStatus.REJECTED)


@router.get("/analytics")
def get_analytics(
    period: int = Query(30, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    return platform_analytics(db, period)


@router.get("/reports")
def get_report(
    type: str = Query("overview"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    builder = REPORT_BUILDERS.get(type)
    if builder is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid report type")
    return {"type": type, "data": builder(db)}
