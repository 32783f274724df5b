from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from database import get_db
from schemas import GraduateDashboard, ProjectResponse, ProjectAnalytics, ChatMessageResponse
from crud import (
    get_projects_by_graduate, serialize_projects, get_project, project_analytics,
    get_received_messages, message_to_dict
)
from auth import require_role
from models import User, UserType
from typing import List

router = APIRouter(prefix="/api/graduate", tags=["graduate"])

graduate_only = require_role(UserType.GRADUATE)


@router.get("/dashboard", response_model=GraduateDashboard)
def graduate_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(graduate_only)
):
    projects = get_projects_by_graduate(db, current_user.id)
    return {
        "total_projects": len(projects),
        "total_views": sum(project.views or 0 for project in projects),
        "total_likes": sum(project.likes or 0 for project in projects),
        "recent_projects": serialize_projects(db, projects[:5]),
    }


@router.get("/projects", response_model=List[ProjectResponse])
def graduate_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(graduate_only)
):
    return serialize_projects(db, get_projects_by_graduate(db, current_user.id))


@router.get("/analytics/{project_id}", response_model=ProjectAnalytics)
def graduate_project_analytics(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(graduate_only)
):
    project = get_project(db, project_id)
    if not project or project.graduate_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project_analytics(db, project)


@router.get("/messages", response_model=List[ChatMessageResponse])
def graduate_messages(
    db: Session = Depends(get_db),
    current_user: User = Depends(graduate_only)
):
    return [message_to_dict(message) for message in get_received_messages(db, current_user.id, limit=50)]
