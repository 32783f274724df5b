from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from database import get_db
from schemas import (
    InvestorDashboard, InteractionResponse, InterestRequest, ContactRequest,
    InvestorConversation, MessageResponse
)
from crud import (
    get_project, find_interaction, create_interaction, remove_bookmark, count_interactions,
    get_interactions, interaction_to_dict, get_investor_conversations
)
from auth import get_current_user, require_role
from models import User, UserType, InteractionType
from typing import List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/investor", tags=["investor"])


def ensure_project_exists(db: Session, project_id: int):
    project = get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@router.get("/dashboard", response_model=InvestorDashboard)
def investor_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserType.INVESTOR))
):
    recent = get_interactions(db, current_user.id, [InteractionType.BOOKMARK], limit=5)
    return {
        "total_bookmarks": count_interactions(db, current_user.id, InteractionType.BOOKMARK),
        "total_interests": count_interactions(db, current_user.id, InteractionType.INTEREST),
        "recent_bookmarks": [interaction_to_dict(interaction) for interaction in recent],
    }


@router.post("/bookmark/{project_id}", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def bookmark_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    ensure_project_exists(db, project_id)
    if not find_interaction(db, current_user.id, project_id, InteractionType.BOOKMARK):
        create_interaction(db, current_user.id, project_id, InteractionType.BOOKMARK)
    return MessageResponse(message="Project bookmarked successfully")


@router.delete("/bookmark/{project_id}", response_model=MessageResponse)
def delete_bookmark(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not remove_bookmark(db, current_user.id, project_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bookmark not found")
    return MessageResponse(message="Bookmark removed successfully")


@router.get("/bookmarks", response_model=List[InteractionResponse])
def list_bookmarks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    bookmarks = get_interactions(db, current_user.id, [InteractionType.BOOKMARK])
    return [interaction_to_dict(interaction) for interaction in bookmarks]


@router.post("/express-interest", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def express_interest(
    request: InterestRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    ensure_project_exists(db, request.project_id)
    if find_interaction(db, current_user.id, request.project_id, InteractionType.INTEREST):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Interest already expressed for this project"
        )
    create_interaction(db, current_user.id, request.project_id, InteractionType.INTEREST, request.message)
    logger.info("User %s expressed interest in project %s", current_user.id, request.project_id)
    return MessageResponse(message="Interest expressed successfully")


@router.post("/contact-graduate", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def contact_graduate(
    request: ContactRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    ensure_project_exists(db, request.project_id)
    create_interaction(db, current_user.id, request.project_id, InteractionType.CONTACT, request.message)
    return MessageResponse(message="Graduate contacted successfully")


@router.get("/conversations", response_model=List[InvestorConversation])
def investor_conversations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_investor_conversations(db, current_user.id)
