from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from database import get_db
from schemas import GraduateProfileResponse, GraduateProfileUpdate
from crud import get_graduate, graduate_profile_dict, update_graduate_profile
from auth import require_role
from models import User, UserType

router = APIRouter(prefix="/api/profiles", tags=["profiles"])

ACCEPTED_UNIVERSITY = "African Leadership University"
ACCEPTED_MAJORS = (
    "BSE (Software Engineering)",
    "BEL (Entrepreneurial Leadership)",
    "IBT (International Business Trade)",
)


@router.get("/graduate/{user_id}", response_model=GraduateProfileResponse)
def get_graduate_profile(user_id: int, db: Session = Depends(get_db)):
    graduate = get_graduate(db, user_id)
    if graduate is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Graduate not found")
    return GraduateProfileResponse.model_validate(graduate_profile_dict(graduate))


@router.put("/graduate", response_model=GraduateProfileResponse)
def update_graduate_profile_endpoint(
    profile_data: GraduateProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserType.GRADUATE))
):
    changes = profile_data.model_dump(exclude_unset=True)

    university = changes.get("university")
    if university:
        if university.strip().lower() != ACCEPTED_UNIVERSITY.lower():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only {ACCEPTED_UNIVERSITY} is accepted",
            )
        changes["university"] = ACCEPTED_UNIVERSITY

    major = changes.get("major")
    if major and major not in ACCEPTED_MAJORS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only {', '.join(ACCEPTED_MAJORS)} majors are accepted",
        )

    user = update_graduate_profile(db, current_user, **changes)
    return GraduateProfileResponse.model_validate(graduate_profile_dict(user))
