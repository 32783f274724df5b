from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session
from database import get_db
from schemas import ProfileUpdate, UserResponse, MessageResponse, GraduateProfileResponse
from crud import update_user_profile, delete_user, set_degree_document, graduate_profile_dict
from auth import get_current_user, require_role
from storage import MediaStorage, get_storage
from models import User, UserType
import logging
import uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

MAX_AVATAR_BYTES = 5 * 1024 * 1024
MAX_DEGREE_BYTES = 10 * 1024 * 1024


@router.get("/profile", response_model=UserResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = update_user_profile(db, current_user, **profile_data.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.post("/upload-avatar", response_model=UserResponse)
def upload_avatar(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: MediaStorage = Depends(get_storage)
):
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files are allowed")
    file_data = file.file.read()
    if not file_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File upload is empty")
    if len(file_data) > MAX_AVATAR_BYTES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large (max 5MB)")

    safe_name = file.filename or "avatar"
    object_name = f"avatars/{current_user.id}/{uuid.uuid4().hex}_{safe_name}"
    url = storage.upload(object_name, file_data, file.content_type)
    logger.info("Avatar uploaded for user %s", current_user.id)

    # Direct assignment: uploaded avatars are not Drive links
    current_user.profile_image = url
    db.commit()
    db.refresh(current_user)
    return UserResponse.model_validate(current_user)


@router.post("/upload-degree", response_model=GraduateProfileResponse)
def upload_degree(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserType.GRADUATE)),
    storage: MediaStorage = Depends(get_storage)
):
    if file.content_type != "application/pdf":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid degree document. PDF only.")
    file_data = file.file.read()
    if not file_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File upload is empty")
    if len(file_data) > MAX_DEGREE_BYTES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large (max 10MB)")

    safe_name = file.filename or "degree.pdf"
    object_name = f"degrees/{current_user.id}/{uuid.uuid4().hex}_{safe_name}"
    url = storage.upload(object_name, file_data, file.content_type)
    logger.info("Degree document uploaded for user %s", current_user.id)

    user = set_degree_document(db, current_user, url)
    return GraduateProfileResponse.model_validate(graduate_profile_dict(user))


@router.delete("/account", response_model=MessageResponse)
def delete_account(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    delete_user(db, current_user)
    return MessageResponse(message="Account deleted successfully")
