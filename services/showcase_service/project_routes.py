from fastapi import APIRouter, Depends, HTTPException, Query, Request, status, UploadFile, File
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from database import get_db
from schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectListResponse, ProjectEnvelope,
    MessageResponse
)
from crud import (
    list_published_projects, get_featured_projects, view_project, get_project,
    create_project, update_project, delete_project, like_project, add_project_attachments,
    serialize_projects
)
from auth import get_current_user, require_role
from storage import MediaStorage, get_storage
from media import MediaValidationError
from models import User, UserType, ProjectStatus
from datetime import datetime
from typing import List, Optional
import logging
import uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["projects"])

MAX_UPLOAD_FILES = 20
MAX_UPLOAD_BYTES = 500 * 1024 * 1024
DOCUMENT_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}
SUBMITTABLE_STATUSES = {ProjectStatus.DRAFT, ProjectStatus.UNDER_REVIEW}


def content_type_allowed(kind: str, content_type: Optional[str]) -> bool:
    content_type = content_type or ""
    if kind == "images":
        return content_type.startswith("image/")
    if kind == "videos":
        return content_type.startswith("video/")
    return content_type in DOCUMENT_CONTENT_TYPES


async def read_project_payload(request: Request) -> dict:
    """Accept the project body as JSON or as multipart/urlencoded form fields."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data") or content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        payload = {}
        for key in form.keys():
            values = [value for value in form.getlist(key) if isinstance(value, str)]
            if not values:
                continue
            # Repeated fields arrive as a list, a single field may hold a JSON string
            payload[key] = values if len(values) > 1 else values[0]
        return payload
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be an object")
    return payload


def get_owned_project(db: Session, project_id: int, current_user: User):
    project = get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if project.graduate_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this project")
    return project


def media_error_response(exc: MediaValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.to_detail())


def to_project_response(db: Session, project) -> ProjectResponse:
    return ProjectResponse.model_validate(serialize_projects(db, [project])[0])


@router.get("", response_model=ProjectListResponse)
def list_projects(
    category: Optional[str] = None,
    graduate_id: Optional[int] = Query(None, alias="graduateId"),
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    projects = list_published_projects(db, category=category, graduate_id=graduate_id, search=search)
    return {"projects": projects, "total": len(projects)}


@router.get("/featured", response_model=ProjectListResponse)
def featured_projects(db: Session = Depends(get_db)):
    projects = get_featured_projects(db, limit=10)
    return {"projects": projects, "total": len(projects)}


@router.get("/{project_id}", response_model=ProjectEnvelope)
def get_project_detail(project_id: int, db: Session = Depends(get_db)):
    project = view_project(db, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return {"project": project}


@router.post("", response_model=ProjectEnvelope, status_code=status.HTTP_201_CREATED)
async def create_project_endpoint(
    request: Request,
    strict: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserType.GRADUATE))
):
    payload = await read_project_payload(request)
    try:
        project_data = ProjectCreate.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())

    if project_data.status is not None and project_data.status not in SUBMITTABLE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="New projects can only be saved as draft or submitted for review"
        )

    try:
        project = create_project(
            db,
            graduate_id=current_user.id,
            strict=strict,
            **project_data.model_dump(exclude_none=True)
        )
    except MediaValidationError as exc:
        raise media_error_response(exc)
    return {"project": to_project_response(db, project)}


@router.put("/{project_id}", response_model=ProjectEnvelope)
def update_project_endpoint(
    project_id: int,
    project_data: ProjectUpdate,
    strict: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserType.GRADUATE))
):
    project = get_owned_project(db, project_id, current_user)
    changes = project_data.model_dump(exclude_unset=True)

    new_status = changes.get("status")
    if new_status is not None:
        allowed = new_status in SUBMITTABLE_STATUSES or (
            new_status == ProjectStatus.COMPLETED and project.status == ProjectStatus.PUBLISHED
        )
        if not allowed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot change status to {new_status.value}"
            )

    try:
        project = update_project(db, project, strict=strict, **changes)
    except MediaValidationError as exc:
        raise media_error_response(exc)
    return {"project": to_project_response(db, project)}


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project_endpoint(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserType.GRADUATE))
):
    get_owned_project(db, project_id, current_user)
    delete_project(db, project_id, current_user.id)
    return MessageResponse(message="Project deleted successfully")


@router.post("/{project_id}/view")
def record_view(project_id: int, db: Session = Depends(get_db)):
    project = view_project(db, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return {"message": "View recorded", "views": project["views"]}


@router.post("/{project_id}/like")
def like_project_endpoint(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    likes = like_project(db, project_id, current_user.id)
    if likes is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return {"message": "Project liked", "likes": likes}


@router.post("/{project_id}/upload-media", response_model=ProjectEnvelope)
def upload_project_media(
    project_id: int,
    images: Optional[List[UploadFile]] = File(None),
    videos: Optional[List[UploadFile]] = File(None),
    documents: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(UserType.GRADUATE)),
    storage: MediaStorage = Depends(get_storage)
):
    project = get_owned_project(db, project_id, current_user)
    uploads = [
        (kind, upload)
        for kind, files in (("images", images), ("videos", videos), ("documents", documents))
        for upload in files or []
    ]
    if not uploads:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded")
    if len(uploads) > MAX_UPLOAD_FILES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Too many files (max {MAX_UPLOAD_FILES})")

    # Validate everything before storing anything
    contents = []
    for kind, upload in uploads:
        if not content_type_allowed(kind, upload.content_type):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File type {upload.content_type} is not allowed for {kind}"
            )
        data = upload.file.read()
        if not data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File upload is empty")
        if len(data) > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large (max 500MB)")
        contents.append((kind, upload, data))

    attachments = []
    for kind, upload, data in contents:
        safe_name = upload.filename or "upload.bin"
        object_name = f"projects/{project.id}/{kind}/{uuid.uuid4().hex}_{safe_name}"
        url = storage.upload(object_name, data, upload.content_type or "application/octet-stream")
        attachments.append({
            "url": url,
            "kind": kind,
            "filename": safe_name,
            "contentType": upload.content_type,
            "uploadedAt": datetime.utcnow().isoformat(),
        })
    logger.info("Stored %d files for project %s", len(attachments), project.id)

    project = add_project_attachments(db, project, attachments)
    return {"project": to_project_response(db, project)}
