from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_, or_, func, text
from models import (
    User,
    GraduateProfile,
    Project,
    Interaction,
    Message,
    RefreshToken,
    VerificationToken,
    UserType,
    UserStatus,
    ProjectStatus,
    InteractionType,
)
from media import (
    MediaKind,
    normalize_media_list,
    normalize_media_fields,
    encode_media_list,
    decode_json_list,
    to_drive_direct_link,
)
from conversations import group_conversations, interaction_key, message_key_for
from passlib.context import CryptContext
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional
import hashlib
import json
import logging
import math
import os
import secrets

logger = logging.getLogger(__name__)

REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MEDIA_INPUT_FIELDS = {
    MediaKind.IMAGES: "image_urls",
    MediaKind.VIDEOS: "video_urls",
    MediaKind.DOCUMENTS: "document_urls",
}

PROJECT_COLUMNS = (
    "id", "title", "description", "category", "impact_area", "images", "videos", "documents",
    "attachments", "graduate_id", "status", "funding_goal", "current_funding", "views", "likes",
    "featured", "created_at", "updated_at",
)

# Everything else in a graduate profile update lives on the users row
GRADUATE_PROFILE_COLUMNS = ("major", "achievements", "portfolio_url", "linkedin_url", "github_url")


# ------- Passwords / users -------
def _prehash_password(password: str) -> str:
    """
    Pre-hash the raw password using SHA-256 before passing it to bcrypt.
    This prevents bcrypt from failing on extremely long passwords.
    """
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def hash_password(password: str) -> str:
    return pwd_context.hash(_prehash_password(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_prehash_password(plain_password), hashed_password)


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()


def get_user_by_id(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()


def create_user(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    user_type: UserType,
    country: Optional[str] = None,
    city: Optional[str] = None,
):
    db_user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        user_type=user_type,
        country=country,
        city=city,
        skills=[],
        status=UserStatus.ACTIVE,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_user_profile(db: Session, user: User, **fields):
    for key, value in fields.items():
        # null leaves the column unchanged
        if value is None:
            continue
        if key == "profile_image":
            value = to_drive_direct_link(value)
        if hasattr(user, key):
            setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


def get_graduate(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id, User.user_type == UserType.GRADUATE).first()


def graduate_profile_of(db: Session, user: User) -> GraduateProfile:
    """Return the user's graduate profile row, creating an empty one on first use."""
    if user.graduate_profile is None:
        user.graduate_profile = GraduateProfile(user_id=user.id, achievements=[])
        db.flush()
    return user.graduate_profile


def update_graduate_profile(db: Session, user: User, **fields):
    profile = graduate_profile_of(db, user)
    for key, value in fields.items():
        if value is None:
            continue
        if key in GRADUATE_PROFILE_COLUMNS:
            setattr(profile, key, value)
        elif hasattr(user, key):
            setattr(user, key, value)
    db.commit()
    db.refresh(user)
    logger.info("Graduate profile updated for user %s", user.id)
    return user


def set_degree_document(db: Session, user: User, url: str):
    profile = graduate_profile_of(db, user)
    profile.degree_document = url
    db.commit()
    db.refresh(user)
    return user


def graduate_profile_dict(user: User) -> dict:
    profile = user.graduate_profile
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "bio": user.bio,
        "profile_image": user.profile_image,
        "university": user.university,
        "graduation_year": user.graduation_year,
        "skills": user.skills or [],
        "country": user.country,
        "city": user.city,
        "major": profile.major if profile else None,
        "achievements": (profile.achievements or []) if profile else [],
        "portfolio_url": profile.portfolio_url if profile else None,
        "linkedin_url": profile.linkedin_url if profile else None,
        "github_url": profile.github_url if profile else None,
        "degree_document": profile.degree_document if profile else None,
    }


def set_user_password(db: Session, user: User, password: str):
    user.password_hash = hash_password(password)
    db.query(RefreshToken).filter(RefreshToken.user_id == user.id).delete()
    db.commit()
    return user


def record_login(db: Session, user: User):
    user.last_login = datetime.utcnow()
    db.commit()


def delete_user(db: Session, user: User):
    db.delete(user)
    db.commit()


def user_summary(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "user_type": user.user_type,
        "profile_image": user.profile_image,
        "company_name": user.company_name,
    }


# ------- Tokens -------
def create_refresh_token(db: Session, user_id: int, expires_days: int = REFRESH_TOKEN_EXPIRE_DAYS):
    db_token = RefreshToken(
        user_id=user_id,
        token=secrets.token_urlsafe(32),
        expires_at=datetime.utcnow() + timedelta(days=expires_days),
    )
    db.add(db_token)
    db.commit()
    db.refresh(db_token)
    return db_token


def get_refresh_token(db: Session, token: str):
    return db.query(RefreshToken).filter(
        and_(
            RefreshToken.token == token,
            RefreshToken.expires_at > datetime.utcnow()
        )
    ).first()


def revoke_refresh_token(db: Session, token: str):
    db_token = get_refresh_token(db, token)
    if db_token:
        db.delete(db_token)
        db.commit()
    return db_token


def create_verification_token(db: Session, user_id: int, purpose: str, expires_hours: int = 24):
    db_token = VerificationToken(
        user_id=user_id,
        purpose=purpose,
        token=secrets.token_urlsafe(32),
        expires_at=datetime.utcnow() + timedelta(hours=expires_hours),
    )
    db.add(db_token)
    db.commit()
    db.refresh(db_token)
    return db_token


def consume_verification_token(db: Session, token: str, purpose: str):
    """Return the owning user and delete the token, or None if unknown/expired."""
    db_token = db.query(VerificationToken).filter(
        and_(
            VerificationToken.token == token,
            VerificationToken.purpose == purpose,
            VerificationToken.expires_at > datetime.utcnow()
        )
    ).first()
    if not db_token:
        return None
    user = get_user_by_id(db, db_token.user_id)
    db.delete(db_token)
    db.commit()
    return user


# ------- Projects -------
def project_row(project: Project) -> Dict[str, Any]:
    return {column: getattr(project, column) for column in PROJECT_COLUMNS}


def serialize_project(row: Mapping[str, Any], graduate: Optional[User] = None) -> dict:
    """
    Shape a stored project for responses.

    Media columns are normalized again on every read so rows written before
    validation existed never leak bad links.
    """
    data = dict(row)
    for kind in MediaKind:
        data[kind.value] = normalize_media_list(data.get(kind.value), kind)
    data["attachments"] = [
        item for item in decode_json_list(data.get("attachments"))
        if isinstance(item, dict) and item.get("url")
    ]
    data["status"] = ProjectStatus(data.get("status") or ProjectStatus.UNDER_REVIEW)
    data["views"] = data.get("views") or 0
    data["likes"] = data.get("likes") or 0
    data["featured"] = bool(data.get("featured"))
    if graduate is not None:
        data["graduate"] = user_summary(graduate)
    return data


def serialize_projects(db: Session, projects: Iterable[Project]) -> List[dict]:
    rows = [project_row(project) for project in projects]
    graduate_ids = {row["graduate_id"] for row in rows if row["graduate_id"] is not None}
    graduates = {}
    if graduate_ids:
        graduates = {user.id: user for user in db.query(User).filter(User.id.in_(graduate_ids)).all()}
    return [serialize_project(row, graduates.get(row["graduate_id"])) for row in rows]


def build_project_filters(
    category: Optional[str] = None,
    graduate_id: Optional[int] = None,
    search: Optional[str] = None,
):
    """Build the WHERE clause for the public project listing. Values are always bound."""
    conditions = []
    params: Dict[str, Any] = {}

    status_placeholders = []
    for index, value in enumerate(ProjectStatus.PUBLISHED.stored_values()):
        params[f"status_{index}"] = value
        status_placeholders.append(f":status_{index}")
    conditions.append(f"status IN ({', '.join(status_placeholders)})")

    if category:
        conditions.append("category = :category")
        params["category"] = category
    if graduate_id is not None:
        conditions.append("graduate_id = :graduate_id")
        params["graduate_id"] = graduate_id
    if search:
        conditions.append("(title LIKE :pattern OR description LIKE :pattern)")
        params["pattern"] = f"%{search}%"

    return " AND ".join(conditions), params


def list_published_projects(
    db: Session,
    category: Optional[str] = None,
    graduate_id: Optional[int] = None,
    search: Optional[str] = None,
) -> List[dict]:
    where, params = build_project_filters(category, graduate_id, search)
    projects = (
        db.query(Project)
        .filter(text(where))
        .params(**params)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )
    return serialize_projects(db, projects)


def get_project(db: Session, project_id: int):
    return db.query(Project).filter(Project.id == project_id).first()


def increment_views(db: Session, project_id: int) -> bool:
    # Single UPDATE so concurrent readers never lose a view
    result = db.execute(
        text("UPDATE projects SET views = views + 1 WHERE id = :project_id"),
        {"project_id": project_id},
    )
    db.commit()
    return result.rowcount > 0


def view_project(db: Session, project_id: int) -> Optional[dict]:
    """Count a view, then return the project as stored after the increment."""
    if not increment_views(db, project_id):
        return None
    project = get_project(db, project_id)
    if project is None:
        return None
    db.refresh(project)
    return serialize_projects(db, [project])[0]


def _media_columns(data: Dict[str, Any], strict: bool, only_present: bool) -> Dict[str, str]:
    raw = {}
    for kind, field_name in MEDIA_INPUT_FIELDS.items():
        value = data.pop(field_name, None)
        if only_present and value is None:
            continue
        raw[kind] = value
    normalized = normalize_media_fields(raw, strict=strict)
    return {kind.value: encode_media_list(urls) for kind, urls in normalized.items()}


def create_project(db: Session, graduate_id: int, strict: bool = False, **data):
    media_columns = _media_columns(data, strict=strict, only_present=False)
    status_value = data.pop("status", None) or ProjectStatus.UNDER_REVIEW
    project = Project(
        graduate_id=graduate_id,
        status=ProjectStatus(status_value),
        attachments="[]",
        views=0,
        likes=0,
        current_funding=0,
        **media_columns,
        **data,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Project %s created by graduate %s", project.id, graduate_id)
    return project


def update_project(db: Session, project: Project, strict: bool = False, **data):
    media_columns = _media_columns(data, strict=strict, only_present=True)
    for key, value in {**data, **media_columns}.items():
        if value is not None and hasattr(project, key):
            setattr(project, key, value)
    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, project_id: int, graduate_id: int):
    project = db.query(Project).filter(
        Project.id == project_id,
        Project.graduate_id == graduate_id
    ).first()
    if not project:
        return None
    db.delete(project)
    db.commit()
    return project


def add_project_attachments(db: Session, project: Project, attachments: List[dict]):
    current = decode_json_list(project.attachments)
    project.attachments = json.dumps(current + attachments)
    db.commit()
    db.refresh(project)
    return project


def get_featured_projects(db: Session, limit: int = 10):
    projects = (
        db.query(Project)
        .filter(
            Project.status.in_(ProjectStatus.PUBLISHED.stored_values()),
            Project.featured.is_(True)
        )
        .order_by(Project.created_at.desc(), Project.id.desc())
        .limit(limit)
        .all()
    )
    return [serialize_project(project_row(p), p.graduate) for p in projects]


def get_projects_by_graduate(db: Session, graduate_id: int, limit: Optional[int] = None):
    query = (
        db.query(Project)
        .filter(Project.graduate_id == graduate_id)
        .order_by(Project.created_at.desc(), Project.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def like_project(db: Session, project_id: int, user_id: int) -> Optional[int]:
    """Record a like once per user; returns the stored like count."""
    project = get_project(db, project_id)
    if not project:
        return None
    existing = find_interaction(db, user_id, project_id, InteractionType.LIKE)
    if not existing:
        db.add(Interaction(investor_id=user_id, project_id=project_id, type=InteractionType.LIKE))
        db.execute(
            text("UPDATE projects SET likes = likes + 1 WHERE id = :project_id"),
            {"project_id": project_id},
        )
        db.commit()
    return db.execute(
        text("SELECT likes FROM projects WHERE id = :project_id"), {"project_id": project_id}
    ).scalar()


def set_project_status(db: Session, project_id: int, new_status: ProjectStatus):
    project = get_project(db, project_id)
    if not project:
        return None
    project.status = new_status
    db.commit()
    db.refresh(project)
    logger.info("Project %s moved to %s", project_id, new_status.value)
    return project


def project_analytics(db: Session, project: Project) -> dict:
    counts = dict(
        db.query(Interaction.type, func.count(Interaction.id))
        .filter(Interaction.project_id == project.id)
        .group_by(Interaction.type)
        .all()
    )
    return {
        "project_id": project.id,
        "title": project.title,
        "views": project.views or 0,
        "likes": project.likes or 0,
        "bookmarks": counts.get(InteractionType.BOOKMARK, 0),
        "interests": counts.get(InteractionType.INTEREST, 0),
        "status": project.status,
        "created_at": project.created_at,
    }


# ------- Investor interactions -------
def find_interaction(db: Session, investor_id: int, project_id: int, interaction_type: InteractionType):
    return db.query(Interaction).filter(
        Interaction.investor_id == investor_id,
        Interaction.project_id == project_id,
        Interaction.type == interaction_type
    ).first()


def create_interaction(
    db: Session,
    investor_id: int,
    project_id: int,
    interaction_type: InteractionType,
    message: Optional[str] = None,
):
    interaction = Interaction(
        investor_id=investor_id,
        project_id=project_id,
        type=interaction_type,
        message=message,
    )
    db.add(interaction)
    db.commit()
    db.refresh(interaction)
    return interaction


def remove_bookmark(db: Session, investor_id: int, project_id: int) -> int:
    deleted = db.query(Interaction).filter(
        Interaction.investor_id == investor_id,
        Interaction.project_id == project_id,
        Interaction.type == InteractionType.BOOKMARK
    ).delete()
    db.commit()
    return deleted


def count_interactions(db: Session, investor_id: int, interaction_type: InteractionType) -> int:
    return db.query(func.count(Interaction.id)).filter(
        Interaction.investor_id == investor_id,
        Interaction.type == interaction_type
    ).scalar() or 0


def get_interactions(db: Session, investor_id: int, types: List[InteractionType], limit: Optional[int] = None):
    query = (
        db.query(Interaction)
        .options(joinedload(Interaction.project).joinedload(Project.graduate))
        .filter(Interaction.investor_id == investor_id, Interaction.type.in_(types))
        .order_by(Interaction.created_at.desc(), Interaction.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def interaction_to_dict(interaction: Interaction) -> dict:
    project = interaction.project
    return {
        "id": interaction.id,
        "investor_id": interaction.investor_id,
        "project_id": interaction.project_id,
        "type": interaction.type,
        "message": interaction.message,
        "status": interaction.status,
        "created_at": interaction.created_at,
        "project": serialize_project(project_row(project), project.graduate) if project else None,
    }


def _interaction_entry(interaction: Interaction) -> dict:
    return {
        "id": interaction.id,
        "type": interaction.type.value,
        "message": interaction.message,
        "created_at": interaction.created_at,
    }


def get_investor_conversations(db: Session, investor_id: int) -> List[dict]:
    interactions = get_interactions(db, investor_id, [InteractionType.CONTACT, InteractionType.INTEREST])

    def header_of(interaction: Interaction) -> dict:
        project = interaction.project
        return {
            "project": serialize_project(project_row(project)),
            "graduate": user_summary(project.graduate),
        }

    conversations = group_conversations(interactions, interaction_key, header_of, _interaction_entry)
    return [conversation.to_dict() for conversation in conversations]


# ------- Messages -------
def create_message(db: Session, sender_id: int, recipient_id: int, content: str):
    message = Message(sender_id=sender_id, recipient_id=recipient_id, content=content, is_read=False)
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def get_message(db: Session, message_id: int):
    return db.query(Message).filter(Message.id == message_id).first()


def _between(user_id: int, other_user_id: int):
    return or_(
        and_(Message.sender_id == user_id, Message.recipient_id == other_user_id),
        and_(Message.sender_id == other_user_id, Message.recipient_id == user_id)
    )


def get_thread(db: Session, user_id: int, other_user_id: int):
    return (
        db.query(Message)
        .options(joinedload(Message.sender))
        .filter(_between(user_id, other_user_id))
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )


def has_thread(db: Session, user_id: int, other_user_id: int) -> bool:
    return db.query(Message.id).filter(_between(user_id, other_user_id)).first() is not None


def mark_thread_read(db: Session, user_id: int, other_user_id: int) -> int:
    updated = db.query(Message).filter(
        Message.sender_id == other_user_id,
        Message.recipient_id == user_id,
        Message.is_read.is_(False)
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return updated


def mark_message_read(db: Session, message_id: int, recipient_id: int):
    message = db.query(Message).filter(
        Message.id == message_id,
        Message.recipient_id == recipient_id
    ).first()
    if not message:
        return None
    message.is_read = True
    db.commit()
    db.refresh(message)
    return message


def delete_message(db: Session, message_id: int, sender_id: int):
    message = db.query(Message).filter(
        Message.id == message_id,
        Message.sender_id == sender_id
    ).first()
    if not message:
        return None
    db.delete(message)
    db.commit()
    return message


def get_received_messages(db: Session, user_id: int, limit: int = 50):
    return (
        db.query(Message)
        .options(joinedload(Message.sender))
        .filter(Message.recipient_id == user_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
        .all()
    )


def message_to_dict(message: Message) -> dict:
    return {
        "id": message.id,
        "sender_id": message.sender_id,
        "recipient_id": message.recipient_id,
        "content": message.content,
        "is_read": bool(message.is_read),
        "created_at": message.created_at,
        "sender": user_summary(message.sender),
    }


def _message_entry(message: Message) -> dict:
    return {
        "id": message.id,
        "type": InteractionType.MESSAGE.value,
        "message": message.content,
        "created_at": message.created_at,
        "sender_id": message.sender_id,
        "is_read": bool(message.is_read),
    }


def get_user_conversations(db: Session, user_id: int) -> List[dict]:
    messages = (
        db.query(Message)
        .filter(or_(Message.sender_id == user_id, Message.recipient_id == user_id))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )
    key_of = message_key_for(user_id)
    other_ids = {key_of(message).counterpart_id for message in messages}
    users = {}
    if other_ids:
        users = {user.id: user for user in db.query(User).filter(User.id.in_(other_ids)).all()}

    def header_of(message: Message) -> dict:
        other_id = key_of(message).counterpart_id
        return {"other_user_id": other_id, "other_user": user_summary(users.get(other_id))}

    conversations = group_conversations(messages, key_of, header_of, _message_entry)
    result = []
    for conversation in conversations:
        payload = conversation.to_dict()
        latest = conversation.messages[0]
        payload["last_message"] = latest
        payload["last_message_at"] = latest["created_at"]
        payload["unread_count"] = sum(
            1 for entry in conversation.messages
            if entry["sender_id"] != user_id and not entry["is_read"]
        )
        result.append(payload)
    return result


# ------- Admin -------
def count_users(db: Session, **filters) -> int:
    query = db.query(func.count(User.id))
    for key, value in filters.items():
        query = query.filter(getattr(User, key) == value)
    return query.scalar() or 0


def count_projects(db: Session, status: Optional[ProjectStatus] = None, since: Optional[datetime] = None) -> int:
    query = db.query(func.count(Project.id))
    if status is not None:
        query = query.filter(Project.status.in_(status.stored_values()))
    if since is not None:
        query = query.filter(Project.created_at >= since)
    return query.scalar() or 0


def _page(total: int, page: int, limit: int) -> dict:
    return {
        "total_count": total,
        "current_page": page,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def list_users_page(db: Session, page: int = 1, limit: int = 50, role: Optional[str] = None, status: Optional[str] = None):
    query = db.query(User)
    if role:
        query = query.filter(User.user_type == role)
    if status:
        query = query.filter(User.status == status)
    total = query.count()
    users = query.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return {"users": users, **_page(total, page, limit)}


def list_pending_projects_page(db: Session, page: int = 1, limit: int = 20):
    query = db.query(Project).filter(Project.status.in_(ProjectStatus.UNDER_REVIEW.stored_values()))
    total = query.count()
    # Oldest first so submissions are reviewed in arrival order
    projects = query.order_by(Project.created_at.asc(), Project.id.asc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "projects": [serialize_project(project_row(p), p.graduate) for p in projects],
        **_page(total, page, limit),
    }


def set_user_status(db: Session, user_id: int, new_status: UserStatus):
    user = get_user_by_id(db, user_id)
    if not user:
        return None
    user.status = new_status
    if new_status != UserStatus.ACTIVE:
        db.query(RefreshToken).filter(RefreshToken.user_id == user_id).delete()
    db.commit()
    db.refresh(user)
    return user


def users_by_role(db: Session) -> Dict[str, int]:
    counts = {user_type.value: 0 for user_type in UserType}
    for user_type, count in db.query(User.user_type, func.count(User.id)).group_by(User.user_type).all():
        counts[UserType(user_type).value] += count
    return counts


def projects_by_status(db: Session) -> Dict[str, int]:
    counts = {project_status.value: 0 for project_status in ProjectStatus}
    for project_status, count in db.query(Project.status, func.count(Project.id)).group_by(Project.status).all():
        counts[ProjectStatus(project_status).value] += count
    return counts


def admin_dashboard(db: Session) -> dict:
    recent_users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).limit(5).all()
    recent_projects = db.query(Project).order_by(Project.created_at.desc(), Project.id.desc()).limit(5).all()
    by_role = users_by_role(db)
    return {
        "total_users": count_users(db),
        "total_projects": count_projects(db),
        "pending_projects": count_projects(db, ProjectStatus.UNDER_REVIEW),
        "published_projects": count_projects(db, ProjectStatus.PUBLISHED),
        "users_by_role": {
            "graduates": by_role[UserType.GRADUATE.value],
            "investors": by_role[UserType.INVESTOR.value],
            "admins": by_role[UserType.ADMIN.value],
        },
        "recent_users": [user_summary(user) for user in recent_users],
        "recent_projects": [serialize_project(project_row(p), p.graduate) for p in recent_projects],
    }


def platform_analytics(db: Session, period_days: int) -> dict:
    since = datetime.utcnow() - timedelta(days=period_days)
    return {
        "period": period_days,
        "newUsers": db.query(func.count(User.id)).filter(User.created_at >= since).scalar() or 0,
        "newProjects": count_projects(db, since=since),
        "totalInteractions": db.query(func.count(Interaction.id)).filter(Interaction.created_at >= since).scalar() or 0,
        "projectsByStatus": projects_by_status(db),
        "usersByRole": users_by_role(db),
    }


def overview_report(db: Session) -> dict:
    return {
        "totalUsers": count_users(db),
        "totalProjects": count_projects(db),
        "activeUsers": count_users(db, status=UserStatus.ACTIVE),
        "publishedProjects": count_projects(db, ProjectStatus.PUBLISHED),
        "pendingProjects": count_projects(db, ProjectStatus.UNDER_REVIEW),
    }


def user_activity_report(db: Session, limit: int = 100) -> List[dict]:
    users = db.query(User).order_by(User.updated_at.desc(), User.id.desc()).limit(limit).all()
    return [
        {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": user.user_type.value,
            "createdAt": user.created_at.isoformat() if user.created_at else None,
            "updatedAt": user.updated_at.isoformat() if user.updated_at else None,
            "lastLogin": user.last_login.isoformat() if user.last_login else None,
        }
        for user in users
    ]


def project_performance_report(db: Session, limit: int = 50) -> List[dict]:
    projects = db.query(Project).order_by(Project.views.desc(), Project.id.asc()).limit(limit).all()
    return [
        {
            "id": project.id,
            "title": project.title,
            "status": project.status.value,
            "views": project.views or 0,
            "likes": project.likes or 0,
            "createdAt": project.created_at.isoformat() if project.created_at else None,
        }
        for project in projects
    ]
