from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from datetime import datetime
from models import InteractionType, ProjectStatus, UserStatus, UserType
from media import is_acceptable_image_or_document_link

GOOGLE_EMAIL_DOMAINS = ("@gmail.com", "@googlemail.com")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ------- Users / auth -------
class UserRegister(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    user_type: UserType = UserType.GRADUATE
    country: Optional[str] = None
    city: Optional[str] = None

    @field_validator("email")
    @classmethod
    def google_email_only(cls, value: str) -> str:
        if not value.lower().endswith(GOOGLE_EMAIL_DOMAINS):
            raise ValueError("This email is not accepted. Please use a Google email address.")
        return value


class UserLogin(CamelModel):
    email: EmailStr
    password: str
    user_type: Optional[UserType] = None


class UserSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    user_type: UserType
    profile_image: Optional[str] = None
    company_name: Optional[str] = None


class UserResponse(UserSummary):
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    university: Optional[str] = None
    graduation_year: Optional[int] = None
    company_website: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    status: UserStatus
    is_email_verified: bool = False
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthSuccessResponse(TokenResponse):
    user: UserResponse


class RefreshTokenRequest(CamelModel):
    refresh_token: str


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str
    new_password: str = Field(min_length=6, max_length=100)


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    university: Optional[str] = None
    graduation_year: Optional[int] = Field(default=None, ge=1950, le=datetime.utcnow().year + 10)
    company_name: Optional[str] = None
    company_website: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    profile_image: Optional[str] = None

    @field_validator("profile_image")
    @classmethod
    def drive_link_only(cls, value: Optional[str]) -> Optional[str]:
        if value and not is_acceptable_image_or_document_link(value):
            raise ValueError("Profile image must be a Google Drive link")
        return value


class MessageResponse(CamelModel):
    message: str


# ------- Graduate profiles -------
class GraduateProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    bio: Optional[str] = None
    university: Optional[str] = None
    graduation_year: Optional[int] = Field(default=None, ge=1950, le=datetime.utcnow().year + 10)
    major: Optional[str] = None
    skills: Optional[List[str]] = None
    achievements: Optional[List[str]] = None
    portfolio_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None


class GraduateProfileResponse(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    university: Optional[str] = None
    graduation_year: Optional[int] = None
    skills: List[str] = []
    country: Optional[str] = None
    city: Optional[str] = None
    major: Optional[str] = None
    achievements: List[str] = []
    portfolio_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    degree_document: Optional[str] = None


# ------- Projects -------
class ProjectCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: Optional[str] = None
    impact_area: Optional[str] = None
    # Either a list or a JSON-encoded list; cleaned by media.normalize_media_fields
    image_urls: Any = None
    video_urls: Any = None
    document_urls: Any = None
    funding_goal: Optional[float] = Field(default=None, ge=0)
    status: Optional[ProjectStatus] = None

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class ProjectUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    impact_area: Optional[str] = None
    image_urls: Any = None
    video_urls: Any = None
    document_urls: Any = None
    funding_goal: Optional[float] = Field(default=None, ge=0)
    status: Optional[ProjectStatus] = None


class AttachmentResponse(CamelModel):
    url: str
    kind: str
    filename: Optional[str] = None
    content_type: Optional[str] = None
    uploaded_at: Optional[str] = None


class ProjectResponse(CamelModel):
    id: int
    title: str
    description: str
    category: Optional[str] = None
    impact_area: Optional[str] = None
    images: List[str] = []
    videos: List[str] = []
    documents: List[str] = []
    attachments: List[AttachmentResponse] = []
    graduate_id: Optional[int] = None
    status: ProjectStatus
    funding_goal: Optional[float] = None
    current_funding: Optional[float] = 0
    views: int = 0
    likes: int = 0
    featured: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    graduate: Optional[UserSummary] = None


class ProjectListResponse(CamelModel):
    projects: List[ProjectResponse]
    total: int


class ProjectEnvelope(CamelModel):
    project: ProjectResponse


class ProjectAnalytics(CamelModel):
    project_id: int
    title: str
    views: int
    likes: int
    bookmarks: int
    interests: int
    status: ProjectStatus
    created_at: Optional[datetime] = None


# ------- Interactions / conversations -------
class InterestRequest(CamelModel):
    project_id: int
    message: Optional[str] = None


class ContactRequest(CamelModel):
    project_id: int
    message: str = Field(min_length=1)


class InteractionResponse(CamelModel):
    id: int
    investor_id: int
    project_id: int
    type: InteractionType
    message: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    project: Optional[ProjectResponse] = None


class ConversationMessage(CamelModel):
    id: int
    type: str
    message: Optional[str] = None
    created_at: Optional[datetime] = None
    sender_id: Optional[int] = None
    is_read: Optional[bool] = None


class InvestorConversation(CamelModel):
    id: str
    project: ProjectResponse
    graduate: Optional[UserSummary] = None
    messages: List[ConversationMessage]


class UserConversation(CamelModel):
    id: str
    other_user_id: int
    other_user: Optional[UserSummary] = None
    last_message: Optional[ConversationMessage] = None
    last_message_at: Optional[datetime] = None
    unread_count: int = 0
    messages: List[ConversationMessage] = []
    is_new: bool = False


class MessageSend(CamelModel):
    recipient_id: int
    content: str


class FindConversationRequest(CamelModel):
    other_user_id: Optional[int] = None


class ChatMessageResponse(CamelModel):
    id: int
    sender_id: int
    recipient_id: int
    content: str
    is_read: bool
    created_at: Optional[datetime] = None
    sender: Optional[UserSummary] = None


class SendMessageResponse(CamelModel):
    message: ChatMessageResponse
    conversation_id: str


class ConversationEnvelope(CamelModel):
    conversation: UserConversation


# ------- Dashboards / admin -------
class InvestorDashboard(CamelModel):
    total_bookmarks: int
    total_interests: int
    recent_bookmarks: List[InteractionResponse]


class GraduateDashboard(CamelModel):
    total_projects: int
    total_views: int
    total_likes: int
    recent_projects: List[ProjectResponse]


class UserStatusUpdate(CamelModel):
    status: str


class UsersPage(CamelModel):
    users: List[UserResponse]
    total_count: int
    current_page: int
    total_pages: int


class ProjectsPage(CamelModel):
    projects: List[ProjectResponse]
    total_count: int
    current_page: int
    total_pages: int


class AdminDashboard(CamelModel):
    total_users: int
    total_projects: int
    pending_projects: int
    published_projects: int
    users_by_role: Dict[str, int]
    recent_users: List[UserSummary]
    recent_projects: List[ProjectResponse]
