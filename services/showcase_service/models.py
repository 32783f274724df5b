from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, Boolean, JSON, TypeDecorator
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

Base = declarative_base()


class EnumValue(TypeDecorator):
    """Store enum values (e.g. "published") instead of member names"""
    impl = String
    cache_ok = True

    def __init__(self, enum_class, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, self.enum_class):
            return value.value
        # Plain strings are bound as-is so filters can match legacy aliases
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return self.enum_class(value)


class UserType(str, enum.Enum):
    GRADUATE = "graduate"
    INVESTOR = "investor"
    ADMIN = "admin"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class ProjectStatus(str, enum.Enum):
    DRAFT = "draft"
    UNDER_REVIEW = "under_review"
    PUBLISHED = "published"
    COMPLETED = "completed"
    REJECTED = "rejected"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        lowered = value.lower()
        for member in cls:
            if member.value == lowered:
                return member
        # Older rows were written with "pending" / "active"
        aliases = {"pending": cls.UNDER_REVIEW, "active": cls.PUBLISHED}
        return aliases.get(lowered)

    def stored_values(self):
        """Every raw column value that reads back as this status."""
        legacy = {"under_review": ("pending",), "published": ("active",)}
        return (self.value,) + legacy.get(self.value, ())


class InteractionType(str, enum.Enum):
    MESSAGE = "message"
    BOOKMARK = "bookmark"
    CONTACT = "contact"
    INTEREST = "interest"
    LIKE = "like"
    VIEW = "view"
    FAVORITE = "favorite"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    user_type = Column(EnumValue(UserType, length=20), nullable=False, default=UserType.GRADUATE)
    profile_image = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    skills = Column(JSON, default=list)
    university = Column(String, nullable=True)
    graduation_year = Column(Integer, nullable=True)
    company_name = Column(String, nullable=True)
    company_website = Column(String, nullable=True)
    country = Column(String, nullable=True)
    city = Column(String, nullable=True)
    status = Column(EnumValue(UserStatus, length=20), nullable=False, default=UserStatus.ACTIVE)
    is_email_verified = Column(Boolean, default=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    projects = relationship("Project", back_populates="graduate")
    graduate_profile = relationship(
        "GraduateProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class GraduateProfile(Base):
    __tablename__ = "graduate_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    major = Column(String, nullable=True)
    achievements = Column(JSON, default=list)
    portfolio_url = Column(String, nullable=True)
    linkedin_url = Column(String, nullable=True)
    github_url = Column(String, nullable=True)
    degree_document = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="graduate_profile")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=True, index=True)
    impact_area = Column(String, nullable=True)
    # JSON-encoded text, not native arrays: existing rows are stored this way
    images = Column(Text, default="[]")
    videos = Column(Text, default="[]")
    documents = Column(Text, default="[]")
    attachments = Column(Text, default="[]")
    graduate_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(EnumValue(ProjectStatus, length=20), nullable=False, default=ProjectStatus.UNDER_REVIEW)
    funding_goal = Column(Float, nullable=True)
    current_funding = Column(Float, default=0)
    views = Column(Integer, default=0, nullable=False)
    likes = Column(Integer, default=0, nullable=False)
    featured = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    graduate = relationship("User", back_populates="projects")
    interactions = relationship("Interaction", back_populates="project", cascade="all, delete-orphan")


class Interaction(Base):
    __tablename__ = "interactions"

    id = Column(Integer, primary_key=True, index=True)
    investor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(EnumValue(InteractionType, length=20), nullable=False)
    message = Column(Text, nullable=True)
    status = Column(String, default="active")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="interactions")
    investor = relationship("User")


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    sender = relationship("User", foreign_keys=[sender_id])
    recipient = relationship("User", foreign_keys=[recipient_id])


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String, unique=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class VerificationToken(Base):
    __tablename__ = "verification_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    purpose = Column(String, nullable=False)  # 'email', 'password_reset'
    token = Column(String, unique=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
