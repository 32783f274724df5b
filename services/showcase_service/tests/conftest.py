import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import crud
from auth import create_access_token
from database import get_db
from main import app
from models import Base, Project, ProjectStatus, UserType
from storage import MediaStorage, get_storage

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeMinioClient:
    """Records uploads in memory instead of talking to MinIO."""

    def __init__(self):
        self.buckets = set()
        self.objects = {}

    def bucket_exists(self, bucket):
        return bucket in self.buckets

    def make_bucket(self, bucket):
        self.buckets.add(bucket)

    def put_object(self, bucket, object_name, data, length, content_type=None):
        self.objects[(bucket, object_name)] = (data.read(length), content_type)

    def remove_object(self, bucket, object_name):
        self.objects.pop((bucket, object_name), None)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def minio_client():
    return FakeMinioClient()


@pytest.fixture
def client(db, minio_client):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: MediaStorage(minio_client, "showcase", "storage.test")
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create a user straight through the persistence layer."""
    counter = {"n": 0}

    def _make(user_type=UserType.GRADUATE, email=None, password="secret123", **extra):
        counter["n"] += 1
        user = crud.create_user(
            db,
            email=email or f"{user_type.value}{counter['n']}@gmail.com",
            password=password,
            first_name=extra.pop("first_name", "Test"),
            last_name=extra.pop("last_name", f"User{counter['n']}"),
            user_type=user_type,
        )
        if extra:
            for key, value in extra.items():
                setattr(user, key, value)
            db.commit()
            db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_project(db):
    def _make(graduate, title="Clean water for all", description="Solar powered filters", status=ProjectStatus.PUBLISHED, **extra):
        project = Project(
            title=title,
            description=description,
            graduate_id=graduate.id if graduate is not None else None,
            status=status,
            **extra
        )
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(data={"sub": user.id})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def graduate(make_user):
    return make_user(UserType.GRADUATE)


@pytest.fixture
def investor(make_user):
    return make_user(UserType.INVESTOR, company_name="Seed Fund")


@pytest.fixture
def admin(make_user):
    return make_user(UserType.ADMIN)
