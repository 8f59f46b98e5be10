# reelcart/tests/conftest.py
"""
Test bootstrap
- Environment is set BEFORE reelcart is imported (Settings() runs at import)
- Every test gets its own SQLite file with foreign keys on
- The storage dependency is replaced by an in-memory bucket
"""
import os
import uuid
from pathlib import Path

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("SECRET_KEY", "reelcart-test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_BUCKET_NAME", "reelcart-test-assets")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from reelcart.database import Base, build_engine, get_db
from reelcart.main import app
from reelcart.models import Category, Host, User, UserRole
from reelcart.utils.security import create_access_token, get_password_hash
from reelcart.utils.storage import StorageService, get_storage

BUCKET = "reelcart-test-assets"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PASSWORD = "correct-horse-battery"


# ──────────────────────────────────────────────────────────────────────────────
# 🪣 In-memory bucket
# ──────────────────────────────────────────────────────────────────────────────
class FakeStorage(StorageService):
    """Keeps objects in a dict; set fail_deletes to simulate an S3 outage"""

    def __init__(self):
        super().__init__(bucket=BUCKET, region="us-east-1")
        self.objects = {}
        self.uploaded = []
        self.deleted = []
        self.fail_deletes = False

    async def upload(self, file, folder):
        content = await file.read()
        key = f"{folder}/{uuid.uuid4()}{Path(file.filename or '').suffix.lower()}"
        self.objects[key] = content
        self.uploaded.append(key)
        return self.public_url(key)

    async def delete(self, key):
        if self.fail_deletes:
            raise RuntimeError("S3 is unavailable")
        self.objects.pop(key, None)
        self.deleted.append(key)


# ──────────────────────────────────────────────────────────────────────────────
# 🗄️ Database
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'reelcart.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def storage():
    return FakeStorage()


@pytest.fixture()
def client(session_factory, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    # No context manager: lifespan (init_db against DATABASE_URL) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


# ──────────────────────────────────────────────────────────────────────────────
# 👤 Users & auth
# ──────────────────────────────────────────────────────────────────────────────
def make_user(db, email, role=UserRole.USER, password=PASSWORD, name="Test User"):
    user = User(name=name, email=email, password=get_password_hash(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def bearer(user):
    token = create_access_token(subject=user.id, role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_user(db):
    return make_user(db, "admin@reelcart.io", role=UserRole.ADMIN, name="Admin")


@pytest.fixture()
def regular_user(db):
    return make_user(db, "viewer@reelcart.io", name="Viewer")


@pytest.fixture()
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture()
def user_headers(regular_user):
    return bearer(regular_user)


# ──────────────────────────────────────────────────────────────────────────────
# 🎬 Catalog rows
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def category(db):
    cat = Category(name="Tech Reviews", description="Phones, laptops and gadgets")
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


@pytest.fixture()
def hosts(db):
    rows = [Host(name=name, bio="") for name in ("Maya", "Tomas", "Priya")]
    db.add_all(rows)
    db.commit()
    for row in rows:
        db.refresh(row)
    return rows


def movie_form(category_id, **overrides):
    form = {
        "title": "Pixel 9 Review",
        "categoryId": str(category_id),
        "description": "Two weeks with the Pixel 9",
        "video_url": "https://cdn.reelcart.io/pixel9/master.m3u8",
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}


def thumbnail_file(name="thumb.png", content=PNG_BYTES, content_type="image/png"):
    return {"thumbnail": (name, content, content_type)}
