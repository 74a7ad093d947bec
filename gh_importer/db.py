# gh_importer/db.py
import os
from sqlalchemy import (
    create_engine, Column, Integer, BigInteger, String, Boolean, DateTime,
    ForeignKey, UniqueConstraint, Index,
)
from sqlalchemy.orm import declarative_base, sessionmaker, relationship
from sqlalchemy.sql import func
from gh_importer.config import DATABASE_URL

Base = declarative_base()


class TimestampMixin:
    # Store-local bookkeeping, unrelated to GitHub's own updated_at
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class Repository(TimestampMixin, Base):
    __tablename__ = "repositories"

    id = Column(Integer, primary_key=True)
    github_id = Column(BigInteger, nullable=False, unique=True)
    name = Column(String, nullable=False)
    full_name = Column(String, nullable=False, unique=True)    # owner/name
    html_url = Column(String, nullable=False)
    private = Column(Boolean, nullable=False, default=False)
    archived = Column(Boolean, nullable=False, default=False)

    pull_requests = relationship("PullRequest", back_populates="repository")


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    github_id = Column(BigInteger, nullable=False, unique=True)
    login = Column(String, nullable=False, unique=True)
    html_url = Column(String, nullable=False)

    authored_pull_requests = relationship("PullRequest", back_populates="author")
    authored_reviews = relationship("Review", back_populates="author")


class PullRequest(TimestampMixin, Base):
    __tablename__ = "pull_requests"
    __table_args__ = (
        UniqueConstraint("repository_id", "number", name="uq_pull_requests_repository_number"),
    )

    id = Column(Integer, primary_key=True)
    github_id = Column(BigInteger, nullable=False, unique=True)
    repository_id = Column(Integer, ForeignKey("repositories.id"), nullable=False)
    number = Column(Integer, nullable=False)
    title = Column(String)
    state = Column(String)
    updated_at_github = Column(DateTime(timezone=True))
    closed_at = Column(DateTime(timezone=True))
    merged_at = Column(DateTime(timezone=True))
    author_id = Column(Integer, ForeignKey("users.id"))         # nullable: ghost/deleted authors
    additions = Column(Integer)
    deletions = Column(Integer)
    changed_files = Column(Integer)
    commits_count = Column(Integer)

    repository = relationship("Repository", back_populates="pull_requests")
    author = relationship("User", back_populates="authored_pull_requests")
    reviews = relationship("Review", back_populates="pull_request")


class Review(TimestampMixin, Base):
    __tablename__ = "reviews"
    __table_args__ = (
        Index("ix_reviews_pull_request_id", "pull_request_id"),
        Index("ix_reviews_author_id", "author_id"),
    )

    id = Column(Integer, primary_key=True)
    github_id = Column(BigInteger, nullable=False, unique=True)
    pull_request_id = Column(Integer, ForeignKey("pull_requests.id"), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"))
    state = Column(String)
    submitted_at = Column(DateTime(timezone=True))

    pull_request = relationship("PullRequest", back_populates="reviews")
    author = relationship("User", back_populates="authored_reviews")


# Engine & Session
engine = create_engine(DATABASE_URL, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _ensure_sqlite_dir(url):
    if url.get_backend_name() != "sqlite":
        return
    database = url.database
    if database and database != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(database)), exist_ok=True)


def create_schema(bind=None):
    """Create DB tables and indexes if they don't exist. Safe to run repeatedly."""
    bind = bind if bind is not None else engine
    _ensure_sqlite_dir(bind.url)
    Base.metadata.create_all(bind=bind)
