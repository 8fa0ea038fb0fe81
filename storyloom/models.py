from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, Text, DateTime, func,
    UniqueConstraint, Index,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
from .database import Base
import enum


class PageStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"


# ---------------------------
# USER MODEL
# ---------------------------
class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    username = Column(String(64), index=True, nullable=False)
    hashed_password = Column(String(1024), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    works = relationship("Work", back_populates="author", cascade="all, delete-orphan")


# ---------------------------
# WORKS (read-only here; managed by the works service)
# ---------------------------
class Work(Base):
    __tablename__ = "work"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(32), default="novel", nullable=False)
    author_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    allow_collaboration = Column(Boolean, default=True, nullable=False)
    page_char_limit = Column(Integer, default=2000, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    author = relationship("User", back_populates="works", lazy="selectin")
    collaborators = relationship("WorkCollaborator", back_populates="work", cascade="all, delete-orphan")
    pages = relationship("Page", back_populates="work", cascade="all, delete-orphan")


# ---------------------------
# COLLABORATORS
# ---------------------------
class WorkCollaborator(Base):
    __tablename__ = "work_collaborator"

    id = Column(Integer, primary_key=True)
    work_id = Column(Integer, ForeignKey("work.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)  # NULL = pending
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    work = relationship("Work", back_populates="collaborators")
    user = relationship("User", lazy="selectin")

    __table_args__ = (UniqueConstraint("work_id", "user_id", name="uq_work_collaborator"),)

    @property
    def is_approved(self) -> bool:
        return self.approved_at is not None


# ---------------------------
# PAGES
# ---------------------------
class Page(Base):
    __tablename__ = "page"

    id = Column(Integer, primary_key=True, index=True)
    work_id = Column(Integer, ForeignKey("work.id", ondelete="CASCADE"), index=True, nullable=False)
    author_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    content = Column(Text, nullable=False)
    # set iff status == approved; dense 1..n per work
    page_number = Column(Integer, nullable=True)
    status = Column(SAEnum(PageStatus, name="page_status"), default=PageStatus.pending, nullable=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    work = relationship("Work", back_populates="pages")
    author = relationship("User", lazy="selectin")

    __table_args__ = (
        # pending rows hold NULL numbers, which never collide
        UniqueConstraint("work_id", "page_number", name="uq_page_work_number"),
        Index("ix_page_work_status", "work_id", "status"),
    )
