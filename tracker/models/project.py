"""
Project aggregate models.

A project belongs to exactly one user. Tags, the abandonment record and
revival history are owned through the project and are removed with it
(ON DELETE CASCADE at the DB level, delete-orphan at the ORM level).

Design notes:
  • end_date and abandoned_at are mutually exclusive and follow status:
      ACTIVE    → both NULL
      COMPLETED → end_date set
      ABANDONED → abandoned_at set
    The service layer maintains this; a CHECK constraint backs it up.
  • project_abandonments.project_id is UNIQUE — re-abandoning upserts.
  • Revival rows are append-only history.
  • secondary_reasons is JSON (JSONB on Postgres): a list of reason names.
"""

import datetime
import enum
import uuid
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from tracker.core.database import Base
from tracker.core.timeutils import utcnow


class ProjectStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"


class AbandonmentReason(str, enum.Enum):
    TIME = "TIME"
    MOTIVATION = "MOTIVATION"
    TECHNICAL = "TECHNICAL"
    SCOPE = "SCOPE"
    MARKET = "MARKET"
    ORGANIZATION = "ORGANIZATION"
    BURNOUT = "BURNOUT"
    OTHER = "OTHER"


class Project(Base):
    """One tracked unit of work."""

    __tablename__ = "projects"

    # ── Identity / ownership ────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # ── Descriptive fields ──────────────────────────────────
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    repository_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    live_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ── Lifecycle ───────────────────────────────────────────
    status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, name="project_status"),
        nullable=False,
        default=ProjectStatus.ACTIVE,
        server_default=ProjectStatus.ACTIVE.value,
    )
    start_date: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    end_date: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    abandoned_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    # ── Relations (loaded explicitly by the repository) ─────
    tags: Mapped[list["ProjectTag"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectTag.position",
    )
    abandonment: Mapped[Optional["ProjectAbandonment"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        uselist=False,
    )
    revivals: Mapped[list["ProjectRevival"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectRevival.revived_at",
    )

    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR abandoned_at IS NULL",
            name="ck_projects_single_terminal_date",
        ),
        Index("ix_projects_user_id_updated_at", "user_id", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Project id={self.id!s:.8} name={self.name!r} status={self.status.value}>"


class ProjectTag(Base):
    """Free-text label attached to a project."""

    __tablename__ = "project_tags"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    label: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    # Preserves the order the tags were submitted in.
    position: Mapped[int] = mapped_column(nullable=False, default=0)

    project: Mapped[Project] = relationship(back_populates="tags")

    def __repr__(self) -> str:
        return f"<ProjectTag {self.label!r} project={self.project_id!s:.8}>"


class ProjectAbandonment(Base):
    """Why a project was abandoned. At most one per project."""

    __tablename__ = "project_abandonments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    main_reason: Mapped[AbandonmentReason] = mapped_column(
        Enum(AbandonmentReason, name="abandonment_reason"),
        nullable=False,
    )
    secondary_reasons: Mapped[list[str] | None] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=True,
    )
    retrospective: Mapped[str | None] = mapped_column(Text, nullable=True)
    lessons_learned: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    project: Mapped[Project] = relationship(back_populates="abandonment")

    def __repr__(self) -> str:
        return (
            f"<ProjectAbandonment project={self.project_id!s:.8} "
            f"reason={self.main_reason.value}>"
        )


class ProjectRevival(Base):
    """One return of a project to ACTIVE."""

    __tablename__ = "project_revivals"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    revived_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    project: Mapped[Project] = relationship(back_populates="revivals")

    def __repr__(self) -> str:
        return f"<ProjectRevival project={self.project_id!s:.8} at={self.revived_at}>"
