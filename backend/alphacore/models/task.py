"""Task ORM - kanban cards, their comments, and labels.

Invariants:
    - Always belongs to a Project (project_id FK)
    - order is the position inside its (project, status) column
    - updated_at refreshed on every update: the daily report uses it as "moved to DONE"
    - creator/assignee set to NULL when the user is deleted

Design Decisions:
    - labels as a plain association table (task_labels): no payload on the link
    - comments NOT eagerly loaded: only the task detail view needs them
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, Table,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from alphacore.db.base import Base


task_labels = Table(
    "task_labels",
    Base.metadata,
    Column(
        "task_id", UUID(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "label_id", UUID(as_uuid=True),
        ForeignKey("labels.id", ondelete="CASCADE"), primary_key=True,
    ),
)


class Label(Base):
    """Colored tag that can be attached to tasks."""
    __tablename__ = "labels"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    color: Mapped[str] = mapped_column(String(20), nullable=False)


class Task(Base):
    """Task entity - a card on a project board."""
    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="TODO",
    )
    priority: Mapped[str] = mapped_column(
        String(10), nullable=False, default="MEDIUM",
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    assignee_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    creator_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    project: Mapped["Project"] = relationship(
        "Project", back_populates="tasks", lazy="selectin",
    )
    assignee: Mapped["User | None"] = relationship(
        "User", foreign_keys=[assignee_id], lazy="selectin",
    )
    creator: Mapped["User | None"] = relationship(
        "User", foreign_keys=[creator_id], lazy="selectin",
    )
    labels: Mapped[list["Label"]] = relationship(
        "Label", secondary=task_labels, lazy="selectin",
    )
    comments: Mapped[list["TaskComment"]] = relationship(
        "TaskComment", back_populates="task",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="TaskComment.created_at",
    )


class TaskComment(Base):
    """Comment left on a task."""
    __tablename__ = "task_comments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    task_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    task: Mapped["Task"] = relationship("Task", back_populates="comments")
    user: Mapped["User"] = relationship("User", lazy="selectin")
