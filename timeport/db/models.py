"""
ORM models for the tenant data set the import engine writes into.

Every importable entity belongs to exactly one organization. Primary keys
are UUID strings so identifiers stay stable across databases.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from timeport.db.session import Base

PLACEHOLDER_ROLE = "placeholder"


def _utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def _uuid() -> str:
    return str(uuid.uuid4())


class Organization(Base):
    """Tenant. Scoping boundary for everything below."""
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=_utcnow)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    # Not unique: placeholder users created by imports are per organization.
    email = Column(String(255), nullable=False, index=True)
    timezone = Column(String(64), nullable=False, default="UTC")
    is_placeholder = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=_utcnow)


class Member(Base):
    """Membership of a user in an organization."""
    __tablename__ = "members"
    __table_args__ = (UniqueConstraint("organization_id", "user_id", name="uq_members_organization_user"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(32), nullable=False, default=PLACEHOLDER_ROLE)


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (UniqueConstraint("organization_id", "name", name="uq_clients_organization_name"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    archived_at = Column(DateTime, nullable=True)


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (UniqueConstraint("organization_id", "name", name="uq_projects_organization_name"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    color = Column(String(16), nullable=False)
    billable_rate = Column(Integer, nullable=True)  # cents
    is_public = Column(Boolean, nullable=False, default=False)
    is_billable = Column(Boolean, nullable=False, default=False)
    estimated_time = Column(Integer, nullable=True)  # seconds
    archived_at = Column(DateTime, nullable=True)


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        UniqueConstraint("organization_id", "project_id", "name", name="uq_tasks_organization_project_name"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(500), nullable=False)


class Tag(Base):
    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("organization_id", "name", name="uq_tags_organization_name"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)


class TimeEntry(Base):
    """One tracked interval. start/end are naive UTC."""
    __tablename__ = "time_entries"

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=True)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=True)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=True)
    description = Column(Text, nullable=False, default="")
    billable = Column(Boolean, nullable=False, default=False)
    start = Column(DateTime, nullable=False)
    end = Column(DateTime, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    is_imported = Column(Boolean, nullable=False, default=False)
