"""
Issue tracker data models
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import Column, String, DateTime, Text, Boolean, ForeignKey, Enum, Uuid, Index
from sqlalchemy.orm import relationship
import uuid
import enum

from core.database import Base


def _enum_column(enum_cls, **kwargs):
    # Persist the display values ("In Progress"), not the member names
    return Column(
        Enum(enum_cls, values_callable=lambda e: [m.value for m in e], native_enum=False, length=50),
        **kwargs
    )


class UserRole(str, enum.Enum):
    """User roles"""
    ADMIN = "admin"
    CORE = "core"
    MEMBER = "member"


class TicketType(str, enum.Enum):
    """Ticket types"""
    BUG = "Bug"
    FEATURE = "Feature"
    IMPROVEMENT = "Improvement"
    TASK = "Task"


class TicketStatus(str, enum.Enum):
    """Ticket workflow states"""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    IN_REVIEW = "In Review"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class TicketPriority(str, enum.Enum):
    """Ticket priority levels"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


# Project status is free text in the tracker; only "Active" carries meaning for analytics
PROJECT_STATUS_ACTIVE = "Active"

OPEN_STATUSES = (TicketStatus.OPEN, TicketStatus.IN_PROGRESS)
TEAM_ROLES = (UserRole.ADMIN, UserRole.CORE, UserRole.MEMBER)


class User(Base):
    """Registered user"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    role = _enum_column(UserRole, default=UserRole.MEMBER, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    owned_projects = relationship("Project", back_populates="owner")


class Project(Base):
    """Project model"""
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    status = Column(String(50), default="Planning")
    priority = Column(String(50), default="Medium")
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="owned_projects")
    members = relationship("ProjectMember", back_populates="project", cascade="all, delete-orphan")
    tickets = relationship("Ticket", back_populates="project")


class ProjectMember(Base):
    """Project membership: a registered user, or an outsider known only by name and email"""
    __tablename__ = "project_members"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    added_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    project = relationship("Project", back_populates="members")
    user = relationship("User")

    @property
    def is_outsider(self) -> bool:
        return self.user_id is None


class Ticket(Base):
    """Ticket model"""
    __tablename__ = "tickets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    type = _enum_column(TicketType, default=TicketType.BUG, nullable=False)
    status = _enum_column(TicketStatus, default=TicketStatus.OPEN, nullable=False)
    priority = _enum_column(TicketPriority, default=TicketPriority.MEDIUM, nullable=False)

    # References
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=False)
    assigned_to_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    reported_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)

    # Dates
    due_date = Column(DateTime, nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    project = relationship("Project", back_populates="tickets")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    reported_by = relationship("User", foreign_keys=[reported_by_id])
    comments = relationship("Comment", back_populates="ticket")

    __table_args__ = (
        Index("ix_tickets_project_status", "project_id", "status"),
        Index("ix_tickets_assignee_status", "assigned_to_id", "status"),
    )

    def set_status(self, status: TicketStatus, when: Optional[datetime] = None):
        """Move the ticket to a new status, keeping resolved_at in step"""
        when = when or datetime.utcnow()
        done = status in (TicketStatus.RESOLVED, TicketStatus.CLOSED)
        if done and self.resolved_at is None:
            self.resolved_at = when
        elif not done:
            self.resolved_at = None
        self.status = status
        self.updated_at = when


class Comment(Base):
    """Ticket comment"""
    __tablename__ = "comments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    ticket_id = Column(Uuid, ForeignKey("tickets.id"), nullable=False)
    author_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    is_edited = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    ticket = relationship("Ticket", back_populates="comments")
    author = relationship("User")
