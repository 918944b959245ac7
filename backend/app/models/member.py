"""
Member store models.

The canonical member table, its attendance activities and the identity
mappings that tie external platform records to internal members.
"""

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class MemberStatus(str, enum.Enum):
    """Internal member lifecycle status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"


class ChurnRiskLevel(str, enum.Enum):
    """Churn risk bands."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityType(str, enum.Enum):
    """Normalized attendance types stored internally."""

    VISIT = "visit"
    CHECK_IN = "check_in"


class Member(Base):
    """
    SQLAlchemy model for gym members.

    Created on the first sync that sees an external record and updated in
    place on every later sync of the same external id. Risk fields are
    reset by the sync and recomputed in a separate pass.
    """

    __tablename__ = "members"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    gym_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Tenant (gym) owning this member",
    )

    # Identity / contact
    first_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Lifecycle
    joined_date: Mapped[date] = mapped_column(Date, nullable=False)
    last_visit_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[MemberStatus] = mapped_column(
        Enum(MemberStatus, name="member_status", create_constraint=True),
        nullable=False,
        default=MemberStatus.ACTIVE,
        index=True,
    )

    # Risk (recomputed outside the sync)
    churn_risk_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    churn_risk_level: Mapped[ChurnRiskLevel] = mapped_column(
        Enum(ChurnRiskLevel, name="churn_risk_level", create_constraint=True),
        nullable=False,
        default=ChurnRiskLevel.NONE,
    )
    last_risk_calculated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, gym_id='{self.gym_id}', status={self.status.value})>"


class MemberActivity(Base):
    """One attendance record (visit or check-in) of a member."""

    __tablename__ = "member_activities"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
    )
    activity_date: Mapped[date] = mapped_column(Date, nullable=False)
    activity_type: Mapped[ActivityType] = mapped_column(
        Enum(ActivityType, name="activity_type", create_constraint=True),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_member_activities_lookup", "member_id", "activity_date", "activity_type"),
    )


class ExternalMemberMapping(Base):
    """
    Identity mapping: (gym, source, external id) -> internal member.

    Written once on the first sync of an external record and never mutated.
    The unique constraint is what makes concurrent first syncs safe.
    """

    __tablename__ = "external_member_mappings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    gym_id: Mapped[str] = mapped_column(String(64), nullable=False)
    source: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Lower-cased adapter name, e.g. 'mindbody'",
    )
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)
    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("gym_id", "source", "external_id", name="uq_external_member_mapping"),
        Index("ix_external_member_mappings_gym_source", "gym_id", "source"),
    )
