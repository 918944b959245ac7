"""
Gym software integration models.

Platform-neutral shapes that every adapter produces, plus the per-item
results and run summaries the sync orchestrator hands back to callers.
"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ExternalMemberStatus(str, enum.Enum):
    """Member lifecycle status as reported by the external platform."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"


class VisitType(str, enum.Enum):
    """Kind of attendance record reported by the external platform."""

    VISIT = "visit"
    CHECK_IN = "check_in"
    CLASS = "class"
    APPOINTMENT = "appointment"


class SyncAction(str, enum.Enum):
    """Terminal outcome of reconciling one external record."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class ExternalMember(BaseModel):
    """
    Member record as fetched from a gym platform.

    Ephemeral: re-fetched on every run and never persisted verbatim.
    `external_id` is unique per (source, tenant).
    """

    external_id: str = Field(..., min_length=1)
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    joined_date: date
    last_visit_date: Optional[date] = None
    status: ExternalMemberStatus = ExternalMemberStatus.ACTIVE
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def updated_at(self) -> Optional[datetime]:
        """Platform-side last modification time, if the platform reports one."""
        value = self.metadata.get("updated_at")
        if isinstance(value, datetime):
            return value
        return None


class ExternalVisit(BaseModel):
    """Attendance record as fetched from a gym platform."""

    external_id: str = Field(..., min_length=1)
    member_external_id: str = Field(..., min_length=1)
    visit_date: date
    visit_type: VisitType = VisitType.VISIT
    metadata: Dict[str, Any] = Field(default_factory=dict)


@dataclass
class MemberSyncResult:
    """Result of reconciling a single external record."""
    external_id: str
    action: SyncAction
    member_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class SyncItemError:
    """One failed item inside a run summary."""
    external_id: str
    error: str


@dataclass
class SyncSummary:
    """Aggregated counts for one sync invocation."""
    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[SyncItemError] = field(default_factory=list)

    def record(self, result: MemberSyncResult) -> None:
        """Count a single item result."""
        if result.action == SyncAction.CREATED:
            self.created += 1
        elif result.action == SyncAction.UPDATED:
            self.updated += 1
        elif result.action == SyncAction.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
            self.errors.append(
                SyncItemError(external_id=result.external_id, error=result.error or "Unknown error")
            )

    @property
    def failure_ratio(self) -> float:
        """Share of items that failed (0.0 for an empty run)."""
        if self.total == 0:
            return 0.0
        return self.failed / self.total

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API responses."""
        return {
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "errors": [
                {"external_id": err.external_id, "error": err.error}
                for err in self.errors
            ],
        }
