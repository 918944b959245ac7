"""
SQLAlchemy member store.

Production MemberStore on the async session. Every write commits on its
own, so the member insert and its mapping insert are separate statements
and a failed write rolls back only itself.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, exists, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.member import (
    ActivityType,
    ChurnRiskLevel,
    ExternalMemberMapping,
    Member,
    MemberActivity,
)
from app.services.member_sync.store import (
    MappingConflictError,
    MemberNotFoundError,
    MemberRiskRow,
    MemberStore,
)

logger = logging.getLogger(__name__)


def _uuid(value: str) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


class SqlAlchemyMemberStore(MemberStore):
    """MemberStore backed by PostgreSQL through an AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _rollback_on_error(self, error: Exception) -> None:
        logger.debug(f"Rolling back member store write: {error}")
        await self.session.rollback()

    # --- Identity mappings -------------------------------------------------

    async def get_mapping(self, gym_id: str, source: str, external_id: str) -> Optional[str]:
        result = await self.session.execute(
            select(ExternalMemberMapping.member_id).where(
                ExternalMemberMapping.gym_id == gym_id,
                ExternalMemberMapping.source == source,
                ExternalMemberMapping.external_id == external_id,
            )
        )
        member_id = result.scalar_one_or_none()
        return str(member_id) if member_id is not None else None

    async def list_mappings(self, gym_id: str, source: str) -> Dict[str, str]:
        result = await self.session.execute(
            select(ExternalMemberMapping.external_id, ExternalMemberMapping.member_id).where(
                ExternalMemberMapping.gym_id == gym_id,
                ExternalMemberMapping.source == source,
            )
        )
        return {external_id: str(member_id) for external_id, member_id in result.all()}

    async def insert_mapping(
        self,
        gym_id: str,
        source: str,
        external_id: str,
        member_id: str,
    ) -> None:
        self.session.add(
            ExternalMemberMapping(
                gym_id=gym_id,
                source=source,
                external_id=external_id,
                member_id=_uuid(member_id),
            )
        )
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"⚠️ Mapping conflict for {source}:{external_id} (gym {gym_id})")
            raise MappingConflictError(
                f"Mapping already exists for {source}:{external_id} in gym {gym_id}"
            ) from e

    # --- Members -----------------------------------------------------------

    async def insert_member(self, data: Dict[str, Any]) -> str:
        member = Member(**data)
        self.session.add(member)
        try:
            await self.session.flush()
            member_id = str(member.id)
            await self.session.commit()
        except Exception as e:
            await self._rollback_on_error(e)
            raise
        return member_id

    async def update_member(self, member_id: str, data: Dict[str, Any]) -> None:
        try:
            result = await self.session.execute(
                update(Member).where(Member.id == _uuid(member_id)).values(**data)
            )
            if result.rowcount == 0:
                raise MemberNotFoundError(f"Member {member_id} not found")
            await self.session.commit()
        except Exception as e:
            await self._rollback_on_error(e)
            raise

    async def delete_member(self, member_id: str) -> None:
        try:
            await self.session.execute(delete(Member).where(Member.id == _uuid(member_id)))
            await self.session.commit()
        except Exception as e:
            await self._rollback_on_error(e)
            raise

    # --- Activities --------------------------------------------------------

    async def activity_exists(
        self,
        member_id: str,
        activity_date: date,
        activity_type: ActivityType,
    ) -> bool:
        result = await self.session.execute(
            select(
                exists().where(
                    MemberActivity.member_id == _uuid(member_id),
                    MemberActivity.activity_date == activity_date,
                    MemberActivity.activity_type == activity_type,
                )
            )
        )
        return bool(result.scalar())

    async def insert_activity(
        self,
        member_id: str,
        activity_date: date,
        activity_type: ActivityType,
    ) -> None:
        self.session.add(
            MemberActivity(
                member_id=_uuid(member_id),
                activity_date=activity_date,
                activity_type=activity_type,
            )
        )
        try:
            await self.session.commit()
        except Exception as e:
            await self._rollback_on_error(e)
            raise

    # --- Risk --------------------------------------------------------------

    async def list_members_for_risk(self, gym_id: str) -> List[MemberRiskRow]:
        result = await self.session.execute(
            select(Member.id, Member.joined_date, Member.last_visit_date).where(
                Member.gym_id == gym_id
            )
        )
        return [
            MemberRiskRow(
                member_id=str(member_id),
                joined_date=joined_date,
                last_visit_date=last_visit_date,
            )
            for member_id, joined_date, last_visit_date in result.all()
        ]

    async def count_recent_activities(self, member_id: str, since: date) -> int:
        result = await self.session.execute(
            select(func.count(MemberActivity.id)).where(
                MemberActivity.member_id == _uuid(member_id),
                MemberActivity.activity_date >= since,
            )
        )
        return int(result.scalar() or 0)

    async def update_member_risk(
        self,
        member_id: str,
        score: int,
        level: ChurnRiskLevel,
        calculated_at: datetime,
    ) -> None:
        await self.update_member(member_id, {
            "churn_risk_score": score,
            "churn_risk_level": level,
            "last_risk_calculated_at": calculated_at,
        })
