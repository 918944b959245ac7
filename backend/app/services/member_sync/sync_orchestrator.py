"""
Member Sync Orchestrator.

Coordinates the member/visit synchronization workflow between a gym
platform adapter and the member store.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set, Tuple

from app.core.interfaces.gym_software import FetchOptions, GymSoftwareAdapter
from app.models.integration import (
    ExternalMember,
    ExternalVisit,
    MemberSyncResult,
    SyncAction,
    SyncSummary,
)
from app.models.member import ActivityType
from app.services.member_sync.error_tracker import ErrorTracker
from app.services.member_sync.member_mapper import map_external_member, normalize_visit_type
from app.services.member_sync.risk import (
    RiskCalculator,
    RiskInput,
    RiskRecomputeSummary,
    calculate_churn_risk,
)
from app.services.member_sync.store import MappingConflictError, MemberStore
from app.services.sync_status import SyncPhase, sync_status

logger = logging.getLogger(__name__)

FAILURE_WARNING_RATIO = 0.5


class SyncError(Exception):
    """Base error for sync runs."""
    pass


class SyncConnectionError(SyncError):
    """Raised when the adapter's connectivity check fails; nothing was synced."""
    pass


@dataclass
class SyncOptions:
    """
    Options for a sync invocation.

    Attributes:
        since: Only sync records updated (members) or dated (visits) on/after this time
        dry_run: Compute the would-be actions without writing anything
        sync_visits: Run visit sync after member sync (full run only)
        calculate_risk_scores: Recompute risk after visits (full run only, never on dry run)
        limit: Maximum number of members to fetch (visits are never capped)
    """
    since: Optional[datetime] = None
    dry_run: bool = False
    sync_visits: bool = True
    calculate_risk_scores: bool = True
    limit: Optional[int] = None

    def member_fetch_options(self) -> FetchOptions:
        return FetchOptions(since=self.since, limit=self.limit)

    def visit_fetch_options(self) -> FetchOptions:
        # Visits are never capped; only since applies
        return FetchOptions(since=self.since)


@dataclass
class FullSyncResult:
    """Result of a full run (members, then visits, then risk)."""
    provider: str
    dry_run: bool
    members: SyncSummary
    visits: Optional[SyncSummary] = None
    risk: Optional[RiskRecomputeSummary] = None
    message: str = ""
    errors: List[str] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        """Check if any item failed in any phase."""
        failed = self.members.failed
        if self.visits is not None:
            failed += self.visits.failed
        if self.risk is not None:
            failed += self.risk.failed
        return failed > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "dry_run": self.dry_run,
            "members": self.members.to_dict(),
            "visits": self.visits.to_dict() if self.visits is not None else None,
            "risk": self.risk.to_dict() if self.risk is not None else None,
            "message": self.message,
            "errors": list(self.errors),
        }


class MemberSyncOrchestrator:
    """
    Orchestrates member sync for one gym and one adapter.

    Responsibilities:
    - Reconcile external members against identity mappings (create/update)
    - Write visits idempotently
    - Trigger the full risk recompute
    - Aggregate per-item results without letting one failure stop the run

    Items are processed one at a time, in fetch order.
    """

    def __init__(
        self,
        adapter: GymSoftwareAdapter,
        store: MemberStore,
        gym_id: str,
        risk_calculator: RiskCalculator = calculate_churn_risk,
        recent_window_days: int = 30,
    ):
        """
        Initialize member sync orchestrator.

        Args:
            adapter: Gym platform adapter to read from
            store: Member store to write to
            gym_id: Tenant whose members are synced
            risk_calculator: Callable computing risk for one member
            recent_window_days: Window for the recent-visits risk input
        """
        self.adapter = adapter
        self.store = store
        self.gym_id = gym_id
        self.risk_calculator = risk_calculator
        self.recent_window_days = recent_window_days
        self.error_tracker = ErrorTracker()

    @property
    def source(self) -> str:
        """Partition key of identity mappings for this adapter."""
        return self.adapter.get_name().lower()

    # === Members ===

    async def sync_members(self, options: Optional[SyncOptions] = None) -> SyncSummary:
        """
        Sync all members from the external platform.

        Args:
            options: Filters and dry-run flag

        Returns:
            SyncSummary with one count per member

        Raises:
            SyncConnectionError: If the connectivity check fails
        """
        options = options or SyncOptions()
        name = self.adapter.get_name()
        logger.info(
            f"🔄 Member sync: {name} -> gym {self.gym_id}"
            f"{' (dry run)' if options.dry_run else ''}"
        )

        if not await self.adapter.test_connection():
            raise SyncConnectionError(f"Failed to connect to {name}")

        members = await self.adapter.fetch_members(options.member_fetch_options())
        logger.info(f"📥 Fetched {len(members)} members from {name}")

        summary = SyncSummary(total=len(members))
        for member in members:
            result = await self._sync_member(member, options.dry_run)
            logger.debug(f"Member {result.external_id}: {result.action.value}")
            summary.record(result)

        self._warn_on_failure_ratio("member", summary)
        logger.info(
            f"✅ Member sync done: {summary.created} created, {summary.updated} updated, "
            f"{summary.skipped} skipped, {summary.failed} failed"
        )
        return summary

    async def _sync_member(self, member: ExternalMember, dry_run: bool) -> MemberSyncResult:
        """Reconciles one external member; never raises."""
        try:
            member_id = await self.store.get_mapping(self.gym_id, self.source, member.external_id)
            data = map_external_member(member, self.gym_id)

            if member_id is not None:
                if not dry_run:
                    await self.store.update_member(member_id, data)
                return MemberSyncResult(member.external_id, SyncAction.UPDATED, member_id=member_id)

            if dry_run:
                return MemberSyncResult(member.external_id, SyncAction.CREATED)

            member_id = await self.store.insert_member(data)
            try:
                await self.store.insert_mapping(
                    self.gym_id, self.source, member.external_id, member_id
                )
            except MappingConflictError:
                return await self._resolve_mapping_conflict(member, member_id, data)

            return MemberSyncResult(member.external_id, SyncAction.CREATED, member_id=member_id)

        except Exception as e:
            self.error_tracker.track_item_error(
                member.external_id,
                "member",
                e,
                context={"source": self.source, "gym_id": self.gym_id},
            )
            return MemberSyncResult(member.external_id, SyncAction.FAILED, error=str(e))

    async def _resolve_mapping_conflict(
        self,
        member: ExternalMember,
        orphan_member_id: str,
        data: Dict[str, Any],
    ) -> MemberSyncResult:
        """
        Another run mapped this external id between our lookup and insert.

        Drops the member row we just created and updates the mapped one.
        """
        logger.warning(
            f"⚠️ Lost mapping race for {self.source}:{member.external_id}, switching to update"
        )
        await self.store.delete_member(orphan_member_id)

        member_id = await self.store.get_mapping(self.gym_id, self.source, member.external_id)
        if member_id is None:
            raise SyncError(f"Mapping for {member.external_id} conflicted but could not be read back")

        await self.store.update_member(member_id, data)
        return MemberSyncResult(member.external_id, SyncAction.UPDATED, member_id=member_id)

    # === Visits ===

    async def sync_visits(self, options: Optional[SyncOptions] = None) -> SyncSummary:
        """
        Sync visits for all mapped members.

        Visits whose member has no mapping yet are skipped. A visit counts
        as already present when the member has an activity with the same
        date and normalized type.

        Args:
            options: Filters and dry-run flag

        Returns:
            SyncSummary with one count per visit
        """
        options = options or SyncOptions()
        mappings = await self.store.list_mappings(self.gym_id, self.source)
        if not mappings:
            logger.info(f"No {self.source} members mapped for gym {self.gym_id}, skipping visits")
            return SyncSummary()

        visits = await self.adapter.fetch_all_visits(options.visit_fetch_options())
        logger.info(f"📥 Fetched {len(visits)} visits from {self.adapter.get_name()}")

        summary = SyncSummary(total=len(visits))
        # Only consulted on dry runs, where nothing is written between checks
        planned: Set[Tuple[str, date, ActivityType]] = set()

        for visit in visits:
            result = await self._sync_visit(visit, mappings, options.dry_run, planned)
            summary.record(result)

        self._warn_on_failure_ratio("visit", summary)
        logger.info(
            f"✅ Visit sync done: {summary.created} created, {summary.skipped} skipped, "
            f"{summary.failed} failed"
        )
        return summary

    async def _sync_visit(
        self,
        visit: ExternalVisit,
        mappings: Dict[str, str],
        dry_run: bool,
        planned: Set[Tuple[str, date, ActivityType]],
    ) -> MemberSyncResult:
        """Writes one visit if it is new; never raises."""
        try:
            member_id = mappings.get(visit.member_external_id)
            if member_id is None:
                logger.debug(f"Orphan visit {visit.external_id} (member {visit.member_external_id})")
                return MemberSyncResult(visit.external_id, SyncAction.SKIPPED)

            activity_type = normalize_visit_type(visit.visit_type)
            key = (member_id, visit.visit_date, activity_type)

            if key in planned or await self.store.activity_exists(*key):
                return MemberSyncResult(visit.external_id, SyncAction.SKIPPED, member_id=member_id)

            if dry_run:
                planned.add(key)
            else:
                await self.store.insert_activity(*key)
            return MemberSyncResult(visit.external_id, SyncAction.CREATED, member_id=member_id)

        except Exception as e:
            self.error_tracker.track_item_error(
                visit.external_id,
                "visit",
                e,
                context={"member_external_id": visit.member_external_id},
            )
            return MemberSyncResult(visit.external_id, SyncAction.FAILED, error=str(e))

    # === Risk ===

    async def calculate_risk_scores(self) -> RiskRecomputeSummary:
        """
        Recompute churn risk for every member of the gym.

        Always a full pass, regardless of which members the last sync touched.

        Returns:
            RiskRecomputeSummary
        """
        rows = await self.store.list_members_for_risk(self.gym_id)
        summary = RiskRecomputeSummary(total=len(rows))
        window_start = date.today() - timedelta(days=self.recent_window_days)
        calculated_at = datetime.now(timezone.utc)

        logger.info(f"📊 Recomputing churn risk for {len(rows)} members of gym {self.gym_id}")

        for row in rows:
            try:
                recent_visits = await self.store.count_recent_activities(row.member_id, window_start)
                result = self.risk_calculator(
                    RiskInput(
                        joined_date=row.joined_date,
                        last_visit_date=row.last_visit_date,
                        visits_last_30_days=recent_visits,
                    )
                )
                await self.store.update_member_risk(
                    row.member_id, result.score, result.level, calculated_at
                )
                summary.updated += 1
            except Exception as e:
                summary.failed += 1
                self.error_tracker.track_item_error(row.member_id, "risk", e)

        logger.info(f"✅ Risk recompute done: {summary.updated} updated, {summary.failed} failed")
        return summary

    # === Full run ===

    async def run(self, options: Optional[SyncOptions] = None) -> FullSyncResult:
        """
        Execute a full sync.

        Workflow:
        1. Sync members (aborts on connectivity failure)
        2. Sync visits, if requested
        3. Recompute risk, if requested and not a dry run
        4. Return results with error tracking

        Args:
            options: Sync options

        Returns:
            FullSyncResult

        Raises:
            SyncConnectionError: If the adapter is unreachable
        """
        options = options or SyncOptions()
        provider = self.source
        self.error_tracker.clear()
        run_status = sync_status.start_sync(provider, self.gym_id, dry_run=options.dry_run)
        phase = "members"

        try:
            # === PHASE 1: Members ===
            run_status.update_phase(SyncPhase.SYNCING_MEMBERS, "Syncing members...")
            members = await self.sync_members(options)
            run_status.update_members(members.total, members.created, members.updated, members.failed)

            # === PHASE 2: Visits ===
            visits = None
            if options.sync_visits:
                phase = "visits"
                run_status.update_phase(SyncPhase.SYNCING_VISITS, "Syncing visits...")
                visits = await self.sync_visits(options)
                run_status.update_visits(visits.total, visits.created, visits.skipped, visits.failed)

            # === PHASE 3: Risk ===
            risk = None
            if options.calculate_risk_scores and not options.dry_run:
                phase = "risk"
                run_status.update_phase(SyncPhase.CALCULATING_RISK, "Recomputing churn risk...")
                risk = await self.calculate_risk_scores()
                run_status.update_risk(risk.updated)

        except Exception as e:
            logger.error(f"❌ Member sync failed during {phase}: {e}", exc_info=True)
            self.error_tracker.track_run_error(phase, e)
            run_status.add_error(str(e))
            run_status.complete_sync(success=False)
            raise

        result = self._build_result(provider, options.dry_run, members, visits, risk)
        for message in result.errors:
            run_status.add_error(message)
        run_status.complete_sync(success=True)
        return result

    def _build_result(
        self,
        provider: str,
        dry_run: bool,
        members: SyncSummary,
        visits: Optional[SyncSummary],
        risk: Optional[RiskRecomputeSummary],
    ) -> FullSyncResult:
        """Builds the final result and its human-readable message."""
        error_messages = self.error_tracker.get_summary().get_error_messages(limit=15)

        result = FullSyncResult(
            provider=provider,
            dry_run=dry_run,
            members=members,
            visits=visits,
            risk=risk,
            errors=error_messages,
        )

        if dry_run:
            result.message = "Dry run completed - no data was saved"
        elif result.has_failures:
            result.message = (
                f"Partial sync completed: {members.created} members created, "
                f"{members.updated} updated, {members.failed} failed"
            )
        else:
            result.message = "Sync completed successfully"

        logger.info(f"✅ {result.message}")
        return result

    def _warn_on_failure_ratio(self, kind: str, summary: SyncSummary) -> None:
        if summary.failure_ratio > FAILURE_WARNING_RATIO:
            logger.warning(
                f"⚠️ {summary.failed} of {summary.total} {kind} items failed "
                f"for {self.source} gym {self.gym_id}"
            )
