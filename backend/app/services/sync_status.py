"""
Real-time Sync Status Tracking.
Allows monitoring of member sync progress via API.

Runs for different gyms or providers may overlap, so progress is kept
per (gym_id, provider). Without a key, the most recently started run
is reported.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

RunKey = Tuple[str, str]


class SyncPhase(str, Enum):
    """Sync phases."""
    IDLE = "idle"
    SYNCING_MEMBERS = "syncing_members"
    SYNCING_VISITS = "syncing_visits"
    CALCULATING_RISK = "calculating_risk"
    COMPLETED = "completed"
    ERROR = "error"


def _empty_progress() -> Dict[str, Any]:
    return {
        "members_fetched": 0,
        "members_created": 0,
        "members_updated": 0,
        "members_failed": 0,
        "visits_fetched": 0,
        "visits_created": 0,
        "visits_skipped": 0,
        "visits_failed": 0,
        "risk_updated": 0,
    }


def _idle_status(provider: Optional[str] = None, gym_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "phase": SyncPhase.IDLE,
        "provider": provider,
        "gym_id": gym_id,
        "dry_run": False,
        "started_at": None,
        "current_step": "Waiting to start...",
        "progress": _empty_progress(),
        "errors": [],
        "completed_at": None,
        "duration_seconds": 0,
    }


class SyncRunStatus:
    """Progress of one run for one gym and provider."""

    def __init__(self, provider: str, gym_id: str, dry_run: bool = False):
        self.status = _idle_status(provider, gym_id)
        self.status.update({
            "phase": SyncPhase.SYNCING_MEMBERS,
            "dry_run": dry_run,
            "started_at": datetime.now(timezone.utc).isoformat(),
            "current_step": f"Starting {provider} member sync...",
        })

    @property
    def key(self) -> RunKey:
        return (self.status["gym_id"], self.status["provider"])

    def update_phase(self, phase: SyncPhase, step: str):
        """Update current phase."""
        self.status["phase"] = phase
        self.status["current_step"] = step
        logger.info(f"📍 PHASE: {phase.value.upper()} - {step} (gym {self.status['gym_id']})")

    def update_members(self, fetched: int, created: int, updated: int, failed: int):
        """Record member sync counters."""
        progress = self.status["progress"]
        progress["members_fetched"] = fetched
        progress["members_created"] = created
        progress["members_updated"] = updated
        progress["members_failed"] = failed
        logger.info(f"👥 MEMBERS: {fetched} fetched - Created: {created}, Updated: {updated}, Failed: {failed}")

    def update_visits(self, fetched: int, created: int, skipped: int, failed: int):
        """Record visit sync counters."""
        progress = self.status["progress"]
        progress["visits_fetched"] = fetched
        progress["visits_created"] = created
        progress["visits_skipped"] = skipped
        progress["visits_failed"] = failed
        logger.info(f"📅 VISITS: {fetched} fetched - Created: {created}, Skipped: {skipped}, Failed: {failed}")

    def update_risk(self, updated: int):
        """Record risk recompute counters."""
        self.status["progress"]["risk_updated"] = updated

    def add_error(self, error: str):
        """Add error to tracking."""
        self.status["errors"].append({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "error": error,
        })

    def complete_sync(self, success: bool = True):
        """Mark sync as completed."""
        self.status["phase"] = SyncPhase.COMPLETED if success else SyncPhase.ERROR
        self.status["completed_at"] = datetime.now(timezone.utc).isoformat()

        start = datetime.fromisoformat(self.status["started_at"])
        end = datetime.fromisoformat(self.status["completed_at"])
        self.status["duration_seconds"] = (end - start).total_seconds()

        if success:
            self.status["current_step"] = "✅ Sync completed successfully!"
            logger.info(f"✅ SYNC COMPLETED - Duration: {self.status['duration_seconds']:.1f}s")
        else:
            self.status["current_step"] = "❌ Sync failed with errors"
            logger.error(f"❌ SYNC FAILED - {self.status['provider']} for gym {self.status['gym_id']}")

    def get_status(self) -> Dict[str, Any]:
        """Get a copy of this run's status."""
        status = self.status.copy()
        status["progress"] = dict(self.status["progress"])
        status["errors"] = list(self.status["errors"])
        return status

    def is_running(self) -> bool:
        """Check if this run is still in progress."""
        return self.status["phase"] not in [SyncPhase.IDLE, SyncPhase.COMPLETED, SyncPhase.ERROR]


class SyncStatusTracker:
    """
    Singleton to track sync status across requests.

    Holds the latest run per (gym_id, provider) in this process.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize status tracking."""
        self._runs: Dict[RunKey, SyncRunStatus] = {}
        self._latest: Optional[RunKey] = None

    def reset(self):
        """Forget every run (used between tests)."""
        self._initialize()

    def start_sync(self, provider: str, gym_id: str, dry_run: bool = False) -> SyncRunStatus:
        """Mark sync as started and return the run's status handle."""
        run = SyncRunStatus(provider, gym_id, dry_run=dry_run)
        # Keep insertion order equal to start order
        self._runs.pop(run.key, None)
        self._runs[run.key] = run
        self._latest = run.key
        logger.info(f"🚀 SYNC STARTED - {provider} for gym {gym_id}{' (dry run)' if dry_run else ''}")
        return run

    def _find(self, gym_id: Optional[str], provider: Optional[str]) -> Optional[SyncRunStatus]:
        if gym_id is None and provider is None:
            return self._runs.get(self._latest) if self._latest else None
        # Latest matching run when only one of the two is given
        for key in reversed(list(self._runs)):
            if gym_id not in (None, key[0]) or provider not in (None, key[1]):
                continue
            return self._runs[key]
        return None

    def get_status(self, gym_id: Optional[str] = None, provider: Optional[str] = None) -> Dict[str, Any]:
        """
        Get current status.

        Args:
            gym_id: Restrict to runs of this gym
            provider: Restrict to runs of this provider

        Returns:
            Status of the matching run, or an idle status when there is none
        """
        run = self._find(gym_id, provider)
        if run is None:
            return _idle_status(provider, gym_id)
        return run.get_status()

    def is_running(self, gym_id: Optional[str] = None, provider: Optional[str] = None) -> bool:
        """Check if the matching run is in progress."""
        run = self._find(gym_id, provider)
        return run is not None and run.is_running()

    def list_runs(self) -> List[Dict[str, Any]]:
        """Status of every tracked run, oldest start first."""
        return [run.get_status() for run in self._runs.values()]


# Singleton instance
sync_status = SyncStatusTracker()
