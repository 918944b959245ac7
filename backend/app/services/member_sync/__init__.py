# Member sync: reconcile external gym platform records into the member store
from .error_tracker import ErrorSummary, ErrorTracker
from .memory_store import InMemoryMemberStore
from .risk import RiskInput, RiskRecomputeSummary, RiskResult, calculate_churn_risk
from .sqlalchemy_store import SqlAlchemyMemberStore
from .store import MappingConflictError, MemberNotFoundError, MemberStore, StoreError
from .sync_orchestrator import (
    FullSyncResult,
    MemberSyncOrchestrator,
    SyncConnectionError,
    SyncError,
    SyncOptions,
)

__all__ = [
    "ErrorSummary",
    "ErrorTracker",
    "FullSyncResult",
    "InMemoryMemberStore",
    "MappingConflictError",
    "MemberNotFoundError",
    "MemberStore",
    "MemberSyncOrchestrator",
    "RiskInput",
    "RiskRecomputeSummary",
    "RiskResult",
    "SqlAlchemyMemberStore",
    "StoreError",
    "SyncConnectionError",
    "SyncError",
    "SyncOptions",
    "calculate_churn_risk",
]
