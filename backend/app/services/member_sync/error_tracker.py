"""
Error Tracker for Member Sync Operations.

Tracks per-item and run-level errors with context for debugging.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ItemError:
    """Details about a single member or visit that failed to sync."""
    external_id: str
    kind: str
    error: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RunError:
    """Details about an error that aborted a whole sync phase."""
    phase: str
    error: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ErrorSummary:
    """Summary of all errors during sync."""
    item_errors: List[ItemError]
    run_errors: List[RunError]
    total_item_errors: int
    total_run_errors: int

    def get_error_messages(self, limit: int = 15) -> List[str]:
        """
        Get formatted error messages for API response.

        Run errors come first since they explain why later phases are missing.

        Args:
            limit: Maximum number of error messages to return

        Returns:
            List of formatted error messages
        """
        messages = [f"{err.phase}: {err.error}" for err in self.run_errors]

        for err in self.item_errors:
            if len(messages) >= limit:
                break
            messages.append(f"{err.kind} {err.external_id}: {err.error}")

        return messages[:limit]


class ErrorTracker:
    """
    Tracks errors during member sync operations.

    Item errors are isolated failures (the run continues); run errors are
    aborts of a whole phase.
    """

    def __init__(self):
        """Initialize error tracker."""
        self.item_errors: List[ItemError] = []
        self.run_errors: List[RunError] = []

    def track_item_error(
        self,
        external_id: str,
        kind: str,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Track an individual member/visit error.

        Args:
            external_id: External record id
            kind: Record kind ("member" or "visit")
            error: Exception that occurred
            context: Additional context (e.g., source, gym)
        """
        self.item_errors.append(
            ItemError(
                external_id=external_id,
                kind=kind,
                error=str(error),
                context=context or {},
            )
        )

        logger.error(
            f"❌ Item error: {kind} {external_id}: {error}",
            extra={"external_id": external_id, "kind": kind, "context": context},
        )

    def track_run_error(
        self,
        phase: str,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Track an error that aborted a sync phase.

        Args:
            phase: Phase name (e.g., "members", "visits")
            error: Exception that occurred
            context: Additional context
        """
        self.run_errors.append(RunError(phase=phase, error=str(error), context=context or {}))

        logger.error(
            f"❌ Run error in {phase}: {error}",
            extra={"phase": phase, "context": context},
        )

    def get_summary(self) -> ErrorSummary:
        """
        Get error summary.

        Returns:
            ErrorSummary with all tracked errors
        """
        return ErrorSummary(
            item_errors=list(self.item_errors),
            run_errors=list(self.run_errors),
            total_item_errors=len(self.item_errors),
            total_run_errors=len(self.run_errors),
        )

    def has_errors(self) -> bool:
        """Check if any errors were tracked."""
        return len(self.item_errors) > 0 or len(self.run_errors) > 0

    def clear(self):
        """Clear all tracked errors."""
        self.item_errors.clear()
        self.run_errors.clear()
