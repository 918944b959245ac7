# Business logic services
from .adapter_factory import get_gym_adapter
from .sync_status import SyncPhase, sync_status

__all__ = [
    "get_gym_adapter",
    "SyncPhase",
    "sync_status",
]
