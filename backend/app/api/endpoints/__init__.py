# API endpoint routers
from . import health, sync

__all__ = ["health", "sync"]
