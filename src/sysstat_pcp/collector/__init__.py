"""psutil-based collectors filling activity buffers."""

from .base import BaseCollector
from .manager import COLLECTORS, CollectorManager

__all__ = ["COLLECTORS", "BaseCollector", "CollectorManager"]
