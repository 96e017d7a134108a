"""
Managers for Pathwise.

This package contains focused manager classes that handle specific aspects of Pathwise functionality:
- NavigationManager: id lookup and ancestor chains
- RecomputeEngine: Bottom-up progress and status recomputation
- CRUDManager: Mutations that keep the tree consistent
- EventBus: Event-driven architecture for decoupled communication
"""

from pathwise.managers.navigation_manager import NavigationManager
from pathwise.managers.recompute_engine import RecomputeEngine
from pathwise.managers.crud_manager import CRUDManager
from pathwise.managers.events import (
    EventBus,
    Event,
    NodeEvent,
    EventType,
    EventListener,
    get_event_bus,
)

__all__ = [
    "NavigationManager",
    "RecomputeEngine",
    "CRUDManager",
    "EventBus",
    "Event",
    "NodeEvent",
    "EventType",
    "EventListener",
    "get_event_bus",
]
