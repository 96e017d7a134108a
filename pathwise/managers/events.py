"""
Event system for Pathwise.

Lets a host application react to mutations (persist, refresh a view,
celebrate a finished chapter) without the engine knowing about it.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pathwise.logging_config import get_logger
from pathwise.utils import utc_now

logger = get_logger(__name__)


class EventType(str, Enum):
    """Types of events in Pathwise."""
    NODE_CREATED = "node.created"
    NODE_UPDATED = "node.updated"
    NODE_RENAMED = "node.renamed"
    NODE_DELETED = "node.deleted"
    NODE_COMPLETED = "node.completed"
    TREE_RECOMPUTED = "tree.recomputed"


@dataclass
class Event:
    """Base event class."""
    type: EventType
    timestamp: datetime = field(default_factory=utc_now)
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class NodeEvent(Event):
    """Event for node-related changes."""
    node_id: str = ""
    node_kind: str = ""
    node_name: str = ""
    status: str = ""
    progress: float = 0.0
    parent_id: Optional[str] = None


class EventListener(ABC):
    """Base class for event listeners."""

    @abstractmethod
    def handle(self, event: Event) -> None:
        """Handle an event.

        Args:
            event: The event to handle.
        """
        pass

    @property
    @abstractmethod
    def subscribed_events(self) -> List[EventType]:
        """Return list of event types this listener subscribes to."""
        pass


class EventBus:
    """
    Publishes events to subscribed listeners.

    Listeners run synchronously in subscription order. A failing listener is
    logged and does not stop the others or the mutation that raised the event.
    """

    def __init__(self) -> None:
        self._listeners: Dict[EventType, List[EventListener]] = {}

    def subscribe(self, listener: EventListener) -> None:
        """Subscribe a listener to events.

        Args:
            listener: The listener to subscribe.
        """
        for event_type in listener.subscribed_events:
            self._listeners.setdefault(event_type, []).append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        """Unsubscribe a listener from all events.

        Args:
            listener: The listener to unsubscribe.
        """
        for listeners in self._listeners.values():
            if listener in listeners:
                listeners.remove(listener)

    def publish(self, event: Event) -> None:
        """Publish an event to all subscribed listeners.

        Args:
            event: The event to publish.
        """
        for listener in list(self._listeners.get(event.type, [])):
            try:
                listener.handle(event)
            except Exception:
                logger.warning(
                    "Listener %s failed on %s",
                    listener.__class__.__name__,
                    event.type.value,
                    exc_info=True,
                )

    def clear(self) -> None:
        """Clear all listeners (useful for testing)."""
        self._listeners.clear()


_event_bus_instance: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """Get the shared event bus instance."""
    global _event_bus_instance
    if _event_bus_instance is None:
        _event_bus_instance = EventBus()
    return _event_bus_instance

