"""
Event Bus - Decoupled Module Communication
Modules emit events, other modules listen. No direct imports between modules.
"""

from typing import Callable, Dict, List, Any
import logging

logger = logging.getLogger(__name__)


class EventBus:
    """
    Simple event bus for decoupled module communication.
    Modules emit events, other modules register handlers to listen.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, handler: Callable):
        """
        Register a handler for an event.

        Args:
            event_name: Name of the event to listen for
            handler: Callable that receives event_data dict
        """
        self._handlers.setdefault(event_name, []).append(handler)
        logger.debug(f"Registered handler for event '{event_name}': {handler.__name__}")

    def emit(self, event_name: str, event_data: Dict[str, Any] = None):
        """
        Emit an event to all registered handlers.
        A failing handler is logged and does not stop the others.
        """
        if event_data is None:
            event_data = {}

        logger.debug(f"Emitting event '{event_name}' with data: {event_data}")

        for handler in self._handlers.get(event_name, []):
            try:
                handler(event_data)
            except Exception as e:
                logger.error(f"Error in handler {handler.__name__} for event '{event_name}': {e}")

    def clear(self):
        """Clear all handlers (useful for testing)."""
        self._handlers.clear()


# Singleton instance
bus = EventBus()


# =============================================================================
# STANDARD EVENTS
# =============================================================================

# Record store events
EVENT_CONTACT_CREATED = 'contact_created'
EVENT_CONTACT_UPDATED = 'contact_updated'
EVENT_CONTACT_DELETED = 'contact_deleted'
EVENT_TRACK_CREATED = 'track_created'
EVENT_TRACK_UPDATED = 'track_updated'
EVENT_TRACK_DELETED = 'track_deleted'
EVENT_PLAN_CREATED = 'plan_created'
EVENT_PLAN_UPDATED = 'plan_updated'
EVENT_PLAN_DELETED = 'plan_deleted'
EVENT_TASK_TOGGLED = 'task_toggled'
EVENT_LINK_CREATED = 'link_created'
EVENT_LINK_UPDATED = 'link_updated'
EVENT_LINK_DELETED = 'link_deleted'

# AI events
EVENT_PITCH_READY = 'pitch_ready'
EVENT_IMPORT_COMPLETE = 'import_complete'

# Transfer events
EVENT_STORE_EXPORTED = 'store_exported'
EVENT_STORE_RESTORED = 'store_restored'
