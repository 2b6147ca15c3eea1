"""Event system: bus and event types for style lifecycle notifications."""

from stylescope.events.bus import EventBus
from stylescope.events.types import StyleRegistered, StyleUnregistered

__all__ = ["EventBus", "StyleRegistered", "StyleUnregistered"]
