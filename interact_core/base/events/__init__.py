"""Event bus package: the ``EventBus`` type and the channel names."""

from . import channels
from .bus import EventBus, Handler, Unsubscribe

__all__ = ["EventBus", "Handler", "Unsubscribe", "channels"]
