"""Real-time chat moderation decision engine."""
from .domain.moderation.models import ActionType, ChatMessage, ModAction, QueueItem, QueueItemType
from .engine import ModerationEngine
from .errors import EngineError, NotFoundError, ValidationError

__version__ = "0.1.0"

__all__ = [
    "ModerationEngine",
    "ChatMessage", "ModAction", "QueueItem", "ActionType", "QueueItemType",
    "EngineError", "ValidationError", "NotFoundError",
]
