from promptforge.models.base import Base
from promptforge.models.conversation import Conversation, ConversationMessage
from promptforge.models.history import HistoryItem
from promptforge.models.prompt import SavedPrompt

__all__ = [
    "Base",
    "Conversation",
    "ConversationMessage",
    "HistoryItem",
    "SavedPrompt",
]
