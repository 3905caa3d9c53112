"""Chat domain exports."""

from .models import ConversationKey
from .service import ConversationService

__all__ = [
	"ConversationKey",
	"ConversationService",
]
