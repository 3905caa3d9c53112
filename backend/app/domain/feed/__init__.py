"""Feed domain exports."""

from .models import CounterField, PostPrivacy  # noqa: F401
from .service import FeedService  # noqa: F401
