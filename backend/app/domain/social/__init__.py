"""Social domain exports."""

from . import audit, policy, service  # noqa: F401
from .models import ConnectionStatus, NotificationType, ReferenceType  # noqa: F401
from .notifications import NotificationService  # noqa: F401
from .service import ConnectionService  # noqa: F401
