import logging
from typing import Optional, Any, Dict

from django.contrib.auth import get_user_model
from django.db import transaction

from core.models import AuditEvent

User = get_user_model()
logger = logging.getLogger(__name__)


def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[Any]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    return AuditEvent.objects.create(
        user=user if isinstance(user, User) and getattr(user, 'id', None) else None,
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
    )


def try_log_action(**kwargs) -> Optional[AuditEvent]:
    """Audit without ever breaking the caller; failures are logged.

    The write runs in its own savepoint so a database error here does not
    mark the caller's transaction for rollback.
    """
    try:
        with transaction.atomic():
            return log_action(**kwargs)
    except Exception:
        logger.exception('Audit write failed for action %s', kwargs.get('action'))
        return None
