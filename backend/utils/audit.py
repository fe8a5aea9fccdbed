# utils/audit.py
import logging
from typing import Optional, Tuple, List

from sqlalchemy.orm import Session

from models.log import Log
from services.errors import StoreFailure, store_errors
from services.withdrawals import parse_bound

logger = logging.getLogger(__name__)


def write_log(db: Session, *, admin_id, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(admin_id=admin_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    with store_errors(db, "write audit log"):
        db.add(entry)
        db.commit()


def log_event(db: Session, **entry) -> bool:
    """Audit an action that is already committed.

    A failed audit insert is logged and reported as False; it never undoes
    or hides the committed action from the caller.
    """
    try:
        write_log(db, **entry)
        return True
    except StoreFailure:
        logger.exception("Audit entry %s/%s was not stored", entry.get("resource"), entry.get("action"))
        return False


def client_ip(request):
    return request.client.host if request is not None and request.client else None


def list_logs(
    db: Session,
    *,
    action: Optional[str] = None,
    resource: Optional[str] = None,
    status: Optional[str] = None,
    admin_id: Optional[int] = None,
    date_from=None,
    date_to=None,
    offset: int = 0,
    limit: int = 20,
) -> Tuple[int, List[Log]]:
    """Filtered audit entries, newest first, with the unpaged total."""
    dt_from = parse_bound(date_from)
    dt_to = parse_bound(date_to, end_of_day=True)

    with store_errors(db, "list audit logs"):
        query = db.query(Log)
        if action:
            query = query.filter(Log.action.ilike(f"%{action}%"))
        if resource:
            query = query.filter(Log.resource.ilike(f"%{resource}%"))
        if status:
            query = query.filter(Log.status == status.upper())
        if admin_id is not None:
            query = query.filter(Log.admin_id == admin_id)
        if dt_from:
            query = query.filter(Log.ts >= dt_from)
        if dt_to:
            query = query.filter(Log.ts <= dt_to)

        total = query.count()
        items = query.order_by(Log.ts.desc(), Log.id.desc()).offset(offset).limit(limit).all()
    return total, items
