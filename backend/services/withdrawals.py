# backend/services/withdrawals.py
from datetime import datetime, date, time, timedelta, timezone
from typing import Optional, List, Dict, Any, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.withdrawal import Withdrawal, WithdrawalKind
from services.errors import ValidationFailure, store_errors

DateLike = Union[datetime, date, str, None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive values are taken to be UTC already
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_bound(value: DateLike, end_of_day: bool = False) -> Optional[datetime]:
    """Turn a date, datetime or ISO string into an aware UTC datetime.

    A date-only upper bound covers the whole day.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            if len(value) == 10:
                value = date.fromisoformat(value)
            else:
                value = datetime.fromisoformat(value)
        except ValueError:
            raise ValidationFailure(f"Bad date format: {value}")
    if isinstance(value, datetime):
        return _as_utc(value)
    return datetime.combine(value, time.max if end_of_day else time.min, tzinfo=timezone.utc)


def day_bounds(now: Optional[datetime] = None):
    now = _as_utc(now or _utcnow())
    start = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def month_bounds(now: Optional[datetime] = None):
    now = _as_utc(now or _utcnow())
    start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(now.year, now.month + 1, 1, tzinfo=timezone.utc)
    return start, end


class WithdrawalStore:
    """Append-only access to the retiradas table.

    Rows are an audit log and are never updated or deleted.
    """

    def __init__(self, db: Session):
        self.db = db

    def list(
        self,
        search: Optional[str] = None,
        date_from: DateLike = None,
        date_to: DateLike = None,
        supervisor: Optional[str] = None,
        destination: Optional[str] = None,
        kind: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Withdrawal]:
        dt_from = parse_bound(date_from)
        dt_to = parse_bound(date_to, end_of_day=True)
        if kind:
            try:
                kind = WithdrawalKind(kind)
            except ValueError:
                raise ValidationFailure(f"Unknown withdrawal kind: {kind}")

        with store_errors(self.db, "list withdrawals"):
            query = self.db.query(Withdrawal)
            if search:
                like = f"%{search}%"
                query = query.filter(or_(Withdrawal.supervisor.ilike(like), Withdrawal.destination.ilike(like)))
            if supervisor:
                query = query.filter(Withdrawal.supervisor.ilike(f"%{supervisor}%"))
            if destination:
                query = query.filter(Withdrawal.destination.ilike(f"%{destination}%"))
            if kind:
                query = query.filter(Withdrawal.kind == kind)
            if dt_from:
                query = query.filter(Withdrawal.created_at >= dt_from)
            if dt_to:
                query = query.filter(Withdrawal.created_at <= dt_to)

            query = query.order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc())
            if limit:
                query = query.limit(limit)
            return query.all()

    def get(self, withdrawal_id: int) -> Optional[Withdrawal]:
        with store_errors(self.db, "fetch withdrawal"):
            return self.db.query(Withdrawal).filter(Withdrawal.id == withdrawal_id).first()

    def create(self, data: Dict[str, Any], commit: bool = True) -> Withdrawal:
        withdrawal = Withdrawal(**data)
        with store_errors(self.db, "create withdrawal"):
            self.db.add(withdrawal)
            self.db.flush()
            if commit:
                self.db.commit()
                self.db.refresh(withdrawal)
        return withdrawal

    def _between(self, start: datetime, end: datetime, kind: Optional[WithdrawalKind]) -> List[Withdrawal]:
        with store_errors(self.db, "list withdrawals by period"):
            query = self.db.query(Withdrawal).filter(
                Withdrawal.created_at >= start, Withdrawal.created_at < end
            )
            if kind:
                query = query.filter(Withdrawal.kind == kind)
            return query.order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc()).all()

    # Period bounds come from the server clock in UTC, not the client's zone
    def list_for_today(self, now: Optional[datetime] = None,
                       kind: Optional[WithdrawalKind] = WithdrawalKind.WITHDRAWAL) -> List[Withdrawal]:
        return self._between(*day_bounds(now), kind)

    def list_for_current_month(self, now: Optional[datetime] = None,
                               kind: Optional[WithdrawalKind] = WithdrawalKind.WITHDRAWAL) -> List[Withdrawal]:
        return self._between(*month_bounds(now), kind)

    def list_most_recent(self, limit: int = 5,
                         kind: Optional[WithdrawalKind] = WithdrawalKind.WITHDRAWAL) -> List[Withdrawal]:
        with store_errors(self.db, "list recent withdrawals"):
            query = self.db.query(Withdrawal)
            if kind:
                query = query.filter(Withdrawal.kind == kind)
            return query.order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc()).limit(limit).all()
