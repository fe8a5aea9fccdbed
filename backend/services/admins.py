# backend/services/admins.py
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.admin import Admin
from services.errors import ValidationFailure, store_errors
from utils.hashing import get_password_hash, verify_password


def _norm_email(email: str) -> str:
    return (email or "").strip().lower()


def get_admin_by_email(db: Session, email: str) -> Optional[Admin]:
    with store_errors(db, "fetch admin"):
        return db.query(Admin).filter(func.lower(Admin.email) == _norm_email(email)).first()


def authenticate(db: Session, email: str, password: str) -> Optional[Admin]:
    """Return the admin when the credentials match, else None."""
    admin = get_admin_by_email(db, email)
    if not admin or not verify_password(password, admin.password_hash):
        return None
    return admin


def create_admin(db: Session, email: str, name: str, password: str) -> Admin:
    email = _norm_email(email)
    name = (name or "").strip()
    if not email or not name:
        raise ValidationFailure("Email and name are required")
    if len(password or "") < 8:
        raise ValidationFailure("Password must have at least 8 characters")
    if get_admin_by_email(db, email):
        raise ValidationFailure(f"Admin {email} already exists")

    admin = Admin(email=email, name=name, password_hash=get_password_hash(password))
    with store_errors(db, "create admin"):
        db.add(admin)
        db.commit()
        db.refresh(admin)
    return admin
