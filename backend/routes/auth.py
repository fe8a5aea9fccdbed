# backend/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.admin import Admin
from schemas import admin as schemas
from services.admins import authenticate, get_admin_by_email
from utils.tokenJWT import create_access_token, get_current_admin
from utils.audit import log_event, client_ip

router = APIRouter(prefix="/auth", tags=["Auth"])


# Authenticate an administrator and issue a JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.AdminLogin, request: Request, db: Session = Depends(get_db)):
    admin = authenticate(db, payload.email, payload.password)

    if not admin:
        known = get_admin_by_email(db, payload.email)
        log_event(db, admin_id=(known.id if known else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": admin.email, "name": admin.name})

    log_event(db, admin_id=admin.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": admin.email})

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


# Current administrator details
@router.get("/me", response_model=schemas.AdminResponse)
def me(current_admin: Admin = Depends(get_current_admin)):
    return current_admin
