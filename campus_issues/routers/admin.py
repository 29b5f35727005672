# File: campus_issues/routers/admin.py
# Project: campus-issues-backend

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from campus_issues.core.security import AdminSession, admin_login, get_admin_session, require_admin
from campus_issues.schemas.auth import AdminLoginIn, AdminSessionOut

router = APIRouter(prefix="/admin", tags=["admin"])

@router.post("/login", response_model=AdminSessionOut)
def login(body: AdminLoginIn):
    session = admin_login(body.admin_id, body.password)
    if session is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid admin credentials. Please check your Admin ID and password.",
        )
    return AdminSessionOut(
        admin_token=session.encode(),
        subject=session.subject,
        issued_at=session.issued_at,
        expires_at=session.expires_at,
    )

@router.get("/session", response_model=AdminSessionOut)
def current_session(session: AdminSession = Depends(require_admin)):
    return AdminSessionOut(subject=session.subject, issued_at=session.issued_at, expires_at=session.expires_at)

@router.post("/logout")
def logout(session: Optional[AdminSession] = Depends(get_admin_session)):
    # the token is stateless; logging out means the client drops it
    return {"ok": True, "was_admin": session is not None}
