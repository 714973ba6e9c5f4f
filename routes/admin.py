from fastapi import APIRouter, Depends, HTTPException, Header
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
import jwt

from database.connection import get_db
from models.admin import Admin, Role
from schemas.admin import AdminRegister, AdminLogin
from utils.auth import create_admin_token, verify_admin_token
from utils.permissions import is_super_admin

router = APIRouter()


def serialize_admin(admin: Admin) -> dict:
    return {
        "id": admin.id,
        "name": admin.name,
        "email": admin.email,
        "institution": admin.institution,
        "role": admin.role.value,
        "created_at": admin.created_at.isoformat() if admin.created_at else None
    }


def get_current_admin(authorization: Optional[str] = Header(None), db: Session = Depends(get_db)) -> Admin:
    """
    Dependency to verify JWT admin token and return the authenticated admin
    Validates token signature, expiration, admin existence and role
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Authentication error: No token provided.")

    # Remove "Bearer " prefix if present
    token = authorization.replace("Bearer ", "").strip()

    try:
        payload = verify_admin_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Authentication error: Token has expired.")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Authentication error: Invalid token.")

    if not payload:
        raise HTTPException(status_code=401, detail="Authentication error: Invalid token type.")

    admin = db.query(Admin).filter(Admin.id == payload.get("admin_id")).first()
    if not admin:
        raise HTTPException(status_code=401, detail="Authentication error: Admin not found.")

    # A demoted admin must not keep the rights of an older token
    if admin.role.value != payload.get("role"):
        raise HTTPException(status_code=401, detail="Authentication error: Role changed, please login again.")

    return admin


def require_super_admin(admin: Admin = Depends(get_current_admin)) -> Admin:
    if not is_super_admin(admin):
        raise HTTPException(status_code=403, detail="Access denied. You do not have the required permissions.")
    return admin


@router.post("/admin/register", status_code=201)
def register_admin(data: AdminRegister, db: Session = Depends(get_db)):
    """
    Register an event admin
    Super admins are only created with the seed script
    """
    existing = db.query(Admin).filter(Admin.email == data.email).first()
    if existing:
        raise HTTPException(409, "An admin with this email already exists.")

    admin = Admin(
        name=data.name,
        email=data.email,
        password_hash=Admin.hash_password(data.password),
        institution=data.institution,
        role=Role.EVENT_ADMIN
    )
    db.add(admin)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "An admin with this email already exists.")
    db.refresh(admin)

    return {"message": "Admin registered successfully.", "adminId": admin.id}


@router.post("/admin/login")
def admin_login(credentials: AdminLogin, db: Session = Depends(get_db)):
    """
    Admin login endpoint with JWT token generation
    Returns the same message for unknown emails and wrong passwords
    """
    admin = db.query(Admin).filter(Admin.email == credentials.email).first()

    if not admin or not admin.verify_password(credentials.password):
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    token = create_admin_token(admin.id, admin.role.value)

    return {
        "success": True,
        "token": token,
        "role": admin.role.value,
        "admin_id": admin.id,
        "message": "Login successful"
    }


@router.get("/admin")
def list_admins(db: Session = Depends(get_db), admin: Admin = Depends(require_super_admin)):
    """List all admins (super admin only)"""
    admins = db.query(Admin).order_by(Admin.created_at.desc(), Admin.id.desc()).all()
    return {"admins": [serialize_admin(a) for a in admins]}


@router.get("/admin/profile")
def get_admin_profile(admin: Admin = Depends(get_current_admin)):
    return serialize_admin(admin)
