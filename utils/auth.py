"""
Authentication utilities for JWT token generation and password hashing
Implements token-based admin authentication with expiration
"""
import jwt
import os
import bcrypt
from datetime import datetime, timedelta
from typing import Optional, Dict, Any


# Secret key for JWT - MUST be set in environment variables for production
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", 8))

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with automatic salt generation
    The work factor is configurable through BCRYPT_ROUNDS
    """
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against stored bcrypt hash
    Returns True if password matches, False otherwise (including malformed hashes)
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_admin_token(admin_id: int, role: str) -> str:
    """
    Create a JWT token for an authenticated admin

    Args:
        admin_id: Id of the admin
        role: Role value of the admin (event_admin or super_admin)

    Returns:
        Encoded JWT token string

    Token includes:
        - admin_id: For admin identification
        - role: Checked again against the stored admin on every request
        - exp: Expiration timestamp
        - iat: Issued at timestamp
        - type: Token type identifier
    """
    payload = {
        "admin_id": admin_id,
        "role": role,
        "exp": datetime.utcnow() + timedelta(hours=JWT_EXPIRATION_HOURS),
        "iat": datetime.utcnow(),
        "type": "admin"
    }

    token = jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)
    return token


def verify_admin_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode an admin JWT token

    Args:
        token: JWT token string to verify

    Returns:
        Dict with admin_id and role if valid, None if the token is not an admin token

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid
    """
    payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])

    # Verify token type
    if payload.get("type") != "admin":
        return None

    return {
        "admin_id": payload.get("admin_id"),
        "role": payload.get("role")
    }
