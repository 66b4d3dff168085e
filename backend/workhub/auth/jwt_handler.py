"""
JWT token handling for staff and client-portal sessions.

Provides utilities for creating and decoding signed tokens carrying user,
tenant and role claims, and for hashing portal access codes.
"""
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
from uuid import UUID

# Configuration
SECRET_KEY = os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24 hours default
PORTAL_TOKEN_EXPIRE_HOURS = int(os.getenv("PORTAL_TOKEN_EXPIRE_HOURS", "24"))

ACCESS_TOKEN_TYPE = "access"
PORTAL_TOKEN_TYPE = "portal"

# Access code hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class JWTHandler:
    """JWT token handler for authentication."""

    @staticmethod
    def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a JWT access token.

        Args:
            data: Token payload data
            expires_delta: Token expiration delta

        Returns:
            str: Encoded JWT token
        """
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

    @staticmethod
    def verify_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> Optional[Dict[str, Any]]:
        """
        Verify and decode a JWT token of the expected type.

        Args:
            token: JWT token to verify
            token_type: Required value of the "type" claim

        Returns:
            Optional[Dict[str, Any]]: Token payload if valid, None if invalid or expired
        """
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError:
            return None
        if payload.get("type") != token_type:
            return None
        return payload

    @staticmethod
    def create_user_token(user_id: UUID, tenant_id: Optional[UUID], role: str,
                          expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a staff session token.

        Args:
            user_id: User ID
            tenant_id: Company ID, None for a superadmin without company
            role: User role
            expires_delta: Optional expiration override

        Returns:
            str: JWT token
        """
        data = {
            "sub": str(user_id),
            "tenant_id": str(tenant_id) if tenant_id else None,
            "role": role,
            "type": ACCESS_TOKEN_TYPE
        }
        return JWTHandler.create_access_token(data, expires_delta)

    @staticmethod
    def create_portal_token(contact_id: UUID, client_id: UUID, name: str,
                            expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a client-portal session token with a fixed lifetime.

        Args:
            contact_id: Client contact ID
            client_id: Client ID the contact belongs to
            name: Contact display name
            expires_delta: Optional expiration override, 24 hours by default

        Returns:
            str: JWT token
        """
        data = {
            "sub": str(contact_id),
            "client_id": str(client_id),
            "name": name,
            "role": "CLIENT",
            "type": PORTAL_TOKEN_TYPE,
            "iat": datetime.now(timezone.utc),
        }
        return JWTHandler.create_access_token(
            data, expires_delta or timedelta(hours=PORTAL_TOKEN_EXPIRE_HOURS)
        )


class AccessCodeHandler:
    """Hashing for client-portal access codes."""

    @staticmethod
    def hash_code(code: str) -> str:
        return pwd_context.hash(code)

    @staticmethod
    def verify_code(plain_code: str, hashed_code: str) -> bool:
        return pwd_context.verify(plain_code, hashed_code)

    @staticmethod
    def generate_code(length: int = 8) -> str:
        """Random alphanumeric access code to hand to a client contact."""
        alphabet = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
        return "".join(secrets.choice(alphabet) for _ in range(length))
