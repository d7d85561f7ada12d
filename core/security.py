"""
Security utilities: password hashing, access tokens and audit logging.

Audit events are emitted as structured JSON on the ``security.audit`` logger
so they can be shipped to a SIEM alongside request logs.
"""

import json
import logging
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Set, TypedDict

import bcrypt
import jwt

from core.config import settings

logger = logging.getLogger("security.audit")


# ==================== Passwords ==================== #

def hash_password(password: str) -> str:
    """Hash a password with bcrypt and a fresh salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check ``password`` against a bcrypt hash. Malformed hashes never match."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# ==================== Tokens ==================== #

class JWTPayload(TypedDict, total=False):
    user_id: int
    email: str
    organization_id: Optional[int]
    type: str
    jti: str
    iat: int
    exp: int


def create_access_token(
    user_id: int,
    email: str,
    organization_id: Optional[int] = None,
    expires_delta: Optional[timedelta] = None,
    secret_key: Optional[str] = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: Profile id of the staff member
        email: Login e-mail
        organization_id: Organization the user belonged to at login
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES
        secret_key: Signing key, defaults to JWT_SECRET_KEY

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    payload = {
        "user_id": user_id,
        "email": email,
        "organization_id": organization_id,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(
        payload,
        secret_key or settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def verify_jwt_token(
    token: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> JWTPayload:
    """
    Decode and validate an access token.

    Raises:
        jwt.ExpiredSignatureError: Token has expired
        jwt.InvalidTokenError: Signature, structure or token type is wrong
    """
    payload = jwt.decode(
        token,
        secret_key or settings.jwt_secret_key,
        algorithms=[algorithm or settings.jwt_algorithm],
        options={"require": ["exp", "iat", "user_id"]},
    )
    if payload.get("type") != "access":
        raise jwt.InvalidTokenError("Not an access token")
    return payload


def token_response(user_id: int, email: str, organization_id: Optional[int]) -> dict:
    """Build the token part of an authentication response."""
    return {
        "access_token": create_access_token(user_id, email, organization_id),
        "token_type": "Bearer",
        "expires_in": settings.access_token_expire_minutes * 60,
    }


# ==================== Audit ==================== #

class AuditAction(str, Enum):
    """Audit log action types."""
    VIEW = "VIEW"
    LIST = "LIST"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    STATUS_CHANGE = "STATUS_CHANGE"
    GRANT_ACCESS = "GRANT_ACCESS"
    REVOKE_ACCESS = "REVOKE_ACCESS"
    ASSIGN_ROLE = "ASSIGN_ROLE"
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"


class ResourceType(str, Enum):
    """Resource types for audit logging."""
    JOB = "JOB"
    APPLICATION = "APPLICATION"
    CANDIDATE = "CANDIDATE"
    JOB_ACCESS = "JOB_ACCESS"
    USER = "USER"
    ORGANIZATION = "ORGANIZATION"


# PII fields that should be masked in logs
PII_FIELDS: Set[str] = {
    "email", "candidate_email", "target_email", "phone", "mobile_number",
    "dob", "address", "name", "full_name",
    "current_ctc", "expected_ctc",
}


def mask_pii(data: Any, depth: int = 0) -> Any:
    """
    Recursively mask PII fields in data structures.

    String values keep their first character and length, other values are
    replaced by a marker.
    """
    if depth > 10:
        return "[MAX_DEPTH]"

    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if str(key).lower() in PII_FIELDS:
                if isinstance(value, str) and len(value) > 0:
                    masked[key] = f"{value[0]}***[{len(value)}]"
                else:
                    masked[key] = "[MASKED]"
            else:
                masked[key] = mask_pii(value, depth + 1)
        return masked
    elif isinstance(data, list):
        return [mask_pii(item, depth + 1) for item in data[:5]]
    else:
        return data


def log_audit_event(
    action: AuditAction,
    resource_type: ResourceType,
    resource_id: Optional[Any] = None,
    user_id: Optional[int] = None,
    organization_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None,
) -> dict:
    """
    Log an audit event for compliance tracking.

    Returns the emitted event so callers and tests can inspect it.
    """
    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": "AUDIT",
        "action": action.value,
        "resource_type": resource_type.value,
        "resource_id": str(resource_id) if resource_id is not None else None,
        "user_id": user_id,
        "organization_id": organization_id,
        "details": mask_pii(details) if details else None,
    }
    logger.info(json.dumps(event, default=str))
    return event
