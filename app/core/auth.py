# app/core/auth.py
import secrets
import uuid
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session, select

from app.core.calendar import is_valid_timezone
from app.core.config import get_settings
from app.database import get_session
from app.models.user import CLIENT, COACH, User

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header does not raise here,
#   require_auth decides what an anonymous request may do.
bearer_scheme = HTTPBearer(auto_error=False)

# No 0/O or 1/I so codes can be read aloud
COACH_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
COACH_CODE_LENGTH = 6


def generate_coach_code() -> str:
    return "".join(secrets.choice(COACH_CODE_ALPHABET) for _ in range(COACH_CODE_LENGTH))


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def _default_name_from_email(email: str) -> str:
    if "@" in email:
        return email.split("@", 1)[0][:50]
    return email[:50]


def _provision_user(session: Session, sub_uuid: uuid.UUID, payload: dict[str, Any]) -> User:
    """
    Just-in-time profile for a verified identity seen for the first time.

    user_metadata.role == "coach" provisions a coach (acting as coach,
    with a coach code); everyone else starts as a client.
    """
    email = payload["email"]
    metadata = payload.get("user_metadata") or {}
    is_coach = str(metadata.get("role", "")).lower() == "coach"
    tz = metadata.get("timezone")

    user = User(
        id=sub_uuid,
        email=email,
        name=(metadata.get("name") or _default_name_from_email(email))[:50],
        is_coach=is_coach,
        is_client=not is_coach,
        active_role=COACH if is_coach else CLIENT,
        timezone=tz if is_valid_timezone(tz) else None,
        coach_code=generate_coach_code() if is_coach else None,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from a Supabase JWT.

    Flow:
      1. If no Authorization header => anonymous => return None.
      2. Decode JWT => extract 'sub' (auth user id) and 'email'.
      3. Convert 'sub' to UUID to match User.id type.
      4. Find user profile in public.users.
      5. If missing, auto-provision a profile.

    Raises:
        HTTPException(401): if token is malformed or missing required claims.
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    email = payload.get("email")

    if not sub or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub/email",
        )

    try:
        sub_uuid = uuid.UUID(sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid sub in token",
        )

    user = session.exec(select(User).where(User.id == sub_uuid)).first()
    if user is None:
        user = _provision_user(session, sub_uuid, payload)

    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): if user is None.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_client(user: User = Depends(require_auth)) -> User:
    """
    Only users currently acting as a client.

    Use this for:
      - submitting / deleting check-ins
      - connecting to or leaving a coach
    """
    if user.active_role != CLIENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Client access required",
        )
    return user


def require_coach(user: User = Depends(require_auth)) -> User:
    """
    Only users currently acting as a coach (inbox, roster management).
    """
    if user.active_role != COACH or not user.is_coach:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Coach access required",
        )
    return user
