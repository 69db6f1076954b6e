"""Authentication: signup, login, logout, session lookup, get_current_user.

Session-based auth with bcrypt password hashing and opaque tokens.
All auth events logged to audit.
"""

import secrets
from datetime import datetime, timedelta, timezone

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from servicefinder.config import settings
from servicefinder.dependencies import get_db
from servicefinder.models.profile import AccountRole, Profile
from servicefinder.models.provider import ServiceProvider
from servicefinder.models.session import Session
from servicefinder.models.user import User, UserStatus
from servicefinder.schemas.user import ProviderSignup, SeekerSignup, SessionRead
from servicefinder.services import audit_service

SESSION_TOKEN_HEADER = "X-Session-Token"


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def _generate_token() -> str:
    """Generate a cryptographically secure session token."""
    return secrets.token_hex(32)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def register_user(
    db: AsyncSession,
    signup: SeekerSignup | ProviderSignup,
    *,
    ip_address: str | None = None,
) -> User:
    """Create the login identity, its profile and, for providers, the listing.

    Raises HTTPException 409 if the email is taken.
    """
    email = str(signup.email).lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    user = User(
        email=email,
        password_hash=hash_password(signup.password),
        status=UserStatus.active,
    )
    db.add(user)
    await db.flush()

    role = AccountRole(signup.role)
    profile = Profile(
        id=user.id,
        email=email,
        role=role,
        contact_number=signup.contact_number,
        place=signup.place if isinstance(signup, SeekerSignup) else None,
    )
    db.add(profile)
    await db.flush()

    if isinstance(signup, ProviderSignup):
        db.add(
            ServiceProvider(
                user_id=user.id,
                skills=list(signup.skills),
                locations=list(signup.locations),
                rating=0.0,
                availability=signup.availability,
            )
        )
        await db.flush()

    await audit_service.log_event(
        db,
        user_id=user.id,
        event_type="auth.signup",
        entity_type="User",
        entity_id=user.id,
        action="signup",
        detail={"email": email, "role": role.value},
        ip_address=ip_address,
    )

    return user


async def login_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    ip_address: str | None = None,
) -> tuple[User, Session]:
    """Authenticate user, create session, return (user, session).

    Raises HTTPException on invalid credentials or inactive account.
    """
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if user.status != UserStatus.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active",
        )

    session = Session(
        user_id=user.id,
        token=_generate_token(),
        expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.session_duration_hours),
    )
    db.add(session)
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=user.id,
        event_type="auth.login",
        entity_type="Session",
        entity_id=session.id,
        action="login",
        ip_address=ip_address,
    )

    return user, session


async def logout_user(
    db: AsyncSession,
    *,
    token: str,
    ip_address: str | None = None,
) -> None:
    """Revoke a session token. Unknown or already revoked tokens are a no-op."""
    result = await db.execute(select(Session).where(Session.token == token))
    session = result.scalar_one_or_none()
    if session is None or session.revoked:
        return

    session.revoked = True
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=session.user_id,
        event_type="auth.logout",
        entity_type="Session",
        entity_id=session.id,
        action="logout",
        ip_address=ip_address,
    )


async def _resolve_session(db: AsyncSession, token: str | None) -> tuple[Session, User] | str:
    """Return (session, user) for a live token, or the reason it was rejected."""
    if not token:
        return "Authentication required"

    result = await db.execute(select(Session).where(Session.token == token))
    session = result.scalar_one_or_none()
    if session is None or session.revoked:
        return "Invalid or revoked session"

    if _as_utc(session.expires_at) < datetime.now(timezone.utc):
        return "Session expired"

    result = await db.execute(select(User).where(User.id == session.user_id))
    user = result.scalar_one_or_none()
    if user is None or user.status != UserStatus.active:
        return "User not found or inactive"

    return session, user


async def get_session(db: AsyncSession, token: str | None) -> SessionRead | None:
    """Summarize the session behind ``token``; None when it is not usable."""
    resolved = await _resolve_session(db, token)
    if isinstance(resolved, str):
        return None
    session, user = resolved

    result = await db.execute(select(Profile.role).where(Profile.id == user.id))
    role = result.scalar_one_or_none()
    return SessionRead(
        user_id=user.id,
        email=user.email,
        role=role.value if role is not None else "",
        expires_at=_as_utc(session.expires_at),
    )


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """FastAPI dependency: extract and validate the session token, return current user.

    Raises HTTPException 401 if token is missing, invalid, expired, or revoked.
    """
    resolved = await _resolve_session(db, request.headers.get(SESSION_TOKEN_HEADER))
    if isinstance(resolved, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=resolved,
        )
    _, user = resolved
    request.state.user_id = str(user.id)
    return user
