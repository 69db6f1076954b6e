"""Session context: the current sign-in, handed to whoever needs it.

Consumers receive a SessionContext explicitly and subscribe to changes;
there is no module-level "current user".
"""

import enum
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

logger = logging.getLogger("servicefinder.client")


class AuthEvent(str, enum.Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class AuthSession:
    token: str
    user_id: uuid.UUID
    email: str
    role: str
    expires_at: datetime | None = None


Listener = Callable[[AuthEvent, "AuthSession | None"], None]


class Subscription:
    """Handle returned by SessionContext.subscribe."""

    def __init__(self, context: "SessionContext", listener: Listener):
        self._context = context
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._context._remove(self._listener)
            self.active = False


class SessionContext:
    def __init__(self, session: AuthSession | None = None):
        self._session = session
        self._listeners: list[Listener] = []

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def user_id(self) -> uuid.UUID | None:
        return self._session.user_id if self._session else None

    @property
    def token(self) -> str | None:
        return self._session.token if self._session else None

    def subscribe(self, listener: Listener) -> Subscription:
        """Register ``listener`` and immediately replay the current session to it."""
        self._listeners.append(listener)
        listener(AuthEvent.INITIAL_SESSION, self._session)
        return Subscription(self, listener)

    def _remove(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def set_session(self, session: AuthSession | None) -> None:
        """Replace the current session and notify listeners."""
        if session is None and self._session is None:
            return
        self._session = session
        event = AuthEvent.SIGNED_IN if session is not None else AuthEvent.SIGNED_OUT
        logger.debug("Auth state change event=%s listeners=%d", event.value, len(self._listeners))
        for listener in list(self._listeners):
            listener(event, session)
