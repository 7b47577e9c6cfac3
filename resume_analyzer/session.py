"""Per-request session state.

A SessionContext starts out pending, is resolved once the request's
credentials have been checked, and then only changes on sign in or sign out.
Views get it through FastAPI dependency injection.
"""
import logging
from enum import Enum
from typing import Callable, List, Optional

from resume_analyzer.models import UserProfile

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    PENDING = "pending"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class SessionContext:
    def __init__(self):
        self.state = SessionState.PENDING
        self.user: Optional[dict] = None
        self.profile: Optional[UserProfile] = None
        self.token: Optional[str] = None
        self._listeners: List[Callable[["SessionContext"], None]] = []

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    @property
    def uid(self) -> Optional[str]:
        return self.user['uid'] if self.user else None

    def subscribe(self, listener: Callable[["SessionContext"], None]) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def restore(self, user: Optional[dict], profile: Optional[UserProfile] = None, token: str = None):
        """Resolve the pending session from stored credentials (or their absence)."""
        if user is None:
            self._transition(SessionState.ANONYMOUS, None, None, None)
        else:
            self._transition(SessionState.AUTHENTICATED, user, profile, token)

    def sign_in(self, user: dict, profile: Optional[UserProfile] = None, token: str = None):
        self._transition(SessionState.AUTHENTICATED, user, profile, token)

    def sign_out(self):
        self._transition(SessionState.ANONYMOUS, None, None, None)

    def _transition(self, state: SessionState, user, profile, token):
        same_user = (self.uid == (user['uid'] if user else None))
        changed = state != self.state or not same_user
        self.state = state
        self.user = user
        self.profile = profile
        self.token = token
        if not changed:
            return
        logger.debug("Session is now %s (%s)", state.value, self.uid)
        for listener in list(self._listeners):
            listener(self)
