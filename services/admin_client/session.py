"""
Session management for the admin client.

SessionManager owns the authentication lifecycle:

    unauthenticated --login--> authenticated
    unauthenticated --restore_session--> restoring --> authenticated | unauthenticated
    authenticated --logout or 401 on an authenticated call--> unauthenticated

It is constructed once at start-up and handed to whatever needs it. Its
authorize_request and inspect_response methods are meant to be registered as
hooks on an AdminAPIClient (see bootstrap.create_session_manager).
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .api_client import AdminAPIClient, Call
from .exceptions import AdminAPIError, NotFoundError
from .notifications import (
    ERROR,
    LOGIN_FAILED,
    LOGIN_SUCCEEDED,
    SESSION_EXPIRED,
    SUCCESS,
    Notifier,
    log_notifier,
)
from .schemas import Admin
from .storage import CredentialStore

logger = logging.getLogger(__name__)


class SessionStatus(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    RESTORING = "restoring"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AdminSession:
    """
    Snapshot of the current session.

    Snapshots are immutable and replaced whole on every transition, so a
    reader never sees a token without its principal or the other way round.
    """
    status: SessionStatus = SessionStatus.UNAUTHENTICATED
    token: Optional[str] = None
    admin: Optional[Admin] = None

    def is_logged_in(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED


@dataclass(frozen=True)
class SessionState:
    """What the view layer may read: status and principal, never the token"""
    status: SessionStatus
    admin: Optional[Admin]


class SessionManager:
    def __init__(self, api_client: AdminAPIClient, credentials: CredentialStore,
                 notify: Notifier = log_notifier):
        self.api_client = api_client
        self.credentials = credentials
        self.notify = notify
        self._session = AdminSession()

    @property
    def session(self) -> AdminSession:
        return self._session

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    @property
    def state(self) -> SessionState:
        return SessionState(status=self._session.status, admin=self._session.admin)

    def login(self, username: str, password: str) -> bool:
        """
        Log in with the given credentials.

        On success the token and principal are persisted and the session
        becomes authenticated. On failure nothing is persisted, the session is
        left as it was and an error notification carries the server's message.
        A credential write that fails on disk counts as a failed login.
        """
        try:
            result = self.api_client.login(username, password)
        except AdminAPIError as e:
            logger.info("Login rejected for %s: %s", username, e.message)
            self.notify(ERROR, e.server_message or LOGIN_FAILED)
            return False

        try:
            self.credentials.write(result.token, result.admin)
        except OSError as e:
            logger.error("Could not persist credentials: %s", e)
            self.notify(ERROR, LOGIN_FAILED)
            return False
        self._session = AdminSession(SessionStatus.AUTHENTICATED, result.token, result.admin)
        logger.info("Admin %s logged in", result.admin.username)
        self.notify(SUCCESS, LOGIN_SUCCEEDED)
        return True

    def validate(self, token: str) -> Optional[Admin]:
        """
        Ask the backend whether `token` is still valid.

        Returns the server's admin record when it is. When the backend has no
        introspection endpoint (404) the persisted admin record is trusted
        instead. Any other failure, 401 included, returns None.
        """
        try:
            return self.api_client.validate_token(token)
        except NotFoundError:
            logger.warning("Token validation endpoint not available, trusting the stored admin record")
            return self.credentials.read_admin()
        except AdminAPIError as e:
            logger.info("Token validation failed: %s", e.message)
            return None

    def logout(self):
        """Forget the session in memory and on disk. Safe to call in any state."""
        if self._session.status is not SessionStatus.UNAUTHENTICATED:
            logger.info("Logging out")
        self.credentials.clear()
        self._session = AdminSession()

    def restore_session(self) -> SessionStatus:
        """Re-establish a persisted session, re-validating its token with the backend."""
        record = self.credentials.read()
        if record is None:
            self._session = AdminSession()
            return self.status

        restoring = AdminSession(SessionStatus.RESTORING, record.token, record.admin)
        self._session = restoring
        admin = self.validate(record.token)
        if self._session is not restoring:
            # A logout or login happened while validating; it wins
            logger.info("Session changed during restore, keeping %s", self.status.value)
            return self.status
        if admin is None:
            self.logout()
            self.notify(ERROR, SESSION_EXPIRED)
            return self.status

        self.credentials.write_admin(admin)
        self._session = AdminSession(SessionStatus.AUTHENTICATED, record.token, admin)
        logger.info("Restored session for %s", admin.username)
        return self.status

    # Hooks for AdminAPIClient

    def authorize_request(self, call: Call, prepared: requests.PreparedRequest):
        """Attach the current bearer token; evaluated just before the request is sent"""
        token = self._session.token
        if call.authenticated and token and "Authorization" not in prepared.headers:
            prepared.headers["Authorization"] = f"Bearer {token}"

    def inspect_response(self, call: Call, response: requests.Response):
        """End the session when the backend rejects an authenticated call"""
        if response.status_code != 401 or not call.authenticated or call.introspection:
            return
        had_session = self._session.token is not None
        logger.warning("%s %s was rejected as unauthorized, ending session", call.method, call.endpoint)
        self.logout()
        if had_session:
            self.notify(ERROR, SESSION_EXPIRED)
