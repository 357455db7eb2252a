"""Admin client for the furniture distribution backend."""
from .api_client import AdminAPIClient, Call
from .bootstrap import create_session_manager
from .config import ClientConfig
from .exceptions import (
    AdminAPIError,
    AuthorizationError,
    ClientRequestError,
    NotFoundError,
    ResponseDecodeError,
    ServerError,
    TransportError,
)
from .schemas import Admin, DashboardStats, Page, ProductDraft
from .session import AdminSession, SessionManager, SessionState, SessionStatus
from .storage import CredentialStore, FileStorage, MemoryStorage

__all__ = [
    "Admin",
    "AdminAPIClient",
    "AdminAPIError",
    "AdminSession",
    "AuthorizationError",
    "Call",
    "ClientConfig",
    "ClientRequestError",
    "CredentialStore",
    "DashboardStats",
    "FileStorage",
    "MemoryStorage",
    "NotFoundError",
    "Page",
    "ProductDraft",
    "ResponseDecodeError",
    "ServerError",
    "SessionManager",
    "SessionState",
    "SessionStatus",
    "TransportError",
    "create_session_manager",
]
