# Wiring of the API client, credential storage and session manager
from typing import Optional

import requests

from .api_client import AdminAPIClient
from .config import ClientConfig
from .notifications import Notifier, log_notifier
from .session import SessionManager
from .storage import CredentialStore, FileStorage, MemoryStorage


def create_session_manager(config: ClientConfig, notify: Notifier = log_notifier,
                           storage: Optional[MemoryStorage] = None,
                           http: Optional[requests.Session] = None) -> SessionManager:
    """
    Build a SessionManager around a fresh AdminAPIClient.

    The manager's request and response hooks are registered on the client
    here, so every call made through `manager.api_client` carries the current
    token and ends the session on a 401.
    """
    if storage is None:
        storage = FileStorage(config.credentials_file)

    api_client = AdminAPIClient(config.base_url, timeout=config.timeout, http=http)
    manager = SessionManager(api_client, CredentialStore(storage), notify=notify)
    api_client.add_request_hook(manager.authorize_request)
    api_client.add_response_hook(manager.inspect_response)
    return manager
