import pytest
import requests

from services.admin_client.bootstrap import create_session_manager
from services.admin_client.config import ClientConfig
from services.admin_client.storage import CredentialStore, MemoryStorage

from .fake_remote_api import ADMIN_PASSWORD, ADMIN_USERNAME, create_app
from .transport import FlaskAdapter

BASE_URL = "http://admin.test/api"


class NotificationLog:
    def __init__(self):
        self.entries = []

    def __call__(self, level, message):
        self.entries.append((level, message))

    @property
    def messages(self):
        return [message for _, message in self.entries]


@pytest.fixture
def fake_api():
    app, backend = create_app()
    return app, backend


@pytest.fixture
def backend(fake_api):
    return fake_api[1]


@pytest.fixture
def http(fake_api):
    session = requests.Session()
    session.mount("http://admin.test", FlaskAdapter(fake_api[0]))
    return session


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def notifications():
    return NotificationLog()


@pytest.fixture
def config(tmp_path):
    return ClientConfig(base_url=BASE_URL, timeout=5.0,
                        credentials_file=str(tmp_path / "credentials.json"))


@pytest.fixture
def manager(config, storage, notifications, http):
    return create_session_manager(config, notify=notifications, storage=storage, http=http)


@pytest.fixture
def api_client(manager):
    return manager.api_client


@pytest.fixture
def logged_in(manager, notifications):
    assert manager.login(ADMIN_USERNAME, ADMIN_PASSWORD)
    notifications.entries.clear()
    return manager


@pytest.fixture
def credentials(storage):
    return CredentialStore(storage)
