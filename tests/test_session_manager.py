import json

import pytest

from services.admin_client.exceptions import AuthorizationError
from services.admin_client.notifications import ERROR, LOGIN_SUCCEEDED, SESSION_EXPIRED, SUCCESS
from services.admin_client.schemas import Admin
from services.admin_client.session import SessionStatus
from services.admin_client.storage import ADMIN_KEY, TOKEN_KEY

from .fake_remote_api import ADMIN_PASSWORD, ADMIN_USERNAME
from .transport import RefusingAdapter


def persist(storage, token, admin_payload):
    storage.set_item(TOKEN_KEY, token)
    storage.set_item(ADMIN_KEY, json.dumps(admin_payload))


def test_login_success_authenticates_and_persists(manager, storage, backend, notifications):
    assert manager.login(ADMIN_USERNAME, ADMIN_PASSWORD) is True

    session = manager.session
    assert session.status is SessionStatus.AUTHENTICATED
    assert session.token in backend.tokens
    assert session.admin.username == ADMIN_USERNAME
    assert storage.get_item(TOKEN_KEY) == session.token
    assert json.loads(storage.get_item(ADMIN_KEY)) == backend.admins[ADMIN_USERNAME]["record"]
    assert notifications.entries == [(SUCCESS, LOGIN_SUCCEEDED)]


def test_login_failure_leaves_state_and_storage_untouched(manager, storage, notifications):
    assert manager.login(ADMIN_USERNAME, "wrong-password") is False

    assert manager.status is SessionStatus.UNAUTHENTICATED
    assert storage.keys() == []
    assert notifications.entries == [(ERROR, "Invalid username or password")]


def test_failed_login_while_authenticated_keeps_existing_session(logged_in, storage):
    token = logged_in.session.token

    assert logged_in.login(ADMIN_USERNAME, "wrong-password") is False
    assert logged_in.status is SessionStatus.AUTHENTICATED
    assert logged_in.session.token == token
    assert storage.get_item(TOKEN_KEY) == token


def test_login_failure_without_server_message_uses_generic_text(manager, backend, notifications):
    # An unreachable backend gives no error payload at all
    manager.api_client.session.mount("http://admin.test", RefusingAdapter())

    assert manager.login(ADMIN_USERNAME, ADMIN_PASSWORD) is False
    assert notifications.entries == [(ERROR, "Login failed")]


def test_restore_without_record_stays_unauthenticated(manager, backend):
    assert manager.restore_session() is SessionStatus.UNAUTHENTICATED
    assert backend.requests == []


def test_restore_with_valid_token_uses_server_principal(manager, storage, backend):
    token = backend.issue_token(ADMIN_USERNAME)
    persist(storage, token, {"_id": "a1", "username": ADMIN_USERNAME, "name": "Old Name"})
    backend.admins[ADMIN_USERNAME]["record"]["name"] = "Renamed Admin"

    assert manager.restore_session() is SessionStatus.AUTHENTICATED
    assert manager.state.admin.name == "Renamed Admin"
    assert json.loads(storage.get_item(ADMIN_KEY))["name"] == "Renamed Admin"
    assert backend.requests[-1]["authorization"] == f"Bearer {token}"


def test_restore_with_invalid_token_clears_storage(manager, storage, notifications):
    persist(storage, "stale-token", {"username": ADMIN_USERNAME})

    assert manager.restore_session() is SessionStatus.UNAUTHENTICATED
    assert manager.session.token is None
    assert storage.keys() == []
    assert notifications.entries == [(ERROR, SESSION_EXPIRED)]


def test_restore_without_validation_endpoint_trusts_persisted_principal(manager, storage, backend):
    stored = {"_id": "a1", "username": ADMIN_USERNAME, "name": "Cached", "permissions": ["dealers"]}
    persist(storage, "any-token", stored)
    backend.validation_enabled = False

    assert manager.restore_session() is SessionStatus.AUTHENTICATED
    assert manager.state.admin.to_payload() == stored
    assert json.loads(storage.get_item(ADMIN_KEY)) == stored


def test_restore_with_unreachable_backend_logs_out(manager, storage):
    persist(storage, "any-token", {"username": ADMIN_USERNAME})
    manager.api_client.session.mount("http://admin.test", RefusingAdapter())

    assert manager.restore_session() is SessionStatus.UNAUTHENTICATED
    assert storage.keys() == []


def test_restore_discards_corrupt_record(manager, storage, backend):
    storage.set_item(TOKEN_KEY, "token")
    storage.set_item(ADMIN_KEY, "{not json")

    assert manager.restore_session() is SessionStatus.UNAUTHENTICATED
    assert storage.keys() == []
    assert backend.requests == []


def test_validate_returns_none_for_rejected_token(manager):
    assert manager.validate("unknown") is None


def test_validate_returns_server_principal(manager, backend):
    token = backend.issue_token(ADMIN_USERNAME)
    admin = manager.validate(token)
    assert isinstance(admin, Admin)
    assert admin.username == ADMIN_USERNAME


def test_mid_session_401_logs_out_and_still_raises(logged_in, storage, backend, notifications):
    backend.revoke_all()

    with pytest.raises(AuthorizationError):
        logged_in.api_client.list_dealers()

    assert logged_in.status is SessionStatus.UNAUTHENTICATED
    assert storage.keys() == []
    assert notifications.entries == [(ERROR, SESSION_EXPIRED)]


def test_401_on_validation_call_does_not_end_session(logged_in, notifications):
    assert logged_in.validate("someone-elses-token") is None

    assert logged_in.status is SessionStatus.AUTHENTICATED
    assert notifications.entries == []


def test_401_on_login_is_not_treated_as_expiry(logged_in, storage):
    assert logged_in.login(ADMIN_USERNAME, "wrong-password") is False
    assert logged_in.status is SessionStatus.AUTHENTICATED
    assert storage.get_item(TOKEN_KEY) is not None


@pytest.mark.parametrize("start", ["unauthenticated", "restoring", "authenticated"])
def test_logout_from_any_state_is_idempotent(manager, storage, backend, start):
    observed = []
    if start == "authenticated":
        assert manager.login(ADMIN_USERNAME, ADMIN_PASSWORD)
        manager.logout()
    elif start == "restoring":
        persist(storage, "token", {"username": ADMIN_USERNAME})

        def logout_mid_restore(call, prepared):
            observed.append(manager.status)
            manager.logout()

        manager.api_client.add_request_hook(logout_mid_restore)
        manager.restore_session()
        assert observed == [SessionStatus.RESTORING]
    else:
        manager.logout()

    assert manager.status is SessionStatus.UNAUTHENTICATED
    assert storage.keys() == []

    before = manager.session
    manager.logout()
    assert manager.session == before
    assert storage.keys() == []


def test_logout_during_restore_of_valid_token_is_not_undone(manager, storage, backend, notifications):
    token = backend.issue_token(ADMIN_USERNAME)
    persist(storage, token, {"_id": "a1", "username": ADMIN_USERNAME})
    manager.api_client.add_request_hook(lambda call, prepared: manager.logout())

    assert manager.restore_session() is SessionStatus.UNAUTHENTICATED
    assert manager.session.token is None
    assert storage.keys() == []
    assert notifications.entries == []


def test_login_with_unwritable_storage_persists_nothing(manager, storage, monkeypatch, notifications):
    def refuse(items):
        raise OSError("disk full")

    monkeypatch.setattr(storage, "set_items", refuse)

    assert manager.login(ADMIN_USERNAME, ADMIN_PASSWORD) is False
    assert manager.status is SessionStatus.UNAUTHENTICATED
    assert storage.keys() == []
    assert notifications.entries == [(ERROR, "Login failed")]


def test_bearer_token_is_read_at_send_time(manager, backend):
    seen = []
    manager.api_client.add_request_hook(lambda call, prepared: seen.append(prepared.headers.get("Authorization")))

    assert manager.login(ADMIN_USERNAME, ADMIN_PASSWORD)
    first_token = manager.session.token
    manager.api_client.get_dashboard()

    manager.logout()
    assert manager.login(ADMIN_USERNAME, ADMIN_PASSWORD)
    second_token = manager.session.token
    manager.api_client.get_dashboard()

    assert first_token != second_token
    # Login calls carry no token; dashboard calls carry whichever token is current
    assert seen == [None, f"Bearer {first_token}", None, f"Bearer {second_token}"]
    assert backend.requests[-1]["authorization"] == f"Bearer {second_token}"
