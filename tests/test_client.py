from unittest.mock import MagicMock

import pytest

from app.client.api import APIError, PortfolioClient
from app.client.auth_store import AuthStore
from app.client.validation import validate_contact, validate_login, validate_newsletter, validate_register

USER = {"_id": "64b7f0c2a1b2c3d4e5f60718", "name": "Ada", "email": "ada@example.com", "role": "user"}


def fake_response(status_code=200, body=None, content_type="application/json"):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.headers = {"content-type": content_type}
    response.json.return_value = body if body is not None else {}
    response.text = ""
    response.reason = "Error"
    return response


def make_client(store=None, *responses):
    session = MagicMock()
    session.request.side_effect = list(responses)
    return PortfolioClient("http://api.test/", store=store or AuthStore(), session=session), session


# AuthStore

def test_store_starts_loading_and_unauthenticated():
    state = AuthStore().state
    assert state.loading is True
    assert state.isAuthenticated is False
    assert state.token is None


def test_store_persists_and_rehydrates_token(tmp_path):
    path = tmp_path / "auth.json"
    AuthStore(path).auth_success(USER, "tok-1")
    assert AuthStore(path).token == "tok-1"


def test_store_logout_clears_persisted_token(tmp_path):
    path = tmp_path / "auth.json"
    store = AuthStore(path)
    store.auth_success(USER, "tok-1")
    store.logout()
    assert not path.exists()
    assert store.state.user is None
    assert store.state.loading is False


def test_store_auth_fail_records_error_and_clear_error_drops_it():
    store = AuthStore()
    store.auth_fail("Invalid credentials")
    assert store.state.error == "Invalid credentials"
    assert store.state.isAuthenticated is False
    store.clear_error()
    assert store.state.error is None


def test_store_notifies_listeners():
    seen = []
    store = AuthStore()
    store.subscribe(seen.append)
    store.auth_success(USER, "tok-1")
    store.logout()
    assert [s.isAuthenticated for s in seen] == [True, False]


def test_store_unreadable_token_file_is_ignored(tmp_path):
    path = tmp_path / "auth.json"
    path.write_text("{not json")
    assert AuthStore(path).token is None


# PortfolioClient

def test_login_stores_session_and_sends_bearer_afterwards():
    client, session = make_client(
        None,
        fake_response(200, {"token": "tok-1", "user": USER}),
        fake_response(200, [{"name": "Python"}]),
    )
    client.login("ada@example.com", "secret1")
    assert client.store.state.isAuthenticated
    assert client.store.token == "tok-1"

    client.list_skills(category="Languages")
    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert (method, url) == ("GET", "http://api.test/api/skills")
    assert kwargs["headers"]["Authorization"] == "Bearer tok-1"
    assert kwargs["params"] == {"category": "Languages"}


def test_login_failure_raises_with_server_message():
    client, _ = make_client(None, fake_response(401, {"success": False, "message": "Invalid credentials"}))
    with pytest.raises(APIError) as exc:
        client.login("ada@example.com", "bad")
    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid credentials"
    assert client.store.state.error == "Invalid credentials"


def test_401_clears_stored_token():
    store = AuthStore()
    store.auth_success(USER, "stale")
    client, _ = make_client(store, fake_response(401, {"success": False, "message": "Not authorized, token failed"}))
    with pytest.raises(APIError):
        client.project_stats()
    assert store.token is None
    assert store.state.isAuthenticated is False


def test_load_user_without_token_finishes_loading():
    client, session = make_client(None)
    assert client.load_user() is None
    assert client.store.state.loading is False
    session.request.assert_not_called()


def test_load_user_rehydrates_profile():
    store = AuthStore()
    store.auth_success(USER, "tok-1")
    client, _ = make_client(store, fake_response(200, USER))
    assert client.load_user() == USER
    assert store.state.isAuthenticated


def test_error_without_json_body():
    bad = fake_response(502)
    bad.json.side_effect = ValueError("no json")
    bad.text = "Bad Gateway"
    client, _ = make_client(None, bad)
    with pytest.raises(APIError) as exc:
        client.health()
    assert exc.value.status_code == 502
    assert exc.value.message == "Bad Gateway"


def test_csv_export_returns_text():
    store = AuthStore()
    store.auth_success(dict(USER, role="admin"), "tok-1")
    csv_response = fake_response(200, content_type="text/csv")
    csv_response.text = "email,subscribedAt,isActive,source\n"
    client, session = make_client(store, csv_response)
    assert client.export_subscriptions(as_csv=True).startswith("email,")
    assert session.request.call_args.kwargs["params"] == {"format": "csv"}


# validation

def test_register_validation():
    assert validate_register("Ada", "ada@example.com", "secret1") == {}
    errors = validate_register("A", "nope", "123", confirm_password="124")
    assert set(errors) == {"name", "email", "password", "confirmPassword"}


def test_login_validation():
    assert validate_login("", "") == {"email": "Email is required", "password": "Password is required"}


def test_contact_validation():
    assert validate_contact("Grace", "grace@example.com", "Hello") == {}
    assert set(validate_contact("", "grace@example.com", " ")) == {"name", "message"}


def test_newsletter_validation():
    assert validate_newsletter("reader@example.com") == {}
    assert validate_newsletter("reader@") == {"email": "Please enter a valid email"}
