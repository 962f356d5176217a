from orderdesk.config import set_config_for_test
from orderdesk.session.auth import StoreAuthentication, get_store_auth


def test_token_from_config():
    """Token comes from config when none is passed."""
    auth = get_store_auth()
    assert auth.is_authenticated
    headers = auth.get_headers()
    assert headers["Authorization"] == "Bearer token-123"
    assert headers["Content-Type"] == "application/json"


def test_explicit_token_wins():
    auth = StoreAuthentication(token="other")
    assert auth.get_headers()["Authorization"] == "Bearer other"


def test_anonymous_without_token():
    """No Authorization header when no token is held."""
    set_config_for_test(store_url="http://store.test", store_token=None)
    auth = StoreAuthentication()
    assert not auth.is_authenticated
    assert "Authorization" not in auth.get_headers()


def test_clear_session_drops_token():
    auth = StoreAuthentication()
    auth.clear_session()
    assert not auth.is_authenticated
    assert "Authorization" not in auth.get_headers()


def test_session_carries_headers():
    session = StoreAuthentication().get_session()
    assert session.headers["Authorization"] == "Bearer token-123"
