"""Login, logout and session restore against the cart records."""

import pytest

from storefront.api.auth import AuthService
from storefront.api.chat import StaffService
from storefront.api.client import REFRESH_PATH
from storefront.core.retry_utils import ApiError
from storefront.core.session import AuthSession
from storefront.models.cart import LineItem
from storefront.models.identity import GUEST_NAMESPACE

from conftest import make_item, make_user

LOGIN_BODY = {"accessToken": "a1", "refreshToken": "r1", "user": {"_id": "u1", "email": "u1@example.com"}}


@pytest.fixture()
def session(client, resolver, cart_storage, tokens):
    return AuthSession(AuthService(client), resolver, cart_storage, tokens, StaffService(client))


class TestLogin:
    def test_guest_cart_dropped_and_user_cart_restored(self, session, backend, cart_store, cart_storage):
        cart_storage.write("cart_u1", [LineItem(id="saved", name="x", price=1, quantity=2)])
        cart_store.add_item(make_item("p2"))
        backend.add("POST", "/auth/login-email", body=LOGIN_BODY)

        session.login("u1@example.com", "secret")

        assert session.user.id == "u1"
        assert [(i.id, i.quantity) for i in cart_store.items] == [("saved", 2)]
        assert cart_storage.read(GUEST_NAMESPACE) == []

    def test_login_without_saved_cart_is_empty(self, session, backend, cart_store):
        cart_store.add_item(make_item("p2"))
        backend.add("POST", "/auth/login-email", body=LOGIN_BODY)

        session.login("u1@example.com", "secret")

        assert cart_store.items == ()

    def test_previous_user_cart_dropped_on_new_login(self, session, backend, cart_storage, tokens):
        tokens.save_user({"_id": "a", "email": "a@example.com"})
        cart_storage.write("cart_a", [LineItem(id="pa", name="x", price=1, quantity=2)])
        cart_storage.write(GUEST_NAMESPACE, [LineItem(id="g", name="y", price=1, quantity=1)])
        backend.add("POST", "/auth/login-email", body={**LOGIN_BODY, "user": {"_id": "b"}})

        session.login("b@example.com", "secret")

        assert session.user.id == "b"
        assert cart_storage.read("cart_a") == []
        assert cart_storage.read(GUEST_NAMESPACE) == []
        assert tokens.load_user_id() == "b"

    def test_verification_required_keeps_carts(self, session, backend, cart_storage, tokens):
        tokens.save_user({"_id": "a"})
        cart_storage.write("cart_a", [LineItem(id="pa", name="x", price=1, quantity=2)])
        backend.add("POST", "/auth/login-email", body={"requiresEmailVerification": True})

        data = session.login("b@example.com", "secret")

        assert data["requiresEmailVerification"]
        assert session.user is None
        assert [i.id for i in cart_storage.read("cart_a")] == ["pa"]

    def test_rejected_login_keeps_carts(self, session, backend, cart_storage):
        cart_storage.write(GUEST_NAMESPACE, [LineItem(id="g", name="y", price=1, quantity=1)])
        backend.add("POST", "/auth/login-email", status=400, body={"message": "Sai mật khẩu"})

        with pytest.raises(ApiError):
            session.login("b@example.com", "wrong")

        assert [i.id for i in cart_storage.read(GUEST_NAMESPACE)] == ["g"]

    def test_staff_login_marks_online(self, session, backend):
        backend.add("POST", "/auth/login-email", body={**LOGIN_BODY, "user": {"_id": "s1", "role": "staff"}})
        backend.add("POST", "/staff/presence", body={"ok": True})

        session.login("s1@example.com", "secret")

        presence = backend.calls_to("POST", "/staff/presence")
        assert presence[0].kwargs["json"] == {"status": "ONLINE", "max": 5}


class TestRegister:
    def test_register_drops_previous_and_guest_carts(self, session, backend, cart_store, cart_storage, tokens):
        tokens.save_user({"_id": "a"})
        cart_storage.write("cart_a", [LineItem(id="pa", name="x", price=1, quantity=2)])
        cart_store.add_item(make_item("g"))
        backend.add("POST", "/auth/register-email", body={"token": "t1", "user": {"_id": "n1"}})

        session.register("n1@example.com", "secret", "New")

        assert session.user.id == "n1"
        assert cart_storage.read("cart_a") == []
        assert cart_storage.read(GUEST_NAMESPACE) == []
        assert cart_store.items == ()


class TestLogout:
    def test_wipes_user_and_guest_carts(self, session, backend, resolver, cart_store, cart_storage, tokens):
        backend.add("POST", "/auth/login-email", body=LOGIN_BODY)
        backend.add("POST", "/auth/logout", body={"success": True})
        session.login("u1@example.com", "secret")
        cart_store.add_item(make_item("p1"))

        session.logout()

        assert resolver.user is None
        assert cart_store.namespace == GUEST_NAMESPACE
        assert cart_store.items == ()
        assert cart_storage.read("cart_u1") == []
        assert tokens.access_token is None

    def test_remote_failure_still_signs_out(self, session, backend, resolver):
        resolver.set_user(make_user("u1"))
        backend.add("POST", "/auth/logout", status=500)

        session.logout()

        assert resolver.user is None


class TestInitAuth:
    def test_restores_with_stored_token(self, session, backend, tokens, resolver):
        tokens.access_token = "a1"
        backend.add("GET", "/auth/me", body={"user": {"_id": "u1"}})

        user = session.init_auth()

        assert user.id == "u1"
        assert resolver.user.id == "u1"

    def test_uses_refresh_token_when_no_access_token(self, session, backend, tokens, resolver):
        tokens.refresh_token = "r1"
        backend.add("POST", REFRESH_PATH, body={"accessToken": "a2"})
        backend.add("GET", "/auth/me", body={"user": {"_id": "u1"}})

        session.init_auth()

        assert tokens.access_token == "a2"
        assert resolver.user.id == "u1"

    def test_failure_falls_back_to_guest(self, session, backend, tokens, resolver):
        backend.add("POST", REFRESH_PATH, status=401)

        assert session.init_auth() is None
        assert resolver.user is None
        assert tokens.access_token is None
