"""Identity resolver transitions and namespace derivation."""

from storefront.core.cart_store import CartStore
from storefront.core.identity import IdentityResolver
from storefront.models.identity import GUEST, GUEST_NAMESPACE, User, is_guest, namespace_for

from conftest import make_item, make_user


class TestNamespace:
    def test_guest_and_user_namespaces(self):
        assert namespace_for(GUEST) == GUEST_NAMESPACE
        assert namespace_for(None) == GUEST_NAMESPACE
        assert namespace_for(make_user("42")) == "cart_42"

    def test_user_from_api_accepts_mongo_id(self):
        user = User.from_api({"_id": "abc", "email": "a@b.c", "role": "staff"})

        assert user.id == "abc"
        assert user.is_staff
        assert not is_guest(user)


class TestIdentityResolver:
    def test_starts_as_guest(self):
        resolver = IdentityResolver()

        assert resolver.current is GUEST
        assert not resolver.is_authenticated

    def test_notifies_once_per_transition(self):
        resolver = IdentityResolver()
        seen = []
        resolver.subscribe(lambda old, new: seen.append((repr(old), repr(new))))

        alice = make_user("a")
        resolver.set_user(alice)
        resolver.set_user(make_user("a"))
        resolver.clear()

        assert len(seen) == 2
        assert seen[0][0] == "GUEST"
        assert seen[1][1] == "GUEST"

    def test_clearing_guest_is_not_a_transition(self):
        resolver = IdentityResolver()
        seen = []
        resolver.subscribe(lambda old, new: seen.append(new))

        resolver.clear()

        assert seen == []

    def test_nested_transition_is_delivered_in_order(self):
        resolver = IdentityResolver()
        first, second = [], []

        def switch_again(old, new):
            first.append(new.id)
            if new.id == "a":
                resolver.set_user(make_user("b"))

        resolver.subscribe(switch_again)
        resolver.subscribe(lambda old, new: second.append(new.id))

        resolver.set_user(make_user("a"))

        assert first == ["a", "b"]
        assert second == ["a", "b"]
        assert resolver.user.id == "b"

    def test_failing_listener_does_not_stop_delivery(self):
        resolver = IdentityResolver()
        seen = []

        def switch_then_fail(old, new):
            if new.id == "a":
                resolver.set_user(make_user("b"))
                raise RuntimeError("view crashed")

        resolver.subscribe(switch_then_fail)
        resolver.subscribe(lambda old, new: seen.append(new.id))

        resolver.set_user(make_user("a"))

        assert seen == ["a", "b"]
        assert resolver.user.id == "b"

    def test_cart_follows_identity_past_failing_listener(self, cart_storage):
        resolver = IdentityResolver()

        def crash(old, new):
            raise RuntimeError("view crashed")

        resolver.subscribe(crash)
        cart = CartStore(resolver, cart_storage)
        try:
            resolver.set_user(make_user("b"))
            cart.add_item(make_item("p1"))
        finally:
            cart.close()

        assert cart.namespace == "cart_b"
        assert [i.id for i in cart_storage.read("cart_b")] == ["p1"]
        assert cart_storage.read(GUEST_NAMESPACE) == []

    def test_unsubscribe(self):
        resolver = IdentityResolver()
        seen = []
        unsubscribe = resolver.subscribe(lambda old, new: seen.append(new))
        unsubscribe()

        resolver.set_user(make_user("a"))

        assert seen == []
