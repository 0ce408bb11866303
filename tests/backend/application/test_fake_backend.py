"""Tests for the in-memory backend used in development and tests."""

import pytest
from storefront.backend.fake_adapter import FakeBackend
from storefront.backend.port import AuthEvent, BackendError, eq, gt


class TestFakeTables:
    def test_insert_assigns_id_and_timestamps(self):
        backend = FakeBackend()
        [row] = backend.insert("products", [{"name": "Mug", "price": 4.5}])
        assert row["id"]
        assert row["created_at"]
        assert row["updated_at"]

    def test_orders_get_created_at_only(self):
        backend = FakeBackend()
        [row] = backend.insert("orders", [{"user_id": "u1", "total_amount": 1.0}])
        assert "created_at" in row
        assert "updated_at" not in row

    def test_select_applies_every_filter(self):
        backend = FakeBackend()
        backend.seed(
            "products",
            {"name": "Mug", "stock_quantity": 0, "category": "Kitchen"},
            {"name": "Bowl", "stock_quantity": 3, "category": "Kitchen"},
            {"name": "Lamp", "stock_quantity": 2, "category": "Home"},
        )
        rows = backend.select("products", [gt("stock_quantity", 0), eq("category", "Kitchen")])
        assert [r["name"] for r in rows] == ["Bowl"]

    def test_select_orders_descending(self):
        backend = FakeBackend()
        backend.seed(
            "orders",
            {"user_id": "u1", "created_at": "2026-01-01T10:00:00+00:00"},
            {"user_id": "u1", "created_at": "2026-03-01T10:00:00+00:00"},
            {"user_id": "u1", "created_at": "2026-02-01T10:00:00+00:00"},
        )
        rows = backend.select("orders", order_by="created_at", descending=True)
        assert [r["created_at"][:7] for r in rows] == ["2026-03", "2026-02", "2026-01"]

    def test_select_returns_copies(self):
        backend = FakeBackend()
        backend.seed("products", {"name": "Mug"})
        backend.select("products")[0]["name"] = "Changed"
        assert backend.rows("products")[0]["name"] == "Mug"

    def test_update_only_touches_matching_rows(self):
        backend = FakeBackend()
        first, second = backend.seed("products", {"name": "Mug"}, {"name": "Bowl"})
        updated = backend.update("products", {"price": 2.0}, [eq("id", first["id"])])
        assert [r["id"] for r in updated] == [first["id"]]
        assert "price" not in backend.select("products", [eq("id", second["id"])])[0]

    def test_delete_returns_removed_count(self):
        backend = FakeBackend()
        row = backend.seed("products", {"name": "Mug"})[0]
        assert backend.delete("products", [eq("id", row["id"])]) == 1
        assert backend.delete("products", [eq("id", row["id"])]) == 0

    def test_calls_are_recorded(self):
        backend = FakeBackend()
        backend.select("products")
        backend.insert("orders", [{"user_id": "u1"}])
        assert [(c["method"], c["table"]) for c in backend.calls] == [("select", "products"), ("insert", "orders")]

    def test_seed_is_not_recorded(self):
        backend = FakeBackend()
        backend.seed("products", {"name": "Mug"})
        assert backend.calls == []


class TestConfiguredFailures:
    def test_fail_on_raises_backend_error(self):
        backend = FakeBackend()
        backend.fail_on("insert", "order_items", message="insert or update violates foreign key constraint")
        with pytest.raises(BackendError) as exc:
            backend.insert("order_items", [{"order_id": "o1"}])
        assert exc.value.message == "insert or update violates foreign key constraint"
        assert backend.rows("order_items") == []

    def test_failed_call_is_still_recorded(self):
        backend = FakeBackend()
        backend.fail_on("select", "products")
        with pytest.raises(BackendError):
            backend.select("products")
        assert backend.calls[-1]["method"] == "select"

    def test_clear_failures(self):
        backend = FakeBackend()
        backend.fail_on("select", "products")
        backend.clear_failures()
        assert backend.select("products") == []


class TestFakeAuth:
    def test_sign_up_opens_session_and_notifies(self):
        backend = FakeBackend()
        seen = []
        backend.on_auth_state_change(lambda event, session: seen.append(event))

        session = backend.sign_up("jane@example.com", "s3cret-pass")

        assert session.email == "jane@example.com"
        assert backend.get_session() == session
        assert seen == [AuthEvent.SIGNED_IN]

    def test_sign_up_pending_confirmation_returns_none(self):
        backend = FakeBackend(require_email_confirmation=True)
        assert backend.sign_up("jane@example.com", "s3cret-pass") is None
        assert backend.get_session() is None

    def test_duplicate_email_rejected(self):
        backend = FakeBackend()
        backend.sign_up("jane@example.com", "s3cret-pass")
        with pytest.raises(BackendError) as exc:
            backend.sign_up("jane@example.com", "another-pass")
        assert exc.value.message == "User already registered"

    def test_short_password_rejected(self):
        backend = FakeBackend()
        with pytest.raises(BackendError) as exc:
            backend.sign_up("jane@example.com", "abc")
        assert exc.value.code == "weak_password"

    def test_wrong_password_rejected(self):
        backend = FakeBackend()
        backend.add_account("jane@example.com", "s3cret-pass")
        with pytest.raises(BackendError) as exc:
            backend.sign_in_with_password("jane@example.com", "wrong-pass")
        assert exc.value.message == "Invalid login credentials"

    def test_sign_out_clears_session_and_notifies(self):
        backend = FakeBackend()
        backend.add_account("jane@example.com", "s3cret-pass")
        backend.sign_in_with_password("jane@example.com", "s3cret-pass")
        seen = []
        backend.on_auth_state_change(lambda event, session: seen.append((event, session)))

        backend.sign_out()

        assert backend.get_session() is None
        assert seen == [(AuthEvent.SIGNED_OUT, None)]

    def test_unsubscribed_listener_is_not_called(self):
        backend = FakeBackend()
        seen = []
        subscription = backend.on_auth_state_change(lambda event, session: seen.append(event))
        subscription.unsubscribe()

        backend.sign_up("jane@example.com", "s3cret-pass")
        assert seen == []


class TestFakeClients:
    def test_fork_shares_data(self):
        backend = FakeBackend()
        client = backend.fork()
        client.insert("products", [{"name": "Mug"}])
        assert [row["name"] for row in backend.rows("products")] == ["Mug"]
        assert backend.calls == client.calls

    def test_fork_keeps_its_own_session(self):
        backend = FakeBackend()
        backend.add_account("jane@example.com", "s3cret-pass")
        seen = []
        backend.on_auth_state_change(lambda event, session: seen.append(event))

        client = backend.fork()
        client.sign_in_with_password("jane@example.com", "s3cret-pass")

        assert client.get_session().email == "jane@example.com"
        assert backend.get_session() is None
        assert seen == []
