"""Tests for the session stores and the redis lock."""

import json
import threading
from unittest.mock import MagicMock

import pytest
import redis

from storefront.domain.errors import UpstreamError
from storefront.repos.session_store import (
    CART,
    ORDERS,
    WISHLIST,
    MemorySessionStore,
    RedisSessionStore,
    create_session_store,
)
from storefront.services.lock_service import LockService


class TestMemorySessionStore:
    def test_missing_key_is_empty_list(self):
        assert MemorySessionStore().get(CART, "user-1") == []

    def test_values_are_copied(self):
        store = MemorySessionStore()
        value = [{"productId": 1, "quantity": 1}]

        store.put(CART, "user-1", value)
        value[0]["quantity"] = 99
        fetched = store.get(CART, "user-1")
        fetched[0]["quantity"] = 42

        assert store.get(CART, "user-1") == [{"productId": 1, "quantity": 1}]

    def test_keys_are_isolated_by_namespace_and_user(self):
        store = MemorySessionStore()
        store.put(CART, "user-1", [{"id": 1}])

        assert store.get(WISHLIST, "user-1") == []
        assert store.get(CART, "user-2") == []

        store.delete(CART, "user-1")
        assert store.get(CART, "user-1") == []

    def test_next_id_counts_per_namespace(self):
        store = MemorySessionStore()

        assert [store.next_id(CART), store.next_id(CART), store.next_id(ORDERS)] == [1, 2, 1]

    def test_lock_serializes_same_key(self):
        store = MemorySessionStore()
        store.put(CART, "user-1", [{"count": 0}])

        def bump():
            for _ in range(200):
                with store.lock(CART, "user-1"):
                    value = store.get(CART, "user-1")
                    value[0]["count"] += 1
                    store.put(CART, "user-1", value)

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get(CART, "user-1") == [{"count": 800}]
        assert store._locks == {}

    def test_lock_entry_is_dropped_after_release(self):
        store = MemorySessionStore()

        with store.lock(CART, "user-1"):
            assert (CART, "user-1") in store._locks
        for n in range(50):
            with store.lock(CART, f"user-{n}"):
                pass

        assert store._locks == {}

    def test_lock_entry_is_dropped_when_body_raises(self):
        store = MemorySessionStore()

        with pytest.raises(ValueError):
            with store.lock(CART, "user-1"):
                raise ValueError("boom")

        assert store._locks == {}
        with store.lock(CART, "user-1"):
            pass


class TestRedisSessionStore:
    def test_get_decodes_json(self):
        client = MagicMock()
        client.get.return_value = json.dumps([{"id": 3}])

        store = RedisSessionStore(client=client)

        assert store.get(CART, "user-1") == [{"id": 3}]
        client.get.assert_called_once_with("storefront:cart:user-1")

    def test_get_missing_key(self):
        client = MagicMock()
        client.get.return_value = None

        assert RedisSessionStore(client=client).get(WISHLIST, "user-1") == []

    def test_put_encodes_json(self):
        client = MagicMock()

        RedisSessionStore(client=client, prefix="shop").put(ORDERS, "user-1", [{"id": 1}])

        client.set.assert_called_once_with("shop:orders:user-1", json.dumps([{"id": 1}]))

    def test_next_id_uses_incr(self):
        client = MagicMock()
        client.incr.return_value = 17

        assert RedisSessionStore(client=client).next_id(CART) == 17
        client.incr.assert_called_once_with("storefront:cart:seq")

    def test_get_retries_transient_errors(self):
        client = MagicMock()
        client.get.side_effect = [redis.ConnectionError("down"), json.dumps([])]

        assert RedisSessionStore(client=client).get(CART, "user-1") == []
        assert client.get.call_count == 2

    def test_lock_acquires_and_releases(self):
        client = MagicMock()
        client.set.return_value = True
        client.eval.return_value = 1

        with RedisSessionStore(client=client).lock(CART, "user-1"):
            pass

        assert client.set.call_args.kwargs["name"] == "lock:storefront:cart:user-1"
        assert client.set.call_args.kwargs["nx"] is True
        token = client.set.call_args.kwargs["value"]
        client.eval.assert_called_once()
        assert client.eval.call_args.args[1:] == (1, "lock:storefront:cart:user-1", token)


class TestLockService:
    def test_waits_until_lock_is_free(self):
        client = MagicMock()
        client.set.side_effect = [False, False, True]
        client.eval.return_value = 1

        with LockService(client=client).hold("lock:x", poll=0):
            pass

        assert client.set.call_count == 3

    def test_timeout_raises_upstream_error(self):
        client = MagicMock()
        client.set.return_value = False

        with pytest.raises(UpstreamError):
            with LockService(client=client).hold("lock:x", timeout=0, poll=0):
                pass

        client.eval.assert_not_called()

    def test_release_of_expired_lock_is_tolerated(self):
        client = MagicMock()
        client.set.return_value = True
        client.eval.return_value = 0

        with LockService(client=client).hold("lock:x"):
            pass

        client.eval.assert_called_once()


class TestCreateSessionStore:
    def test_memory(self):
        assert isinstance(create_session_store("memory"), MemorySessionStore)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            create_session_store("sqlite")
