# storefront/repos/session_store.py
"""
Magazyn stanu sesji (koszyk, wishlist, zamowienia) kluczowany para
(namespace, user_id).

Wartoscia jest zawsze lista slownikow gotowych do JSON, wiec oba backendy
zachowuja sie tak samo. Zmiany robimy w `lock(...)`: FastAPI odpala
synchroniczne endpointy w puli watkow, a w wersji redis moze byc kilka
instancji API naraz.
"""
import copy
import itertools
import json
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Tuple

import redis

from storefront.services.lock_service import LockService
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, SESSION_STORE
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CART = "cart"
WISHLIST = "wishlist"
ORDERS = "orders"


class SessionStore(ABC):
    @abstractmethod
    def get(self, namespace: str, user_id: str) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def put(self, namespace: str, user_id: str, value: List[Dict[str, Any]]) -> None:
        ...

    @abstractmethod
    def delete(self, namespace: str, user_id: str) -> None:
        ...

    @abstractmethod
    def next_id(self, namespace: str) -> int:
        ...

    @abstractmethod
    def lock(self, namespace: str, user_id: str):
        ...


class MemorySessionStore(SessionStore):
    """Stan w pamieci procesu; ginie przy restarcie."""

    def __init__(self):
        self._data: Dict[Tuple[str, str], List[Dict[str, Any]]] = {}
        # lock i liczba watkow, ktore go trzymaja lub na niego czekaja
        self._locks: Dict[Tuple[str, str], List[Any]] = {}
        self._counters: Dict[str, Iterator[int]] = {}
        self._guard = threading.Lock()

    def get(self, namespace, user_id):
        return copy.deepcopy(self._data.get((namespace, user_id), []))

    def put(self, namespace, user_id, value):
        self._data[(namespace, user_id)] = copy.deepcopy(value)

    def delete(self, namespace, user_id):
        self._data.pop((namespace, user_id), None)

    def next_id(self, namespace):
        with self._guard:
            counter = self._counters.setdefault(namespace, itertools.count(1))
            return next(counter)

    @contextmanager
    def lock(self, namespace, user_id):
        key = (namespace, user_id)
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


class RedisSessionStore(SessionStore):
    """Stan w redisie jako JSON; blokada per user przez LockService."""

    def __init__(self, url: str | None = None, client: redis.Redis | None = None, prefix: str = "storefront"):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.lock_service = LockService(client=self.redis)
        self.prefix = prefix

    def _key(self, namespace: str, user_id: str) -> str:
        return f"{self.prefix}:{namespace}:{user_id}"

    @redis_retry()
    def get(self, namespace, user_id):
        raw = self.redis.get(self._key(namespace, user_id))
        return json.loads(raw) if raw else []

    @redis_retry()
    def put(self, namespace, user_id, value):
        self.redis.set(self._key(namespace, user_id), json.dumps(value))

    @redis_retry()
    def delete(self, namespace, user_id):
        self.redis.delete(self._key(namespace, user_id))

    @redis_retry()
    def next_id(self, namespace):
        return int(self.redis.incr(f"{self.prefix}:{namespace}:seq"))

    @contextmanager
    def lock(self, namespace, user_id):
        with self.lock_service.hold(f"lock:{self._key(namespace, user_id)}"):
            yield


def create_session_store(kind: str | None = None) -> SessionStore:
    kind = (kind or SESSION_STORE).lower()
    if kind == "redis":
        logger.info("Using redis session store")
        return RedisSessionStore()
    if kind == "memory":
        logger.info("Using in-memory session store (state is lost on restart)")
        return MemorySessionStore()
    raise ValueError(f"Unknown SESSION_STORE: {kind}")
