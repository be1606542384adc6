# storefront/services/lock_service.py
import time
import uuid
from contextlib import contextmanager

import redis

from storefront.domain.errors import UpstreamError
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, SESSION_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nie mozna wcisnac sie miedzy GET a DEL


class LockService:
    """
    -blokada per klucz (np. koszyk jednego usera)
    -zwalnianie tylko przez wlasciciela tokena
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def acquire(self, key: str, token: str, ttl: int) -> bool:
        #SET lock:cart:42 "<token>" NX EX 10
        return bool(self.redis.set(name=key, value=token, nx=True, ex=ttl))

    @redis_retry()
    def release(self, key: str, token: str) -> bool:
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def hold(self, key: str, ttl: int = SESSION_LOCK_TTL_SECONDS, timeout: float = 5.0, poll: float = 0.05):
        token = uuid.uuid4().hex
        deadline = time.monotonic() + timeout

        while not self.acquire(key, token, ttl):
            if time.monotonic() >= deadline:
                logger.warning(f"Lock {key} not acquired within {timeout}s")
                raise UpstreamError(f"Could not acquire lock {key}")
            time.sleep(poll)

        try:
            yield
        finally:
            if not self.release(key, token):
                #TTL wygasl w trakcie operacji, ktos inny mogl juz wejsc
                logger.warning(f"Lock {key} expired before release")
