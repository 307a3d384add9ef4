"""
Per-client token bucket rate limiting

Each client address gets a bucket holding up to ``burst`` tokens, refilled
with one token every ``replenish_ms`` milliseconds. A request spends one
token; an empty bucket means HTTP 429.

Buckets live in Redis when it is configured and reachable so limits are
shared between workers, otherwise in process memory.
"""

import logging
import math
import os
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from . import config

logger = logging.getLogger(__name__)

# Atomic refill-and-take. Returns {allowed, tokens_left_as_string}
TOKEN_BUCKET_SCRIPT = """
local capacity = tonumber(ARGV[1])
local interval = tonumber(ARGV[2])
local now = tonumber(ARGV[3])
local state = redis.call('HMGET', KEYS[1], 'tokens', 'ts')
local tokens = tonumber(state[1]) or capacity
local ts = tonumber(state[2]) or now
tokens = math.min(capacity, tokens + math.max(0, now - ts) / interval)
local allowed = 0
if tokens >= 1 then
    tokens = tokens - 1
    allowed = 1
end
redis.call('HSET', KEYS[1], 'tokens', tostring(tokens), 'ts', tostring(now))
redis.call('EXPIRE', KEYS[1], math.ceil(capacity * interval) + 1)
return {allowed, tostring(tokens)}
"""


def get_redis_client() -> Optional[redis.Redis]:
    """
    Create a Redis client from REDIS_URL or the individual REDIS_* settings.

    Returns None when Redis is not configured at all.
    """
    redis_url = os.getenv("REDIS_URL")
    redis_host = os.getenv("REDIS_HOST")

    if redis_url:
        # Mask password in URL for logging
        masked_url = f"{redis_url.split(':')[0]}:****@{redis_url.split('@')[-1]}" if "@" in redis_url else "****"
        logger.info(f"📡 Using Redis URL connection: {masked_url}")
        client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            health_check_interval=30,
        )
    elif redis_host:
        redis_port = int(os.getenv("REDIS_PORT", "6379"))
        redis_ssl = os.getenv("REDIS_SSL", "false").lower() == "true"
        logger.info(f"📡 Using Redis at {redis_host}:{redis_port} (SSL: {redis_ssl})")
        client = redis.Redis(
            host=redis_host,
            port=redis_port,
            password=os.getenv("REDIS_PASSWORD"),
            db=int(os.getenv("REDIS_DB", "0")),
            ssl=redis_ssl,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            health_check_interval=30,
        )
    else:
        return None

    client.ping()
    return client


class MemoryTokenBuckets:
    """Token buckets kept in this process"""

    def __init__(self, capacity: int, interval: float):
        self.capacity = capacity
        self.interval = interval
        # key -> (tokens, last refill timestamp)
        self._buckets: dict[str, tuple[float, float]] = {}
        self._lock = Lock()

    def take(self, key: str, now: Optional[float] = None) -> tuple[bool, float]:
        now = time.monotonic() if now is None else now
        with self._lock:
            tokens, last = self._buckets.get(key, (self.capacity, now))
            tokens = min(self.capacity, tokens + max(0.0, now - last) / self.interval)
            allowed = tokens >= 1
            if allowed:
                tokens -= 1
            self._buckets[key] = (tokens, now)

            # Idle buckets have refilled completely and can be dropped
            if len(self._buckets) > 10000:
                self._evict_full(now)
            return allowed, tokens

    def _evict_full(self, now: float) -> None:
        full_after = self.capacity * self.interval
        stale = [k for k, (_, last) in self._buckets.items() if now - last >= full_after]
        for k in stale:
            del self._buckets[k]
        logger.debug(f"🧹 Evicted {len(stale)} idle rate limit buckets")


class RedisTokenBuckets:
    """Token buckets shared between workers through Redis"""

    def __init__(self, client: redis.Redis, capacity: int, interval: float, key_prefix: str = "rate_limit"):
        self.client = client
        self.capacity = capacity
        self.interval = interval
        self.key_prefix = key_prefix
        self._script = client.register_script(TOKEN_BUCKET_SCRIPT)

    def take(self, key: str, now: Optional[float] = None) -> tuple[bool, float]:
        now = time.time() if now is None else now
        allowed, tokens = self._script(
            keys=[f"{self.key_prefix}:{key}"], args=[self.capacity, self.interval, now]
        )
        return bool(int(allowed)), float(tokens)


class RateLimiter:
    """Per-client admission control for incoming requests"""

    def __init__(self, buckets, enabled: bool = True):
        self.buckets = buckets
        self.enabled = enabled

    @classmethod
    def from_config(cls) -> "RateLimiter":
        capacity = config.RATE_LIMIT_BURST
        interval = config.RATE_LIMIT_REPLENISH_MS / 1000
        buckets = MemoryTokenBuckets(capacity, interval)
        try:
            client = get_redis_client()
            if client is not None:
                buckets = RedisTokenBuckets(client, capacity, interval)
                logger.info("Rate limiting backed by Redis")
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Redis connection failed - rate limiting falls back to process memory: {e}")
        return cls(buckets, enabled=config.RATE_LIMIT_ENABLED)

    def retry_after(self, tokens: float) -> int:
        return max(1, math.ceil((1 - tokens) * self.buckets.interval))

    def check(self, client_key: str) -> None:
        if not self.enabled:
            return
        try:
            allowed, tokens = self.buckets.take(client_key)
        except redis.RedisError as e:
            # Fail open
            logger.error(f"❌ Rate limit check failed for {client_key}: {e}")
            return

        if not allowed:
            logger.warning(f"🚫 Rate limit exceeded for {client_key}")
            raise HTTPException(
                status_code=429,
                detail="Too many requests",
                headers={"Retry-After": str(self.retry_after(tokens))},
            )


def client_address(request: Request) -> str:
    """
    Key for the client's bucket: the peer address, or the first
    ``X-Forwarded-For`` hop when the app sits behind a trusted proxy.
    """
    if config.TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        if forwarded:
            return forwarded
    return request.client.host if request.client else "unknown"


async def rate_limit_middleware(request: Request, call_next):
    """Apply the application's rate limiter to every request"""
    limiter: Optional[RateLimiter] = getattr(request.app.state, "rate_limiter", None)
    if limiter is not None:
        try:
            limiter.check(client_address(request))
        except HTTPException as exc:
            return JSONResponse(
                status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers
            )
    return await call_next(request)
