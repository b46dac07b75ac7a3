import redis.asyncio as aioredis

from horplus.core.config import settings

_redis: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    global _redis
    if _redis is None:
        _redis = aioredis.from_url(settings.redis_url, decode_responses=True)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


# ─── Login lockout ─────────────────────────────────────────────────────────────

_FAIL_PREFIX = "login_fails:"
_LOCKOUT_SECONDS = 15 * 60   # 15-minute lockout window
_MAX_ATTEMPTS = 5            # failures before lockout triggers


async def record_login_failure(username: str) -> int:
    """Increment failure counter; set TTL on first failure. Returns new count."""
    r = get_redis()
    key = f"{_FAIL_PREFIX}{username.lower()}"
    count = await r.incr(key)
    if count == 1:
        await r.expire(key, _LOCKOUT_SECONDS)
    return count


async def is_locked_out(username: str) -> bool:
    count = await get_redis().get(f"{_FAIL_PREFIX}{username.lower()}")
    return int(count) >= _MAX_ATTEMPTS if count else False


async def clear_login_failures(username: str) -> None:
    await get_redis().delete(f"{_FAIL_PREFIX}{username.lower()}")
