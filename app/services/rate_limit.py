# 요청 수 제한: Redis 고정 윈도우 카운터 (기본 15분당 100회)

import logging
import math
import os
import time
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

# Docker 환경에서는 localhost가 아니라 서비스명(redis)을 사용해야 함
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
RATE_LIMIT_MAX = int(os.getenv("RATE_LIMIT_MAX", "100"))
RATE_LIMIT_WINDOW_SEC = int(os.getenv("RATE_LIMIT_WINDOW_SEC", str(15 * 60)))
KEY_PREFIX = "rl:"

# 모듈 단일 클라이언트 재사용 (요청마다 새 연결 생성 방지)
redis_client = redis.from_url(REDIS_URL, decode_responses=True)


class RateLimitExceeded(Exception):
    """허용량 초과. 라우터에서 429 로 변환."""


def _key(kind: str, actor: str, slot: int, window: int) -> str:
    return f"{KEY_PREFIX}{kind}:{actor}:{slot}:{window}"


async def allow(
    kind: str,
    actor: str,
    limit: int = RATE_LIMIT_MAX,
    window_seconds: int = RATE_LIMIT_WINDOW_SEC,
    now: Optional[float] = None,
    client: Optional[redis.Redis] = None,
) -> bool:
    """현재 윈도우 안에서 limit 이하이면 True. INCR + EXPIRE 를 한 트랜잭션으로."""
    if limit <= 0:
        return False
    client = client or redis_client
    now = now if now is not None else time.time()
    window = max(1, int(window_seconds))
    slot = int(math.floor(now / window))
    key = _key(kind, actor, slot, window)
    async with client.pipeline(transaction=True) as pipe:
        pipe.incr(key)
        pipe.expire(key, window)
        count, _ = await pipe.execute()
    return int(count) <= limit


async def check(kind: str, actor: str) -> None:
    """
    초과 시 RateLimitExceeded.
    Redis 미기동/장애 시에는 요청을 막지 않는다 (로그만 남김).
    """
    try:
        allowed = await allow(kind, actor)
    except (RedisError, OSError):
        logger.warning("rate limiter unavailable, allowing request", exc_info=True)
        return
    if not allowed:
        raise RateLimitExceeded(f"Too many requests for {kind}, please try again later")
