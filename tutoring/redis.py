from redis.asyncio import Redis

from .settings import settings


def get_redis(url: str) -> Redis:
    return Redis.from_url(url, encoding="utf-8", decode_responses=True)


redis: Redis = get_redis(settings.redis_url)
