from functools import wraps
from inspect import signature
from typing import Any, Awaitable, Callable, ParamSpec, TypeVar, get_type_hints

from pydantic import TypeAdapter

from ..logger import get_logger
from ..redis import redis
from ..settings import settings


P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)


def redis_cached(key: str, *args: str) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Cache the return value of an async function in redis.

    :param key: namespace of the cache entries, used by :func:`clear_cache`
    :param args: names of the function parameters which identify an entry
    """

    def deco(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        sig = signature(func)
        adapter: TypeAdapter[Any] | None = None

        @wraps(func)
        async def inner(*_args: P.args, **_kwargs: P.kwargs) -> T:
            nonlocal adapter
            if adapter is None:
                adapter = TypeAdapter(get_type_hints(func)["return"])

            arguments = sig.bind(*_args, **_kwargs).arguments
            cache_key = ":".join(["cache", key, func.__name__, *(str(arguments[arg]) for arg in args)])
            if (value := await redis.get(cache_key)) is not None:
                logger.debug(f"cache hit {cache_key}")
                return adapter.validate_json(value)  # type: ignore[no-any-return]

            result = await func(*_args, **_kwargs)
            await redis.setex(cache_key, settings.cache_ttl, adapter.dump_json(result))
            return result

        return inner

    return deco


async def clear_cache(key: str) -> None:
    async for k in redis.scan_iter(f"cache:{key}:*"):
        await redis.delete(k)
