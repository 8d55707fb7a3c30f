"""
Caching utilities for expensive dashboard and report queries
Uses Redis when REDIS_URL is configured, local memory otherwise
"""
from django.conf import settings
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
DASHBOARD_KPI_CACHE_TTL = 300  # 5 minutes
DASHBOARD_CHART_CACHE_TTL = 300
REPORTS_CACHE_TTL = 600  # 10 minutes

DASHBOARD_PREFIX = "dashboard"


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=300, key_prefix="dashboard_stats")
        def dashboard_stats(today):
            # expensive query here
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def _uses_redis():
    return settings.CACHES['default']['BACKEND'].startswith('django_redis')


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern.

    Redis is scanned for matching keys; the local-memory cache only holds
    this process's entries and is cleared outright.
    """
    if not _uses_redis():
        cache.clear()
        logger.debug(f"Cleared local cache for pattern: {pattern}")
        return
    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")

        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def invalidate_dashboard_cache():
    """Invalidate dashboard KPIs and charts"""
    invalidate_cache_pattern(DASHBOARD_PREFIX)
    logger.info("Invalidated dashboard cache")
