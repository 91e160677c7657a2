"""
Caching utilities for list and report queries

Keys are namespaced by prefix and carry a generation number, so a whole
prefix can be invalidated on any cache backend by bumping its generation.
When Redis is the backend, stale keys are also removed with SCAN.
"""
from django.conf import settings
from django.core.cache import cache
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PRODUCT_LIST_CACHE_TTL = 180  # 3 minutes
INVENTORY_REPORT_CACHE_TTL = 300  # 5 minutes
REPORTS_CACHE_TTL = 600  # 10 minutes

PRODUCT_LIST_PREFIX = 'product_list'
INVENTORY_REPORT_PREFIX = 'inventory_report'
REPORTS_PREFIX = 'reports'


def _generation_key(prefix):
    return f"{prefix}:generation"


def get_cache_generation(prefix):
    generation = cache.get(_generation_key(prefix))
    if generation is None:
        generation = 1
        cache.set(_generation_key(prefix), generation, None)
    return generation


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:v{get_cache_generation(prefix)}:{key_hash}"


def get_cached(cache_key):
    """Read a cache entry; cache failures count as a miss"""
    try:
        cached_data = cache.get(cache_key)
    except Exception as e:
        logger.warning(f"Cache unavailable, proceeding without cache: {e}")
        return None
    if cached_data is not None:
        logger.debug(f"Cache HIT: {cache_key}")
    else:
        logger.debug(f"Cache MISS: {cache_key}")
    return cached_data


def set_cached(cache_key, data, ttl):
    try:
        cache.set(cache_key, data, ttl)
    except Exception as e:
        logger.warning(f"Unable to cache response: {e}")


def using_redis():
    return 'django_redis' in settings.CACHES['default']['BACKEND']


def invalidate_cache_pattern(pattern):
    """
    Delete all Redis keys matching a pattern
    Only meaningful with the django-redis backend
    """
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


def invalidate_cache_prefix(prefix):
    """Invalidate every key created under a prefix"""
    try:
        try:
            cache.incr(_generation_key(prefix))
        except ValueError:
            cache.set(_generation_key(prefix), 2, None)
    except Exception as e:
        logger.warning(f"Could not bump cache generation for {prefix}: {str(e)}")
        return
    if using_redis():
        invalidate_cache_pattern(f"{prefix}:v")
    logger.debug(f"Invalidated cache prefix: {prefix}")
