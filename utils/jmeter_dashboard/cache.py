"""
Cache functionality for the JMeter Report Dashboard

Provides a thread-safe LRU cache for compiled series filters,
plus decorators for cached and safe computations.
"""

import itertools
import logging
import threading
import traceback
from functools import wraps

logger = logging.getLogger(__name__)

class PatternCache:
    """Thread-safe LRU cache keyed by the arguments of a computation."""
    
    def __init__(self, max_size=64):
        self.cache = {}
        self.access_times = {}
        self.max_size = max_size
        self._lock = threading.Lock()
        self._ticks = itertools.count()
        self.hits = 0
        self.misses = 0
    
    def _generate_key(self, *args, **kwargs):
        """Generate a cache key from arguments."""
        return (args, tuple(sorted(kwargs.items())))
    
    def _evict_lru(self):
        """Evict least recently used entries."""
        if len(self.cache) >= self.max_size:
            # Remove oldest accessed entries, at least one
            sorted_keys = sorted(self.access_times.items(), key=lambda x: x[1])
            keys_to_remove = [k for k, _ in sorted_keys[:max(1, len(sorted_keys)//4)]]
            for key in keys_to_remove:
                self.cache.pop(key, None)
                self.access_times.pop(key, None)
    
    def __contains__(self, key):
        with self._lock:
            return key in self.cache
    
    def __len__(self):
        with self._lock:
            return len(self.cache)
    
    def get(self, key):
        """Get item from cache."""
        with self._lock:
            if key in self.cache:
                self.access_times[key] = next(self._ticks)
                self.hits += 1
                logger.debug(f"Cache HIT for key: {key!r}")
                return self.cache[key]
            self.misses += 1
            logger.debug(f"Cache MISS for key: {key!r}")
            return None
    
    def put(self, key, value):
        """Put item in cache."""
        with self._lock:
            if key not in self.cache:
                self._evict_lru()
            self.cache[key] = value
            self.access_times[key] = next(self._ticks)
            logger.debug(f"Cache PUT for key: {key!r}")
    
    def clear(self):
        """Clear all cache entries."""
        with self._lock:
            self.cache.clear()
            self.access_times.clear()
            self.hits = 0
            self.misses = 0
            logger.info("Cache cleared")

# Global cache instance for compiled series filters
pattern_cache = PatternCache(max_size=64)

def cached_computation(cache=None):
    """Decorator caching a computation's result per distinct argument set."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            store = cache if cache is not None else pattern_cache
            cache_key = store._generate_key(func.__name__, *args, **kwargs)
            
            cached_result = store.get(cache_key)
            if cached_result is not None:
                return cached_result
            
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in {func.__name__}: {str(e)}")
                logger.debug(traceback.format_exc())
                raise
            
            store.put(cache_key, result)
            return result
                
        return wrapper
    return decorator

def safe_computation(default_return=None):
    """Decorator for safe computations: failures are logged and replaced by default_return."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"Error in {func.__name__}{args!r}: {str(e)}")
                logger.debug(traceback.format_exc())
                return default_return
        return wrapper
    return decorator
