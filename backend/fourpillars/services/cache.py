"""
캐시 서비스
- 동일 입력에 대한 계산 결과 캐싱 (날짜별 간지는 고정값)
- 메모리 기반 TTLCache, 엔진에 명시적으로 주입
"""
import logging
import time
from typing import Any, Callable, Hashable, Optional

from cachetools import TTLCache

from fourpillars.config import get_settings

logger = logging.getLogger(__name__)


class SajuCache:
    """
    사주 계산 결과 캐시

    키: (양력/음력 날짜, HH:MM, calendar_type, is_leap_month)
    timer: TTL 기준 시계 (테스트에서 가짜 시계 주입)
    """

    def __init__(
        self,
        maxsize: Optional[int] = None,
        ttl: Optional[float] = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self._cache = TTLCache(
            maxsize=maxsize if maxsize is not None else settings.cache_max_size,
            ttl=ttl if ttl is not None else settings.cache_ttl_seconds,
            timer=timer,
        )

        # 통계
        self._hits = 0
        self._misses = 0

    def get(self, key: Hashable) -> Optional[Any]:
        result = self._cache.get(key)
        if result is None:
            self._misses += 1
        else:
            self._hits += 1
            logger.debug(f"[Cache] hit: {key}")
        return result

    def set(self, key: Hashable, value: Any):
        self._cache[key] = value

    def __len__(self) -> int:
        return len(self._cache)

    # ========== 통계 ==========

    def get_stats(self) -> dict:
        """캐시 통계 조회"""
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0

        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": f"{hit_rate:.1f}%",
            "size": len(self._cache),
            "maxsize": self._cache.maxsize,
        }

    def clear(self):
        """캐시 초기화"""
        self._cache.clear()
        self._hits = 0
        self._misses = 0
